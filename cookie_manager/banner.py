"""Cookie banner visibility."""

import logging
from typing import Optional

from .config import CookieManagerConfig
from .models import ConsentRecord

logger = logging.getLogger(__name__)


def should_be_visible(
    consent_record: Optional[ConsentRecord],
    on_preferences_page: bool,
    visible_on_preferences_page: bool = True
) -> bool:
    """Decide whether the consent banner is shown.

    The banner is hidden on the preference page when configured so, and
    otherwise shown exactly while no valid consent record exists.
    """
    if on_preferences_page and not visible_on_preferences_page:
        return False
    return consent_record is None


class BannerVisibilityResolver:
    """Resolves banner visibility with the configured preference page rule."""

    def __init__(self, config: CookieManagerConfig):
        self.config = config

    def resolve(self, consent_record: Optional[ConsentRecord], on_preferences_page: bool) -> bool:
        visible = should_be_visible(
            consent_record,
            on_preferences_page,
            self.config.cookie_banner_visible_on_page_with_preference_form
        )
        logger.debug(f"Cookie banner resolved to {'visible' if visible else 'hidden'}.")
        return visible
