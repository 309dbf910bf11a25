"""Cookie manager: wires the consent engine to the cookie store and the page.

Every trigger (page load, accept-all, reject-all, form submission) runs as
one synchronous pipeline. Save triggers write the new consent record first,
then run an evaluator pass and a banner pass that both re-read it.
"""

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, Field

from .banner import BannerVisibilityResolver
from .config import CookieManagerConfig
from .evaluator import ConsentEvaluator, EvaluationResult
from .models import ConsentRecord
from .page import MissingCollaborator, Page
from .preferences import (
    ConsentRecordCodec,
    accept_all_record,
    record_from_selections,
    reject_all_record,
)
from .store import CookieStore

logger = logging.getLogger(__name__)


class SaveResult(BaseModel):
    """Outcome of a save trigger."""

    record: Dict[str, Any] = Field(description="The consent record written")
    evaluation: EvaluationResult = Field(description="Evaluator pass run after the save")
    banner_visible: Optional[bool] = Field(
        default=None,
        description="Banner visibility after the save, None when no banner is bound"
    )


class CookieManager:
    """Applies cookie consent for one page and one cookie store.

    Args:
        config: Cookie manager configuration
        store: Cookie store of the current page
        page: Page elements; None when running without a page (e.g. server side)
        on_saved: Called after preferences are saved from the form
    """

    def __init__(
        self,
        config: CookieManagerConfig,
        store: CookieStore,
        page: Optional[Page] = None,
        on_saved: Optional[Callable[[], Any]] = None
    ):
        self.config = config
        self.store = store
        self.page = page or Page()
        self.on_saved = on_saved

        self.codec = ConsentRecordCodec()
        self.evaluator = ConsentEvaluator(config, self.codec)
        self.banner_resolver = BannerVisibilityResolver(config)

    def init(self) -> EvaluationResult:
        """Run the page load trigger: purge cookies, pre-fill the form, resolve the banner."""
        logger.debug(f"Initializing cookie manager with {len(self.config.cookie_manifest)} manifest categories")

        result = self.manage_cookies()
        self.apply_preferences_to_form()
        self.update_banner()
        return result

    def manage_cookies(self) -> EvaluationResult:
        """Run an evaluator pass and delete the non-consented cookies."""
        return self.evaluator.run(self.store)

    def get_preferences(self) -> Optional[ConsentRecord]:
        """Read the stored consent record, None when absent or malformed."""
        return self.evaluator.load_consent(self.store)

    @property
    def on_preferences_page(self) -> bool:
        return self.page.has_form(self.config.user_preference_configuration_form_id)

    def update_banner(self) -> Optional[bool]:
        """Show or hide the banner for the current consent state.

        Returns:
            The banner visibility, or None when no banner is bound
        """
        if not self.config.banner_enabled:
            logger.debug("Skipping cookie banner as cookie-banner-id is not configured.")
            return None

        try:
            banner = self.page.get_banner(self.config.cookie_banner_id)
        except MissingCollaborator as e:
            logger.debug(f"Skipping cookie banner: {e}")
            return None

        visible = self.banner_resolver.resolve(self.get_preferences(), self.on_preferences_page)
        banner.set_visible(visible)
        return visible

    def apply_preferences_to_form(self) -> bool:
        """Pre-fill the preference form from the stored record.

        Returns:
            True when the form was updated
        """
        if not self.config.preference_form_enabled:
            logger.debug("Skipping binding to user cookie preference form.")
            return False

        if not self.config.set_checkboxes_in_preference_form:
            logger.debug("Skipping set preferences in form.")
            return False

        try:
            form = self.page.get_form(self.config.user_preference_configuration_form_id)
        except MissingCollaborator as e:
            logger.debug(f"Skipping preference form: {e}")
            return False

        record = self.get_preferences()
        if record is None:
            return False

        form.apply_selections(record)
        return True

    def save_preferences(self, record: ConsentRecord) -> None:
        """Write a consent record to the preference cookie, replacing any previous one."""
        self.store.set(
            self.config.user_preference_cookie_name,
            self.codec.save(record),
            self.config.user_preference_cookie_expiry_days,
            self.config.user_preference_cookie_secure
        )
        logger.debug(f"Saved user cookie preferences to cookie: {record}")

    def accept_all(self) -> SaveResult:
        """Grant every optional category."""
        logger.debug("Saving user cookie preferences from cookie banner (accept all)...")
        return self._commit(accept_all_record(self.config.cookie_manifest))

    def reject_all(self) -> SaveResult:
        """Deny every optional category."""
        logger.debug("Saving user cookie preferences from cookie banner (reject all)...")
        return self._commit(reject_all_record(self.config.cookie_manifest))

    def save_preferences_from_form(self) -> Optional[SaveResult]:
        """Save the selections of the preference form.

        Returns:
            The save outcome, or None when the form is not on the page
        """
        try:
            form = self.page.get_form(self.config.user_preference_configuration_form_id)
        except MissingCollaborator as e:
            logger.warning(f"Cannot save preferences from form: {e}")
            return None

        logger.debug("Saving user cookie preferences from form...")
        result = self.save_selections(form.read_selections())

        if self.on_saved is not None:
            try:
                self.on_saved()
            except Exception as e:
                logger.error(f"User preference saved callback failed: {e}", exc_info=True)

        return result

    def save_selections(self, selections: Dict[str, Any]) -> SaveResult:
        """Save a record built from submitted category selections."""
        return self._commit(record_from_selections(selections))

    def _commit(self, record: ConsentRecord) -> SaveResult:
        self.save_preferences(record)
        evaluation = self.manage_cookies()
        banner_visible = self.update_banner()
        return SaveResult(record=record, evaluation=evaluation, banner_visible=banner_visible)
