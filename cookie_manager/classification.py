"""Cookie classification against the cookie manifest.

A cookie belongs to the first manifest category, in manifest order, that
lists a prefix the cookie name starts with. Matching is case-sensitive.
"""

import logging
from typing import List, Optional, Sequence

from .models import CookieCategory

logger = logging.getLogger(__name__)


def classify_cookie(cookie_name: str, manifest: Sequence[CookieCategory]) -> Optional[CookieCategory]:
    """Find the manifest category owning a cookie.

    Args:
        cookie_name: Name of the cookie to classify
        manifest: Ordered consent categories

    Returns:
        The first matching category, or None when the cookie is not in the manifest
    """
    for category in manifest:
        for prefix in category.prefixes:
            if cookie_name.startswith(prefix):
                logger.debug(f"Cookie \"{cookie_name}\" found in manifest under \"{category.name}\".")
                return category

    logger.debug(f"Cookie \"{cookie_name}\" NOT found in manifest.")
    return None


class CookieClassifier:
    """Prefix-based cookie classifier bound to one manifest."""

    def __init__(self, manifest: Sequence[CookieCategory]):
        """Initialize cookie classifier.

        Args:
            manifest: Ordered consent categories
        """
        self.manifest = list(manifest)

    def classify(self, cookie_name: str) -> Optional[CookieCategory]:
        """Classify one cookie name."""
        return classify_cookie(cookie_name, self.manifest)

    def unmatched(self, cookie_names: Sequence[str]) -> List[str]:
        """Get the cookie names that match no manifest category."""
        return [name for name in cookie_names if self.classify(name) is None]
