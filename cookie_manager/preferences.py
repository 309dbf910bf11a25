"""Consent record codec and builders.

The consent record is a JSON object mapping category names to markers,
stored as the value of the user preference cookie. Reading is permissive:
only ``"off"`` and ``"false"`` count as an opt-out, while the writers in
this module only ever produce ``"on"`` (accept-all) or ``"off"``
(reject-all), plus whatever values a preference form submits.
"""

import json
import logging
from typing import Any, Mapping, Optional, Sequence

from .models import (
    ConsentRecord,
    CookieCategory,
    DENIAL_MARKERS,
    DENY_MARKER,
    GRANT_MARKER,
)

logger = logging.getLogger(__name__)


class MalformedConsentRecord(ValueError):
    """Stored preference value that cannot be read as a consent record."""


class ConsentRecordCodec:
    """Serializes consent records to and from the preference cookie value."""

    def decode(self, raw_value: str) -> ConsentRecord:
        """Strictly decode a stored value.

        Raises:
            MalformedConsentRecord: If the value is not a JSON object.
        """
        try:
            data = json.loads(raw_value)
        except (TypeError, ValueError) as e:
            raise MalformedConsentRecord(f"Preference value is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise MalformedConsentRecord(
                f"Preference value must be a JSON object, got {type(data).__name__}"
            )
        return data

    def load(self, raw_value: Optional[str], cookie_name: Optional[str] = None) -> Optional[ConsentRecord]:
        """Load a consent record, returning None when absent or malformed.

        Args:
            raw_value: Stored cookie value, or None when the cookie is absent
            cookie_name: Name of the preference cookie, for diagnostics

        Returns:
            The consent record, or None meaning "no valid consent yet"
        """
        if not raw_value:
            return None

        try:
            return self.decode(raw_value)
        except MalformedConsentRecord as e:
            logger.error(f"Unable to parse user preference cookie \"{cookie_name}\" as JSON: {e}")
            return None

    def save(self, record: Mapping[str, Any]) -> str:
        """Serialize a consent record. Keys are not checked against the manifest."""
        return json.dumps(dict(record), separators=(',', ':'))


def is_denied(marker: Any) -> bool:
    """Check if a stored marker is an explicit opt-out."""
    return isinstance(marker, str) and marker in DENIAL_MARKERS


def accept_all_record(manifest: Sequence[CookieCategory]) -> ConsentRecord:
    """Grant every optional category; essential categories are omitted."""
    return {category.name: GRANT_MARKER for category in manifest if category.optional}


def reject_all_record(manifest: Sequence[CookieCategory]) -> ConsentRecord:
    """Deny every optional category; essential categories are omitted."""
    return {category.name: DENY_MARKER for category in manifest if category.optional}


def record_from_selections(selections: Mapping[str, Any]) -> ConsentRecord:
    """Build a record strictly from the selected form values.

    Groups without a selected value are left out, never defaulted.
    """
    record = {}
    for name, value in selections.items():
        if not isinstance(name, str) or not name or value is None:
            continue
        record[name] = value
    return record
