"""Consent evaluator and purge engine.

Decides, for every cookie in the store, whether it may stay given the
cookie manifest and the stored consent record, and deletes the ones that
may not. The stored record is re-read on every pass.
"""

import logging
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from .classification import classify_cookie
from .config import CookieManagerConfig
from .models import (
    ConsentRecord,
    Cookie,
    CookieAction,
    CookieCategory,
    CookieDecision,
    DecisionReason,
)
from .preferences import ConsentRecordCodec, is_denied
from .store import CookieStore

logger = logging.getLogger(__name__)


def decide(
    cookie: Cookie,
    manifest: Sequence[CookieCategory],
    consent_record: Optional[ConsentRecord],
    consent_cookie_name: str,
    delete_undefined: bool
) -> CookieDecision:
    """Decide whether a single cookie is kept or deleted.

    Args:
        cookie: Cookie to evaluate
        manifest: Ordered consent categories
        consent_record: Stored consent record, or None when absent or malformed
        consent_cookie_name: Name of the preference cookie, which is always kept
        delete_undefined: Delete cookies matching no manifest category

    Returns:
        The decision with the rule that produced it
    """
    name = cookie.name

    if name == consent_cookie_name:
        return CookieDecision(cookie=cookie, action=CookieAction.KEEP, reason=DecisionReason.PREFERENCE_COOKIE)

    category = classify_cookie(name, manifest)

    if category is None:
        if delete_undefined:
            logger.info(f"Cookie \"{name}\" is not in the manifest and \"delete-undefined-cookies\" is enabled; deleting.")
            return CookieDecision(cookie=cookie, action=CookieAction.DELETE, reason=DecisionReason.UNDEFINED_DELETED)
        logger.info(f"Cookie \"{name}\" is not in the manifest and \"delete-undefined-cookies\" is disabled; skipping.")
        return CookieDecision(cookie=cookie, action=CookieAction.KEEP, reason=DecisionReason.UNDEFINED_KEPT)

    def _decision(action: CookieAction, reason: DecisionReason) -> CookieDecision:
        return CookieDecision(cookie=cookie, action=action, reason=reason, category=category.name)

    if not category.optional:
        logger.debug(f"Cookie \"{name}\" is marked as non-optional; skipping.")
        return _decision(CookieAction.KEEP, DecisionReason.ESSENTIAL)

    if consent_record is None:
        logger.info(f"Cookie \"{name}\" is listed under \"{category.name}\" and no valid consent is stored; deleting.")
        return _decision(CookieAction.DELETE, DecisionReason.NO_CONSENT_RECORD)

    if category.name not in consent_record:
        logger.info(
            f"Cookie \"{name}\" is listed under \"{category.name}\" which is missing from the "
            f"user preferences; assuming non-consent; deleting."
        )
        return _decision(CookieAction.DELETE, DecisionReason.CATEGORY_NOT_IN_RECORD)

    if is_denied(consent_record[category.name]):
        logger.info(f"Cookie \"{name}\" is listed under \"{category.name}\"; user preferences opt out of this category; deleting.")
        return _decision(CookieAction.DELETE, DecisionReason.OPTED_OUT)

    logger.info(f"Cookie \"{name}\" is listed under \"{category.name}\"; user preferences opt in to this category; cleared for use.")
    return _decision(CookieAction.KEEP, DecisionReason.OPTED_IN)


def evaluate(
    cookies: Sequence[Cookie],
    manifest: Sequence[CookieCategory],
    consent_record: Optional[ConsentRecord],
    consent_cookie_name: str,
    delete_undefined: bool = True
) -> List[CookieDecision]:
    """Decide keep or delete for every cookie, independently and in order."""
    return [
        decide(cookie, manifest, consent_record, consent_cookie_name, delete_undefined)
        for cookie in cookies
    ]


class EvaluationResult(BaseModel):
    """Outcome of one evaluator pass over a cookie store."""

    decisions: List[CookieDecision] = Field(default_factory=list)
    deleted: List[str] = Field(
        default_factory=list,
        description="Names of the cookies whose deletion was issued"
    )
    failed: List[str] = Field(
        default_factory=list,
        description="Names of the cookies whose deletion raised"
    )
    consent_recorded: bool = Field(
        default=False,
        description="Whether a valid consent record was stored during the pass"
    )

    @property
    def kept(self) -> List[str]:
        return [d.cookie.name for d in self.decisions if d.action == CookieAction.KEEP]


class ConsentEvaluator:
    """Runs evaluator passes against a cookie store.

    Holds only configuration; the consent record and the cookie set are
    read from the store on every pass.
    """

    def __init__(self, config: CookieManagerConfig, codec: Optional[ConsentRecordCodec] = None):
        """Initialize consent evaluator.

        Args:
            config: Cookie manager configuration with the manifest
            codec: Consent record codec
        """
        self.config = config
        self.codec = codec or ConsentRecordCodec()

    def load_consent(self, store: CookieStore) -> Optional[ConsentRecord]:
        """Read the stored consent record, None when absent or malformed."""
        cookie_name = self.config.user_preference_cookie_name
        return self.codec.load(store.get(cookie_name), cookie_name)

    def evaluate_store(self, store: CookieStore) -> List[CookieDecision]:
        """Evaluate the cookies of a store without deleting anything."""
        return evaluate(
            store.cookies(),
            self.config.cookie_manifest,
            self.load_consent(store),
            self.config.user_preference_cookie_name,
            self.config.delete_undefined_cookies
        )

    def run(self, store: CookieStore) -> EvaluationResult:
        """Evaluate every cookie in the store and delete the non-consented ones."""
        consent_record = self.load_consent(store)
        if consent_record is None:
            logger.info(
                "User preference cookie is not set or valid. Assuming non-consent, "
                "and deleting all non-essential cookies if config allows."
            )

        cookies = store.cookies()
        if not cookies:
            return EvaluationResult(consent_recorded=consent_record is not None)

        decisions = evaluate(
            cookies,
            self.config.cookie_manifest,
            consent_record,
            self.config.user_preference_cookie_name,
            self.config.delete_undefined_cookies
        )
        deleted, failed = purge(store, decisions)

        logger.debug("Finished processing all cookies.")
        return EvaluationResult(
            decisions=decisions,
            deleted=deleted,
            failed=failed,
            consent_recorded=consent_record is not None
        )


def purge(store: CookieStore, decisions: Sequence[CookieDecision]):
    """Issue deletions for every DELETE decision.

    A failing deletion is logged and the remaining cookies are still processed.

    Returns:
        Tuple of (deleted names, failed names)
    """
    deleted: List[str] = []
    failed: List[str] = []

    for decision in decisions:
        if not decision.should_delete:
            continue
        name = decision.cookie.name
        try:
            store.delete(name)
            deleted.append(name)
        except Exception as e:
            logger.warning(f"Failed to delete cookie \"{name}\": {e}")
            failed.append(name)

    return deleted, failed
