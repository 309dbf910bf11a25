"""Pydantic models for cookie consent management.

This module defines the data models shared by the consent engine: the
categories of the cookie manifest, the cookies observed in a cookie store,
and the per-cookie keep/delete decisions produced by the evaluator.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


# Marker written for a granted category
GRANT_MARKER = "on"

# Marker written by reject-all
DENY_MARKER = "off"

# Markers read as an explicit opt-out
DENIAL_MARKERS = ("off", "false")

DEFAULT_PREFERENCE_COOKIE_NAME = "cm-user-preferences"

# Category name -> marker, as stored in the preference cookie
ConsentRecord = Dict[str, Any]


class CookieCategory(BaseModel):
    """A consent category of the cookie manifest.

    Owns the cookies whose names start with one of its prefixes. Categories
    with ``optional`` set to False are essential and never need consent.
    """

    model_config = {"populate_by_name": True, "frozen": True}

    name: str = Field(
        alias="category-name",
        description="Category name, used as key in the consent record"
    )
    optional: bool = Field(
        default=True,
        description="Whether the category requires user consent"
    )
    prefixes: List[str] = Field(
        default_factory=list,
        alias="cookies",
        description="Cookie name prefixes owned by this category, in match order"
    )

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate category name is non-empty."""
        if not v or not v.strip():
            raise ValueError("Category name must be a non-empty string")
        return v

    @field_validator('prefixes')
    @classmethod
    def validate_prefixes(cls, v):
        """Validate every prefix is non-empty."""
        for prefix in v:
            if not prefix:
                raise ValueError(
                    "Cookie prefixes must be non-empty; an empty prefix would match every cookie"
                )
        return v

    def owns(self, cookie_name: str) -> bool:
        """Check if a cookie name starts with one of this category's prefixes."""
        return any(cookie_name.startswith(prefix) for prefix in self.prefixes)


class Cookie(BaseModel):
    """A cookie present in the cookie store. Only the name drives decisions."""

    name: str = Field(description="Cookie name")
    value: str = Field(default="", description="Cookie value")


class CookieAction(str, Enum):
    """Outcome of evaluating one cookie."""
    KEEP = "keep"
    DELETE = "delete"


class DecisionReason(str, Enum):
    """Why the evaluator kept or deleted a cookie."""
    PREFERENCE_COOKIE = "preference_cookie"
    UNDEFINED_DELETED = "undefined_deleted"
    UNDEFINED_KEPT = "undefined_kept"
    ESSENTIAL = "essential"
    NO_CONSENT_RECORD = "no_consent_record"
    CATEGORY_NOT_IN_RECORD = "category_not_in_record"
    OPTED_OUT = "opted_out"
    OPTED_IN = "opted_in"


class CookieDecision(BaseModel):
    """Keep/delete decision for a single cookie."""

    cookie: Cookie = Field(description="The evaluated cookie")
    action: CookieAction = Field(description="Keep or delete")
    reason: DecisionReason = Field(description="Rule that produced the action")
    category: Optional[str] = Field(
        default=None,
        description="Name of the manifest category owning the cookie, if any"
    )

    @property
    def should_delete(self) -> bool:
        return self.action == CookieAction.DELETE
