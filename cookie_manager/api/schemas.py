"""API schemas for the cookie preference endpoints."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..models import CookieDecision


class ConsentResponse(BaseModel):
    """Current consent state for the requesting client."""

    record: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Stored consent record, null when absent or malformed"
    )
    banner_visible: bool = Field(description="Whether the consent banner should be shown")
    decisions: List[CookieDecision] = Field(
        default_factory=list,
        description="Evaluator decisions for the cookies sent with the request"
    )


class SaveConsentResponse(BaseModel):
    """Outcome of saving new consent."""

    record: Dict[str, Any] = Field(description="The consent record written")
    deleted: List[str] = Field(
        default_factory=list,
        description="Cookies expired by the evaluator pass after the save"
    )
    banner_visible: bool = Field(description="Whether the consent banner should be shown")


class ErrorResponse(BaseModel):
    """Error payload."""

    error: str = Field(description="Error code")
    message: str = Field(description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(default=None)
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class HealthResponse(BaseModel):
    """Health check payload."""

    status: str = Field(default="healthy")
    version: str
    manifest_categories: int = Field(description="Number of configured consent categories")
