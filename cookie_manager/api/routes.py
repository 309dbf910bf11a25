"""Cookie preference API routes.

Each save route runs the full pipeline in one call: write the consent
record, run an evaluator pass that reads it back, and resolve the banner.
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Body, Query, Request
from fastapi.responses import JSONResponse

from ..banner import should_be_visible
from ..config import CookieManagerConfig
from ..manager import CookieManager, SaveResult
from .jar import RequestCookieJar
from .schemas import ConsentResponse, ErrorResponse, SaveConsentResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/cookie-preferences",
    tags=["Cookie Preferences"],
    responses={
        422: {"model": ErrorResponse, "description": "Validation Error"},
    }
)


def get_config(request: Request) -> CookieManagerConfig:
    """Get the cookie manager configuration of the application."""
    config = getattr(request.app.state, "cookie_manager_config", None)
    return config or CookieManagerConfig()


def get_cookie_jar(request: Request) -> RequestCookieJar:
    """Get the request cookie jar, shared with the consent middleware when installed."""
    jar = getattr(request.state, "cookie_jar", None)
    if jar is None:
        jar = RequestCookieJar(request.cookies, request.url.hostname)
        request.state.cookie_jar = jar
    return jar


def _respond(content: dict, jar: RequestCookieJar, status_code: int = 200) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content=content)
    jar.apply(response)
    return response


def _save_response(config: CookieManagerConfig, result: SaveResult, jar: RequestCookieJar) -> JSONResponse:
    body = SaveConsentResponse(
        record=result.record,
        deleted=result.evaluation.deleted,
        banner_visible=should_be_visible(
            result.record,
            on_preferences_page=False,
            visible_on_preferences_page=config.cookie_banner_visible_on_page_with_preference_form
        )
    )
    return _respond(body.model_dump(mode='json'), jar)


@router.get("", response_model=ConsentResponse, summary="Get current consent state")
def get_preferences(
    request: Request,
    preferences_page: bool = Query(False, description="Whether the page holds the preference form")
):
    """Return the stored consent record and whether the banner should be shown."""
    config = get_config(request)
    jar = get_cookie_jar(request)
    manager = CookieManager(config, jar)

    record = manager.get_preferences()
    body = ConsentResponse(
        record=record,
        banner_visible=should_be_visible(
            record,
            on_preferences_page=preferences_page,
            visible_on_preferences_page=config.cookie_banner_visible_on_page_with_preference_form
        ),
        decisions=manager.evaluator.evaluate_store(jar)
    )
    return _respond(body.model_dump(mode='json'), jar)


@router.post("", response_model=SaveConsentResponse, summary="Save preferences from the preference form")
def save_preferences(
    request: Request,
    selections: Dict[str, Optional[str]] = Body(..., description="Selected value per category")
):
    """Save a consent record built strictly from the submitted categories."""
    config = get_config(request)
    jar = get_cookie_jar(request)

    result = CookieManager(config, jar).save_selections(selections)
    logger.info(f"Saved cookie preferences from form: {result.record}")
    return _save_response(config, result, jar)


@router.post("/accept-all", response_model=SaveConsentResponse, summary="Accept all optional categories")
def accept_all(request: Request):
    """Grant consent to every optional category."""
    config = get_config(request)
    jar = get_cookie_jar(request)

    result = CookieManager(config, jar).accept_all()
    logger.info("Saved cookie preferences: accept all")
    return _save_response(config, result, jar)


@router.post("/reject-all", response_model=SaveConsentResponse, summary="Reject all optional categories")
def reject_all(request: Request):
    """Deny consent to every optional category."""
    config = get_config(request)
    jar = get_cookie_jar(request)

    result = CookieManager(config, jar).reject_all()
    logger.info("Saved cookie preferences: reject all")
    return _save_response(config, result, jar)
