"""FastAPI application exposing cookie consent management.

Installs the consent middleware, which purges non-consented cookies on
every request, and the cookie preference routes.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import CookieManagerConfig, get_cookie_manager_config
from .middleware import CookieConsentMiddleware
from .routes import router as preferences_router
from .schemas import ErrorResponse, HealthResponse


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

APP_TITLE = "Cookie Manager API"


def create_app(config: Optional[CookieManagerConfig] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Cookie manager configuration. Defaults to the configuration files.

    Returns:
        Configured FastAPI application instance
    """
    config = config or get_cookie_manager_config()

    app = FastAPI(
        title=APP_TITLE,
        description="Enforces stored cookie consent and records new consent.",
        version=__version__,
    )
    app.state.cookie_manager_config = config

    app.add_middleware(CookieConsentMiddleware, config=config)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle request validation errors with detailed information."""
        errors = []
        for error in exc.errors():
            field_path = " -> ".join(str(loc) for loc in error["loc"][1:])
            errors.append({
                "field": field_path,
                "message": error["msg"],
                "type": error["type"],
            })

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error="validation_error",
                message="Request validation failed",
                details={"validation_errors": errors},
                timestamp=datetime.utcnow()
            ).model_dump(mode='json')
        )

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Report service health."""
        return HealthResponse(
            version=__version__,
            manifest_categories=len(config.cookie_manifest)
        )

    app.include_router(preferences_router)

    logger.info(f"{APP_TITLE} created with {len(config.cookie_manifest)} manifest categories")
    return app
