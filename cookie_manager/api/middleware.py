"""Cookie consent middleware for FastAPI/Starlette applications.

Runs an evaluator pass on every request against the cookies the client
sent, and expires the non-consented ones on the response.
"""

import logging
from typing import Callable, Iterable, Optional, Set

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..banner import should_be_visible
from ..config import CookieManagerConfig
from ..manager import CookieManager
from .jar import RequestCookieJar

logger = logging.getLogger(__name__)


class CookieConsentMiddleware(BaseHTTPMiddleware):
    """Middleware enforcing stored cookie consent on each request."""

    def __init__(
        self,
        app,
        config: Optional[CookieManagerConfig] = None,
        exempt_paths: Optional[Iterable[str]] = None
    ):
        """Initialize cookie consent middleware.

        Args:
            app: FastAPI application
            config: Cookie manager configuration
            exempt_paths: Paths that skip the evaluator pass
        """
        super().__init__(app)

        self.config = config or CookieManagerConfig()
        self.exempt_paths: Set[str] = set(exempt_paths or {
            "/health",
            "/docs",
            "/redoc",
            "/openapi.json"
        })

        logger.info("CookieConsentMiddleware initialized")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Purge non-consented cookies and expose the consent state."""
        jar = RequestCookieJar(request.cookies, request.url.hostname)
        request.state.cookie_jar = jar

        if not self._is_exempt_path(request.url.path):
            try:
                manager = CookieManager(self.config, jar)
                request.state.cookie_evaluation = manager.manage_cookies()
                request.state.cookie_banner_visible = should_be_visible(
                    manager.get_preferences(),
                    on_preferences_page=False,
                    visible_on_preferences_page=self.config.cookie_banner_visible_on_page_with_preference_form
                )
            except Exception as e:
                # Never block requests on consent errors
                logger.error(f"Error in cookie consent middleware: {e}", exc_info=True)

        response = await call_next(request)

        try:
            jar.apply(response)
        except Exception as e:
            logger.error(f"Failed to write cookie changes to response: {e}", exc_info=True)

        return response

    def _is_exempt_path(self, path: str) -> bool:
        """Check if path is exempt from the evaluator pass."""
        return path in self.exempt_paths or path.startswith("/static")
