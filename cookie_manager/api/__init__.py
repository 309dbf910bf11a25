"""HTTP adapter for cookie consent management."""

from .jar import RequestCookieJar
from .main import create_app
from .middleware import CookieConsentMiddleware

__all__ = [
    "RequestCookieJar",
    "create_app",
    "CookieConsentMiddleware",
]
