"""Request-scoped cookie store for the HTTP adapter.

Reads come from the request's ``Cookie`` header merged with the writes made
while handling the request, so a consent record saved by a route is seen by
the evaluator pass that follows it. Writes are queued and turned into
``Set-Cookie`` headers on the outgoing response.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional
from urllib.parse import quote, unquote

from starlette.responses import Response

from ..models import Cookie
from ..store import CookieStore

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class PendingCookie:
    """A Set-Cookie operation waiting for the response."""
    name: str
    value: str = ""
    max_age: Optional[int] = None
    secure: bool = False
    domain: Optional[str] = None
    delete: bool = False


class RequestCookieJar(CookieStore):
    """Cookie store over one HTTP request/response pair."""

    def __init__(self, request_cookies: Mapping[str, str], hostname: Optional[str] = None):
        """Initialize request cookie jar.

        Args:
            request_cookies: Cookies sent with the request
            hostname: Host the request was made to, used for deletion scopes
        """
        self.hostname = hostname
        self._cookies: Dict[str, str] = dict(request_cookies)
        self.pending: List[PendingCookie] = []

    def get(self, name: str) -> Optional[str]:
        value = self._cookies.get(name)
        if value is None:
            return None
        return unquote(value)

    def set(self, name: str, value: str, expiry_days: int, secure: bool = False) -> None:
        encoded = quote(value, safe='')
        self._cookies[name] = encoded
        self.pending.append(PendingCookie(
            name=name,
            value=encoded,
            max_age=expiry_days * SECONDS_PER_DAY,
            secure=secure
        ))

    def expire(self, name: str, domain: Optional[str]) -> None:
        self._cookies.pop(name, None)
        self.pending.append(PendingCookie(name=name, domain=domain, delete=True))

    def cookies(self) -> List[Cookie]:
        return [Cookie(name=name, value=unquote(value)) for name, value in self._cookies.items()]

    def apply(self, response: Response) -> int:
        """Write the queued operations to a response and clear the queue.

        Returns:
            Number of Set-Cookie headers written
        """
        written = 0
        while self.pending:
            op = self.pending.pop(0)
            if op.delete:
                response.delete_cookie(op.name, path="/", domain=op.domain)
            else:
                response.set_cookie(op.name, op.value, max_age=op.max_age, path="/", secure=op.secure)
            written += 1

        if written:
            logger.debug(f"Wrote {written} Set-Cookie header(s) to response")
        return written
