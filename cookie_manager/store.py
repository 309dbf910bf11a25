"""Cookie store collaborator.

The consent engine reads and writes cookies through a ``CookieStore``. The
store cannot tell which domain scope a cookie was set under, so deleting a
cookie expires it under every scope it could have been set with: no domain
(host-only), the bare host, the host with a leading dot, and the parent
domain starting at the host's first dot.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from .models import Cookie

logger = logging.getLogger(__name__)


def deletion_scopes(hostname: Optional[str]) -> List[Optional[str]]:
    """Get the domain scopes a deletion is attempted under.

    Args:
        hostname: Host of the current page, if known

    Returns:
        Domains to expire the cookie under; None stands for a host-only cookie
    """
    scopes: List[Optional[str]] = [None]
    if not hostname:
        return scopes

    first_dot = hostname.find('.')
    parent = hostname[first_dot:] if first_dot >= 0 else hostname

    scopes.extend([hostname, f".{hostname}", parent])
    return scopes


def parse_cookie_header(header: str) -> List[Cookie]:
    """Parse a ``name=value; name2=value2`` cookie string into cookies."""
    cookies = []
    for part in header.split(';'):
        if not part.strip():
            continue
        name, _, value = part.partition('=')
        cookies.append(Cookie(name=name.strip(), value=value.strip()))
    return cookies


class CookieStore(ABC):
    """Synchronous get/set/delete access to the active cookie store."""

    hostname: Optional[str] = None

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Get a cookie value, or None when the cookie is absent."""

    @abstractmethod
    def set(self, name: str, value: str, expiry_days: int, secure: bool = False) -> None:
        """Set a cookie with path ``/`` and the given lifetime."""

    @abstractmethod
    def expire(self, name: str, domain: Optional[str]) -> None:
        """Expire a cookie under a single domain scope."""

    @abstractmethod
    def cookies(self) -> List[Cookie]:
        """Get every cookie currently visible."""

    def delete(self, name: str) -> None:
        """Delete a cookie under every domain scope it may have been set with."""
        for domain in deletion_scopes(self.hostname):
            self.expire(name, domain)
        logger.debug(f"Deleted cookie \"{name}\"")


class InMemoryCookieStore(CookieStore):
    """Cookie jar for a single host that tracks the domain each cookie was set under.

    Cookies set with a domain are keyed by the domain without its leading
    dot, so ``example.com`` and ``.example.com`` address the same cookie.
    """

    def __init__(self, hostname: Optional[str] = "localhost"):
        self.hostname = hostname
        self._jar: Dict[Tuple[str, Optional[str]], str] = {}
        self.expired: List[Tuple[str, Optional[str]]] = []

    def add(self, name: str, value: str = "", domain: Optional[str] = None) -> None:
        """Place a cookie in the jar under a domain scope."""
        self._jar[(name, self._normalize(domain))] = value

    def get(self, name: str) -> Optional[str]:
        for (cookie_name, _), value in self._jar.items():
            if cookie_name == name:
                return value
        return None

    def set(self, name: str, value: str, expiry_days: int, secure: bool = False) -> None:
        if expiry_days <= 0:
            self.expire(name, None)
            return
        self._jar[(name, None)] = value

    def expire(self, name: str, domain: Optional[str]) -> None:
        self.expired.append((name, domain))
        self._jar.pop((name, self._normalize(domain)), None)

    def cookies(self) -> List[Cookie]:
        return [Cookie(name=name, value=value) for (name, _), value in self._jar.items()]

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def _normalize(self, domain: Optional[str]) -> Optional[str]:
        if domain is None:
            return None
        return domain.lstrip('.')
