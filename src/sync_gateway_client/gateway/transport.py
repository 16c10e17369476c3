"""Process-wide HTTP transport handle.

All gateway clients share one :class:`httpx.Client` by default, so that
connections are pooled across calls. The handle is created on first use
and can be swapped out (tests) or closed (shutdown).
"""

from __future__ import annotations

import threading
from http.cookiejar import CookieJar, DefaultCookiePolicy

import httpx


__all__ = [
    "DEFAULT_TIMEOUT",
    "close_http_client",
    "create_http_client",
    "get_http_client",
    "set_http_client",
]


DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)

_shared_client: httpx.Client | None = None
_lock = threading.Lock()


def _refusing_cookie_jar() -> CookieJar:
    """A cookie jar that accepts no cookie from any domain.

    Session cookies are attached per request by the auth provider; a
    ``Set-Cookie`` from the gateway or the auth server must not be replayed
    on later requests.
    """
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


def create_http_client(
    *,
    timeout: httpx.Timeout | float | None = None,
    verify: bool = True,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create a new HTTP client suitable for gateway traffic.

    Args:
        timeout: Request timeout (default: 30s, 10s to connect).
        verify: Whether to verify TLS certificates.
        transport: Optional custom transport for testing or advanced config.

    Returns:
        A new, open :class:`httpx.Client`. Automatic retries are disabled
        and response cookies are never stored.
    """
    return httpx.Client(
        timeout=timeout if timeout is not None else DEFAULT_TIMEOUT,
        verify=verify,
        cookies=_refusing_cookie_jar(),
        transport=transport or httpx.HTTPTransport(retries=0, verify=verify),
    )


def get_http_client() -> httpx.Client:
    """Return the shared HTTP client, creating it on first use."""
    global _shared_client  # noqa: PLW0603

    with _lock:
        if _shared_client is None or _shared_client.is_closed:
            _shared_client = create_http_client()
        return _shared_client


def set_http_client(client: httpx.Client | None) -> None:
    """Replace the shared HTTP client.

    The previous client is not closed; its owner is responsible for that.

    Args:
        client: The client to share, or None to go back to lazy creation.
    """
    global _shared_client  # noqa: PLW0603

    with _lock:
        _shared_client = client


def close_http_client() -> None:
    """Close the shared HTTP client and release its connections."""
    global _shared_client  # noqa: PLW0603

    with _lock:
        if _shared_client is not None and not _shared_client.is_closed:
            _shared_client.close()
        _shared_client = None
