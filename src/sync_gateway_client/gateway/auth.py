"""Credential providers for gateway requests.

Three strategies are available, selected from the auth configuration by
:func:`build_auth_provider`:

- :class:`NoAuthProvider` -- no username/password configured, requests go
  out unauthenticated.
- :class:`BasicAuthProvider` -- a static ``Authorization: Basic`` header.
- :class:`SessionAuthProvider` -- a session fetched from an external
  authentication server before every request and sent as a cookie.

Providers produce an :class:`AuthResult`, which the client applies to the
request right before sending it. A provider that cannot produce valid
credentials raises :class:`GatewayAuthenticationError`, so the request is
never sent.
"""

from __future__ import annotations

import base64
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic import ValidationError

from sync_gateway_client.gateway.exceptions import GatewayAuthenticationError
from sync_gateway_client.gateway.models import Session, SessionRequest


if TYPE_CHECKING:
    from sync_gateway_client.config import AuthConfig


__all__ = [
    "AuthProvider",
    "AuthResult",
    "BasicAuthProvider",
    "NoAuthProvider",
    "SessionAuthProvider",
    "SessionCookie",
    "build_auth_provider",
]


@dataclass(frozen=True)
class SessionCookie:
    """A session cookie scoped to the gateway host."""

    name: str
    value: str
    domain: str
    expires: datetime
    path: str = "/"
    secure: bool = True
    http_only: bool = True

    def header_value(self) -> str:
        """Return the ``name=value`` pair sent in a ``Cookie`` header."""
        return f"{self.name}={self.value}"


@dataclass
class AuthResult:
    """Credentials to attach to a single outgoing request."""

    headers: dict[str, str] = field(default_factory=dict)
    cookies: list[SessionCookie] = field(default_factory=list)

    def apply(self, request: httpx.Request) -> None:
        """Merge the credentials into ``request`` in place."""
        request.headers.update(self.headers)
        if self.cookies:
            pairs = [cookie.header_value() for cookie in self.cookies]
            existing = request.headers.get("Cookie")
            if existing:
                pairs.insert(0, existing)
            request.headers["Cookie"] = "; ".join(pairs)


class AuthProvider(ABC):
    """Base class for credential providers."""

    @abstractmethod
    def authenticate(self, url: httpx.URL) -> AuthResult:
        """Produce credentials for a request to ``url``.

        Raises:
            GatewayAuthenticationError: If credentials cannot be produced.
        """


class NoAuthProvider(AuthProvider):
    """Attaches nothing."""

    def authenticate(self, url: httpx.URL) -> AuthResult:  # noqa: ARG002
        return AuthResult()


class BasicAuthProvider(AuthProvider):
    """Attaches a static basic-auth header; no network round trip."""

    def __init__(self, username: str, password: str) -> None:
        token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        self._header = f"Basic {token}"

    def authenticate(self, url: httpx.URL) -> AuthResult:  # noqa: ARG002
        return AuthResult(headers={"Authorization": self._header})


class SessionAuthProvider(AuthProvider):
    """Fetches a fresh gateway session for every request.

    The session is requested by POSTing ``{"username", "password"}`` to the
    authentication server, which answers with
    ``{"session_id", "expires", "cookie_name"}``. Sessions are not cached,
    so every authenticated request costs one extra round trip.

    Args:
        server_url: URL of the authentication server.
        username: Account name.
        password: Account password.
        http_client: Client used for the authentication call.
    """

    def __init__(
        self,
        server_url: str,
        username: str,
        password: str,
        http_client: httpx.Client,
    ) -> None:
        self.server_url = server_url
        self._credentials = SessionRequest(username=username, password=password)
        self._http = http_client
        self._logger = structlog.get_logger(__name__)

    def fetch_session(self) -> Session:
        """Request a new session from the authentication server.

        Returns:
            The session, with an expiry known to be parseable.

        Raises:
            GatewayAuthenticationError: If the server is unreachable, rejects
                the credentials, or answers with an unusable session.
        """
        log = self._logger.bind(server_url=self.server_url)

        try:
            response = self._http.post(
                self.server_url,
                json=self._credentials.model_dump(),
            )
        except httpx.HTTPError as exc:
            log.warning("session_request_failed", error=str(exc))
            msg = f"Failed to reach authentication server: {exc}"
            raise GatewayAuthenticationError(msg) from exc

        if not response.is_success:
            log.warning("session_rejected", status_code=response.status_code)
            raise GatewayAuthenticationError(  # noqa: TRY003
                "Authentication server rejected the credentials",  # noqa: EM101
                response=response,
            )

        try:
            session = Session.model_validate_json(response.content)
        except ValidationError as exc:
            msg = "Malformed session response from authentication server"
            raise GatewayAuthenticationError(msg, response=response) from exc

        try:
            expires_at = session.expires_at
        except ValueError as exc:
            log.warning("session_expiry_invalid", expires=session.expires)
            msg = f"Error parsing session expiry: {session.expires!r}"
            raise GatewayAuthenticationError(msg, response=response) from exc

        log.debug(
            "session_acquired",
            cookie_name=session.cookie_name,
            expires=expires_at.isoformat(),
        )
        return session

    def authenticate(self, url: httpx.URL) -> AuthResult:
        session = self.fetch_session()
        cookie = SessionCookie(
            name=session.cookie_name,
            value=session.session_id,
            domain=url.host,
            expires=session.expires_at,
        )
        return AuthResult(cookies=[cookie])


def build_auth_provider(
    config: AuthConfig | None,
    http_client: httpx.Client,
) -> AuthProvider:
    """Select the provider matching the auth configuration.

    Args:
        config: Auth settings, or None for unauthenticated access.
        http_client: Client used for session requests.

    Returns:
        :class:`NoAuthProvider` when username or password is missing,
        otherwise :class:`BasicAuthProvider` if ``simple_auth`` is set,
        else :class:`SessionAuthProvider`.

    Raises:
        GatewayAuthenticationError: If session mode is selected without an
            authentication server URL.
    """
    if config is None or not config.has_credentials:
        return NoAuthProvider()

    password = config.password_value
    if config.simple_auth:
        return BasicAuthProvider(config.username, password)

    if not config.server_url:
        msg = "Session authentication requires auth.server_url"
        raise GatewayAuthenticationError(msg)

    return SessionAuthProvider(
        config.server_url,
        config.username,
        password,
        http_client,
    )
