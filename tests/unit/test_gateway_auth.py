"""Unit tests for gateway credential providers."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import httpx
import pytest
import respx  # noqa: TC002

from sync_gateway_client.config import AuthConfig
from sync_gateway_client.gateway import (
    AuthResult,
    BasicAuthProvider,
    GatewayAuthenticationError,
    NoAuthProvider,
    SessionAuthProvider,
    SessionCookie,
    SyncGatewayClient,
    build_auth_provider,
)


ENDPOINT = "http://sg.test:4984/db"
DOC_URL = f"{ENDPOINT}/doc1"
AUTH_URL = "http://auth.test/session"


@pytest.fixture
def session_config() -> AuthConfig:
    """Auth settings selecting session mode."""
    return AuthConfig(
        username="alice",
        password="wonderland",
        server_url=AUTH_URL,
        simple_auth=False,
    )


@pytest.fixture
def session_client(
    session_config: AuthConfig,
    http_client: httpx.Client,
) -> SyncGatewayClient:
    """A gateway client authenticating with sessions."""
    return SyncGatewayClient(ENDPOINT, auth=session_config, http_client=http_client)


# ---------------------------------------------------------------------------
# Provider Selection
# ---------------------------------------------------------------------------


class TestBuildAuthProvider:
    """Tests for build_auth_provider."""

    def test_no_config(self, http_client: httpx.Client) -> None:
        """Test that no configuration means no credentials."""
        assert isinstance(build_auth_provider(None, http_client), NoAuthProvider)

    @pytest.mark.parametrize(
        ("username", "password"),
        [(None, None), ("alice", None), (None, "secret"), ("", ""), ("alice", "")],
    )
    def test_incomplete_credentials(
        self,
        http_client: httpx.Client,
        username: str | None,
        password: str | None,
    ) -> None:
        """Test that a missing username or password disables auth."""
        config = AuthConfig(username=username, password=password, simple_auth=True)

        assert isinstance(build_auth_provider(config, http_client), NoAuthProvider)

    def test_basic_mode(self, http_client: httpx.Client) -> None:
        """Test that simple_auth selects basic auth."""
        config = AuthConfig(username="alice", password="secret", simple_auth=True)

        assert isinstance(build_auth_provider(config, http_client), BasicAuthProvider)

    def test_session_mode(
        self,
        http_client: httpx.Client,
        session_config: AuthConfig,
    ) -> None:
        """Test that session mode is the default with credentials."""
        provider = build_auth_provider(session_config, http_client)

        assert isinstance(provider, SessionAuthProvider)
        assert provider.server_url == AUTH_URL

    def test_session_mode_requires_server_url(self, http_client: httpx.Client) -> None:
        """Test that session mode without a server URL is rejected."""
        config = AuthConfig(username="alice", password="secret")

        with pytest.raises(GatewayAuthenticationError):
            build_auth_provider(config, http_client)


# ---------------------------------------------------------------------------
# Auth Results
# ---------------------------------------------------------------------------


class TestAuthResult:
    """Tests for applying credentials to requests."""

    def test_basic_header(self) -> None:
        """Test the basic-auth header value."""
        result = BasicAuthProvider("user", "pass").authenticate(httpx.URL(DOC_URL))

        assert result.headers == {"Authorization": "Basic dXNlcjpwYXNz"}
        assert result.cookies == []

    def test_cookie_header_appends_to_existing(self) -> None:
        """Test that session cookies are added to a caller's Cookie header."""
        cookie = SessionCookie(
            name="SyncGatewaySession",
            value="abc",
            domain="sg.test",
            expires=datetime(2024, 1, 16, tzinfo=UTC),
        )
        request = httpx.Request("GET", DOC_URL, headers={"Cookie": "theme=dark"})

        AuthResult(cookies=[cookie]).apply(request)

        assert request.headers["Cookie"] == "theme=dark; SyncGatewaySession=abc"


# ---------------------------------------------------------------------------
# Request Authentication
# ---------------------------------------------------------------------------


class TestUnauthenticated:
    """Tests for requests without configured credentials."""

    @pytest.mark.respx(base_url="http://sg.test:4984")
    def test_no_credentials_attached(
        self,
        http_client: httpx.Client,
        respx_mock: respx.MockRouter,
    ) -> None:
        """Test that basic mode without credentials attaches nothing."""
        config = AuthConfig(simple_auth=True)
        client = SyncGatewayClient(ENDPOINT, auth=config, http_client=http_client)
        get_route = respx_mock.get("/db/doc1").mock(
            return_value=httpx.Response(404, json={"error": "not_found"})
        )
        put_route = respx_mock.put("/db/doc1").mock(
            return_value=httpx.Response(201, json={"rev": "1-abc"})
        )

        client.post_document({"x": 1}, "doc1")

        for route in (get_route, put_route):
            request = route.calls.last.request
            assert "Authorization" not in request.headers
            assert "Cookie" not in request.headers


class TestBasicAuth:
    """Tests for basic-auth mode."""

    @pytest.mark.respx(base_url="http://sg.test:4984")
    def test_every_request_has_header(
        self,
        http_client: httpx.Client,
        respx_mock: respx.MockRouter,
    ) -> None:
        """Test that reads and writes both carry the basic-auth header."""
        config = AuthConfig(username="user", password="pass", simple_auth=True)
        client = SyncGatewayClient(ENDPOINT, auth=config, http_client=http_client)
        get_route = respx_mock.get("/db/doc1").mock(
            return_value=httpx.Response(200, json={"_rev": "1-a"})
        )
        delete_route = respx_mock.delete("/db/doc1").mock(
            return_value=httpx.Response(200, json={"ok": True})
        )

        client.delete_document("doc1")

        for route in (get_route, delete_route):
            request = route.calls.last.request
            assert request.headers["Authorization"] == "Basic dXNlcjpwYXNz"


class TestSessionAuth:
    """Tests for session-cookie mode."""

    def test_session_cookie_sent(
        self,
        session_client: SyncGatewayClient,
        respx_mock: respx.MockRouter,
        session_json: dict[str, Any],
    ) -> None:
        """Test that a fresh session is posted for and sent as a cookie."""
        auth_route = respx_mock.post(AUTH_URL).mock(
            return_value=httpx.Response(200, json=session_json)
        )
        doc_route = respx_mock.get(DOC_URL).mock(
            return_value=httpx.Response(200, json={"_rev": "1-a", "x": 1})
        )

        doc = session_client.get_document("doc1")

        assert doc.body == {"x": 1}
        assert json.loads(auth_route.calls.last.request.content) == {
            "username": "alice",
            "password": "wonderland",
        }
        cookie = doc_route.calls.last.request.headers["Cookie"]
        assert cookie == f"SyncGatewaySession={session_json['session_id']}"

    def test_new_session_per_request(
        self,
        session_client: SyncGatewayClient,
        respx_mock: respx.MockRouter,
        session_json: dict[str, Any],
    ) -> None:
        """Test that sessions are not cached between requests."""
        auth_route = respx_mock.post(AUTH_URL).mock(
            return_value=httpx.Response(200, json=session_json)
        )
        respx_mock.get(DOC_URL).mock(
            return_value=httpx.Response(200, json={"_rev": "1-a"})
        )
        respx_mock.put(DOC_URL).mock(
            return_value=httpx.Response(201, json={"rev": "2-b"})
        )

        session_client.post_document({"x": 2}, "doc1")

        assert auth_route.call_count == 2

    @pytest.mark.respx(assert_all_called=False)
    def test_unparseable_expiry_blocks_request(
        self,
        session_client: SyncGatewayClient,
        respx_mock: respx.MockRouter,
        session_json: dict[str, Any],
    ) -> None:
        """Test that no gateway request is sent with an invalid session."""
        respx_mock.post(AUTH_URL).mock(
            return_value=httpx.Response(
                200,
                json={**session_json, "expires": "next tuesday"},
            )
        )
        get_route = respx_mock.get(DOC_URL).mock(
            return_value=httpx.Response(200, json={"_rev": "1-a"})
        )
        put_route = respx_mock.put(DOC_URL).mock(
            return_value=httpx.Response(201, json={"rev": "2-b"})
        )

        with pytest.raises(GatewayAuthenticationError) as exc_info:
            session_client.post_document({"x": 1}, "doc1")

        assert "next tuesday" in str(exc_info.value)
        assert not get_route.called
        assert not put_route.called

    @pytest.mark.respx(assert_all_called=False)
    def test_auth_server_unreachable(
        self,
        session_client: SyncGatewayClient,
        respx_mock: respx.MockRouter,
    ) -> None:
        """Test that an unreachable auth server is an auth failure."""
        respx_mock.post(AUTH_URL).mock(side_effect=httpx.ConnectError("refused"))
        get_route = respx_mock.get(DOC_URL).mock(
            return_value=httpx.Response(200, json={"_rev": "1-a"})
        )

        with pytest.raises(GatewayAuthenticationError) as exc_info:
            session_client.get_document("doc1")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert not get_route.called

    @pytest.mark.respx(assert_all_called=False)
    def test_credentials_rejected(
        self,
        session_client: SyncGatewayClient,
        respx_mock: respx.MockRouter,
    ) -> None:
        """Test that a non-2xx auth response is an auth failure."""
        respx_mock.post(AUTH_URL).mock(return_value=httpx.Response(401))
        get_route = respx_mock.get(DOC_URL).mock(
            return_value=httpx.Response(200, json={"_rev": "1-a"})
        )

        with pytest.raises(GatewayAuthenticationError):
            session_client.get_document("doc1")

        assert not get_route.called

    @pytest.mark.respx(assert_all_called=False)
    def test_malformed_session_response(
        self,
        session_client: SyncGatewayClient,
        respx_mock: respx.MockRouter,
    ) -> None:
        """Test that a session response missing fields is an auth failure."""
        respx_mock.post(AUTH_URL).mock(
            return_value=httpx.Response(200, json={"session_id": "abc"})
        )
        get_route = respx_mock.get(DOC_URL).mock(
            return_value=httpx.Response(200, json={"_rev": "1-a"})
        )

        with pytest.raises(GatewayAuthenticationError):
            session_client.get_document("doc1")

        assert not get_route.called

    def test_cookie_scope(
        self,
        http_client: httpx.Client,
        respx_mock: respx.MockRouter,
        session_json: dict[str, Any],
    ) -> None:
        """Test that the session cookie is scoped to the gateway host."""
        respx_mock.post(AUTH_URL).mock(
            return_value=httpx.Response(200, json=session_json)
        )
        provider = SessionAuthProvider(AUTH_URL, "alice", "wonderland", http_client)

        result = provider.authenticate(httpx.URL(DOC_URL))

        (cookie,) = result.cookies
        assert cookie.name == "SyncGatewaySession"
        assert cookie.domain == "sg.test"
        assert cookie.path == "/"
        assert cookie.expires == datetime(2024, 1, 16, 10, 30, tzinfo=UTC)

    def test_session_cookie_not_replayed(
        self,
        http_client: httpx.Client,
        respx_mock: respx.MockRouter,
        session_json: dict[str, Any],
    ) -> None:
        """Test that a Set-Cookie from a same-host auth server is not kept."""
        auth_url = "http://sg.test:4984/_session"
        respx_mock.post(auth_url).mock(
            return_value=httpx.Response(
                200,
                json=session_json,
                headers={"Set-Cookie": "SyncGatewaySession=stale; Path=/"},
            )
        )
        doc_route = respx_mock.get(DOC_URL).mock(
            return_value=httpx.Response(200, json={"_rev": "1-a"})
        )
        config = AuthConfig(
            username="alice",
            password="wonderland",
            server_url=auth_url,
        )
        authed = SyncGatewayClient(ENDPOINT, auth=config, http_client=http_client)
        anonymous = SyncGatewayClient(ENDPOINT, http_client=http_client)

        authed.get_document("doc1")
        anonymous.get_document("doc1")

        first, second = doc_route.calls
        assert first.request.headers["Cookie"] == (
            f"SyncGatewaySession={session_json['session_id']}"
        )
        assert "Cookie" not in second.request.headers
        assert len(http_client.cookies) == 0
