"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

import httpx
import pytest

from sync_gateway_client.gateway import SyncGatewayClient, create_http_client


ENDPOINT = "http://sg.test:4984/db"


@pytest.fixture
def endpoint() -> str:
    """Sync endpoint used by test clients."""
    return ENDPOINT


@pytest.fixture
def http_client() -> Generator[httpx.Client, None, None]:
    """A dedicated HTTP client, so tests never touch the shared one."""
    with create_http_client() as c:
        yield c


@pytest.fixture
def client(endpoint: str, http_client: httpx.Client) -> SyncGatewayClient:
    """An unauthenticated gateway client."""
    return SyncGatewayClient(endpoint, http_client=http_client)


@pytest.fixture
def sample_document_json() -> dict[str, Any]:
    """A stored document as the gateway returns it."""
    return {
        "_id": "doc1",
        "_rev": "2-7d1c8e1f",
        "_attachments": {
            "photo.png": {
                "content_type": "image/png",
                "digest": "sha1-2jmj7l5rSw0yVb/vlWAYkK/YBwk=",
                "length": 1024,
                "revpos": 2,
                "stub": True,
            },
        },
        "title": "Quarterly report",
        "tags": ["finance", "q3"],
        "pages": 12,
    }


@pytest.fixture
def session_json() -> dict[str, Any]:
    """A session as handed out by the authentication server."""
    return {
        "session_id": "c5af80a039db4ed9d2b6865576b6999935282689",
        "expires": "2024-01-16T10:30:00Z",
        "cookie_name": "SyncGatewaySession",
    }
