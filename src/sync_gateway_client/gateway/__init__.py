"""Sync Gateway REST client module.

This module provides a blocking HTTP client for documents and attachments
stored in a Sync Gateway database, with basic-auth or session-cookie
authentication.

Example:
    ```python
    from sync_gateway_client.config import AuthConfig
    from sync_gateway_client.gateway import SyncGatewayClient

    auth = AuthConfig(
        username="app",
        password="secret",
        server_url="http://auth.internal/session",
    )
    with SyncGatewayClient("http://gateway:4984/db", auth=auth) as client:
        # Create or overwrite a document
        rev = client.post_document({"title": "Report"}, "report-1")

        # Attach a file and verify what the gateway stored
        client.post_attachment(pdf_bytes, "report-1", "report.pdf")
        digest = client.get_attachment_digest("report-1", "report.pdf")
    ```
"""

from __future__ import annotations

from sync_gateway_client.gateway.auth import (
    AuthProvider,
    AuthResult,
    BasicAuthProvider,
    NoAuthProvider,
    SessionAuthProvider,
    SessionCookie,
    build_auth_provider,
)
from sync_gateway_client.gateway.client import SyncGatewayClient
from sync_gateway_client.gateway.exceptions import (
    DocumentNotFoundError,
    GatewayAuthenticationError,
    GatewayConnectionError,
    GatewayError,
    GatewayResponseError,
    GatewayServerError,
    GatewayValidationError,
    RevisionConflictError,
)
from sync_gateway_client.gateway.models import (
    INTERNAL_FIELDS,
    AttachmentMeta,
    Document,
    DocumentEnvelope,
    Session,
    SessionRequest,
    WriteResult,
    parse_expiry,
)
from sync_gateway_client.gateway.sniff import detect_content_type
from sync_gateway_client.gateway.transport import (
    DEFAULT_TIMEOUT,
    close_http_client,
    create_http_client,
    get_http_client,
    set_http_client,
)


__all__ = [
    "DEFAULT_TIMEOUT",
    "INTERNAL_FIELDS",
    "AttachmentMeta",
    "AuthProvider",
    "AuthResult",
    "BasicAuthProvider",
    "Document",
    "DocumentEnvelope",
    "DocumentNotFoundError",
    "GatewayAuthenticationError",
    "GatewayConnectionError",
    "GatewayError",
    "GatewayResponseError",
    "GatewayServerError",
    "GatewayValidationError",
    "NoAuthProvider",
    "RevisionConflictError",
    "Session",
    "SessionAuthProvider",
    "SessionCookie",
    "SessionRequest",
    "SyncGatewayClient",
    "WriteResult",
    "build_auth_provider",
    "close_http_client",
    "create_http_client",
    "detect_content_type",
    "get_http_client",
    "parse_expiry",
    "set_http_client",
]
