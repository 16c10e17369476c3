"""HTTP client for the Sync Gateway document REST API."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Self
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from sync_gateway_client.gateway.auth import (
    AuthProvider,
    build_auth_provider,
)
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
    Document,
    DocumentEnvelope,
    WriteResult,
)
from sync_gateway_client.gateway.sniff import detect_content_type
from sync_gateway_client.gateway.transport import create_http_client, get_http_client


if TYPE_CHECKING:
    from sync_gateway_client.config import AuthConfig, Settings


__all__ = ["SyncGatewayClient"]


class SyncGatewayClient:
    """Blocking client for documents and attachments on a Sync Gateway.

    Every method is one or two independent request/response exchanges.
    Write-class operations look up the current revision right before
    writing; the gateway's own revision check is the only concurrency
    guard. Nothing is retried.

    Example:
        ```python
        with SyncGatewayClient(
            "http://gateway:4984/db",
            auth=AuthConfig(username="app", password="secret", simple_auth=True),
        ) as client:
            rev = client.post_document({"x": 1}, "doc1")
            doc = client.get_document("doc1")
            print(doc.body, doc.revision)
        ```

    Attributes:
        endpoint: The sync endpoint; documents live directly below it.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        auth: AuthConfig | None = None,
        auth_provider: AuthProvider | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: Base URL of the sync endpoint
                (e.g., "http://localhost:4984/db").
            auth: Auth settings; ignored when ``auth_provider`` is given.
            auth_provider: Explicit credential provider.
            http_client: HTTP client to use. Defaults to the process-wide
                shared client, which this object never closes.
        """
        self.endpoint = endpoint.rstrip("/")
        self._owns_client = False
        self._http = http_client if http_client is not None else get_http_client()
        self._auth = auth_provider or build_auth_provider(auth, self._http)
        self._logger = structlog.get_logger(__name__)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        http_client: httpx.Client | None = None,
    ) -> Self:
        """Build a client from application settings.

        Unless ``http_client`` is given, a dedicated HTTP client honoring
        the configured timeout and TLS verification is created and closed
        together with this object.
        """
        owned = http_client is None
        if http_client is None:
            http_client = create_http_client(
                timeout=settings.gateway.timeout,
                verify=settings.gateway.verify_ssl,
            )
        try:
            client = cls(
                settings.gateway.url,
                auth=settings.auth,
                http_client=http_client,
            )
        except Exception:
            if owned:
                http_client.close()
            raise
        client._owns_client = owned  # noqa: SLF001
        return client

    def __enter__(self) -> Self:
        """Enter context."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Exit context and close the HTTP client if this object owns it."""
        self.close()

    def close(self) -> None:
        """Close the HTTP client if it was created by this object."""
        if self._owns_client and not self._http.is_closed:
            self._http.close()

    # -------------------------------------------------------------------------
    # Core Request Methods
    # -------------------------------------------------------------------------

    def _url(self, document_id: str, attachment: str | None = None) -> str:
        """Build the URL of a document or attachment resource."""
        url = f"{self.endpoint}/{quote(document_id, safe='')}"
        if attachment is not None:
            url += f"/{quote(attachment, safe='')}"
        return url

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        content: bytes | None = None,
        json: Any | None = None,  # noqa: ANN401
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """Authenticate and execute a single request.

        The response body is always read in full, so the connection is back
        in the pool when this returns or raises.

        Raises:
            GatewayAuthenticationError: If credentials cannot be obtained;
                the request is not sent in that case.
            GatewayConnectionError: For transport failures and timeouts.
        """
        request = self._http.build_request(
            method,
            url,
            params=dict(params) if params else None,
            content=content,
            json=json,
            headers=dict(headers) if headers else None,
        )
        self._auth.authenticate(request.url).apply(request)

        log = self._logger.bind(method=method, path=request.url.path)
        try:
            response = self._http.send(request)
        except httpx.TimeoutException as exc:
            log.warning("timeout_error", error=str(exc))
            raise GatewayConnectionError(
                message="Request timed out",
                cause=exc,
            ) from exc
        except httpx.TransportError as exc:
            log.warning("connection_error", error=str(exc))
            raise GatewayConnectionError(cause=exc) from exc

        log.debug(
            "gateway_request",
            status_code=response.status_code,
            elapsed_ms=response.elapsed.total_seconds() * 1000,
        )
        return response

    def _raise_for_status(
        self,
        response: httpx.Response,
        document_id: str,
        *,
        attachment: str | None = None,
        revision: str | None = None,
    ) -> None:
        """Raise the appropriate exception for an error status code."""
        if response.is_success:
            return

        status = response.status_code

        if status in {401, 403}:
            raise GatewayAuthenticationError(  # noqa: TRY003
                "Authentication failed",  # noqa: EM101
                response=response,
            )

        if status == 404:  # noqa: PLR2004
            raise DocumentNotFoundError(
                document_id,
                attachment=attachment,
                response=response,
            )

        if status == 409:  # noqa: PLR2004
            raise RevisionConflictError(document_id, revision, response=response)

        if status == 400:  # noqa: PLR2004
            reason = None
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and isinstance(body.get("reason"), str):
                reason = body["reason"]
            raise GatewayValidationError(  # noqa: TRY003
                f"Bad request: {reason or 'rejected by gateway'}",  # noqa: EM102
                reason=reason,
                response=response,
            )

        if status >= 500:  # noqa: PLR2004
            raise GatewayServerError(  # noqa: TRY003
                f"Server error: {status}",  # noqa: EM102
                response=response,
            )

        raise GatewayError(  # noqa: TRY003
            f"Unexpected error: {status}",  # noqa: EM102
            response=response,
        )

    # -------------------------------------------------------------------------
    # Document Operations
    # -------------------------------------------------------------------------

    def get_raw_document(self, document_id: str) -> Document:
        """Get a document exactly as stored, internal fields included.

        Args:
            document_id: The document ID.

        Returns:
            The document with its revision. The revision is None if the
            document carries no string ``_rev``.

        Raises:
            DocumentNotFoundError: If the document does not exist.
            GatewayResponseError: If the body is not a JSON object.
        """
        response = self._send("GET", self._url(document_id))
        self._raise_for_status(response, document_id)

        try:
            body = response.json()
        except ValueError as exc:
            msg = f"Malformed JSON for document {document_id!r}"
            raise GatewayResponseError(msg, response=response) from exc
        if not isinstance(body, dict):
            msg = f"Document {document_id!r} is not a JSON object"
            raise GatewayResponseError(msg, response=response)

        envelope = DocumentEnvelope.model_validate(body)
        return Document(id=document_id, body=body, revision=envelope.rev or None)

    def get_document(self, document_id: str) -> Document:
        """Get a document with the gateway's internal fields removed.

        ``_rev``, ``_attachments`` and the other underscore-prefixed
        bookkeeping fields are stripped from the body; the revision is
        returned separately.

        Args:
            document_id: The document ID.

        Returns:
            The cleaned document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """
        raw = self.get_raw_document(document_id)
        body = {k: v for k, v in raw.body.items() if k not in INTERNAL_FIELDS}
        return Document(id=document_id, body=body, revision=raw.revision)

    def _current_revision(self, document_id: str) -> str | None:
        """Look up the current revision, or None if the document is absent.

        Any other failure propagates, so no write is attempted on stale data.
        """
        try:
            return self.get_raw_document(document_id).revision
        except DocumentNotFoundError:
            return None

    def post_document(
        self,
        document: Mapping[str, Any] | BaseModel,
        document_id: str,
    ) -> str | None:
        """Create or fully replace a document.

        The current revision is read first; if the document exists, the write
        is qualified with it (``?rev=``), otherwise the document is created.

        Args:
            document: The new body. Pydantic models are dumped by alias.
            document_id: The document ID.

        Returns:
            The new revision, or None if the gateway did not report one.

        Raises:
            RevisionConflictError: If another writer got there first.
            GatewayResponseError: If the response is not valid JSON.
        """
        if isinstance(document, BaseModel):
            payload = document.model_dump(mode="json", by_alias=True)
        else:
            payload = dict(document)

        revision = self._current_revision(document_id)
        params = {"rev": revision} if revision else None

        response = self._send(
            "PUT",
            self._url(document_id),
            params=params,
            json=payload,
        )
        self._raise_for_status(response, document_id, revision=revision)

        try:
            result = WriteResult.model_validate_json(response.content)
        except ValidationError as exc:
            msg = f"Malformed write response for document {document_id!r}"
            raise GatewayResponseError(msg, response=response) from exc

        self._logger.info(
            "document_written",
            document_id=document_id,
            previous_rev=revision,
            rev=result.rev,
        )
        return result.rev or None

    def delete_document(self, document_id: str) -> None:
        """Delete a document at its current revision.

        Success is not verified beyond the status code. Deleting a document
        that does not exist is not an error: without a revision to qualify
        the request, a 404 from the gateway is accepted.

        Args:
            document_id: The document ID.

        Raises:
            RevisionConflictError: If the revision changed in between.
        """
        revision = self._current_revision(document_id)
        params = {"rev": revision} if revision else None

        response = self._send("DELETE", self._url(document_id), params=params)
        if revision is None and response.status_code == httpx.codes.NOT_FOUND:
            self._logger.info("document_already_absent", document_id=document_id)
            return
        self._raise_for_status(response, document_id, revision=revision)

        self._logger.info("document_deleted", document_id=document_id, rev=revision)

    # -------------------------------------------------------------------------
    # Attachment Operations
    # -------------------------------------------------------------------------

    def post_attachment(
        self,
        content: bytes,
        parent_id: str,
        name: str,
        *,
        revision: str | None = None,
    ) -> None:
        """Upload binary content as an attachment of a document.

        The Content-Type is sniffed from the first bytes of ``content``. No
        revision lookup happens; pass ``revision`` to qualify the upload
        with ``?rev=`` when the gateway requires it.

        Args:
            content: The attachment bytes.
            parent_id: ID of the parent document.
            name: Attachment name.
            revision: Revision of the parent document, if known.

        Raises:
            GatewayConnectionError: If the gateway cannot be reached.
            RevisionConflictError: If ``revision`` is not the current one.
        """
        content_type = detect_content_type(content)
        params = {"rev": revision} if revision else None

        response = self._send(
            "PUT",
            self._url(parent_id, name),
            params=params,
            content=content,
            headers={"Content-Type": content_type},
        )

        self._raise_for_status(
            response,
            parent_id,
            attachment=name,
            revision=revision,
        )

        self._logger.info(
            "attachment_uploaded",
            document_id=parent_id,
            attachment=name,
            content_type=content_type,
            size=len(content),
            status_code=response.status_code,
        )

    def get_attachment_digest(self, parent_id: str, name: str) -> str | None:
        """Get the content digest the gateway computed for an attachment.

        Args:
            parent_id: ID of the parent document.
            name: Attachment name.

        Returns:
            The digest (e.g. ``"sha1-..."``), or None if the document lists
            no such attachment or the entry has no digest.

        Raises:
            DocumentNotFoundError: If the parent document does not exist.
        """
        raw = self.get_raw_document(parent_id)
        envelope = DocumentEnvelope.model_validate(raw.body)
        meta = envelope.attachments.get(name)
        if meta is None:
            return None
        return meta.digest or None
