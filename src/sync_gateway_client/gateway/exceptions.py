"""Custom exceptions for the Sync Gateway client."""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    import httpx


__all__ = [
    "DocumentNotFoundError",
    "GatewayAuthenticationError",
    "GatewayConnectionError",
    "GatewayError",
    "GatewayResponseError",
    "GatewayServerError",
    "GatewayValidationError",
    "RevisionConflictError",
]


class GatewayError(Exception):
    """Base exception for all Sync Gateway client errors.

    Attributes:
        message: Human-readable error description.
        response: The HTTP response that caused this error, if available.
    """

    def __init__(
        self,
        message: str,
        *,
        response: httpx.Response | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            response: The HTTP response that caused this error.
        """
        super().__init__(message)
        self.message = message
        self.response = response

    def __str__(self) -> str:
        """Return string representation with status code if available."""
        if self.response is not None:
            return f"{self.message} (status={self.response.status_code})"
        return self.message


class GatewayConnectionError(GatewayError):
    """Raised when the gateway (or auth server) cannot be reached.

    This includes network errors, DNS failures, and timeouts.
    The client never retries these on its own.
    """

    def __init__(
        self,
        message: str = "Failed to connect to Sync Gateway",
        *,
        cause: Exception | None = None,
    ) -> None:
        """Initialize the connection error.

        Args:
            message: Human-readable error description.
            cause: The underlying exception that caused this error.
        """
        super().__init__(message)
        self.__cause__ = cause


class GatewayResponseError(GatewayError):
    """Raised when a response body cannot be parsed.

    Covers malformed JSON and JSON of an unexpected shape.
    """


class GatewayAuthenticationError(GatewayError):
    """Raised for authentication failures.

    Either the gateway rejected the credentials (401/403), or a session
    could not be obtained from the auth server. In the latter case the
    downstream request has not been sent.
    """


class DocumentNotFoundError(GatewayError):
    """Raised when a document or attachment is not found (404).

    Attributes:
        document_id: The document ID that was requested.
        attachment: The attachment name, for attachment requests.
    """

    def __init__(
        self,
        document_id: str,
        *,
        attachment: str | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        """Initialize the not found error.

        Args:
            document_id: The document ID that was not found.
            attachment: The attachment name, if any.
            response: The HTTP response that caused this error.
        """
        if attachment is None:
            message = f"Document {document_id!r} not found"
        else:
            message = f"Attachment {attachment!r} of document {document_id!r} not found"
        super().__init__(message, response=response)
        self.document_id = document_id
        self.attachment = attachment


class RevisionConflictError(GatewayError):
    """Raised when the gateway rejects a write as a revision conflict (409).

    Another writer updated the document between the revision lookup and
    the write. Re-reading and writing again is up to the caller.

    Attributes:
        document_id: The document ID being written.
        revision: The revision that was sent, or None in create mode.
    """

    def __init__(
        self,
        document_id: str,
        revision: str | None,
        *,
        response: httpx.Response | None = None,
    ) -> None:
        """Initialize the conflict error.

        Args:
            document_id: The document ID being written.
            revision: The revision qualifier that was sent.
            response: The HTTP response that caused this error.
        """
        message = f"Revision conflict on document {document_id!r} (rev={revision})"
        super().__init__(message, response=response)
        self.document_id = document_id
        self.revision = revision


class GatewayServerError(GatewayError):
    """Raised for server errors (5xx)."""


class GatewayValidationError(GatewayError):
    """Raised for rejected requests (400).

    Attributes:
        reason: The ``reason`` field of the gateway's error body, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        reason: str | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        """Initialize the validation error.

        Args:
            message: Human-readable error description.
            reason: Reason reported by the gateway.
            response: The HTTP response that caused this error.
        """
        super().__init__(message, response=response)
        self.reason = reason
