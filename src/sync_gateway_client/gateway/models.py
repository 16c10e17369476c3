"""Pydantic models for Sync Gateway documents and auth responses."""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    OnErrorOmit,
    ValidationError,
    ValidatorFunctionWrapHandler,
    WrapValidator,
)


__all__ = [
    "INTERNAL_FIELDS",
    "AttachmentMeta",
    "Document",
    "DocumentEnvelope",
    "Session",
    "SessionRequest",
    "WriteResult",
    "parse_expiry",
]


# Fields the gateway manages itself; stripped from cleaned documents.
INTERNAL_FIELDS = frozenset(
    {"_id", "_rev", "_attachments", "_deleted", "_revisions", "_exp", "_sync"}
)

# RFC 3339 with mandatory offset, e.g. 2006-01-02T15:04:05Z07:00
_RFC3339_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})$"
)


def parse_expiry(value: str) -> datetime:
    """Parse a session expiry timestamp.

    Args:
        value: Timestamp in RFC 3339 form (``2024-01-15T10:30:00Z``,
            ``2024-01-15T10:30:00.123456-05:00``).

    Returns:
        A timezone-aware datetime.

    Raises:
        ValueError: If the value is not an RFC 3339 timestamp.
    """
    if not _RFC3339_PATTERN.match(value):
        msg = f"Invalid session expiry timestamp: {value!r}"
        raise ValueError(msg)
    return datetime.fromisoformat(value)


def _fallback_on_error(default: Callable[[], Any]) -> WrapValidator:
    """Replace a value of the wrong type with ``default()``.

    The gateway owns the reserved fields, but documents written by other
    clients may carry anything there; such values count as absent.
    """

    def validate(value: Any, handler: ValidatorFunctionWrapHandler) -> Any:  # noqa: ANN401
        try:
            return handler(value)
        except ValidationError:
            return default()

    return WrapValidator(validate)


_LenientStr = Annotated[str | None, _fallback_on_error(lambda: None)]
_LenientInt = Annotated[int | None, _fallback_on_error(lambda: None)]
_LenientBool = Annotated[bool, _fallback_on_error(lambda: False)]


class GatewayBaseModel(BaseModel):
    """Base model with common configuration for all gateway models."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=False,
        extra="ignore",  # Ignore unknown fields from API
    )


class AttachmentMeta(GatewayBaseModel):
    """Metadata of one attachment, as listed in a document's ``_attachments``.

    Attachments are usually returned as stubs, so everything but the digest
    is informational.
    """

    digest: _LenientStr = None
    content_type: _LenientStr = None
    length: _LenientInt = None
    revpos: _LenientInt = None
    stub: _LenientBool = False


class DocumentEnvelope(GatewayBaseModel):
    """The gateway-reserved fields of a document.

    The user-defined part of the document is not modeled; it stays in the
    raw body. Reserved fields of an unexpected type read as absent, and
    attachment entries that are not objects are skipped.
    """

    id: _LenientStr = Field(default=None, alias="_id")
    rev: _LenientStr = Field(default=None, alias="_rev")
    attachments: Annotated[
        dict[str, OnErrorOmit[AttachmentMeta]],
        _fallback_on_error(dict),
    ] = Field(
        default_factory=dict,
        alias="_attachments",
    )
    deleted: _LenientBool = Field(default=False, alias="_deleted")


class Document(GatewayBaseModel):
    """A document as returned to callers.

    Attributes:
        id: The document ID it was fetched by.
        body: The JSON object, either verbatim or with internal fields removed.
        revision: The revision token, or None if the document had none.
    """

    id: str
    body: dict[str, Any] = Field(default_factory=dict)
    revision: str | None = None


class WriteResult(GatewayBaseModel):
    """Response body of a document PUT."""

    ok: bool | None = None
    id: str | None = None
    rev: str | None = None


class SessionRequest(GatewayBaseModel):
    """Credentials posted to the authentication server."""

    username: str
    password: str


class Session(GatewayBaseModel):
    """A gateway session handed out by the authentication server.

    Sessions are not cached; one is fetched for every authenticated request.
    """

    session_id: str
    expires: str
    cookie_name: str

    @property
    def expires_at(self) -> datetime:
        """The parsed expiry.

        Raises:
            ValueError: If ``expires`` is not an RFC 3339 timestamp.
        """
        return parse_expiry(self.expires)
