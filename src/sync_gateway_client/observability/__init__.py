"""Observability module (structured logging)."""

from __future__ import annotations

from sync_gateway_client.observability.logging import (
    configure_logging,
    get_logger,
    set_operation_id,
)


__all__ = [
    "configure_logging",
    "get_logger",
    "set_operation_id",
]
