"""Structured logging for sync-gateway-client.

Events go to stderr through structlog, rendered as logfmt lines or, on a
terminal, with the colored console renderer. The CLI tags every event of
one invocation with an ``operation_id``, so the revision lookup, session
request and write belonging to a single command can be correlated.
"""

from __future__ import annotations

import logging
import sys
import uuid

import structlog
from structlog.contextvars import bind_contextvars, merge_contextvars

from sync_gateway_client.config.schema import LogFormat, LogLevel


__all__ = [
    "configure_logging",
    "get_logger",
    "set_operation_id",
]


_LOGFMT_KEYS = ["timestamp", "level", "event", "operation_id"]


def _wants_console(log_format: LogFormat) -> bool:
    if log_format is LogFormat.AUTO:
        return sys.stderr is not None and sys.stderr.isatty()
    return log_format is LogFormat.CONSOLE


def configure_logging(
    level: LogLevel | str = LogLevel.INFO,
    log_format: LogFormat | str = LogFormat.AUTO,
) -> None:
    """Configure structlog and stdlib logging for the process.

    Loggers are not cached, so reconfiguring (or swapping ``sys.stderr``)
    takes effect for module-level loggers too. httpx's own request log is
    only shown at debug level; the client logs its requests itself.

    Args:
        level: Minimum level, as LogLevel or a case-insensitive name.
        log_format: ``logfmt``, ``console``, or ``auto`` (console on a TTY).

    Raises:
        ValueError: For an unknown level or format.
    """
    level = LogLevel(str(level).upper())
    numeric_level = logging.getLevelNamesMapping()[level]

    if _wants_console(LogFormat(log_format)):
        renderer: structlog.typing.Processor = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback,
        )
    else:
        renderer = structlog.processors.LogfmtRenderer(
            key_order=_LOGFMT_KEYS,
            drop_missing=True,
        )

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.dev.set_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
        force=True,
    )
    httpx_level = numeric_level if level is LogLevel.DEBUG else logging.WARNING
    logging.getLogger("httpx").setLevel(max(httpx_level, numeric_level))


def set_operation_id(operation_id: str | None = None) -> str:
    """Bind an operation ID to all following events in this context.

    Args:
        operation_id: The ID to use; 8 random hex characters if omitted.

    Returns:
        The bound ID.
    """
    operation_id = operation_id or uuid.uuid4().hex[:8]
    bind_contextvars(operation_id=operation_id)
    return operation_id


def get_logger(
    name: str | None = None,
    **initial_context: object,
) -> structlog.BoundLogger:
    """Get a structured logger, optionally with bound initial context."""
    log: structlog.BoundLogger = structlog.get_logger(name)
    if initial_context:
        log = log.bind(**initial_context)
    return log
