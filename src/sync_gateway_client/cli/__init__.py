"""CLI module for sync-gateway-client."""

from __future__ import annotations

import json
import sys
from collections.abc import Iterator  # noqa: TC003
from contextlib import contextmanager
from pathlib import Path

import typer

from sync_gateway_client import __version__
from sync_gateway_client.config import ConfigurationError, LogLevel, load_settings
from sync_gateway_client.gateway import (
    DocumentNotFoundError,
    GatewayAuthenticationError,
    GatewayError,
    SyncGatewayClient,
)
from sync_gateway_client.observability import (
    configure_logging,
    get_logger,
    set_operation_id,
)


EXIT_ERROR = 1
EXIT_AUTH = 2
EXIT_NOT_FOUND = 3

app = typer.Typer(
    name="syncgw",
    help="Read and write Sync Gateway documents and attachments.",
    no_args_is_help=True,
)

logger = get_logger(__name__)


def version_callback(value: bool) -> None:  # noqa: FBT001
    """Print version and exit."""
    if value:
        typer.echo(f"syncgw version {__version__}")
        raise typer.Exit


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--verbose",
        "-V",
        help="Enable verbose (debug) logging.",
    ),
    quiet: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--quiet",
        "-q",
        help="Only show warnings and errors.",
    ),
    config_file: str | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file.",
    ),
) -> None:
    """syncgw CLI."""
    del version  # Handled by callback

    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive.", err=True)
        raise typer.Exit(EXIT_ERROR)

    try:
        settings = load_settings(config_file, require_config_file=config_file is not None)
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc.message}", err=True)
        raise typer.Exit(EXIT_ERROR) from exc

    logging_config = settings.observability.logging
    if verbose:
        level = LogLevel.DEBUG
    elif quiet:
        level = LogLevel.WARNING
    else:
        level = logging_config.level
    configure_logging(level, logging_config.format)
    set_operation_id()

    ctx.obj = settings


@contextmanager
def _gateway(ctx: typer.Context) -> Iterator[SyncGatewayClient]:
    """Open a client and turn gateway failures into exit codes."""
    try:
        with SyncGatewayClient.from_settings(ctx.obj) as client:
            yield client
    except GatewayAuthenticationError as exc:
        logger.warning("authentication_failed", error=str(exc))
        typer.echo(f"Authentication failed: {exc}", err=True)
        raise typer.Exit(EXIT_AUTH) from exc
    except DocumentNotFoundError as exc:
        typer.echo(f"Not found: {exc}", err=True)
        raise typer.Exit(EXIT_NOT_FOUND) from exc
    except GatewayError as exc:
        logger.warning("operation_failed", error=str(exc))
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(EXIT_ERROR) from exc


def _read_input(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


@app.command()
def get(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document ID."),
    raw: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--raw",
        help="Keep the gateway's internal fields.",
    ),
) -> None:
    """Print a document as JSON, with its revision on stderr."""
    with _gateway(ctx) as client:
        if raw:
            document = client.get_raw_document(document_id)
        else:
            document = client.get_document(document_id)
    typer.echo(json.dumps(document.body, indent=2, sort_keys=True))
    typer.echo(f"rev: {document.revision or '-'}", err=True)


@app.command()
def put(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document ID."),
    source: str = typer.Argument(..., help="JSON file, or - for stdin."),
) -> None:
    """Create or replace a document and print its new revision."""
    try:
        body = json.loads(_read_input(source))
    except (OSError, ValueError) as exc:
        typer.echo(f"Error: cannot read JSON from {source}: {exc}", err=True)
        raise typer.Exit(EXIT_ERROR) from exc
    if not isinstance(body, dict):
        typer.echo("Error: document must be a JSON object", err=True)
        raise typer.Exit(EXIT_ERROR)

    with _gateway(ctx) as client:
        revision = client.post_document(body, document_id)
    typer.echo(revision or "")


@app.command()
def delete(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Document ID."),
) -> None:
    """Delete a document at its current revision."""
    with _gateway(ctx) as client:
        client.delete_document(document_id)


@app.command()
def attach(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Parent document ID."),
    name: str = typer.Argument(..., help="Attachment name."),
    source: str = typer.Argument(..., help="File to upload, or - for stdin."),
    rev: str | None = typer.Option(
        None,
        "--rev",
        help="Current revision of the parent document.",
    ),
) -> None:
    """Upload a file as an attachment of a document."""
    try:
        content = _read_input(source)
    except OSError as exc:
        typer.echo(f"Error: cannot read {source}: {exc}", err=True)
        raise typer.Exit(EXIT_ERROR) from exc

    with _gateway(ctx) as client:
        client.post_attachment(content, document_id, name, revision=rev)


@app.command()
def digest(
    ctx: typer.Context,
    document_id: str = typer.Argument(..., help="Parent document ID."),
    name: str = typer.Argument(..., help="Attachment name."),
) -> None:
    """Print the digest of an attachment (empty if it is not listed)."""
    with _gateway(ctx) as client:
        value = client.get_attachment_digest(document_id, name)
    typer.echo(value or "")


@app.command()
def config(ctx: typer.Context) -> None:
    """Validate the configuration and print it with secrets masked."""
    typer.echo(json.dumps(ctx.obj.redacted(), indent=2))


__all__ = ["app"]
