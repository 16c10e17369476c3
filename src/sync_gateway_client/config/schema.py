"""Configuration schema models for sync-gateway-client.

These models are used by the Settings class to validate and type-check
configuration loaded from YAML files and environment variables.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path  # noqa: TC003 - needed at runtime for Pydantic
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


__all__ = [
    "AuthConfig",
    "ConfigBaseModel",
    "GatewayConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "ObservabilityConfig",
]


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class LogFormat(StrEnum):
    """Log output format.

    Attributes:
        LOGFMT: key=value lines (for machine parsing).
        CONSOLE: Human-readable console output with colors.
        AUTO: Console on a TTY, logfmt otherwise.
    """

    LOGFMT = "logfmt"
    CONSOLE = "console"
    AUTO = "auto"


class LogLevel(StrEnum):
    """Log verbosity level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ---------------------------------------------------------------------------
# Base Configuration Model
# ---------------------------------------------------------------------------


class ConfigBaseModel(BaseModel):
    """Base model for all configuration sections.

    Unknown fields are rejected to catch configuration typos.
    """

    model_config = ConfigDict(
        extra="forbid",
        str_strip_whitespace=True,
        validate_default=True,
    )


# ---------------------------------------------------------------------------
# Gateway Configuration
# ---------------------------------------------------------------------------


class GatewayConfig(ConfigBaseModel):
    """Sync Gateway connection configuration.

    Attributes:
        url: The sync endpoint, i.e. the database URL documents live under.
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify TLS certificates.
    """

    url: str = Field(
        default="http://localhost:4984/db",
        description="Sync endpoint URL (database URL)",
    )
    timeout: Annotated[
        float,
        Field(gt=0, description="Request timeout in seconds"),
    ] = 30.0
    verify_ssl: bool = Field(default=True)

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Remove trailing slash from URL to avoid double slashes."""
        return v.rstrip("/")


# ---------------------------------------------------------------------------
# Auth Configuration
# ---------------------------------------------------------------------------


class AuthConfig(ConfigBaseModel):
    """Credentials for the gateway.

    Without both a username and a password, requests are sent
    unauthenticated. Otherwise ``simple_auth`` selects between a basic-auth
    header and a session cookie obtained from ``server_url``.

    Attributes:
        username: Account name.
        password: Account password (supports ${VAR} interpolation).
        password_file: Path to a file containing the password.
        server_url: Authentication server handing out gateway sessions.
        simple_auth: Use basic auth instead of session cookies.
    """

    username: str | None = None
    password: SecretStr | None = Field(
        default=None,
        description="Account password (supports ${VAR} interpolation)",
    )
    password_file: Path | None = Field(
        default=None,
        description="Path to file containing the password",
    )
    server_url: str | None = Field(
        default=None,
        description="Authentication server URL for session mode",
    )
    simple_auth: bool = Field(default=False)

    @property
    def password_value(self) -> str:
        """The plain-text password, or an empty string."""
        if self.password is None:
            return ""
        return self.password.get_secret_value()

    @property
    def has_credentials(self) -> bool:
        """Whether both a username and a password are configured."""
        return bool(self.username) and bool(self.password_value)


# ---------------------------------------------------------------------------
# Observability Configuration
# ---------------------------------------------------------------------------


class LoggingConfig(ConfigBaseModel):
    """Logging configuration.

    Attributes:
        level: Log verbosity level.
        format: Log output format.
    """

    level: LogLevel = Field(default=LogLevel.INFO)
    format: LogFormat = Field(default=LogFormat.AUTO)


class ObservabilityConfig(ConfigBaseModel):
    """Observability configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
