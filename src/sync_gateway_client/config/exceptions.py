"""Configuration-specific exceptions for sync-gateway-client."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003


__all__ = [
    "ConfigurationError",
    "ConfigurationFileNotFoundError",
    "ConfigurationValidationError",
    "PasswordFileNotFoundError",
]


class ConfigurationError(Exception):
    """Base exception for configuration errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationFileNotFoundError(ConfigurationError):
    """Raised when a configuration file is required but cannot be found.

    Attributes:
        path: The path that was requested (None when searching defaults).
        searched_paths: Paths that were searched.
    """

    def __init__(
        self,
        path: str | None = None,
        searched_paths: list[str] | None = None,
    ) -> None:
        self.path = path
        self.searched_paths = searched_paths or []

        if path:
            message = f"Configuration file not found: {path}"
        elif self.searched_paths:
            message = "Configuration file not found. Searched: " + ", ".join(
                self.searched_paths
            )
        else:
            message = "Configuration file not found"

        super().__init__(message)


class PasswordFileNotFoundError(ConfigurationError):
    """Raised when ``auth.password_file`` points at a missing file.

    Attributes:
        path: The configured password file.
    """

    def __init__(self, path: Path) -> None:
        super().__init__(f"Password file not found: {path}")
        self.path = path


class ConfigurationValidationError(ConfigurationError):
    """Raised when configuration validation fails.

    Wraps Pydantic validation errors; the detailed errors stay available.

    Attributes:
        errors: Validation error details from Pydantic.
    """

    def __init__(
        self,
        message: str,
        errors: list[dict[str, object]] | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or []
