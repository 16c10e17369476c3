"""Settings management for sync-gateway-client.

Settings come from constructor arguments, ``SYNCGW_*`` environment
variables and one YAML file, in that order of precedence. YAML string
values may reference the environment as ``${VAR}`` or ``${VAR:-default}``.
Loaded settings are cached process-wide and treated as read-only.

Example:
    >>> from sync_gateway_client.config import load_settings
    >>> settings = load_settings()
    >>> print(settings.gateway.url)
    http://localhost:4984/db
"""

from __future__ import annotations

import os
import re
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import SecretStr, ValidationError, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from sync_gateway_client.config.exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
    PasswordFileNotFoundError,
)
from sync_gateway_client.config.schema import (
    AuthConfig,
    GatewayConfig,
    ObservabilityConfig,
)


__all__ = [
    "PASSWORD_ENV_VAR",
    "Settings",
    "clear_settings_cache",
    "config_search_paths",
    "find_config_file",
    "get_settings",
    "load_settings",
]


PASSWORD_ENV_VAR = "SYNC_GATEWAY_PASSWORD"

_APP_DIR = "syncgw"
_LOCAL_CONFIG_NAMES = ("syncgw.yaml", "config.yaml", "config.yml")
_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[A-Za-z_]\w*)(?::-(?P<default>[^}]*))?\}")

# YAML file read by the next Settings() in this context
_active_config_file: ContextVar[Path | None] = ContextVar(
    "active_config_file", default=None
)


def config_search_paths() -> list[Path]:
    """Return the locations searched when no config file is given.

    The working directory comes first, then ``$XDG_CONFIG_HOME/syncgw``
    (``~/.config/syncgw`` when unset), then ``/etc/syncgw``.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return [
        *(Path(name) for name in _LOCAL_CONFIG_NAMES),
        Path(config_home) / _APP_DIR / "config.yaml",
        Path("/etc") / _APP_DIR / "config.yaml",
    ]


def _substitute(match: re.Match[str]) -> str:
    # Shell semantics: the default also replaces an empty value.
    return os.environ.get(match["name"]) or match["default"] or ""


def _expand_env(node: Any) -> Any:
    if isinstance(node, str):
        return _ENV_REFERENCE.sub(_substitute, node)
    if isinstance(node, dict):
        return {key: _expand_env(item) for key, item in node.items()}
    if isinstance(node, list):
        return [_expand_env(item) for item in node]
    return node


class _EnvExpandingYamlSource(YamlConfigSettingsSource):
    """Reads the active config file and expands environment references."""

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls, yaml_file=_active_config_file.get())

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        return _expand_env(super()._read_file(file_path))


class Settings(BaseSettings):
    """Application settings loaded from YAML file and environment variables.

    Attributes:
        gateway: Sync endpoint connection settings.
        auth: Credentials and auth mode.
        observability: Logging settings.
    """

    model_config = SettingsConfigDict(
        yaml_file_encoding="utf-8",
        env_prefix="SYNCGW_",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    gateway: GatewayConfig = GatewayConfig()
    auth: AuthConfig = AuthConfig()
    observability: ObservabilityConfig = ObservabilityConfig()

    @model_validator(mode="after")
    def resolve_password(self) -> Settings:
        """Resolve the auth password.

        Resolution order:
        1. Direct ``auth.password`` value
        2. ``auth.password_file`` contents
        3. ``SYNC_GATEWAY_PASSWORD`` environment variable

        Raises:
            PasswordFileNotFoundError: If password_file does not exist.
        """
        if self.auth.password_value:
            return self

        if self.auth.password_file:
            path = self.auth.password_file
            if not path.is_file():
                raise PasswordFileNotFoundError(path)
            secret = SecretStr(path.read_text().strip())
            object.__setattr__(self.auth, "password", secret)
            return self

        env_password = os.environ.get(PASSWORD_ENV_VAR)
        if env_password:
            object.__setattr__(self.auth, "password", SecretStr(env_password))

        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Order sources as init, environment, YAML; dotenv is not used."""
        return (
            init_settings,
            env_settings,
            _EnvExpandingYamlSource(settings_cls),
            file_secret_settings,
        )

    def redacted(self) -> dict[str, Any]:
        """Return the settings as a JSON-compatible dict with secrets masked."""
        data = self.model_dump(mode="json")
        if data["auth"].get("password"):
            data["auth"]["password"] = "**********"  # noqa: S105
        return data


_cached_settings: Settings | None = None


def find_config_file(config_path: Path | str | None = None) -> Path | None:
    """Return ``config_path`` if it is a file, else the first search hit."""
    if config_path is not None:
        path = Path(config_path)
        return path if path.is_file() else None
    return next((path for path in config_search_paths() if path.is_file()), None)


def load_settings(
    config_path: Path | str | None = None,
    *,
    require_config_file: bool = False,
) -> Settings:
    """Load, validate and cache the settings.

    Args:
        config_path: YAML config file; the search path is used when None.
        require_config_file: Fail instead of running on defaults when no
            config file is found.

    Raises:
        ConfigurationFileNotFoundError: No config file and one is required.
        ConfigurationValidationError: The merged settings are invalid.
        PasswordFileNotFoundError: The configured password file is missing.
    """
    global _cached_settings  # noqa: PLW0603

    config_file = find_config_file(config_path)
    if config_file is None and require_config_file:
        raise ConfigurationFileNotFoundError(
            path=str(config_path) if config_path else None,
            searched_paths=[str(path) for path in config_search_paths()],
        )

    token = _active_config_file.set(config_file)
    try:
        settings = Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        errors = exc.errors() if isinstance(exc, ValidationError) else None
        raise ConfigurationValidationError(
            f"Failed to load configuration: {exc}", errors=errors
        ) from exc
    finally:
        _active_config_file.reset(token)

    _cached_settings = settings
    return settings


def get_settings() -> Settings:
    """Get the cached settings instance, loading if necessary."""
    global _cached_settings  # noqa: PLW0603

    if _cached_settings is None:
        _cached_settings = load_settings()

    return _cached_settings


def clear_settings_cache() -> None:
    """Clear the cached settings instance (mainly for tests)."""
    global _cached_settings  # noqa: PLW0603
    _cached_settings = None
