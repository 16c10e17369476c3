"""Configuration module for sync-gateway-client.

Configuration is managed with Pydantic settings, loaded from YAML files
and environment variables. Values support ${VAR} and ${VAR:-default}
syntax for environment variable interpolation.

Example:
    >>> from sync_gateway_client.config import load_settings, get_settings
    >>>
    >>> settings = load_settings()
    >>> print(settings.gateway.url)
    http://localhost:4984/db
    >>> print(settings.auth.simple_auth)
    False
    >>>
    >>> # Use cached singleton
    >>> settings = get_settings()
"""

from __future__ import annotations

from sync_gateway_client.config.exceptions import (
    ConfigurationError,
    ConfigurationFileNotFoundError,
    ConfigurationValidationError,
    PasswordFileNotFoundError,
)
from sync_gateway_client.config.schema import (
    AuthConfig,
    ConfigBaseModel,
    GatewayConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    ObservabilityConfig,
)
from sync_gateway_client.config.settings import (
    PASSWORD_ENV_VAR,
    Settings,
    clear_settings_cache,
    config_search_paths,
    find_config_file,
    get_settings,
    load_settings,
)


__all__ = [
    "PASSWORD_ENV_VAR",
    "AuthConfig",
    "ConfigBaseModel",
    "ConfigurationError",
    "ConfigurationFileNotFoundError",
    "ConfigurationValidationError",
    "GatewayConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "ObservabilityConfig",
    "PasswordFileNotFoundError",
    "Settings",
    "clear_settings_cache",
    "config_search_paths",
    "find_config_file",
    "get_settings",
    "load_settings",
]
