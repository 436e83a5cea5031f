"""Configuration loading from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_SITE = "datadoghq.com"
DEFAULT_TIMEOUT = 30.0
DEFAULT_LOG_LEVEL = "info"
LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class ConfigError(Exception):
    """Raised when required startup configuration is missing or invalid."""


def _getenv(environ: Mapping[str, str], name: str, default: str) -> str:
    value = environ.get(name, "").strip()
    return value if value else default


@dataclass(frozen=True)
class ServerConfig:
    """Settings for the Datadog backend and the server process."""

    api_key: str
    app_key: str
    site: str = DEFAULT_SITE
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    def validate(self) -> None:
        if not self.api_key or not self.app_key:
            raise ConfigError(
                "DD_API_KEY and DD_APP_KEY environment variables must be set"
            )
        if self.timeout <= 0:
            raise ConfigError("DATADOG_MCP_TIMEOUT must be positive")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(
                f"DATADOG_MCP_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, "
                f"got {self.log_level!r}"
            )


def load_config(environ: Mapping[str, str] | None = None) -> ServerConfig:
    """Build and validate a :class:`ServerConfig` from the environment.

    Args:
        environ: Variables to read instead of :data:`os.environ`.

    Raises:
        ConfigError: If the credentials are missing or a value is malformed.
    """
    if environ is None:
        environ = os.environ

    raw_timeout = _getenv(environ, "DATADOG_MCP_TIMEOUT", str(DEFAULT_TIMEOUT))
    try:
        timeout = float(raw_timeout)
    except ValueError:
        raise ConfigError(
            f"DATADOG_MCP_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
        ) from None

    config = ServerConfig(
        api_key=environ.get("DD_API_KEY", "").strip(),
        app_key=environ.get("DD_APP_KEY", "").strip(),
        site=_getenv(environ, "DD_SITE", DEFAULT_SITE),
        timeout=timeout,
        log_level=_getenv(
            environ, "DATADOG_MCP_LOG_LEVEL", DEFAULT_LOG_LEVEL
        ).lower(),
    )
    config.validate()
    return config
