"""Model Context Protocol server for Datadog log search."""

from datadog_mcp_server.backend import (
    DatadogLogsBackend,
    LogSearchBackend,
    LogSearchRequest,
)
from datadog_mcp_server.config import ConfigError, ServerConfig, load_config

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DatadogLogsBackend",
    "LogSearchBackend",
    "LogSearchRequest",
    "ServerConfig",
    "__version__",
    "load_config",
]
