"""Tool registration helpers for the Datadog MCP server."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from datadog_mcp.tools import ToolDefinition
from datadog_mcp_server.backend import LogSearchBackend
from datadog_mcp_server.timeutils import utcnow
from datadog_mcp_server.tools.query_logs import query_logs_tool


def build_tools(
    backend: LogSearchBackend | None, clock: Callable[[], datetime] = utcnow
) -> list[ToolDefinition]:
    """Instantiate all tool definitions against the provided backend."""
    return [
        query_logs_tool(backend, clock=clock),
    ]
