"""Adapters for exposing the Datadog MCP tools via FastMCP."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from anyio import to_thread
from fastmcp import FastMCP
from fastmcp.tools import Tool
from fastmcp.tools.tool import ToolResult

from datadog_mcp.tools import ToolDefinition
from datadog_mcp_server.backend import LogSearchBackend
from datadog_mcp_server.tools import build_tools


class ToolDefinitionAdapter(Tool):
    """Expose a :class:`ToolDefinition` as a FastMCP tool."""

    def __init__(self, definition: ToolDefinition) -> None:
        """Create a FastMCP tool wrapper for the provided definition."""
        super().__init__(
            name=definition.name,
            description=definition.description,
            parameters=definition.descriptor()["inputSchema"],
            output_schema=None,
            tags=set(),
        )
        self._definition = definition

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        """Validate arguments and run the handler in a worker thread.

        Backend searches block on HTTP and run outside the event loop.
        """
        payload = await to_thread.run_sync(self._definition.invoke, arguments)
        return ToolResult(structured_content=payload)


def to_fastmcp_tools(tool_definitions: Sequence[ToolDefinition]) -> list[Tool]:
    """Convert tool definitions into FastMCP-compatible tools."""
    return [ToolDefinitionAdapter(definition) for definition in tool_definitions]


def build_fastmcp_app(
    backend: LogSearchBackend | None,
) -> tuple[FastMCP, list[ToolDefinition]]:
    """Create a FastMCP server instance with the Datadog tools registered."""
    app = FastMCP(
        name="datadog-mcp-server",
        instructions="Datadog log search exposed over the Model Context Protocol.",
    )
    tool_definitions = build_tools(backend)
    for tool in to_fastmcp_tools(tool_definitions):
        app.add_tool(tool)
    return app, tool_definitions
