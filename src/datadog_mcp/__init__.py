"""datadog_mcp package initialization."""

from datadog_mcp.errors import ErrorCode, MCPError
from datadog_mcp.server import MCPServer
from datadog_mcp.tools import ToolDefinition, ToolParameters

__all__ = ["ErrorCode", "MCPError", "MCPServer", "ToolDefinition", "ToolParameters"]
