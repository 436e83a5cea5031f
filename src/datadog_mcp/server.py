"""MCP server registry and JSON-RPC dispatcher.

The server keeps a name-indexed registry of :class:`ToolDefinition` objects and
turns one decoded JSON-RPC request at a time into exactly one response. It holds
no per-request state and knows nothing about the transport that feeds it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Callable

from pydantic import ValidationError

from datadog_mcp.errors import ErrorCode, InternalError, MCPError, raise_mcp_error
from datadog_mcp.protocol import (
    CallToolParams,
    JsonRpcRequest,
    JsonRpcResponse,
)
from datadog_mcp.tools import ToolDefinition, describe_validation_error

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"


class MCPServer:
    """In-memory registry and dispatcher for MCP tools."""

    def __init__(
        self, name: str = "datadog-mcp-server", version: str = "0.1.0"
    ) -> None:
        """Initialize an empty server registry."""
        self.name = name
        self.version = version
        self._tools: dict[str, ToolDefinition] = {}
        self._methods: dict[str, Callable[[JsonRpcRequest], Any]] = {
            "initialize": self._initialize,
            "tools/list": self._tools_list,
            "tools/call": self._tools_call,
        }

    def register_tool(self, tool: ToolDefinition) -> None:
        """Register a tool with the server.

        Args:
            tool: Tool definition to register.

        Raises:
            ValueError: If a tool with the same name is already registered.

        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def register_tools(self, *tools: ToolDefinition) -> None:
        """Register multiple tools at once."""
        for tool in tools:
            self.register_tool(tool)

    def available_tools(self) -> list[str]:
        """List the names of registered tools, sorted."""
        return sorted(self._tools)

    def list_tools(self) -> list[dict[str, Any]]:
        """Return the ``tools/list`` descriptors in registration order."""
        return [tool.descriptor() for tool in self._tools.values()]

    def run_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Execute a registered tool and return its raw payload.

        Raises:
            MethodNotFoundError: If the tool name is not registered.
            InvalidParamsError: If argument validation fails.
            MCPError: Any other error raised by the tool.

        """
        tool = self._tools.get(name)
        if tool is None:
            raise_mcp_error(ErrorCode.METHOD_NOT_FOUND, f"unknown tool: {name}")
        return tool.invoke(arguments or {})

    def handle_request(
        self, request: JsonRpcRequest | Mapping[str, Any]
    ) -> JsonRpcResponse:
        """Dispatch one request and build its response.

        Args:
            request: A decoded request model or a raw JSON object.

        Returns:
            The response for the request. Failures, including a mapping that
            is not a valid request envelope, are reported in the response's
            ``error`` member rather than raised.

        """
        if isinstance(request, JsonRpcRequest):
            request_id = request.id
        else:
            request_id = request.get("id")
        method = ""
        try:
            request = _as_request(request)
            method = request.method
            handler = self._methods.get(method)
            if handler is None:
                raise_mcp_error(ErrorCode.METHOD_NOT_FOUND, f"unknown method: {method}")
            result = handler(request)
        except MCPError as error:
            return JsonRpcResponse.failure(request_id, error.to_error())
        except Exception:
            logger.exception("Unhandled error while processing %s", method)
            internal = InternalError(f"internal error while processing {method}")
            return JsonRpcResponse.failure(request_id, internal.to_error())
        return JsonRpcResponse.success(request_id, result)

    def _initialize(self, _: JsonRpcRequest) -> dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {"name": self.name, "version": self.version},
            "capabilities": {"tools": {}},
        }

    def _tools_list(self, _: JsonRpcRequest) -> dict[str, Any]:
        return {"tools": self.list_tools()}

    def _tools_call(self, request: JsonRpcRequest) -> dict[str, Any]:
        try:
            params = CallToolParams.model_validate(request.params or {})
        except ValidationError as error:
            raise_mcp_error(
                ErrorCode.INVALID_PARAMS,
                f"invalid params for tools/call: {describe_validation_error(error)}",
            )
        if not params.name:
            raise_mcp_error(ErrorCode.INVALID_PARAMS, "tool name is required")

        payload = self.run_tool(params.name, params.arguments)
        return {"content": [{"type": "text", "text": format_tool_result(payload)}]}

    def to_catalog(self) -> dict[str, Any]:
        """Produce the discovery catalog printed by ``--catalog``."""
        return {"tools": self.list_tools()}


def _as_request(request: JsonRpcRequest | Mapping[str, Any]) -> JsonRpcRequest:
    if isinstance(request, JsonRpcRequest):
        return request
    try:
        return JsonRpcRequest.model_validate(request)
    except ValidationError as error:
        details = describe_validation_error(error)
        logger.warning("Rejecting invalid request envelope: %s", details)
        raise_mcp_error(ErrorCode.INVALID_REQUEST, "invalid request", details)


def format_tool_result(payload: Any) -> str:
    """Render a tool payload as pretty-printed JSON text.

    Raises:
        InternalError: If the payload is not JSON serializable.

    """
    try:
        return json.dumps(payload, indent=2)
    except (TypeError, ValueError) as exc:
        raise InternalError(f"failed to encode tool result: {exc}") from exc
