"""Tests for the JSON-RPC dispatcher."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

import pytest
from conftest import FakeBackend

from datadog_mcp.errors import ErrorCode, InvalidParamsError
from datadog_mcp.protocol import JsonRpcRequest
from datadog_mcp.server import MCPServer
from datadog_mcp.tools import ToolDefinition, ToolParameters
from datadog_mcp_server.tools import build_tools


def _call(server: MCPServer, params: Any, request_id: Any = 1) -> dict[str, Any]:
    request = {"jsonrpc": "2.0", "id": request_id, "method": "tools/call"}
    if params is not None:
        request["params"] = params
    return server.handle_request(request).to_dict()


def _echo_tool() -> ToolDefinition:
    class EchoParameters(ToolParameters):
        """Single text argument."""

        text: str

    return ToolDefinition(
        name="echo",
        description="Echo the provided text.",
        parameters_model=EchoParameters,
        handler=lambda params: {"text": params.text},
    )


class TestRegistry:
    """Registration and tools/list behavior."""

    def test_register_and_list_tools(self) -> None:
        """Registered tools appear in the catalog."""
        # Arrange
        server = MCPServer()
        echo = _echo_tool()

        # Act
        server.register_tool(echo)

        # Assert
        assert server.available_tools() == ["echo"]
        [descriptor] = server.list_tools()
        assert descriptor["description"] == echo.description
        assert descriptor["inputSchema"]["properties"]["text"]["type"] == "string"

    def test_prevents_duplicate_tool_names(self) -> None:
        """Duplicate tool registrations raise a ValueError."""
        server = MCPServer()
        server.register_tool(_echo_tool())

        with pytest.raises(ValueError):
            server.register_tool(_echo_tool())

    def test_tools_list_contains_query_logs(self, server: MCPServer) -> None:
        """tools/list exposes query_logs with a description and schema type."""
        response = server.handle_request(
            {"jsonrpc": "2.0", "id": 1, "method": "tools/list"}
        ).to_dict()

        assert "error" not in response
        tools = response["result"]["tools"]
        assert tools
        [query_logs] = [tool for tool in tools if tool["name"] == "query_logs"]
        assert query_logs["description"]
        assert query_logs["inputSchema"]["type"] == "object"
        assert query_logs["inputSchema"]["required"] == ["query"]

    def test_tools_list_is_idempotent(self, server: MCPServer) -> None:
        """Listing twice yields identical serialized schemas."""
        request = {"jsonrpc": "2.0", "id": 1, "method": "tools/list"}

        first = json.dumps(server.handle_request(request).to_dict(), sort_keys=True)
        second = json.dumps(server.handle_request(request).to_dict(), sort_keys=True)

        assert first == second

    def test_descriptor_mutation_does_not_leak(self, server: MCPServer) -> None:
        """Callers cannot alter the registered schema through a descriptor."""
        server.list_tools()[0]["inputSchema"]["required"].append("limit")

        assert server.list_tools()[0]["inputSchema"]["required"] == ["query"]


class TestMethods:
    """Routing by method name."""

    @pytest.mark.parametrize("params", [None, {}, {"protocolVersion": "x"}, [1, 2]])
    def test_initialize_ignores_params(self, server: MCPServer, params: Any) -> None:
        """initialize succeeds regardless of params."""
        request: dict[str, Any] = {"jsonrpc": "2.0", "id": 7, "method": "initialize"}
        if params is not None:
            request["params"] = params

        response = server.handle_request(request).to_dict()

        assert "error" not in response
        assert response["result"]["protocolVersion"]
        assert response["result"]["serverInfo"]["name"] == "datadog-mcp-server"
        assert response["result"]["capabilities"] == {"tools": {}}

    def test_unknown_method(self, server: MCPServer) -> None:
        """Unknown methods map to -32601 naming the method."""
        response = server.handle_request(
            {"jsonrpc": "2.0", "id": 1, "method": "resources/list"}
        ).to_dict()

        assert "result" not in response
        assert response["error"]["code"] == ErrorCode.METHOD_NOT_FOUND
        assert "resources/list" in response["error"]["message"]

    @pytest.mark.parametrize("request_id", [1, 0, "abc-1", None, 2.5])
    def test_id_is_echoed_verbatim(self, server: MCPServer, request_id: Any) -> None:
        """Ids of any JSON type come back unchanged, on success and on error."""
        ok = server.handle_request(
            {"jsonrpc": "2.0", "id": request_id, "method": "initialize"}
        ).to_dict()
        failed = server.handle_request(
            {"jsonrpc": "2.0", "id": request_id, "method": "nope"}
        ).to_dict()

        assert ok["id"] == request_id
        assert type(ok["id"]) is type(request_id)
        assert failed["id"] == request_id

    def test_missing_method_is_unknown_method(self, server: MCPServer) -> None:
        """An envelope without a method still gets a -32601 response."""
        response = server.handle_request({"jsonrpc": "2.0", "id": 5}).to_dict()

        assert response["id"] == 5
        assert response["error"] == {
            "code": ErrorCode.METHOD_NOT_FOUND,
            "message": "unknown method: ",
        }

    @pytest.mark.parametrize(
        "request_body",
        [
            {"jsonrpc": "1.0", "id": "r1", "method": "initialize"},
            {"jsonrpc": "2.0", "id": "r1", "method": ["initialize"]},
        ],
    )
    def test_invalid_envelope_is_invalid_request(
        self, server: MCPServer, request_body: dict[str, Any]
    ) -> None:
        """Invalid envelopes map to -32600 with the validation details."""
        response = server.handle_request(request_body).to_dict()

        assert response["id"] == "r1"
        assert response["error"]["code"] == ErrorCode.INVALID_REQUEST
        assert response["error"]["message"] == "invalid request"
        assert isinstance(response["error"]["data"], str)

    def test_accepts_request_models(self, server: MCPServer) -> None:
        """handle_request also takes an already decoded request."""
        request = JsonRpcRequest(id="x", method="tools/list")

        response = server.handle_request(request)

        assert response.id == "x"
        assert response.error is None


class TestToolsCall:
    """tools/call routing, validation and error mapping."""

    def test_end_to_end_query(self, server: MCPServer, backend: FakeBackend) -> None:
        """A valid call returns the backend records as pretty-printed JSON text."""
        response = _call(
            server,
            {"name": "query_logs", "arguments": {"query": "status:error", "limit": 10}},
        )

        assert "error" not in response
        [content] = response["result"]["content"]
        assert content["type"] == "text"
        assert "\n  " in content["text"]
        payload = json.loads(content["text"])
        assert payload["count"] == 2
        assert payload["query"] == "status:error"
        assert payload["from"] == "2026-01-20T11:00:00Z"
        assert payload["to"] == "2026-01-20T12:00:00Z"
        assert payload["logs"][0]["attributes"] == {"http": {"status_code": 503}}
        assert "attributes" not in payload["logs"][1]
        assert backend.requests[0].limit == 10

    def test_unknown_tool(self, server: MCPServer) -> None:
        """Unregistered tool names map to -32601 naming the tool."""
        response = _call(server, {"name": "query_metrics", "arguments": {}})

        assert response["error"]["code"] == ErrorCode.METHOD_NOT_FOUND
        assert response["error"]["message"] == "unknown tool: query_metrics"

    @pytest.mark.parametrize(
        "params",
        [None, {}, {"arguments": {"query": "x"}}, {"name": "", "arguments": {}}],
    )
    def test_missing_tool_name(self, server: MCPServer, params: Any) -> None:
        """A missing or empty tool name is an invalid params error."""
        response = _call(server, params)

        assert response["error"]["code"] == ErrorCode.INVALID_PARAMS
        assert response["error"]["message"] == "tool name is required"

    @pytest.mark.parametrize(
        "params",
        [
            {"name": 42, "arguments": {}},
            {"name": "query_logs", "arguments": ["status:error"]},
            ["query_logs"],
            "query_logs",
        ],
    )
    def test_malformed_params(self, server: MCPServer, params: Any) -> None:
        """Params that do not decode into the expected shape are -32602."""
        response = _call(server, params)

        assert response["error"]["code"] == ErrorCode.INVALID_PARAMS

    def test_missing_query_does_not_reach_backend(
        self, server: MCPServer, backend: FakeBackend
    ) -> None:
        """Validation failures are reported without contacting the backend."""
        response = _call(server, {"name": "query_logs", "arguments": {}})

        assert response["error"]["code"] == ErrorCode.INVALID_PARAMS
        assert response["error"]["message"] == "query parameter is required"
        assert backend.requests == []

    def test_invalid_time_format(self, server: MCPServer) -> None:
        """Unparseable time arguments surface as -32602."""
        response = _call(
            server,
            {"name": "query_logs", "arguments": {"query": "*", "from": "not-a-time"}},
        )

        assert response["error"]["code"] == ErrorCode.INVALID_PARAMS
        assert "invalid time format" in response["error"]["message"]

    def test_backend_failure(self, fixed_now: datetime) -> None:
        """Backend exceptions become a single -32000 error."""
        server = MCPServer()
        failing = FakeBackend(error=ConnectionError("connection refused\nby host"))
        server.register_tools(*build_tools(failing, clock=lambda: fixed_now))

        response = _call(server, {"name": "query_logs", "arguments": {"query": "*"}})

        assert response["error"]["code"] == ErrorCode.BACKEND_ERROR
        assert response["error"]["message"] == (
            "failed to query logs: connection refused by host"
        )

    def test_unserializable_result_is_internal_error(self) -> None:
        """A payload that cannot be encoded maps to -32603."""
        server = MCPServer()
        server.register_tool(
            ToolDefinition(
                name="broken",
                description="Returns an object JSON cannot encode.",
                parameters_model=ToolParameters,
                handler=lambda _: {"value": object()},
            )
        )

        response = _call(server, {"name": "broken", "arguments": {}})

        assert response["error"]["code"] == ErrorCode.INTERNAL_ERROR

    def test_unexpected_exception_is_internal_error(self) -> None:
        """Exceptions outside the taxonomy never escape the dispatcher."""

        def explode(_: Any) -> dict[str, Any]:
            raise RuntimeError("boom")

        server = MCPServer()
        server.register_tool(
            ToolDefinition(
                name="explode",
                description="Always fails.",
                parameters_model=ToolParameters,
                handler=explode,
            )
        )

        response = _call(server, {"name": "explode", "arguments": {}}, request_id="r")

        assert response["id"] == "r"
        assert response["error"]["code"] == ErrorCode.INTERNAL_ERROR
        assert "boom" not in response["error"]["message"]

    def test_model_validation_rejects_unknown_arguments(self) -> None:
        """Tools without a custom normalizer validate against their model."""
        server = MCPServer()
        server.register_tool(_echo_tool())

        with pytest.raises(InvalidParamsError):
            server.run_tool("echo", {"text": "hi", "extra": True})
        assert server.run_tool("echo", {"text": "hi"}) == {"text": "hi"}
