"""JSON-RPC 2.0 envelope models used by the MCP dispatcher.

Requests are decoded once per input value and never mutated. Responses carry
exactly one of ``result`` or ``error``; :meth:`JsonRpcResponse.to_dict` builds
the wire shape so that a ``null`` id survives while the unused member is left
out.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator

JSONRPC_VERSION = "2.0"


class JsonRpcRequest(BaseModel):
    """A single decoded JSON-RPC request."""

    model_config = ConfigDict(frozen=True)

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Any = None
    method: str = ""
    params: Any = None


class JsonRpcError(BaseModel):
    """A JSON-RPC error object."""

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error, omitting ``data`` when empty."""
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            payload["data"] = self.data
        return payload


class JsonRpcResponse(BaseModel):
    """A JSON-RPC response holding either a result or an error."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Any = None
    result: Any = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _check_result_or_error(self) -> JsonRpcResponse:
        if self.error is not None and self.result is not None:
            raise ValueError("a response cannot carry both result and error")
        return self

    @classmethod
    def success(cls, request_id: Any, result: Any) -> JsonRpcResponse:
        """Build a successful response for ``request_id``."""
        return cls(id=request_id, result=result)

    @classmethod
    def failure(cls, request_id: Any, error: JsonRpcError) -> JsonRpcResponse:
        """Build an error response for ``request_id``."""
        return cls(id=request_id, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire representation of the response."""
        payload: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            payload["error"] = self.error.to_dict()
        else:
            payload["result"] = self.result
        return payload


class CallToolParams(BaseModel):
    """Params accepted by ``tools/call``."""

    name: str = ""
    arguments: dict[str, Any] | None = None
