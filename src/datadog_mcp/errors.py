"""Error types mapped onto JSON-RPC error codes."""

from __future__ import annotations

from enum import IntEnum
from typing import NoReturn

from datadog_mcp.protocol import JsonRpcError


class ErrorCode(IntEnum):
    """JSON-RPC error codes produced by the server."""

    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    BACKEND_ERROR = -32000


class MCPError(Exception):
    """Structured MCP error carrying a JSON-RPC error code."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        details: object | None = None,
        *,
        code: ErrorCode | None = None,
    ) -> None:
        """Create an error with an optional code override and details payload."""
        super().__init__(message)
        self.message = message
        self.details = details
        if code is not None:
            self.code = code

    def to_error(self) -> JsonRpcError:
        """Return the JSON-RPC error object for this exception."""
        return JsonRpcError(
            code=int(self.code), message=self.message, data=self.details
        )


class InvalidRequestError(MCPError):
    """A JSON object that is not a valid JSON-RPC 2.0 request envelope."""

    code = ErrorCode.INVALID_REQUEST


class MethodNotFoundError(MCPError):
    """Unknown method or unknown tool name."""

    code = ErrorCode.METHOD_NOT_FOUND


class InvalidParamsError(MCPError):
    """Request params or tool arguments failed validation."""

    code = ErrorCode.INVALID_PARAMS


class InternalError(MCPError):
    """The server failed to produce a result."""

    code = ErrorCode.INTERNAL_ERROR


class BackendError(MCPError):
    """The log-search backend call failed."""

    code = ErrorCode.BACKEND_ERROR


_ERRORS_BY_CODE: dict[ErrorCode, type[MCPError]] = {
    ErrorCode.INVALID_REQUEST: InvalidRequestError,
    ErrorCode.METHOD_NOT_FOUND: MethodNotFoundError,
    ErrorCode.INVALID_PARAMS: InvalidParamsError,
    ErrorCode.INTERNAL_ERROR: InternalError,
    ErrorCode.BACKEND_ERROR: BackendError,
}


def raise_mcp_error(
    code: ErrorCode, message: str, details: object | None = None
) -> NoReturn:
    """Raise the :class:`MCPError` subclass registered for ``code``."""
    raise _ERRORS_BY_CODE[code](message, details)
