"""The ``query_logs`` tool: Datadog log search with relative time ranges."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from pydantic import ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from datadog_mcp.errors import BackendError, InvalidParamsError, MCPError
from datadog_mcp.tools import ToolDefinition, ToolParameters, describe_validation_error
from datadog_mcp_server.backend import LogSearchBackend, LogSearchRequest
from datadog_mcp_server.models import LogEntry, QueryParams, QueryResult
from datadog_mcp_server.timeutils import resolve_time, utcnow

logger = logging.getLogger(__name__)

TOOL_NAME = "query_logs"
DEFAULT_LIMIT = 50
MAX_LIMIT = 1000
DEFAULT_WINDOW = timedelta(hours=1)

QUERY_LOGS_INPUT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {
            "type": "string",
            "description": (
                "Search query using Datadog query syntax "
                "(e.g., 'service:web status:error')"
            ),
        },
        "from": {
            "type": "string",
            "description": (
                "Start time in RFC3339 format or relative time (e.g., '1h', '30m'). "
                "Defaults to 1 hour ago."
            ),
        },
        "to": {
            "type": "string",
            "description": (
                "End time in RFC3339 format or relative time. Defaults to now."
            ),
        },
        "limit": {
            "type": "integer",
            "description": (
                "Maximum number of logs to return (max 1000). Defaults to 50."
            ),
        },
    },
    "required": ["query"],
}


class QueryLogsParams(ToolParameters):
    """Raw arguments accepted by query_logs."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    query: str
    from_: str | None = Field(default=None, alias="from")
    to: str | None = None
    limit: int | None = None


def effective_limit(limit: int | None) -> int:
    """Apply the default and the upper bound to a requested limit."""
    if limit is None or limit <= 0:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def normalize_query_logs(
    arguments: dict[str, Any], now: datetime | None = None
) -> QueryParams:
    """Turn raw ``query_logs`` arguments into :class:`QueryParams`.

    Args:
        arguments: Tool arguments as sent by the client.
        now: Reference instant for defaults and durations. Taken from the
            clock when omitted.

    Raises:
        InvalidParamsError: If the query is missing or an argument is malformed.
    """
    query = arguments.get("query")
    if not isinstance(query, str) or not query:
        raise InvalidParamsError("query parameter is required")

    try:
        raw = QueryLogsParams.model_validate(arguments)
    except PydanticValidationError as error:
        raise InvalidParamsError(
            f"invalid arguments for tool '{TOOL_NAME}': "
            f"{describe_validation_error(error)}"
        ) from error

    if now is None:
        now = utcnow()
    from_time = resolve_time(raw.from_, now - DEFAULT_WINDOW, now)
    to_time = resolve_time(raw.to, now, now)
    return QueryParams(
        query=raw.query,
        from_time=from_time,
        to_time=to_time,
        limit=effective_limit(raw.limit),
    )


def _single_line(exc: BaseException) -> str:
    return " ".join(str(exc).split()) or type(exc).__name__


def invoke_search(backend: LogSearchBackend, params: QueryParams) -> QueryResult:
    """Run ``params`` against ``backend`` and map the records it returns.

    Raises:
        BackendError: If the backend call fails or returns unusable records.
    """
    request = LogSearchRequest(
        query=params.query,
        from_timestamp=params.from_timestamp,
        to_timestamp=params.to_timestamp,
        limit=params.limit,
    )
    try:
        records = backend.search(request)
    except MCPError:
        raise
    except Exception as exc:
        logger.warning("Log search failed for query %r: %s", params.query, exc)
        raise BackendError(f"failed to query logs: {_single_line(exc)}") from exc

    try:
        logs = [LogEntry.model_validate(record) for record in records]
    except PydanticValidationError as exc:
        raise BackendError(
            "failed to query logs: malformed log record: "
            f"{describe_validation_error(exc)}"
        ) from exc
    return QueryResult.from_entries(params, logs)


def query_logs_tool(
    backend: LogSearchBackend | None,
    clock: Callable[[], datetime] = utcnow,
) -> ToolDefinition:
    """Create the query_logs tool definition.

    Args:
        backend: Backend that runs searches. ``None`` produces a tool that can
            be listed but fails when called.
        clock: Source of the reference instant for each call.
    """

    def normalizer(arguments: dict[str, Any]) -> QueryParams:
        return normalize_query_logs(arguments, now=clock())

    def handler(params: QueryParams) -> dict[str, Any]:
        if backend is None:
            raise BackendError("log search backend is not configured")
        return invoke_search(backend, params).to_dict()

    return ToolDefinition(
        name=TOOL_NAME,
        description="Search and query Datadog logs with filters and time ranges",
        parameters_model=QueryLogsParams,
        handler=handler,
        input_schema=QUERY_LOGS_INPUT_SCHEMA,
        normalizer=normalizer,
    )
