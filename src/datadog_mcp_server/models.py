"""Normalized query parameters and log search results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from datadog_mcp_server.timeutils import format_rfc3339


@dataclass(frozen=True)
class QueryParams:
    """Validated arguments for a single ``query_logs`` call."""

    query: str
    from_time: datetime
    to_time: datetime
    limit: int

    @property
    def from_timestamp(self) -> str:
        """Start of the searched range as an RFC3339 string."""
        return format_rfc3339(self.from_time)

    @property
    def to_timestamp(self) -> str:
        """End of the searched range as an RFC3339 string."""
        return format_rfc3339(self.to_time)


class LogEntry(BaseModel):
    """One log event returned by the backend."""

    model_config = ConfigDict(frozen=True)

    id: str = ""
    timestamp: datetime | None = None
    message: str = ""
    status: str = ""
    service: str = ""
    tags: list[str] = Field(default_factory=list)
    attributes: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation; ``attributes`` only when present."""
        payload = self.model_dump(mode="json")
        if self.attributes is None:
            del payload["attributes"]
        return payload


class QueryResult(BaseModel):
    """Result of a log search, echoing the range that was actually searched."""

    logs: list[LogEntry]
    count: int
    query: str
    from_: str = Field(alias="from")
    to: str

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation in the shape returned to clients."""
        return {
            "logs": [entry.to_dict() for entry in self.logs],
            "count": self.count,
            "query": self.query,
            "from": self.from_,
            "to": self.to,
        }

    @classmethod
    def from_entries(cls, params: QueryParams, logs: list[LogEntry]) -> QueryResult:
        """Build a result for ``params`` whose count matches ``logs``."""
        return cls(
            logs=logs,
            count=len(logs),
            query=params.query,
            from_=params.from_timestamp,
            to=params.to_timestamp,
        )
