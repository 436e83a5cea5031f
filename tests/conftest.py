"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from datadog_mcp.server import MCPServer
from datadog_mcp_server.backend import LogRecord, LogSearchRequest
from datadog_mcp_server.tools import build_tools


class FakeBackend:
    """In-memory backend recording every search it receives."""

    def __init__(
        self,
        records: list[LogRecord] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.records = records or []
        self.error = error
        self.requests: list[LogSearchRequest] = []

    def search(self, request: LogSearchRequest) -> list[LogRecord]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture()
def fixed_now() -> datetime:
    """Reference instant used as the clock in tool tests."""
    return datetime(2026, 1, 20, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture()
def sample_records() -> list[LogRecord]:
    """Two Datadog-like records, newest first."""
    return [
        {
            "id": "AQAAAYx1",
            "timestamp": "2026-01-20T11:59:30.000Z",
            "message": "upstream connect error",
            "status": "error",
            "service": "web",
            "tags": ["env:prod", "team:edge"],
            "attributes": {"http": {"status_code": 503}},
        },
        {
            "id": "AQAAAYx0",
            "timestamp": "2026-01-20T11:58:00.000Z",
            "message": "request timed out",
            "status": "error",
            "service": "web",
            "tags": ["env:prod"],
        },
    ]


@pytest.fixture()
def backend(sample_records: list[LogRecord]) -> FakeBackend:
    """Backend returning the sample records."""
    return FakeBackend(sample_records)


@pytest.fixture()
def server(backend: FakeBackend, fixed_now: datetime) -> MCPServer:
    """Server with query_logs registered against the fake backend."""
    server = MCPServer()
    server.register_tools(*build_tools(backend, clock=lambda: fixed_now))
    return server


@pytest.fixture()
def anyio_backend() -> str:
    """Run anyio-marked tests on asyncio, the backend FastMCP supports."""
    return "asyncio"
