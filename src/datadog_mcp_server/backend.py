"""Log-search backends.

The dispatcher only needs :class:`LogSearchBackend`: something that accepts a
:class:`LogSearchRequest` and returns flat log records. :class:`DatadogLogsBackend`
implements it against the Datadog Logs API v2 search endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, TypedDict

import requests

from datadog_mcp_server.config import ServerConfig

logger = logging.getLogger(__name__)

SEARCH_PATH = "/api/v2/logs/events/search"
# Newest events first.
SEARCH_SORT = "-timestamp"


@dataclass(frozen=True)
class LogSearchRequest:
    """One search against the backend, with an absolute time range."""

    query: str
    from_timestamp: str
    to_timestamp: str
    limit: int


class LogRecord(TypedDict, total=False):
    """Flat log record returned by a backend."""

    id: str
    timestamp: str | None
    message: str
    status: str
    service: str
    tags: list[str]
    attributes: dict[str, Any]


class LogSearchBackend(Protocol):
    """Anything able to run a :class:`LogSearchRequest`."""

    def search(self, request: LogSearchRequest) -> list[LogRecord]: ...


class DatadogAPIError(Exception):
    """The Datadog API rejected a request or returned an unusable body."""


def _error_summary(response: requests.Response) -> str:
    """Extract the ``errors`` list of a Datadog error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return response.reason or "no response body"
    errors = body.get("errors") if isinstance(body, dict) else None
    if not errors:
        return response.reason or "unknown error"
    parts = []
    for item in errors:
        if isinstance(item, dict):
            parts.append(str(item.get("detail") or item.get("title") or item))
        else:
            parts.append(str(item))
    return ", ".join(parts)


class DatadogLogsBackend:
    """Search Datadog logs over HTTP with :mod:`requests`."""

    def __init__(
        self,
        api_key: str,
        app_key: str,
        site: str = "datadoghq.com",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if site.startswith(("http://", "https://")):
            self.base_url = site.rstrip("/")
        else:
            self.base_url = f"https://api.{site}"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "DD-API-KEY": api_key,
            "DD-APPLICATION-KEY": app_key,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    @classmethod
    def from_config(cls, config: ServerConfig) -> DatadogLogsBackend:
        """Create a backend from validated server configuration."""
        return cls(
            api_key=config.api_key,
            app_key=config.app_key,
            site=config.site,
            timeout=config.timeout,
        )

    @staticmethod
    def build_body(request: LogSearchRequest) -> dict[str, Any]:
        """Request body for the logs search endpoint."""
        return {
            "filter": {
                "query": request.query,
                "from": request.from_timestamp,
                "to": request.to_timestamp,
            },
            "page": {"limit": request.limit},
            "sort": SEARCH_SORT,
        }

    def search(self, request: LogSearchRequest) -> list[LogRecord]:
        """Run a search and return flattened records, newest first.

        Raises:
            DatadogAPIError: On a non-2xx status or an unusable body.
            requests.RequestException: On connection failures and timeouts.
        """
        url = f"{self.base_url}{SEARCH_PATH}"
        response = self.session.post(
            url,
            json=self.build_body(request),
            headers=self.headers,
            timeout=self.timeout,
        )
        if not response.ok:
            summary = _error_summary(response)
            logger.warning(
                "Datadog search failed with HTTP %s: %s", response.status_code, summary
            )
            raise DatadogAPIError(f"HTTP {response.status_code}: {summary}")

        try:
            body = response.json()
        except ValueError as exc:
            raise DatadogAPIError(f"invalid JSON in response: {exc}") from exc
        data = body.get("data") if isinstance(body, dict) else None
        if data is None:
            return []
        if not isinstance(data, list):
            raise DatadogAPIError("unexpected response: 'data' is not a list")
        return [self._to_record(item) for item in data]

    @staticmethod
    def _to_record(item: Any) -> LogRecord:
        if not isinstance(item, dict):
            raise DatadogAPIError("unexpected response: log event is not an object")
        attributes = item.get("attributes") or {}
        tags = attributes.get("tags") or []
        if not isinstance(tags, list):
            raise DatadogAPIError("unexpected response: log tags are not a list")
        record: LogRecord = {
            "id": item.get("id") or "",
            "timestamp": attributes.get("timestamp"),
            "message": attributes.get("message") or "",
            "status": attributes.get("status") or "",
            "service": attributes.get("service") or "",
            "tags": list(tags),
        }
        extra = attributes.get("attributes")
        if extra is not None:
            record["attributes"] = extra
        return record
