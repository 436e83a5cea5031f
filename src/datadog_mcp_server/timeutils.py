"""Time range parsing for log queries.

Tool arguments accept either an absolute RFC3339 timestamp or a relative
duration such as ``"1h"``, ``"30m"`` or ``"1h30m"``. A duration always means
"that long before now"; it is never relative to the other end of the range.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from datadog_mcp.errors import InvalidParamsError

_DURATION_PART = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_rfc3339(text: str) -> datetime:
    """Parse an RFC3339 timestamp such as ``2026-01-20T10:00:00Z``.

    Only the full date-time form with seconds and a ``Z`` or ``+hh:mm`` offset
    is accepted; other ISO 8601 spellings are rejected.

    Raises:
        ValueError: If ``text`` is not an RFC3339 timestamp.
    """
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError(f"not an RFC3339 timestamp: {text}")
    base, fraction, offset = match.groups()
    # datetime resolves microseconds; extra fraction digits are truncated.
    if fraction:
        base += "." + fraction[:6].ljust(6, "0")
    return datetime.fromisoformat(base + ("+00:00" if offset == "Z" else offset))


def parse_duration(text: str) -> timedelta:
    """Parse a duration string made of number/unit pairs, e.g. ``"1h30m"``.

    Accepted units are ``ns``, ``us``, ``ms``, ``s``, ``m`` and ``h``; numbers may
    carry a fraction and the whole value may be signed. A bare ``"0"`` is zero.

    Raises:
        ValueError: If ``text`` is not a duration.
    """
    sign = 1.0
    rest = text
    if rest[:1] in ("+", "-"):
        sign = -1.0 if rest[0] == "-" else 1.0
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f"invalid duration: {text!r}")

    seconds = 0.0
    position = 0
    while position < len(rest):
        match = _DURATION_PART.match(rest, position)
        if match is None:
            raise ValueError(f"invalid duration: {text!r}")
        seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()
    return timedelta(seconds=sign * seconds)


def resolve_time(value: str | None, default: datetime, now: datetime) -> datetime:
    """Resolve a ``from``/``to`` argument to an absolute instant.

    Args:
        value: Raw argument; empty or ``None`` selects ``default``.
        default: Instant used when no value is given.
        now: Reference instant that durations are subtracted from.

    Raises:
        InvalidParamsError: If the value is neither a timestamp nor a duration.
    """
    if not value:
        return default
    try:
        return parse_rfc3339(value)
    except ValueError:
        pass
    try:
        return now - parse_duration(value)
    except (ValueError, OverflowError):
        raise InvalidParamsError(
            f"invalid time format: {value} (use RFC3339 or duration like '1h')"
        ) from None


def format_rfc3339(value: datetime) -> str:
    """Format an aware datetime as RFC3339 with second precision."""
    text = value.replace(microsecond=0).isoformat()
    if value.utcoffset() == timedelta(0):
        return text[: -len("+00:00")] + "Z"
    return text
