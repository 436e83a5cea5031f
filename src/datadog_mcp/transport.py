"""Stdio transport: newline-insensitive JSON in, one JSON line out per request."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from typing import Any, TextIO

from datadog_mcp.server import MCPServer

logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()


def _is_incomplete(buffer: str, error: json.JSONDecodeError) -> bool:
    """Whether decoding failed only because the value continues on a later line."""
    return error.pos >= len(buffer.rstrip())


def iter_messages(lines: Iterable[str]) -> Iterator[Any]:
    """Yield the JSON values found in ``lines``.

    Values are separated by arbitrary whitespace; one value may span several
    lines and one line may hold several values. When undecodable input is
    detected, text carried over from earlier lines is dropped and the current
    line is decoded again on its own; if that fails too, the rest of the line
    is dropped. Every drop is logged.
    """
    buffer = ""
    for line in lines:
        # Characters at the front of ``buffer`` that came from earlier lines.
        carried = len(buffer)
        buffer += line
        while True:
            stripped = buffer.lstrip()
            carried = max(0, carried - (len(buffer) - len(stripped)))
            buffer = stripped
            if not buffer:
                break
            try:
                value, end = _decoder.raw_decode(buffer)
            except json.JSONDecodeError as exc:
                if _is_incomplete(buffer, exc):
                    break
                logger.warning("Error decoding request: %s", exc)
                if carried:
                    buffer = buffer[carried:]
                    carried = 0
                    continue
                buffer = ""
                break
            yield value
            buffer = buffer[end:]
            carried = max(0, carried - end)
    if buffer.strip():
        logger.warning("Discarding incomplete request at end of input")


def serve(server: MCPServer, reader: TextIO, writer: TextIO) -> None:
    """Answer every request read from ``reader`` on ``writer`` until end of input.

    Each JSON object is handed to the dispatcher and gets exactly one response;
    arrays and scalars are logged and skipped. Requests are handled strictly one
    at a time in arrival order, and each response is flushed before the next
    request is read.
    """
    for value in iter_messages(reader):
        if not isinstance(value, dict):
            logger.warning(
                "Skipping %s value: batched or non-object requests are not supported",
                type(value).__name__,
            )
            continue
        response = server.handle_request(value)
        try:
            line = json.dumps(response.to_dict())
        except (TypeError, ValueError) as exc:
            logger.error("Error encoding response for id %r: %s", response.id, exc)
            continue
        writer.write(line + "\n")
        writer.flush()
