"""Entry point for the Datadog MCP server."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from datadog_mcp.server import MCPServer
from datadog_mcp.transport import serve
from datadog_mcp_server import __version__
from datadog_mcp_server.backend import DatadogLogsBackend, LogSearchBackend
from datadog_mcp_server.config import LOG_LEVELS, ConfigError, load_config
from datadog_mcp_server.fastmcp_adapter import build_fastmcp_app
from datadog_mcp_server.tools import build_tools

logger = logging.getLogger("datadog_mcp_server")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the server CLI."""
    parser = argparse.ArgumentParser(description="Datadog log search MCP server")
    parser.add_argument(
        "--catalog",
        action="store_true",
        help="Print the tool catalog as JSON and exit.",
    )
    parser.add_argument(
        "--transport",
        choices=("stdio", "http"),
        default="stdio",
        help="Serve JSON-RPC on stdin/stdout (default) or over HTTP via FastMCP.",
    )
    parser.add_argument("--host", default="127.0.0.1", help="HTTP bind address.")
    parser.add_argument("--port", type=int, default=8000, help="HTTP port.")
    parser.add_argument("--path", default="/mcp", help="HTTP endpoint path.")
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.lower,
        choices=LOG_LEVELS,
        help="Logging level (overrides DATADOG_MCP_LOG_LEVEL).",
    )
    return parser


def build_server(backend: LogSearchBackend | None) -> MCPServer:
    """Create a server with every tool registered against ``backend``."""
    server = MCPServer(name="datadog-mcp-server", version=__version__)
    server.register_tools(*build_tools(backend))
    return server


def log_level(name: str) -> int:
    """Map a level name such as ``"debug"`` to its :mod:`logging` number.

    Raises:
        ValueError: If ``name`` is not a standard level name.
    """
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"unknown log level: {name}")
    return level


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, load configuration and run the selected transport."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.catalog:
        print(json.dumps(build_server(None).to_catalog(), indent=2))
        return 0

    # stdout carries protocol responses, so logs go to stderr.
    logging.basicConfig(
        level=log_level(args.log_level or "info"), format=LOG_FORMAT, stream=sys.stderr
    )

    try:
        config = load_config()
    except ConfigError as exc:
        logger.error("Failed to initialize MCP server: %s", exc)
        return 1
    if args.log_level is None:
        logging.getLogger().setLevel(log_level(config.log_level))

    backend = DatadogLogsBackend.from_config(config)

    if args.transport == "http":
        app, _ = build_fastmcp_app(backend)
        app.run(transport="http", host=args.host, port=args.port, path=args.path)
        return 0

    logger.info("Serving Datadog log search on stdio (site %s)", config.site)
    serve(build_server(backend), sys.stdin, sys.stdout)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
