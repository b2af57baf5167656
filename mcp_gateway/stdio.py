"""
MCP stdio transport — line-delimited JSON-RPC over stdin/stdout.

Usage:
    python -m mcp_gateway.stdio

Each non-blank input line is one JSON-RPC message; each reply is written as
one line. Notifications produce no output. Logs go to stderr.
"""

from __future__ import annotations

import sys
from typing import TextIO

import structlog

from mcp_engine.dispatcher import Dispatcher
from mcp_engine.registry import CapabilityRegistry
from mcp_gateway.demo import register_demo_capabilities
from mcp_gateway.services.config import configure_logging, get_settings

logger = structlog.get_logger()


def send(outstream: TextIO, reply: str) -> None:
    """Write a single reply line and flush."""
    outstream.write(reply + "\n")
    outstream.flush()


def serve(dispatcher: Dispatcher, instream: TextIO, outstream: TextIO) -> int:
    """Serve messages until EOF; returns the number of messages processed."""
    processed = 0
    for line in instream:
        line = line.strip()
        if not line:
            continue
        processed += 1
        reply = dispatcher.handle(line)
        if reply is not None:
            send(outstream, reply)
    logger.info("stdin closed", messages=processed)
    return processed


def main() -> None:
    """Run the MCP server, reading JSON-RPC messages from stdin."""
    settings = get_settings()
    configure_logging(settings.log_level, stream=sys.stderr)

    registry = CapabilityRegistry()
    if settings.demo_capabilities:
        register_demo_capabilities(registry)

    dispatcher = Dispatcher(
        registry,
        server_name=settings.server_name,
        server_version=settings.server_version,
        validate_arguments=settings.validate_arguments,
    )
    serve(dispatcher, sys.stdin, sys.stdout)


if __name__ == "__main__":
    main()
