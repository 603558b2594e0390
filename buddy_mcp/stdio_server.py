#!/usr/bin/env python3
"""stdio_server.py — Serve the same tools over the MCP stdio transport.

Useful for desktop MCP clients that launch servers as subprocesses:
    python -m buddy_mcp.stdio_server
"""

from __future__ import annotations

import asyncio
import logging
import sys

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from buddy_mcp.config import LOG_LEVEL, SERVER_NAME, SERVER_VERSION, Settings
from buddy_mcp.dispatcher import Dispatcher
from buddy_mcp.errors import ToolError
from buddy_mcp.tools import list_operations

logger = logging.getLogger(__name__)

app = Server(SERVER_NAME)
_dispatcher = Dispatcher.from_settings(Settings.from_env())


@app.list_tools()
async def list_tools() -> list[Tool]:
    return list_operations()


@app.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    # Backend calls block on urllib; keep them off the event loop.
    result = await asyncio.to_thread(_dispatcher.invoke, name, arguments or {})
    if not result.ok:
        # The server turns a raised error into a CallToolResult with isError set.
        raise ToolError(result.error_message)
    return result.content


async def main() -> None:
    logging.basicConfig(level=LOG_LEVEL, stream=sys.stderr)
    logger.info("[START] %s v%s (stdio)", SERVER_NAME, SERVER_VERSION)

    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())


if __name__ == "__main__":
    asyncio.run(main())
