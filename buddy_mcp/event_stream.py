"""event_stream.py — Server-sent event payloads for the GET endpoint.

A stream starts with one ``server/initialized`` data frame. After that only
``: keepalive`` comment frames are sent until the client disconnects.
"""
from __future__ import annotations

import json
from typing import Any, Dict

from buddy_mcp.config import PROTOCOL_VERSION, SERVER_NAME, SERVER_VERSION

__all__ = [
    "KEEPALIVE_COMMENT",
    "initialization_message",
    "sse_data",
    "server_info",
]

KEEPALIVE_COMMENT = "keepalive"


def server_info() -> Dict[str, Any]:
    return {
        "protocolVersion": PROTOCOL_VERSION,
        "capabilities": {"tools": {}},
        "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
    }


def initialization_message() -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "method": "server/initialized",
        "params": server_info(),
    }


def sse_data(payload: Any) -> str:
    """Frame one payload as a complete ``data:`` event for buffered responses."""
    return f"data: {json.dumps(payload)}\n\n"
