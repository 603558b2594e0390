"""lambda_function.py — MCP endpoint for GitHub, Supabase and Vercel tools.

Routes (API Gateway HTTP API proxy, single path):
    GET     /api/mcp   — status payload, or an event stream when the client
                         sends ``Accept: text/event-stream``
    POST    /api/mcp   — one JSON-RPC envelope in, one envelope out
    OPTIONS /api/mcp   — CORS preflight

JSON-RPC methods:
    initialize   — static server/capability info
    tools/list   — the fixed tool catalog
    tools/call   — dispatch to a tool handler
    anything else answers with an empty result.

Environment variables:
    GITHUB_TOKEN, SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, VERCEL_TOKEN
    *_SECRET_ID variants resolved through Secrets Manager when the plain value is empty
    CORS_ORIGIN          default: *
    LOG_LEVEL            default: INFO
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from buddy_mcp.config import PROTOCOL_VERSION, SERVER_NAME, SERVER_VERSION, Settings
from buddy_mcp.dispatcher import Dispatcher
from buddy_mcp.errors import INTERNAL_ERROR_CODE
from buddy_mcp.event_stream import initialization_message, server_info, sse_data
from buddy_mcp.http_utils import _cors_headers, _error, _header, _json_body, _path_method, _response
from buddy_mcp.tools import list_operations

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logger = logging.getLogger()
logger.setLevel(logging.INFO)

METHODS_SUPPORTED = ["initialize", "tools/list", "tools/call"]

# ---------------------------------------------------------------------------
# Dispatcher singleton (built on first request, reused across warm invocations)
# ---------------------------------------------------------------------------

_dispatcher: Optional[Dispatcher] = None


def _get_dispatcher() -> Dispatcher:
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = Dispatcher.from_settings(Settings.from_env())
    return _dispatcher


# ---------------------------------------------------------------------------
# JSON-RPC envelopes
# ---------------------------------------------------------------------------


def _jsonrpc_response(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return _response(200, {"jsonrpc": "2.0", "id": request_id, "result": result})


def _jsonrpc_error(request_id: Any, *, code: int, message: str) -> Dict[str, Any]:
    return _response(
        200,
        {"jsonrpc": "2.0", "id": request_id, "error": {"code": code, "message": message}},
    )


def _tools_list_result() -> Dict[str, Any]:
    return {"tools": [tool.model_dump(exclude_none=True) for tool in list_operations()]}


# ---------------------------------------------------------------------------
# Route handlers
# ---------------------------------------------------------------------------


def _handle_message(event: Dict[str, Any]) -> Dict[str, Any]:
    message = _json_body(event)
    if not isinstance(message, dict):
        raise ValueError("JSON-RPC message must be an object")

    request_id = message.get("id")
    method_name = message.get("method")

    if method_name == "initialize":
        return _jsonrpc_response(request_id, server_info())

    if method_name == "tools/list":
        return _jsonrpc_response(request_id, _tools_list_result())

    if method_name == "tools/call":
        params = message.get("params") or {}
        if not isinstance(params, dict):
            raise ValueError("tools/call requires params to be an object")
        tool_name = str(params.get("name") or "")
        args = params.get("arguments")
        result = _get_dispatcher().invoke(tool_name, {} if args is None else args)
        if result.ok:
            return _jsonrpc_response(request_id, result.to_result())
        return _jsonrpc_error(request_id, code=result.error_code, message=result.error_message)

    logger.info("Unhandled JSON-RPC method %r; answering with empty result", method_name)
    return _jsonrpc_response(request_id, {})


def _handle_get(event: Dict[str, Any]) -> Dict[str, Any]:
    accept = _header(event, "accept") or ""
    if "text/event-stream" in accept:
        # Buffered Lambda responses cannot stay open; emit the init frame only.
        return {
            "statusCode": 200,
            "headers": {
                **_cors_headers(),
                "Content-Type": "text/event-stream",
                "Cache-Control": "no-cache",
            },
            "body": sse_data(initialization_message()),
        }

    return _response(
        200,
        {
            "success": True,
            "name": SERVER_NAME,
            "version": SERVER_VERSION,
            "protocolVersion": PROTOCOL_VERSION,
            "transport": "http",
            "methods_supported": METHODS_SUPPORTED,
            "tool_count": len(list_operations()),
        },
    )


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------


def lambda_handler(event: Dict, context: Any) -> Dict:
    method, path = _path_method(event)

    # CORS preflight
    if method == "OPTIONS":
        return {"statusCode": 200, "headers": _cors_headers(), "body": ""}

    if method == "GET":
        return _handle_get(event)

    if method == "POST":
        try:
            return _handle_message(event)
        except Exception as exc:
            logger.exception("MCP message handling failed: %s %s", method, path)
            return _response(
                500,
                {"jsonrpc": "2.0", "error": {"code": INTERNAL_ERROR_CODE, "message": str(exc)}},
            )

    return _error(405, "Method not allowed")
