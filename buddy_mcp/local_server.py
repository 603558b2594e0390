#!/usr/bin/env python3
"""local_server.py — Run the MCP endpoint as a local FastAPI app.

Every request is adapted into an API Gateway v2 style event and passed to
``lambda_handler``, so routing and envelopes match the deployed Lambda. A GET
with ``Accept: text/event-stream`` is the exception: it holds the connection
open as an event stream and sends a ``: keepalive`` comment every interval
until the client disconnects.

Usage:
    python -m buddy_mcp.local_server --port 3000
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import json
import logging
import sys
from typing import Any, AsyncIterator, Dict, Optional
from urllib.parse import parse_qsl, urlsplit

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from sse_starlette.sse import EventSourceResponse, ServerSentEvent

from buddy_mcp.config import LOG_LEVEL, SERVER_NAME, SERVER_VERSION, SSE_HEARTBEAT_SECONDS
from buddy_mcp.event_stream import KEEPALIVE_COMMENT, initialization_message
from buddy_mcp.http_utils import _cors_headers
from buddy_mcp.lambda_function import lambda_handler

logger = logging.getLogger(__name__)

# Every verb goes to lambda_handler, which answers 405 for the ones it does not serve.
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"]


def build_event(method: str, raw_path: str, headers: Dict[str, str], body: bytes) -> Dict[str, Any]:
    """Translate a raw HTTP request into an API Gateway v2 proxy event."""
    parts = urlsplit(raw_path)
    event: Dict[str, Any] = {
        "requestContext": {"http": {"method": method.upper(), "path": parts.path or "/"}},
        "rawPath": parts.path or "/",
        "headers": {k.lower(): v for k, v in headers.items()},
        "queryStringParameters": dict(parse_qsl(parts.query)) or None,
        "body": None,
        "isBase64Encoded": False,
    }
    if body:
        try:
            event["body"] = body.decode("utf-8")
        except UnicodeDecodeError:
            event["body"] = base64.b64encode(body).decode("ascii")
            event["isBase64Encoded"] = True
    return event


def _to_response(resp: Dict[str, Any]) -> Response:
    body = resp.get("body") or ""
    raw = base64.b64decode(body) if resp.get("isBase64Encoded") else body.encode("utf-8")
    return Response(
        content=raw,
        status_code=int(resp.get("statusCode", 200)),
        headers=resp.get("headers") or {},
    )


def _keepalive() -> ServerSentEvent:
    return ServerSentEvent(comment=KEEPALIVE_COMMENT, sep="\n")


async def initialization_events() -> AsyncIterator[Dict[str, str]]:
    """Yield the initialization frame, then idle until the client goes away."""
    yield {"data": json.dumps(initialization_message())}
    # Keepalives come from the response's ping task; this only holds the stream open.
    await asyncio.Event().wait()


def event_stream_response(heartbeat_interval: float) -> EventSourceResponse:
    return EventSourceResponse(
        initialization_events(),
        headers=_cors_headers(),
        ping=heartbeat_interval,
        ping_message_factory=_keepalive,
        sep="\n",
    )


def create_app(heartbeat_interval: float = SSE_HEARTBEAT_SECONDS) -> FastAPI:
    """Return a FastAPI application serving the MCP endpoint on every path."""
    app = FastAPI(title=SERVER_NAME, version=SERVER_VERSION, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.heartbeat_interval = heartbeat_interval

    @app.api_route("/{path:path}", methods=ALL_METHODS)
    async def mcp_endpoint(request: Request) -> Response:
        if request.method == "GET" and "text/event-stream" in request.headers.get("accept", ""):
            logger.info("event stream opened: %s", request.client.host if request.client else "-")
            return event_stream_response(request.app.state.heartbeat_interval)

        raw_path = request.url.path + (f"?{request.url.query}" if request.url.query else "")
        event = build_event(request.method, raw_path, dict(request.headers), await request.body())
        # lambda_handler blocks on outbound urllib calls.
        return _to_response(await run_in_threadpool(lambda_handler, event, None))

    return app


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Serve the MCP endpoint over local HTTP.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument(
        "--heartbeat",
        type=float,
        default=SSE_HEARTBEAT_SECONDS,
        help="Seconds between event-stream keepalive frames.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=LOG_LEVEL, stream=sys.stderr)
    logger.info("[START] %s v%s on http://%s:%d", SERVER_NAME, SERVER_VERSION, args.host, args.port)
    uvicorn.run(
        create_app(heartbeat_interval=args.heartbeat),
        host=args.host,
        port=args.port,
        log_level=LOG_LEVEL.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
