"""Tests for the local FastAPI adapter."""

from __future__ import annotations

import asyncio
import base64
import json
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from buddy_mcp import local_server
from buddy_mcp.local_server import (
    _keepalive,
    build_event,
    create_app,
    event_stream_response,
    initialization_events,
)


class BuildEventTests(unittest.TestCase):
    def test_event_shape(self):
        event = build_event(
            "post",
            "/api/mcp?debug=1",
            {"Content-Type": "application/json"},
            b'{"id": 1}',
        )
        self.assertEqual(event["requestContext"]["http"], {"method": "POST", "path": "/api/mcp"})
        self.assertEqual(event["rawPath"], "/api/mcp")
        self.assertEqual(event["headers"], {"content-type": "application/json"})
        self.assertEqual(event["queryStringParameters"], {"debug": "1"})
        self.assertEqual(event["body"], '{"id": 1}')
        self.assertIs(event["isBase64Encoded"], False)

    def test_without_body_or_query(self):
        event = build_event("GET", "/", {}, b"")
        self.assertIsNone(event["body"])
        self.assertIsNone(event["queryStringParameters"])

    def test_binary_body_is_base64(self):
        event = build_event("POST", "/api/mcp", {}, b"\xff\xfe")
        self.assertIs(event["isBase64Encoded"], True)
        self.assertEqual(base64.b64decode(event["body"]), b"\xff\xfe")


class AppRoutingTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(create_app(heartbeat_interval=0.05))

    def test_post_initialize(self):
        response = self.client.post("/api/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "initialize"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["access-control-allow-origin"], "*")
        self.assertEqual(response.json()["result"]["serverInfo"]["name"], "buddy-mcp-server")

    def test_get_without_event_stream_is_status(self):
        response = self.client.get("/api/mcp")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["tool_count"], 11)

    def test_options_preflight(self):
        response = self.client.options("/api/mcp")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers["access-control-allow-methods"], "GET, POST, OPTIONS")

    def test_unsupported_methods_are_405(self):
        for method in ("PUT", "PATCH", "DELETE", "TRACE"):
            with self.subTest(method=method):
                response = self.client.request(method, "/api/mcp")
                self.assertEqual(response.status_code, 405)
                self.assertEqual(response.json(), {"error": "Method not allowed"})

    def test_head_is_405(self):
        response = self.client.head("/api/mcp")
        self.assertEqual(response.status_code, 405)

    def test_invalid_body_is_500_envelope(self):
        response = self.client.post("/api/mcp", content=b"{oops", headers={"Content-Type": "application/json"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"]["code"], -32603)


class EventStreamTests(unittest.TestCase):
    def test_keepalive_frame_encoding(self):
        self.assertEqual(_keepalive().encode(), b": keepalive\n\n")

    def test_response_carries_ping_interval_and_cors(self):
        async def build():
            return event_stream_response(0.25)

        response = asyncio.run(build())
        self.assertEqual(response.ping_interval, 0.25)
        self.assertTrue(response.headers["content-type"].startswith("text/event-stream"))
        self.assertEqual(response.headers["access-control-allow-origin"], "*")

    def test_initialization_then_idle(self):
        async def scenario():
            events = initialization_events()
            first = await events.__anext__()
            with self.assertRaises(asyncio.TimeoutError):
                await asyncio.wait_for(events.__anext__(), timeout=0.05)
            return first

        first = asyncio.run(scenario())
        message = json.loads(first["data"])
        self.assertEqual(message["method"], "server/initialized")
        self.assertEqual(message["params"]["protocolVersion"], "2024-11-05")

    def test_heartbeat_interval_is_per_app(self):
        fast = create_app(heartbeat_interval=0.01)
        slow = create_app()
        self.assertEqual(fast.state.heartbeat_interval, 0.01)
        self.assertEqual(slow.state.heartbeat_interval, local_server.SSE_HEARTBEAT_SECONDS)


class MainTests(unittest.TestCase):
    def test_main_runs_uvicorn_with_parsed_arguments(self):
        with patch.object(local_server.uvicorn, "run") as run:
            self.assertEqual(local_server.main(["--port", "8123", "--heartbeat", "5"]), 0)

        run.assert_called_once()
        app = run.call_args.args[0]
        self.assertEqual(run.call_args.kwargs["host"], "127.0.0.1")
        self.assertEqual(run.call_args.kwargs["port"], 8123)
        self.assertEqual(run.call_args.kwargs["log_level"], "info")
        self.assertEqual(app.state.heartbeat_interval, 5.0)


if __name__ == "__main__":
    unittest.main()
