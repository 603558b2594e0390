"""Tests for event-stream payloads."""

from __future__ import annotations

import json
import unittest

from buddy_mcp.event_stream import (
    KEEPALIVE_COMMENT,
    initialization_message,
    server_info,
    sse_data,
)


class FrameFormatTests(unittest.TestCase):
    def test_sse_data_is_one_complete_frame(self):
        self.assertEqual(sse_data({"a": 1}), 'data: {"a": 1}\n\n')

    def test_initialization_message_shape(self):
        message = initialization_message()
        self.assertEqual(message["jsonrpc"], "2.0")
        self.assertEqual(message["method"], "server/initialized")
        self.assertNotIn("id", message)
        self.assertEqual(message["params"], server_info())
        self.assertEqual(message["params"]["serverInfo"]["name"], "buddy-mcp-server")

    def test_initialization_frame_round_trips(self):
        frame = sse_data(initialization_message())
        self.assertTrue(frame.startswith("data: "))
        self.assertEqual(json.loads(frame[len("data: "):]), initialization_message())

    def test_keepalive_comment_text(self):
        self.assertEqual(KEEPALIVE_COMMENT, "keepalive")


if __name__ == "__main__":
    unittest.main()
