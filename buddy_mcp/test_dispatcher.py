"""Tests for tool dispatch and failure normalization."""

from __future__ import annotations

import json
import logging
import unittest
from unittest.mock import MagicMock

from mcp.types import TextContent

from buddy_mcp.dispatcher import Dispatcher, InvocationResult
from buddy_mcp.errors import INTERNAL_ERROR_CODE, InvalidArguments, UpstreamFailure


def _handler(text="ok"):
    handler = MagicMock()
    handler.execute.return_value = [TextContent(type="text", text=text)]
    return handler


class DispatcherTests(unittest.TestCase):
    def setUp(self):
        self.handlers = {"alpha": _handler("a"), "beta": _handler("b")}
        self.dispatcher = Dispatcher(self.handlers)

    def test_routes_to_exactly_one_handler_with_args_unmodified(self):
        args = {"x": 1, "nested": {"y": [1, 2]}}
        result = self.dispatcher.invoke("beta", args)

        self.assertTrue(result.ok)
        self.assertEqual(result.content[0].text, "b")
        self.handlers["beta"].execute.assert_called_once()
        self.assertIs(self.handlers["beta"].execute.call_args.args[0], args)
        self.handlers["alpha"].execute.assert_not_called()

    def test_unknown_operation_returns_failure_naming_it(self):
        result = self.dispatcher.invoke("gamma_delta", {})

        self.assertFalse(result.ok)
        self.assertEqual(result.error_code, INTERNAL_ERROR_CODE)
        self.assertEqual(result.error_kind, "UnknownOperation")
        self.assertIn("gamma_delta", result.error_message)
        for handler in self.handlers.values():
            handler.execute.assert_not_called()

    def test_upstream_failure_keeps_message(self):
        self.handlers["alpha"].execute.side_effect = UpstreamFailure("Vercel API error: boom")
        result = self.dispatcher.invoke("alpha", {})
        self.assertEqual(result.to_error(), {"code": -32603, "message": "Vercel API error: boom"})
        self.assertEqual(result.error_kind, "UpstreamFailure")

    def test_invalid_arguments_kind_is_distinct_but_same_code(self):
        self.handlers["alpha"].execute.side_effect = InvalidArguments("missing required field(s): table")
        result = self.dispatcher.invoke("alpha", {})
        self.assertEqual(result.error_kind, "InvalidArguments")
        self.assertEqual(result.error_code, -32603)

    def test_unexpected_exception_never_escapes(self):
        self.handlers["alpha"].execute.side_effect = KeyError("table")
        with self.assertLogs("buddy_mcp.dispatcher", level="ERROR"):
            result = self.dispatcher.invoke("alpha", {})
        self.assertFalse(result.ok)
        self.assertEqual(result.error_message, "'table'")

    def test_audit_line_per_invocation(self):
        with self.assertLogs("buddy_mcp.dispatcher", level=logging.INFO) as logs:
            self.dispatcher.invoke("alpha", {"k": "v"})
        audit = [line for line in logs.output if "[AUDIT]" in line]
        self.assertEqual(len(audit), 1)
        payload = json.loads(audit[0].split("[AUDIT] ", 1)[1])
        self.assertEqual(payload["tool_name"], "alpha")
        self.assertEqual(payload["result_status"], "success")
        self.assertEqual(len(payload["input_hash"]), 64)


class InvocationResultTests(unittest.TestCase):
    def test_success_result_body(self):
        result = InvocationResult.success([TextContent(type="text", text="[]")])
        self.assertEqual(result.to_result(), {"content": [{"type": "text", "text": "[]"}]})

    def test_failure_has_no_content(self):
        result = InvocationResult.failure("UnknownOperation", "Unknown tool: x")
        self.assertEqual(result.content, [])
        self.assertFalse(result.ok)


if __name__ == "__main__":
    unittest.main()
