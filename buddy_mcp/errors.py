"""errors.py — Tool failure taxonomy.

Every member surfaces to JSON-RPC callers with the same code
(``INTERNAL_ERROR_CODE``); ``kind`` only feeds logs and audit lines.
"""
from __future__ import annotations

__all__ = [
    "INTERNAL_ERROR_CODE",
    "InvalidArguments",
    "ToolError",
    "UnknownOperation",
    "UpstreamFailure",
]

INTERNAL_ERROR_CODE = -32603


class ToolError(Exception):
    kind = "ToolError"


class UnknownOperation(ToolError):
    kind = "UnknownOperation"

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class InvalidArguments(ToolError):
    kind = "InvalidArguments"


class UpstreamFailure(ToolError):
    kind = "UpstreamFailure"
