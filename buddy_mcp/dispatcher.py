"""dispatcher.py — Route a tool name + arguments to its handler.

``Dispatcher.invoke`` never raises: unknown names, invalid arguments and
backend failures all come back as a failed ``InvocationResult`` carrying
``INTERNAL_ERROR_CODE`` and the original message text.
"""
from __future__ import annotations

import datetime as dt
import hashlib
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from mcp.types import TextContent

from buddy_mcp.config import Settings
from buddy_mcp.errors import INTERNAL_ERROR_CODE, ToolError, UnknownOperation, UpstreamFailure
from buddy_mcp.tools import ToolHandler, build_handlers

__all__ = ["Dispatcher", "InvocationResult"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvocationResult:
    content: List[TextContent] = field(default_factory=list)
    error_code: Optional[int] = None
    error_message: str = ""
    error_kind: str = ""

    @property
    def ok(self) -> bool:
        return self.error_code is None

    @classmethod
    def success(cls, content: List[TextContent]) -> "InvocationResult":
        return cls(content=content)

    @classmethod
    def failure(cls, kind: str, message: str) -> "InvocationResult":
        return cls(error_code=INTERNAL_ERROR_CODE, error_message=message, error_kind=kind)

    def to_result(self) -> Dict[str, Any]:
        """JSON-RPC ``result`` body for a successful call."""
        return {"content": [block.model_dump(exclude_none=True) for block in self.content]}

    def to_error(self) -> Dict[str, Any]:
        """JSON-RPC ``error`` body for a failed call."""
        return {"code": self.error_code, "message": self.error_message}


def _now_z() -> str:
    return dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _tool_input_hash(arguments: Any) -> str:
    payload = json.dumps(arguments or {}, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def _audit_tool_invocation(name: str, arguments: Any, result: InvocationResult, latency_ms: int) -> None:
    payload = {
        "tool_name": name,
        "input_hash": _tool_input_hash(arguments),
        "result_status": "success" if result.ok else "error",
        "error_kind": result.error_kind,
        "latency_ms": int(max(0, latency_ms)),
        "timestamp": _now_z(),
    }
    logger.info("[AUDIT] %s", json.dumps(payload, sort_keys=True))


class Dispatcher:
    def __init__(self, handlers: Mapping[str, ToolHandler]):
        self._handlers = dict(handlers)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Dispatcher":
        return cls(build_handlers(settings))

    @property
    def tool_names(self) -> List[str]:
        return list(self._handlers)

    def invoke(self, name: str, args: Any) -> InvocationResult:
        started = time.perf_counter()
        try:
            handler = self._handlers.get(name)
            if handler is None:
                raise UnknownOperation(name)
            result = InvocationResult.success(handler.execute(args))
        except ToolError as exc:
            logger.warning("tool call failed: %s (%s) %s", name, exc.kind, exc)
            result = InvocationResult.failure(exc.kind, str(exc))
        except Exception as exc:
            logger.exception("tool call raised: %s", name)
            result = InvocationResult.failure(UpstreamFailure.kind, str(exc))

        _audit_tool_invocation(name, args, result, int((time.perf_counter() - started) * 1000))
        return result
