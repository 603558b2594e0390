"""http_utils.py — API Gateway response building, body parsing, path/method extraction."""
from __future__ import annotations

import base64
import json
from typing import Any, Dict, Optional, Tuple

from buddy_mcp.config import CORS_ORIGIN

__all__ = [
    "_cors_headers",
    "_error",
    "_header",
    "_json_body",
    "_path_method",
    "_response",
]


def _cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": CORS_ORIGIN,
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
    }


def _response(status_code: int, payload: Any) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": {**_cors_headers(), "Content-Type": "application/json"},
        "body": json.dumps(payload, default=str),
    }


def _error(status_code: int, message: str) -> Dict[str, Any]:
    return _response(status_code, {"error": message})


def _json_body(event: Dict[str, Any]) -> Any:
    """Parse the JSON body of a gateway event (handles base64).

    Raises ``ValueError`` on a missing or malformed body.
    """
    raw = event.get("body")
    if raw in (None, ""):
        raise ValueError("Request body is empty")

    if event.get("isBase64Encoded"):
        raw = base64.b64decode(raw).decode("utf-8")

    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON body: {exc}") from exc


def _header(event: Dict[str, Any], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    wanted = name.lower()
    for key, value in (event.get("headers") or {}).items():
        if str(key).lower() == wanted:
            return value
    return None


def _path_method(event: Dict[str, Any]) -> Tuple[str, str]:
    rc = event.get("requestContext") or {}
    http = rc.get("http") or {}
    method = (http.get("method") or event.get("httpMethod") or "GET").upper()
    path = http.get("path") or event.get("rawPath") or event.get("path") or "/"
    return method, path
