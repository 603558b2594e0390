"""http_client.py — Outbound JSON-over-HTTPS calls via urllib.

One request per call, no retries. Non-2xx responses raise ``HttpError`` with
the status and raw body so each backend can extract its own error message.
"""
from __future__ import annotations

import json
import logging
import os
import ssl
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Dict, Iterable, Optional, Tuple

from buddy_mcp.config import HTTP_TIMEOUT_SECONDS, SERVER_NAME, SERVER_VERSION
from buddy_mcp.errors import UpstreamFailure

__all__ = [
    "HttpError",
    "build_url",
    "request_json",
]

logger = logging.getLogger(__name__)

HTTP_USER_AGENT = os.environ.get("HTTP_USER_AGENT", f"{SERVER_NAME}/{SERVER_VERSION}")


class HttpError(UpstreamFailure):
    """Upstream answered with a non-2xx status."""

    def __init__(self, status: int, body: str, url: str = ""):
        super().__init__(f"HTTP {status}: {body}")
        self.status = status
        self.body = body
        self.url = url

    def json_message(self) -> str:
        """Return the ``message`` field of a JSON error body, else the raw body."""
        try:
            parsed = json.loads(self.body) if self.body else {}
        except json.JSONDecodeError:
            return self.body
        if isinstance(parsed, dict):
            message = parsed.get("message")
            if not message and isinstance(parsed.get("error"), dict):
                message = parsed["error"].get("message")
            if message:
                return str(message)
        return self.body


def _build_ssl_context() -> Optional[ssl.SSLContext]:
    """Build an SSL context with certifi fallback for reliable HTTPS calls."""
    cert_file = str(os.environ.get("SSL_CERT_FILE", "") or "").strip()
    if cert_file:
        try:
            return ssl.create_default_context(cafile=cert_file)
        except (OSError, ssl.SSLError) as exc:
            logger.warning("SSL_CERT_FILE %r is not usable: %s", cert_file, exc)

    try:
        import certifi

        return ssl.create_default_context(cafile=certifi.where())
    except (ImportError, OSError, ssl.SSLError):
        return ssl.create_default_context()


_SSL_CTX = _build_ssl_context()


def _urlopen(req: urllib.request.Request, timeout: float):
    if _SSL_CTX is not None:
        return urllib.request.urlopen(req, timeout=timeout, context=_SSL_CTX)
    return urllib.request.urlopen(req, timeout=timeout)


def build_url(base: str, path: str, query: Optional[Iterable[Tuple[str, Any]]] = None) -> str:
    """Join ``base`` and ``path`` and append ``query`` pairs, skipping ``None`` values."""
    url = f"{base.rstrip('/')}/{path.lstrip('/')}" if path else base.rstrip("/")
    pairs = [(k, v) for k, v in (query or []) if v is not None]
    if pairs:
        url = f"{url}?{urllib.parse.urlencode(pairs)}"
    return url


def request_json(
    method: str,
    url: str,
    *,
    headers: Optional[Dict[str, str]] = None,
    payload: Any = None,
    timeout: float = HTTP_TIMEOUT_SECONDS,
) -> Any:
    """Perform one HTTP call and return the decoded JSON body (``None`` if empty)."""
    all_headers = {
        "Accept": "application/json",
        "User-Agent": HTTP_USER_AGENT,
    }
    all_headers.update(headers or {})
    body = None
    if payload is not None:
        all_headers.setdefault("Content-Type", "application/json")
        body = json.dumps(payload).encode("utf-8")

    req = urllib.request.Request(url=url, method=method.upper(), headers=all_headers, data=body)
    try:
        with _urlopen(req, timeout=timeout) as resp:
            text = resp.read().decode("utf-8")
    except urllib.error.HTTPError as exc:
        raw = exc.read().decode("utf-8", errors="replace") if exc.fp is not None else ""
        logger.error("%s %s failed: %s %s", method.upper(), url, exc.code, raw[:500])
        raise HttpError(exc.code, raw, url) from exc

    return json.loads(text) if text.strip() else None
