"""In-memory stand-in for outbound urllib calls, shared by the client tests."""

from __future__ import annotations

import io
import json
import urllib.error
from typing import Any, Callable, List, Tuple
from urllib.parse import parse_qsl, urlsplit


class FakeResponse:
    def __init__(self, body: bytes):
        self._body = body

    def read(self) -> bytes:
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class StubTransport:
    """Stands in for ``http_client._urlopen``; ``handler(req)`` returns (status, payload)."""

    def __init__(self, handler: Callable[[Any], Tuple[int, Any]] = None):
        self.requests: List[Any] = []
        self.handler = handler or (lambda req: (200, {}))

    def __call__(self, req, timeout):
        self.requests.append(req)
        status, payload = self.handler(req)
        if isinstance(payload, bytes):
            body = payload
        elif isinstance(payload, str):
            body = payload.encode("utf-8")
        else:
            body = json.dumps(payload).encode("utf-8")
        if status >= 400:
            raise urllib.error.HTTPError(req.full_url, status, "error", None, io.BytesIO(body))
        return FakeResponse(body)

    @property
    def last(self):
        return self.requests[-1]


def req_path(req) -> str:
    return urlsplit(req.full_url).path


def req_query(req) -> List[Tuple[str, str]]:
    return parse_qsl(urlsplit(req.full_url).query, keep_blank_values=True)


def req_json(req) -> Any:
    return json.loads(req.data.decode("utf-8")) if req.data else None
