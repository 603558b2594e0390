"""Shared fixtures: a stub for outbound urllib calls."""

from __future__ import annotations

import pytest

from buddy_mcp import http_client
from buddy_mcp.http_stub import StubTransport


@pytest.fixture
def http_stub(monkeypatch):
    stub = StubTransport()
    monkeypatch.setattr(http_client, "_urlopen", stub)
    return stub
