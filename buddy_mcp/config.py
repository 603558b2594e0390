"""config.py — Environment variables, protocol constants, logging.

Values are read once at import time. Credentials are gathered into a
``Settings`` object that is handed to each backend client at construction.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from buddy_mcp import __version__

__all__ = [
    "CORS_ORIGIN",
    "HTTP_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "PROTOCOL_VERSION",
    "SECRETS_REGION",
    "SERVER_NAME",
    "SERVER_VERSION",
    "SSE_HEARTBEAT_SECONDS",
    "Settings",
    "logger",
]

# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

SERVER_NAME = "buddy-mcp-server"
SERVER_VERSION = __version__
PROTOCOL_VERSION = "2024-11-05"

# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------

CORS_ORIGIN = os.environ.get("CORS_ORIGIN", "*")
SECRETS_REGION = os.environ.get("SECRETS_REGION", os.environ.get("AWS_REGION", "us-west-2"))
HTTP_TIMEOUT_SECONDS = int(os.environ.get("HTTP_TIMEOUT_SECONDS", "20"))
SSE_HEARTBEAT_SECONDS = float(os.environ.get("SSE_HEARTBEAT_SECONDS", "30"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


@dataclass(frozen=True)
class Settings:
    """Credentials and endpoints for the three backends.

    A plain value always wins over its ``*_secret_id`` counterpart; the secret
    is only fetched from Secrets Manager when the plain value is empty.
    """

    github_token: str = ""
    github_token_secret_id: str = ""
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_key_secret_id: str = ""
    vercel_token: str = ""
    vercel_token_secret_id: str = ""
    secrets_region: str = SECRETS_REGION
    http_timeout: int = HTTP_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            github_token=env.get("GITHUB_TOKEN", "").strip(),
            github_token_secret_id=env.get("GITHUB_TOKEN_SECRET_ID", "").strip(),
            supabase_url=env.get("SUPABASE_URL", "").strip(),
            supabase_service_role_key=env.get("SUPABASE_SERVICE_ROLE_KEY", "").strip(),
            supabase_key_secret_id=env.get("SUPABASE_SERVICE_ROLE_KEY_SECRET_ID", "").strip(),
            vercel_token=env.get("VERCEL_TOKEN", "").strip(),
            vercel_token_secret_id=env.get("VERCEL_TOKEN_SECRET_ID", "").strip(),
            secrets_region=env.get("SECRETS_REGION", SECRETS_REGION),
            http_timeout=int(env.get("HTTP_TIMEOUT_SECONDS", HTTP_TIMEOUT_SECONDS)),
        )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logger = logging.getLogger("buddy_mcp")
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
