"""credentials.py — Resolve backend credentials from settings or Secrets Manager.

Plain values from the environment are used as-is. When a plain value is empty
and a secret id is configured, the secret is fetched on first use and cached.
"""
from __future__ import annotations

import logging
import time
from typing import Dict, Optional, Tuple

import boto3
from botocore.config import Config

from buddy_mcp.errors import UpstreamFailure

__all__ = ["resolve_credential"]

logger = logging.getLogger(__name__)

_SECRET_TTL: float = 3600.0  # re-fetch from Secrets Manager every hour

_secretsmanager = None
_secret_cache: Dict[str, Tuple[str, float]] = {}


def _get_secretsmanager(region: str):
    """Get (or create) the Secrets Manager client singleton."""
    global _secretsmanager
    if _secretsmanager is None:
        _secretsmanager = boto3.client(
            "secretsmanager",
            region_name=region,
            config=Config(retries={"max_attempts": 3, "mode": "standard"}),
        )
    return _secretsmanager


def _get_secret(secret_id: str, region: str) -> str:
    """Fetch a secret string from Secrets Manager (cached)."""
    now = time.time()
    cached = _secret_cache.get(secret_id)
    if cached and (now - cached[1]) < _SECRET_TTL:
        return cached[0]

    resp = _get_secretsmanager(region).get_secret_value(SecretId=secret_id)
    value = str(resp.get("SecretString") or "").strip()
    if not value:
        raise UpstreamFailure(f"Secret {secret_id} has no SecretString")
    _secret_cache[secret_id] = (value, now)
    logger.info("Loaded credential from Secrets Manager: %s", secret_id)
    return value


def resolve_credential(
    value: str,
    secret_id: str,
    *,
    env_name: str,
    region: str,
    required: bool = True,
) -> Optional[str]:
    """Return the credential, or raise ``UpstreamFailure`` when required and unset."""
    if value:
        return value
    if secret_id:
        return _get_secret(secret_id, region)
    if required:
        raise UpstreamFailure(f"{env_name} is not configured")
    return None
