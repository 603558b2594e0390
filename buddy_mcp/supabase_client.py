"""supabase_client.py — Row operations against a Supabase PostgREST endpoint.

Filters are equality-only: each ``{column: value}`` pair becomes
``column=eq.value``. Mutations ask PostgREST to return the affected rows.
"""
from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, List, Mapping, Optional, Tuple

from buddy_mcp.config import Settings
from buddy_mcp.credentials import resolve_credential
from buddy_mcp.errors import UpstreamFailure
from buddy_mcp.http_client import HttpError, build_url, request_json

__all__ = ["SupabaseClient"]

logger = logging.getLogger(__name__)


def _eq_filters(filters: Optional[Mapping[str, Any]]) -> List[Tuple[str, str]]:
    pairs: List[Tuple[str, str]] = []
    for column, value in (filters or {}).items():
        if value is None:
            pairs.append((column, "is.null"))
        elif isinstance(value, bool):
            pairs.append((column, f"eq.{'true' if value else 'false'}"))
        else:
            pairs.append((column, f"eq.{value}"))
    return pairs


class SupabaseClient:
    def __init__(self, settings: Settings):
        self._settings = settings

    def _rest_base(self) -> str:
        if not self._settings.supabase_url:
            raise UpstreamFailure("SUPABASE_URL is not configured")
        return f"{self._settings.supabase_url.rstrip('/')}/rest/v1"

    def _headers(self, returning: bool = False) -> Dict[str, str]:
        key = resolve_credential(
            self._settings.supabase_service_role_key,
            self._settings.supabase_key_secret_id,
            env_name="SUPABASE_SERVICE_ROLE_KEY",
            region=self._settings.secrets_region,
        )
        headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
        }
        if returning:
            headers["Prefer"] = "return=representation"
        return headers

    def _request(
        self,
        method: str,
        table: str,
        query: List[Tuple[str, Any]],
        payload: Any = None,
        returning: bool = False,
    ) -> List[Dict[str, Any]]:
        url = build_url(self._rest_base(), urllib.parse.quote(table, safe=""), query)
        headers = self._headers(returning=returning)
        try:
            rows = request_json(
                method,
                url,
                headers=headers,
                payload=payload,
                timeout=self._settings.http_timeout,
            )
        except HttpError as exc:
            raise UpstreamFailure(exc.json_message()) from exc
        return rows if rows is not None else []

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Mapping[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        query: List[Tuple[str, Any]] = [("select", columns or "*")]
        query.extend(_eq_filters(filters))
        if limit:
            query.append(("limit", int(limit)))
        return self._request("GET", table, query)

    def insert(self, table: str, rows: Any) -> List[Dict[str, Any]]:
        inserted = self._request("POST", table, [], payload=rows, returning=True)
        logger.info("Inserted %d row(s) into %s", len(inserted), table)
        return inserted

    def update(self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]) -> List[Dict[str, Any]]:
        updated = self._request("PATCH", table, _eq_filters(filters), payload=dict(values), returning=True)
        logger.info("Updated %d row(s) in %s", len(updated), table)
        return updated

    def delete(self, table: str, filters: Mapping[str, Any]) -> List[Dict[str, Any]]:
        deleted = self._request("DELETE", table, _eq_filters(filters), returning=True)
        logger.info("Deleted %d row(s) from %s", len(deleted), table)
        return deleted
