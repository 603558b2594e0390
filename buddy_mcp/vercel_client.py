"""vercel_client.py — Vercel deployments and projects."""
from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, List, Optional

from buddy_mcp.config import Settings
from buddy_mcp.credentials import resolve_credential
from buddy_mcp.errors import UpstreamFailure
from buddy_mcp.http_client import HttpError, build_url, request_json

__all__ = ["VERCEL_API_BASE", "VercelClient"]

logger = logging.getLogger(__name__)

VERCEL_API_BASE = "https://api.vercel.com"
DEFAULT_PROJECT_LIMIT = 20


class VercelClient:
    def __init__(self, settings: Settings, api_base: str = VERCEL_API_BASE):
        self._settings = settings
        self._api_base = api_base

    def _request(self, method: str, route: str, *, query=None, payload=None) -> Any:
        token = resolve_credential(
            self._settings.vercel_token,
            self._settings.vercel_token_secret_id,
            env_name="VERCEL_TOKEN",
            region=self._settings.secrets_region,
        )
        try:
            return request_json(
                method,
                build_url(self._api_base, route, query),
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": "application/json",
                },
                payload=payload,
                timeout=self._settings.http_timeout,
            )
        except HttpError as exc:
            raise UpstreamFailure(f"Vercel API error: {exc.body}") from exc

    def create_deployment(self, project_id: str, git_source: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Request a new production deployment."""
        payload: Dict[str, Any] = {"projectId": project_id, "target": "production"}
        if git_source:
            payload["gitSource"] = git_source
        data = self._request("POST", "/v13/deployments", payload=payload) or {}
        logger.info("Triggered Vercel deployment %s for project %s", data.get("id"), project_id)
        return {
            "id": data.get("id"),
            "url": data.get("url"),
            "state": data.get("readyState"),
        }

    def get_deployment(self, deployment_id: str) -> Dict[str, Any]:
        route = f"/v13/deployments/{urllib.parse.quote(deployment_id, safe='')}"
        data = self._request("GET", route) or {}
        return {
            "id": data.get("id"),
            "url": data.get("url"),
            "state": data.get("readyState"),
            "createdAt": data.get("createdAt"),
            "buildingAt": data.get("buildingAt"),
            "ready": data.get("ready"),
        }

    def list_projects(self, limit: int = DEFAULT_PROJECT_LIMIT) -> List[Dict[str, Any]]:
        data = self._request("GET", "/v9/projects", query=[("limit", limit)]) or {}
        return [
            {
                "id": project.get("id"),
                "name": project.get("name"),
                "framework": project.get("framework"),
                "updatedAt": project.get("updatedAt"),
            }
            for project in data.get("projects") or []
        ]
