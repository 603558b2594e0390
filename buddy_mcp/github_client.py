"""github_client.py — GitHub REST v3 repository contents and pull requests.

Authenticates with a bearer token when one is configured; without a token the
calls go out unauthenticated, which still works for public repositories.
"""
from __future__ import annotations

import base64
import logging
import urllib.parse
from typing import Any, Dict, List, Optional

from buddy_mcp.config import Settings
from buddy_mcp.credentials import resolve_credential
from buddy_mcp.errors import UpstreamFailure
from buddy_mcp.http_client import HttpError, build_url, request_json

__all__ = ["GITHUB_API_BASE", "GithubClient"]

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


class GithubClient:
    def __init__(self, settings: Settings, api_base: str = GITHUB_API_BASE):
        self._settings = settings
        self._api_base = api_base

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        token = resolve_credential(
            self._settings.github_token,
            self._settings.github_token_secret_id,
            env_name="GITHUB_TOKEN",
            region=self._settings.secrets_region,
            required=False,
        )
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _request(self, method: str, route: str, *, query=None, payload=None) -> Any:
        url = build_url(self._api_base, route, query)
        try:
            return request_json(
                method,
                url,
                headers=self._headers(),
                payload=payload,
                timeout=self._settings.http_timeout,
            )
        except HttpError as exc:
            raise UpstreamFailure(exc.json_message()) from exc

    @staticmethod
    def _contents_route(owner: str, repo: str, path: str) -> str:
        quoted = urllib.parse.quote(path.strip("/"), safe="/")
        return f"/repos/{owner}/{repo}/contents/{quoted}"

    def read_file(self, owner: str, repo: str, path: str, ref: Optional[str] = None) -> Optional[str]:
        """Return decoded file text, or ``None`` for a directory or missing path."""
        try:
            data = self._request(
                "GET",
                self._contents_route(owner, repo, path),
                query=[("ref", ref)],
            )
        except UpstreamFailure as exc:
            cause = exc.__cause__
            if isinstance(cause, HttpError) and cause.status == 404:
                logger.info("GitHub path not found: %s/%s:%s@%s", owner, repo, path, ref or "default")
                return None
            raise

        if isinstance(data, dict) and isinstance(data.get("content"), str):
            # Non-UTF-8 bytes (binary blobs, latin-1 text) come back with U+FFFD.
            return base64.b64decode(data["content"]).decode("utf-8", errors="replace")
        return None

    def write_file(
        self,
        owner: str,
        repo: str,
        path: str,
        content: str,
        message: str,
        branch: Optional[str] = None,
        sha: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create or update a file; ``sha`` must match the current blob when updating."""
        payload: Dict[str, Any] = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if branch:
            payload["branch"] = branch
        if sha:
            payload["sha"] = sha
        return self._request("PUT", self._contents_route(owner, repo, path), payload=payload)

    def list_files(
        self,
        owner: str,
        repo: str,
        path: str = "",
        ref: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        data = self._request(
            "GET",
            self._contents_route(owner, repo, path),
            query=[("ref", ref or None)],
        )
        entries = data if isinstance(data, list) else [data]
        return [
            {
                "name": entry.get("name"),
                "path": entry.get("path"),
                "type": entry.get("type"),
                "size": entry.get("size"),
            }
            for entry in entries
            if isinstance(entry, dict)
        ]

    def create_pull_request(
        self,
        owner: str,
        repo: str,
        title: str,
        head: str,
        base: str,
        body: Optional[str] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"title": title, "head": head, "base": base}
        if body is not None:
            payload["body"] = body
        data = self._request("POST", f"/repos/{owner}/{repo}/pulls", payload=payload)
        logger.info("Opened pull request %s/%s#%s", owner, repo, data.get("number"))
        return {
            "number": data.get("number"),
            "url": data.get("html_url"),
            "state": data.get("state"),
        }
