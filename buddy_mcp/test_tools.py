"""Tests for individual tool handlers and the tool catalog."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from buddy_mcp.config import Settings
from buddy_mcp.errors import InvalidArguments, UpstreamFailure
from buddy_mcp.tools import (
    FILE_NOT_FOUND_TEXT,
    GithubCreatePr,
    GithubReadFile,
    GithubWriteFile,
    SupabaseQuery,
    SupabaseUpdate,
    VercelDeploy,
    VercelListProjects,
    build_handlers,
    list_operations,
)

EXPECTED_TOOLS = [
    "github_read_file",
    "github_write_file",
    "github_list_files",
    "github_create_pr",
    "supabase_query",
    "supabase_insert",
    "supabase_update",
    "supabase_delete",
    "vercel_deploy",
    "vercel_get_deployment",
    "vercel_list_projects",
]


def test_catalog_is_fixed_and_ordered():
    first = list_operations()
    second = list_operations()

    assert [t.name for t in first] == EXPECTED_TOOLS
    assert [t.model_dump() for t in first] == [t.model_dump() for t in second]
    for tool in first:
        assert tool.description
        assert tool.inputSchema["type"] == "object"


def test_build_handlers_covers_catalog_and_shares_clients():
    handlers = build_handlers(Settings())
    assert list(handlers) == EXPECTED_TOOLS
    assert handlers["supabase_query"].client is handlers["supabase_delete"].client
    assert handlers["github_read_file"].client is not handlers["vercel_deploy"].client


def test_read_file_returns_text():
    client = MagicMock()
    client.read_file.return_value = "print('hi')\n"

    content = GithubReadFile(client).execute({"owner": "acme", "repo": "site", "path": "a.py"})

    assert [c.model_dump(exclude_none=True) for c in content] == [{"type": "text", "text": "print('hi')\n"}]
    client.read_file.assert_called_once_with("acme", "site", "a.py", None)


def test_read_file_missing_is_descriptive_text():
    client = MagicMock()
    client.read_file.return_value = None
    content = GithubReadFile(client).execute({"owner": "acme", "repo": "site", "path": "nope"})
    assert content[0].text == FILE_NOT_FOUND_TEXT


def test_write_file_serializes_provider_response():
    client = MagicMock()
    client.write_file.return_value = {"content": {"sha": "abc"}}
    content = GithubWriteFile(client).execute(
        {"owner": "o", "repo": "r", "path": "p", "content": "c", "message": "m", "sha": "old"}
    )
    assert json.loads(content[0].text) == {"content": {"sha": "abc"}}
    client.write_file.assert_called_once_with("o", "r", "p", "c", "m", branch=None, sha="old")


def test_create_pr_passes_branches():
    client = MagicMock()
    client.create_pull_request.return_value = {"number": 3, "url": "u", "state": "open"}
    content = GithubCreatePr(client).execute(
        {"owner": "o", "repo": "r", "title": "t", "head": "feat", "base": "main"}
    )
    assert json.loads(content[0].text)["number"] == 3
    client.create_pull_request.assert_called_once_with("o", "r", "t", "feat", "main", body=None)


def test_query_text_is_compact_json():
    client = MagicMock()
    client.select.return_value = [{"id": 5, "name": "a"}]
    content = SupabaseQuery(client).execute({"table": "users", "filters": {"id": 5}})
    assert content[0].text == '[{"id":5,"name":"a"}]'
    client.select.assert_called_once_with("users", "*", {"id": 5}, None)


def test_update_requires_filters():
    client = MagicMock()
    with pytest.raises(InvalidArguments, match="filters"):
        SupabaseUpdate(client).execute({"table": "users", "data": {"name": "z"}})
    client.update.assert_not_called()


def test_backend_failure_is_prefixed():
    client = MagicMock()
    client.select.side_effect = UpstreamFailure('relation "x" does not exist')
    with pytest.raises(UpstreamFailure) as excinfo:
        SupabaseQuery(client).execute({"table": "x"})
    assert str(excinfo.value) == 'Supabase query error: relation "x" does not exist'


def test_unexpected_exception_becomes_upstream_failure():
    client = MagicMock()
    client.create_deployment.side_effect = OSError("connection refused")
    with pytest.raises(UpstreamFailure, match="Vercel deploy error: connection refused"):
        VercelDeploy(client).execute({"projectId": "prj_1"})


def test_list_projects_default_limit():
    client = MagicMock()
    client.list_projects.return_value = []
    content = VercelListProjects(client).execute({})
    assert content[0].text == "[]"
    client.list_projects.assert_called_once_with(20)
