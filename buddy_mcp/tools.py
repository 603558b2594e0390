"""tools.py — One handler per tool, plus the static tool catalog.

Every handler shares the same contract: ``execute(args)`` validates ``args``
against its parameter struct, performs exactly one backend call and returns a
list of ``TextContent`` blocks. Backend failures are re-raised as
``UpstreamFailure`` prefixed with the handler's ``error_label``.
"""
from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Sequence, Type

from mcp.types import TextContent, Tool

from buddy_mcp.config import Settings
from buddy_mcp.errors import InvalidArguments, UpstreamFailure
from buddy_mcp.github_client import GithubClient
from buddy_mcp.params import (
    GithubCreatePrParams,
    GithubListFilesParams,
    GithubReadFileParams,
    GithubWriteFileParams,
    SupabaseDeleteParams,
    SupabaseInsertParams,
    SupabaseQueryParams,
    SupabaseUpdateParams,
    VercelDeployParams,
    VercelGetDeploymentParams,
    VercelListProjectsParams,
    input_schema,
    parse_params,
)
from buddy_mcp.supabase_client import SupabaseClient
from buddy_mcp.vercel_client import VercelClient

__all__ = [
    "FILE_NOT_FOUND_TEXT",
    "TOOL_CLASSES",
    "ToolHandler",
    "build_handlers",
    "list_operations",
]

FILE_NOT_FOUND_TEXT = "File not found or is a directory"


def _result_text(data: Any) -> List[TextContent]:
    """Format a result as TextContent for the tool response."""
    if isinstance(data, str):
        return [TextContent(type="text", text=data)]
    return [TextContent(type="text", text=json.dumps(data, separators=(",", ":"), default=str))]


class ToolHandler:
    name: str = ""
    description: str = ""
    params_type: type = type(None)
    error_label: str = ""

    def __init__(self, client: Any):
        self.client = client

    @classmethod
    def descriptor(cls) -> Tool:
        return Tool(name=cls.name, description=cls.description, inputSchema=input_schema(cls.params_type))

    def execute(self, args: Mapping[str, Any]) -> List[TextContent]:
        params = parse_params(self.params_type, args, tool=self.name)
        try:
            return self.run(params)
        except InvalidArguments:
            raise
        except Exception as exc:
            raise UpstreamFailure(f"{self.error_label}: {exc}") from exc

    def run(self, params: Any) -> List[TextContent]:
        raise NotImplementedError


# --- GitHub ---


class GithubReadFile(ToolHandler):
    name = "github_read_file"
    description = "Read the contents of a file from a GitHub repository."
    params_type = GithubReadFileParams
    error_label = "GitHub read file error"

    def run(self, params: GithubReadFileParams) -> List[TextContent]:
        text = self.client.read_file(params.owner, params.repo, params.path, params.ref)
        return _result_text(FILE_NOT_FOUND_TEXT if text is None else text)


class GithubWriteFile(ToolHandler):
    name = "github_write_file"
    description = (
        "Create or update a file in a GitHub repository. "
        "Pass the current blob sha when updating an existing file."
    )
    params_type = GithubWriteFileParams
    error_label = "GitHub write file error"

    def run(self, params: GithubWriteFileParams) -> List[TextContent]:
        return _result_text(
            self.client.write_file(
                params.owner,
                params.repo,
                params.path,
                params.content,
                params.message,
                branch=params.branch,
                sha=params.sha,
            )
        )


class GithubListFiles(ToolHandler):
    name = "github_list_files"
    description = "List files and directories at a path in a GitHub repository."
    params_type = GithubListFilesParams
    error_label = "GitHub list files error"

    def run(self, params: GithubListFilesParams) -> List[TextContent]:
        return _result_text(self.client.list_files(params.owner, params.repo, params.path, params.ref))


class GithubCreatePr(ToolHandler):
    name = "github_create_pr"
    description = "Open a pull request merging one branch into another."
    params_type = GithubCreatePrParams
    error_label = "GitHub create PR error"

    def run(self, params: GithubCreatePrParams) -> List[TextContent]:
        return _result_text(
            self.client.create_pull_request(
                params.owner,
                params.repo,
                params.title,
                params.head,
                params.base,
                body=params.body,
            )
        )


# --- Supabase ---


class SupabaseQuery(ToolHandler):
    name = "supabase_query"
    description = "Select rows from a Supabase table with optional equality filters and row limit."
    params_type = SupabaseQueryParams
    error_label = "Supabase query error"

    def run(self, params: SupabaseQueryParams) -> List[TextContent]:
        return _result_text(
            self.client.select(params.table, params.select, params.filters, params.limit)
        )


class SupabaseInsert(ToolHandler):
    name = "supabase_insert"
    description = "Insert one or more rows into a Supabase table and return the inserted rows."
    params_type = SupabaseInsertParams
    error_label = "Supabase insert error"

    def run(self, params: SupabaseInsertParams) -> List[TextContent]:
        return _result_text(self.client.insert(params.table, params.data))


class SupabaseUpdate(ToolHandler):
    name = "supabase_update"
    description = "Update rows matching equality filters in a Supabase table and return them."
    params_type = SupabaseUpdateParams
    error_label = "Supabase update error"

    def run(self, params: SupabaseUpdateParams) -> List[TextContent]:
        return _result_text(self.client.update(params.table, params.filters, params.data))


class SupabaseDelete(ToolHandler):
    name = "supabase_delete"
    description = "Delete rows matching equality filters from a Supabase table and return them."
    params_type = SupabaseDeleteParams
    error_label = "Supabase delete error"

    def run(self, params: SupabaseDeleteParams) -> List[TextContent]:
        return _result_text(self.client.delete(params.table, params.filters))


# --- Vercel ---


class VercelDeploy(ToolHandler):
    name = "vercel_deploy"
    description = "Trigger a new production deployment for a Vercel project."
    params_type = VercelDeployParams
    error_label = "Vercel deploy error"

    def run(self, params: VercelDeployParams) -> List[TextContent]:
        git_source = dict(params.git_source) if params.git_source else None
        return _result_text(self.client.create_deployment(params.project_id, git_source))


class VercelGetDeployment(ToolHandler):
    name = "vercel_get_deployment"
    description = "Get the status of a Vercel deployment."
    params_type = VercelGetDeploymentParams
    error_label = "Vercel get deployment error"

    def run(self, params: VercelGetDeploymentParams) -> List[TextContent]:
        return _result_text(self.client.get_deployment(params.deployment_id))


class VercelListProjects(ToolHandler):
    name = "vercel_list_projects"
    description = "List Vercel projects."
    params_type = VercelListProjectsParams
    error_label = "Vercel list projects error"

    def run(self, params: VercelListProjectsParams) -> List[TextContent]:
        return _result_text(self.client.list_projects(params.limit))


# -------------------------------------------------------------------
# Catalog
# -------------------------------------------------------------------

_GITHUB_TOOLS: Sequence[Type[ToolHandler]] = (GithubReadFile, GithubWriteFile, GithubListFiles, GithubCreatePr)
_SUPABASE_TOOLS: Sequence[Type[ToolHandler]] = (SupabaseQuery, SupabaseInsert, SupabaseUpdate, SupabaseDelete)
_VERCEL_TOOLS: Sequence[Type[ToolHandler]] = (VercelDeploy, VercelGetDeployment, VercelListProjects)

TOOL_CLASSES: Sequence[Type[ToolHandler]] = (*_GITHUB_TOOLS, *_SUPABASE_TOOLS, *_VERCEL_TOOLS)


def list_operations() -> List[Tool]:
    """Return the fixed tool catalog, in the order advertised to clients."""
    return [cls.descriptor() for cls in TOOL_CLASSES]


def build_handlers(settings: Settings) -> Dict[str, ToolHandler]:
    """Construct one handler per tool, sharing one client per backend."""
    github = GithubClient(settings)
    supabase = SupabaseClient(settings)
    vercel = VercelClient(settings)

    handlers: Dict[str, ToolHandler] = {}
    for cls in _GITHUB_TOOLS:
        handlers[cls.name] = cls(github)
    for cls in _SUPABASE_TOOLS:
        handlers[cls.name] = cls(supabase)
    for cls in _VERCEL_TOOLS:
        handlers[cls.name] = cls(vercel)
    return handlers
