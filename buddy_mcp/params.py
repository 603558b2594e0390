"""params.py — Typed argument structs for each tool.

Each field carries its JSON type, description and wire name in dataclass
metadata. The same metadata drives both ``input_schema`` (for tools/list) and
``parse_params`` (for tools/call), so the two cannot drift apart.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from buddy_mcp.errors import InvalidArguments

__all__ = [
    "GithubCreatePrParams",
    "GithubListFilesParams",
    "GithubReadFileParams",
    "GithubWriteFileParams",
    "SupabaseDeleteParams",
    "SupabaseInsertParams",
    "SupabaseQueryParams",
    "SupabaseUpdateParams",
    "VercelDeployParams",
    "VercelGetDeploymentParams",
    "VercelListProjectsParams",
    "input_schema",
    "parse_params",
]

_MISSING = dataclasses.MISSING


def _param(json_type: Union[str, Sequence[str]], description: str, *, arg: str = "", default: Any = _MISSING):
    metadata = {"type": json_type, "description": description}
    if arg:
        metadata["arg"] = arg
    return field(default=default, metadata=metadata)


def _arg_name(f: dataclasses.Field) -> str:
    return f.metadata.get("arg") or f.name


def _is_required(f: dataclasses.Field) -> bool:
    return f.default is _MISSING and f.default_factory is _MISSING


def _matches(value: Any, json_type: Union[str, Sequence[str]]) -> bool:
    types = [json_type] if isinstance(json_type, str) else list(json_type)
    for t in types:
        if t == "string" and isinstance(value, str):
            return True
        if t == "object" and isinstance(value, Mapping):
            return True
        if t == "array" and isinstance(value, list):
            return True
        if t == "integer" and isinstance(value, int) and not isinstance(value, bool):
            return True
        if t == "number" and isinstance(value, (int, float)) and not isinstance(value, bool):
            return True
        if t == "boolean" and isinstance(value, bool):
            return True
    return False


def input_schema(params_type: type) -> Dict[str, Any]:
    """Build the JSON Schema object advertised for ``params_type``."""
    properties: Dict[str, Any] = {}
    required: List[str] = []
    for f in dataclasses.fields(params_type):
        name = _arg_name(f)
        json_type = f.metadata["type"]
        prop: Dict[str, Any] = {
            "type": json_type if isinstance(json_type, str) else list(json_type),
            "description": f.metadata["description"],
        }
        if _is_required(f):
            required.append(name)
        elif f.default is not None:
            prop["default"] = f.default
        properties[name] = prop
    schema: Dict[str, Any] = {"type": "object", "properties": properties}
    if required:
        schema["required"] = required
    return schema


def parse_params(params_type: type, args: Any, *, tool: str):
    """Check presence and JSON type of each field, then build ``params_type``."""
    if args is None:
        args = {}
    if not isinstance(args, Mapping):
        raise InvalidArguments(f"Invalid arguments for {tool}: arguments must be an object")

    values: Dict[str, Any] = {}
    missing: List[str] = []
    for f in dataclasses.fields(params_type):
        name = _arg_name(f)
        value = args.get(name)
        if value is None:
            if _is_required(f):
                missing.append(name)
            continue
        if not _matches(value, f.metadata["type"]):
            expected = f.metadata["type"]
            expected_text = expected if isinstance(expected, str) else " or ".join(expected)
            raise InvalidArguments(f"Invalid arguments for {tool}: '{name}' must be {expected_text}")
        values[f.name] = value

    if missing:
        raise InvalidArguments(
            f"Invalid arguments for {tool}: missing required field(s): {', '.join(missing)}"
        )
    return params_type(**values)


# ---------------------------------------------------------------------------
# GitHub
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GithubReadFileParams:
    owner: str = _param("string", "Repository owner (user or organization)")
    repo: str = _param("string", "Repository name")
    path: str = _param("string", "File path within the repository")
    ref: Optional[str] = _param("string", "Branch, tag or commit SHA (defaults to the default branch)", default=None)


@dataclass(frozen=True)
class GithubWriteFileParams:
    owner: str = _param("string", "Repository owner (user or organization)")
    repo: str = _param("string", "Repository name")
    path: str = _param("string", "File path within the repository")
    content: str = _param("string", "New file content (UTF-8 text)")
    message: str = _param("string", "Commit message")
    branch: Optional[str] = _param("string", "Branch to commit to (defaults to the default branch)", default=None)
    sha: Optional[str] = _param("string", "Blob SHA of the file being replaced (required when updating)", default=None)


@dataclass(frozen=True)
class GithubListFilesParams:
    owner: str = _param("string", "Repository owner (user or organization)")
    repo: str = _param("string", "Repository name")
    path: str = _param("string", "Directory path (defaults to the repository root)", default="")
    ref: Optional[str] = _param("string", "Branch, tag or commit SHA", default=None)


@dataclass(frozen=True)
class GithubCreatePrParams:
    owner: str = _param("string", "Repository owner (user or organization)")
    repo: str = _param("string", "Repository name")
    title: str = _param("string", "Pull request title")
    head: str = _param("string", "Branch containing the changes")
    base: str = _param("string", "Branch to merge into")
    body: Optional[str] = _param("string", "Pull request description", default=None)


# ---------------------------------------------------------------------------
# Supabase
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SupabaseQueryParams:
    table: str = _param("string", "Table name")
    select: str = _param("string", "Columns to select (PostgREST select syntax)", default="*")
    filters: Optional[Mapping[str, Any]] = _param("object", "Equality filters as {column: value}", default=None)
    limit: Optional[int] = _param("integer", "Maximum number of rows to return", default=None)


@dataclass(frozen=True)
class SupabaseInsertParams:
    table: str = _param("string", "Table name")
    data: Any = _param(("object", "array"), "Row object or array of row objects to insert")


@dataclass(frozen=True)
class SupabaseUpdateParams:
    table: str = _param("string", "Table name")
    filters: Mapping[str, Any] = _param("object", "Equality filters selecting the rows to update")
    data: Mapping[str, Any] = _param("object", "Column values to set")


@dataclass(frozen=True)
class SupabaseDeleteParams:
    table: str = _param("string", "Table name")
    filters: Mapping[str, Any] = _param("object", "Equality filters selecting the rows to delete")


# ---------------------------------------------------------------------------
# Vercel
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VercelDeployParams:
    project_id: str = _param("string", "Vercel project ID", arg="projectId")
    git_source: Optional[Mapping[str, Any]] = _param(
        "object",
        "Git source to deploy, e.g. {type, repo, ref}",
        arg="gitSource",
        default=None,
    )


@dataclass(frozen=True)
class VercelGetDeploymentParams:
    deployment_id: str = _param("string", "Deployment ID", arg="deploymentId")


@dataclass(frozen=True)
class VercelListProjectsParams:
    limit: int = _param("integer", "Maximum number of projects to return", default=20)
