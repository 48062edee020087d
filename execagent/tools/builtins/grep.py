from __future__ import annotations

import os
import re
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import Field

from execagent.infra.errors import ToolExecutionError
from execagent.tools.base import BaseTool, ToolParams, ToolResult
from execagent.tools.edit_engine import split_lines

if TYPE_CHECKING:
    from execagent.tools.context import ToolContext

DESCRIPTION = r"""A powerful search tool for finding text patterns in files.

Usage:
- Supports full regex syntax (e.g., "log.*Error", "function\s+\w+")
- Filter files with glob parameter (e.g., "*.js", "**/*.tsx")
- Output modes: "content" shows matching lines, "files_with_matches" shows only file paths, "count" shows match counts per file
- Use -C/-A/-B for context lines around matches"""

OutputMode = Literal["content", "files_with_matches", "count"]


class GrepParams(ToolParams):
    pattern: str
    path: str | None = None
    glob: str | None = None
    output_mode: OutputMode = "files_with_matches"
    case_insensitive: bool = Field(default=False, alias="-i")
    line_numbers: bool = Field(default=True, alias="-n")
    context_before: int | None = Field(default=None, ge=0, alias="-B")
    context_after: int | None = Field(default=None, ge=0, alias="-A")
    context: int | None = Field(default=None, ge=0, alias="-C")
    head_limit: int | None = Field(default=None, ge=0)


def _is_hidden(name: str) -> bool:
    return name.startswith(".") and name not in (".", "..")


def _matches_glob(name: str, pattern: str) -> bool:
    # Only the file name is matched, so a leading "**/" adds nothing.
    while pattern.startswith("**/"):
        pattern = pattern[3:]
    return fnmatch(name, pattern)


def collect_files(path: Path, glob_filter: str | None) -> list[Path]:
    """Files under path (or path itself), skipping hidden entries, sorted."""
    if path.is_file():
        return [path]
    if not path.is_dir():
        return []

    files: list[Path] = []
    for root, dirs, names in os.walk(path, followlinks=True):
        dirs[:] = sorted(d for d in dirs if not _is_hidden(d))
        for name in sorted(names):
            if _is_hidden(name):
                continue
            if glob_filter and not _matches_glob(name, glob_filter):
                continue
            files.append(Path(root) / name)
    return files


class GrepTool(BaseTool):
    @property
    def name(self) -> str:
        return "grep"

    @property
    def description(self) -> str:
        return DESCRIPTION

    @property
    def parameters(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": "The regular expression pattern to search for",
                },
                "path": {
                    "type": "string",
                    "description": "File or directory to search in",
                },
                "glob": {
                    "type": "string",
                    "description": "Glob pattern to filter files",
                },
                "output_mode": {
                    "type": "string",
                    "enum": ["content", "files_with_matches", "count"],
                    "description": "Output mode",
                },
                "-i": {"type": "boolean", "description": "Case insensitive search"},
                "-n": {"type": "boolean", "description": "Show line numbers"},
                "-B": {"type": "number", "description": "Lines of context before match"},
                "-A": {"type": "number", "description": "Lines of context after match"},
                "-C": {"type": "number", "description": "Lines of context around match"},
                "head_limit": {"type": "number", "description": "Maximum results to return"},
            },
            "required": ["pattern"],
        }

    async def execute(self, arguments: dict, context: ToolContext) -> ToolResult:
        params = self.decode(GrepParams, arguments)

        search_path = (
            context.working_directory
            if params.path is None
            else context.resolve_path(params.path)
        )

        flags = re.IGNORECASE if params.case_insensitive else 0
        try:
            regex = re.compile(params.pattern, flags)
        except re.error as e:
            raise ToolExecutionError(self.name, f"Invalid regex: {e}") from e

        before = params.context if params.context is not None else (params.context_before or 0)
        after = params.context if params.context is not None else (params.context_after or 0)

        results: list[str] = []
        match_count = 0
        for file_path in collect_files(search_path, params.glob):
            try:
                content = file_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue

            file_matches = _search_file(
                content,
                regex,
                context.relative_path(file_path),
                params.output_mode,
                params.line_numbers,
                before,
                after,
            )
            if not file_matches:
                continue

            match_count += len(file_matches)
            results.extend(file_matches)
            if params.head_limit is not None and len(results) >= params.head_limit:
                del results[params.head_limit:]
                break

        return ToolResult(
            title=params.pattern,
            output="\n".join(results),
            metadata={"count": match_count},
        )


def _search_file(
    content: str,
    regex: re.Pattern[str],
    rel_path: str,
    output_mode: OutputMode,
    line_numbers: bool,
    before: int,
    after: int,
) -> list[str]:
    # LF only; form feeds and other separators stay inside their line.
    lines = [line.removesuffix("\r") for line in split_lines(content)]
    hits = [i for i, line in enumerate(lines) if regex.search(line)]
    if not hits:
        return []

    if output_mode == "files_with_matches":
        return [rel_path]
    if output_mode == "count":
        return [f"{rel_path}:{len(hits)}"]

    def fmt(i: int) -> str:
        if line_numbers:
            return f"{rel_path}:{i + 1}: {lines[i]}"
        return f"{rel_path}: {lines[i]}"

    out: list[str] = []
    for i in hits:
        out.extend(fmt(j) for j in range(max(0, i - before), i))
        out.append(fmt(i))
        out.extend(fmt(j) for j in range(i + 1, min(len(lines), i + after + 1)))
    return out
