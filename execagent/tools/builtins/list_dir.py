from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from execagent.infra.errors import PathNotFoundError, ToolExecutionError
from execagent.tools.base import BaseTool, ToolParams, ToolResult

if TYPE_CHECKING:
    from execagent.tools.context import ToolContext

DESCRIPTION = """Lists files and directories in a given path.

Usage:
- If no path is specified, lists the current working directory
- Returns file names and sizes
- Directories are marked with a trailing slash"""

_KB = 1024
_MB = _KB * 1024
_GB = _MB * 1024


class ListParams(ToolParams):
    path: str | None = None


def format_size(size: int) -> str:
    """Human-readable size: bytes as-is, larger units with one decimal."""
    if size >= _GB:
        return f"{size / _GB:.1f}GB"
    if size >= _MB:
        return f"{size / _MB:.1f}MB"
    if size >= _KB:
        return f"{size / _KB:.1f}KB"
    return f"{size}B"


def list_directory(path: Path) -> list[str]:
    entries: list[str] = []
    with os.scandir(path) as it:
        for entry in it:
            if entry.is_dir():
                entries.append(f"{entry.name}/")
            else:
                entries.append(f"{entry.name} ({format_size(entry.stat().st_size)})")
    entries.sort()
    return entries


class ListTool(BaseTool):
    @property
    def name(self) -> str:
        return "list"

    @property
    def description(self) -> str:
        return DESCRIPTION

    @property
    def parameters(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "The path to list (defaults to current directory)",
                },
            },
        }

    async def execute(self, arguments: dict, context: ToolContext) -> ToolResult:
        params = self.decode(ListParams, arguments)

        dir_path = (
            context.working_directory
            if params.path is None
            else context.resolve_path(params.path)
        )
        if not dir_path.exists():
            raise PathNotFoundError(str(dir_path))
        if not dir_path.is_dir():
            raise ToolExecutionError(self.name, f"Not a directory: {dir_path}")

        entries = list_directory(dir_path)
        title = context.relative_path(dir_path)

        return ToolResult(
            title=title or ".",
            output="\n".join(entries),
            metadata={"count": len(entries)},
        )
