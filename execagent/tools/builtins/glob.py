from __future__ import annotations

import glob as _glob
import re
from pathlib import Path
from typing import TYPE_CHECKING

from execagent.infra.errors import ToolExecutionError
from execagent.tools.base import BaseTool, ToolParams, ToolResult

if TYPE_CHECKING:
    from execagent.tools.context import ToolContext

DESCRIPTION = """Fast file pattern matching tool.

Usage:
- Supports glob patterns like "**/*.js" or "src/**/*.ts"
- Returns matching file paths sorted by modification time
- Use for finding files by name patterns"""


class GlobParams(ToolParams):
    pattern: str
    path: str | None = None


def _mtime(path: Path) -> float:
    try:
        return path.stat().st_mtime
    except OSError:
        return 0.0


class GlobTool(BaseTool):
    @property
    def name(self) -> str:
        return "glob"

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
                    "description": "The glob pattern to match files against",
                },
                "path": {
                    "type": "string",
                    "description": "The directory to search in (defaults to working directory)",
                },
            },
            "required": ["pattern"],
        }

    async def execute(self, arguments: dict, context: ToolContext) -> ToolResult:
        params = self.decode(GlobParams, arguments)

        base = (
            context.working_directory
            if params.path is None
            else context.resolve_path(params.path)
        )
        if Path(params.pattern).is_absolute():
            full_pattern = params.pattern
        else:
            full_pattern = str(base / params.pattern)

        try:
            found = _glob.glob(full_pattern, recursive=True)
        except (re.error, ValueError) as e:
            raise ToolExecutionError(self.name, f"Invalid pattern: {e}") from e

        files = [Path(p) for p in found if Path(p).is_file()]
        files.sort(key=_mtime, reverse=True)
        output = [context.relative_path(p) for p in files]

        return ToolResult(
            title=params.pattern,
            output="\n".join(output),
            metadata={"count": len(output)},
        )
