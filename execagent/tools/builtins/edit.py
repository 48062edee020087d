from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import Field

from execagent.infra.errors import InvalidArgumentsError, PathNotFoundError, ToolExecutionError
from execagent.tools import edit_engine
from execagent.tools.base import BaseTool, ToolParams, ToolResult

if TYPE_CHECKING:
    from pathlib import Path

    from execagent.tools.context import ToolContext

logger = structlog.get_logger()

DESCRIPTION = """Performs exact string replacements in files.

Usage:
- The filePath parameter must be an absolute path
- oldString must exist in the file (exact match or fuzzy match fallback)
- newString must be different from oldString
- Use replaceAll=true to replace all occurrences
- The edit will fail if oldString matches multiple locations (use more context)"""


class EditParams(ToolParams):
    file_path: str = Field(alias="filePath")
    old_string: str = Field(alias="oldString")
    new_string: str = Field(alias="newString")
    replace_all: bool = Field(default=False, alias="replaceAll")


def _read_text(path: Path) -> str:
    # Strict decode: a file that is not UTF-8 is never rewritten.
    try:
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as e:
        raise ToolExecutionError("edit", f"File is not valid UTF-8 text: {path}") from e


def _write_text(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8", newline="")


class EditTool(BaseTool):
    """String replacement with whitespace-tolerant fallbacks (see edit_engine)."""

    @property
    def name(self) -> str:
        return "edit"

    @property
    def description(self) -> str:
        return DESCRIPTION

    @property
    def parameters(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "filePath": {
                    "type": "string",
                    "description": "The absolute path to the file to modify",
                },
                "oldString": {
                    "type": "string",
                    "description": "The text to replace",
                },
                "newString": {
                    "type": "string",
                    "description": "The text to replace it with (must be different from oldString)",
                },
                "replaceAll": {
                    "type": "boolean",
                    "description": "Replace all occurrences of oldString (default false)",
                },
            },
            "required": ["filePath", "oldString", "newString"],
        }

    async def execute(self, arguments: dict, context: ToolContext) -> ToolResult:
        params = self.decode(EditParams, arguments)
        if params.old_string == params.new_string:
            raise InvalidArgumentsError(self.name, "oldString and newString must be different")

        filepath = context.resolve_path(params.file_path)
        title = context.relative_path(filepath)

        # Empty oldString creates the file.
        if not params.old_string:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            _write_text(filepath, params.new_string)
            logger.info("edit_file_created", path=str(filepath))
            return self._result(
                title,
                str(filepath),
                before="",
                after=params.new_string,
                additions=len(edit_engine.split_lines(params.new_string)),
                deletions=0,
            )

        if not filepath.exists():
            raise PathNotFoundError(str(filepath))

        content_old = edit_engine.normalize_line_endings(_read_text(filepath))
        content_new = edit_engine.replace(
            content_old, params.old_string, params.new_string, params.replace_all
        )
        _write_text(filepath, content_new)

        stats = edit_engine.diff_stats(content_old, content_new)
        logger.info(
            "edit_applied",
            path=str(filepath),
            additions=stats.additions,
            deletions=stats.deletions,
        )
        return self._result(
            title,
            str(filepath),
            before=content_old,
            after=content_new,
            additions=stats.additions,
            deletions=stats.deletions,
        )

    @staticmethod
    def _result(
        title: str, file: str, *, before: str, after: str, additions: int, deletions: int
    ) -> ToolResult:
        return ToolResult(
            title=title,
            output="",
            metadata={
                "diagnostics": {},
                "diff": edit_engine.create_diff(before, after, file),
                "filediff": {
                    "file": file,
                    "before": before,
                    "after": after,
                    "additions": additions,
                    "deletions": deletions,
                },
            },
        )
