from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from execagent.tools.base import BaseTool, ToolParams, ToolResult

if TYPE_CHECKING:
    from execagent.tools.context import ToolContext

DESCRIPTION = """Writes content to a file on the local filesystem.

Usage:
- The filePath parameter must be an absolute path
- Will create parent directories if they don't exist
- Will overwrite existing files
- Returns the path to the written file"""


class WriteParams(ToolParams):
    content: str
    file_path: str = Field(alias="filePath")


class WriteTool(BaseTool):
    """Create or overwrite a file. Not transactional."""

    @property
    def name(self) -> str:
        return "write"

    @property
    def description(self) -> str:
        return DESCRIPTION

    @property
    def parameters(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "content": {
                    "type": "string",
                    "description": "The content to write to the file",
                },
                "filePath": {
                    "type": "string",
                    "description": (
                        "The absolute path to the file to write (must be absolute, not relative)"
                    ),
                },
            },
            "required": ["content", "filePath"],
        }

    async def execute(self, arguments: dict, context: ToolContext) -> ToolResult:
        params = self.decode(WriteParams, arguments)

        filepath = context.resolve_path(params.file_path)
        exists = filepath.exists()

        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(params.content, encoding="utf-8", newline="")

        return ToolResult(
            title=context.relative_path(filepath),
            output="",
            metadata={
                "diagnostics": {},
                "filepath": str(filepath),
                "exists": exists,
            },
        )
