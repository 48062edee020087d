from __future__ import annotations

import base64
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import Field

from execagent.constants import (
    MAX_SUGGESTIONS,
    READ_DEFAULT_LIMIT,
    READ_MAX_LINE_LENGTH,
    READ_PREVIEW_LINES,
)
from execagent.infra.errors import BinaryFileError, PathNotFoundError, ToolExecutionError
from execagent.infra.identifier import Prefix, ascending
from execagent.tools.base import BaseTool, FileAttachment, ToolParams, ToolResult
from execagent.tools.filetypes import (
    IMAGE_MIME_TYPES,
    image_format,
    is_binary_file,
    validate_image_format,
)

if TYPE_CHECKING:
    from execagent.tools.context import ToolContext

logger = structlog.get_logger()

DESCRIPTION = """Reads a file from the local filesystem.

Usage:
- The filePath parameter must be an absolute path
- By default, reads up to 2000 lines from the beginning
- Optionally specify offset and limit for pagination
- Returns content with line numbers
- Can read image files (returns base64 encoded data)
- Detects and rejects binary files"""


class ReadParams(ToolParams):
    file_path: str = Field(alias="filePath")
    offset: int | None = Field(default=None, ge=0)
    limit: int | None = Field(default=None, ge=0)


def find_suggestions(path: Path) -> list[str]:
    """Up to three siblings whose name resembles the missing file's name."""
    directory = path.parent
    base = path.name.lower()
    if not directory.is_dir():
        return []

    suggestions: list[str] = []
    for entry in sorted(directory.iterdir()):
        lower = entry.name.lower()
        if base in lower or lower in base:
            suggestions.append(str(directory / entry.name))
            if len(suggestions) >= MAX_SUGGESTIONS:
                break
    return suggestions


class ReadTool(BaseTool):
    """Read text files with line numbers, or images as data-URL attachments."""

    def __init__(
        self,
        *,
        default_limit: int = READ_DEFAULT_LIMIT,
        max_line_length: int = READ_MAX_LINE_LENGTH,
    ) -> None:
        self._default_limit = default_limit
        self._max_line_length = max_line_length

    @property
    def name(self) -> str:
        return "read"

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
                    "description": "The path to the file to read",
                },
                "offset": {
                    "type": "number",
                    "description": "The line number to start reading from (0-based)",
                },
                "limit": {
                    "type": "number",
                    "description": "The number of lines to read (defaults to 2000)",
                },
            },
            "required": ["filePath"],
        }

    async def execute(self, arguments: dict, context: ToolContext) -> ToolResult:
        params = self.decode(ReadParams, arguments)

        filepath = context.resolve_path(params.file_path)
        title = context.relative_path(filepath)

        if not filepath.exists():
            raise PathNotFoundError(str(filepath), find_suggestions(filepath))

        fmt = image_format(filepath)
        if fmt is not None:
            return self._read_image(filepath, fmt, title, context)

        content = filepath.read_bytes()
        if is_binary_file(filepath, content):
            raise BinaryFileError(str(filepath))

        lines = _text_lines(content.decode("utf-8", errors="replace"))
        offset = params.offset or 0
        limit = self._default_limit if params.limit is None else params.limit
        selected = lines[offset:offset + limit]

        formatted = [
            f"{offset + i + 1:05d}| {self._truncate(line)}"
            for i, line in enumerate(selected)
        ]

        output = "<file>\n" + "\n".join(formatted)
        last_read_line = offset + len(formatted)
        if len(lines) > last_read_line:
            output += (
                "\n\n(File has more lines. Use 'offset' parameter to read beyond "
                f"line {last_read_line})"
            )
        else:
            output += f"\n\n(End of file - total {len(lines)} lines)"
        output += "\n</file>"

        return ToolResult(
            title=title,
            output=output,
            metadata={"preview": "\n".join(selected[:READ_PREVIEW_LINES])},
        )

    def _truncate(self, line: str) -> str:
        if len(line) > self._max_line_length:
            return line[: self._max_line_length] + "..."
        return line

    def _read_image(
        self, path: Path, fmt: str, title: str, context: ToolContext
    ) -> ToolResult:
        data = path.read_bytes()
        if not validate_image_format(data, fmt):
            raise ToolExecutionError(
                self.name,
                f"Image validation failed: {path} has image extension but does not "
                f"contain valid {fmt} data",
            )

        mime = IMAGE_MIME_TYPES.get(fmt, "application/octet-stream")
        payload = base64.b64encode(data).decode("ascii")
        attachment = FileAttachment(
            id=ascending(Prefix.part),
            session_id=context.session_id,
            message_id=context.message_id,
            mime=mime,
            url=f"data:{mime};base64,{payload}",
        )
        logger.debug("image_read", path=str(path), mime=mime, size=len(data))

        return ToolResult(
            title=title,
            output="Image read successfully",
            metadata={"preview": "Image read successfully"},
            attachments=[attachment],
        )


def _text_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]
