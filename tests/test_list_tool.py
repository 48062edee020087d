"""Tests for the list tool and size formatting."""

from __future__ import annotations

import pytest

from execagent.infra.errors import PathNotFoundError, ToolExecutionError
from execagent.tools.builtins.list_dir import ListTool, format_size


@pytest.fixture()
def tool():
    return ListTool()


class TestFormatSize:
    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, "0B"),
            (1023, "1023B"),
            (1024, "1.0KB"),
            (1536, "1.5KB"),
            (5 * 1024 * 1024, "5.0MB"),
            (3 * 1024 * 1024 * 1024 // 2, "1.5GB"),
        ],
    )
    def test_units(self, size: int, expected: str) -> None:
        assert format_size(size) == expected


class TestListTool:
    @pytest.mark.asyncio()
    async def test_file_and_directory(self, tool, ctx, workspace):
        (workspace / "data.txt").write_bytes(b"x" * 1536)
        (workspace / "sub").mkdir()
        result = await tool.execute({}, ctx)
        assert result.output == "data.txt (1.5KB)\nsub/"
        assert result.metadata == {"count": 2}
        assert result.title == "."

    @pytest.mark.asyncio()
    async def test_lexicographic_order(self, tool, ctx, workspace):
        for name in ("b.txt", "a.txt", "C.txt"):
            (workspace / name).write_text("", encoding="utf-8")
        result = await tool.execute({"path": str(workspace)}, ctx)
        assert result.output.splitlines() == ["C.txt (0B)", "a.txt (0B)", "b.txt (0B)"]

    @pytest.mark.asyncio()
    async def test_relative_subdirectory(self, tool, ctx, workspace):
        (workspace / "pkg").mkdir()
        (workspace / "pkg" / "mod.py").write_text("pass\n", encoding="utf-8")
        result = await tool.execute({"path": "pkg"}, ctx)
        assert result.title == "pkg"
        assert result.output == "mod.py (5B)"

    @pytest.mark.asyncio()
    async def test_empty_directory(self, tool, ctx):
        result = await tool.execute({}, ctx)
        assert result.output == ""
        assert result.metadata["count"] == 0

    @pytest.mark.asyncio()
    async def test_missing_path(self, tool, ctx):
        with pytest.raises(PathNotFoundError):
            await tool.execute({"path": "ghost"}, ctx)

    @pytest.mark.asyncio()
    async def test_not_a_directory(self, tool, ctx, workspace):
        (workspace / "f.txt").write_text("", encoding="utf-8")
        with pytest.raises(ToolExecutionError, match="Not a directory"):
            await tool.execute({"path": "f.txt"}, ctx)
