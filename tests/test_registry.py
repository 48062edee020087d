"""Tests for ToolRegistry and the builtin registration order."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from execagent.config.settings import ToolSettings
from execagent.tools.builtins.bash import BashTool
from execagent.tools.builtins.read import ReadTool
from execagent.tools.registry import ToolRegistry, build_registry


def _fake_tool(name: str) -> MagicMock:
    tool = MagicMock()
    tool.name = name
    tool.description = f"{name} tool"
    tool.parameters = {"type": "object", "properties": {}}
    return tool


class TestToolRegistry:
    def test_register_and_get(self) -> None:
        registry = ToolRegistry()
        tool = _fake_tool("a")
        registry.register(tool)
        assert registry.get("a") is tool
        assert "a" in registry
        assert len(registry) == 1

    def test_get_missing_returns_none(self) -> None:
        assert ToolRegistry().get("missing") is None

    def test_duplicate_raises(self) -> None:
        registry = ToolRegistry()
        registry.register(_fake_tool("a"))
        with pytest.raises(ValueError, match="already registered: a"):
            registry.register(_fake_tool("a"))

    def test_descriptions_in_order(self) -> None:
        registry = ToolRegistry()
        registry.register(_fake_tool("b"))
        registry.register(_fake_tool("a"))
        assert registry.descriptions() == [("b", "b tool"), ("a", "a tool")]

    def test_tools_schema_format(self) -> None:
        registry = ToolRegistry()
        registry.register(_fake_tool("a"))
        assert registry.get_tools_schema() == [
            {
                "type": "function",
                "function": {
                    "name": "a",
                    "description": "a tool",
                    "parameters": {"type": "object", "properties": {}},
                },
            }
        ]


class TestBuildRegistry:
    def test_builtin_order(self) -> None:
        registry = build_registry()
        assert registry.names() == ["read", "write", "edit", "list", "glob", "grep", "bash"]
        assert [t.name for t in registry.all()] == registry.names()

    def test_every_schema_is_an_object(self) -> None:
        for entry in build_registry().get_tools_schema():
            params = entry["function"]["parameters"]
            assert params["type"] == "object"
            assert entry["function"]["description"]

    def test_settings_applied(self) -> None:
        settings = ToolSettings(
            bash_default_timeout_ms=1_000,
            bash_max_timeout_ms=2_000,
            bash_max_output_length=50,
            read_default_limit=10,
            read_max_line_length=20,
        )
        registry = build_registry(settings)

        bash = registry.get("bash")
        assert isinstance(bash, BashTool)
        assert bash._default_timeout_ms == 1_000
        assert bash._max_timeout_ms == 2_000
        assert bash._max_output_length == 50

        read = registry.get("read")
        assert isinstance(read, ReadTool)
        assert read._default_limit == 10
        assert read._max_line_length == 20
