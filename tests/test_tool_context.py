"""Tests for ToolContext."""

from __future__ import annotations

from pathlib import Path

import pytest

from execagent.tools.context import ToolContext


def _ctx(wd: str = "/work") -> ToolContext:
    return ToolContext(session_id="ses_1", message_id="msg_1", working_directory=Path(wd))


class TestToolContext:
    def test_create_with_defaults(self) -> None:
        ctx = _ctx()
        assert ctx.agent == "agent"
        assert ctx.call_id is None
        assert ctx.provider_id is None
        assert ctx.model_id is None

    def test_string_working_directory_coerced(self) -> None:
        ctx = ToolContext(session_id="s", message_id="m", working_directory="/work")
        assert ctx.working_directory == Path("/work")

    def test_frozen_immutable(self) -> None:
        ctx = _ctx()
        with pytest.raises(AttributeError):
            ctx.session_id = "other"  # type: ignore[misc]

    def test_with_call_id_returns_copy(self) -> None:
        ctx = _ctx()
        child = ctx.with_call_id("prt_1")
        assert child.call_id == "prt_1"
        assert ctx.call_id is None
        assert child.session_id == ctx.session_id

    def test_with_model_returns_copy(self) -> None:
        ctx = _ctx()
        child = ctx.with_model("opencode", "grok")
        assert (child.provider_id, child.model_id) == ("opencode", "grok")
        assert ctx.provider_id is None

    def test_equality(self) -> None:
        assert _ctx() == _ctx()
        assert _ctx() != _ctx("/other")


class TestPaths:
    def test_resolve_relative(self) -> None:
        assert _ctx().resolve_path("src/a.py") == Path("/work/src/a.py")

    def test_resolve_absolute_verbatim(self) -> None:
        assert _ctx().resolve_path("/etc/hosts") == Path("/etc/hosts")

    def test_relative_inside(self) -> None:
        assert _ctx().relative_path("/work/src/a.py") == "src/a.py"

    def test_relative_outside_unchanged(self) -> None:
        assert _ctx().relative_path("/elsewhere/a.py") == "/elsewhere/a.py"

    def test_relative_of_working_directory_itself(self) -> None:
        assert _ctx().relative_path("/work") == "."
