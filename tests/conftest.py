"""Shared pytest fixtures for execagent tests."""

from __future__ import annotations

import pytest

from execagent.tools.context import ToolContext


@pytest.fixture()
def workspace(tmp_path):
    """An empty, isolated working directory."""
    ws = tmp_path / "workspace"
    ws.mkdir()
    return ws


@pytest.fixture()
def ctx(workspace):
    return ToolContext(
        session_id="ses_test",
        message_id="msg_test",
        working_directory=workspace,
    )
