"""Tests for the command-line entry point and the stdin stream loop."""

from __future__ import annotations

import io
import json
from unittest.mock import patch

import pytest
from structlog.testing import capture_logs

from execagent.cli import RunConfig, build_parser, main, run_stream
from execagent.tools.registry import build_registry


def _events(text: str) -> list[dict]:
    return [json.loads(line) for line in text.splitlines() if line.strip()]


class TestParser:
    def test_defaults(self) -> None:
        args = build_parser().parse_args([])
        assert args.model is None
        assert args.prompt is None
        assert args.dry_run is False
        assert args.compact_json is False
        assert args.verbose is False

    def test_short_prompt_flag(self) -> None:
        assert build_parser().parse_args(["-p", "hello"]).prompt == "hello"

    def test_compatibility_flags_accepted(self) -> None:
        args = build_parser().parse_args([
            "--json-standard", "claude",
            "--system-message", "be brief",
            "--append-system-message", "and kind",
        ])
        assert args.json_standard == "claude"
        assert args.system_message == "be brief"
        assert args.append_system_message == "and kind"

    def test_unknown_json_standard_rejected(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--json-standard", "xml"])


class TestMain:
    def test_dry_run_prompt(self, capsys, workspace) -> None:
        with patch("execagent.cli.setup_logging"), capture_logs() as logs:
            code = main([
                "--dry-run", "--compact-json", "-p", "hello",
                "--working-directory", str(workspace),
            ])
        assert code == 0
        events = _events(capsys.readouterr().out)
        assert [e["type"] for e in events] == ["step_start", "text", "step_finish"]
        assert events[1]["text"] == "[DRY RUN] Received message: hello"
        assert any(entry["event"] == "agent_started" for entry in logs)

    def test_invalid_model_emits_config_error(self, capsys) -> None:
        with patch("execagent.cli.setup_logging"), capture_logs() as logs:
            code = main(["--model", "noslash", "--compact-json", "-p", "hi"])
        assert code == 1
        events = _events(capsys.readouterr().out)
        assert len(events) == 1
        assert events[0]["type"] == "error"
        assert events[0]["error"]["name"] == "ConfigError"
        assert logs[0]["event"] == "invalid_model"

    def test_verbose_switches_to_debug(self, capsys, workspace) -> None:
        with patch("execagent.cli.setup_logging") as mock_setup, capture_logs():
            main(["--verbose", "--dry-run", "-p", "x", "--working-directory", str(workspace)])
        assert mock_setup.call_args.kwargs["log_level"] == "DEBUG"

    def test_compatibility_flags_do_not_change_output(self, capsys, workspace) -> None:
        with patch("execagent.cli.setup_logging"), capture_logs() as logs:
            code = main([
                "--dry-run", "--compact-json", "-p", "hello",
                "--working-directory", str(workspace),
                "--json-standard", "claude", "--system-message", "ignored",
            ])
        assert code == 0
        events = _events(capsys.readouterr().out)
        assert [e["type"] for e in events] == ["step_start", "text", "step_finish"]
        assert any(entry["event"] == "compat_flags_ignored" for entry in logs)


class TestRunStream:
    @pytest.mark.asyncio()
    async def test_status_then_instructions(self, workspace) -> None:
        stdin = io.StringIO(
            'plain text\n\n{"message": "m", "tools": [{"name": "list", "params": {}}]}\n'
        )
        out = io.StringIO()
        config = RunConfig(
            registry=build_registry(),
            working_directory=workspace,
            model="opencode/test",
            compact=True,
        )
        await run_stream(stdin, config, out)

        events = _events(out.getvalue())
        assert events[0] == {
            "type": "status",
            "mode": "stdin-stream",
            "message": "Agent CLI ready. Accepts JSON and plain text input.",
            "hint": "Press CTRL+C to exit.",
        }
        types = [e["type"] for e in events[1:]]
        assert types == [
            "step_start", "text", "text", "step_finish",
            "step_start", "tool_use", "step_finish",
        ]
        assert "Message: plain text" in events[2]["text"]
        assert events[6]["tool"] == "list"
