from __future__ import annotations

import asyncio
import os
import signal
from typing import TYPE_CHECKING

import structlog
from pydantic import Field

from execagent.constants import (
    BASH_DEFAULT_TIMEOUT_MS,
    BASH_MAX_OUTPUT_LENGTH,
    BASH_MAX_TIMEOUT_MS,
)
from execagent.infra.errors import ToolExecutionError
from execagent.tools.base import BaseTool, ToolParams, ToolResult

if TYPE_CHECKING:
    from execagent.tools.context import ToolContext

logger = structlog.get_logger()

DESCRIPTION = """Executes a given bash command with optional timeout.

Usage:
- Command runs in the working directory
- Default timeout is 2 minutes, max is 10 minutes
- Output exceeding 30000 characters will be truncated
- Use for git, npm, docker, and other terminal operations
- Avoid using for file operations (use dedicated tools instead)"""

STDERR_SEPARATOR = "\n--- stderr ---\n"
TRUNCATION_NOTE = "\n... (output truncated)"


class BashParams(ToolParams):
    command: str
    timeout: int | None = Field(default=None, gt=0)
    description: str | None = None


def format_output(stdout: str, stderr: str, exit_code: int, max_length: int) -> str:
    output = stdout
    if stderr:
        if output:
            output += STDERR_SEPARATOR
        output += stderr

    if len(output) > max_length:
        output = output[:max_length] + TRUNCATION_NOTE

    if exit_code != 0:
        output += f"\n(exit code: {exit_code})"
    return output


class BashTool(BaseTool):
    def __init__(
        self,
        *,
        default_timeout_ms: int = BASH_DEFAULT_TIMEOUT_MS,
        max_timeout_ms: int = BASH_MAX_TIMEOUT_MS,
        max_output_length: int = BASH_MAX_OUTPUT_LENGTH,
    ) -> None:
        self._default_timeout_ms = default_timeout_ms
        self._max_timeout_ms = max_timeout_ms
        self._max_output_length = max_output_length

    @property
    def name(self) -> str:
        return "bash"

    @property
    def description(self) -> str:
        return DESCRIPTION

    @property
    def parameters(self) -> dict:
        return {
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "description": "The command to execute",
                },
                "timeout": {
                    "type": "number",
                    "description": "Optional timeout in milliseconds (max 600000)",
                },
                "description": {
                    "type": "string",
                    "description": "Clear, concise description of what this command does in 5-10 words",
                },
            },
            "required": ["command"],
        }

    async def execute(self, arguments: dict, context: ToolContext) -> ToolResult:
        params = self.decode(BashParams, arguments)

        timeout_ms = min(params.timeout or self._default_timeout_ms, self._max_timeout_ms)
        title = params.description or " ".join(params.command.split()[:3])

        try:
            proc = await asyncio.create_subprocess_exec(
                "bash",
                "-c",
                params.command,
                cwd=context.working_directory,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,
            )
        except OSError as e:
            raise ToolExecutionError(self.name, str(e)) from e

        try:
            out, err = await asyncio.wait_for(proc.communicate(), timeout=timeout_ms / 1000)
        except TimeoutError:
            _kill_group(proc)
            await proc.wait()
            logger.warning("bash_timeout", command=params.command, timeout_ms=timeout_ms)
            raise ToolExecutionError(
                self.name, f"Command timed out after {timeout_ms}ms"
            ) from None

        # Killed by a signal: returncode is negative; report it as -1.
        exit_code = proc.returncode if proc.returncode is not None else -1
        if exit_code < 0:
            exit_code = -1

        output = format_output(
            out.decode("utf-8", errors="replace"),
            err.decode("utf-8", errors="replace"),
            exit_code,
            self._max_output_length,
        )
        logger.info("bash_executed", command=params.command, exit_code=exit_code)

        return ToolResult(
            title=title,
            output=output,
            metadata={"exitCode": exit_code, "command": params.command},
        )


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    """Kill the command's whole process group, so children cannot hold the pipes open."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    except PermissionError:
        proc.kill()
