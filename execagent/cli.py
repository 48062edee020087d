"""Command-line entry point.

Instructions come from ``--prompt`` or, one per line, from stdin. Events are
written to stdout as JSON; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import structlog
from pydantic import ValidationError

from execagent.config.settings import get_settings
from execagent.gateway.dispatch import dispatch_instruction, parse_model
from execagent.gateway.protocol import (
    ErrorEvent,
    Event,
    StatusEvent,
    parse_input_line,
    render_event,
)
from execagent.infra.errors import ConfigError, wrap_exception
from execagent.infra.logging import setup_logging
from execagent.tools.registry import build_registry

if TYPE_CHECKING:
    from execagent.gateway.protocol import InputMessage
    from execagent.tools.registry import ToolRegistry

logger = structlog.get_logger()

READY_MESSAGE = "Agent CLI ready. Accepts JSON and plain text input."
READY_HINT = "Press CTRL+C to exit."


@dataclass(frozen=True)
class RunConfig:
    registry: ToolRegistry
    working_directory: Path
    model: str
    dry_run: bool = False
    compact: bool = False


def emit(event: Event, out: TextIO, *, compact: bool) -> None:
    print(render_event(event, compact=compact), file=out, flush=True)


async def run_instruction(instruction: InputMessage, config: RunConfig, out: TextIO) -> None:
    """Dispatch one instruction, writing every event. Never raises."""
    try:
        async for event in dispatch_instruction(
            registry=config.registry,
            instruction=instruction,
            working_directory=config.working_directory,
            model=config.model,
            dry_run=config.dry_run,
        ):
            emit(event, out, compact=config.compact)
    except Exception as e:
        err = wrap_exception(e)
        logger.exception("instruction_failed", error_name=err.name)
        emit(ErrorEvent(error=err.to_json()), out, compact=config.compact)


async def run_stream(stream: TextIO, config: RunConfig, out: TextIO) -> None:
    """Announce readiness, then run each non-blank line of stream until EOF."""
    emit(
        StatusEvent(mode="stdin-stream", message=READY_MESSAGE, hint=READY_HINT),
        out,
        compact=config.compact,
    )
    while True:
        line = await asyncio.to_thread(stream.readline)
        if not line:
            break
        if not line.strip():
            continue
        await run_instruction(parse_input_line(line), config, out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="execagent",
        description="Local execution agent speaking a JSON-lines event protocol",
    )
    parser.add_argument(
        "--model", default=None,
        help="Model to use in format providerID/modelID (default: AGENT_MODEL)",
    )
    parser.add_argument(
        "-p", "--prompt", default=None,
        help="Direct prompt (bypasses stdin reading)",
    )
    parser.add_argument(
        "--working-directory", type=Path, default=None,
        help="Working directory for tools (default: current directory)",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Echo instructions without running any tool",
    )
    parser.add_argument(
        "--compact-json", action="store_true",
        help="Output each event as a single JSON line",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Log at DEBUG level",
    )
    # Accepted for command-line compatibility; no model call consumes them.
    parser.add_argument(
        "--json-standard", choices=("opencode", "claude"), default="opencode",
        help="Event JSON flavour (accepted for compatibility; only opencode is emitted)",
    )
    parser.add_argument(
        "--system-message", default=None,
        help="System message override (accepted for compatibility; unused)",
    )
    parser.add_argument(
        "--append-system-message", default=None,
        help="Text appended to the system message (accepted for compatibility; unused)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    out = sys.stdout

    try:
        settings = get_settings()
    except ValidationError as e:
        emit(ErrorEvent(error=ConfigError(str(e)).to_json()), out, compact=args.compact_json)
        return 1

    setup_logging(
        json_output=settings.log.json_output,
        log_level="DEBUG" if args.verbose else settings.log.level,
    )

    if args.json_standard != "opencode" or args.system_message or args.append_system_message:
        logger.debug(
            "compat_flags_ignored",
            json_standard=args.json_standard,
            system_message=args.system_message is not None,
            append_system_message=args.append_system_message is not None,
        )

    compact = args.compact_json or settings.agent.compact_json
    model = args.model or settings.agent.model
    try:
        parse_model(model)
    except ConfigError as e:
        logger.error("invalid_model", model=model)
        emit(ErrorEvent(error=e.to_json()), out, compact=compact)
        return 1

    config = RunConfig(
        registry=build_registry(settings.tools),
        working_directory=(
            args.working_directory or settings.agent.working_directory or Path.cwd()
        ),
        model=model,
        dry_run=args.dry_run or settings.agent.dry_run,
        compact=compact,
    )
    logger.info(
        "agent_started",
        model=model,
        working_directory=str(config.working_directory),
        dry_run=config.dry_run,
    )

    try:
        if args.prompt is not None:
            asyncio.run(run_instruction(parse_input_line(args.prompt), config, out))
        else:
            asyncio.run(run_stream(sys.stdin, config, out))
    except KeyboardInterrupt:
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
