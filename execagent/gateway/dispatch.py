"""Core dispatch: instruction → context → tool lookup → execute → events.

Every failure inside a tool call becomes an error event and dispatch moves on
to the next call. Nothing here raises for a tool-level problem.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

import structlog

from execagent.gateway.protocol import (
    ErrorEvent,
    Event,
    StepFinishEvent,
    StepStartEvent,
    TextEvent,
    ToolUseEvent,
)
from execagent.infra.errors import ConfigError, InvalidArgumentsError, wrap_exception
from execagent.infra.identifier import Prefix, ascending
from execagent.tools.context import ToolContext

if TYPE_CHECKING:
    from pathlib import Path

    from execagent.gateway.protocol import InputMessage
    from execagent.tools.base import ToolResult
    from execagent.tools.registry import ToolRegistry

logger = structlog.get_logger()


def parse_model(model: str) -> tuple[str, str]:
    """Split "providerID/modelID". Raises ConfigError when either half is missing."""
    provider_id, sep, model_id = model.partition("/")
    if not sep or not provider_id or not model_id:
        raise ConfigError(
            f"Invalid model format: '{model}'. Expected 'providerID/modelID'"
        )
    return provider_id, model_id


async def execute_tool_call(
    registry: ToolRegistry,
    name: str,
    params: dict[str, Any],
    context: ToolContext,
) -> ToolResult:
    """Look a tool up and run it. Every failure surfaces as an AgentError."""
    tool = registry.get(name)
    if tool is None:
        raise InvalidArgumentsError(
            name, f"Unknown tool '{name}'. Available: {', '.join(registry.names())}"
        )

    try:
        result = await tool.execute(params, context)
    except Exception as e:
        err = wrap_exception(e)
        logger.warning(
            "tool_execution_failed",
            tool_name=name,
            call_id=context.call_id,
            error_name=err.name,
            error=err.message,
        )
        if err is e:
            raise
        raise err from e

    logger.info("tool_executed", tool_name=name, call_id=context.call_id, title=result.title)
    return result


async def dispatch_instruction(
    *,
    registry: ToolRegistry,
    instruction: InputMessage,
    working_directory: Path,
    model: str,
    dry_run: bool = False,
) -> AsyncIterator[Event]:
    """Run one instruction and yield its events, step_start through step_finish.

    Explicit tool calls run in order against one shared context, each with its
    own call id. Without tool calls the agent answers with its capability listing.
    """
    session_id = ascending(Prefix.session)
    message_id = ascending(Prefix.message)
    log = logger.bind(session_id=session_id)

    yield StepStartEvent(session_id=session_id)

    if dry_run:
        log.info("dispatch_dry_run")
        yield TextEvent(
            session_id=session_id,
            text=f"[DRY RUN] Received message: {instruction.message}",
        )
    else:
        provider_id, model_id = parse_model(model)
        context = ToolContext(
            session_id=session_id,
            message_id=message_id,
            working_directory=working_directory,
        ).with_model(provider_id, model_id)

        if instruction.tools:
            for call in instruction.tools:
                call_context = context.with_call_id(ascending(Prefix.part))
                try:
                    result = await execute_tool_call(
                        registry, call.name, call.params, call_context
                    )
                except Exception as e:
                    err = wrap_exception(e)
                    yield ErrorEvent(session_id=session_id, error=err.to_json())
                    continue
                yield ToolUseEvent(
                    session_id=session_id,
                    tool=call.name,
                    call_id=call_context.call_id,
                    result=result.to_dict(),
                )
        else:
            yield TextEvent(
                session_id=session_id,
                text=(
                    f"Agent ready. {len(registry)} tools available. "
                    f"Message: {instruction.message}"
                ),
            )
            yield TextEvent(
                session_id=session_id,
                text=f"Available tools: {', '.join(registry.names())}",
            )

    yield StepFinishEvent(session_id=session_id, reason="stop")
