from __future__ import annotations

import json
import time
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError


def timestamp_ms() -> int:
    return int(time.time() * 1000)


class ToolCallRequest(BaseModel):
    name: str
    params: dict[str, Any] = Field(default_factory=dict)


class InputMessage(BaseModel):
    """One inbound instruction. tools, when present, are run in order."""

    message: str
    tools: list[ToolCallRequest] | None = None


def parse_input_line(raw: str) -> InputMessage:
    """Parse one stdin line.

    A line that is not a JSON instruction object is taken as a plain-text message.
    """
    text = raw.strip()
    try:
        return InputMessage.model_validate(json.loads(text))
    except (json.JSONDecodeError, ValidationError):
        return InputMessage(message=text)


class Event(BaseModel):
    """Base for outbound events. Serialized with wire (camelCase) aliases."""

    model_config = ConfigDict(populate_by_name=True)

    # Keys dropped from the wire form when their value is None.
    omit_if_none: ClassVar[frozenset[str]] = frozenset()

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True)
        for key in self.omit_if_none:
            if data.get(key) is None:
                data.pop(key, None)
        return data


class StatusEvent(Event):
    omit_if_none: ClassVar[frozenset[str]] = frozenset({"hint"})

    type: Literal["status"] = "status"
    mode: str
    message: str
    hint: str | None = None


class StepStartEvent(Event):
    type: Literal["step_start"] = "step_start"
    timestamp: int = Field(default_factory=timestamp_ms)
    session_id: str = Field(alias="sessionID")


class TextEvent(Event):
    type: Literal["text"] = "text"
    timestamp: int = Field(default_factory=timestamp_ms)
    session_id: str = Field(alias="sessionID")
    text: str


class ToolUseEvent(Event):
    type: Literal["tool_use"] = "tool_use"
    timestamp: int = Field(default_factory=timestamp_ms)
    session_id: str = Field(alias="sessionID")
    tool: str
    call_id: str = Field(alias="callID")
    result: dict[str, Any]


class StepFinishEvent(Event):
    type: Literal["step_finish"] = "step_finish"
    timestamp: int = Field(default_factory=timestamp_ms)
    session_id: str = Field(alias="sessionID")
    reason: str


class ErrorEvent(Event):
    type: Literal["error"] = "error"
    timestamp: int = Field(default_factory=timestamp_ms)
    session_id: str | None = Field(default=None, alias="sessionID")
    error: dict[str, Any]


def render_event(event: Event, *, compact: bool = False) -> str:
    """JSON text for one event: a single line when compact, else indented."""
    if compact:
        return json.dumps(event.to_dict(), ensure_ascii=False, separators=(",", ":"))
    return json.dumps(event.to_dict(), ensure_ascii=False, indent=2)
