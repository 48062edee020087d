from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from execagent.constants import AGENT_LABEL


@dataclass(frozen=True)
class ToolContext:
    """Runtime context injected into every tool execution by the dispatcher.

    Built once per inbound instruction and never mutated; with_call_id() and
    with_model() return copies.
    """

    session_id: str
    message_id: str
    working_directory: Path
    agent: str = AGENT_LABEL
    call_id: str | None = None
    provider_id: str | None = None
    model_id: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.working_directory, Path):
            object.__setattr__(self, "working_directory", Path(self.working_directory))

    def with_call_id(self, call_id: str) -> ToolContext:
        return replace(self, call_id=call_id)

    def with_model(self, provider_id: str, model_id: str) -> ToolContext:
        return replace(self, provider_id=provider_id, model_id=model_id)

    def resolve_path(self, path: str | Path) -> Path:
        """Absolute paths are returned verbatim; relative ones join the working directory."""
        p = Path(path)
        if p.is_absolute():
            return p
        return self.working_directory / p

    def relative_path(self, path: str | Path) -> str:
        """Path relative to the working directory, or unchanged when outside it."""
        p = Path(path)
        try:
            return str(p.relative_to(self.working_directory))
        except ValueError:
            return str(p)
