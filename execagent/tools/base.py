from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from execagent.infra.errors import InvalidArgumentsError

if TYPE_CHECKING:
    from execagent.tools.context import ToolContext

ParamsT = TypeVar("ParamsT", bound="ToolParams")


class ToolParams(BaseModel):
    """Base for per-tool parameter models. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


@dataclass(frozen=True)
class FileAttachment:
    """Binary payload returned alongside a tool result (images)."""

    id: str
    session_id: str
    message_id: str
    mime: str
    url: str
    type: str = "file"

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "sessionID": self.session_id,
            "messageID": self.message_id,
            "type": self.type,
            "mime": self.mime,
            "url": self.url,
        }


@dataclass
class ToolResult:
    title: str
    output: str
    metadata: dict[str, Any] = field(default_factory=dict)
    attachments: list[FileAttachment] | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "title": self.title,
            "output": self.output,
            "metadata": self.metadata,
        }
        if self.attachments is not None:
            d["attachments"] = [a.to_dict() for a in self.attachments]
        return d


class BaseTool(ABC):
    """Abstract base class for agent tools."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique tool id used in function calling."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Static text explaining what the tool does and how to call it."""
        ...

    @property
    @abstractmethod
    def parameters(self) -> dict:
        """JSON Schema describing the tool's input parameters."""
        ...

    @abstractmethod
    async def execute(self, arguments: dict, context: ToolContext) -> ToolResult:
        """Execute the tool with decoded-on-entry arguments and the call's context.

        Failures are raised as AgentError subclasses, never returned.
        """
        ...

    def decode(self, model: type[ParamsT], arguments: Any) -> ParamsT:
        """Validate raw JSON arguments against a parameter model.

        Raises InvalidArgumentsError naming this tool on any mismatch.
        """
        if not isinstance(arguments, dict):
            raise InvalidArgumentsError(
                self.name, f"Expected object arguments, got {type(arguments).__name__}"
            )
        try:
            return model.model_validate(arguments)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            )
            raise InvalidArgumentsError(self.name, problems) from e
