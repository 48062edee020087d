"""Structured error taxonomy for execagent.

Every error raised across the tool boundary inherits from AgentError and
carries a stable wire ``name`` plus kind-specific fields. Callers branch on
``to_json()["name"]`` instead of parsing messages.
"""

from __future__ import annotations

import json
from typing import Any, ClassVar

from pydantic import ValidationError


class AgentError(Exception):
    """Base exception for all execagent errors."""

    name: ClassVar[str] = "UnknownError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def data(self) -> dict[str, Any]:
        """Kind-specific fields. Subclasses extend this."""
        return {"message": self.message}

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "data": self.data()}


class PathNotFoundError(AgentError):
    """A file or directory the caller referenced does not exist."""

    name = "FileNotFound"

    def __init__(self, path: str, suggestions: list[str] | None = None) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path
        self.suggestions = list(suggestions or [])

    def data(self) -> dict[str, Any]:
        message = self.message
        if self.suggestions:
            message += "\n\nDid you mean one of these?\n" + "\n".join(self.suggestions)
        return {"path": self.path, "suggestions": self.suggestions, "message": message}


class BinaryFileError(AgentError):
    name = "BinaryFile"

    def __init__(self, path: str) -> None:
        super().__init__(f"Cannot read binary file: {path}")
        self.path = path

    def data(self) -> dict[str, Any]:
        return {"path": self.path, "message": self.message}


class InvalidArgumentsError(AgentError):
    """Tool parameters failed to decode. Always caller-fixable."""

    name = "InvalidArguments"

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(message)
        self.tool = tool

    def __str__(self) -> str:
        return f"Invalid arguments for tool '{self.tool}': {self.message}"

    def data(self) -> dict[str, Any]:
        return {"tool": self.tool, "message": self.message}


class ToolExecutionError(AgentError):
    """Tool-internal failure: ambiguous edit, bad regex, bash timeout, ..."""

    name = "ToolExecution"

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(message)
        self.tool = tool

    def __str__(self) -> str:
        return f"Tool execution failed: {self.message}"

    def data(self) -> dict[str, Any]:
        return {"tool": self.tool, "message": self.message}


class ProviderInitError(AgentError):
    name = "ProviderInitError"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider

    def data(self) -> dict[str, Any]:
        return {"provider": self.provider, "message": self.message}


class AuthenticationError(AgentError):
    name = "AuthenticationError"


class SessionError(AgentError):
    name = "SessionError"

    def __init__(self, message: str, *, session_id: str | None = None) -> None:
        super().__init__(message)
        self.session_id = session_id

    def data(self) -> dict[str, Any]:
        return {"sessionID": self.session_id, "message": self.message}


class ConfigError(AgentError):
    name = "ConfigError"


class AgentIOError(AgentError):
    """Wraps an OSError raised while touching the filesystem or a process."""

    name = "IOError"


class SerializationError(AgentError):
    name = "JSONError"


class NetworkError(AgentError):
    name = "HTTPError"


class UnknownError(AgentError):
    name = "UnknownError"


def wrap_exception(exc: BaseException) -> AgentError:
    """Project a foreign exception onto the taxonomy. AgentError passes through."""
    if isinstance(exc, AgentError):
        return exc
    if isinstance(exc, (json.JSONDecodeError, ValidationError)):
        return SerializationError(str(exc))
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return NetworkError(str(exc))
    if isinstance(exc, OSError):
        return AgentIOError(str(exc))
    return UnknownError(str(exc) or type(exc).__name__)
