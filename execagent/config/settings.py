from __future__ import annotations

from pathlib import Path
from typing import Self

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from execagent.constants import (
    BASH_DEFAULT_TIMEOUT_MS,
    BASH_MAX_OUTPUT_LENGTH,
    BASH_MAX_TIMEOUT_MS,
    DEFAULT_MODEL,
    READ_DEFAULT_LIMIT,
    READ_MAX_LINE_LENGTH,
)

# Load .env once at module import so every BaseSettings subclass sees the env vars
load_dotenv()


class AgentSettings(BaseSettings):
    """Process-level settings. Env vars prefixed with AGENT_."""

    model_config = SettingsConfigDict(env_prefix="AGENT_")

    working_directory: Path | None = None  # None = process cwd
    model: str = DEFAULT_MODEL
    compact_json: bool = False
    dry_run: bool = False

    @field_validator("model")
    @classmethod
    def _validate_model(cls, v: str) -> str:
        provider, sep, model = v.partition("/")
        if not sep or not provider or not model:
            raise ValueError(f"AGENT_MODEL must be 'providerID/modelID' (got '{v}')")
        return v


class ToolSettings(BaseSettings):
    """Limits applied by the builtin tools. Env vars prefixed with TOOLS_."""

    model_config = SettingsConfigDict(env_prefix="TOOLS_")

    bash_default_timeout_ms: int = Field(BASH_DEFAULT_TIMEOUT_MS, gt=0)
    bash_max_timeout_ms: int = Field(BASH_MAX_TIMEOUT_MS, gt=0)
    bash_max_output_length: int = Field(BASH_MAX_OUTPUT_LENGTH, gt=0)
    read_default_limit: int = Field(READ_DEFAULT_LIMIT, gt=0)
    read_max_line_length: int = Field(READ_MAX_LINE_LENGTH, gt=0)

    @model_validator(mode="after")
    def _validate(self) -> Self:
        if self.bash_default_timeout_ms > self.bash_max_timeout_ms:
            raise ValueError(
                f"bash_default_timeout_ms ({self.bash_default_timeout_ms}) must not exceed "
                f"bash_max_timeout_ms ({self.bash_max_timeout_ms})"
            )
        return self


class LogSettings(BaseSettings):
    """Logging settings. Env vars prefixed with LOG_."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    json_output: bool = True

    @field_validator("level")
    @classmethod
    def _validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.upper()
        if v not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(allowed)} (got '{v}')")
        return v


class Settings(BaseSettings):
    """Root settings composing all sub-configurations."""

    model_config = SettingsConfigDict(extra="ignore")

    agent: AgentSettings = Field(default_factory=AgentSettings)
    tools: ToolSettings = Field(default_factory=ToolSettings)
    log: LogSettings = Field(default_factory=LogSettings)


def get_settings() -> Settings:
    """Load and validate settings. Raises ValidationError on invalid values."""
    return Settings()
