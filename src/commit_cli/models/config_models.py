"""Explicit configuration for building an orchestrator."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOOL_CALLS = 8
DEFAULT_RECURSION_LIMIT = 50
DEFAULT_TIMEOUT = 120.0


class OrchestratorConfig(BaseModel):
    """Model identifier, credentials and loop limits for one orchestrator."""

    model_config = ConfigDict(frozen=True)

    provider: Literal["anthropic", "openai"] = "anthropic"
    model: str = DEFAULT_MODEL
    api_key: str | None = Field(default=None, repr=False)
    temperature: float = 0.0
    max_tokens: int = Field(default=1024, gt=0)
    max_tool_calls: int | None = Field(default=DEFAULT_MAX_TOOL_CALLS, ge=0)  # None disables
    recursion_limit: int = Field(default=DEFAULT_RECURSION_LIMIT, ge=2)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)

    def resolved_model(self) -> str:
        if self.provider == "openai" and self.model.startswith("claude-"):
            return DEFAULT_OPENAI_MODEL
        return self.model
