"""Agent components: model ports and prompts."""

from commit_cli.agents.exceptions import (
    AgentError,
    EmptyMessageError,
    NothingToCommitError,
    ProviderConfigError,
    SessionError,
)
from commit_cli.agents.model_port import (
    AnthropicModelPort,
    ModelPort,
    OpenAIModelPort,
    build_model_port,
    is_authentication_error,
)

__all__ = [
    "AgentError",
    "AnthropicModelPort",
    "EmptyMessageError",
    "ModelPort",
    "NothingToCommitError",
    "OpenAIModelPort",
    "ProviderConfigError",
    "SessionError",
    "build_model_port",
    "is_authentication_error",
]
