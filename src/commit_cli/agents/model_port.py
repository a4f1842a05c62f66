"""Model-invocation ports for Anthropic and OpenAI chat models.

A port takes the full transcript plus the declared tools and returns exactly
one assistant message. Provider errors (authentication, transport, rate
limits) are raised unmodified; retrying is the caller's decision.
"""

import json
import logging
import os
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from anthropic import Anthropic, AuthenticationError as AnthropicAuthenticationError
import openai

from commit_cli.agents.exceptions import ProviderConfigError
from commit_cli.models import Message, OrchestratorConfig, Role, ToolCallRequest
from commit_cli.tools.base import ToolDefinition

logger = logging.getLogger(__name__)

API_KEY_ENV_VARS = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}
RAW_ARGUMENTS_KEY = "_raw_arguments"


@runtime_checkable
class ModelPort(Protocol):
    def invoke(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
    ) -> Message:
        """Return the next assistant message for ``messages``."""


def _resolve_api_key(config: OrchestratorConfig) -> str:
    env_var = API_KEY_ENV_VARS[config.provider]
    api_key = config.api_key or os.getenv(env_var)
    if not api_key:
        raise ProviderConfigError(
            f"No API key found for provider '{config.provider}'. "
            f"Provide one in the configuration or via the {env_var} env var."
        )
    return api_key


class AnthropicModelPort:
    """Messages API adapter with native tool use."""

    def __init__(self, config: OrchestratorConfig, client: Any = None) -> None:
        self.config = config
        self.model = config.resolved_model()
        self._client = client or Anthropic(
            api_key=_resolve_api_key(config),
            timeout=config.timeout,
        )

    @staticmethod
    def tool_schema(tool: ToolDefinition) -> dict[str, Any]:
        return {
            "name": tool.name,
            "description": tool.description,
            "input_schema": tool.json_schema(),
        }

    @staticmethod
    def convert_messages(messages: Sequence[Message]) -> tuple[str, list[dict[str, Any]]]:
        """Split out the system prompt and convert the rest to API messages.

        Consecutive tool results are grouped into one user turn, as the API
        expects every tool_result of an assistant turn in the next message.
        """
        system_parts: list[str] = []
        converted: list[dict[str, Any]] = []

        for message in messages:
            if message.role == Role.SYSTEM:
                system_parts.append(message.content)
            elif message.role == Role.USER:
                converted.append({"role": "user", "content": message.content})
            elif message.role == Role.ASSISTANT:
                blocks: list[dict[str, Any]] = []
                if message.content:
                    blocks.append({"type": "text", "text": message.content})
                for call in message.tool_calls:
                    blocks.append(
                        {
                            "type": "tool_use",
                            "id": call.id,
                            "name": call.name,
                            "input": call.arguments,
                        }
                    )
                converted.append({"role": "assistant", "content": blocks or message.content})
            else:
                block = {
                    "type": "tool_result",
                    "tool_use_id": message.tool_call_id,
                    "content": message.content,
                }
                previous = converted[-1] if converted else None
                if (
                    previous is not None
                    and previous["role"] == "user"
                    and isinstance(previous["content"], list)
                ):
                    previous["content"].append(block)
                else:
                    converted.append({"role": "user", "content": [block]})

        return "\n\n".join(system_parts), converted

    @staticmethod
    def parse_response(response: Any) -> Message:
        text_parts: list[str] = []
        tool_calls: list[ToolCallRequest] = []
        for block in response.content:
            if block.type == "text":
                text_parts.append(block.text)
            elif block.type == "tool_use":
                arguments = block.input if isinstance(block.input, dict) else {}
                tool_calls.append(
                    ToolCallRequest(id=block.id, name=block.name, arguments=arguments)
                )
        return Message.assistant("".join(text_parts), tool_calls)

    def invoke(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
    ) -> Message:
        system, api_messages = self.convert_messages(messages)
        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "messages": api_messages,
        }
        if system:
            request["system"] = system
        if tools:
            request["tools"] = [self.tool_schema(tool) for tool in tools]

        logger.debug("anthropic request: model=%s messages=%d", self.model, len(api_messages))
        response = self._client.messages.create(**request)
        return self.parse_response(response)


class OpenAIModelPort:
    """Chat Completions adapter with function calling."""

    def __init__(self, config: OrchestratorConfig, client: Any = None) -> None:
        self.config = config
        self.model = config.resolved_model()
        self._client = client or openai.OpenAI(
            api_key=_resolve_api_key(config),
            timeout=config.timeout,
        )

    @staticmethod
    def tool_schema(tool: ToolDefinition) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": tool.json_schema(),
            },
        }

    @staticmethod
    def convert_messages(messages: Sequence[Message]) -> list[dict[str, Any]]:
        converted: list[dict[str, Any]] = []
        for message in messages:
            if message.role == Role.TOOL:
                converted.append(
                    {
                        "role": "tool",
                        "tool_call_id": message.tool_call_id,
                        "content": message.content,
                    }
                )
            elif message.role == Role.ASSISTANT and message.tool_calls:
                converted.append(
                    {
                        "role": "assistant",
                        "content": message.content or None,
                        "tool_calls": [
                            {
                                "id": call.id,
                                "type": "function",
                                "function": {
                                    "name": call.name,
                                    "arguments": json.dumps(call.arguments),
                                },
                            }
                            for call in message.tool_calls
                        ],
                    }
                )
            else:
                converted.append({"role": message.role.value, "content": message.content})
        return converted

    @staticmethod
    def _parse_arguments(raw: str | None) -> dict[str, Any]:
        # Malformed JSON is kept under a reserved key so argument validation
        # rejects it and the model sees the error.
        try:
            parsed = json.loads(raw or "{}")
        except json.JSONDecodeError:
            return {RAW_ARGUMENTS_KEY: raw}
        if not isinstance(parsed, dict):
            return {RAW_ARGUMENTS_KEY: raw}
        return parsed

    @classmethod
    def parse_response(cls, response: Any) -> Message:
        message = response.choices[0].message
        tool_calls = [
            ToolCallRequest(
                id=call.id,
                name=call.function.name,
                arguments=cls._parse_arguments(call.function.arguments),
            )
            for call in (getattr(message, "tool_calls", None) or [])
            if getattr(call, "type", "function") == "function"
        ]
        return Message.assistant(message.content or "", tool_calls)

    def invoke(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
    ) -> Message:
        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "messages": self.convert_messages(messages),
        }
        if tools:
            request["tools"] = [self.tool_schema(tool) for tool in tools]

        logger.debug("openai request: model=%s messages=%d", self.model, len(messages))
        response = self._client.chat.completions.create(**request)
        return self.parse_response(response)


def build_model_port(config: OrchestratorConfig) -> ModelPort:
    """Build the port for ``config.provider``.

    Raises:
        ProviderConfigError: If the provider is unsupported or has no API key.
    """
    if config.provider == "anthropic":
        return AnthropicModelPort(config)
    if config.provider == "openai":
        return OpenAIModelPort(config)
    raise ProviderConfigError(f"Unsupported provider: {config.provider}")


def is_authentication_error(error: BaseException) -> bool:
    """True for provider errors that mean the API key was rejected."""
    if isinstance(error, (AnthropicAuthenticationError, openai.AuthenticationError)):
        return True
    text = str(error).lower()
    return any(
        marker in text
        for marker in ("401", "authentication_error", "invalid x-api-key", "invalid api key")
    )
