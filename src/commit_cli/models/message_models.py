"""Conversation transcript models shared by the orchestrator and model ports."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Role(str, Enum):
    """Author of a transcript message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolCallRequest(BaseModel):
    """A structured request, emitted by the model, to run one declared tool."""

    model_config = ConfigDict(frozen=True)

    id: str  # Provider-issued call id, echoed back on the tool result
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class Message(BaseModel):
    """A single immutable transcript entry."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = ""
    tool_calls: list[ToolCallRequest] = Field(default_factory=list)
    tool_call_id: str | None = None  # Only on TOOL messages
    name: str | None = None  # Tool name, only on TOOL messages

    @model_validator(mode="after")
    def _check_role_fields(self) -> "Message":
        if self.tool_calls and self.role != Role.ASSISTANT:
            raise ValueError("tool_calls are only allowed on assistant messages")
        if self.role == Role.TOOL and not self.tool_call_id:
            raise ValueError("tool messages require a tool_call_id")
        if self.role != Role.TOOL and self.tool_call_id is not None:
            raise ValueError("tool_call_id is only allowed on tool messages")
        return self

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(
        cls, content: str = "", tool_calls: list[ToolCallRequest] | None = None
    ) -> "Message":
        return cls(role=Role.ASSISTANT, content=content, tool_calls=tool_calls or [])

    @classmethod
    def tool_result(cls, call_id: str, name: str, content: str) -> "Message":
        return cls(role=Role.TOOL, content=content, tool_call_id=call_id, name=name)
