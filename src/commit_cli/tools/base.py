"""Core tool types: definitions, tagged results and invocation events."""

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError

MAX_ARGUMENT_SUMMARY = 200


class FailureKind(str, Enum):
    VALIDATION = "validation"
    REFUSED = "refused"
    NOT_FOUND = "not_found"
    IO_ERROR = "io_error"
    BUDGET_EXCEEDED = "budget_exceeded"
    UNKNOWN_TOOL = "unknown_tool"
    INTERNAL = "internal"


class ToolSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str

    @property
    def ok(self) -> bool:
        return True

    def to_text(self) -> str:
        return self.content


class ToolFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: FailureKind
    message: str

    @property
    def ok(self) -> bool:
        return False

    def to_text(self) -> str:
        return f"Error: {self.message}"


ToolResult = Union[ToolSuccess, ToolFailure]


class ToolInvocationEvent(BaseModel):
    """Diagnostics record emitted before every tool call."""

    model_config = ConfigDict(frozen=True)

    tool_name: str
    arguments_summary: str
    call_id: str = ""


def summarize_arguments(arguments: Mapping[str, Any]) -> str:
    try:
        summary = json.dumps(dict(arguments), sort_keys=True, default=str)
    except (TypeError, ValueError):
        summary = repr(arguments)
    if len(summary) > MAX_ARGUMENT_SUMMARY:
        summary = summary[: MAX_ARGUMENT_SUMMARY - 3] + "..."
    return summary


@dataclass(frozen=True)
class ToolDefinition:
    """A statically declared capability callable by the model.

    ``args_model`` is the tool's argument struct; ``handler`` receives an
    instance of it and returns a tagged result.
    """

    name: str
    description: str
    args_model: type[BaseModel]
    handler: Callable[[Any], ToolResult]
    limits: Mapping[str, int] = field(default_factory=dict)

    def json_schema(self) -> dict[str, Any]:
        schema = self.args_model.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        return schema

    def validate(self, arguments: Mapping[str, Any] | None) -> BaseModel | ToolFailure:
        """Turn raw model-supplied arguments into the typed argument struct."""
        try:
            return self.args_model.model_validate(dict(arguments or {}))
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
                for err in exc.errors()
            )
            return ToolFailure(
                kind=FailureKind.VALIDATION,
                message=f"Invalid arguments for {self.name}: {problems}",
            )
