"""Read-only tools exposed to the model during generation."""

from commit_cli.tools.base import (
    FailureKind,
    ToolDefinition,
    ToolFailure,
    ToolInvocationEvent,
    ToolResult,
    ToolSuccess,
)
from commit_cli.tools.registry import ToolObserver, ToolRegistry, build_default_registry
from commit_cli.tools.sandbox import PathRejectedError, WorkspaceSandbox

__all__ = [
    "FailureKind",
    "PathRejectedError",
    "ToolDefinition",
    "ToolFailure",
    "ToolInvocationEvent",
    "ToolObserver",
    "ToolRegistry",
    "ToolResult",
    "ToolSuccess",
    "WorkspaceSandbox",
    "build_default_registry",
]
