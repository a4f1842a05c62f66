"""Data models for commit-cli."""

from commit_cli.models.config_models import OrchestratorConfig
from commit_cli.models.diff_models import (
    ContextLevel,
    DiffBundle,
    DiffStats,
    FileChange,
)
from commit_cli.models.message_models import Message, Role, ToolCallRequest
from commit_cli.models.session_models import (
    CommitStyle,
    GenerationSession,
    Preferences,
)

__all__ = [
    "CommitStyle",
    "ContextLevel",
    "DiffBundle",
    "DiffStats",
    "FileChange",
    "GenerationSession",
    "Message",
    "OrchestratorConfig",
    "Preferences",
    "Role",
    "ToolCallRequest",
]
