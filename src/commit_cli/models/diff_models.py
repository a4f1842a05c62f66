"""Models for representing a compacted staged diff."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ContextLevel(int, Enum):
    """Number of unchanged context lines rendered around each hunk."""

    WIDE = 1
    NARROW = 0


class FileChange(BaseModel):
    """One entry of ``git diff --name-status``."""

    model_config = ConfigDict(frozen=True)

    path: str  # Destination path for renames/copies
    status: str  # Single git status letter: A, M, D, R, C, T, U, ...
    previous_path: str | None = None  # Source path for renames/copies


class DiffStats(BaseModel):
    """Summary line of ``git diff --stat``."""

    model_config = ConfigDict(frozen=True)

    files_changed: int = 0
    insertions: int = 0
    deletions: int = 0


class DiffBundle(BaseModel):
    """Bounded textual payload describing the staged changes."""

    model_config = ConfigDict(frozen=True)

    files: list[FileChange] = Field(default_factory=list)
    stats: DiffStats = Field(default_factory=DiffStats)
    diff_text: str = ""  # Structured payload block, never the full-context diff
    context_level: ContextLevel = ContextLevel.WIDE
    estimated_tokens: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.files
