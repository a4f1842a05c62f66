"""User preferences and per-attempt generation session models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from commit_cli.models.diff_models import DiffBundle


class CommitStyle(str, Enum):
    CONCISE = "concise"
    DESCRIPTIVE = "descriptive"


class Preferences(BaseModel):
    """Commit message preferences supplied by the config store or CLI flags."""

    model_config = ConfigDict(frozen=True)

    use_conventional_commits: bool = True
    style: CommitStyle = CommitStyle.CONCISE
    custom_guideline: str | None = None


class GenerationSession(BaseModel):
    """One generation attempt; a regenerate request creates a new one."""

    model_config = ConfigDict(frozen=True)

    diff: DiffBundle
    preferences: Preferences
    feedback: str | None = None
