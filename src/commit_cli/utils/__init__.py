"""Utilities for commit-cli."""

from commit_cli.utils.diff_compactor import (
    collect_staged_bundle,
    compact_diff,
    estimate_tokens,
)
from commit_cli.utils.git_repo import GitCommandError, GitRepository
from commit_cli.utils.sanitizer import sanitize_commit_message

__all__ = [
    "GitCommandError",
    "GitRepository",
    "collect_staged_bundle",
    "compact_diff",
    "estimate_tokens",
    "sanitize_commit_message",
]
