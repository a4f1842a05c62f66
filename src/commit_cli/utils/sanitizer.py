"""Post-processing that turns a free-form model reply into a commit message."""

import re

from commit_cli.models import Preferences

CONVENTIONAL_PREFIXES = (
    "feat:",
    "fix:",
    "chore:",
    "docs:",
    "style:",
    "refactor:",
    "test:",
    "perf:",
    "ci:",
    "build:",
    "revert:",
)

# Confined to the first line so a colon further down is never consumed.
_PREAMBLE_RE = re.compile(
    r"^(?:here is|here's|based on|looking at|this is|the commit message is|commit message)\b"
    r"[^\n:]*:[ \t]*\n?",
    re.IGNORECASE,
)
_FENCE_OPEN_RE = re.compile(r"^```[\w-]*[ \t]*\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```$")
MIN_LINES_FOR_PREFIX_SCAN = 4


def _strip_preamble(content: str) -> str:
    while True:
        stripped = _PREAMBLE_RE.sub("", content, count=1).strip()
        if stripped == content:
            return content
        content = stripped


def _strip_fences(content: str) -> str:
    while True:
        stripped = _FENCE_OPEN_RE.sub("", content, count=1)
        stripped = _FENCE_CLOSE_RE.sub("", stripped, count=1).strip()
        if stripped == content:
            return content
        content = stripped


def _drop_leading_explanation(content: str) -> str:
    lines = content.split("\n")
    if len(lines) < MIN_LINES_FOR_PREFIX_SCAN:
        return content
    for idx, line in enumerate(lines):
        if line.strip().lower().startswith(CONVENTIONAL_PREFIXES):
            if idx > 0:
                return "\n".join(lines[idx:]).strip()
            return content
    return content


def sanitize_commit_message(content: str, preferences: Preferences) -> str:
    """Normalize the terminal assistant reply into a clean commit message.

    Steps: trim, drop an explanatory preamble ("Here's the commit message:"),
    drop markdown code fences, and, for conventional commits, drop any
    explanation lines preceding the first ``type:`` line. Idempotent.
    """
    message = content.strip()
    while True:
        previous = message
        message = _strip_preamble(message)
        message = _strip_fences(message)
        if preferences.use_conventional_commits:
            message = _drop_leading_explanation(message)
        message = message.strip()
        if message == previous:
            return message
