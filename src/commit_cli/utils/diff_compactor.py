"""Reduce staged repository state to a bounded diff payload.

The payload size is estimated with a 4-characters-per-token heuristic. Small
changesets are rendered with one line of context around each hunk; larger ones
fall back to zero-context hunks so the payload shrinks without ever cutting a
diff line in half.
"""

import logging
import re
from typing import Protocol

from commit_cli.models import ContextLevel, DiffBundle, DiffStats, FileChange

logger = logging.getLogger(__name__)

CHARS_PER_TOKEN = 4
TOKEN_THRESHOLD = 2000

_FILES_CHANGED_RE = re.compile(r"(\d+)\s+files?\s+changed")
_INSERTIONS_RE = re.compile(r"(\d+)\s+insertions?\(\+\)")
_DELETIONS_RE = re.compile(r"(\d+)\s+deletions?\(-\)")


class StagedChangesSource(Protocol):
    """The repository queries the compactor needs."""

    def staged_name_status(self) -> str: ...

    def staged_stat(self) -> str: ...

    def staged_diff(self, context_lines: int | None = None) -> str: ...


def estimate_tokens(text: str) -> int:
    """Approximate token count of ``text`` (not an exact tokenization)."""
    return len(text) // CHARS_PER_TOKEN


def parse_name_status(name_status: str) -> list[FileChange]:
    """Parse ``git diff --name-status`` output, preserving order.

    Rename and copy entries (``R100\\told\\tnew``) keep the destination as the
    path and the source in ``previous_path``. Malformed lines are skipped.
    """
    files: list[FileChange] = []
    for line in name_status.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        if len(parts) < 2 or not parts[0]:
            continue
        status = parts[0][0].upper()
        if status in ("R", "C") and len(parts) >= 3:
            files.append(FileChange(path=parts[2], status=status, previous_path=parts[1]))
        else:
            files.append(FileChange(path=parts[1], status=status))
    return files


def parse_stat_summary(stat: str) -> DiffStats:
    """Parse the summary line of ``git diff --stat``; zeros when absent."""
    summary = ""
    for line in reversed(stat.splitlines()):
        if _FILES_CHANGED_RE.search(line):
            summary = line
            break
    if not summary:
        return DiffStats()

    def _count(pattern: re.Pattern) -> int:
        match = pattern.search(summary)
        return int(match.group(1)) if match else 0

    return DiffStats(
        files_changed=_count(_FILES_CHANGED_RE),
        insertions=_count(_INSERTIONS_RE),
        deletions=_count(_DELETIONS_RE),
    )


def _render_payload(
    files: list[FileChange],
    stat: str,
    diff_text: str,
    annotation: str | None = None,
) -> str:
    file_lines = []
    for change in files:
        if change.previous_path:
            file_lines.append(f"{change.status}\t{change.previous_path} -> {change.path}")
        else:
            file_lines.append(f"{change.status}\t{change.path}")

    sections = ["## Files changed", "\n".join(file_lines)]
    if stat.strip():
        sections.extend(["## Stats", stat.strip("\n")])
    if annotation:
        sections.append(annotation)
    sections.extend(["## Diff", diff_text.strip("\n")])
    return "\n\n".join(sections)


def compact_diff(
    name_status: str,
    stat: str,
    wide_diff: str,
    narrow_diff: str,
) -> DiffBundle:
    """Build a DiffBundle from the raw outputs of the staged-change queries.

    Args:
        name_status: ``git diff --cached --name-status`` output.
        stat: ``git diff --cached --stat`` output.
        wide_diff: Staged diff rendered with 1 line of context.
        narrow_diff: Staged diff rendered with 0 lines of context.

    Returns:
        An empty bundle when no files are staged, otherwise a bundle whose
        ``diff_text`` is the structured payload block.
    """
    files = parse_name_status(name_status)
    if not files:
        return DiffBundle()

    stats = parse_stat_summary(stat)
    wide_estimate = estimate_tokens(wide_diff)

    if wide_estimate <= TOKEN_THRESHOLD:
        payload = _render_payload(files, stat, wide_diff)
        level = ContextLevel.WIDE
    else:
        annotation = (
            f"Note: large changeset ({len(files)} files) shown without "
            "surrounding context lines."
        )
        payload = _render_payload(files, stat, narrow_diff, annotation)
        level = ContextLevel.NARROW

    logger.debug(
        "Compacted %d staged files: estimate=%d tokens, context=%s",
        len(files),
        wide_estimate,
        level.name,
    )
    return DiffBundle(
        files=files,
        stats=stats,
        diff_text=payload,
        context_level=level,
        estimated_tokens=estimate_tokens(payload),
    )


def collect_staged_bundle(source: StagedChangesSource) -> DiffBundle:
    """Run the staged-change queries against ``source`` and compact them.

    Each query that fails is treated as an empty string so partial
    information never blocks compaction.
    """

    def _safe(query, *args) -> str:
        try:
            return query(*args) or ""
        except Exception as exc:
            logger.debug("Staged-change query %s failed: %s", getattr(query, "__name__", query), exc)
            return ""

    name_status = _safe(source.staged_name_status)
    if not name_status.strip():
        return DiffBundle()

    return compact_diff(
        name_status=name_status,
        stat=_safe(source.staged_stat),
        wide_diff=_safe(source.staged_diff, ContextLevel.WIDE.value),
        narrow_diff=_safe(source.staged_diff, ContextLevel.NARROW.value),
    )
