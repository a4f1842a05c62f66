"""Tool handler factories.

Each factory closes over its collaborator (sandbox or repository) and returns
a handler taking the tool's argument struct. Handlers are read-only and report
every failure as a ToolFailure instead of raising.
"""

from collections.abc import Callable
from typing import Protocol

from commit_cli.tools.base import FailureKind, ToolFailure, ToolResult, ToolSuccess
from commit_cli.tools.sandbox import PathRejectedError, WorkspaceSandbox
from commit_cli.tools.schemas import (
    CommitHistoryArgs,
    FileDiffArgs,
    ListDirArgs,
    NoArgs,
    ReadFileArgs,
)

MAX_FILE_BYTES = 50_000
MAX_RETURNED_CHARS = 10_000
MAX_COMMIT_HISTORY = 5
FILE_DIFF_CONTEXT_LINES = 1


class RepositoryQueries(Protocol):
    """The read-only repository queries the git tools rely on."""

    def staged_files(self) -> list[str]: ...

    def unstaged_files(self) -> list[str]: ...

    def untracked_files(self) -> list[str]: ...

    def recent_commits(self, count: int, include_hashes: bool = False) -> list[str]: ...

    def staged_file_diff(self, file_path: str, context_lines: int = 1) -> str: ...


def truncate_text(text: str, limit: int = MAX_RETURNED_CHARS) -> str:
    """Cut ``text`` to ``limit`` characters with an explicit marker."""
    if len(text) <= limit:
        return text
    remaining = len(text) - limit
    return f"{text[:limit]}\n... [truncated: {remaining} more characters]"


def clamp_commit_count(requested: int) -> int:
    return max(1, min(requested, MAX_COMMIT_HISTORY))


def make_read_file_handler(sandbox: WorkspaceSandbox) -> Callable[[ReadFileArgs], ToolResult]:
    def read_file(args: ReadFileArgs) -> ToolResult:
        try:
            path = sandbox.resolve(args.file_path)
        except PathRejectedError as exc:
            return ToolFailure(kind=FailureKind.REFUSED, message=str(exc))

        if not path.is_file():
            return ToolFailure(
                kind=FailureKind.NOT_FOUND,
                message=f"File not found: {args.file_path}",
            )

        try:
            size = sandbox.file_size(path)
            if size > MAX_FILE_BYTES:
                return ToolFailure(
                    kind=FailureKind.REFUSED,
                    message=(
                        f"File {args.file_path} is too large to read "
                        f"({size} bytes, limit is {MAX_FILE_BYTES} bytes)"
                    ),
                )
            data = sandbox.read_bytes(path)
        except OSError as exc:
            return ToolFailure(
                kind=FailureKind.IO_ERROR,
                message=f"Error reading file {args.file_path}: {exc}",
            )

        return ToolSuccess(content=truncate_text(data.decode("utf-8", errors="replace")))

    return read_file


def make_list_dir_handler(sandbox: WorkspaceSandbox) -> Callable[[ListDirArgs], ToolResult]:
    def list_dir(args: ListDirArgs) -> ToolResult:
        try:
            path = sandbox.resolve(args.dir_path)
        except PathRejectedError as exc:
            return ToolFailure(kind=FailureKind.REFUSED, message=str(exc))

        if not path.is_dir():
            return ToolFailure(
                kind=FailureKind.NOT_FOUND,
                message=f"Directory not found: {args.dir_path}",
            )

        try:
            entries = sandbox.list_entries(path)
        except OSError as exc:
            return ToolFailure(
                kind=FailureKind.IO_ERROR,
                message=f"Error listing directory {args.dir_path}: {exc}",
            )

        if not entries:
            return ToolSuccess(content=f"Directory {args.dir_path} is empty.")

        lines = []
        for name, is_dir in entries:
            if is_dir is None:
                lines.append(name)
            else:
                lines.append(f"{name} {'(DIR)' if is_dir else '(FILE)'}")
        return ToolSuccess(content=truncate_text("\n".join(lines)))

    return list_dir


def make_commit_history_handler(
    repo: RepositoryQueries,
) -> Callable[[CommitHistoryArgs], ToolResult]:
    def git_commit_history(args: CommitHistoryArgs) -> ToolResult:
        count = clamp_commit_count(args.count)
        commits = repo.recent_commits(count, include_hashes=args.include_hashes)[:count]
        if not commits:
            return ToolSuccess(content="No commits found.")
        return ToolSuccess(content="\n".join(commits))

    return git_commit_history


def make_file_list_handler(
    query: Callable[[], list[str]],
    empty_message: str,
) -> Callable[[NoArgs], ToolResult]:
    def list_files(args: NoArgs) -> ToolResult:
        files = query()
        if not files:
            return ToolSuccess(content=empty_message)
        return ToolSuccess(content=truncate_text("\n".join(files)))

    return list_files


def make_file_diff_handler(
    sandbox: WorkspaceSandbox,
    repo: RepositoryQueries,
) -> Callable[[FileDiffArgs], ToolResult]:
    def git_file_diff(args: FileDiffArgs) -> ToolResult:
        try:
            path = sandbox.resolve(args.file_path)
        except PathRejectedError as exc:
            return ToolFailure(kind=FailureKind.REFUSED, message=str(exc))

        diff = repo.staged_file_diff(sandbox.relative(path), FILE_DIFF_CONTEXT_LINES)
        if not diff.strip():
            return ToolSuccess(content=f"No staged changes for {args.file_path}.")
        return ToolSuccess(content=truncate_text(diff))

    return git_file_diff
