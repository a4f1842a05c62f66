"""Registry of the tools the model may call during a generation session."""

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from commit_cli.tools.base import (
    FailureKind,
    ToolDefinition,
    ToolFailure,
    ToolInvocationEvent,
    ToolResult,
    summarize_arguments,
)
from commit_cli.tools.handlers import (
    MAX_COMMIT_HISTORY,
    MAX_FILE_BYTES,
    MAX_RETURNED_CHARS,
    RepositoryQueries,
    make_commit_history_handler,
    make_file_diff_handler,
    make_file_list_handler,
    make_list_dir_handler,
    make_read_file_handler,
)
from commit_cli.tools.sandbox import WorkspaceSandbox
from commit_cli.tools.schemas import (
    CommitHistoryArgs,
    FileDiffArgs,
    ListDirArgs,
    NoArgs,
    ReadFileArgs,
)

logger = logging.getLogger(__name__)

ToolObserver = Callable[[ToolInvocationEvent], None]


class ToolRegistry:
    """Fixed set of tool definitions with uniform, never-raising dispatch."""

    def __init__(
        self,
        definitions: Iterable[ToolDefinition],
        observers: Iterable[ToolObserver] | None = None,
    ) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        for definition in definitions:
            if definition.name in self._tools:
                raise ValueError(f"Duplicate tool name: {definition.name}")
            self._tools[definition.name] = definition
        self._observers: list[ToolObserver] = list(observers or [])

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def add_observer(self, observer: ToolObserver) -> None:
        self._observers.append(observer)

    def definitions(self) -> list[ToolDefinition]:
        return list(self._tools.values())

    def _notify(self, event: ToolInvocationEvent) -> None:
        logger.info("tool call %s(%s)", event.tool_name, event.arguments_summary)
        for observer in self._observers:
            try:
                observer(event)
            except Exception:
                logger.warning("Tool observer %r failed", observer, exc_info=True)

    def invoke(
        self,
        name: str,
        arguments: Mapping[str, Any] | None = None,
        call_id: str = "",
    ) -> ToolResult:
        """Validate and run one tool call. Never raises."""
        self._notify(
            ToolInvocationEvent(
                tool_name=name,
                arguments_summary=summarize_arguments(arguments or {}),
                call_id=call_id,
            )
        )

        definition = self._tools.get(name)
        if definition is None:
            return ToolFailure(
                kind=FailureKind.UNKNOWN_TOOL,
                message=f"Unknown tool '{name}'. Available tools: {', '.join(self.names)}",
            )

        parsed = definition.validate(arguments)
        if isinstance(parsed, ToolFailure):
            return parsed

        try:
            return definition.handler(parsed)
        except Exception as exc:
            logger.debug("Tool %s raised", name, exc_info=True)
            return ToolFailure(
                kind=FailureKind.INTERNAL,
                message=f"Tool {name} failed: {type(exc).__name__}: {exc}",
            )


def build_default_registry(
    sandbox: WorkspaceSandbox,
    repo: RepositoryQueries,
    observers: Iterable[ToolObserver] | None = None,
) -> ToolRegistry:
    """Build the standard tool set over one repository working tree."""
    definitions = [
        ToolDefinition(
            name="read_file",
            description="Read the contents of a file to understand code context.",
            args_model=ReadFileArgs,
            handler=make_read_file_handler(sandbox),
            limits={"max_bytes": MAX_FILE_BYTES, "max_chars": MAX_RETURNED_CHARS},
        ),
        ToolDefinition(
            name="list_dir",
            description="List files and directories in a given path.",
            args_model=ListDirArgs,
            handler=make_list_dir_handler(sandbox),
            limits={"max_chars": MAX_RETURNED_CHARS},
        ),
        ToolDefinition(
            name="git_commit_history",
            description=(
                "Show the subject lines of the most recent commits "
                f"(at most {MAX_COMMIT_HISTORY}) to learn the project's conventions."
            ),
            args_model=CommitHistoryArgs,
            handler=make_commit_history_handler(repo),
            limits={"max_count": MAX_COMMIT_HISTORY},
        ),
        ToolDefinition(
            name="git_staged_files",
            description="List the files staged for commit.",
            args_model=NoArgs,
            handler=make_file_list_handler(repo.staged_files, "No staged files."),
        ),
        ToolDefinition(
            name="git_unstaged_files",
            description="List tracked files with changes that are not staged.",
            args_model=NoArgs,
            handler=make_file_list_handler(repo.unstaged_files, "No unstaged changes."),
        ),
        ToolDefinition(
            name="git_untracked_files",
            description="List untracked files that are not ignored.",
            args_model=NoArgs,
            handler=make_file_list_handler(repo.untracked_files, "No untracked files."),
        ),
        ToolDefinition(
            name="git_file_diff",
            description="Show the staged diff of a single file with one line of context.",
            args_model=FileDiffArgs,
            handler=make_file_diff_handler(sandbox, repo),
            limits={"max_chars": MAX_RETURNED_CHARS},
        ),
    ]
    return ToolRegistry(definitions, observers=observers)
