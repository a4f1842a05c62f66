"""Thin wrapper around the ``git`` binary for repository introspection."""

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT = 30


class GitCommandError(Exception):
    """Raised when a mutating git command (commit, push) fails."""

    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        self.command = args
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"git {' '.join(args)} failed: {detail}")


class GitRepository:
    """Read-only queries and commit/push primitives for one working tree.

    Query methods never raise: any failure (git missing, not a repository,
    non-zero exit) is logged and reported as an empty result.
    """

    def __init__(self, root: str | Path = ".", timeout: int = DEFAULT_GIT_TIMEOUT) -> None:
        self.root = Path(root).resolve()
        self.timeout = timeout

    def _run(self, args: list[str], timeout: int | None) -> subprocess.CompletedProcess:
        return subprocess.run(
            ["git", *args],
            cwd=self.root,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )

    def _query(self, args: list[str]) -> str:
        try:
            result = self._run(args, self.timeout)
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("git %s could not run: %s", " ".join(args), exc)
            return ""
        if result.returncode != 0:
            logger.debug(
                "git %s exited with %d: %s",
                " ".join(args),
                result.returncode,
                result.stderr.strip(),
            )
            return ""
        return result.stdout

    def _query_lines(self, args: list[str]) -> list[str]:
        return [line for line in self._query(args).splitlines() if line.strip()]

    def is_git_repository(self) -> bool:
        return self._query(["rev-parse", "--is-inside-work-tree"]).strip() == "true"

    # Staged changes

    def staged_name_status(self) -> str:
        return self._query(["diff", "--cached", "--name-status"])

    def staged_stat(self) -> str:
        return self._query(["diff", "--cached", "--stat"])

    def staged_diff(self, context_lines: int | None = None) -> str:
        args = ["diff", "--cached"]
        if context_lines is not None:
            args.append(f"--unified={context_lines}")
        return self._query(args)

    def staged_file_diff(self, file_path: str, context_lines: int = 1) -> str:
        return self._query(["diff", "--cached", f"--unified={context_lines}", "--", file_path])

    # File listings

    def staged_files(self) -> list[str]:
        return self._query_lines(["diff", "--cached", "--name-only"])

    def unstaged_files(self) -> list[str]:
        return self._query_lines(["diff", "--name-only"])

    def untracked_files(self) -> list[str]:
        return self._query_lines(["ls-files", "--others", "--exclude-standard"])

    # History

    def recent_commits(self, count: int, include_hashes: bool = False) -> list[str]:
        """Return the most recent commit subjects, newest first."""
        if count <= 0:
            return []
        fmt = "%h %s" if include_hashes else "%s"
        return self._query_lines(["log", f"-n{count}", f"--pretty=format:{fmt}"])

    # Mutations

    def _mutate(self, args: list[str], timeout: int | None) -> str:
        try:
            result = self._run(args, timeout=timeout)
        except (OSError, subprocess.SubprocessError) as exc:
            raise GitCommandError(args, -1, str(exc)) from exc
        if result.returncode != 0:
            raise GitCommandError(args, result.returncode, result.stderr)
        return result.stdout

    def commit(self, message: str) -> str:
        return self._mutate(["commit", "-m", message], self.timeout)

    def push(self) -> str:
        # Network bound, so no local timeout
        return self._mutate(["push"], timeout=None)
