import subprocess
from pathlib import Path

import pytest

from commit_cli.models import (
    CommitStyle,
    DiffBundle,
    Message,
    Preferences,
)
from commit_cli.utils.diff_compactor import compact_diff


def run_git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def git():
    """The git runner, for tests that stage changes themselves."""
    return run_git


@pytest.fixture
def git_repo(tmp_path):
    """A git repository with one initial commit and no staged changes."""
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init")
    run_git(repo, "config", "user.email", "test@example.com")
    run_git(repo, "config", "user.name", "Test User")
    run_git(repo, "config", "commit.gpgsign", "false")
    (repo / "README.md").write_text("# demo\n")
    run_git(repo, "add", "README.md")
    run_git(repo, "commit", "-m", "chore: initial commit")
    return repo


class ScriptedModelPort:
    """Model port returning pre-scripted replies (or raising scripted errors)."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.calls: list[tuple[list[Message], list]] = []

    def invoke(self, messages, tools):
        self.calls.append((list(messages), list(tools)))
        if not self.replies:
            raise AssertionError("ScriptedModelPort ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def scripted_port():
    """Factory fixture: scripted_port(reply, ...) -> ScriptedModelPort."""

    def _make(*replies):
        return ScriptedModelPort(replies)

    return _make


@pytest.fixture
def conventional_preferences():
    return Preferences(use_conventional_commits=True, style=CommitStyle.CONCISE)


@pytest.fixture
def small_bundle() -> DiffBundle:
    """One added file with a 10-line addition."""
    added = "".join(f"+line {i}\n" for i in range(10))
    wide = (
        "diff --git a/src/log.py b/src/log.py\n"
        "new file mode 100644\n"
        "--- /dev/null\n"
        "+++ b/src/log.py\n"
        "@@ -0,0 +1,10 @@\n" + added
    )
    return compact_diff(
        name_status="A\tsrc/log.py\n",
        stat=" src/log.py | 10 ++++++++++\n 1 file changed, 10 insertions(+)\n",
        wide_diff=wide,
        narrow_diff=wide,
    )


@pytest.fixture
def empty_bundle() -> DiffBundle:
    return DiffBundle()

