"""Tests for the session controller and prompt construction."""
from unittest.mock import MagicMock

import pytest

from commit_cli.agents import EmptyMessageError, NothingToCommitError
from commit_cli.agents.prompts import (
    CONCISE_DIRECTIVE,
    CONVENTIONAL_DIRECTIVE,
    DESCRIPTIVE_DIRECTIVE,
    PLAIN_DIRECTIVE,
    build_system_prompt,
    build_user_prompt,
)
from commit_cli.models import (
    CommitStyle,
    GenerationSession,
    Message,
    Preferences,
    Role,
    ToolCallRequest,
)
from commit_cli.orchestrator import Orchestrator
from commit_cli.session import SessionController, generate
from commit_cli.tools import WorkspaceSandbox, build_default_registry


@pytest.fixture
def registry(tmp_path):
    repo = MagicMock()
    repo.staged_files.return_value = ["src/log.py"]
    return build_default_registry(WorkspaceSandbox(tmp_path), repo)


@pytest.fixture
def controller_for(registry, scripted_port):
    """controller_for(reply, ...) -> (SessionController, ScriptedModelPort)."""

    def _make(*replies):
        port = scripted_port(*replies)
        return SessionController(Orchestrator(port, registry)), port

    return _make


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

class TestSystemPrompt:
    def test_conventional_concise(self):
        prompt = build_system_prompt(Preferences(), ["read_file"])
        assert CONVENTIONAL_DIRECTIVE in prompt
        assert CONCISE_DIRECTIVE in prompt
        assert "- read_file:" in prompt

    def test_plain_descriptive(self):
        preferences = Preferences(use_conventional_commits=False, style=CommitStyle.DESCRIPTIVE)
        prompt = build_system_prompt(preferences, [])
        assert PLAIN_DIRECTIVE in prompt
        assert DESCRIPTIVE_DIRECTIVE in prompt
        assert CONVENTIONAL_DIRECTIVE not in prompt

    def test_custom_guideline_included(self):
        preferences = Preferences(custom_guideline="Reference the ticket id")
        prompt = build_system_prompt(preferences, [])
        assert "Project guideline: Reference the ticket id" in prompt

    def test_blank_guideline_omitted(self):
        prompt = build_system_prompt(Preferences(custom_guideline="   "), [])
        assert "Project guideline" not in prompt

    def test_asks_for_minimal_tool_use(self):
        prompt = build_system_prompt(Preferences(), [])
        assert "read at most 2 files" in prompt
        assert "ZERO tool calls" in prompt


class TestUserPrompt:
    def test_contains_payload(self, small_bundle):
        prompt = build_user_prompt(small_bundle)
        assert prompt.startswith("Generate a commit message for this diff:\n\n")
        assert small_bundle.diff_text in prompt
        assert "feedback" not in prompt

    def test_feedback_addendum(self, small_bundle):
        prompt = build_user_prompt(small_bundle, "  mention the logger  ")
        assert prompt.endswith(
            "User feedback on previous attempt: mention the logger\n"
            "Please adjust the commit message based on this feedback."
        )

    def test_blank_feedback_ignored(self, small_bundle):
        assert build_user_prompt(small_bundle, " \n") == build_user_prompt(small_bundle)


# ---------------------------------------------------------------------------
# Session controller
# ---------------------------------------------------------------------------

class TestSessionController:
    def test_end_to_end_single_file(self, controller_for, small_bundle, conventional_preferences):
        controller, port = controller_for(Message.assistant("feat: add logging helper"))

        message = controller.generate(small_bundle, conventional_preferences)

        assert message == "feat: add logging helper"
        assert small_bundle.stats.insertions == 10
        assert small_bundle.stats.deletions == 0

    def test_transcript_starts_with_system_and_user(self, controller_for, small_bundle):
        controller, port = controller_for(Message.assistant("feat: x"))

        controller.generate(small_bundle, Preferences())

        messages, _ = port.calls[0]
        assert [m.role for m in messages] == [Role.SYSTEM, Role.USER]
        assert small_bundle.diff_text in messages[1].content

    def test_empty_diff_never_reaches_orchestrator(self, empty_bundle):
        orchestrator = MagicMock()
        controller = SessionController(orchestrator)

        with pytest.raises(NothingToCommitError):
            controller.generate(empty_bundle, Preferences())
        orchestrator.run.assert_not_called()

    def test_result_is_sanitized(self, controller_for, small_bundle, conventional_preferences):
        controller, _ = controller_for(
            Message.assistant("Here is the commit message:\n```\nfeat: add logging helper\n```")
        )
        assert controller.generate(small_bundle, conventional_preferences) == "feat: add logging helper"

    def test_empty_answer_raises(self, controller_for, small_bundle):
        controller, _ = controller_for(Message.assistant("```\n```"))
        with pytest.raises(EmptyMessageError):
            controller.generate(small_bundle, Preferences())

    def test_tool_round_trip(self, controller_for, small_bundle):
        controller, port = controller_for(
            Message.assistant("", [ToolCallRequest(id="c1", name="git_staged_files", arguments={})]),
            Message.assistant("feat: add logging helper"),
        )

        message, result = controller.run(GenerationSession(diff=small_bundle, preferences=Preferences()))

        assert message == "feat: add logging helper"
        assert result.tool_calls_used == 1
        assert len(port.calls) == 2

    def test_regenerate_uses_fresh_transcript_with_feedback(self, controller_for, small_bundle):
        controller, port = controller_for(
            Message.assistant("feat: add helper"),
            Message.assistant("feat: add logging helper"),
        )

        first = controller.generate(small_bundle, Preferences())
        second = controller.regenerate(small_bundle, Preferences(), "mention logging")

        assert (first, second) == ("feat: add helper", "feat: add logging helper")
        second_messages, _ = port.calls[1]
        assert len(second_messages) == 2
        assert "User feedback on previous attempt: mention logging" in second_messages[1].content
        assert all(m.content != "feat: add helper" for m in second_messages)

    def test_model_errors_propagate(self, controller_for, small_bundle):
        controller, _ = controller_for(RuntimeError("Error code: 401"))
        with pytest.raises(RuntimeError, match="401"):
            controller.generate(small_bundle, Preferences())

    def test_module_level_generate(self, registry, scripted_port, small_bundle):
        orchestrator = Orchestrator(scripted_port(Message.assistant("fix: y")), registry)
        assert generate(small_bundle, Preferences(), orchestrator=orchestrator) == "fix: y"
