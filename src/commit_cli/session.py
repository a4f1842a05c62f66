"""Session controller: one diff + preferences (+ feedback) in, one clean message out."""

import logging

from commit_cli.agents.exceptions import EmptyMessageError, NothingToCommitError
from commit_cli.agents.prompts import build_system_prompt, build_user_prompt
from commit_cli.models import DiffBundle, GenerationSession, Message, Preferences
from commit_cli.orchestrator.runner import Orchestrator, RunResult
from commit_cli.utils.sanitizer import sanitize_commit_message

logger = logging.getLogger(__name__)


class SessionController:
    """Wires a GenerationSession into one orchestration run.

    Every call starts from a fresh transcript; regenerating with feedback
    never reuses the previous conversation.
    """

    def __init__(self, orchestrator: Orchestrator) -> None:
        self.orchestrator = orchestrator

    def build_transcript(self, session: GenerationSession) -> list[Message]:
        system_prompt = build_system_prompt(
            session.preferences,
            self.orchestrator.registry.names,
        )
        return [
            Message.system(system_prompt),
            Message.user(build_user_prompt(session.diff, session.feedback)),
        ]

    def run(self, session: GenerationSession) -> tuple[str, RunResult]:
        """Run ``session`` and return the sanitized message with the raw run.

        Raises:
            NothingToCommitError: If the diff bundle is empty. The
                orchestrator is not invoked.
            EmptyMessageError: If the final answer sanitizes to nothing.
        """
        if session.diff.is_empty:
            raise NothingToCommitError("No staged changes to describe")

        result = self.orchestrator.run(self.build_transcript(session))
        message = sanitize_commit_message(result.final_message.content, session.preferences)
        logger.debug(
            "session finished: %d messages, %d tool call(s)",
            len(result.transcript),
            result.tool_calls_used,
        )
        if not message:
            raise EmptyMessageError("The model returned an empty commit message")
        return message, result

    def generate(
        self,
        diff: DiffBundle,
        preferences: Preferences,
        feedback: str | None = None,
    ) -> str:
        feedback = (feedback or "").strip() or None
        session = GenerationSession(diff=diff, preferences=preferences, feedback=feedback)
        message, _ = self.run(session)
        return message

    def regenerate(self, diff: DiffBundle, preferences: Preferences, feedback: str) -> str:
        """Generate again for the same diff, steering the model with ``feedback``."""
        return self.generate(diff, preferences, feedback)


def generate(
    diff: DiffBundle,
    preferences: Preferences,
    feedback: str | None = None,
    *,
    orchestrator: Orchestrator,
) -> str:
    """Generate a clean commit message for ``diff``."""
    return SessionController(orchestrator).generate(diff, preferences, feedback)
