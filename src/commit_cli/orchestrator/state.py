"""State definition for the LangGraph agent/tools loop."""

import operator
from collections.abc import Sequence
from typing import Annotated, TypedDict

from commit_cli.models import Message


class ConversationState(TypedDict):
    """State for one generation session.

    ``messages`` uses an Annotated[list, operator.add] reducer, so nodes can
    only append to the transcript. All other fields are overwritten.
    """

    messages: Annotated[list[Message], operator.add]
    tool_calls_used: int
    max_tool_calls: int | None


def make_initial_state(
    transcript: Sequence[Message],
    max_tool_calls: int | None = None,
) -> ConversationState:
    """Create the initial state from a seed transcript (normally System + User).

    Args:
        transcript: Messages the session starts from.
        max_tool_calls: Hard per-session tool-call budget, or None for no cap.

    Returns:
        ConversationState with a fresh copy of the transcript.

    Raises:
        ValueError: If the transcript is empty.
    """
    if not transcript:
        raise ValueError("A session transcript needs at least one message")
    return {
        "messages": list(transcript),
        "tool_calls_used": 0,
        "max_tool_calls": max_tool_calls,
    }
