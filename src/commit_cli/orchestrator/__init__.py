"""LangGraph orchestrator package for commit message sessions."""

from commit_cli.orchestrator.exceptions import (
    GraphBuildError,
    OrchestratorError,
    TurnLimitError,
)
from commit_cli.orchestrator.graph import build_graph
from commit_cli.orchestrator.runner import Orchestrator, RunResult, build_orchestrator
from commit_cli.orchestrator.state import ConversationState, make_initial_state

__all__ = [
    "ConversationState",
    "GraphBuildError",
    "Orchestrator",
    "OrchestratorError",
    "RunResult",
    "TurnLimitError",
    "build_graph",
    "build_orchestrator",
    "make_initial_state",
]
