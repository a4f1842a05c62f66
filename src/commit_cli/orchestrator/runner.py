"""Orchestrator facade and its explicit factory."""

from collections.abc import Sequence

from langgraph.errors import GraphRecursionError
from pydantic import BaseModel, ConfigDict

from commit_cli.agents.model_port import ModelPort, build_model_port
from commit_cli.models import Message, OrchestratorConfig
from commit_cli.models.config_models import DEFAULT_MAX_TOOL_CALLS, DEFAULT_RECURSION_LIMIT
from commit_cli.orchestrator.exceptions import TurnLimitError
from commit_cli.orchestrator.graph import build_graph
from commit_cli.orchestrator.state import make_initial_state
from commit_cli.tools import ToolRegistry


class RunResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    final_message: Message
    transcript: list[Message]
    tool_calls_used: int = 0


class Orchestrator:
    """Runs sessions through a compiled agent/tools graph, one at a time."""

    def __init__(
        self,
        model_port: ModelPort,
        registry: ToolRegistry,
        max_tool_calls: int | None = DEFAULT_MAX_TOOL_CALLS,
        recursion_limit: int = DEFAULT_RECURSION_LIMIT,
    ) -> None:
        self.model_port = model_port
        self.registry = registry
        self.max_tool_calls = max_tool_calls
        self.recursion_limit = recursion_limit
        self._graph = build_graph(model_port, registry)

    def run(self, transcript: Sequence[Message]) -> RunResult:
        """Drive the graph from ``transcript`` to END.

        Raises:
            TurnLimitError: If the recursion limit is reached before END.
            Exception: Any model-port error, unmodified.
        """
        state = make_initial_state(transcript, self.max_tool_calls)
        try:
            final_state = self._graph.invoke(
                state,
                config={"recursion_limit": self.recursion_limit},
            )
        except GraphRecursionError as exc:
            raise TurnLimitError(
                f"Session did not finish within {self.recursion_limit} steps"
            ) from exc

        messages = list(final_state["messages"])
        return RunResult(
            final_message=messages[-1],
            transcript=messages,
            tool_calls_used=final_state["tool_calls_used"],
        )


def build_orchestrator(
    config: OrchestratorConfig,
    registry: ToolRegistry,
    model_port: ModelPort | None = None,
) -> Orchestrator:
    """Build an orchestrator from explicit configuration.

    ``model_port`` overrides the provider port derived from ``config``.
    """
    return Orchestrator(
        model_port=model_port or build_model_port(config),
        registry=registry,
        max_tool_calls=config.max_tool_calls,
        recursion_limit=config.recursion_limit,
    )
