"""LangGraph orchestrator graph for a commit message session.

Two nodes alternate: the agent node asks the model for the next assistant
message, the tools node runs the tool calls that message requested. The
session ends as soon as the model answers without requesting tools.
"""

import logging
from typing import Callable

from langgraph.graph import END, START, StateGraph

from commit_cli.agents.model_port import ModelPort
from commit_cli.models import Message, Role
from commit_cli.orchestrator.exceptions import GraphBuildError
from commit_cli.orchestrator.state import ConversationState
from commit_cli.tools import FailureKind, ToolFailure, ToolRegistry

logger = logging.getLogger(__name__)

AGENT_NODE = "agent"
TOOLS_NODE = "tools"


def make_agent_node(
    model_port: ModelPort,
    registry: ToolRegistry,
) -> Callable[[ConversationState], dict]:
    """Factory: returns the AGENT node closure.

    The closure sends the full transcript and the registered tool definitions
    to the model port and appends the assistant reply. Port errors are not
    caught; they end the session and reach the caller unchanged.
    """
    tool_definitions = registry.definitions()

    def agent_node(state: ConversationState) -> dict:
        reply = model_port.invoke(list(state["messages"]), tool_definitions)
        logger.debug(
            "agent turn: %d tool call(s) requested, %d chars of content",
            len(reply.tool_calls),
            len(reply.content),
        )
        return {"messages": [reply]}

    return agent_node


def route_after_agent(state: ConversationState) -> str:
    """Router for the post-agent conditional edge.

    Returns:
        "tools" if the latest assistant message requests tools, "end" otherwise.
    """
    last = state["messages"][-1]
    if last.role == Role.ASSISTANT and last.tool_calls:
        return "tools"
    return "end"


def make_tools_node(registry: ToolRegistry) -> Callable[[ConversationState], dict]:
    """Factory: returns the TOOLS node closure.

    The closure dispatches every tool call of the latest assistant message in
    request order and appends one tool message per call. Once the session's
    tool-call budget is spent, remaining calls are answered with a
    budget-exceeded error instead of being dispatched.
    """

    def tools_node(state: ConversationState) -> dict:
        request = state["messages"][-1]
        used = state["tool_calls_used"]
        budget = state["max_tool_calls"]

        results: list[Message] = []
        for call in request.tool_calls:
            if budget is not None and used >= budget:
                logger.info("tool call %s refused: budget of %d spent", call.name, budget)
                result = ToolFailure(
                    kind=FailureKind.BUDGET_EXCEEDED,
                    message=(
                        f"Tool-call budget exhausted ({budget} calls per session). "
                        "Write the commit message with the information you already have."
                    ),
                )
            else:
                used += 1
                result = registry.invoke(call.name, call.arguments, call_id=call.id)
            results.append(Message.tool_result(call.id, call.name, result.to_text()))

        return {"messages": results, "tool_calls_used": used}

    return tools_node


def build_graph(model_port: ModelPort, registry: ToolRegistry):
    """Build and compile the agent/tools StateGraph.

    Edge topology:
      START -> agent
      agent -> conditional(route_after_agent) -> {tools, END}
      tools -> agent

    No checkpointer; the transcript lives only for the duration of invoke().

    Raises:
        GraphBuildError: If graph construction fails.
    """
    try:
        graph = StateGraph(ConversationState)

        graph.add_node(AGENT_NODE, make_agent_node(model_port, registry))
        graph.add_node(TOOLS_NODE, make_tools_node(registry))

        graph.add_edge(START, AGENT_NODE)
        graph.add_conditional_edges(
            AGENT_NODE,
            route_after_agent,
            {
                "tools": TOOLS_NODE,
                "end": END,
            },
        )
        graph.add_edge(TOOLS_NODE, AGENT_NODE)

        return graph.compile()

    except Exception as exc:
        raise GraphBuildError(f"Failed to build orchestrator graph: {exc}") from exc
