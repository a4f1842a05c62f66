"""Unit tests for the individual orchestrator graph nodes and router."""
from unittest.mock import MagicMock

import pytest

from commit_cli.models import Message, ToolCallRequest
from commit_cli.orchestrator.exceptions import GraphBuildError
from commit_cli.orchestrator.graph import (
    build_graph,
    make_agent_node,
    make_tools_node,
    route_after_agent,
)
from commit_cli.orchestrator.state import make_initial_state
from commit_cli.tools import FailureKind, ToolFailure, ToolSuccess


# ---------------------------------------------------------------------------
# Helpers / shared fixtures
# ---------------------------------------------------------------------------

def make_call(call_id: str, name: str = "list_dir", **arguments) -> ToolCallRequest:
    return ToolCallRequest(id=call_id, name=name, arguments=arguments)


def make_state(*extra: Message, used: int = 0, budget: int | None = 8):
    state = make_initial_state(
        [Message.system("system prompt"), Message.user("diff payload")],
        max_tool_calls=budget,
    )
    state["messages"] = state["messages"] + list(extra)
    state["tool_calls_used"] = used
    return state


@pytest.fixture
def mock_registry():
    registry = MagicMock()
    registry.definitions.return_value = ["tool-a", "tool-b"]
    registry.invoke.side_effect = lambda name, arguments, call_id="": ToolSuccess(
        content=f"{name} result for {call_id}"
    )
    return registry


# ---------------------------------------------------------------------------
# Agent node
# ---------------------------------------------------------------------------

class TestAgentNode:
    def test_appends_model_reply(self, mock_registry):
        port = MagicMock()
        reply = Message.assistant("feat: add logging helper")
        port.invoke.return_value = reply
        node = make_agent_node(port, mock_registry)

        update = node(make_state())

        assert update == {"messages": [reply]}

    def test_sends_full_transcript_and_tools(self, mock_registry):
        port = MagicMock()
        port.invoke.return_value = Message.assistant("done")
        state = make_state()

        make_agent_node(port, mock_registry)(state)

        messages, tools = port.invoke.call_args.args
        assert messages == state["messages"]
        assert tools == ["tool-a", "tool-b"]

    def test_port_errors_propagate(self, mock_registry):
        port = MagicMock()
        port.invoke.side_effect = TimeoutError("provider timed out")

        with pytest.raises(TimeoutError):
            make_agent_node(port, mock_registry)(make_state())


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

class TestRouteAfterAgent:
    def test_no_tool_calls_ends(self):
        assert route_after_agent(make_state(Message.assistant("fix: x"))) == "end"

    def test_tool_calls_route_to_tools(self):
        state = make_state(Message.assistant("", [make_call("c1")]))
        assert route_after_agent(state) == "tools"

    def test_empty_content_without_calls_ends(self):
        assert route_after_agent(make_state(Message.assistant(""))) == "end"


# ---------------------------------------------------------------------------
# Tools node
# ---------------------------------------------------------------------------

class TestToolsNode:
    def test_results_in_request_order(self, mock_registry):
        calls = [make_call("c1", "list_dir"), make_call("c2", "read_file", file_path="a.py")]
        state = make_state(Message.assistant("", calls))

        update = make_tools_node(mock_registry)(state)

        assert [m.tool_call_id for m in update["messages"]] == ["c1", "c2"]
        assert [m.name for m in update["messages"]] == ["list_dir", "read_file"]
        assert update["messages"][1].content == "read_file result for c2"
        assert update["tool_calls_used"] == 2

    def test_dispatches_sequentially_with_arguments(self, mock_registry):
        calls = [make_call("c1", "read_file", file_path="a.py")]

        make_tools_node(mock_registry)(make_state(Message.assistant("", calls)))

        mock_registry.invoke.assert_called_once_with("read_file", {"file_path": "a.py"}, call_id="c1")

    def test_failures_flattened_to_error_text(self, mock_registry):
        mock_registry.invoke.side_effect = None
        mock_registry.invoke.return_value = ToolFailure(
            kind=FailureKind.NOT_FOUND, message="File not found: a.py"
        )
        state = make_state(Message.assistant("", [make_call("c1", "read_file", file_path="a.py")]))

        update = make_tools_node(mock_registry)(state)

        assert update["messages"][0].content == "Error: File not found: a.py"

    def test_budget_refuses_excess_calls(self, mock_registry):
        calls = [make_call("c1"), make_call("c2"), make_call("c3")]
        state = make_state(Message.assistant("", calls), used=6, budget=8)

        update = make_tools_node(mock_registry)(state)

        assert mock_registry.invoke.call_count == 2
        assert update["tool_calls_used"] == 8
        assert len(update["messages"]) == 3
        assert update["messages"][2].tool_call_id == "c3"
        assert update["messages"][2].content.startswith("Error: Tool-call budget exhausted (8 calls")

    def test_zero_budget_dispatches_nothing(self, mock_registry):
        state = make_state(Message.assistant("", [make_call("c1")]), budget=0)

        update = make_tools_node(mock_registry)(state)

        mock_registry.invoke.assert_not_called()
        assert "budget exhausted" in update["messages"][0].content

    def test_no_budget_means_no_cap(self, mock_registry):
        calls = [make_call(f"c{i}") for i in range(20)]
        state = make_state(Message.assistant("", calls), used=100, budget=None)

        update = make_tools_node(mock_registry)(state)

        assert mock_registry.invoke.call_count == 20
        assert update["tool_calls_used"] == 120


# ---------------------------------------------------------------------------
# Graph construction
# ---------------------------------------------------------------------------

class TestBuildGraph:
    def test_compiles(self, mock_registry):
        graph = build_graph(MagicMock(), mock_registry)
        assert hasattr(graph, "invoke")

    def test_registry_failure_wrapped(self):
        registry = MagicMock()
        registry.definitions.side_effect = RuntimeError("broken registry")

        with pytest.raises(GraphBuildError, match="broken registry"):
            build_graph(MagicMock(), registry)
