"""Exceptions for orchestrator operations.

Note: Names chosen to avoid collisions with stdlib and framework exceptions.
"""


class OrchestratorError(Exception):
    """Base exception for all orchestrator operations."""


class GraphBuildError(OrchestratorError):
    """Raised when graph construction fails."""


class TurnLimitError(OrchestratorError):
    """Raised when a session exceeds the configured number of graph steps."""
