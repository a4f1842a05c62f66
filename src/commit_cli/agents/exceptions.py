"""Exceptions for model ports and generation sessions.

Errors raised by the provider SDKs while a session is running are not
wrapped; they reach the caller unmodified.
"""


class AgentError(Exception):
    """Base exception for all agent operations."""


class ProviderConfigError(AgentError):
    """Raised when a model port cannot be built (unknown provider, no API key)."""


class SessionError(AgentError):
    """Base exception for generation session failures."""


class NothingToCommitError(SessionError):
    """Raised when a session is requested for an empty diff bundle."""


class EmptyMessageError(SessionError):
    """Raised when the model's final answer sanitizes to an empty message."""
