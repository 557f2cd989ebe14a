"""Unified error types for the orchestrator, its actors and the tool bus."""

from __future__ import annotations


class AimeAgentError(Exception):
    """Base exception for aimeAgent errors."""

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or message


class ModelInvocationError(AimeAgentError):
    """Error during model invocation, including unparseable or invalid JSON replies."""
    pass


class RemoteToolError(AimeAgentError):
    """Error raised by a remote tool client outside of a tool call."""
    pass


class RemoteToolConnectionError(RemoteToolError):
    """The tool server process could not be started or did not answer discovery."""
    pass


def handle_model_error(error: Exception) -> str:
    """Convert model invocation errors to short user-facing messages.

    Args:
        error: Exception raised during model invocation

    Returns:
        User-friendly error message
    """
    if isinstance(error, AimeAgentError):
        return error.user_message

    error_str = str(error).lower()

    if "rate_limit" in error_str or "429" in error_str:
        return "rate limited by the model provider, try again later"

    if "timeout" in error_str:
        return "model response timed out"

    if "context_length" in error_str or "maximum context" in error_str:
        return "conversation too long for the model context window"

    if "invalid_api_key" in error_str or "authentication" in error_str:
        return "model API key rejected"

    if "quota" in error_str or "insufficient" in error_str:
        return "model provider quota exhausted"

    return f"model service unavailable: {error}"
