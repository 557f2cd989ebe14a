"""Shared utilities: logging helpers and error types."""

from .error_handler import (
    AimeAgentError,
    ModelInvocationError,
    RemoteToolConnectionError,
    RemoteToolError,
    handle_model_error,
)
from .logging_utils import (
    log_decision,
    log_error,
    log_tool_call,
    log_tool_result,
    log_turn,
    setup_logging,
    truncate,
)

__all__ = [
    "AimeAgentError",
    "ModelInvocationError",
    "RemoteToolConnectionError",
    "RemoteToolError",
    "handle_model_error",
    "log_decision",
    "log_error",
    "log_tool_call",
    "log_tool_result",
    "log_turn",
    "setup_logging",
    "truncate",
]
