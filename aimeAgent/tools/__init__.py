"""Tool bus and the error-as-text convention shared by all tool sources."""

from .base import ERROR_MARKER, format_error, is_error_result
from .bus import LocalToolSource, RemoteToolSource, ToolBus, ToolSource

__all__ = [
    "ERROR_MARKER",
    "format_error",
    "is_error_result",
    "LocalToolSource",
    "RemoteToolSource",
    "ToolBus",
    "ToolSource",
]
