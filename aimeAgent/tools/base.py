"""Error-as-text convention shared by every tool source."""

from __future__ import annotations

ERROR_MARKER = "error:"


def format_error(message: str) -> str:
    """Return ``message`` as an error-marked tool result."""
    return f"{ERROR_MARKER} {message}"


def is_error_result(result: str) -> bool:
    return result.lstrip().lower().startswith(ERROR_MARKER)


__all__ = ["ERROR_MARKER", "format_error", "is_error_result"]
