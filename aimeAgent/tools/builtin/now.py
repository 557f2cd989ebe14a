"""Get current UTC datetime."""

from datetime import datetime, timezone

from langchain_core.tools import tool


@tool
def now() -> str:
    """Return the current UTC date and time in ISO 8601 format.

    Use this before reasoning about relative dates such as "tomorrow" or
    "next week".
    """
    return datetime.now(timezone.utc).isoformat()


__all__ = ["now"]
