"""save_to_memory / read_from_memory tools bound to one WorkingMemory."""

from __future__ import annotations

import json
from typing import Any, List

from langchain_core.tools import BaseTool, tool

from aimeAgent.core.memory import WorkingMemory
from aimeAgent.tools.base import format_error


def build_memory_tools(memory: WorkingMemory) -> List[BaseTool]:
    """Create the memory tools sharing ``memory``."""

    @tool
    def save_to_memory(key: str, value: Any) -> str:
        """Save a key fact for later tasks (user preference, budget, name, date).

        Input is an object with 'key' and 'value'.
        """
        if not key or value is None:
            return format_error("input must be an object with 'key' and 'value'")
        memory.save(key, value)
        return f"Saved [{key}] to memory."

    @tool
    def read_from_memory(key: str) -> str:
        """Read a fact saved earlier by any task. Input is the 'key' to look up."""
        if not key:
            return format_error("input must be an object with 'key'")
        value = memory.read(key)
        if value is None:
            return f"No memory found for [{key}]."
        return f"Memory [{key}]: {json.dumps(value, ensure_ascii=False, default=str)}"

    return [save_to_memory, read_from_memory]


__all__ = ["build_memory_tools"]
