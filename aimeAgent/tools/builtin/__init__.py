"""Built-in local tools."""

from __future__ import annotations

from typing import List, Optional

from langchain_core.tools import BaseTool

from aimeAgent.core.memory import WorkingMemory

from .ask_user import ask_user
from .calc import calc
from .memory import build_memory_tools
from .now import now


def builtin_tools(memory: Optional[WorkingMemory] = None, interactive: bool = True) -> List[BaseTool]:
    """Default local tool set; ``interactive=False`` leaves out ask_user."""
    tools: List[BaseTool] = [now, calc]
    if interactive:
        tools.append(ask_user)
    if memory is not None:
        tools.extend(build_memory_tools(memory))
    return tools


__all__ = ["ask_user", "builtin_tools", "build_memory_tools", "calc", "now"]
