"""ask_user tool - the actor asks the person at the terminal for missing information."""

from __future__ import annotations

import asyncio
import sys

from langchain_core.tools import tool
from pydantic import BaseModel, Field

from aimeAgent.tools.base import format_error


class AskUserInput(BaseModel):
    """Input of the ask_user tool."""

    question: str = Field(..., description="The specific question to put to the user")


def _prompt(question: str) -> str:
    print("\n-------------------------")
    print(f"🤔 [Agent asks]: {question}")
    sys.stdout.flush()
    answer = input("> ")
    print("-------------------------")
    return answer


@tool(args_schema=AskUserInput)
async def ask_user(question: str) -> str:
    """Ask the user a question and wait for the typed answer.

    Use this when a task cannot continue without information only the user
    has (preferences, budget, dates, confirmation). Ask one clear, specific
    question per call.
    """
    loop = asyncio.get_running_loop()
    try:
        # input() blocks, so it runs in the default executor
        answer = await loop.run_in_executor(None, _prompt, question)
    except EOFError:
        return format_error("no interactive input available")
    return answer.strip() or "(no answer)"


__all__ = ["ask_user", "AskUserInput"]
