"""Interfaces for agent dependencies."""

from __future__ import annotations

from typing import Protocol, Sequence, Type, TypeVar

from langchain_core.messages import BaseMessage
from pydantic import BaseModel

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class AIClient(Protocol):
    """The AI collaborator: free-form text and schema-validated JSON replies.

    Both calls raise on failure; callers pick their own conservative default.
    """

    async def chat_text(self, messages: Sequence[BaseMessage]) -> str:
        ...

    async def chat_json(self, messages: Sequence[BaseMessage], schema: Type[SchemaT]) -> SchemaT:
        ...
