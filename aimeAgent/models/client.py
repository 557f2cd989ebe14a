"""Chat-model adapter used as the AI collaborator.

ChatModelClient wraps any LangChain chat model and offers the two calls the
orchestrator needs: free-form text and a reply validated against a pydantic
schema.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Sequence, Type, TypeVar

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage, SystemMessage
from pydantic import BaseModel, ValidationError

from aimeAgent.utils.error_handler import ModelInvocationError, handle_model_error
from aimeAgent.utils.logging_utils import truncate

LOGGER = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


def _content_to_text(content: Any) -> str:
    """Flatten message content (plain string or list of content blocks) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: List[str] = []
        for block in content:
            if isinstance(block, str):
                parts.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                parts.append(str(block.get("text", "")))
        return "".join(parts)
    return str(content)


def extract_json_object(text: str) -> Any:
    """Pull the JSON object out of a model reply.

    Accepts a bare object, one wrapped in a ```json fence, or one surrounded
    by prose. Raises ``json.JSONDecodeError`` when nothing parses.
    """
    candidates = [text.strip()]
    fenced = _FENCE_RE.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])

    last_error: json.JSONDecodeError | None = None
    for candidate in candidates:
        try:
            return json.loads(candidate)
        except json.JSONDecodeError as exc:
            last_error = exc
    assert last_error is not None
    raise last_error


def _schema_instruction(schema: Type[BaseModel]) -> str:
    rendered = json.dumps(schema.model_json_schema(), ensure_ascii=False, indent=2)
    return (
        "Respond with a single JSON object only, no prose and no code fences. "
        f"The object must match this JSON schema:\n{rendered}"
    )


class ChatModelClient:
    """AI collaborator backed by a LangChain chat model."""

    def __init__(self, model: BaseChatModel):
        self._model = model

    async def chat_text(self, messages: Sequence[BaseMessage]) -> str:
        reply = await self._invoke(messages)
        return reply.strip()

    async def chat_json(self, messages: Sequence[BaseMessage], schema: Type[SchemaT]) -> SchemaT:
        """Ask for a JSON reply and validate it against ``schema``.

        Raises:
            ModelInvocationError: transport failure, unparseable reply or schema mismatch
        """
        reply = await self._invoke(self._with_schema_instruction(messages, schema))

        try:
            payload = extract_json_object(reply)
        except json.JSONDecodeError as exc:
            LOGGER.warning(f"Model reply is not JSON: {truncate(reply)}")
            raise ModelInvocationError(
                f"Could not parse JSON from model reply: {exc}",
                "model returned an unreadable reply",
            ) from exc

        try:
            return schema.model_validate(payload)
        except ValidationError as exc:
            LOGGER.warning(f"Model reply does not match {schema.__name__}: {exc.error_count()} error(s)")
            raise ModelInvocationError(
                f"Model reply failed {schema.__name__} validation: {exc}",
                "model reply did not have the expected shape",
            ) from exc

    async def _invoke(self, messages: Sequence[BaseMessage]) -> str:
        LOGGER.debug(f"Invoking model with {len(messages)} message(s)")
        try:
            response = await self._model.ainvoke(list(messages))
        except Exception as exc:
            raise ModelInvocationError(f"Model invocation failed: {exc}", handle_model_error(exc)) from exc

        text = _content_to_text(response.content)
        LOGGER.debug(f"Model reply: {truncate(text)}")
        return text

    @staticmethod
    def _with_schema_instruction(messages: Sequence[BaseMessage], schema: Type[BaseModel]) -> List[BaseMessage]:
        instruction = _schema_instruction(schema)
        merged = list(messages)
        if merged and isinstance(merged[0], SystemMessage):
            system_text = _content_to_text(merged[0].content)
            merged[0] = SystemMessage(content=f"{system_text}\n\n{instruction}")
        else:
            merged.insert(0, SystemMessage(content=instruction))
        return merged


__all__ = ["ChatModelClient", "extract_json_object"]
