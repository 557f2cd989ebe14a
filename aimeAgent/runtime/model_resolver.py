"""Chat model construction from environment-derived settings."""

from __future__ import annotations

from typing import Dict, Optional

from langchain_openai import ChatOpenAI

from aimeAgent.config.settings import ModelSettings, Settings
from aimeAgent.models.client import ChatModelClient


def _chat_kwargs(settings: ModelSettings) -> Dict[str, object]:
    if not settings.api_key:
        raise RuntimeError(
            f"Missing API key for model {settings.model}; set MODEL_CHAT_API_KEY or OPENAI_API_KEY in .env."
        )
    kwargs: Dict[str, object] = {
        "model": settings.model,
        "api_key": settings.api_key,
        "temperature": settings.temperature,
    }
    if settings.base_url:
        kwargs["base_url"] = settings.base_url
    if settings.max_tokens:
        kwargs["max_tokens"] = settings.max_tokens
    return kwargs


def build_chat_model(settings: Settings) -> ChatOpenAI:
    """Build the OpenAI-compatible chat model described by ``settings.model``.

    Raises:
        RuntimeError: no API key is configured
    """
    return ChatOpenAI(**_chat_kwargs(settings.model))


def build_ai_client(settings: Settings, model: Optional[ChatOpenAI] = None) -> ChatModelClient:
    return ChatModelClient(model or build_chat_model(settings))


__all__ = ["build_ai_client", "build_chat_model"]
