"""Runtime helpers for building the orchestrator."""

from .app import build_application
from .model_resolver import build_ai_client, build_chat_model

__all__ = ["build_application", "build_ai_client", "build_chat_model"]
