"""Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and ensures proper test environment setup.
"""

import sys
from collections import defaultdict, deque
from pathlib import Path
from typing import Any, Deque, Dict, List, Sequence, Type

import pytest

# Ensure project root is in PYTHONPATH for imports to work
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from aimeAgent.utils.error_handler import ModelInvocationError  # noqa: E402

TEXT = "text"


class ScriptedAIClient:
    """AI collaborator double that replays canned replies.

    Replies are queued per schema class name (``"SubtaskPlan"``, ``"Persona"``,
    ...) or under ``"text"`` for ``chat_text``. A queued exception is raised;
    a queued dict is validated into the requested schema. An exhausted queue
    raises ModelInvocationError unless a default was given for that key.
    """

    def __init__(self, script: Dict[str, Sequence[Any]] = None, defaults: Dict[str, Any] = None):
        self._queues: Dict[str, Deque[Any]] = defaultdict(deque)
        for key, replies in (script or {}).items():
            self._queues[key].extend(replies)
        self._defaults = dict(defaults or {})
        self.calls: List[tuple] = []

    def queue(self, key: str, *replies: Any) -> None:
        self._queues[key].extend(replies)

    def calls_for(self, key: str) -> List[Any]:
        return [messages for called_key, messages in self.calls if called_key == key]

    def _next(self, key: str) -> Any:
        if self._queues[key]:
            reply = self._queues[key].popleft()
        elif key in self._defaults:
            reply = self._defaults[key]
        else:
            raise ModelInvocationError(f"no scripted reply for {key}")
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def chat_text(self, messages) -> str:
        self.calls.append((TEXT, list(messages)))
        return self._next(TEXT)

    async def chat_json(self, messages, schema: Type):
        self.calls.append((schema.__name__, list(messages)))
        reply = self._next(schema.__name__)
        return reply if isinstance(reply, schema) else schema.model_validate(reply)


@pytest.fixture
def scripted_ai():
    """Factory for ScriptedAIClient instances."""
    return ScriptedAIClient


@pytest.fixture
def math_server_path():
    """Path to the sample arithmetic MCP server."""
    return project_root / "aimeAgent" / "mcp_servers" / "math_server.py"
