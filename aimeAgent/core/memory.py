"""Key/value working memory shared by all actors of one run."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

LOGGER = logging.getLogger(__name__)


class WorkingMemory:
    """Facts an actor wants later tasks to see (budget, names, dates, ...)."""

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def save(self, key: str, value: Any) -> None:
        self._entries[key] = value
        LOGGER.info(f"Memory updated: [{key}]")

    def read(self, key: str) -> Optional[Any]:
        return self._entries.get(key)

    def read_all(self) -> str:
        """All entries as ``- key: <json value>`` lines."""
        if not self._entries:
            return "No memories stored yet."
        return "\n".join(
            f"- {key}: {json.dumps(value, ensure_ascii=False, default=str)}"
            for key, value in self._entries.items()
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


__all__ = ["WorkingMemory"]
