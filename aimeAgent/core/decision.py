"""Keyword rule for the decompose-or-execute decision."""

from __future__ import annotations

from enum import Enum
from typing import Sequence, Tuple

from .task import Task

COMPLEX_KEYWORDS: Tuple[str, ...] = ("研究", "分析", "research", "analyze", "analyse", "analysis")
SIMPLE_KEYWORDS: Tuple[str, ...] = (
    "列出", "查找", "查询", "获取", "购买", "预订", "发送", "确认", "检查",
    "list", "find", "look up", "query", "fetch", "get", "buy", "book", "send", "confirm", "check",
)


class TaskKind(str, Enum):
    COMPLEX = "complex"
    SIMPLE = "simple"
    AMBIGUOUS = "ambiguous"


def _matches(description: str, keywords: Sequence[str]) -> bool:
    words = description.split()
    for keyword in keywords:
        if keyword.isascii():
            # ASCII keywords match whole words (or phrases) so "get" misses "target"
            if " " in keyword:
                if keyword in description:
                    return True
            elif any(word.strip(".,;:!?\"'()") == keyword for word in words):
                return True
        elif keyword in description:
            return True
    return False


def classify_task(
    task: Task,
    complex_keywords: Sequence[str] = COMPLEX_KEYWORDS,
    simple_keywords: Sequence[str] = SIMPLE_KEYWORDS,
) -> TaskKind:
    """Fast rule: complex keywords win over simple ones; no match is ambiguous.

    A task that already has children counts as simple: it is never decomposed twice.
    """
    if task.children:
        return TaskKind.SIMPLE

    description = task.description.lower()
    if _matches(description, complex_keywords):
        return TaskKind.COMPLEX
    if _matches(description, simple_keywords):
        return TaskKind.SIMPLE
    return TaskKind.AMBIGUOUS


__all__ = ["TaskKind", "classify_task", "COMPLEX_KEYWORDS", "SIMPLE_KEYWORDS"]
