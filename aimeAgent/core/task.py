"""Task tree node, status values and the tagged execution outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


@dataclass(eq=False)
class Task:
    """Node in the plan tree. Only TaskBoard creates or mutates tasks."""

    id: int
    description: str
    status: TaskStatus = TaskStatus.PENDING
    children: List["Task"] = field(default_factory=list)
    result: Optional[str] = None
    parent_id: Optional[int] = None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def __repr__(self) -> str:
        return (
            f"Task(id={self.id}, status={self.status.value}, "
            f"children={len(self.children)}, description={self.description!r})"
        )


@dataclass(frozen=True, slots=True)
class Completed:
    """Actor finished the task; ``text`` is the task result."""

    text: str


@dataclass(frozen=True, slots=True)
class Failed:
    """Actor gave up on the task; ``reason`` becomes the task result."""

    reason: str


TaskOutcome = Union[Completed, Failed]


__all__ = ["Task", "TaskStatus", "Completed", "Failed", "TaskOutcome"]
