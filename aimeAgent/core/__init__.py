"""Task tree, its board and the working memory.

Planner and Orchestrator live in ``aimeAgent.core.planner`` and
``aimeAgent.core.orchestrator``.
"""

from .board import TaskBoard, TaskEvent, TaskEventKind, TaskListener
from .memory import WorkingMemory
from .task import Completed, Failed, Task, TaskOutcome, TaskStatus

__all__ = [
    "Completed",
    "Failed",
    "Task",
    "TaskBoard",
    "TaskEvent",
    "TaskEventKind",
    "TaskListener",
    "TaskOutcome",
    "TaskStatus",
    "WorkingMemory",
]
