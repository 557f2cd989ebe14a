"""Task board: the single owner of the plan tree.

The board is the only component that creates tasks or changes their status.
Tasks live in an id-indexed arena; every traversal is an explicit-stack
pre-order walk (leftmost child first), so tree depth is not bounded by the
interpreter recursion limit.

State changes are reported to listeners passed at construction time::

    board = TaskBoard(listeners=[lambda event: print(event.kind, event.task.id)])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .task import Task, TaskStatus

LOGGER = logging.getLogger(__name__)


class TaskEventKind(str, Enum):
    PLAN_INITIALIZED = "plan_initialized"
    SUBTASKS_ADDED = "subtasks_added"
    TASK_UPDATED = "task_updated"


@dataclass(frozen=True, slots=True)
class TaskEvent:
    """Notification of a board mutation.

    ``task`` is the root for PLAN_INITIALIZED, the parent for SUBTASKS_ADDED
    and the updated task for TASK_UPDATED.
    """

    kind: TaskEventKind
    task: Task
    detail: str = ""


TaskListener = Callable[[TaskEvent], None]

_STATUS_ICONS = {
    TaskStatus.COMPLETED: "[√]",
    TaskStatus.FAILED: "[×]",
    TaskStatus.IN_PROGRESS: "[~]",
    TaskStatus.PENDING: "[ ]",
}


class TaskBoard:
    """Owns the task tree and answers every traversal question about it."""

    def __init__(self, listeners: Optional[Iterable[TaskListener]] = None) -> None:
        self._root: Optional[Task] = None
        self._tasks: Dict[int, Task] = {}
        self._next_id = 1  # Never reset, so ids stay unique across plans
        self._listeners: List[TaskListener] = list(listeners or [])

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def initialize_plan(self, goal: str) -> Task:
        """Replace any existing tree with a single pending root task."""
        root = self._new_task(goal, parent_id=None)
        self._root = root
        self._tasks = {root.id: root}
        LOGGER.info(f"Plan initialized, goal: {goal}")
        self._emit(TaskEventKind.PLAN_INITIALIZED, root, goal)
        return root

    def add_subtasks(self, parent_id: int, descriptions: Sequence[str]) -> List[Task]:
        """Append one pending child per description, in order.

        Returns the new children, or an empty list when the parent is unknown.
        """
        parent = self._tasks.get(parent_id)
        if parent is None:
            LOGGER.error(f"Cannot add subtasks: unknown parent task id {parent_id}")
            return []

        created = [self._new_task(description, parent_id=parent.id) for description in descriptions]
        for task in created:
            self._tasks[task.id] = task
        parent.children.extend(created)

        LOGGER.info(f"Added {len(created)} subtask(s) under task #{parent_id}")
        if created:
            self._emit(
                TaskEventKind.SUBTASKS_ADDED,
                parent,
                ", ".join(f"#{task.id}" for task in created),
            )
        return created

    def update_task(self, task_id: int, status: TaskStatus, result: Optional[str]) -> None:
        """Set status and result on one task. Ancestors are never touched."""
        task = self._tasks.get(task_id)
        if task is None:
            LOGGER.error(f"Cannot update task: unknown task id {task_id}")
            return

        task.status = TaskStatus(status)
        task.result = result
        LOGGER.info(f"Task #{task_id} ('{task.description}') -> {task.status.value}")
        self._emit(TaskEventKind.TASK_UPDATED, task, task.status.value)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    @property
    def root(self) -> Optional[Task]:
        return self._root

    def get_task(self, task_id: int) -> Optional[Task]:
        return self._tasks.get(task_id)

    def find_parent_of(self, task: Task) -> Optional[Task]:
        if task.parent_id is None:
            return None
        return self._tasks.get(task.parent_id)

    def iter_tasks(self) -> Iterator[Task]:
        """Yield every task in pre-order, leftmost child first."""
        stack: List[Task] = [self._root] if self._root else []
        while stack:
            task = stack.pop()
            yield task
            stack.extend(reversed(task.children))

    def get_next_pending_task(self) -> Optional[Task]:
        """Return the leftmost pending leaf in pre-order, or None.

        Interior nodes are only waypoints; they are never returned.
        """
        for task in self.iter_tasks():
            if task.status is TaskStatus.PENDING and task.is_leaf:
                return task
        return None

    def find_parent_task_to_review(self) -> Optional[Task]:
        """Return the first pending interior task whose children are all terminal.

        The walk only descends through pending interior tasks: a subtree that
        was already closed by review is not searched again.
        """
        stack: List[Task] = [self._root] if self._root else []
        while stack:
            task = stack.pop()
            if task.is_leaf or task.status is not TaskStatus.PENDING:
                continue
            if all(child.is_terminal for child in task.children):
                return task
            stack.extend(reversed(task.children))
        return None

    # ------------------------------------------------------------------
    # Context assembly
    # ------------------------------------------------------------------

    def get_task_context(self, task: Task) -> str:
        """Build the briefing handed to an actor: root goal plus finished sibling work."""
        if self._root is None:
            return "No overall goal has been set."

        context = f"Overall goal: {self._root.description}"

        parent = self.find_parent_of(task)
        if parent is None:
            return context

        siblings = [
            sibling
            for sibling in parent.children
            if sibling.id != task.id and sibling.status is TaskStatus.COMPLETED and sibling.result
        ]
        if siblings:
            lines = "\n".join(f'- "{sibling.description}": {sibling.result}' for sibling in siblings)
            context += f"\n\nResults of related completed tasks:\n{lines}"
        return context

    def get_all_completed_results(self) -> List[Tuple[str, str]]:
        """Collect (description, result) for every finished task that produced a result."""
        return [
            (task.description, task.result)
            for task in self.iter_tasks()
            if task.is_terminal and task.result
        ]

    def render(self) -> str:
        """Render the tree as indented text, one line per task plus result lines."""
        if self._root is None:
            return "(empty plan)"

        lines: List[str] = []
        stack: List[Tuple[Task, int]] = [(self._root, 0)]
        while stack:
            task, depth = stack.pop()
            indent = "  " * depth
            lines.append(f"{indent}{_STATUS_ICONS[task.status]} {task.description} (ID: {task.id})")
            if task.result:
                prefix = f"{indent}  └──> "
                lines.append(prefix + task.result.replace("\n", f"\n{prefix}"))
            stack.extend((child, depth + 1) for child in reversed(task.children))
        return "\n".join(lines)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _new_task(self, description: str, parent_id: Optional[int]) -> Task:
        task = Task(id=self._next_id, description=description, parent_id=parent_id)
        self._next_id += 1
        return task

    def _emit(self, kind: TaskEventKind, task: Task, detail: str) -> None:
        event = TaskEvent(kind=kind, task=task, detail=detail)
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                LOGGER.exception(f"Task listener failed on {kind.value} for task #{task.id}")
