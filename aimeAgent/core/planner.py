"""Planner: decomposes tasks and reviews finished stages with the AI collaborator."""

from __future__ import annotations

import logging
from typing import List

from langchain_core.messages import HumanMessage, SystemMessage

from aimeAgent.agents.interfaces import AIClient
from aimeAgent.models.schemas import ReviewDecision, SubtaskPlan
from aimeAgent.prompts import (
    DECOMPOSE_SYSTEM_PROMPT,
    DECOMPOSE_USER_TEMPLATE,
    REVIEW_SYSTEM_PROMPT,
    REVIEW_USER_TEMPLATE,
)
from aimeAgent.utils.error_handler import handle_model_error

from .board import TaskBoard
from .task import Task, TaskStatus

LOGGER = logging.getLogger(__name__)


class Planner:
    """Turns tasks into sub-plans and closes finished stages.

    All board mutations go through the TaskBoard; a collaborator failure
    leaves the board untouched.
    """

    def __init__(self, board: TaskBoard, ai_client: AIClient):
        self.board = board
        self.ai_client = ai_client

    async def decompose_task(self, task: Task) -> List[Task]:
        """Ask for subtasks of ``task`` and append them.

        Returns:
            The new children; empty when the reply was empty or the call failed
        """
        LOGGER.info(f"Decomposing task #{task.id}: {task.description}")
        messages = [
            SystemMessage(content=DECOMPOSE_SYSTEM_PROMPT),
            HumanMessage(content=DECOMPOSE_USER_TEMPLATE.format(description=task.description)),
        ]
        try:
            plan = await self.ai_client.chat_json(messages, SubtaskPlan)
        except Exception as exc:
            LOGGER.error(f"Decomposition of task #{task.id} failed: {handle_model_error(exc)}")
            return []

        if not plan.subtasks:
            LOGGER.warning(f"Decomposition of task #{task.id} returned no subtasks")
            return []

        return self.board.add_subtasks(task.id, plan.subtasks)

    async def review_and_refine_plan(self, parent: Task) -> bool:
        """Review a stage whose children are all finished.

        Returns:
            True when new subtasks were added (the plan changed), otherwise False.
            On ``completed`` the parent is marked completed with the assessment;
            on a collaborator failure the parent stays pending.
        """
        LOGGER.info(f"Reviewing stage #{parent.id}: {parent.description}")
        child_results = "\n".join(
            f'- Subtask "{child.description}" ({child.status.value}): {child.result or "no output"}'
            for child in parent.children
        )
        messages = [
            SystemMessage(content=REVIEW_SYSTEM_PROMPT),
            HumanMessage(
                content=REVIEW_USER_TEMPLATE.format(description=parent.description, child_results=child_results)
            ),
        ]
        try:
            review = await self.ai_client.chat_json(messages, ReviewDecision)
        except Exception as exc:
            LOGGER.error(f"Review of task #{parent.id} failed: {handle_model_error(exc)}")
            return False

        LOGGER.info(f"  Assessment: {review.assessment}")
        if review.status == "needs_revision" and review.new_subtasks:
            added = self.board.add_subtasks(parent.id, review.new_subtasks)
            LOGGER.info(f"  Plan revised: {len(added)} subtask(s) added under #{parent.id}")
            return bool(added)

        self.board.update_task(parent.id, TaskStatus.COMPLETED, review.assessment)
        return False


__all__ = ["Planner"]
