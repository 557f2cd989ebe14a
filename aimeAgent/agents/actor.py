"""Actors execute one leaf task with a bounded ReAct (think, act, observe) loop."""

from __future__ import annotations

import logging
from enum import Enum
from typing import List

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from aimeAgent.core.task import Completed, Failed, Task, TaskOutcome
from aimeAgent.models.schemas import ActorDecision
from aimeAgent.prompts import (
    ACTOR_CONTINUE_HINT,
    ACTOR_SYSTEM_TEMPLATE,
    ACTOR_USER_TEMPLATE,
    TRAVEL_GUIDANCE,
)
from aimeAgent.tools.base import is_error_result
from aimeAgent.tools.bus import ToolBus
from aimeAgent.utils.error_handler import handle_model_error
from aimeAgent.utils.logging_utils import truncate

from .interfaces import AIClient

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 5


class ActorPhase(str, Enum):
    THINKING = "thinking"
    ACTING = "acting"
    DONE = "done"


class Actor:
    """Generic expert: persona + shared tool bus + ReAct loop.

    A fresh actor (and an empty history) is used for every task.
    """

    kind = "generic"
    guidance = ""

    def __init__(
        self,
        persona: str,
        ai_client: AIClient,
        tool_bus: ToolBus,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        if max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        self.persona = persona
        self.ai_client = ai_client
        self.tool_bus = tool_bus
        self.max_iterations = max_iterations
        self.phase = ActorPhase.THINKING
        self.iterations = 0

    async def run(self, task: Task, context: str) -> TaskOutcome:
        """Drive the loop until a final answer, a failure or the iteration budget."""
        LOGGER.info(f"[{self.kind} actor] Task #{task.id}: {task.description}")
        history: List[BaseMessage] = []

        for iteration in range(1, self.max_iterations + 1):
            self.iterations = iteration
            self.phase = ActorPhase.THINKING
            LOGGER.debug(f"  ReAct iteration {iteration}/{self.max_iterations}")

            try:
                decision = await self.think(task, context, history)
            except Exception as exc:
                LOGGER.error(f"  Think step failed for task #{task.id}: {exc}")
                return self._finish(Failed(f"could not decide the next step: {handle_model_error(exc)}"))

            if decision.thought:
                LOGGER.debug(f"  Thought: {truncate(decision.thought)}")

            if decision.action == "final_answer":
                answer = (decision.final_answer or decision.thought or "").strip()
                if answer:
                    return self._finish(Completed(answer))

            if decision.action == "fail_task":
                return self._finish(Failed(decision.reason or decision.thought or "the actor gave up without a reason"))

            self.phase = ActorPhase.ACTING
            history.append(AIMessage(content=decision.model_dump_json(exclude_none=True)))

            if decision.action == "final_answer":
                history.append(HumanMessage(content="Observation: the final_answer was empty. Give the actual answer text."))
                continue

            if not decision.tool_name:
                history.append(
                    HumanMessage(content="Observation: a tool_call needs tool_name. Pick a listed tool or answer.")
                )
                continue

            result = await self.tool_bus.execute_tool(decision.tool_name, decision.tool_input)
            history.append(HumanMessage(content=f"Tool result ({decision.tool_name}): {result}"))

            if is_error_result(result):
                return self._finish(Failed(f"tool '{decision.tool_name}' failed: {result}"))

        return self._finish(
            Failed(f"iteration budget exhausted after {self.max_iterations} iterations without a final answer")
        )

    async def think(self, task: Task, context: str, history: List[BaseMessage]) -> ActorDecision:
        """Ask the AI collaborator for the next step."""
        messages: List[BaseMessage] = [
            SystemMessage(content=self.system_prompt()),
            HumanMessage(
                content=ACTOR_USER_TEMPLATE.format(
                    context=context,
                    history=self._render_history(history),
                    description=task.description,
                )
            ),
        ]
        return await self.ai_client.chat_json(messages, ActorDecision)

    def system_prompt(self) -> str:
        return ACTOR_SYSTEM_TEMPLATE.format(
            persona=self.persona,
            tool_descriptions=self.tool_bus.get_all_tool_descriptions(),
            guidance=self.guidance,
        )

    @staticmethod
    def _render_history(history: List[BaseMessage]) -> str:
        if not history:
            return "(empty)"
        lines = [f"{'assistant' if isinstance(message, AIMessage) else 'user'}: {message.content}" for message in history]
        lines.append(ACTOR_CONTINUE_HINT)
        return "\n".join(lines)

    def _finish(self, outcome: TaskOutcome) -> TaskOutcome:
        self.phase = ActorPhase.DONE
        if isinstance(outcome, Completed):
            LOGGER.info(f"  ✓ Final answer after {self.iterations} iteration(s)")
        else:
            LOGGER.warning(f"  ✗ Task failed: {truncate(outcome.reason)}")
        return outcome


class TravelActor(Actor):
    """Travel-domain expert: same loop, extra planning guidance in the prompt."""

    kind = "travel"
    guidance = TRAVEL_GUIDANCE


__all__ = ["Actor", "ActorPhase", "TravelActor", "DEFAULT_MAX_ITERATIONS"]
