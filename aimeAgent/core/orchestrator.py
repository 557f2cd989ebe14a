"""Orchestrator: the turn loop that drives a goal to a finished task tree.

Each turn handles exactly one unit of work:

1. a pending stage whose children are all finished is reviewed, or
2. the leftmost pending leaf is decomposed or executed by a fresh actor.

Remote tool connections are closed on every exit path before the final
report is written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.tools import BaseTool

from aimeAgent.agents.actor import DEFAULT_MAX_ITERATIONS
from aimeAgent.agents.factory import ActorFactory
from aimeAgent.agents.interfaces import AIClient
from aimeAgent.models.schemas import DecomposeDecision
from aimeAgent.prompts import (
    JUDGE_SYSTEM_PROMPT,
    JUDGE_USER_TEMPLATE,
    SYNTHESIS_SYSTEM_PROMPT,
    SYNTHESIS_USER_TEMPLATE,
)
from aimeAgent.tools.bus import ToolBus
from aimeAgent.tools.mcp.client import RemoteServerConfig
from aimeAgent.utils.error_handler import handle_model_error
from aimeAgent.utils.logging_utils import log_decision, log_turn

from .board import TaskBoard
from .decision import TaskKind, classify_task
from .memory import WorkingMemory
from .planner import Planner
from .task import Completed, Task, TaskStatus

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 50


@dataclass
class RunReport:
    """Outcome of one ``Orchestrator.run``."""

    goal: str
    turns: int
    finished: bool
    budget_exhausted: bool
    final_report: Optional[str]
    tree: str


class Orchestrator:
    def __init__(
        self,
        ai_client: AIClient,
        tool_bus: Optional[ToolBus] = None,
        board: Optional[TaskBoard] = None,
        memory: Optional[WorkingMemory] = None,
        max_turns: int = DEFAULT_MAX_TURNS,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ):
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.ai_client = ai_client
        self.tool_bus = tool_bus or ToolBus()
        self.board = board or TaskBoard()
        self.memory = memory
        self.max_turns = max_turns
        self.planner = Planner(self.board, ai_client)
        self.actor_factory = ActorFactory(ai_client, self.tool_bus, max_iterations=max_iterations)

    async def initialize_tools(
        self,
        local_tools: Iterable[BaseTool] = (),
        servers: Optional[Mapping[str, RemoteServerConfig]] = None,
    ) -> None:
        """Register local tools, then connect every enabled MCP server."""
        for tool in local_tools:
            self.tool_bus.register_local_tool(tool)
        if servers:
            await self.tool_bus.register_remote_servers(servers)
        LOGGER.info(f"Tool bus ready: {', '.join(self.tool_bus.tool_names) or '(no tools)'}")

    async def run(self, goal: str) -> RunReport:
        """Drive ``goal`` until no work is left or the turn budget is spent."""
        LOGGER.info(f"New goal: {goal}")
        self.board.initialize_plan(goal)

        turn = 0
        finished = False
        try:
            while turn < self.max_turns:
                turn += 1
                log_turn(LOGGER, turn, self.max_turns, self.board.render())
                if await self._step(turn, goal):
                    finished = True
                    break
        finally:
            await self.tool_bus.close_all_connections()

        if not finished:
            # The last allowed turn may have finished the final piece of work
            finished = self.board.find_parent_task_to_review() is None and self.board.get_next_pending_task() is None
        budget_exhausted = not finished
        if budget_exhausted:
            LOGGER.warning(f"Turn budget of {self.max_turns} exhausted with work still pending")
        else:
            LOGGER.info(f"All tasks finished after {turn} turn(s)")

        final_report = await self.synthesize(goal)
        return RunReport(
            goal=goal,
            turns=turn,
            finished=finished,
            budget_exhausted=budget_exhausted,
            final_report=final_report,
            tree=self.board.render(),
        )

    async def _step(self, turn: int, goal: str) -> bool:
        """Run one turn. Returns True when there is nothing left to do."""
        parent = self.board.find_parent_task_to_review()
        if parent is not None:
            await self.planner.review_and_refine_plan(parent)
            return False

        task = self.board.get_next_pending_task()
        if task is None:
            return True

        LOGGER.info(f"Working on task #{task.id}: {task.description}")
        if await self.should_decompose(task, turn, goal):
            await self.planner.decompose_task(task)
        else:
            await self.execute_task(task)
        return False

    async def should_decompose(self, task: Task, turn: int, goal: str) -> bool:
        if turn == 1:
            log_decision(LOGGER, task.id, "decompose", "the first turn always builds the initial plan")
            return True

        kind = classify_task(task)
        if kind is TaskKind.COMPLEX:
            log_decision(LOGGER, task.id, "decompose", "complex keyword")
            return True
        if kind is TaskKind.SIMPLE:
            log_decision(LOGGER, task.id, "execute", "simple keyword")
            return False

        parent = self.board.find_parent_of(task)
        return await self.should_decompose_by_ai(task, parent.description if parent else None, goal)

    async def should_decompose_by_ai(self, task: Task, parent_description: Optional[str], goal: str) -> bool:
        """AI tie-break for ambiguous tasks. Any failure means decompose."""
        messages = [
            SystemMessage(content=JUDGE_SYSTEM_PROMPT),
            HumanMessage(
                content=JUDGE_USER_TEMPLATE.format(
                    goal=goal,
                    parent_description=parent_description or "(none)",
                    description=task.description,
                )
            ),
        ]
        try:
            verdict = await self.ai_client.chat_json(messages, DecomposeDecision)
        except Exception as exc:
            LOGGER.error(f"Decompose judge failed for task #{task.id}: {handle_model_error(exc)}")
            log_decision(LOGGER, task.id, "decompose", "judge unavailable")
            return True

        log_decision(LOGGER, task.id, verdict.decision, verdict.reason)
        return verdict.decision == "decompose"

    async def execute_task(self, task: Task) -> None:
        self.board.update_task(task.id, TaskStatus.IN_PROGRESS, None)
        context = self.board.get_task_context(task)
        if self.memory is not None and len(self.memory):
            context += f"\n\nWorking memory:\n{self.memory.read_all()}"

        actor = await self.actor_factory.create_actor(task)
        outcome = await actor.run(task, context)

        if isinstance(outcome, Completed):
            self.board.update_task(task.id, TaskStatus.COMPLETED, outcome.text)
        else:
            self.board.update_task(task.id, TaskStatus.FAILED, outcome.reason)

    async def synthesize(self, goal: str) -> Optional[str]:
        """Combine all finished results into one report; None when there is nothing to report."""
        results = self.board.get_all_completed_results()
        if not results:
            LOGGER.info("No results to synthesize")
            return None

        rendered = "\n".join(f'- "{description}": {result}' for description, result in results)
        messages = [
            SystemMessage(content=SYNTHESIS_SYSTEM_PROMPT),
            HumanMessage(content=SYNTHESIS_USER_TEMPLATE.format(goal=goal, results=rendered)),
        ]
        try:
            return await self.ai_client.chat_text(messages)
        except Exception as exc:
            LOGGER.error(f"Final report failed: {handle_model_error(exc)}")
            return None


__all__ = ["Orchestrator", "RunReport", "DEFAULT_MAX_TURNS"]
