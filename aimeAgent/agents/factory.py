"""Actor factory: persona generation and actor-variant selection."""

from __future__ import annotations

import logging
from typing import Sequence, Tuple, Type

from langchain_core.messages import HumanMessage, SystemMessage

from aimeAgent.core.task import Task
from aimeAgent.models.schemas import Persona
from aimeAgent.prompts import GENERIC_PERSONA, PERSONA_SYSTEM_PROMPT, PERSONA_USER_TEMPLATE
from aimeAgent.tools.bus import ToolBus
from aimeAgent.utils.error_handler import handle_model_error

from .actor import DEFAULT_MAX_ITERATIONS, Actor, TravelActor
from .interfaces import AIClient

LOGGER = logging.getLogger(__name__)

TRAVEL_KEYWORDS: Tuple[str, ...] = (
    "旅行", "机票", "酒店", "航班", "行程", "旅游", "规划", "交通", "游玩", "出行",
    "travel", "trip", "flight", "hotel", "itinerary", "vacation", "journey", "tour",
)


class ActorFactory:
    """Builds one fresh actor per task, wired to the shared tool bus."""

    def __init__(
        self,
        ai_client: AIClient,
        tool_bus: ToolBus,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        travel_keywords: Sequence[str] = TRAVEL_KEYWORDS,
    ):
        self.ai_client = ai_client
        self.tool_bus = tool_bus
        self.max_iterations = max_iterations
        self.travel_keywords = tuple(keyword.lower() for keyword in travel_keywords)

    async def create_actor(self, task: Task) -> Actor:
        persona = await self.generate_persona(task)
        actor_cls = self.select_actor_class(task)
        LOGGER.info(f"Creating {actor_cls.__name__} for task #{task.id}")
        return actor_cls(persona, self.ai_client, self.tool_bus, max_iterations=self.max_iterations)

    def select_actor_class(self, task: Task) -> Type[Actor]:
        description = task.description.lower()
        if any(keyword in description for keyword in self.travel_keywords):
            return TravelActor
        return Actor

    async def generate_persona(self, task: Task) -> str:
        """Ask for a persona; any failure or an empty reply yields the generic persona."""
        messages = [
            SystemMessage(content=PERSONA_SYSTEM_PROMPT),
            HumanMessage(content=PERSONA_USER_TEMPLATE.format(description=task.description)),
        ]
        try:
            reply = await self.ai_client.chat_json(messages, Persona)
        except Exception as exc:
            LOGGER.error(f"Persona generation failed for task #{task.id}: {handle_model_error(exc)}")
            return GENERIC_PERSONA

        persona = reply.persona.strip()
        if not persona:
            LOGGER.warning(f"Empty persona for task #{task.id}; using the generic persona")
            return GENERIC_PERSONA
        LOGGER.debug(f"  Persona: {persona}")
        return persona


__all__ = ["ActorFactory", "TRAVEL_KEYWORDS"]
