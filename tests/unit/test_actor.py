"""Unit tests for the ReAct actor loop."""

import pytest
from langchain_core.tools import tool

from aimeAgent.agents.actor import Actor, ActorPhase, TravelActor
from aimeAgent.core.task import Completed, Failed, Task
from aimeAgent.tools.bus import ToolBus
from aimeAgent.utils.error_handler import ModelInvocationError


@tool
def lookup_price(item: str) -> str:
    """Look up the price of an item."""
    return f"{item}: 42 EUR"


@tool
def broken_tool(item: str) -> str:
    """Always fails."""
    raise RuntimeError("backend down")


@pytest.fixture
def bus():
    bus = ToolBus()
    bus.register_local_tool(lookup_price)
    bus.register_local_tool(broken_tool)
    return bus


@pytest.fixture
def task():
    return Task(id=7, description="find the price of a tent")


def _tool_call(name="lookup_price", tool_input=None):
    return {
        "thought": "need data",
        "action": "tool_call",
        "tool_name": name,
        "tool_input": tool_input if tool_input is not None else {"item": "tent"},
    }


class TestActorLoop:
    @pytest.mark.asyncio
    async def test_tool_then_final_answer(self, bus, task, scripted_ai):
        ai = scripted_ai(
            {
                "ActorDecision": [
                    _tool_call(),
                    {"thought": "done", "action": "final_answer", "final_answer": "The tent costs 42 EUR"},
                ]
            }
        )
        actor = Actor("You are a shopper.", ai, bus)

        outcome = await actor.run(task, "Overall goal: camping")

        assert outcome == Completed("The tent costs 42 EUR")
        assert actor.phase is ActorPhase.DONE
        # Second think call sees the tool result in its history
        second_prompt = ai.calls_for("ActorDecision")[1][-1].content
        assert "tent: 42 EUR" in second_prompt

    @pytest.mark.asyncio
    async def test_iteration_budget_exhausted(self, bus, task, scripted_ai):
        ai = scripted_ai(defaults={"ActorDecision": _tool_call()})
        actor = Actor("You are a shopper.", ai, bus, max_iterations=3)

        outcome = await actor.run(task, "ctx")

        assert isinstance(outcome, Failed)
        assert "iteration budget exhausted" in outcome.reason
        assert len(ai.calls_for("ActorDecision")) == 3

    @pytest.mark.asyncio
    async def test_fail_task_carries_reason(self, bus, task, scripted_ai):
        ai = scripted_ai({"ActorDecision": [{"action": "fail_task", "reason": "shop closed"}]})

        outcome = await Actor("p", ai, bus).run(task, "ctx")

        assert outcome == Failed("shop closed")

    @pytest.mark.asyncio
    async def test_tool_error_short_circuits(self, bus, task, scripted_ai):
        ai = scripted_ai(defaults={"ActorDecision": _tool_call(name="broken_tool")})

        outcome = await Actor("p", ai, bus).run(task, "ctx")

        assert isinstance(outcome, Failed)
        assert "broken_tool" in outcome.reason
        assert len(ai.calls_for("ActorDecision")) == 1

    @pytest.mark.asyncio
    async def test_unknown_tool_fails_task(self, bus, task, scripted_ai):
        ai = scripted_ai({"ActorDecision": [_tool_call(name="teleport")]})

        outcome = await Actor("p", ai, bus).run(task, "ctx")

        assert isinstance(outcome, Failed)
        assert "tool not found: teleport" in outcome.reason

    @pytest.mark.asyncio
    async def test_missing_tool_name_is_fed_back(self, bus, task, scripted_ai):
        ai = scripted_ai(
            {
                "ActorDecision": [
                    {"thought": "hmm", "action": "tool_call"},
                    {"action": "final_answer", "final_answer": "ok"},
                ]
            }
        )

        outcome = await Actor("p", ai, bus).run(task, "ctx")

        assert outcome == Completed("ok")
        assert "needs tool_name" in ai.calls_for("ActorDecision")[1][-1].content

    @pytest.mark.asyncio
    async def test_empty_final_answer_is_fed_back(self, bus, task, scripted_ai):
        ai = scripted_ai(
            {
                "ActorDecision": [
                    {"thought": "  ", "action": "final_answer", "final_answer": ""},
                    {"action": "final_answer", "final_answer": "The tent costs 42 EUR"},
                ]
            }
        )

        outcome = await Actor("p", ai, bus).run(task, "ctx")

        assert outcome == Completed("The tent costs 42 EUR")
        assert "final_answer was empty" in ai.calls_for("ActorDecision")[1][-1].content

    @pytest.mark.asyncio
    async def test_only_empty_answers_exhaust_the_budget(self, bus, task, scripted_ai):
        ai = scripted_ai(defaults={"ActorDecision": {"action": "final_answer"}})

        outcome = await Actor("p", ai, bus, max_iterations=2).run(task, "ctx")

        assert isinstance(outcome, Failed)
        assert "iteration budget exhausted" in outcome.reason

    @pytest.mark.asyncio
    async def test_string_tool_input_goes_to_single_argument(self, bus, task, scripted_ai):
        ai = scripted_ai(
            {
                "ActorDecision": [
                    _tool_call(tool_input="stove"),
                    {"action": "final_answer", "final_answer": "done"},
                ]
            }
        )

        await Actor("p", ai, bus).run(task, "ctx")

        assert "stove: 42 EUR" in ai.calls_for("ActorDecision")[1][-1].content

    @pytest.mark.asyncio
    async def test_think_failure_returns_failed(self, bus, task, scripted_ai):
        ai = scripted_ai({"ActorDecision": [ModelInvocationError("bad", "model reply did not have the expected shape")]})

        outcome = await Actor("p", ai, bus).run(task, "ctx")

        assert isinstance(outcome, Failed)
        assert "expected shape" in outcome.reason

    def test_max_iterations_must_be_positive(self, bus, scripted_ai):
        with pytest.raises(ValueError):
            Actor("p", scripted_ai(), bus, max_iterations=0)


class TestPrompts:
    @pytest.mark.asyncio
    async def test_system_prompt_lists_persona_and_tools(self, bus, task, scripted_ai):
        ai = scripted_ai({"ActorDecision": [{"action": "final_answer", "final_answer": "x"}]})

        await Actor("You are a shopper.", ai, bus).run(task, "Overall goal: camping")

        (messages,) = ai.calls_for("ActorDecision")
        system, user = messages
        assert system.content.startswith("You are a shopper.")
        assert "- lookup_price:" in system.content
        assert "Overall goal: camping" in user.content
        assert "find the price of a tent" in user.content

    def test_travel_actor_adds_guidance(self, bus, scripted_ai):
        generic = Actor("p", scripted_ai(), bus).system_prompt()
        travel = TravelActor("p", scripted_ai(), bus).system_prompt()

        assert "Travel guidance" in travel
        assert "Travel guidance" not in generic
