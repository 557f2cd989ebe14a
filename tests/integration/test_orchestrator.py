"""End-to-end orchestrator runs against a scripted AI collaborator."""

import pytest
from langchain_core.tools import tool

from aimeAgent.core.memory import WorkingMemory
from aimeAgent.core.orchestrator import Orchestrator
from aimeAgent.core.task import TaskStatus
from aimeAgent.tools.bus import ToolBus
from aimeAgent.utils.error_handler import ModelInvocationError


@tool
def lookup_hotel(area: str) -> str:
    """Find a hotel in a district."""
    return f"Gion Inn ({area}), 120 EUR/night"


class RecordingBus(ToolBus):
    def __init__(self):
        super().__init__()
        self.close_calls = 0

    async def close_all_connections(self):
        self.close_calls += 1
        await super().close_all_connections()


def _final(text):
    return {"thought": "done", "action": "final_answer", "final_answer": text}


PERSONA = {"Persona": {"persona": "You are a seasoned travel planner."}}


class TestFullRun:
    @pytest.mark.asyncio
    async def test_goal_is_planned_executed_reviewed_and_reported(self, scripted_ai):
        ai = scripted_ai(
            {
                "SubtaskPlan": [{"subtasks": ["Find a hotel near Gion", "List must-see temples"]}],
                "ActorDecision": [
                    {"action": "tool_call", "tool_name": "lookup_hotel", "tool_input": {"area": "Gion"}},
                    _final("Book Gion Inn at 120 EUR/night"),
                    _final("Kinkaku-ji, Fushimi Inari"),
                ],
                "ReviewDecision": [{"assessment": "Weekend plan is complete", "status": "completed"}],
                "text": ["Your Kyoto weekend: stay at Gion Inn, visit Kinkaku-ji and Fushimi Inari."],
            },
            defaults=PERSONA,
        )
        bus = RecordingBus()
        orchestrator = Orchestrator(ai, tool_bus=bus)
        await orchestrator.initialize_tools(local_tools=[lookup_hotel])

        report = await orchestrator.run("Plan a weekend in Kyoto")

        assert report.finished is True
        assert report.budget_exhausted is False
        # decompose, execute, execute, review, idle
        assert report.turns == 5
        assert report.final_report.startswith("Your Kyoto weekend")
        assert bus.close_calls == 1

        root = orchestrator.board.root
        assert root.status is TaskStatus.COMPLETED
        assert root.result == "Weekend plan is complete"
        assert [child.result for child in root.children] == [
            "Book Gion Inn at 120 EUR/night",
            "Kinkaku-ji, Fushimi Inari",
        ]
        assert "└──> Book Gion Inn at 120 EUR/night" in report.tree

        # The second task sees the first task's result
        second_task_prompt = ai.calls_for("ActorDecision")[2][-1].content
        assert "Book Gion Inn" in second_task_prompt

        (synthesis_messages,) = ai.calls_for("text")
        assert "Kinkaku-ji" in synthesis_messages[-1].content

    @pytest.mark.asyncio
    async def test_review_can_extend_the_plan(self, scripted_ai):
        ai = scripted_ai(
            {
                "SubtaskPlan": [{"subtasks": ["Find a hotel"]}],
                "ActorDecision": [_final("Gion Inn"), _final("Airport limousine bus")],
                "ReviewDecision": [
                    {"assessment": "Transport missing", "status": "needs_revision", "new_subtasks": ["Check airport transfer"]},
                    {"assessment": "All set", "status": "completed"},
                ],
                "text": ["report"],
            },
            defaults=PERSONA,
        )
        orchestrator = Orchestrator(ai)

        report = await orchestrator.run("Plan a weekend in Kyoto")

        root = orchestrator.board.root
        assert [child.description for child in root.children] == ["Find a hotel", "Check airport transfer"]
        assert root.children[1].result == "Airport limousine bus"
        assert root.result == "All set"
        assert report.finished


class TestBudgetAndFailures:
    @pytest.mark.asyncio
    async def test_turn_budget_exhausted(self, scripted_ai):
        ai = scripted_ai(
            {"SubtaskPlan": [{"subtasks": ["Find a hotel", "List temples"]}]},
            defaults={**PERSONA, "ActorDecision": _final("done"), "text": "partial report"},
        )
        bus = RecordingBus()
        orchestrator = Orchestrator(ai, tool_bus=bus, max_turns=2)

        report = await orchestrator.run("Plan a weekend in Kyoto")

        assert report.turns == 2
        assert report.finished is False
        assert report.budget_exhausted is True
        assert report.final_report == "partial report"
        assert orchestrator.board.root.children[1].status is TaskStatus.PENDING
        assert bus.close_calls == 1

    @pytest.mark.asyncio
    async def test_work_finished_on_last_turn_counts_as_finished(self, scripted_ai):
        ai = scripted_ai(
            {
                "SubtaskPlan": [{"subtasks": ["Find a hotel"]}],
                "ReviewDecision": [{"assessment": "ok", "status": "completed"}],
            },
            defaults={**PERSONA, "ActorDecision": _final("Gion Inn"), "text": "report"},
        )
        orchestrator = Orchestrator(ai, max_turns=3)

        report = await orchestrator.run("Plan a weekend in Kyoto")

        assert report.turns == 3
        assert report.finished is True
        assert report.budget_exhausted is False

    @pytest.mark.asyncio
    async def test_connections_closed_when_a_turn_raises(self, scripted_ai, monkeypatch):
        bus = RecordingBus()
        orchestrator = Orchestrator(scripted_ai(), tool_bus=bus)

        async def boom(task):
            raise RuntimeError("board corrupted")

        monkeypatch.setattr(orchestrator.planner, "decompose_task", boom)

        with pytest.raises(RuntimeError):
            await orchestrator.run("anything")

        assert bus.close_calls == 1

    @pytest.mark.asyncio
    async def test_no_results_means_no_report(self, scripted_ai):
        ai = scripted_ai({"SubtaskPlan": [ModelInvocationError("down")]})
        orchestrator = Orchestrator(ai, max_turns=1)

        report = await orchestrator.run("Plan a weekend in Kyoto")

        assert report.final_report is None
        assert ai.calls_for("text") == []

    @pytest.mark.asyncio
    async def test_failed_task_is_recorded_and_reviewed(self, scripted_ai):
        ai = scripted_ai(
            {
                "SubtaskPlan": [{"subtasks": ["Book the 9am train"]}],
                "ActorDecision": [{"action": "fail_task", "reason": "sold out"}],
                "ReviewDecision": [{"assessment": "Train unavailable", "status": "completed"}],
            },
            defaults={**PERSONA, "text": "report"},
        )
        orchestrator = Orchestrator(ai)

        await orchestrator.run("Get to Osaka")

        (child,) = orchestrator.board.root.children
        assert child.status is TaskStatus.FAILED
        assert child.result == "sold out"
        review_prompt = ai.calls_for("ReviewDecision")[0][-1].content
        assert '"Book the 9am train" (failed): sold out' in review_prompt


class TestDecomposeDecision:
    @pytest.mark.asyncio
    async def test_ambiguous_task_asks_the_judge(self, scripted_ai):
        ai = scripted_ai(
            {
                "SubtaskPlan": [{"subtasks": ["Plan the evening"]}],
                "DecomposeDecision": [{"decision": "execute", "reason": "one step"}],
            },
            defaults={**PERSONA, "ActorDecision": _final("Dinner at 7"), "text": "report"},
        )
        orchestrator = Orchestrator(ai, max_turns=2)

        await orchestrator.run("Plan a weekend in Kyoto")

        (judge_messages,) = ai.calls_for("DecomposeDecision")
        assert "Plan the evening" in judge_messages[-1].content
        assert "Plan a weekend in Kyoto" in judge_messages[-1].content
        assert orchestrator.board.root.children[0].result == "Dinner at 7"

    @pytest.mark.asyncio
    async def test_judge_failure_decomposes(self, scripted_ai):
        ai = scripted_ai(
            {
                "SubtaskPlan": [{"subtasks": ["Plan the evening"]}, {"subtasks": ["Book a table"]}],
                "DecomposeDecision": [ModelInvocationError("timeout")],
            },
            defaults={**PERSONA, "text": "report"},
        )
        orchestrator = Orchestrator(ai, max_turns=2)

        await orchestrator.run("Plan a weekend in Kyoto")

        evening = orchestrator.board.root.children[0]
        assert [child.description for child in evening.children] == ["Book a table"]
        assert ai.calls_for("ActorDecision") == []

    @pytest.mark.asyncio
    async def test_first_turn_always_decomposes(self, scripted_ai):
        ai = scripted_ai({"SubtaskPlan": [{"subtasks": ["Check the weather"]}]}, defaults=PERSONA)
        orchestrator = Orchestrator(ai, max_turns=1)

        # "Check" is a simple keyword, but turn 1 still builds the plan
        await orchestrator.run("Check the weather in Kyoto")

        assert len(orchestrator.board.root.children) == 1
        assert ai.calls_for("DecomposeDecision") == []


@pytest.mark.asyncio
async def test_working_memory_reaches_the_actor(scripted_ai):
    memory = WorkingMemory()
    memory.save("budget", 3000)
    ai = scripted_ai({"ActorDecision": [_final("done")]}, defaults=PERSONA)
    orchestrator = Orchestrator(ai, memory=memory)
    orchestrator.board.initialize_plan("Plan a weekend in Kyoto")

    await orchestrator.execute_task(orchestrator.board.root)

    user_prompt = ai.calls_for("ActorDecision")[0][-1].content
    assert "Working memory" in user_prompt
    assert "- budget: 3000" in user_prompt
    assert orchestrator.board.root.status is TaskStatus.COMPLETED


def test_max_turns_must_be_positive(scripted_ai):
    with pytest.raises(ValueError):
        Orchestrator(scripted_ai(), max_turns=0)
