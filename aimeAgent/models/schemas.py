"""Structured replies requested from the AI collaborator."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator


def _clean_items(items: Optional[List[str]]) -> List[str]:
    return [item.strip() for item in items or [] if item and item.strip()]


class SubtaskPlan(BaseModel):
    """Decomposition of one task into ordered subtasks."""

    subtasks: List[str] = Field(
        default_factory=list,
        description="Clear, executable subtask descriptions in execution order",
    )

    @field_validator("subtasks", mode="before")
    @classmethod
    def drop_blank_subtasks(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return _clean_items(value)
        return value


class ReviewDecision(BaseModel):
    """Verdict on a parent task whose children have all finished."""

    assessment: str = Field(description="Short assessment of what the finished subtasks achieved")
    status: Literal["completed", "needs_revision"] = Field(
        description="'completed' if the parent goal is satisfied, 'needs_revision' if more work is needed"
    )
    new_subtasks: List[str] = Field(
        default_factory=list,
        description="Additional subtasks to append when status is 'needs_revision'",
    )

    @field_validator("new_subtasks", mode="before")
    @classmethod
    def drop_blank_subtasks(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            return _clean_items(value)
        return value


class DecomposeDecision(BaseModel):
    """Tie-break for tasks the keyword rules cannot classify."""

    decision: Literal["decompose", "execute"] = Field(
        description="'decompose' if the task still needs splitting, 'execute' if one expert can do it now"
    )
    reason: str = Field(default="", description="Why this decision was taken")


class Persona(BaseModel):
    persona: str = Field(description="Second-person role description, e.g. 'You are a ... expert'")


class ActorDecision(BaseModel):
    """One step of the ReAct loop."""

    thought: str = Field(default="", description="Reasoning about the current situation")
    action: Literal["tool_call", "final_answer", "fail_task"] = Field(description="Next action to take")
    tool_name: Optional[str] = Field(default=None, description="Tool to call when action is tool_call")
    tool_input: Union[Dict[str, Any], str, None] = Field(
        default=None,
        description="Tool arguments: an object matching the tool schema, or a plain string",
    )
    final_answer: Optional[str] = Field(default=None, description="Task result when action is final_answer")
    reason: Optional[str] = Field(default=None, description="Why the task cannot be done when action is fail_task")


__all__ = ["SubtaskPlan", "ReviewDecision", "DecomposeDecision", "Persona", "ActorDecision"]
