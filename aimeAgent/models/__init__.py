"""AI collaborator adapter and the structured replies it produces."""

from .client import ChatModelClient, extract_json_object
from .schemas import ActorDecision, DecomposeDecision, Persona, ReviewDecision, SubtaskPlan

__all__ = [
    "ChatModelClient",
    "extract_json_object",
    "ActorDecision",
    "DecomposeDecision",
    "Persona",
    "ReviewDecision",
    "SubtaskPlan",
]
