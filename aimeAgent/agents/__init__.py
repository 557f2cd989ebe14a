"""Actors and the factory that builds them."""

from .actor import Actor, ActorPhase, TravelActor
from .factory import ActorFactory
from .interfaces import AIClient

__all__ = ["Actor", "ActorFactory", "ActorPhase", "AIClient", "TravelActor"]
