"""
Abstract base class for decision providers in the Alchemist market.

This module defines the DecisionProvider interface that every kind of
participant implements (LLM players, the rule-based placeholder, human
players). The orchestrator only ever talks to this interface:

1. choose_name(): optional, once at run start
2. decide(request): once per day, returns a DecisionResult

Providers may raise from decide(); the orchestrator turns any exception,
timeout or schema violation into disqualification of that participant.
DecisionRequest and DecisionResult are defined in engine.decision and
re-exported here for providers.
"""

from abc import ABC, abstractmethod

from engine.decision import DecisionRequest, DecisionResult

__all__ = ["DecisionProvider", "DecisionRequest", "DecisionResult"]

class DecisionProvider(ABC):
    """
    Abstract base class for all decision providers.

    Attributes:
        name: Display name of the seat
        waits_for_human: True if decide() blocks on a human; the
            orchestrator never applies its decision timeout to such providers
    """

    waits_for_human: bool = False

    def __init__(self, name: str) -> None:
        if not name:
            raise ValueError("Provider name must be non-empty")
        self.name = name

    @abstractmethod
    async def decide(self, request: DecisionRequest) -> DecisionResult:
        """
        Produce the requested action for request.day.

        Args:
            request: The participant's view of the game

        Returns:
            DecisionResult with a schema-valid RequestedAction

        Raises:
            Exception: Any failure; the orchestrator disqualifies the
                participant and records the message as the reason
        """

    async def choose_name(self) -> str | None:
        """
        Optionally pick a display name at run start.

        Returns:
            A name, or None to keep the configured one
        """
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
