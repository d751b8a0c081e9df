"""
Human-in-the-loop decision provider.

decide() exposes the pending DecisionRequest and suspends until a human
submits an action through submit(). Invalid submissions are rejected
back to the submitter and the wait stays open, so a typo never
disqualifies a human. cancel() gives up on the wait, which the
orchestrator treats like any other decision failure.
"""

import asyncio
import logging
import time
from typing import Any

from engine.action_parser import RequestedAction, parse_action
from engine.errors import DecisionError
from engine.state import Usage
from players.base import DecisionProvider, DecisionRequest, DecisionResult

logger = logging.getLogger(__name__)


class HumanPlayer(DecisionProvider):
    """Participant whose decisions arrive from outside (UI, API, CLI)."""

    waits_for_human = True

    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(name)
        self._pending: asyncio.Future[RequestedAction] | None = None
        self._request: DecisionRequest | None = None
        self._ready = asyncio.Event()

    @property
    def pending_request(self) -> DecisionRequest | None:
        """The request currently awaiting input, if any."""
        return self._request

    @property
    def is_waiting(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def wait_until_waiting(self) -> DecisionRequest:
        """
        Suspend until decide() is waiting for input; return its request.

        Raises:
            DecisionError: If the wait was resolved before this caller resumed
        """
        await self._ready.wait()
        if self._request is None:
            raise DecisionError(f"No decision pending for {self.name}")
        return self._request

    async def decide(self, request: DecisionRequest) -> DecisionResult:
        loop = asyncio.get_running_loop()
        self._pending = loop.create_future()
        self._request = request
        self._ready.set()
        logger.info(f"Waiting for {self.name} to submit day {request.day}")

        start = time.perf_counter()
        try:
            action = await self._pending
        finally:
            self._pending = None
            self._request = None
            self._ready.clear()

        duration_ms = (time.perf_counter() - start) * 1000
        return DecisionResult(action=action, usage=Usage(duration_ms=duration_ms))

    def submit(self, raw: str | dict[str, Any] | RequestedAction) -> RequestedAction:
        """
        Deliver the human's action for the pending day.

        Args:
            raw: JSON text, a mapping in wire format, or a RequestedAction

        Returns:
            The validated action

        Raises:
            ActionSchemaError: If the action fails the schema (wait stays open)
            DecisionError: If no decision is pending
        """
        if not self.is_waiting:
            raise DecisionError(f"No decision pending for {self.name}")
        action = parse_action(raw)
        self._pending.set_result(action)
        self._ready.clear()
        logger.info(f"{self.name} submitted day {self._request.day if self._request else '?'}")
        return action

    def cancel(self, reason: str = "human input cancelled") -> None:
        """Abandon the pending wait; the participant will be disqualified."""
        if not self.is_waiting:
            raise DecisionError(f"No decision pending for {self.name}")
        self._pending.set_exception(DecisionError(reason))
        self._ready.clear()
