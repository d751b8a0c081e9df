"""
Append-only state stream.

The orchestrator publishes one GameState before day 1 and one after
every day, then closes the stream exactly once. Observers may attach at
any point: iteration always replays from the first snapshot and then
follows live publications until the stream closes.
"""

import asyncio
from collections.abc import AsyncIterator, Callable

from engine.state import GameState

Listener = Callable[[GameState], None]


class StateStream:
    """
    Replayable, append-only sequence of GameState snapshots.

    Usage:
        stream = StateStream()
        async for state in stream:
            render(state)
    """

    def __init__(self) -> None:
        self._snapshots: list[GameState] = []
        self._closed = False
        self._changed = asyncio.Condition()
        self._listeners: list[Listener] = []

    @property
    def snapshots(self) -> tuple[GameState, ...]:
        return tuple(self._snapshots)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def latest(self) -> GameState | None:
        return self._snapshots[-1] if self._snapshots else None

    def __len__(self) -> int:
        return len(self._snapshots)

    def add_listener(self, listener: Listener) -> None:
        """Call listener synchronously with every snapshot published from now on."""
        self._listeners.append(listener)

    async def publish(self, state: GameState) -> None:
        """
        Append a snapshot.

        Raises:
            RuntimeError: If the stream is already closed
        """
        if self._closed:
            raise RuntimeError("Cannot publish to a closed state stream")
        self._snapshots.append(state)
        for listener in self._listeners:
            listener(state)
        async with self._changed:
            self._changed.notify_all()

    async def close(self) -> None:
        """Close the stream. Closing twice is a no-op."""
        if self._closed:
            return
        self._closed = True
        async with self._changed:
            self._changed.notify_all()

    async def wait_closed(self) -> None:
        async with self._changed:
            await self._changed.wait_for(lambda: self._closed)

    async def __aiter__(self) -> AsyncIterator[GameState]:
        position = 0
        while True:
            async with self._changed:
                await self._changed.wait_for(
                    lambda: position < len(self._snapshots) or self._closed
                )
                pending = self._snapshots[position:]
                finished = self._closed
            for state in pending:
                yield state
            position += len(pending)
            if finished and position >= len(self._snapshots):
                return
