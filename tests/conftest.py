# tests/conftest.py
"""Minimal shared fixtures for test suite."""

import asyncio

import numpy as np
import pytest

from engine.action_parser import RequestedAction
from engine.catalog import HERB_IDS, POTION_IDS
from engine.economy import EconomySchedule
from players.base import DecisionProvider, DecisionRequest, DecisionResult


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return "test-seed"


@pytest.fixture
def rng():
    """Numpy random generator with fixed seed."""
    return np.random.default_rng(42)


@pytest.fixture
def make_schedule():
    """Factory for flat schedules: one price for every herb, one demand for every potion."""

    def _make(days: int = 2, price: int = 5, demand: int = 1, **overrides) -> EconomySchedule:
        prices = []
        demands = []
        for day in range(1, days + 1):
            day_prices = {h: price for h in HERB_IDS}
            day_demands = {p: demand for p in POTION_IDS}
            day_prices.update(overrides.get("prices", {}).get(day, {}))
            day_demands.update(overrides.get("demands", {}).get(day, {}))
            prices.append(day_prices)
            demands.append(day_demands)
        return EconomySchedule(seed="flat", herb_prices=tuple(prices), potion_demands=tuple(demands))

    return _make


class ScriptedPlayer(DecisionProvider):
    """
    Provider that replays a fixed list of actions, one per day.

    Entries may be RequestedAction, raw wire dicts/strings, or an
    Exception instance to raise on that day. Days past the end of the
    script get an empty action.
    """

    def __init__(self, name: str, script: list | None = None, delay: float = 0.0):
        super().__init__(name)
        self.script = list(script or [])
        self.delay = delay
        self.requests: list[DecisionRequest] = []

    async def decide(self, request: DecisionRequest) -> DecisionResult:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        idx = request.day - 1
        entry = self.script[idx] if idx < len(self.script) else RequestedAction()
        if isinstance(entry, Exception):
            raise entry
        return DecisionResult(action=entry)


@pytest.fixture
def scripted_player():
    """Factory for ScriptedPlayer instances."""
    return ScriptedPlayer
