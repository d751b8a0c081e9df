"""
Economy Generator for the Alchemist market.

Produces the per-day herb prices and potion demands for a whole run from
a string seed. Two layers of seeded uniform jitter are applied:

1. Per item: base = tier_base * (1 + U(-tier_spread, +tier_spread))
2. Per day:  value = round(base * (1 + U(-daily_spread, +daily_spread)))

The same seed and config always give the same schedule, which is what
makes runs replayable and tests deterministic.
"""

import hashlib
import math
from dataclasses import dataclass

import numpy as np

from engine.catalog import HERB_TIERS, POTION_TIERS, TIERS
from engine.config import EconomyConfig

# A zero price would make herbs free; demand may legitimately be zero.
MIN_HERB_PRICE = 1
MIN_POTION_DEMAND = 0


def seed_to_int(seed: str) -> int:
    """Map a string seed to a stable 64-bit integer."""
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


@dataclass(frozen=True)
class EconomySchedule:
    """
    Immutable per-day market schedule.

    Attributes:
        seed: The string seed the schedule was generated from
        herb_prices: One {herb_id: price} mapping per day (index 0 = day 1)
        potion_demands: One {potion_id: demand} mapping per day
    """

    seed: str
    herb_prices: tuple[dict[str, int], ...]
    potion_demands: tuple[dict[str, int], ...]

    @property
    def days(self) -> int:
        return len(self.herb_prices)

    def prices_for(self, day: int) -> dict[str, int]:
        """Herb prices for a 1-indexed day."""
        return dict(self.herb_prices[self._index(day)])

    def demands_for(self, day: int) -> dict[str, int]:
        """Potion demands for a 1-indexed day."""
        return dict(self.potion_demands[self._index(day)])

    def _index(self, day: int) -> int:
        if not 1 <= day <= self.days:
            raise IndexError(f"day {day} outside schedule of {self.days} days")
        return day - 1

    def to_dict(self) -> dict:
        return {
            "seed": self.seed,
            "herb_prices": [dict(d) for d in self.herb_prices],
            "potion_demands": [dict(d) for d in self.potion_demands],
        }


class EconomyGenerator:
    """
    Seeded generator for herb price and potion demand tables.

    Herb prices are drawn first (all bases, then every day), then potion
    demands, all from a single numpy Generator. Tiers are visited in
    T1, T2, T3 order and items in catalog order, so the draw sequence is
    fully determined by the config.
    """

    def __init__(self, config: EconomyConfig):
        self.config = config
        self.rng = np.random.default_rng(seed_to_int(config.seed))

    def _jitter(self, spread: float) -> float:
        return float(self.rng.uniform(-spread, spread))

    def _tier_bases(
        self,
        tiers: dict[str, tuple[str, ...]],
        tier_bases: dict[str, float],
        tier_spreads: dict[str, float],
    ) -> dict[str, float]:
        bases = {}
        for tier in TIERS:
            for item_id in tiers[tier]:
                bases[item_id] = tier_bases[tier] * (1 + self._jitter(tier_spreads[tier]))
        return bases

    def _daily_values(
        self, bases: dict[str, float], daily_spread: float, floor: int
    ) -> tuple[dict[str, int], ...]:
        days = []
        for _ in range(self.config.days):
            values = {}
            for item_id, base in bases.items():
                # Half-up rounding, not round()'s banker's rounding
                value = math.floor(base * (1 + self._jitter(daily_spread)) + 0.5)
                values[item_id] = max(floor, value)
            days.append(values)
        return tuple(days)

    def herb_daily_prices(self) -> tuple[dict[str, int], ...]:
        bases = self._tier_bases(
            HERB_TIERS,
            self.config.herb_tier_base_prices,
            self.config.herb_tier_price_spread,
        )
        return self._daily_values(bases, self.config.herb_daily_price_spread, MIN_HERB_PRICE)

    def potion_daily_demands(self) -> tuple[dict[str, int], ...]:
        bases = self._tier_bases(
            POTION_TIERS,
            self.config.potion_tier_base_demands,
            self.config.potion_tier_demand_spread,
        )
        return self._daily_values(
            bases, self.config.potion_daily_demand_spread, MIN_POTION_DEMAND
        )


def generate_schedule(config: EconomyConfig) -> EconomySchedule:
    """
    Generate the full schedule for a run.

    Args:
        config: Economy parameters including the string seed

    Returns:
        EconomySchedule with config.days entries
    """
    generator = EconomyGenerator(config)
    herb_prices = generator.herb_daily_prices()
    potion_demands = generator.potion_daily_demands()
    return EconomySchedule(
        seed=config.seed,
        herb_prices=herb_prices,
        potion_demands=potion_demands,
    )
