# tests/unit/engine/test_economy.py
"""
Tests for the seeded economy generator.

Focus: determinism, shape of the schedule, value ranges and the
rounding/floor rules.
"""

import pytest

from engine.catalog import HERB_IDS, HERB_TIERS, POTION_IDS
from engine.config import EconomyConfig
from engine.economy import EconomyGenerator, generate_schedule, seed_to_int

FLAT = {"T1": 0.0, "T2": 0.0, "T3": 0.0}


def flat_config(seed: str = "flat", days: int = 3) -> EconomyConfig:
    return EconomyConfig(
        seed=seed,
        days=days,
        herb_tier_price_spread=FLAT,
        herb_daily_price_spread=0.0,
        potion_tier_demand_spread=FLAT,
        potion_daily_demand_spread=0.0,
    )


# =============================================================================
# Test: Determinism
# =============================================================================


class TestDeterminism:
    def test_same_seed_same_schedule(self, seed):
        config = EconomyConfig(seed=seed, days=10)
        assert generate_schedule(config) == generate_schedule(config)

    def test_different_seeds_differ(self):
        a = generate_schedule(EconomyConfig(seed="alpha", days=5))
        b = generate_schedule(EconomyConfig(seed="beta", days=5))
        assert a.herb_prices != b.herb_prices
        assert a.potion_demands != b.potion_demands

    def test_seed_to_int_is_stable_64_bit(self):
        value = seed_to_int("abc")
        assert value == seed_to_int("abc")
        assert 0 <= value < 2**64
        assert value != seed_to_int("abd")

    def test_to_dict_is_identical_across_runs(self, seed):
        config = EconomyConfig(seed=seed, days=4)
        assert generate_schedule(config).to_dict() == generate_schedule(config).to_dict()


# =============================================================================
# Test: Shape and Ranges
# =============================================================================


class TestScheduleShape:
    def test_one_entry_per_day(self, seed):
        schedule = generate_schedule(EconomyConfig(seed=seed, days=7))
        assert schedule.days == 7
        assert len(schedule.potion_demands) == 7

    def test_every_item_priced_every_day(self, seed):
        schedule = generate_schedule(EconomyConfig(seed=seed, days=3))
        for day in range(1, 4):
            assert set(schedule.prices_for(day)) == set(HERB_IDS)
            assert set(schedule.demands_for(day)) == set(POTION_IDS)

    def test_values_are_integers_with_floors(self, seed):
        schedule = generate_schedule(EconomyConfig(seed=seed, days=20))
        for day in range(1, 21):
            assert all(isinstance(p, int) and p >= 1 for p in schedule.prices_for(day).values())
            assert all(isinstance(d, int) and d >= 0 for d in schedule.demands_for(day).values())

    def test_herb_prices_within_spread(self, seed):
        config = EconomyConfig(seed=seed, days=10)
        schedule = generate_schedule(config)
        for tier, herbs in HERB_TIERS.items():
            base = config.herb_tier_base_prices[tier]
            tier_spread = config.herb_tier_price_spread[tier]
            daily = config.herb_daily_price_spread
            low = base * (1 - tier_spread) * (1 - daily) - 1
            high = base * (1 + tier_spread) * (1 + daily) + 1
            for day in range(1, 11):
                prices = schedule.prices_for(day)
                for herb_id in herbs:
                    assert low <= prices[herb_id] <= high

    def test_zero_spread_gives_tier_bases(self):
        schedule = generate_schedule(flat_config())
        prices = schedule.prices_for(2)
        assert prices["H01"] == 10
        assert prices["H05"] == 50
        assert prices["H12"] == 150
        demands = schedule.demands_for(3)
        assert demands["P01"] == 25
        assert demands["P02"] == 20
        assert demands["P18"] == 15


# =============================================================================
# Test: Accessors
# =============================================================================


class TestScheduleAccess:
    def test_day_lookup_is_one_based(self):
        schedule = generate_schedule(flat_config(days=2))
        schedule.prices_for(1)
        schedule.prices_for(2)
        with pytest.raises(IndexError):
            schedule.prices_for(0)
        with pytest.raises(IndexError):
            schedule.demands_for(3)

    def test_returned_mappings_are_copies(self):
        schedule = generate_schedule(flat_config())
        prices = schedule.prices_for(1)
        prices["H01"] = 999
        assert schedule.prices_for(1)["H01"] == 10


# =============================================================================
# Test: Rounding
# =============================================================================


class TestRounding:
    def test_half_rounds_up(self):
        generator = EconomyGenerator(flat_config(days=1))
        (values,) = generator._daily_values({"H01": 2.5, "H02": 3.5}, 0.0, 1)
        assert values == {"H01": 3, "H02": 4}

    def test_herb_price_floor(self):
        generator = EconomyGenerator(flat_config(days=1))
        (values,) = generator._daily_values({"H01": 0.2}, 0.0, 1)
        assert values["H01"] == 1

    def test_demand_floor_is_zero(self):
        generator = EconomyGenerator(flat_config(days=1))
        (values,) = generator._daily_values({"P01": 0.2}, 0.0, 0)
        assert values["P01"] == 0
