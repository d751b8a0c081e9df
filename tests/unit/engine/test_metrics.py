# tests/unit/engine/test_metrics.py
"""
Tests for standings and per-day result tables.
"""

from dataclasses import replace

from engine.action_parser import EMPTY_ACTION, parse_action
from engine.metrics import daily_results, standings
from engine.transition import apply_day, initial_state

SELL_ONE = {
    "buyHerbs": [{"herbId": "H01", "qty": 1}, {"herbId": "H02", "qty": 1}],
    "makePotions": [{"potionId": "P01", "qty": 1}],
    "potionOffers": [{"potionId": "P01", "price": 50, "qty": 1}],
}


def play_two_days(make_schedule):
    schedule = make_schedule(days=2)
    state = initial_state(["Idle", "Trader", "Quitter"], starting_silver=100, total_days=2)
    statuses = list(state.statuses)
    statuses[2] = statuses[2].disqualify("TimeoutError: slow", 1)
    state = replace(state, statuses=tuple(statuses))
    for _ in range(2):
        state = apply_day(state, [EMPTY_ACTION, parse_action(SELL_ONE), EMPTY_ACTION], schedule)
    return state


class TestStandings:
    def test_richest_first(self, make_schedule):
        df = standings(play_two_days(make_schedule))
        assert list(df["name"]) == ["Trader", "Idle", "Quitter"]
        assert list(df["rank"]) == [1, 2, 3]
        assert df.loc[0, "silver"] == 100 + 2 * (50 - 10)

    def test_ties_keep_seat_order(self, make_schedule):
        df = standings(play_two_days(make_schedule))
        assert list(df["player_idx"])[1:] == [0, 2]

    def test_disqualification_reported(self, make_schedule):
        df = standings(play_two_days(make_schedule)).set_index("name")
        assert bool(df.loc["Quitter", "disqualified"])
        assert df.loc["Quitter", "reason"] == "TimeoutError: slow"
        assert not bool(df.loc["Idle", "disqualified"])


class TestDailyResults:
    def test_one_row_per_day_and_player(self, make_schedule):
        df = daily_results(play_two_days(make_schedule))
        assert len(df) == 6
        trader = df[df["player_idx"] == 1]
        assert list(trader["herb_spend"]) == [10, 10]
        assert list(trader["revenue"]) == [50, 50]
        assert list(trader["sold"]) == [1, 1]
        assert list(trader["end_silver"]) == [140, 180]

    def test_empty_state_has_columns(self):
        df = daily_results(initial_state(["A"], 10, 1))
        assert df.empty
        assert "violations" in df.columns
