# tests/unit/engine/test_state.py
"""
Tests for the data model and JSONL checkpoints.
"""

import json

import pytest

from engine.action_parser import EMPTY_ACTION, parse_action
from engine.event_logger import CheckpointLogger, load_checkpoints, load_last_state
from engine.state import GameState, Inventory, ParticipantStatus, Usage, UsageStats
from engine.transition import apply_day, initial_state


@pytest.fixture
def played_state(make_schedule):
    schedule = make_schedule(days=3)
    state = initial_state(["A", "B"], starting_silver=100, total_days=3, seed="state-seed")
    action = parse_action(
        {
            "buyHerbs": [{"herbId": "H01", "qty": 30}, {"herbId": "H02", "qty": 4}],
            "makePotions": [{"potionId": "P01", "qty": 3}],
            "potionOffers": [{"potionId": "P01", "price": 10, "qty": 3}],
        }
    )
    return apply_day(state, [action, EMPTY_ACTION], schedule)


# =============================================================================
# Test: Value Types
# =============================================================================


class TestInventory:
    def test_starting_has_every_item(self):
        inventory = Inventory.starting(50)
        assert len(inventory.herbs) == 12
        assert len(inventory.potions) == 18
        assert inventory.is_non_negative()

    def test_copy_is_independent(self):
        inventory = Inventory.starting(50)
        clone = inventory.copy()
        clone.herbs["H01"] = 3
        assert inventory.herbs["H01"] == 0

    def test_negative_detected(self):
        inventory = Inventory.starting(0)
        inventory.potions["P05"] = -1
        assert not inventory.is_non_negative()


class TestParticipantStatus:
    def test_disqualify_records_once(self):
        status = ParticipantStatus(index=0, name="A")
        first = status.disqualify("TimeoutError: slow", 2)
        second = first.disqualify("ValueError: again", 3)
        assert second is first
        assert second.reason == "TimeoutError: slow"
        assert second.disqualified_on_day == 2
        assert not status.disqualified


class TestUsageStats:
    def test_add_accumulates(self):
        stats = UsageStats().add(Usage(input_tokens=10, output_tokens=5, total_tokens=15,
                                       cost_usd=0.01, duration_ms=100))
        stats = stats.add(Usage(input_tokens=1, total_tokens=1, duration_ms=50))
        assert stats.input_tokens == 11
        assert stats.total_tokens == 16
        assert stats.total_time_ms == 150
        assert stats.call_count == 2


class TestGameState:
    def test_initial_state(self):
        state = initial_state(["A", "B"], starting_silver=100, total_days=4)
        assert state.day == 0
        assert state.next_day == 1
        assert state.seed is None
        assert state.player_names == ["A", "B"]
        assert state.active_players() == [0, 1]
        assert state.last_violations(0) == []
        assert state.last_offers(0) == []

    def test_last_violations_and_offers(self, played_state):
        assert played_state.last_violations(0) == [
            "Not enough silver to buy 30 H01. Bought 20.",
            "Not enough silver to buy 4 H02. Bought 0.",
            "Not enough herbs to make 3 P01. Made 0.",
            "Not enough potions to sell 3 P01. Offered 0.",
        ]
        assert played_state.last_violations(1) == []
        assert [o.qty for o in played_state.last_offers(0)] == [0]

    def test_round_trip_through_json(self, played_state):
        data = json.loads(json.dumps(played_state.to_dict()))
        assert GameState.from_dict(data) == played_state
        assert data["seed"] == "state-seed"

    def test_checkpoint_without_seed_loads(self, played_state):
        data = json.loads(json.dumps(played_state.to_dict()))
        del data["seed"]
        assert GameState.from_dict(data).seed is None


# =============================================================================
# Test: Checkpoints
# =============================================================================


class TestCheckpoints:
    def test_log_and_reload(self, tmp_path, played_state):
        path = tmp_path / "run" / "checkpoints.jsonl"
        with CheckpointLogger(path) as logger:
            logger.log_state(initial_state(["A", "B"], 100, 3))
            logger.log_state(played_state)

        assert len(load_checkpoints(path)) == 2
        assert load_last_state(path) == played_state

    def test_empty_file_rejected(self, tmp_path):
        path = tmp_path / "empty.jsonl"
        path.write_text("")
        with pytest.raises(ValueError):
            load_last_state(path)

    def test_log_after_close_is_ignored(self, tmp_path, played_state):
        path = tmp_path / "c.jsonl"
        logger = CheckpointLogger(path)
        logger.close()
        logger.log_state(played_state)
        assert load_checkpoints(path) == []
