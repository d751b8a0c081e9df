# tests/unit/players/test_prompt_builder.py
"""
Tests for LLM prompt construction.
"""

from engine.action_parser import parse_action
from engine.transition import apply_day, build_decision_request, initial_state
from players.prompt_builder import PromptBuilder


def test_system_prompt_lists_tiers_and_recipes():
    prompt = PromptBuilder.build_system_prompt()
    assert "Tier 1: H01, H02, H03, H04" in prompt
    assert "P01 (Tier T1): H01 + H02" in prompt
    assert "YOUR STRATEGY" not in prompt


def test_first_day_prompt(make_schedule):
    state = initial_state(["A", "B"], starting_silver=100, total_days=3)
    prompt = PromptBuilder.build_day_prompt(build_decision_request(state, make_schedule(days=3), 0))

    assert prompt.startswith("Day 1/3 | 2 players competing")
    assert "Silver: 100" in prompt
    assert "Day 1 - no history yet" in prompt
    assert "No market data yet" in prompt
    assert "FINAL DAY" not in prompt
    assert prompt.rstrip().endswith("Respond only with JSON.")


def test_later_day_prompt_shows_history_and_errors(make_schedule):
    schedule = make_schedule(days=2, prices={2: {"H01": 8}})
    state = initial_state(["A"], starting_silver=30, total_days=2)
    action = parse_action(
        {
            "buyHerbs": [{"herbId": "H01", "qty": 2}, {"herbId": "H02", "qty": 5}],
            "makePotions": [{"potionId": "P01", "qty": 2}],
            "potionOffers": [{"potionId": "P01", "price": 12, "qty": 2}],
        }
    )
    state = apply_day(state, [action], schedule)

    prompt = PromptBuilder.build_day_prompt(build_decision_request(state, schedule, 0))

    assert "FINAL DAY" in prompt
    assert "H01: 5 -> 8" in prompt
    assert "- Day 1: silver 30 ->" in prompt
    assert "P01: offered 2, sold 1, price 12-12" in prompt
    assert "YESTERDAY'S ERRORS" in prompt
    assert "Not enough silver to buy 5 H02. Bought 4." in prompt


def test_error_feedback_mentions_attempt():
    assert "attempt 2" in PromptBuilder.format_error_feedback("bad id", 2)


def test_violations_humanized():
    (message,) = PromptBuilder.format_violations_for_display(
        ["Not enough herbs to make 3 P01. Made 1."]
    )
    assert message == "Not enough herbs to make 3 Minor Potion of Healing. Made 1."
