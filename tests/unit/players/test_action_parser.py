# tests/unit/players/test_action_parser.py
"""
Unit tests for the decision action schema.

Tests cover:
- Wire format (camelCase) and snake_case input
- Closed id enums and integer constraints
- ActionSchemaError wrapping of JSON and validation failures
"""

import json

import pytest

from engine.action_parser import (
    EMPTY_ACTION,
    AlchemistName,
    HerbPurchase,
    PotionOffer,
    RequestedAction,
    parse_action,
)
from engine.errors import ActionSchemaError

# =============================================================================
# Test: Valid Responses
# =============================================================================


class TestValidResponses:
    def test_wire_format(self):
        action = parse_action(
            json.dumps(
                {
                    "buyHerbs": [{"herbId": "H01", "qty": 4}],
                    "makePotions": [{"potionId": "P01", "qty": 3}],
                    "potionOffers": [{"potionId": "P01", "price": 10, "qty": 3}],
                }
            )
        )
        assert action.buy_herbs == (HerbPurchase(herb_id="H01", qty=4),)
        assert action.make_potions[0].potion_id == "P01"
        assert action.potion_offers == (PotionOffer(potion_id="P01", price=10, qty=3),)

    def test_snake_case_accepted(self):
        action = parse_action({"buy_herbs": [{"herb_id": "H12", "qty": 0}]})
        assert action.buy_herbs[0].herb_id == "H12"

    def test_missing_lists_default_empty(self):
        assert parse_action("{}").is_empty()
        assert parse_action({}) == EMPTY_ACTION

    def test_extra_keys_ignored(self):
        action = parse_action({"reasoning": "cheap herbs today", "buyHerbs": []})
        assert action.is_empty()

    def test_bytes_and_whitespace(self):
        action = parse_action(b'  {"potionOffers": [{"potionId": "P18", "price": 1, "qty": 1}]}\n')
        assert action.potion_offers[0].potion_id == "P18"

    def test_model_passthrough(self):
        action = RequestedAction()
        assert parse_action(action) is action

    def test_to_wire_uses_camel_case(self):
        action = parse_action({"buyHerbs": [{"herbId": "H01", "qty": 2}]})
        assert action.to_wire() == {
            "buyHerbs": [{"herbId": "H01", "qty": 2}],
            "makePotions": [],
            "potionOffers": [],
        }

    def test_alchemist_name(self):
        assert AlchemistName.model_validate_json('{"alchemistName": "Zephyr"}').alchemist_name == "Zephyr"


# =============================================================================
# Test: Schema Violations
# =============================================================================


class TestSchemaViolations:
    @pytest.mark.parametrize(
        "payload",
        [
            {"buyHerbs": [{"herbId": "H13", "qty": 1}]},
            {"makePotions": [{"potionId": "P19", "qty": 1}]},
            {"buyHerbs": [{"herbId": "H01", "qty": -1}]},
            {"buyHerbs": [{"herbId": "H01", "qty": 1.5}]},
            {"buyHerbs": [{"herbId": "H01", "qty": "3"}]},
            {"potionOffers": [{"potionId": "P01", "price": 0, "qty": 1}]},
            {"potionOffers": [{"potionId": "P01", "price": -5, "qty": 1}]},
            {"potionOffers": [{"potionId": "P01", "qty": 1}]},
            {"buyHerbs": {"herbId": "H01", "qty": 1}},
        ],
    )
    def test_rejected(self, payload):
        with pytest.raises(ActionSchemaError):
            parse_action(payload)

    def test_invalid_json_keeps_raw_text(self):
        with pytest.raises(ActionSchemaError, match="not valid JSON") as exc_info:
            parse_action("buy everything!")
        assert exc_info.value.raw == "buy everything!"

    def test_non_object_rejected(self):
        with pytest.raises(ActionSchemaError, match="JSON object"):
            parse_action("[1, 2, 3]")

    def test_error_message_names_location(self):
        with pytest.raises(ActionSchemaError, match="buyHerbs"):
            parse_action({"buyHerbs": [{"herbId": "H99", "qty": 1}]})

    def test_schema_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_action("nope")
