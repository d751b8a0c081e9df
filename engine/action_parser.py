"""
Action schema for participant decisions.

This module defines the Pydantic models every decision response must
satisfy before it reaches the sanitizer. The schema is deliberately
closed: herb and potion ids must come from the catalog, quantities are
non-negative integers and prices are positive integers. Anything else is
a schema violation and the whole response is discarded.

The wire format uses the camelCase keys LLM players are prompted with
(buyHerbs, herbId, ...); snake_case field names are accepted as well.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from engine.catalog import HerbId, PotionId
from engine.errors import ActionSchemaError

_MODEL_CONFIG = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class HerbPurchase(BaseModel):
    """Buy qty units of one herb at today's price."""

    model_config = _MODEL_CONFIG

    herb_id: HerbId = Field(alias="herbId")
    qty: StrictInt = Field(ge=0)


class PotionCraft(BaseModel):
    """Craft qty units of one potion from its two recipe herbs."""

    model_config = _MODEL_CONFIG

    potion_id: PotionId = Field(alias="potionId")
    qty: StrictInt = Field(ge=0)


class PotionOffer(BaseModel):
    """Offer qty units of one potion at a chosen unit price."""

    model_config = _MODEL_CONFIG

    potion_id: PotionId = Field(alias="potionId")
    price: StrictInt = Field(gt=0)
    qty: StrictInt = Field(ge=0)


class RequestedAction(BaseModel):
    """
    A participant's requested actions for one day.

    May be infeasible; the sanitizer clamps it against private state.
    An empty RequestedAction is what disqualified participants submit.
    """

    model_config = _MODEL_CONFIG

    buy_herbs: tuple[HerbPurchase, ...] = Field(default=(), alias="buyHerbs")
    make_potions: tuple[PotionCraft, ...] = Field(default=(), alias="makePotions")
    potion_offers: tuple[PotionOffer, ...] = Field(default=(), alias="potionOffers")

    def is_empty(self) -> bool:
        return not (self.buy_herbs or self.make_potions or self.potion_offers)

    def to_wire(self) -> dict[str, Any]:
        """Serialize with the camelCase wire keys."""
        return self.model_dump(by_alias=True, mode="json")


class AlchemistName(BaseModel):
    """Structured output for the optional name-choosing step."""

    alchemist_name: str = Field(
        alias="alchemistName",
        description="A short, creative name for your alchemist character (1-3 words max)",
    )


EMPTY_ACTION = RequestedAction()


def parse_action(raw: str | bytes | dict[str, Any] | RequestedAction) -> RequestedAction:
    """
    Validate a raw decision response against the action schema.

    Args:
        raw: JSON text, an already-decoded mapping, or a RequestedAction

    Returns:
        The validated RequestedAction

    Raises:
        ActionSchemaError: If the response is not valid JSON or fails the schema
    """
    if isinstance(raw, RequestedAction):
        return raw

    if isinstance(raw, (str, bytes)):
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
        try:
            data = json.loads(text.strip())
        except json.JSONDecodeError as e:
            raise ActionSchemaError(f"Response is not valid JSON: {e}", raw=text) from e
    else:
        text = None
        data = raw

    if not isinstance(data, dict):
        raise ActionSchemaError(
            f"Response must be a JSON object, got {type(data).__name__}",
            raw=text if text is not None else repr(raw),
        )

    try:
        return RequestedAction.model_validate(data)
    except ValidationError as e:
        raise ActionSchemaError(
            f"Response failed action schema: {e.error_count()} error(s): {_summarize(e)}",
            raw=text if text is not None else repr(raw),
        ) from e


def _summarize(error: ValidationError, limit: int = 3) -> str:
    parts = []
    for item in error.errors()[:limit]:
        location = ".".join(str(p) for p in item["loc"])
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)
