"""
Placeholder player for offline runs and infrastructure testing.

This provider uses simple rule-based logic but has the same interface
as the LLM player. It is used to:
1. Run full games without API keys
2. Benchmark a baseline to compare LLM players against
3. Exercise the orchestrator end-to-end in tests

Strategy:
- Pick the potion with the best expected margin (yesterday's best sale
  price vs. today's recipe cost; cheapest recipe when there is no data)
- Spend a fixed fraction of silver on matching herb pairs, capped by an
  estimate of demand, and craft them
- Offer every potion held at recipe cost plus a markup
- On the final day, dump everything at cost
"""

import math
import random
from typing import Any

from engine.action_parser import HerbPurchase, PotionCraft, PotionOffer, RequestedAction
from engine.catalog import RECIPES
from players.base import DecisionProvider, DecisionRequest, DecisionResult

DEFAULT_DEMAND_ESTIMATE = 5


class PlaceholderPlayer(DecisionProvider):
    """Deterministic (seeded) rule-based participant."""

    def __init__(
        self,
        name: str,
        budget_fraction: float = 0.5,
        markup: float = 0.5,
        price_jitter: float = 0.05,
        seed: int | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize placeholder player.

        Args:
            name: Display name
            budget_fraction: Share of silver spent on herbs each day
            markup: Target margin over recipe cost (0.5 = +50%)
            price_jitter: Random +/- share applied to offer prices
            seed: Random seed for reproducibility
            **kwargs: Ignored (uniform factory signature)
        """
        super().__init__(name)
        if not 0 <= budget_fraction <= 1:
            raise ValueError(f"budget_fraction must be in [0, 1], got {budget_fraction}")
        self.budget_fraction = budget_fraction
        self.markup = markup
        self.price_jitter = price_jitter
        self.rng = random.Random(seed)

    async def decide(self, request: DecisionRequest) -> DecisionResult:
        return DecisionResult(action=self.plan(request))

    def plan(self, request: DecisionRequest) -> RequestedAction:
        """Build today's action from the request (synchronous core)."""
        prices = request.herb_prices
        inventory = request.inventory
        recipe_cost = {p: prices[a] + prices[b] for p, (a, b) in RECIPES.items()}

        buys: list[HerbPurchase] = []
        crafts: list[PotionCraft] = []
        crafted: dict[str, int] = {}

        if not request.is_final_day:
            potion_id = self._pick_potion(request, recipe_cost)
            herb_a, herb_b = RECIPES[potion_id]
            budget = int(inventory.silver * self.budget_fraction)
            pairs = min(budget // recipe_cost[potion_id], self._demand_estimate(request, potion_id))
            if pairs > 0:
                buys = [HerbPurchase(herb_id=herb_a, qty=pairs), HerbPurchase(herb_id=herb_b, qty=pairs)]
                crafts = [PotionCraft(potion_id=potion_id, qty=pairs)]
                crafted[potion_id] = pairs

        offers: list[PotionOffer] = []
        for potion_id, held in inventory.potions.items():
            qty = held + crafted.get(potion_id, 0)
            if qty <= 0:
                continue
            offers.append(
                PotionOffer(
                    potion_id=potion_id,
                    price=self._offer_price(recipe_cost[potion_id], request.is_final_day),
                    qty=qty,
                )
            )

        return RequestedAction(buy_herbs=buys, make_potions=crafts, potion_offers=offers)

    def _pick_potion(self, request: DecisionRequest, recipe_cost: dict[str, int]) -> str:
        def expected_margin(potion_id: str) -> float:
            cost = recipe_cost[potion_id]
            if request.market_history:
                info = request.market_history[-1].get(potion_id)
                if info is not None and info.highest_price > 0:
                    return info.highest_price - cost
            return cost * self.markup - cost / 100

        # Ties resolve by catalog order
        return max(RECIPES, key=lambda p: (expected_margin(p), -list(RECIPES).index(p)))

    def _demand_estimate(self, request: DecisionRequest, potion_id: str) -> int:
        if not request.market_history:
            return DEFAULT_DEMAND_ESTIMATE
        info = request.market_history[-1].get(potion_id)
        if info is None:
            return DEFAULT_DEMAND_ESTIMATE
        demand = info.fulfilled + info.remaining
        share = max(1, demand // max(1, request.player_count))
        return share

    def _offer_price(self, cost: int, final_day: bool) -> int:
        if final_day:
            return max(1, cost)
        jitter = 1 + self.rng.uniform(-self.price_jitter, self.price_jitter)
        return max(1, math.ceil(cost * (1 + self.markup) * jitter))
