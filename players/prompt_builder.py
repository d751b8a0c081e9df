"""
Prompt builder for LLM players.

Converts a DecisionRequest into the natural language prompts sent to the
model. Prompts are plain text with one section per concern (inventory,
herb prices, own history, yesterday's market) and end with the JSON
format the action schema expects.
"""

from engine.catalog import HERB_TIERS, POTION_TIER_LOOKUP, RECIPES, humanize
from engine.state import ActionOutcome, Inventory, PotionMarketInfo
from players.base import DecisionRequest

SYSTEM_PROMPT = """You are playing "The Alchemist", a competitive trading game. Your goal is to finish with the most silver. Take strategic decisions to sell potions at the right price to maximize your silver.

## GAME RULES
Every alchemist starts with some silver and can buy herbs from the market. Herb prices fluctuate daily. Alchemists then decide which potions to craft. Crafted potions are offered to adventurers in the market at a price the alchemist sets. Adventurers buy the cheapest potions first. Potion demand fluctuates daily. The game is played over multiple days.

### Herbs (12 types, 3 tiers)
{herb_tiers}

### Potions (18 types, crafted from herbs)
Each potion requires exactly 2 herbs from the same tier.

### RECIPES
{recipes}

### Daily Loop
1. Buy herbs (costs silver)
2. Craft potions (consumes herbs)
3. List potions for sale (set your own price)

If an order exceeds your silver, herbs or potions, only the feasible part is executed, in order.

### Market
- All player offers are collected
- Offers are sorted by price (lowest first); equal prices are served in order of submission
- Demand buys from cheapest to most expensive
- Unsold potions return to your inventory

### Notes
- herbId must be H01-H12
- potionId must be P01-P18
- qty must be a non-negative integer
- price must be a positive integer
- leave out orders with qty 0
"""

RESPONSE_FORMAT = """=== Return JSON Format ===
Return JSON with three arrays. ONLY include items you actually want:
- buyHerbs: [{"herbId": "H01", "qty": 5}]
- makePotions: [{"potionId": "P01", "qty": 2}]
- potionOffers: [{"potionId": "P01", "price": 50, "qty": 2}]

Use EMPTY ARRAYS [] if you have nothing for that action.

Respond only with JSON."""

NAME_PROMPT = """You are about to play "The Alchemist", a competitive potion trading game.

Choose a memorable name for your alchemist character. Be creative! Examples: "Zephyr", "Old Magnus", "Lady Nightshade", "The Toad"

Keep it short (1-3 words). No full sentences.

Respond ONLY with a json object containing the alchemistName. Example: {"alchemistName": "Zephyr"}"""


class PromptBuilder:
    """
    Builds natural language prompts for LLM players.

    All methods are static; the class only groups them.
    """

    @staticmethod
    def build_system_prompt(strategy: str | None = None) -> str:
        """
        Build the rules prompt, optionally followed by a strategy section.

        Args:
            strategy: Free-text strategy configured for this seat

        Returns:
            System prompt string
        """
        herb_tiers = "\n".join(
            f"Tier {tier[1]}: {', '.join(herbs)}" for tier, herbs in HERB_TIERS.items()
        )
        recipes = "\n".join(
            f"{potion_id} (Tier {POTION_TIER_LOOKUP[potion_id]}): {a} + {b}"
            for potion_id, (a, b) in RECIPES.items()
        )
        prompt = SYSTEM_PROMPT.format(herb_tiers=herb_tiers, recipes=recipes)
        if strategy:
            prompt += f"\n## YOUR STRATEGY\n{strategy.strip()}\n"
        return prompt

    @staticmethod
    def build_day_prompt(request: DecisionRequest, history_days: int = 3) -> str:
        """
        Build the per-day user prompt.

        Args:
            request: The participant's view of the game
            history_days: Number of own past days to describe

        Returns:
            User prompt string ending with the JSON format instructions
        """
        lines = [
            f"Day {request.day}/{request.total_days} | "
            f"{request.player_count} players competing"
        ]
        if request.is_final_day:
            lines.append(
                "\nFINAL DAY - sell everything! Unsold inventory has no value after the game ends."
            )

        history = PromptBuilder.format_action_history(request.action_history, history_days)
        lines += [
            "",
            "=== YOUR INVENTORY ===",
            "What you currently own. Use this to decide what to buy, craft, and sell.",
            PromptBuilder.format_inventory(request.inventory),
            "",
            "=== HERB PRICES ===",
            "Price history for each herb. Format: past prices -> today's price.",
            PromptBuilder.format_herb_prices(request.price_history, request.herb_prices),
            "",
            "=== YOUR PAST DECISIONS ===",
            "Your actions from previous days and their results.",
            history or "Day 1 - no history yet",
            "",
            "=== YESTERDAY'S MARKET ===",
            "Trading activity for ALL potions yesterday: total offered, sold, and price range.",
            PromptBuilder.format_yesterday_market(request.market_history),
            "",
        ]
        if request.yesterdays_violations:
            lines += [
                "=== YESTERDAY'S ERRORS ===",
                "These orders could only be partly executed:",
                *(f"- {v}" for v in request.yesterdays_violations),
                "",
            ]
        lines.append(RESPONSE_FORMAT)
        return "\n".join(lines)

    # =========================================================================
    # SECTION FORMATTERS
    # =========================================================================

    @staticmethod
    def format_inventory(inventory: Inventory) -> str:
        herbs = ", ".join(f"{h}: {q}" for h, q in inventory.herbs.items() if q > 0)
        potions = ", ".join(f"{p}: {q}" for p, q in inventory.potions.items() if q > 0)
        return (
            f"Silver: {inventory.silver}\n"
            f"Herbs: {herbs or 'none'}\n"
            f"Potions: {potions or 'none'}"
        )

    @staticmethod
    def format_herb_prices(
        price_history: tuple[dict[str, int], ...] | list[dict[str, int]],
        today: dict[str, int],
    ) -> str:
        rows = []
        for herb_id, price in today.items():
            past = [str(day[herb_id]) for day in price_history if herb_id in day]
            rows.append(f"{herb_id}: {' -> '.join(past + [str(price)])}")
        return "\n".join(rows)

    @staticmethod
    def format_action_history(
        history: tuple[ActionOutcome, ...] | list[ActionOutcome], max_days: int = 3
    ) -> str:
        """Summarize the participant's last max_days outcomes, oldest first."""
        if not history or max_days <= 0:
            return ""
        recent = list(history)[-max_days:]
        blocks = []
        offset = len(history) - len(recent)
        for i, outcome in enumerate(recent, start=offset + 1):
            bought = ", ".join(f"{q} {h} for {c}" for h, q, c in outcome.executed_buys if q)
            crafted = ", ".join(f"{q} {p}" for p, q in outcome.executed_crafts if q)
            sales = ", ".join(
                f"{s.potion_id}: sold {s.sold}/{s.offered} @ {s.price}" for s in outcome.sales
            )
            block = [
                f"- Day {i}: silver {outcome.start_inventory.silver} -> "
                f"{outcome.end_inventory.silver}",
                f"  Bought: {bought or 'nothing'}",
                f"  Crafted: {crafted or 'nothing'}",
                f"  Sales: {sales or 'nothing offered'}",
            ]
            if outcome.violations:
                block.append(f"  Errors: {'; '.join(outcome.violations)}")
            blocks.append("\n".join(block))
        return "\n".join(blocks)

    @staticmethod
    def format_yesterday_market(
        market_history: tuple[dict[str, PotionMarketInfo], ...] | list[dict[str, PotionMarketInfo]],
    ) -> str:
        if not market_history:
            return "No market data yet"
        yesterday = market_history[-1]
        rows = [
            f"{potion_id}: offered {info.offered}, sold {info.fulfilled}, "
            f"price {info.lowest_price}-{info.highest_price}"
            for potion_id, info in yesterday.items()
            if info.offered > 0
        ]
        return "\n".join(rows) or "No potions were offered yesterday"

    @staticmethod
    def format_error_feedback(error: str, attempt: int) -> str:
        """Feedback appended to the prompt when a response fails the schema."""
        return (
            f"\nYOUR PREVIOUS RESPONSE (attempt {attempt}) WAS REJECTED: {error}\n"
            "Reply again with valid JSON only."
        )

    @staticmethod
    def format_violations_for_display(violations: list[str] | tuple[str, ...]) -> list[str]:
        """Violation messages with ids replaced by herb/potion names."""
        return [humanize(v) for v in violations]
