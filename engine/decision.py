"""
Decision request/response values exchanged with participants.

The engine builds a DecisionRequest for every active participant at the
start of a day and expects a DecisionResult back. Providers live in the
players package and only see these two types.
"""

from dataclasses import dataclass, field

from engine.action_parser import RequestedAction
from engine.state import ActionOutcome, ExecutableOffer, Inventory, PotionMarketInfo, Usage


@dataclass(frozen=True)
class DecisionRequest:
    """
    Everything a participant may see before deciding a day.

    Attributes:
        player_idx: Participant index (0-indexed)
        day: Day being decided (1-indexed)
        total_days: Length of the run
        player_count: Number of participants
        inventory: Participant's current holdings (a private copy)
        herb_prices: Today's herb prices
        price_history: Herb prices of every previous day, oldest first
        market_history: Per-potion market aggregates of every previous day
        yesterdays_violations: Feasibility violations from the previous day
        yesterdays_offers: Participant's own processed offers from the
            previous day (with sold quantities)
        action_history: Participant's own most recent ActionOutcomes
        strategy: Optional strategy text configured for this seat
    """

    player_idx: int
    day: int
    total_days: int
    player_count: int
    inventory: Inventory
    herb_prices: dict[str, int]
    price_history: tuple[dict[str, int], ...] = ()
    market_history: tuple[dict[str, PotionMarketInfo], ...] = ()
    yesterdays_violations: tuple[str, ...] = ()
    yesterdays_offers: tuple[ExecutableOffer, ...] = ()
    action_history: tuple[ActionOutcome, ...] = ()
    strategy: str | None = None

    @property
    def is_final_day(self) -> bool:
        return self.day == self.total_days


@dataclass(frozen=True)
class DecisionResult:
    """
    A provider's answer for one day.

    Attributes:
        action: Schema-valid requested action
        usage: Tokens, cost and wall time spent producing it
        reasoning: Optional free-text reasoning for logs
    """

    action: RequestedAction
    usage: Usage = field(default_factory=Usage)
    reasoning: str | None = None
