"""
Round Transition.

Combines the Order Sanitizer and the Market Clearer across all
participants for one day:

1. Sanitize every participant's action in index order
2. Clear the market once with that day's demand
3. Credit price * sold to each seller and return unsold units
4. Assemble one ActionOutcome per participant and one DayRecord

Disqualified participants are treated as submitting an empty action, so
their inventory stays frozen while they still appear in the record.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from engine.action_parser import EMPTY_ACTION, RequestedAction
from engine.clearing import run_market
from engine.economy import EconomySchedule
from engine.sanitizer import SanitizedActions, sanitize_actions
from engine.state import (
    ActionOutcome,
    DayRecord,
    GameState,
    Inventory,
    ParticipantStatus,
    RunPhase,
    SaleResult,
    UsageStats,
)
from engine.decision import DecisionRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundResult:
    """New inventories plus the audit record for one day."""

    inventories: tuple[Inventory, ...]
    record: DayRecord


def run_round(
    day: int,
    inventories: Sequence[Inventory],
    actions: Sequence[RequestedAction],
    schedule: EconomySchedule,
) -> RoundResult:
    """
    Apply one day of actions to every participant.

    Args:
        day: 1-indexed day being played
        inventories: Start-of-day inventories by participant index
        actions: Requested actions by participant index (already
            schema-valid; EMPTY_ACTION for disqualified participants)
        schedule: The run's economy schedule

    Returns:
        RoundResult with end-of-day inventories and the DayRecord

    Raises:
        ValueError: If inventories and actions differ in length
    """
    if len(inventories) != len(actions):
        raise ValueError(
            f"inventories ({len(inventories)}) and actions ({len(actions)}) must align"
        )

    herb_prices = schedule.prices_for(day)
    potion_demands = schedule.demands_for(day)

    # Player output phase
    sanitized: list[SanitizedActions] = [
        sanitize_actions(inventory, action, herb_prices)
        for inventory, action in zip(inventories, actions)
    ]

    # Market phase
    market = run_market([s.offers for s in sanitized], potion_demands)

    # Inventory phase
    end_inventories: list[Inventory] = []
    outcomes: list[ActionOutcome] = []
    for idx, result in enumerate(sanitized):
        inventory = result.inventory.copy()
        sales = []
        for offer in market.offers_for(idx):
            sold = offer.sold or 0
            inventory.silver += offer.price * sold
            inventory.potions[offer.potion_id] += offer.qty - sold
            sales.append(
                SaleResult(
                    potion_id=offer.potion_id,
                    offered=offer.qty,
                    sold=sold,
                    price=offer.price,
                    revenue=offer.price * sold,
                )
            )

        end_inventories.append(inventory)
        outcomes.append(
            ActionOutcome(
                start_inventory=inventories[idx].copy(),
                end_inventory=inventory.copy(),
                requested=actions[idx],
                executed_buys=result.executed_buys,
                executed_crafts=result.executed_crafts,
                executed_offers=result.offers,
                violations=result.violations,
                sales=tuple(sales),
            )
        )

    record = DayRecord(
        day=day,
        herb_prices=herb_prices,
        potion_demands=potion_demands,
        outcomes=tuple(outcomes),
        market=market,
    )
    return RoundResult(inventories=tuple(end_inventories), record=record)


def apply_day(
    state: GameState,
    actions: Sequence[RequestedAction],
    schedule: EconomySchedule,
) -> GameState:
    """
    Advance a GameState by one day.

    Actions submitted for disqualified participants are ignored and
    replaced by EMPTY_ACTION.

    Returns:
        A new GameState with one more completed day and its DayRecord
    """
    effective = [
        EMPTY_ACTION if status.disqualified else action
        for status, action in zip(state.statuses, actions)
    ]
    result = run_round(state.next_day, state.inventories, effective, schedule)
    logger.debug(f"Day {state.next_day} processed for {len(effective)} participants")
    return replace(
        state,
        day=state.day + 1,
        phase=RunPhase.RUNNING,
        inventories=result.inventories,
        day_records=state.day_records + (result.record,),
    )


def initial_state(
    player_names: Sequence[str],
    starting_silver: int,
    total_days: int,
    seed: str | None = None,
) -> GameState:
    """State before day 1: starting silver, empty holdings, nobody disqualified."""
    count = len(player_names)
    return GameState(
        day=0,
        total_days=total_days,
        phase=RunPhase.INITIALIZING,
        inventories=tuple(Inventory.starting(starting_silver) for _ in range(count)),
        day_records=(),
        statuses=tuple(ParticipantStatus(index=i, name=n) for i, n in enumerate(player_names)),
        usage=tuple(UsageStats() for _ in range(count)),
        seed=seed,
    )


def build_decision_request(
    state: GameState,
    schedule: EconomySchedule,
    player_idx: int,
    history_days: int = 3,
    strategy: str | None = None,
) -> DecisionRequest:
    """
    Assemble what one participant gets to see before deciding.

    Args:
        state: Current (pre-round) state
        schedule: The run's economy schedule
        player_idx: Participant index
        history_days: How many of the participant's own past days to include
        strategy: Optional strategy text for the provider

    Returns:
        DecisionRequest for state.next_day
    """
    day = state.next_day
    own_history = tuple(r.outcomes[player_idx] for r in state.day_records)
    own_history = own_history[-history_days:] if history_days > 0 else ()

    return DecisionRequest(
        player_idx=player_idx,
        day=day,
        total_days=state.total_days,
        player_count=state.player_count,
        inventory=state.inventories[player_idx].copy(),
        herb_prices=schedule.prices_for(day),
        price_history=tuple(schedule.prices_for(d) for d in range(1, day)),
        market_history=tuple(state.market_history()),
        yesterdays_violations=tuple(state.last_violations(player_idx)),
        yesterdays_offers=tuple(state.last_offers(player_idx)),
        action_history=own_history,
        strategy=strategy,
    )
