"""
Market Clearer.

Matches every participant's executable potion offers against the day's
demand. For each potion independently:

- Offers are sorted by ascending price. Ties keep collection order
  (participant index, then the participant's own order): a FIFO
  tie-break, NOT an even split between same-price sellers.
- Demand is walked from the cheapest offer up, filling each offer fully
  before moving on. The offer that exhausts demand is partially filled;
  every later offer sells nothing.

Both functions are pure: input offers are never modified.
"""

import logging
from collections.abc import Sequence
from dataclasses import replace

from engine.catalog import POTION_IDS
from engine.state import ExecutableOffer, PotionMarketInfo, ProcessedMarket

logger = logging.getLogger(__name__)


def build_market(
    offers_by_player: Sequence[Sequence[ExecutableOffer]],
) -> dict[str, list[ExecutableOffer]]:
    """
    Group offers per potion and sort them for clearing.

    Args:
        offers_by_player: Executable offers indexed by participant

    Returns:
        {potion_id: offers sorted by ascending price}, every potion present,
        each offer tagged with its player_idx
    """
    market: dict[str, list[ExecutableOffer]] = {p: [] for p in POTION_IDS}
    for idx, player_offers in enumerate(offers_by_player):
        for offer in player_offers:
            market[offer.potion_id].append(replace(offer, player_idx=idx, sold=None))

    # list.sort is stable, which gives the FIFO tie-break
    for offers in market.values():
        offers.sort(key=lambda o: o.price)
    return market


def clear_market(
    market: dict[str, list[ExecutableOffer]],
    demands: dict[str, int],
) -> ProcessedMarket:
    """
    Fill sorted offers against demand.

    Args:
        market: Output of build_market
        demands: Today's demand per potion

    Returns:
        ProcessedMarket with every offer's sold quantity and per-potion
        aggregates (lowest/highest price among offers that sold anything,
        0/0 when nothing sold)
    """
    processed: list[ExecutableOffer] = []
    information: dict[str, PotionMarketInfo] = {}

    for potion_id in POTION_IDS:
        offers = market.get(potion_id, [])
        remaining = max(0, demands.get(potion_id, 0))
        offered = 0
        fulfilled = 0
        lowest_price = 0
        highest_price = 0

        for offer in offers:
            sold = min(remaining, offer.qty)
            remaining -= sold
            fulfilled += sold
            offered += offer.qty
            if sold > 0:
                if lowest_price == 0 or offer.price < lowest_price:
                    lowest_price = offer.price
                highest_price = max(highest_price, offer.price)
            processed.append(replace(offer, sold=sold))

        information[potion_id] = PotionMarketInfo(
            offered=offered,
            fulfilled=fulfilled,
            remaining=remaining,
            highest_price=highest_price,
            lowest_price=lowest_price,
        )
        if offers:
            logger.debug(
                f"{potion_id}: demand={demands.get(potion_id, 0)} offered={offered} "
                f"fulfilled={fulfilled} price_range=[{lowest_price}, {highest_price}]"
            )

    return ProcessedMarket(processed_offers=tuple(processed), potion_information=information)


def run_market(
    offers_by_player: Sequence[Sequence[ExecutableOffer]],
    demands: dict[str, int],
) -> ProcessedMarket:
    """build_market followed by clear_market."""
    return clear_market(build_market(offers_by_player), demands)
