"""
Order Sanitizer.

Clamps a participant's requested actions to what their private inventory
and budget actually allow. Processing order is fixed because each stage
consumes the output of the previous one:

1. BUY:   herbs, limited by silver at today's prices
2. CRAFT: potions, limited by the two recipe herbs on hand
3. OFFER: potions, limited by potions on hand (deducted immediately;
          unsold units come back after the market clears)

Shortfalls are expected. They are clamped to the largest feasible
quantity and reported as violation strings, never raised.
"""

from dataclasses import dataclass

from engine.action_parser import RequestedAction
from engine.catalog import RECIPES
from engine.state import ExecutableOffer, Inventory


@dataclass(frozen=True)
class SanitizedActions:
    """
    Output of sanitize_actions.

    Attributes:
        inventory: Holdings after buying, crafting and provisionally
            removing offered potions
        offers: Executable offers (qty already clamped)
        violations: One message per clamped request line
        executed_buys: (herb_id, qty, cost) per buy line
        executed_crafts: (potion_id, qty) per craft line
    """

    inventory: Inventory
    offers: tuple[ExecutableOffer, ...]
    violations: tuple[str, ...]
    executed_buys: tuple[tuple[str, int, int], ...]
    executed_crafts: tuple[tuple[str, int], ...]


def sanitize_actions(
    inventory: Inventory,
    action: RequestedAction,
    herb_prices: dict[str, int],
) -> SanitizedActions:
    """
    Clamp a requested action against private state.

    The caller's inventory is not modified; a copy is updated and returned.

    Args:
        inventory: Participant's holdings at the start of the day
        action: Schema-valid requested action (may be infeasible)
        herb_prices: Today's herb prices

    Returns:
        SanitizedActions with the updated inventory, offers and violations

    Raises:
        ValueError: If an offer price or herb price is not positive (these
            are rejected at the schema boundary and by the generator)
    """
    inv = inventory.copy()
    violations: list[str] = []

    # -------------------------------------------------------------------------
    # 1. BUY
    # -------------------------------------------------------------------------
    executed_buys: list[tuple[str, int, int]] = []
    for order in action.buy_herbs:
        price = herb_prices[order.herb_id]
        if price <= 0:
            raise ValueError(f"Herb price for {order.herb_id} must be positive, got {price}")
        bought = min(order.qty, inv.silver // price)
        cost = bought * price
        inv.silver -= cost
        inv.herbs[order.herb_id] += bought
        executed_buys.append((order.herb_id, bought, cost))
        if bought < order.qty:
            violations.append(
                f"Not enough silver to buy {order.qty} {order.herb_id}. Bought {bought}."
            )

    # -------------------------------------------------------------------------
    # 2. CRAFT
    # -------------------------------------------------------------------------
    executed_crafts: list[tuple[str, int]] = []
    for order in action.make_potions:
        herb_a, herb_b = RECIPES[order.potion_id]
        made = min(order.qty, inv.herbs[herb_a], inv.herbs[herb_b])
        inv.herbs[herb_a] -= made
        inv.herbs[herb_b] -= made
        inv.potions[order.potion_id] += made
        executed_crafts.append((order.potion_id, made))
        if made < order.qty:
            violations.append(
                f"Not enough herbs to make {order.qty} {order.potion_id}. Made {made}."
            )

    # -------------------------------------------------------------------------
    # 3. OFFER
    # -------------------------------------------------------------------------
    offers: list[ExecutableOffer] = []
    for order in action.potion_offers:
        if order.price <= 0:
            raise ValueError(f"Offer price must be positive, got {order.price}")
        offered = min(order.qty, inv.potions[order.potion_id])
        inv.potions[order.potion_id] -= offered
        offers.append(ExecutableOffer(potion_id=order.potion_id, price=order.price, qty=offered))
        if offered < order.qty:
            violations.append(
                f"Not enough potions to sell {order.qty} {order.potion_id}. Offered {offered}."
            )

    return SanitizedActions(
        inventory=inv,
        offers=tuple(offers),
        violations=tuple(violations),
        executed_buys=tuple(executed_buys),
        executed_crafts=tuple(executed_crafts),
    )
