"""
Run metrics.

Turns GameState snapshots into pandas DataFrames for reporting:
final standings and one row per (day, player).
"""

import pandas as pd

from engine.state import GameState


def standings(state: GameState) -> pd.DataFrame:
    """
    Final (or current) standings, richest first.

    Ties on silver keep seat order.

    Returns:
        DataFrame with columns: rank, player_idx, name, silver, potions,
        herbs, disqualified, reason, total_tokens, cost_usd
    """
    rows = []
    for idx, inventory in enumerate(state.inventories):
        status = state.statuses[idx] if idx < len(state.statuses) else None
        usage = state.usage[idx] if idx < len(state.usage) else None
        rows.append(
            {
                "player_idx": idx,
                "name": status.name if status else f"Player {idx + 1}",
                "silver": inventory.silver,
                "potions": sum(inventory.potions.values()),
                "herbs": sum(inventory.herbs.values()),
                "disqualified": bool(status and status.disqualified),
                "reason": status.reason if status else None,
                "total_tokens": usage.total_tokens if usage else 0,
                "cost_usd": usage.cost_usd if usage else 0.0,
            }
        )
    df = pd.DataFrame(rows)
    df = df.sort_values("silver", ascending=False, kind="stable").reset_index(drop=True)
    df.insert(0, "rank", range(1, len(df) + 1))
    return df


def daily_results(state: GameState) -> pd.DataFrame:
    """
    One row per (day, player) with spend, revenue and violation counts.

    Returns:
        DataFrame with columns: day, player_idx, start_silver, herb_spend,
        crafted, offered, sold, revenue, violations, end_silver
    """
    rows = []
    for record in state.day_records:
        for idx, outcome in enumerate(record.outcomes):
            rows.append(
                {
                    "day": record.day,
                    "player_idx": idx,
                    "start_silver": outcome.start_inventory.silver,
                    "herb_spend": sum(cost for _, _, cost in outcome.executed_buys),
                    "crafted": sum(qty for _, qty in outcome.executed_crafts),
                    "offered": sum(s.offered for s in outcome.sales),
                    "sold": sum(s.sold for s in outcome.sales),
                    "revenue": sum(s.revenue for s in outcome.sales),
                    "violations": len(outcome.violations),
                    "end_silver": outcome.end_inventory.silver,
                }
            )
    columns = [
        "day", "player_idx", "start_silver", "herb_spend", "crafted",
        "offered", "sold", "revenue", "violations", "end_silver",
    ]
    return pd.DataFrame(rows, columns=columns)
