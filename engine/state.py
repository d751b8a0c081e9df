"""
Data model for a run: inventories, offers, day records and game state.

Everything a round produces is a new value. GameState and DayRecord are
frozen; Inventory is a plain dataclass that the engine only ever mutates
on private copies (see Inventory.copy) before freezing it into a record.

All types round-trip through to_dict()/from_dict() so a GameState can be
written as a JSON checkpoint after every round and reloaded to resume.
"""

from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any

from engine.action_parser import RequestedAction
from engine.catalog import HERB_IDS, POTION_IDS


class RunPhase(str, Enum):
    """Orchestrator state machine phases."""

    INITIALIZING = "initializing"
    RUNNING = "running"
    COMPLETED = "completed"


# =============================================================================
# INVENTORY
# =============================================================================


@dataclass
class Inventory:
    """
    A participant's private holdings.

    Attributes:
        silver: Currency on hand
        herbs: Quantity held per herb id (every id present)
        potions: Quantity held per potion id (every id present)
    """

    silver: int
    herbs: dict[str, int] = field(default_factory=lambda: {h: 0 for h in HERB_IDS})
    potions: dict[str, int] = field(default_factory=lambda: {p: 0 for p in POTION_IDS})

    @classmethod
    def starting(cls, silver: int) -> "Inventory":
        """Fresh inventory with the given silver and no herbs or potions."""
        return cls(silver=silver)

    def copy(self) -> "Inventory":
        return Inventory(silver=self.silver, herbs=dict(self.herbs), potions=dict(self.potions))

    def is_non_negative(self) -> bool:
        return (
            self.silver >= 0
            and all(q >= 0 for q in self.herbs.values())
            and all(q >= 0 for q in self.potions.values())
        )

    def to_dict(self) -> dict[str, Any]:
        return {"silver": self.silver, "herbs": dict(self.herbs), "potions": dict(self.potions)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Inventory":
        herbs = {h: 0 for h in HERB_IDS}
        herbs.update(data.get("herbs", {}))
        potions = {p: 0 for p in POTION_IDS}
        potions.update(data.get("potions", {}))
        return cls(silver=int(data["silver"]), herbs=herbs, potions=potions)


# =============================================================================
# MARKET
# =============================================================================


@dataclass
class ExecutableOffer:
    """
    A sell offer after clamping to the participant's holdings.

    sold and player_idx stay None until the market has been cleared.
    """

    potion_id: str
    price: int
    qty: int
    sold: int | None = None
    player_idx: int | None = None

    @property
    def unsold(self) -> int:
        return self.qty - (self.sold or 0)

    @property
    def revenue(self) -> int:
        return self.price * (self.sold or 0)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExecutableOffer":
        return cls(**data)


@dataclass(frozen=True)
class PotionMarketInfo:
    """Per-potion market aggregate for one day."""

    offered: int = 0
    fulfilled: int = 0
    remaining: int = 0
    highest_price: int = 0
    lowest_price: int = 0


@dataclass(frozen=True)
class ProcessedMarket:
    """
    Result of clearing one day's market.

    Attributes:
        processed_offers: Every offer with sold/player_idx filled in, grouped
            by potion in catalog order, ascending price within a potion
        potion_information: Aggregates keyed by potion id
    """

    processed_offers: tuple[ExecutableOffer, ...]
    potion_information: dict[str, PotionMarketInfo]

    def offers_for(self, player_idx: int) -> list[ExecutableOffer]:
        return [o for o in self.processed_offers if o.player_idx == player_idx]

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed_offers": [o.to_dict() for o in self.processed_offers],
            "potion_information": {
                k: asdict(v) for k, v in self.potion_information.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProcessedMarket":
        return cls(
            processed_offers=tuple(
                ExecutableOffer.from_dict(o) for o in data["processed_offers"]
            ),
            potion_information={
                k: PotionMarketInfo(**v) for k, v in data["potion_information"].items()
            },
        )


# =============================================================================
# RECORDS
# =============================================================================


@dataclass(frozen=True)
class SaleResult:
    """How one of a participant's offers fared in the market."""

    potion_id: str
    offered: int
    sold: int
    price: int
    revenue: int


@dataclass(frozen=True)
class ActionOutcome:
    """
    What happened to one participant on one day.

    Attributes:
        start_inventory: Holdings before any action
        end_inventory: Holdings after the market returned unsold units
        requested: The action as submitted (empty when disqualified)
        executed_buys: (herb_id, qty, cost) actually bought
        executed_crafts: (potion_id, qty) actually crafted
        executed_offers: Offers as clamped by the sanitizer
        violations: Human-readable feasibility shortfalls
        sales: Market results for this participant's offers
    """

    start_inventory: Inventory
    end_inventory: Inventory
    requested: RequestedAction
    executed_buys: tuple[tuple[str, int, int], ...]
    executed_crafts: tuple[tuple[str, int], ...]
    executed_offers: tuple[ExecutableOffer, ...]
    violations: tuple[str, ...]
    sales: tuple[SaleResult, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_inventory": self.start_inventory.to_dict(),
            "end_inventory": self.end_inventory.to_dict(),
            "requested": self.requested.model_dump(mode="json"),
            "executed_buys": [list(b) for b in self.executed_buys],
            "executed_crafts": [list(c) for c in self.executed_crafts],
            "executed_offers": [o.to_dict() for o in self.executed_offers],
            "violations": list(self.violations),
            "sales": [asdict(s) for s in self.sales],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ActionOutcome":
        return cls(
            start_inventory=Inventory.from_dict(data["start_inventory"]),
            end_inventory=Inventory.from_dict(data["end_inventory"]),
            requested=RequestedAction.model_validate(data["requested"]),
            executed_buys=tuple(tuple(b) for b in data["executed_buys"]),
            executed_crafts=tuple(tuple(c) for c in data["executed_crafts"]),
            executed_offers=tuple(
                ExecutableOffer.from_dict(o) for o in data["executed_offers"]
            ),
            violations=tuple(data["violations"]),
            sales=tuple(SaleResult(**s) for s in data["sales"]),
        )


@dataclass(frozen=True)
class DayRecord:
    """Immutable audit entry for one completed day."""

    day: int
    herb_prices: dict[str, int]
    potion_demands: dict[str, int]
    outcomes: tuple[ActionOutcome, ...]
    market: ProcessedMarket

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "herb_prices": dict(self.herb_prices),
            "potion_demands": dict(self.potion_demands),
            "outcomes": [o.to_dict() for o in self.outcomes],
            "market": self.market.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DayRecord":
        return cls(
            day=int(data["day"]),
            herb_prices=dict(data["herb_prices"]),
            potion_demands=dict(data["potion_demands"]),
            outcomes=tuple(ActionOutcome.from_dict(o) for o in data["outcomes"]),
            market=ProcessedMarket.from_dict(data["market"]),
        )


# =============================================================================
# PARTICIPANTS
# =============================================================================


@dataclass(frozen=True)
class ParticipantStatus:
    """
    Qualification status of one participant.

    A disqualified participant is never re-qualified; reason and
    disqualified_on_day are recorded once.
    """

    index: int
    name: str
    disqualified: bool = False
    reason: str | None = None
    disqualified_on_day: int | None = None

    def disqualify(self, reason: str, day: int) -> "ParticipantStatus":
        if self.disqualified:
            return self
        return replace(self, disqualified=True, reason=reason, disqualified_on_day=day)


@dataclass(frozen=True)
class Usage:
    """Resource usage of a single decision request."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    cost_usd: float = 0.0
    duration_ms: float = 0.0


@dataclass(frozen=True)
class UsageStats:
    """Usage accumulated over a run for one participant."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    cost_usd: float = 0.0
    total_time_ms: float = 0.0
    call_count: int = 0

    def add(self, usage: Usage) -> "UsageStats":
        return UsageStats(
            input_tokens=self.input_tokens + usage.input_tokens,
            output_tokens=self.output_tokens + usage.output_tokens,
            total_tokens=self.total_tokens + usage.total_tokens,
            cost_usd=self.cost_usd + usage.cost_usd,
            total_time_ms=self.total_time_ms + usage.duration_ms,
            call_count=self.call_count + 1,
        )


# =============================================================================
# GAME STATE
# =============================================================================


@dataclass(frozen=True)
class GameState:
    """
    Snapshot of a run, published once before day 1 and once per day.

    Attributes:
        day: Number of completed days (0 in the initial snapshot,
            total_days once the run is complete)
        total_days: Configured number of days
        phase: Orchestrator phase at snapshot time
        inventories: One inventory per participant, by index
        day_records: One record per completed day
        statuses: One status per participant, by index
        usage: Accumulated usage per participant, by index
        seed: Economy seed the run is played with (checked on resume)
    """

    day: int
    total_days: int
    phase: RunPhase
    inventories: tuple[Inventory, ...]
    day_records: tuple[DayRecord, ...] = ()
    statuses: tuple[ParticipantStatus, ...] = ()
    usage: tuple[UsageStats, ...] = ()
    seed: str | None = None

    @property
    def next_day(self) -> int:
        """The day the next round plays (1-indexed)."""
        return self.day + 1

    @property
    def player_count(self) -> int:
        return len(self.inventories)

    @property
    def is_complete(self) -> bool:
        return self.phase == RunPhase.COMPLETED

    @property
    def days_played(self) -> int:
        return len(self.day_records)

    @property
    def player_names(self) -> list[str]:
        return [s.name for s in self.statuses]

    def market_history(self) -> list[dict[str, PotionMarketInfo]]:
        return [r.market.potion_information for r in self.day_records]

    def last_violations(self, player_idx: int) -> list[str]:
        if not self.day_records:
            return []
        return list(self.day_records[-1].outcomes[player_idx].violations)

    def last_offers(self, player_idx: int) -> list[ExecutableOffer]:
        if not self.day_records:
            return []
        return self.day_records[-1].market.offers_for(player_idx)

    def active_players(self) -> list[int]:
        return [s.index for s in self.statuses if not s.disqualified]

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day,
            "total_days": self.total_days,
            "phase": self.phase.value,
            "inventories": [i.to_dict() for i in self.inventories],
            "day_records": [r.to_dict() for r in self.day_records],
            "statuses": [asdict(s) for s in self.statuses],
            "usage": [asdict(u) for u in self.usage],
            "seed": self.seed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameState":
        return cls(
            day=int(data["day"]),
            total_days=int(data["total_days"]),
            phase=RunPhase(data["phase"]),
            inventories=tuple(Inventory.from_dict(i) for i in data["inventories"]),
            day_records=tuple(DayRecord.from_dict(r) for r in data["day_records"]),
            statuses=tuple(ParticipantStatus(**s) for s in data["statuses"]),
            usage=tuple(UsageStats(**u) for u in data["usage"]),
            seed=data.get("seed"),
        )
