"""
Run configuration.

Configs are authored as Hydra/OmegaConf YAML (see conf/config.yaml) and
converted into the frozen dataclasses below before a run starts. All
validation happens here so that a bad config never reaches the day loop.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from omegaconf import DictConfig, OmegaConf

from engine.catalog import TIERS
from engine.errors import ConfigError

logger = logging.getLogger(__name__)

MAX_PLAYERS = 6
MAX_DAYS = 20

PROVIDER_KINDS = ("llm", "placeholder", "human")


@dataclass(frozen=True)
class EconomyConfig:
    """
    Parameters for the deterministic price/demand schedule.

    Spreads are relative: a tier spread of 0.5 means each item's base
    value lands in [0.5 * tier_base, 1.5 * tier_base].
    """

    seed: str
    days: int = 5
    herb_tier_base_prices: dict[str, float] = field(
        default_factory=lambda: {"T1": 10, "T2": 50, "T3": 150}
    )
    herb_tier_price_spread: dict[str, float] = field(
        default_factory=lambda: {"T1": 0.5, "T2": 0.5, "T3": 0.5}
    )
    herb_daily_price_spread: float = 0.15
    potion_tier_base_demands: dict[str, float] = field(
        default_factory=lambda: {"T1": 25, "T2": 20, "T3": 15}
    )
    potion_tier_demand_spread: dict[str, float] = field(
        default_factory=lambda: {"T1": 0.3, "T2": 0.3, "T3": 0.3}
    )
    potion_daily_demand_spread: float = 0.25


@dataclass(frozen=True)
class PlayerConfig:
    """
    One seat at the table.

    Attributes:
        name: Display name (may be replaced by a provider-chosen name)
        kind: Decision provider family: "llm", "placeholder" or "human"
        model: Model id for LLM players (e.g. "gpt-4o-mini")
        strategy: Optional strategy text appended to the system prompt
        params: Extra provider keyword arguments
    """

    name: str
    kind: str = "placeholder"
    model: str | None = None
    strategy: str | None = None
    params: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RunConfig:
    """Everything needed to start a run."""

    economy: EconomyConfig
    players: tuple[PlayerConfig, ...]
    starting_silver: int = 1000
    decision_timeout: float | None = 120.0
    history_days: int = 3
    choose_names: bool = False

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def days(self) -> int:
        return self.economy.days

    def validate(self) -> "RunConfig":
        """
        Check the configuration and return it unchanged.

        Raises:
            ConfigError: On any out-of-range or missing value
        """
        econ = self.economy
        if not isinstance(econ.seed, str) or not econ.seed:
            raise ConfigError("seed must be a non-empty string")
        if not 1 <= econ.days <= MAX_DAYS:
            raise ConfigError(f"days must be in [1, {MAX_DAYS}], got {econ.days}")
        if not 1 <= len(self.players) <= MAX_PLAYERS:
            raise ConfigError(
                f"Must have between 1 and {MAX_PLAYERS} players, got {len(self.players)}"
            )
        if self.starting_silver < 0:
            raise ConfigError(f"starting_silver must be >= 0, got {self.starting_silver}")
        if self.decision_timeout is not None and self.decision_timeout <= 0:
            raise ConfigError("decision_timeout must be positive or None")
        if self.history_days < 0:
            raise ConfigError("history_days must be >= 0")

        for table_name in (
            "herb_tier_base_prices",
            "herb_tier_price_spread",
            "potion_tier_base_demands",
            "potion_tier_demand_spread",
        ):
            table = getattr(econ, table_name)
            missing = [tier for tier in TIERS if tier not in table]
            if missing:
                raise ConfigError(f"{table_name} is missing tiers {missing}")
            if any(value < 0 for value in table.values()):
                raise ConfigError(f"{table_name} values must be >= 0")
        for tier in TIERS:
            if econ.herb_tier_base_prices[tier] <= 0:
                raise ConfigError(f"herb base price for {tier} must be positive")
            for spread_table in (econ.herb_tier_price_spread, econ.potion_tier_demand_spread):
                if spread_table[tier] >= 1:
                    raise ConfigError(f"tier spread for {tier} must be < 1")
        for spread in (econ.herb_daily_price_spread, econ.potion_daily_demand_spread):
            if not 0 <= spread < 1:
                raise ConfigError(f"daily spread must be in [0, 1), got {spread}")

        for player in self.players:
            if player.kind not in PROVIDER_KINDS:
                raise ConfigError(
                    f"Unknown player kind '{player.kind}' for {player.name}. "
                    f"Expected one of {PROVIDER_KINDS}"
                )
            if player.kind == "llm" and not player.model:
                raise ConfigError(f"LLM player {player.name} needs a model")
        return self

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def from_omegaconf(cls, cfg: DictConfig) -> "RunConfig":
        """
        Build a validated RunConfig from a Hydra/OmegaConf config.

        Expected layout:
            economy: {seed, days, herb_tier_base_prices, ...}
            runtime: {starting_silver, decision_timeout, history_days, choose_names}
            players: [{name, kind, model, strategy, params}, ...]

        Raises:
            ConfigError: If required sections are missing or values invalid
        """
        data = OmegaConf.to_container(cfg, resolve=True)
        if not isinstance(data, dict):
            raise ConfigError("config root must be a mapping")
        if "economy" not in data or "players" not in data:
            raise ConfigError("config needs 'economy' and 'players' sections")

        economy_data = dict(data["economy"])
        if economy_data.get("seed") is not None:
            economy_data["seed"] = str(economy_data["seed"])
        try:
            economy = EconomyConfig(**economy_data)
            players = tuple(PlayerConfig(**p) for p in data["players"] or [])
            runtime = dict(data.get("runtime") or {})
            config = cls(economy=economy, players=players, **runtime)
        except TypeError as e:
            raise ConfigError(f"Invalid config: {e}") from e

        logger.debug(f"Loaded config: {len(players)} players, {economy.days} days")
        return config.validate()


def default_config(
    seed: str,
    players: list[PlayerConfig],
    days: int = 5,
    starting_silver: int = 1000,
) -> RunConfig:
    """Default economy (five days, standard tier tuning) for the given players."""
    return RunConfig(
        economy=EconomyConfig(seed=seed, days=days),
        players=tuple(players),
        starting_silver=starting_silver,
    ).validate()
