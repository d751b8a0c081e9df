"""
Provider Factory.

Maps a PlayerConfig's kind to a DecisionProvider class. Selection is by
the closed set of kinds in engine.config.PROVIDER_KINDS, never by
inspecting model-id strings.
"""

from typing import Any

from engine.config import PlayerConfig, RunConfig
from engine.errors import ConfigError
from players.base import DecisionProvider
from players.human_player import HumanPlayer
from players.llm_player import LLMPlayer
from players.placeholder_player import PlaceholderPlayer

PROVIDERS: dict[str, type[DecisionProvider]] = {
    "llm": LLMPlayer,
    "placeholder": PlaceholderPlayer,
    "human": HumanPlayer,
}


def create_provider(
    player: PlayerConfig,
    seed: int | None = None,
    **kwargs: Any,
) -> DecisionProvider:
    """
    Instantiate the provider for one seat.

    Args:
        player: Seat configuration
        seed: Seed for providers with internal randomness
        **kwargs: Extra keyword arguments (e.g. output_dir for LLM players)

    Returns:
        A DecisionProvider

    Raises:
        ConfigError: If the kind is unknown or an LLM seat has no model
    """
    if player.kind not in PROVIDERS:
        raise ConfigError(
            f"Unknown player kind '{player.kind}'. Expected one of {sorted(PROVIDERS)}"
        )

    params = {**kwargs, **player.params}
    if player.kind == "llm":
        if not player.model:
            raise ConfigError(f"LLM player {player.name} needs a model")
        return LLMPlayer(player.name, model=player.model, strategy=player.strategy, **params)
    if player.kind == "placeholder":
        params.pop("output_dir", None)
        params.setdefault("seed", seed)
        return PlaceholderPlayer(player.name, **params)
    return HumanPlayer(player.name, **params)


def create_providers(config: RunConfig, **kwargs: Any) -> list[DecisionProvider]:
    """One provider per configured seat, in seat order."""
    base_seed = int(kwargs.pop("seed", 0))
    return [
        create_provider(player, seed=base_seed + idx + 1, **kwargs)
        for idx, player in enumerate(config.players)
    ]
