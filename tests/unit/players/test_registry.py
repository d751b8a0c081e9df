# tests/unit/players/test_registry.py
"""
Tests for provider construction from configuration.
"""

import pytest

from engine.config import PlayerConfig, default_config
from engine.errors import ConfigError
from players.human_player import HumanPlayer
from players.llm_player import LLMPlayer
from players.placeholder_player import PlaceholderPlayer
from players.registry import create_provider, create_providers


class TestCreateProvider:
    def test_each_kind(self):
        assert isinstance(create_provider(PlayerConfig(name="A")), PlaceholderPlayer)
        assert isinstance(create_provider(PlayerConfig(name="H", kind="human")), HumanPlayer)
        llm = create_provider(
            PlayerConfig(name="L", kind="llm", model="gpt-4o-mini", strategy="be bold")
        )
        assert isinstance(llm, LLMPlayer)
        assert llm.model == "gpt-4o-mini"
        assert llm.strategy == "be bold"

    def test_params_forwarded(self):
        player = create_provider(
            PlayerConfig(name="A", params={"markup": 0.9, "budget_fraction": 0.2})
        )
        assert player.markup == 0.9
        assert player.budget_fraction == 0.2

    def test_output_dir_only_for_llm(self, tmp_path):
        placeholder = create_provider(PlayerConfig(name="A"), output_dir=str(tmp_path))
        assert isinstance(placeholder, PlaceholderPlayer)
        llm = create_provider(
            PlayerConfig(name="L", kind="llm", model="gpt-4o-mini"), output_dir=str(tmp_path)
        )
        assert llm.output_dir == tmp_path

    def test_unknown_kind(self):
        with pytest.raises(ConfigError):
            create_provider(PlayerConfig(name="X", kind="oracle"))

    def test_llm_without_model(self):
        with pytest.raises(ConfigError):
            create_provider(PlayerConfig(name="L", kind="llm"))


def test_create_providers_in_seat_order(seed):
    config = default_config(
        seed, [PlayerConfig(name="A"), PlayerConfig(name="B"), PlayerConfig(name="C", kind="human")]
    )
    providers = create_providers(config, seed=10)
    assert [p.name for p in providers] == ["A", "B", "C"]
    assert isinstance(providers[2], HumanPlayer)
