# tests/unit/engine/test_decision.py
"""
Tests for the decision request/response types and the engine's
independence from the players package.
"""

import ast
from pathlib import Path

import pytest

import players.base
from engine.decision import DecisionRequest, DecisionResult
from engine.transition import build_decision_request, initial_state

ENGINE_DIR = Path(__file__).resolve().parents[3] / "engine"


def module_level_imports(path: Path) -> set[str]:
    """Top-level modules imported outside functions and TYPE_CHECKING blocks."""
    names = set()
    for node in ast.parse(path.read_text()).body:
        if isinstance(node, ast.Import):
            names.update(alias.name.split(".")[0] for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module:
            names.add(node.module.split(".")[0])
    return names


def test_players_base_reexports_engine_types():
    assert players.base.DecisionRequest is DecisionRequest
    assert players.base.DecisionResult is DecisionResult


@pytest.mark.parametrize("path", sorted(ENGINE_DIR.glob("*.py")), ids=lambda p: p.name)
def test_engine_does_not_import_players(path):
    assert "players" not in module_level_imports(path)


def test_final_day_flag(make_schedule):
    state = initial_state(["A"], starting_silver=10, total_days=1)
    request = build_decision_request(state, make_schedule(days=1), 0)
    assert isinstance(request, DecisionRequest)
    assert request.day == 1
    assert request.is_final_day
