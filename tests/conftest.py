"""Shared fixtures for the scoring test suite."""

import pytest

from src.game_manager.game_initializer import GameInitializer
from src.scoring_engine.models import RuleConfig


# ── Games and rules ──────────────────────────────────────────────────

@pytest.fixture
def initializer():
    return GameInitializer()


@pytest.fixture
def default_rules():
    """Standard tables with must-1 and strict A on."""
    return RuleConfig(
        pair_rules=GameInitializer.get_default_pair_rules(),
        six_player_rules=GameInitializer.get_default_weighted_rules(6),
        eight_player_rules=GameInitializer.get_default_weighted_rules(8),
    )


@pytest.fixture
def pair_game(initializer):
    """Fresh 4-player game, Blue (t1) vs Red (t2)."""
    return initializer.create_game(player_count=4)


@pytest.fixture
def six_game(initializer):
    return initializer.create_game(player_count=6)


@pytest.fixture
def eight_game(initializer):
    return initializer.create_game(player_count=8)
