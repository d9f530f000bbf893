"""Tests for round outcome calculation (pair and weighted modes)."""

import pytest

from src.game_manager.game_initializer import GameInitializer
from src.scoring_engine.models import (
    PairRuleTable,
    Side,
    TierThresholds,
    WeightedRuleTable,
)
from src.scoring_engine.outcome_calculator import (
    OutcomeCalculator,
    calculate_pair_outcome,
    calculate_weighted_outcome,
    split_positions,
)


# ── Helpers ──────────────────────────────────────────────────────────

def _pair_rules():
    return GameInitializer.get_default_pair_rules()


def _six_rules():
    return GameInitializer.get_default_weighted_rules(6)


def _eight_rules():
    return GameInitializer.get_default_weighted_rules(8)


def _weighted(player_count, team_ranks, rules=None, must1=True):
    team, opponent = split_positions(player_count, team_ranks)
    if rules is None:
        rules = _six_rules() if player_count == 6 else _eight_rules()
    return calculate_weighted_outcome(team, opponent, rules, must1)


# ── Pair mode ────────────────────────────────────────────────────────

class TestPairOutcome:
    def test_sweep(self):
        outcome = calculate_pair_outcome((1, 2), _pair_rules(), True)
        assert outcome.winning_side is Side.TEAM1
        assert outcome.level_delta == 4
        assert outcome.is_sweep is True

    def test_sweep_ignores_table(self):
        for table in (PairRuleTable({}), PairRuleTable({(1, 2): 1})):
            outcome = calculate_pair_outcome((2, 1), table, True)
            assert outcome.level_delta == 4

    def test_table_lookup(self):
        assert calculate_pair_outcome((1, 3), _pair_rules(), True).level_delta == 2
        assert calculate_pair_outcome((4, 1), _pair_rules(), True).level_delta == 1

    def test_note_pluralized(self):
        assert calculate_pair_outcome((1, 3), _pair_rules(), True).note == "Winner up 2 levels"
        assert calculate_pair_outcome((1, 4), _pair_rules(), True).note == "Winner up 1 level"

    def test_must1_without_first_place(self):
        outcome = calculate_pair_outcome((3, 4), _pair_rules(), True)
        assert outcome.winning_side is Side.TEAM2
        assert outcome.level_delta == 0
        assert outcome.note == "Opponent wins (no first place)"

    def test_must1_applies_even_if_table_scores_pair(self):
        assert calculate_pair_outcome((2, 3), _pair_rules(), True).winning_side is Side.TEAM2

    def test_must1_off_uses_table(self):
        outcome = calculate_pair_outcome((2, 3), _pair_rules(), False)
        assert outcome.winning_side is Side.TEAM1
        assert outcome.level_delta == 1

    def test_zero_delta_is_draw(self):
        outcome = calculate_pair_outcome((2, 4), _pair_rules(), False)
        assert outcome.winning_side is Side.NONE
        assert outcome.level_delta == 0
        assert outcome.has_winner is False

    def test_wrong_count_rejected(self):
        with pytest.raises(ValueError):
            calculate_pair_outcome((1, 2, 3), _pair_rules(), True)

    def test_deterministic(self):
        first = calculate_pair_outcome((1, 3), _pair_rules(), True)
        assert calculate_pair_outcome((3, 1), _pair_rules(), True) == first


# ── Weighted mode ────────────────────────────────────────────────────

class TestWeightedOutcome:
    def test_six_player_big_win(self):
        # 5+4+3 = 12 vs 3+1+0 = 4
        outcome = _weighted(6, (1, 2, 3))
        assert outcome.winning_side is Side.TEAM1
        assert outcome.level_delta == 3
        assert (outcome.team_score, outcome.opponent_score, outcome.difference) == (12, 4, 8)

    def test_six_player_small_win(self):
        # 5+3+1 = 9 vs 4+3+0 = 7
        outcome = _weighted(6, (1, 4, 5))
        assert outcome.winning_side is Side.TEAM1
        assert outcome.level_delta == 1
        assert outcome.note == "Winner up 1 level"

    def test_equal_totals_draw(self):
        # 5+3+0 = 8 vs 4+3+1 = 8
        outcome = _weighted(6, (1, 3, 6))
        assert outcome.winning_side is Side.NONE
        assert outcome.level_delta == 0
        assert outcome.difference == 0

    def test_opponent_wins_on_points(self):
        # 5+1+0 = 6 vs 4+3+3 = 10
        outcome = _weighted(6, (1, 5, 6))
        assert outcome.winning_side is Side.TEAM2
        assert outcome.level_delta == 2
        assert outcome.note == "Opponent up 2 levels"

    def test_must1_without_first_place(self):
        outcome = _weighted(6, (2, 3, 4))
        assert outcome.winning_side is Side.TEAM2
        assert outcome.level_delta == 0

    def test_must1_off_scores_points(self):
        # 4+3+3 = 10 vs 5+1+0 = 6
        outcome = _weighted(6, (2, 3, 4), must1=False)
        assert outcome.winning_side is Side.TEAM1
        assert outcome.level_delta == 2

    def test_eight_player_sweep(self):
        outcome = _weighted(8, (1, 2, 3, 4))
        assert outcome.winning_side is Side.TEAM1
        assert outcome.level_delta == 4
        assert outcome.is_sweep is True

    def test_eight_player_tiers(self):
        # 7+6+5+3 = 21 vs 7
        assert _weighted(8, (1, 2, 3, 5)).level_delta == 3
        # 7+4+3+1 = 15 vs 13
        assert _weighted(8, (1, 4, 5, 7)).level_delta == 1

    def test_eight_player_draw(self):
        assert _weighted(8, (1, 4, 5, 8)).winning_side is Side.NONE

    def test_win_below_first_threshold(self):
        rules = WeightedRuleTable(
            points={1: 5, 2: 4, 3: 3, 4: 3, 5: 1, 6: 0},
            thresholds=TierThresholds(g1=3, g2=5, g3=8),
        )
        outcome = _weighted(6, (1, 4, 5), rules=rules)
        assert outcome.winning_side is Side.TEAM1
        assert outcome.level_delta == 0
        assert outcome.note == "Winner wins, no level change"


# ── Dispatch ─────────────────────────────────────────────────────────

class TestOutcomeCalculator:
    def test_four_players_uses_pair_table(self, default_rules):
        outcome = OutcomeCalculator(default_rules).calculate(4, (1, 3))
        assert outcome.level_delta == 2
        assert outcome.team_score is None

    def test_six_players_uses_points(self, default_rules):
        outcome = OutcomeCalculator(default_rules).calculate(6, (3, 1, 2))
        assert outcome.team_score == 12

    def test_eight_players_uses_points(self, default_rules):
        outcome = OutcomeCalculator(default_rules).calculate(8, (1, 4, 5, 7))
        assert outcome.difference == 2


class TestSplitPositions:
    def test_complement(self):
        assert split_positions(6, [4, 1, 2]) == ((1, 2, 4), (3, 5, 6))

    def test_eight(self):
        assert split_positions(8, (8, 1, 2, 7)) == ((1, 2, 7, 8), (3, 4, 5, 6))
