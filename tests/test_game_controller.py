"""Tests for game controller - round application and state management."""

import pytest

from src.game_manager.game_controller import GameController
from src.game_manager.round_rules import GameRuleError, RankInputError
from src.scoring_engine.models import TeamLevelState
from src.scoring_engine.rank_parser import ParseError


# ── Helpers ──────────────────────────────────────────────────────────

RANKINGS_4 = {1: "Ann", 2: "Bob", 3: "Cat", 4: "Dan"}


def _at_a_round(state, t1=None, t2=None, owner="t1"):
    """Put the game at an A round with the given team states."""
    if t1 is not None:
        state.set_team("t1", t1)
    if t2 is not None:
        state.set_team("t2", t2)
    state.round_level = "A"
    state.round_owner = owner
    return GameController(state)


# ── Basic rounds ─────────────────────────────────────────────────────

class TestSubmitRound:
    def test_pair_win(self, pair_game):
        controller = GameController(pair_game)
        entry = controller.submit_round("13")

        assert entry.round_number == 1
        assert entry.winner == "t1"
        assert entry.level_delta == 2
        assert entry.round_level == "2"
        assert pair_game.teams["t1"].level == "4"
        assert pair_game.teams["t2"].level == "2"
        assert pair_game.rounds_played == 1

    def test_round_follows_winner(self, pair_game):
        controller = GameController(pair_game)
        controller.submit_round("13")
        assert pair_game.round_level == "4"
        assert pair_game.round_owner == "t1"

    def test_sweep(self, pair_game):
        GameController(pair_game).submit_round("1 2")
        assert pair_game.teams["t1"].level == "6"

    def test_positions_for_t2(self, pair_game):
        entry = GameController(pair_game).submit_round("14", team="t2")
        assert entry.team == "t2"
        assert entry.winner == "t2"
        assert pair_game.teams["t2"].level == "3"
        assert pair_game.teams["t1"].level == "2"

    def test_losing_side_entered_scores_first_place_side(self, pair_game):
        controller = GameController(pair_game)
        controller.submit_round("13")
        # t1 holds 2 and 3, so t2 holds 1 and 4
        entry = controller.submit_round("23")

        assert entry.team == "t1"
        assert entry.ranks == [2, 3]
        assert entry.winner == "t2"
        assert entry.level_delta == 1
        assert pair_game.teams["t1"].level == "4"
        assert pair_game.teams["t2"].level == "3"
        assert pair_game.round_level == "3"
        assert pair_game.round_owner == "t2"

    def test_opponent_sweep_pair(self, pair_game):
        entry = GameController(pair_game).submit_round("34")
        assert entry.winner == "t2"
        assert entry.level_delta == 4
        assert pair_game.teams["t2"].level == "6"

    def test_opponent_sweep_eight(self, eight_game):
        entry = GameController(eight_game).submit_round("5678")
        assert entry.winner == "t2"
        assert entry.level_delta == 4
        assert eight_game.teams["t2"].level == "6"
        assert eight_game.teams["t1"].level == "2"

    def test_opponent_points_win_six(self, six_game):
        # t2 holds 1, 2, 4: 5+4+3 = 12 vs 3+1+0 = 4
        entry = GameController(six_game).submit_round("356")
        assert entry.winner == "t2"
        assert entry.level_delta == 3

    def test_draw_changes_nothing(self, initializer):
        state = initializer.create_game(
            player_count=4, pair_rules={(1, 2): 3, (1, 3): 2}
        )
        entry = GameController(state).submit_round("14")

        assert entry.winner is None
        assert entry.level_delta == 0
        assert entry.note == "Draw"
        assert state.teams["t1"] == TeamLevelState()
        assert state.round_level == "2"
        assert state.round_owner is None
        assert state.rounds_played == 1

    def test_six_player_round(self, six_game):
        entry = GameController(six_game).submit_round("1 2 3")
        assert entry.level_delta == 3
        assert six_game.teams["t1"].level == "5"

    def test_eight_player_sweep(self, eight_game):
        GameController(eight_game).submit_round("4321")
        assert eight_game.teams["t1"].level == "6"

    def test_climb_clamps_at_a(self, pair_game):
        pair_game.set_team("t1", TeamLevelState("Q"))
        GameController(pair_game).submit_round("12")
        assert pair_game.teams["t1"].level == "A"
        assert pair_game.is_complete is False

    def test_player_rankings_recorded(self, pair_game):
        entry = GameController(pair_game).submit_round("13", player_rankings=RANKINGS_4)
        assert entry.player_rankings == RANKINGS_4


class TestSubmitRejections:
    def test_bad_positions(self, pair_game):
        with pytest.raises(RankInputError) as exc_info:
            GameController(pair_game).submit_round("55")
        assert exc_info.value.error is ParseError.OUT_OF_RANGE
        assert pair_game.history == []

    def test_rank_error_is_rule_error(self, pair_game):
        with pytest.raises(GameRuleError):
            GameController(pair_game).submit_round("")

    def test_unknown_team(self, pair_game):
        with pytest.raises(GameRuleError, match="Unknown team"):
            GameController(pair_game).submit_round("13", team="t3")

    def test_incomplete_rankings(self, pair_game):
        with pytest.raises(GameRuleError, match="cover positions"):
            GameController(pair_game).submit_round(
                "13", player_rankings={1: "Ann", 2: "Bob"}
            )

    def test_duplicate_player(self, pair_game):
        with pytest.raises(GameRuleError, match="only finish once"):
            GameController(pair_game).submit_round(
                "13", player_rankings={1: "Ann", 2: "Bob", 3: "Ann", 4: "Dan"}
            )

    def test_game_complete(self, pair_game):
        pair_game.mark_complete("t1")
        with pytest.raises(GameRuleError, match="already complete"):
            GameController(pair_game).submit_round("13")


# ── A level ──────────────────────────────────────────────────────────

class TestALevel:
    def test_clear_on_own_round_wins_game(self, pair_game):
        controller = _at_a_round(pair_game, t1=TeamLevelState("A"), owner="t1")
        entry = controller.submit_round("13")

        assert entry.a_note == "Blue clears A!"
        assert pair_game.is_complete is True
        assert pair_game.champion == "t1"
        assert controller.is_complete is True
        assert pair_game.teams["t1"].level == "A"

    def test_no_clear_on_opponent_round(self, pair_game):
        controller = _at_a_round(
            pair_game, t1=TeamLevelState("A"), t2=TeamLevelState("A"), owner="t2"
        )
        entry = controller.submit_round("13")

        assert pair_game.is_complete is False
        assert "no level-up" in entry.a_note
        assert "Red A1 failed" in entry.a_note
        assert pair_game.teams["t2"] == TeamLevelState("A", 1)
        assert pair_game.round_owner == "t1"

    def test_lenient_clears_on_opponent_round(self, initializer):
        state = initializer.create_game(player_count=4, strict_a=False)
        controller = _at_a_round(
            state, t1=TeamLevelState("A"), t2=TeamLevelState("A"), owner="t2"
        )
        controller.submit_round("13")
        assert state.champion == "t1"

    def test_third_fail_resets_loser(self, pair_game):
        controller = _at_a_round(
            pair_game, t1=TeamLevelState("5"), t2=TeamLevelState("A", 2), owner="t2"
        )
        entry = controller.submit_round("14")

        assert pair_game.teams["t2"] == TeamLevelState("2", 0)
        assert pair_game.teams["t1"].level == "6"
        assert entry.a_note == "Red failed A3, back to 2"
        assert pair_game.round_level == "6"

    def test_fail_not_counted_on_opponent_round(self, pair_game):
        controller = _at_a_round(
            pair_game, t1=TeamLevelState("A"), t2=TeamLevelState("A", 2), owner="t1"
        )
        controller.submit_round("13")
        assert pair_game.teams["t2"] == TeamLevelState("A", 2)

    def test_loss_at_own_a_round_counts_fail(self, pair_game):
        controller = _at_a_round(pair_game, t1=TeamLevelState("A"), owner="t1")
        entry = controller.submit_round("34")

        assert entry.winner == "t2"
        assert pair_game.teams["t1"] == TeamLevelState("A", 1)

    def test_ownership_falls_back_to_level(self, pair_game):
        controller = _at_a_round(pair_game, t1=TeamLevelState("A"), owner=None)
        controller.submit_round("13")
        assert pair_game.champion == "t1"


# ── Manual advance ───────────────────────────────────────────────────

class TestManualAdvance:
    def test_result_waits_for_advance(self, initializer):
        state = initializer.create_game(player_count=4, auto_next=False)
        controller = GameController(state)
        controller.submit_round("13")

        assert state.teams["t1"].level == "4"
        assert state.round_level == "2"
        assert state.next_round_base == "4"

        assert controller.advance_round() is True
        assert state.round_level == "4"
        assert state.round_owner == "t1"
        assert state.next_round_base is None

    def test_nothing_pending(self, pair_game):
        assert GameController(pair_game).advance_round() is False


# ── Undo ─────────────────────────────────────────────────────────────

class TestRollback:
    def test_undo_last(self, pair_game):
        controller = GameController(pair_game)
        controller.submit_round("13")
        controller.submit_round("14")

        entry = controller.undo_last()
        assert entry.round_number == 2
        assert pair_game.teams["t1"].level == "4"
        assert pair_game.round_level == "4"
        assert pair_game.rounds_played == 1
        assert len(pair_game.history) == 1

    def test_undo_to_start(self, pair_game):
        controller = GameController(pair_game)
        controller.submit_round("13")
        controller.undo_last()

        assert pair_game.teams["t1"] == TeamLevelState()
        assert pair_game.round_level == "2"
        assert pair_game.round_owner is None
        assert pair_game.rounds_played == 0

    def test_undo_empty(self, pair_game):
        with pytest.raises(GameRuleError, match="No rounds to undo"):
            GameController(pair_game).undo_last()

    def test_undo_reopens_finished_game(self, pair_game):
        controller = _at_a_round(pair_game, t1=TeamLevelState("A"), owner="t1")
        controller.submit_round("13")
        controller.undo_last()

        assert pair_game.is_complete is False
        assert pair_game.champion is None
        assert pair_game.teams["t1"] == TeamLevelState("A")

    def test_undo_restores_a_fail_count(self, pair_game):
        controller = _at_a_round(
            pair_game, t1=TeamLevelState("5"), t2=TeamLevelState("A", 2), owner="t2"
        )
        controller.submit_round("14")
        controller.undo_last()
        assert pair_game.teams["t2"] == TeamLevelState("A", 2)

    def test_rollback_to_index(self, pair_game):
        controller = GameController(pair_game)
        for ranks in ("13", "14", "12"):
            controller.submit_round(ranks)

        entry = controller.rollback_to(1)
        assert entry.round_number == 2
        assert pair_game.teams["t1"].level == "4"
        assert len(pair_game.history) == 1

    def test_rollback_bad_index(self, pair_game):
        controller = GameController(pair_game)
        controller.submit_round("13")
        with pytest.raises(GameRuleError, match="Invalid rollback index"):
            controller.rollback_to(3)

    def test_round_number_reused_after_undo(self, pair_game):
        controller = GameController(pair_game)
        controller.submit_round("13")
        controller.undo_last()
        assert controller.submit_round("14").round_number == 1

    def test_history_capped(self, initializer):
        state = initializer.create_game(player_count=4, max_history=2)
        controller = GameController(state)
        for _ in range(3):
            controller.submit_round("14")

        assert [e.round_number for e in state.history] == [2, 3]
        assert state.rounds_played == 3


class TestStatus:
    def test_get_status(self, pair_game):
        controller = GameController(pair_game)
        controller.submit_round("13")
        status = controller.get_status()

        assert status["player_count"] == 4
        assert status["round_level"] == "4"
        assert status["round_owner"] == "t1"
        assert status["rounds_played"] == 1
        assert status["is_complete"] is False
        assert status["teams"]["t1"] == {"name": "Blue", "level": "4", "a_fail_count": 0}
        assert status["teams"]["t2"]["name"] == "Red"
