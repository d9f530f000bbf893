"""Game controller - orchestrates round scoring and level updates."""

import logging
from typing import Dict, Optional

from src.game_manager.game_state import GameState, HistoryEntry, other_team
from src.game_manager.round_rules import GameRuleError, RankInputError, RoundRules
from src.scoring_engine.a_level_resolver import applies_to, resolve_a_level
from src.scoring_engine.models import RoundOutcome, Side
from src.scoring_engine.outcome_calculator import OutcomeCalculator, split_positions

logger = logging.getLogger(__name__)


class GameController:
    """Main controller for a scoring session.

    Coordinates between RoundRules (validation and parsing),
    OutcomeCalculator (who won, by how much), the A-level resolver, and
    GameState (state mutation) to apply rounds.
    """

    def __init__(self, game_state: GameState):
        self.game_state = game_state
        self.rules = RoundRules(game_state)
        self.calculator = OutcomeCalculator(game_state.config.rules)

    def submit_round(
        self,
        rank_text,
        team: str = "t1",
        player_rankings: Optional[Dict[int, str]] = None,
    ) -> HistoryEntry:
        """Score a round and apply it to the game.

        Args:
            rank_text: Finishing positions of ``team`` ("13", "1 3", ...).
            team: Which team the positions belong to. The round is scored
                from whichever side holds first place.
            player_rankings: Optional position -> player name for the whole
                table, kept on the history entry for statistics.

        Returns:
            The HistoryEntry recorded for the round.

        Raises:
            RankInputError: If the positions fail to parse.
            GameRuleError: If the game is over or the submission is malformed.
        """
        is_valid, error_msg = self.rules.validate_submission(team, player_rankings)
        if not is_valid:
            logger.warning("Invalid round submission: %s", error_msg)
            raise GameRuleError(error_msg)

        parsed = self.rules.parse(rank_text)
        if not parsed.ok:
            logger.warning("Rejected positions %r: %s", rank_text, parsed.message)
            raise RankInputError(parsed)

        player_count = self.game_state.config.player_count
        scoring_team, scoring_ranks = team, parsed.ranks
        if 1 not in scoring_ranks:
            # Score from the side holding first place
            scoring_team = other_team(team)
            _, scoring_ranks = split_positions(player_count, parsed.ranks)

        outcome = self.calculator.calculate(player_count, scoring_ranks)
        return self._apply_outcome(
            team, scoring_team, list(parsed.ranks), outcome, player_rankings
        )

    def _apply_outcome(
        self,
        team: str,
        scoring_team: str,
        ranks,
        outcome: RoundOutcome,
        player_rankings: Optional[Dict[int, str]],
    ) -> HistoryEntry:
        state = self.game_state
        config = state.config
        before = state.snapshot()
        round_level = state.round_level

        winner = self._winner_key(scoring_team, outcome)
        a_note = ""
        champion = None

        if winner is not None:
            loser = other_team(winner)
            winner_state = state.get_team(winner)
            loser_state = state.get_team(loser)
            new_winner = winner_state.advanced(outcome.level_delta)
            new_loser = loser_state

            if applies_to(winner_state, loser_state, round_level):
                resolution = resolve_a_level(
                    winner_state,
                    loser_state,
                    round_level,
                    config.rules.strict_a,
                    winner_owns_round=self._owns_round(winner),
                    loser_owns_round=self._owns_round(loser),
                    winner_name=config.team_name(winner),
                    loser_name=config.team_name(loser),
                )
                a_note = resolution.note
                new_loser = resolution.loser
                if winner_state.at_top:
                    new_winner = resolution.winner
                if resolution.cleared:
                    champion = winner

            state.set_team(winner, new_winner)
            state.set_team(loser, new_loser)

            next_base = new_winner.level
            if config.auto_next or champion:
                state.round_level = next_base
                state.round_owner = winner
                state.next_round_base = None
            else:
                state.next_round_base = next_base

        entry = HistoryEntry.create(
            round_number=state.rounds_played + 1,
            player_count=config.player_count,
            team=team,
            ranks=ranks,
            winner=winner,
            level_delta=outcome.level_delta if winner else 0,
            round_level=round_level,
            t1_level=state.teams["t1"].level,
            t2_level=state.teams["t2"].level,
            note=outcome.note,
            before=before,
            a_note=a_note,
            player_rankings=player_rankings,
        )
        state.add_history_entry(entry)

        logger.info(
            "Round %d (at %s): %s %s -> %s +%d | %s %s, %s %s%s",
            entry.round_number,
            round_level,
            config.team_name(team),
            entry.combo,
            config.team_name(winner) if winner else "draw",
            entry.level_delta,
            config.team_name("t1"),
            entry.t1_level,
            config.team_name("t2"),
            entry.t2_level,
            f" [{a_note}]" if a_note else "",
        )

        if champion:
            state.mark_complete(champion)
            logger.info("Game %s won by %s", state.game_id, config.team_name(champion))

        return entry

    @staticmethod
    def _winner_key(team: str, outcome: RoundOutcome) -> Optional[str]:
        if outcome.winning_side is Side.TEAM1:
            return team
        if outcome.winning_side is Side.TEAM2:
            return other_team(team)
        return None

    def _owns_round(self, team: str) -> Optional[bool]:
        """Tracked round ownership, or None before anyone has won a round."""
        if self.game_state.round_owner is None:
            return None
        return self.game_state.round_owner == team

    def advance_round(self) -> bool:
        """Move to the pending round level (manual mode).

        Returns:
            False if no round is pending.
        """
        state = self.game_state
        if not state.next_round_base:
            return False

        last_winner = next(
            (e.winner for e in reversed(state.history) if e.winner), None
        )
        state.round_level = state.next_round_base
        if last_winner:
            state.round_owner = last_winner
        state.next_round_base = None

        logger.info(
            "Advanced to round level %s (owner: %s)",
            state.round_level,
            state.config.team_name(state.round_owner) if state.round_owner else "-",
        )
        return True

    def rollback_to(self, index: int) -> HistoryEntry:
        """Undo the round at ``index`` and every round after it.

        Returns:
            The earliest removed entry.

        Raises:
            GameRuleError: If ``index`` is outside the kept history.
        """
        history = self.game_state.history
        if index < 0 or index >= len(history):
            raise GameRuleError(
                f"Invalid rollback index {index} (history has {len(history)} rounds)"
            )

        entry = history[index]
        self.game_state.restore(entry.before)
        del history[index:]
        self.game_state.rounds_played = entry.round_number - 1

        logger.info(
            "Rolled back to before round %d (%s %s, %s %s, round at %s)",
            entry.round_number,
            self.game_state.config.team_name("t1"),
            self.game_state.teams["t1"].level,
            self.game_state.config.team_name("t2"),
            self.game_state.teams["t2"].level,
            self.game_state.round_level,
        )
        return entry

    def undo_last(self) -> HistoryEntry:
        """Undo the most recent round."""
        if not self.game_state.history:
            raise GameRuleError("No rounds to undo")
        return self.rollback_to(len(self.game_state.history) - 1)

    @property
    def is_complete(self) -> bool:
        """Whether a team has cleared A."""
        return self.game_state.is_complete

    def get_status(self) -> Dict:
        """Summarize the current standing of both teams."""
        state = self.game_state
        return {
            "game_id": state.game_id,
            "player_count": state.config.player_count,
            "round_level": state.round_level,
            "round_owner": state.round_owner,
            "next_round_base": state.next_round_base,
            "rounds_played": state.rounds_played,
            "is_complete": state.is_complete,
            "champion": state.champion,
            "teams": {
                key: {
                    "name": state.config.team_name(key),
                    "level": team.level,
                    "a_fail_count": team.a_fail_count,
                }
                for key, team in state.teams.items()
            },
        }
