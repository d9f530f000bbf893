"""Round submission rules and input validation."""

from typing import Dict, Optional, Tuple

from src.game_manager.game_state import TEAM_KEYS, GameState
from src.scoring_engine.rank_parser import ParseResult, parse_ranks


class GameRuleError(Exception):
    """Raised when a round cannot be applied to the game."""

    pass


class RankInputError(GameRuleError):
    """Raised when finishing positions fail to parse."""

    def __init__(self, result: ParseResult):
        super().__init__(result.message)
        self.result = result

    @property
    def error(self):
        return self.result.error


class RoundRules:
    """Checks a round submission against the game's current state."""

    def __init__(self, game_state: GameState):
        self.game_state = game_state

    def validate_submission(
        self, team: str, player_rankings: Optional[Dict[int, str]] = None
    ) -> Tuple[bool, Optional[str]]:
        """
        Validate everything about a submission except the rank text.

        Returns:
            (is_valid, error_message) - (True, None) if valid
        """
        if self.game_state.is_complete:
            return False, "Game is already complete"

        if team not in TEAM_KEYS:
            return False, f"Unknown team {team!r}. Must be 't1' or 't2'"

        if player_rankings:
            player_count = self.game_state.config.player_count
            positions = set(player_rankings)
            expected = set(range(1, player_count + 1))
            if positions != expected:
                return False, (
                    f"Player rankings must cover positions 1-{player_count} "
                    f"exactly (got {sorted(positions)})"
                )
            names = [str(n).strip() for n in player_rankings.values()]
            if any(not n for n in names):
                return False, "Player names cannot be blank"
            if len(set(names)) != len(names):
                return False, "A player can only finish once per round"

        return True, None

    def parse(self, rank_text) -> ParseResult:
        """Parse rank text for this game's team size."""
        return parse_ranks(rank_text, self.game_state.config.positions_per_team())
