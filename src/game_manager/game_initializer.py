"""Game initialization - creates new scoring sessions from settings."""

import logging
import uuid
from typing import Dict, Mapping, Optional, Tuple

from src.game_manager.config import (
    DEFAULT_AUTO_NEXT,
    DEFAULT_EIGHT_PLAYER_POINTS,
    DEFAULT_EIGHT_PLAYER_THRESHOLDS,
    DEFAULT_MUST1,
    DEFAULT_PAIR_RULES,
    DEFAULT_SIX_PLAYER_POINTS,
    DEFAULT_SIX_PLAYER_THRESHOLDS,
    DEFAULT_STRICT_A,
    DEFAULT_TEAM_NAMES,
    MAX_HISTORY,
    SUPPORTED_PLAYER_COUNTS,
)
from src.game_manager.game_state import TEAM_KEYS, GameConfig, GameState
from src.scoring_engine.models import (
    PairRuleTable,
    RuleConfig,
    TierThresholds,
    WeightedRuleTable,
)

logger = logging.getLogger(__name__)


class GameInitializer:
    """Handles creation of new games."""

    def create_game(
        self,
        player_count: int,
        team_names: Optional[Dict[str, str]] = None,
        must1: bool = DEFAULT_MUST1,
        strict_a: bool = DEFAULT_STRICT_A,
        auto_next: bool = DEFAULT_AUTO_NEXT,
        pair_rules: Optional[Mapping[Tuple[int, int], int]] = None,
        six_player_rules: Optional[WeightedRuleTable] = None,
        eight_player_rules: Optional[WeightedRuleTable] = None,
        max_history: int = MAX_HISTORY,
    ) -> GameState:
        """
        Create a new game.

        Args:
            player_count: Seats at the table (4, 6 or 8)
            team_names: Display names {"t1": ..., "t2": ...}
            must1: Winning side must hold first place to score
            strict_a: A clears only on the team's own round
            auto_next: Move the round level on as soon as a result lands
            pair_rules: 4-player upgrades {(1, 2): 3, ...}
            six_player_rules: 6-player points and thresholds
            eight_player_rules: 8-player points and thresholds
            max_history: Rounds kept in history

        Returns:
            GameState with both teams at level 2
        """
        names = dict(DEFAULT_TEAM_NAMES)
        names.update(team_names or {})
        self._validate_inputs(player_count, names, max_history)

        if not isinstance(pair_rules, PairRuleTable):
            pair_rules = PairRuleTable(
                pair_rules if pair_rules is not None else DEFAULT_PAIR_RULES
            )

        rules = RuleConfig(
            pair_rules=pair_rules,
            six_player_rules=six_player_rules or self.get_default_weighted_rules(6),
            eight_player_rules=eight_player_rules
            or self.get_default_weighted_rules(8),
            first_place_required=must1,
            strict_a=strict_a,
        )

        config = GameConfig(
            game_id=str(uuid.uuid4()),
            player_count=player_count,
            rules=rules,
            team_names=names,
            auto_next=auto_next,
            max_history=max_history,
        )
        game_state = GameState.create_new(config)

        logger.info(
            "Created game %s: %d players, must1=%s, strict_a=%s, auto_next=%s",
            game_state.game_id,
            player_count,
            must1,
            strict_a,
            auto_next,
        )
        return game_state

    def _validate_inputs(
        self, player_count: int, team_names: Dict[str, str], max_history: int
    ):
        """Validate game configuration inputs."""
        if player_count not in SUPPORTED_PLAYER_COUNTS:
            raise ValueError(
                f"Player count must be one of {SUPPORTED_PLAYER_COUNTS} "
                f"(got {player_count})"
            )

        unknown = set(team_names) - set(TEAM_KEYS)
        if unknown:
            raise ValueError(f"Unknown team keys: {sorted(unknown)}")

        if any(not str(name).strip() for name in team_names.values()):
            raise ValueError("Team names cannot be blank")

        if team_names["t1"].strip() == team_names["t2"].strip():
            raise ValueError("Team names must differ")

        if max_history < 1:
            raise ValueError(f"max_history must be >= 1 (got {max_history})")

    @staticmethod
    def get_default_weighted_rules(player_count: int) -> WeightedRuleTable:
        """Get the standard point table and thresholds for 6 or 8 players."""
        if player_count == 6:
            points, thresholds = (
                DEFAULT_SIX_PLAYER_POINTS,
                DEFAULT_SIX_PLAYER_THRESHOLDS,
            )
        elif player_count == 8:
            points, thresholds = (
                DEFAULT_EIGHT_PLAYER_POINTS,
                DEFAULT_EIGHT_PLAYER_THRESHOLDS,
            )
        else:
            raise ValueError(f"No weighted rules for {player_count} players")
        return WeightedRuleTable(points=points, thresholds=TierThresholds(**thresholds))

    @staticmethod
    def get_default_pair_rules() -> PairRuleTable:
        return PairRuleTable(DEFAULT_PAIR_RULES)
