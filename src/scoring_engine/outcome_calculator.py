"""Round outcome calculation.

Decides which side won a round and by how many levels. Two scoring
schemes exist:

* **Pair mode** (4 players): the winning pair's positions are looked up in
  a fixed upgrade table.
* **Weighted mode** (6/8 players): every position is worth points; the
  point difference between the sides is bucketed into 0-3 level upgrades.

Inputs are assumed to come from :func:`parse_ranks`; nothing here re-checks
range or uniqueness.
"""

import logging
from typing import Sequence, Tuple

from src.scoring_engine.config import SWEEP_LEVEL_DELTA
from src.scoring_engine.models import (
    PairRuleTable,
    RankPair,
    RoundOutcome,
    RuleConfig,
    Side,
    WeightedRuleTable,
)

logger = logging.getLogger(__name__)

PAIR_MODE_PLAYERS = 4
PAIR_SWEEP = (1, 2)
EIGHT_PLAYER_SWEEP = (1, 2, 3, 4)


def calculate_pair_outcome(
    team_ranks: Sequence[int],
    pair_rules: PairRuleTable,
    first_place_required: bool,
) -> RoundOutcome:
    """Score a 4-player round from the two positions held by team 1."""
    ranks = tuple(sorted(team_ranks))
    if len(ranks) != 2:
        raise ValueError(f"Pair mode needs exactly 2 positions (got {ranks})")

    if first_place_required and ranks[0] != 1:
        return RoundOutcome(
            winning_side=Side.TEAM2,
            level_delta=0,
            is_sweep=False,
            note="Opponent wins (no first place)",
        )

    if ranks == PAIR_SWEEP:
        return RoundOutcome(
            winning_side=Side.TEAM1,
            level_delta=SWEEP_LEVEL_DELTA,
            is_sweep=True,
            note=f"Complete sweep! Up {SWEEP_LEVEL_DELTA} levels",
        )

    delta = pair_rules.delta_for(RankPair.of(*ranks))
    if delta == 0:
        return RoundOutcome(
            winning_side=Side.NONE,
            level_delta=0,
            is_sweep=False,
            note="Draw",
        )

    return RoundOutcome(
        winning_side=Side.TEAM1,
        level_delta=delta,
        is_sweep=False,
        note=f"Winner up {delta} level{'s' if delta != 1 else ''}",
    )


def calculate_weighted_outcome(
    team_ranks: Sequence[int],
    opponent_ranks: Sequence[int],
    weighted_rules: WeightedRuleTable,
    first_place_required: bool,
) -> RoundOutcome:
    """Score a 6/8-player round by comparing point totals.

    ``team_ranks`` belong to team 1, ``opponent_ranks`` to team 2.
    """
    team = tuple(sorted(team_ranks))
    opponent = tuple(sorted(opponent_ranks))

    if first_place_required and 1 not in team and 1 in opponent:
        return RoundOutcome(
            winning_side=Side.TEAM2,
            level_delta=0,
            is_sweep=False,
            note="Opponent wins (no first place)",
        )

    if team == EIGHT_PLAYER_SWEEP:
        return RoundOutcome(
            winning_side=Side.TEAM1,
            level_delta=SWEEP_LEVEL_DELTA,
            is_sweep=True,
            note=f"Complete sweep! Up {SWEEP_LEVEL_DELTA} levels",
        )

    team_score = weighted_rules.score(team)
    opponent_score = weighted_rules.score(opponent)
    diff = team_score - opponent_score

    if diff == 0:
        return RoundOutcome(
            winning_side=Side.NONE,
            level_delta=0,
            is_sweep=False,
            note="Draw",
            team_score=team_score,
            opponent_score=opponent_score,
            difference=diff,
        )

    tier = weighted_rules.thresholds.tier_for(abs(diff))
    side = Side.TEAM1 if diff > 0 else Side.TEAM2
    who = "Winner" if side is Side.TEAM1 else "Opponent"
    if tier:
        note = f"{who} up {tier} level{'s' if tier != 1 else ''}"
    else:
        note = f"{who} wins, no level change"

    return RoundOutcome(
        winning_side=side,
        level_delta=tier,
        is_sweep=False,
        note=note,
        team_score=team_score,
        opponent_score=opponent_score,
        difference=diff,
    )


class OutcomeCalculator:
    """Dispatches a round to pair or weighted scoring by player count."""

    def __init__(self, rules: RuleConfig):
        self.rules = rules

    def calculate(self, player_count: int, team_ranks: Sequence[int]) -> RoundOutcome:
        """Score a round from the positions held by team 1.

        The opponent's positions are every other seat in ``1..player_count``.
        """
        if player_count == PAIR_MODE_PLAYERS:
            outcome = calculate_pair_outcome(
                team_ranks,
                self.rules.pair_rules,
                self.rules.first_place_required,
            )
        else:
            team, opponent = split_positions(player_count, team_ranks)
            outcome = calculate_weighted_outcome(
                team,
                opponent,
                self.rules.weighted_rules_for(player_count),
                self.rules.first_place_required,
            )

        logger.debug(
            "%d-player round %s -> %s +%d (%s)",
            player_count,
            tuple(sorted(team_ranks)),
            outcome.winning_side.value,
            outcome.level_delta,
            outcome.note,
        )
        return outcome


def split_positions(
    player_count: int, team_ranks: Sequence[int]
) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    """Return (team, opponent) positions, each sorted ascending."""
    team = tuple(sorted(team_ranks))
    opponent = tuple(r for r in range(1, player_count + 1) if r not in team)
    return team, opponent
