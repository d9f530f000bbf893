"""Data models for the scoring engine.

All engine values are frozen: a round calculation never mutates its inputs,
it returns fresh objects the caller can store, compare or throw away.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional

from src.scoring_engine.config import A_FAIL_LIMIT
from src.scoring_engine.level_track import DEFAULT_TRACK


class Side(Enum):
    """Which side took a round."""

    TEAM1 = "team1"
    TEAM2 = "team2"
    NONE = "none"

    def opposite(self) -> "Side":
        if self is Side.TEAM1:
            return Side.TEAM2
        if self is Side.TEAM2:
            return Side.TEAM1
        return Side.NONE


class RankPair(NamedTuple):
    """Two finishing positions held by one side in a 4-player round."""

    low: int
    high: int

    @classmethod
    def of(cls, first: int, second: int) -> "RankPair":
        a, b = sorted((int(first), int(second)))
        return cls(a, b)


@dataclass(frozen=True)
class TeamLevelState:
    """A team's place on the level track plus its A-fail counter."""

    level: str = DEFAULT_TRACK.bottom
    a_fail_count: int = 0

    def __post_init__(self):
        object.__setattr__(self, "level", DEFAULT_TRACK.normalize(self.level))
        if self.a_fail_count < 0:
            raise ValueError(
                f"a_fail_count must be >= 0 (got {self.a_fail_count})"
            )

    @property
    def at_top(self) -> bool:
        return DEFAULT_TRACK.is_top(self.level)

    def advanced(self, steps: int) -> "TeamLevelState":
        """Return the state ``steps`` levels higher (clamped at A).

        The A-fail counter only survives while the team stays at A.
        """
        new_level = DEFAULT_TRACK.advance(self.level, steps)
        if new_level == self.level:
            return self
        fails = self.a_fail_count if DEFAULT_TRACK.is_top(new_level) else 0
        return TeamLevelState(level=new_level, a_fail_count=fails)

    def with_a_fail(self) -> "TeamLevelState":
        """Record one more own-round loss at A, resetting on the limit."""
        fails = self.a_fail_count + 1
        if fails >= A_FAIL_LIMIT:
            return self.reset_to_bottom()
        return TeamLevelState(level=self.level, a_fail_count=fails)

    def reset_to_bottom(self) -> "TeamLevelState":
        return TeamLevelState(level=DEFAULT_TRACK.bottom, a_fail_count=0)


@dataclass(frozen=True)
class RoundOutcome:
    """Result of scoring one round. Derived, never stored by the engine."""

    winning_side: Side
    level_delta: int
    is_sweep: bool
    note: str
    team_score: Optional[int] = None
    opponent_score: Optional[int] = None
    difference: Optional[int] = None

    @property
    def has_winner(self) -> bool:
        return self.winning_side is not Side.NONE


@dataclass(frozen=True)
class TierThresholds:
    """Point-difference thresholds for 1, 2 and 3 level upgrades."""

    g1: int
    g2: int
    g3: int

    def __post_init__(self):
        if not self.g1 < self.g2 < self.g3:
            raise ValueError(
                f"Thresholds must be ascending (g1={self.g1}, "
                f"g2={self.g2}, g3={self.g3})"
            )

    def tier_for(self, difference: int) -> int:
        """Upgrade tier (0-3) for an absolute point difference."""
        if difference >= self.g3:
            return 3
        if difference >= self.g2:
            return 2
        if difference >= self.g1:
            return 1
        return 0


def _freeze(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class PairRuleTable:
    """4-player upgrade table keyed by the winning side's rank pair."""

    deltas: Mapping[RankPair, int] = field(default_factory=dict)

    def __post_init__(self):
        normalized = {}
        for key, delta in dict(self.deltas).items():
            pair = key if isinstance(key, RankPair) else RankPair.of(*key)
            if delta < 0:
                raise ValueError(f"Upgrade for {tuple(pair)} must be >= 0")
            normalized[pair] = int(delta)
        object.__setattr__(self, "deltas", _freeze(normalized))

    def delta_for(self, pair: RankPair) -> int:
        return self.deltas.get(pair, 0)


@dataclass(frozen=True)
class WeightedRuleTable:
    """6/8-player point table plus upgrade thresholds."""

    points: Mapping[int, int]
    thresholds: TierThresholds

    def __post_init__(self):
        object.__setattr__(
            self,
            "points",
            _freeze({int(rank): int(pts) for rank, pts in dict(self.points).items()}),
        )

    def score(self, ranks) -> int:
        """Sum the points for a set of positions; unknown positions score 0."""
        return sum(self.points.get(rank, 0) for rank in ranks)


@dataclass(frozen=True)
class RuleConfig:
    """Everything the calculators need for one game.

    ``first_place_required`` is the must-1 rule; ``strict_a`` selects
    strict A clearing (own round only) over lenient clearing.
    """

    pair_rules: PairRuleTable
    six_player_rules: WeightedRuleTable
    eight_player_rules: WeightedRuleTable
    first_place_required: bool = True
    strict_a: bool = True

    def weighted_rules_for(self, player_count: int) -> WeightedRuleTable:
        if player_count == 6:
            return self.six_player_rules
        if player_count == 8:
            return self.eight_player_rules
        raise ValueError(f"No weighted rules for {player_count} players")


@dataclass(frozen=True)
class ALevelResolution:
    """Outcome of applying the A-level rules to one finished round."""

    winner: TeamLevelState
    loser: TeamLevelState
    winner_upgrade: int = 0
    loser_upgrade: int = 0
    cleared: bool = False
    demoted: bool = False
    note: str = ""

