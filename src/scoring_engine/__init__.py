from src.scoring_engine.a_level_resolver import resolve_a_level
from src.scoring_engine.level_track import DEFAULT_TRACK, InvalidLevel, LevelTrack
from src.scoring_engine.models import (
    ALevelResolution,
    PairRuleTable,
    RankPair,
    RoundOutcome,
    RuleConfig,
    Side,
    TeamLevelState,
    TierThresholds,
    WeightedRuleTable,
)
from src.scoring_engine.outcome_calculator import (
    OutcomeCalculator,
    calculate_pair_outcome,
    calculate_weighted_outcome,
)
from src.scoring_engine.rank_parser import ParseError, ParseResult, parse_ranks

__all__ = [
    "ALevelResolution",
    "DEFAULT_TRACK",
    "InvalidLevel",
    "LevelTrack",
    "OutcomeCalculator",
    "PairRuleTable",
    "ParseError",
    "ParseResult",
    "RankPair",
    "RoundOutcome",
    "RuleConfig",
    "Side",
    "TeamLevelState",
    "TierThresholds",
    "WeightedRuleTable",
    "calculate_pair_outcome",
    "calculate_weighted_outcome",
    "parse_ranks",
    "resolve_a_level",
]
