"""Game state data models - single source of truth for a scoring session."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
import uuid

from src.game_manager.config import DEFAULT_TEAM_NAMES, MAX_HISTORY
from src.scoring_engine.level_track import DEFAULT_TRACK
from src.scoring_engine.models import RuleConfig, TeamLevelState
from src.scoring_engine.rank_parser import need_for_players

TEAM_KEYS = ("t1", "t2")


def other_team(team: str) -> str:
    """The opposing team key."""
    if team not in TEAM_KEYS:
        raise ValueError(f"Unknown team {team!r}. Must be 't1' or 't2'")
    return "t2" if team == "t1" else "t1"


@dataclass
class GameConfig:
    """Game configuration settings."""

    game_id: str
    player_count: int  # 4, 6 or 8
    rules: RuleConfig
    team_names: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_TEAM_NAMES)
    )
    auto_next: bool = True
    max_history: int = MAX_HISTORY

    def positions_per_team(self) -> int:
        """Finishing positions each team holds in a round."""
        return need_for_players(self.player_count)

    def team_name(self, team: str) -> str:
        return self.team_names.get(team, team)


@dataclass
class RoundSnapshot:
    """Everything a round changes, captured before it is applied."""

    t1: TeamLevelState
    t2: TeamLevelState
    round_level: str
    round_owner: Optional[str]
    next_round_base: Optional[str] = None


@dataclass
class HistoryEntry:
    """Represents a single scored round."""

    round_number: int
    timestamp: str
    player_count: int
    team: str  # Team whose positions were entered
    ranks: List[int]
    winner: Optional[str]  # None on a draw
    level_delta: int
    round_level: str  # Level the round was played at
    t1_level: str
    t2_level: str
    note: str
    before: RoundSnapshot
    a_note: str = ""
    player_rankings: Dict[int, str] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        round_number: int,
        player_count: int,
        team: str,
        ranks: List[int],
        winner: Optional[str],
        level_delta: int,
        round_level: str,
        t1_level: str,
        t2_level: str,
        note: str,
        before: RoundSnapshot,
        a_note: str = "",
        player_rankings: Optional[Dict[int, str]] = None,
    ):
        return cls(
            round_number=round_number,
            timestamp=datetime.now().isoformat(),
            player_count=player_count,
            team=team,
            ranks=list(ranks),
            winner=winner,
            level_delta=level_delta,
            round_level=round_level,
            t1_level=t1_level,
            t2_level=t2_level,
            note=note,
            before=before,
            a_note=a_note,
            player_rankings=dict(player_rankings or {}),
        )

    @property
    def combo(self) -> str:
        """Entered positions as displayed, e.g. ``(1,3)``."""
        return "(" + ",".join(str(r) for r in self.ranks) + ")"


@dataclass
class GameState:
    """Complete game state - single source of truth."""

    game_id: str
    config: GameConfig
    started_at: str
    teams: Dict[str, TeamLevelState]
    round_level: str
    round_owner: Optional[str] = None
    next_round_base: Optional[str] = None
    history: List[HistoryEntry] = field(default_factory=list)
    rounds_played: int = 0
    is_complete: bool = False
    champion: Optional[str] = None
    completed_at: Optional[str] = None

    @classmethod
    def create_new(cls, config: GameConfig) -> "GameState":
        """Factory method to create a new game with both teams at the bottom."""
        config.positions_per_team()  # rejects unsupported player counts
        if not config.game_id:
            config.game_id = str(uuid.uuid4())

        return cls(
            game_id=config.game_id,
            config=config,
            started_at=datetime.now().isoformat(),
            teams={key: TeamLevelState() for key in TEAM_KEYS},
            round_level=DEFAULT_TRACK.bottom,
        )

    def get_team(self, team: str) -> TeamLevelState:
        other_team(team)
        return self.teams[team]

    def set_team(self, team: str, state: TeamLevelState):
        other_team(team)
        self.teams[team] = state

    def snapshot(self) -> RoundSnapshot:
        return RoundSnapshot(
            t1=self.teams["t1"],
            t2=self.teams["t2"],
            round_level=self.round_level,
            round_owner=self.round_owner,
            next_round_base=self.next_round_base,
        )

    def restore(self, snapshot: RoundSnapshot):
        """Put levels and round tracking back to a snapshot (for rollback)."""
        self.teams["t1"] = snapshot.t1
        self.teams["t2"] = snapshot.t2
        self.round_level = snapshot.round_level
        self.round_owner = snapshot.round_owner
        self.next_round_base = snapshot.next_round_base
        self.is_complete = False
        self.champion = None
        self.completed_at = None

    def add_history_entry(self, entry: HistoryEntry):
        """Append a round, dropping the oldest past ``max_history``."""
        self.history.append(entry)
        self.rounds_played = entry.round_number
        overflow = len(self.history) - self.config.max_history
        if overflow > 0:
            del self.history[:overflow]

    def mark_complete(self, champion: str):
        self.is_complete = True
        self.champion = champion
        if not self.completed_at:
            self.completed_at = datetime.now().isoformat()
