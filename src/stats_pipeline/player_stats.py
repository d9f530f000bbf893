"""Per-player statistics from game history.

Only rounds recorded with ``player_rankings`` contribute. A player's team
for a round follows from the entered positions: players finishing in
``entry.ranks`` were on ``entry.team``, everyone else on the other team.
"""

import logging
from typing import Iterable, List

import pandas as pd

from src.game_manager.game_state import HistoryEntry, other_team

logger = logging.getLogger(__name__)

STAT_COLUMNS = [
    "games",
    "wins",
    "losses",
    "draws",
    "win_rate",
    "avg_rank",
    "best_rank",
    "worst_rank",
    "first_place",
    "last_place",
    "current_streak",
    "best_streak",
]

HONOR_MIN_GAMES = 3

# (honor, column, highest wins, needs a score above zero)
HONOR_RULES = [
    ("most_first", "first_place", True, True),
    ("most_last", "last_place", True, True),
    ("most_stable", "variance", False, False),
    ("most_volatile", "variance", True, True),
    ("most_improved", "improvement", True, False),
    ("team_pillar", "support_wins", True, True),
]


class PlayerStatsCalculator:
    """Aggregate finishing positions and results by player."""

    def finishes(self, history: Iterable[HistoryEntry]) -> pd.DataFrame:
        """One row per player per round.

        Columns: round_number, player, position, team, result, is_first,
        is_last. ``result`` is "win", "loss" or "draw".
        """
        rows: List[dict] = []
        for entry in history:
            if not entry.player_rankings:
                continue
            entered = set(entry.ranks)
            for position, player in sorted(entry.player_rankings.items()):
                team = entry.team if position in entered else other_team(entry.team)
                if entry.winner is None:
                    result = "draw"
                elif entry.winner == team:
                    result = "win"
                else:
                    result = "loss"
                rows.append(
                    {
                        "round_number": entry.round_number,
                        "player": str(player).strip(),
                        "position": int(position),
                        "team": team,
                        "result": result,
                        "is_first": position == 1,
                        "is_last": position == entry.player_count,
                    }
                )

        return pd.DataFrame(
            rows,
            columns=[
                "round_number", "player", "position", "team",
                "result", "is_first", "is_last",
            ],
        )

    def calculate(self, history: Iterable[HistoryEntry]) -> pd.DataFrame:
        """Statistics table indexed by player.

        Sorted by wins (descending), then average position (ascending).
        """
        finishes = self.finishes(history)
        if finishes.empty:
            return pd.DataFrame(columns=STAT_COLUMNS).rename_axis("player")

        grouped = finishes.groupby("player")
        stats = pd.DataFrame(
            {
                "games": grouped.size(),
                "wins": grouped["result"].apply(lambda r: int((r == "win").sum())),
                "losses": grouped["result"].apply(lambda r: int((r == "loss").sum())),
                "draws": grouped["result"].apply(lambda r: int((r == "draw").sum())),
                "avg_rank": grouped["position"].mean().round(2),
                "best_rank": grouped["position"].min(),
                "worst_rank": grouped["position"].max(),
                "first_place": grouped["is_first"].sum().astype(int),
                "last_place": grouped["is_last"].sum().astype(int),
            }
        )
        stats["win_rate"] = (stats["wins"] / stats["games"]).round(3)

        streaks = {
            player: self._streaks(group.sort_values("round_number")["result"].tolist())
            for player, group in grouped
        }
        stats["current_streak"] = pd.Series({p: s[0] for p, s in streaks.items()})
        stats["best_streak"] = pd.Series({p: s[1] for p, s in streaks.items()})

        stats = stats[STAT_COLUMNS].sort_values(
            ["wins", "avg_rank"], ascending=[False, True]
        )
        stats.index.name = "player"

        logger.info(
            "Calculated stats for %d players over %d finishes",
            len(stats),
            len(finishes),
        )
        return stats

    def calculate_honors(self, history: Iterable[HistoryEntry]) -> pd.DataFrame:
        """Honors table indexed by honor name, with player and score.

        Only players with at least ``HONOR_MIN_GAMES`` ranked rounds
        qualify. Ties go to the player who appeared first in the history.
        Count honors and most_volatile need a score above zero to be awarded.
        """
        finishes = self.finishes(history)
        honors = pd.DataFrame(columns=["player", "score"]).rename_axis("honor")
        if finishes.empty:
            return honors

        finishes["support_win"] = finishes["is_last"] & (finishes["result"] == "win")
        grouped = finishes.groupby("player", sort=False)
        games = grouped.size()
        eligible = games[games >= HONOR_MIN_GAMES].index
        if eligible.empty:
            return honors

        per_player = pd.DataFrame(
            {
                "first_place": grouped["is_first"].sum(),
                "last_place": grouped["is_last"].sum(),
                "variance": grouped["position"].var(ddof=0),
                "improvement": grouped["position"].apply(
                    lambda p: self._improvement(p.tolist())
                ),
                "support_wins": grouped["support_win"].sum(),
            }
        ).loc[eligible]

        rows = []
        for honor, column, highest, positive_only in HONOR_RULES:
            values = per_player[column]
            player = values.idxmax() if highest else values.idxmin()
            score = float(values[player])
            if positive_only and score <= 0:
                continue
            rows.append({"honor": honor, "player": player, "score": round(score, 2)})

        if rows:
            honors = pd.DataFrame(rows).set_index("honor")
        logger.info("Awarded %d honors among %d players", len(rows), len(eligible))
        return honors

    @staticmethod
    def _streaks(results: List[str]) -> tuple:
        """(current, best) consecutive-win streaks; draws don't break a run."""
        current = best = 0
        for result in results:
            if result == "win":
                current += 1
                best = max(best, current)
            elif result == "loss":
                current = 0
        return current, best

    @staticmethod
    def _improvement(positions: List[int]) -> float:
        """First-half average minus second-half average; 0 under four rounds."""
        if len(positions) < 4:
            return 0.0
        mid = len(positions) // 2
        first, second = positions[:mid], positions[mid:]
        return sum(first) / len(first) - sum(second) / len(second)
