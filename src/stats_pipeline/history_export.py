"""Export game history as CSV or plain text."""

import logging
from pathlib import Path

import pandas as pd

from src.game_manager.game_state import GameState
from src.scoring_engine.config import A_FAIL_LIMIT

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = [
    "Round", "Time", "Players", "Entered", "Combo", "Rankings",
    "Result", "Winner", "T1_Level", "T2_Level", "Round_Level", "Note", "A_Note",
]


class HistoryExporter:
    """Flattens a game's history into a table and writes it out."""

    def to_dataframe(self, state: GameState) -> pd.DataFrame:
        """One row per recorded round, oldest first."""
        config = state.config
        rows = []
        for entry in state.history:
            rankings = " ".join(
                f"{pos}:{name}" for pos, name in sorted(entry.player_rankings.items())
            )
            if entry.winner and entry.level_delta:
                result = f"{config.team_name(entry.winner)} +{entry.level_delta}"
            else:
                result = "No level change"
            rows.append(
                {
                    "Round": entry.round_number,
                    "Time": entry.timestamp,
                    "Players": entry.player_count,
                    "Entered": config.team_name(entry.team),
                    "Combo": entry.combo,
                    "Rankings": rankings,
                    "Result": result,
                    "Winner": config.team_name(entry.winner) if entry.winner else "",
                    "T1_Level": entry.t1_level,
                    "T2_Level": entry.t2_level,
                    "Round_Level": entry.round_level,
                    "Note": entry.note,
                    "A_Note": entry.a_note,
                }
            )
        return pd.DataFrame(rows, columns=EXPORT_COLUMNS)

    def export_csv(self, state: GameState, path: Path) -> Path:
        """Write history as UTF-8 CSV (with BOM so spreadsheets read it)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        df = self.to_dataframe(state)
        df.to_csv(path, index=False, encoding="utf-8-sig")
        logger.info("Exported %d rounds to %s", len(df), path)
        return path

    def export_txt(self, state: GameState, path: Path) -> Path:
        """Write a human-readable report: current standing, then one line per round."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        config = state.config

        lines = [
            "Guandan score export",
            "====================",
            f"Round level: {state.round_level}",
            f"Next round: {state.next_round_base or '-'}",
        ]
        for key, team in state.teams.items():
            lines.append(
                f"{config.team_name(key)}: {team.level} | "
                f"A{team.a_fail_count}/{A_FAIL_LIMIT}"
            )
        lines.append(
            "A rule: " + ("strict" if config.rules.strict_a else "lenient")
        )
        if state.champion:
            lines.append(f"Champion: {config.team_name(state.champion)}")
        lines.append("")

        df = self.to_dataframe(state)
        lines.append(" | ".join(df.columns))
        for row in df.itertuples(index=False):
            lines.append(" | ".join(str(value) for value in row))

        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        logger.info("Exported %d rounds to %s", len(df), path)
        return path
