"""State persistence - save and load game state to/from JSON files."""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from src.game_manager.config import GAMES_DIR, MAX_HISTORY
from src.game_manager.game_state import (
    GameConfig,
    GameState,
    HistoryEntry,
    RoundSnapshot,
)
from src.scoring_engine.models import (
    PairRuleTable,
    RuleConfig,
    TeamLevelState,
    TierThresholds,
    WeightedRuleTable,
)

logger = logging.getLogger(__name__)

ACTIVE_LINK_NAME = "active_game.json"


class StatePersistence:
    """Handles saving and loading game state to/from JSON files."""

    def __init__(self, storage_dir: Optional[Path] = None):
        self.storage_dir = storage_dir or GAMES_DIR
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _game_path(self, game_id: str) -> Path:
        return self.storage_dir / f"game_{game_id}.json"

    def save_game(self, game_state: GameState) -> Path:
        """Save game state to JSON file and mark it active.

        Returns:
            Path to the saved file.
        """
        filepath = self._game_path(game_state.game_id)

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self._game_state_to_dict(game_state), f, indent=2, ensure_ascii=False)

        self._update_active_link(filepath)

        logger.info(
            "Saved game %s (%d rounds, round at %s) to %s",
            game_state.game_id,
            game_state.rounds_played,
            game_state.round_level,
            filepath,
        )
        return filepath

    def load_game(self, game_id: str) -> Optional[GameState]:
        """Load game state by ID.

        Returns:
            GameState if found and readable, None otherwise.
        """
        filepath = self._game_path(game_id)

        if not filepath.exists():
            logger.warning("Game file not found: %s", filepath)
            return None

        return self._read(filepath)

    def load_active_game(self) -> Optional[GameState]:
        """Load the game the active link points at, if any."""
        active_link = self.storage_dir / ACTIVE_LINK_NAME

        if not active_link.is_symlink():
            return None

        actual_file = active_link.resolve()
        if not actual_file.exists():
            logger.warning("Active game link points to missing file: %s", actual_file)
            return None

        return self._read(actual_file)

    def list_saved_games(self) -> List[Dict]:
        """List all saved games with metadata, most recent first."""
        games = []

        for filepath in self.storage_dir.glob("game_*.json"):
            try:
                with open(filepath, "r", encoding="utf-8") as f:
                    data = json.load(f)

                config = data.get("config", {})
                games.append(
                    {
                        "game_id": data["game_id"],
                        "started_at": data["started_at"],
                        "player_count": config.get("player_count", 0),
                        "team_names": config.get("team_names", {}),
                        "rounds_played": data.get("rounds_played", 0),
                        "round_level": data.get("round_level"),
                        "is_complete": data.get("is_complete", False),
                        "champion": data.get("champion"),
                    }
                )
            except (json.JSONDecodeError, OSError, KeyError) as e:
                logger.warning("Skipping corrupt game file %s: %s", filepath, e)
                continue

        return sorted(games, key=lambda x: x["started_at"], reverse=True)

    def delete_game(self, game_id: str) -> bool:
        """Delete a saved game file.

        Returns:
            True if deleted, False if not found.
        """
        filepath = self._game_path(game_id)

        if not filepath.exists():
            return False

        active_link = self.storage_dir / ACTIVE_LINK_NAME
        if active_link.is_symlink() and active_link.resolve() == filepath.resolve():
            active_link.unlink()

        filepath.unlink()
        logger.info("Deleted game %s", game_id)
        return True

    def _read(self, filepath: Path) -> Optional[GameState]:
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
            state = self._dict_to_game_state(data)
        except (
            json.JSONDecodeError, KeyError, ValueError, TypeError, AttributeError
        ) as e:
            logger.warning("Corrupt game file %s: %s", filepath, e)
            return None

        logger.info("Loaded game %s from %s", state.game_id, filepath)
        return state

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @staticmethod
    def _team_to_dict(team: TeamLevelState) -> Dict:
        return {"level": team.level, "a_fail_count": team.a_fail_count}

    @staticmethod
    def _dict_to_team(data: Dict) -> TeamLevelState:
        return TeamLevelState(
            level=data["level"], a_fail_count=data.get("a_fail_count", 0)
        )

    @staticmethod
    def _weighted_to_dict(table: WeightedRuleTable) -> Dict:
        return {
            "points": {str(rank): pts for rank, pts in table.points.items()},
            "thresholds": {
                "g1": table.thresholds.g1,
                "g2": table.thresholds.g2,
                "g3": table.thresholds.g3,
            },
        }

    @staticmethod
    def _dict_to_weighted(data: Dict) -> WeightedRuleTable:
        return WeightedRuleTable(
            points={int(rank): pts for rank, pts in data["points"].items()},
            thresholds=TierThresholds(**data["thresholds"]),
        )

    def _snapshot_to_dict(self, snapshot: RoundSnapshot) -> Dict:
        return {
            "t1": self._team_to_dict(snapshot.t1),
            "t2": self._team_to_dict(snapshot.t2),
            "round_level": snapshot.round_level,
            "round_owner": snapshot.round_owner,
            "next_round_base": snapshot.next_round_base,
        }

    def _dict_to_snapshot(self, data: Dict) -> RoundSnapshot:
        return RoundSnapshot(
            t1=self._dict_to_team(data["t1"]),
            t2=self._dict_to_team(data["t2"]),
            round_level=data["round_level"],
            round_owner=data.get("round_owner"),
            next_round_base=data.get("next_round_base"),
        )

    def _game_state_to_dict(self, state: GameState) -> Dict:
        """Convert GameState to JSON-serializable dict."""
        rules = state.config.rules
        return {
            "game_id": state.game_id,
            "config": {
                "game_id": state.config.game_id,
                "player_count": state.config.player_count,
                "team_names": state.config.team_names,
                "auto_next": state.config.auto_next,
                "max_history": state.config.max_history,
                "rules": {
                    "first_place_required": rules.first_place_required,
                    "strict_a": rules.strict_a,
                    "pair_rules": [
                        {"ranks": list(pair), "delta": delta}
                        for pair, delta in sorted(rules.pair_rules.deltas.items())
                    ],
                    "six_player_rules": self._weighted_to_dict(rules.six_player_rules),
                    "eight_player_rules": self._weighted_to_dict(
                        rules.eight_player_rules
                    ),
                },
            },
            "started_at": state.started_at,
            "teams": {key: self._team_to_dict(t) for key, t in state.teams.items()},
            "round_level": state.round_level,
            "round_owner": state.round_owner,
            "next_round_base": state.next_round_base,
            "history": [
                {
                    "round_number": entry.round_number,
                    "timestamp": entry.timestamp,
                    "player_count": entry.player_count,
                    "team": entry.team,
                    "ranks": entry.ranks,
                    "winner": entry.winner,
                    "level_delta": entry.level_delta,
                    "round_level": entry.round_level,
                    "t1_level": entry.t1_level,
                    "t2_level": entry.t2_level,
                    "note": entry.note,
                    "a_note": entry.a_note,
                    "before": self._snapshot_to_dict(entry.before),
                    "player_rankings": {
                        str(pos): name for pos, name in entry.player_rankings.items()
                    },
                }
                for entry in state.history
            ],
            "rounds_played": state.rounds_played,
            "is_complete": state.is_complete,
            "champion": state.champion,
            "completed_at": state.completed_at,
        }

    def _dict_to_game_state(self, data: Dict) -> GameState:
        """Reconstruct GameState from dict."""
        cfg = data["config"]
        rd = cfg["rules"]
        rules = RuleConfig(
            pair_rules=PairRuleTable(
                {tuple(item["ranks"]): item["delta"] for item in rd["pair_rules"]}
            ),
            six_player_rules=self._dict_to_weighted(rd["six_player_rules"]),
            eight_player_rules=self._dict_to_weighted(rd["eight_player_rules"]),
            first_place_required=rd.get("first_place_required", True),
            strict_a=rd.get("strict_a", True),
        )
        config = GameConfig(
            game_id=cfg["game_id"],
            player_count=cfg["player_count"],
            rules=rules,
            team_names=cfg["team_names"],
            auto_next=cfg.get("auto_next", True),
            max_history=cfg.get("max_history", MAX_HISTORY),
        )

        history = [
            HistoryEntry(
                round_number=hd["round_number"],
                timestamp=hd["timestamp"],
                player_count=hd["player_count"],
                team=hd["team"],
                ranks=hd["ranks"],
                winner=hd.get("winner"),
                level_delta=hd["level_delta"],
                round_level=hd["round_level"],
                t1_level=hd["t1_level"],
                t2_level=hd["t2_level"],
                note=hd.get("note", ""),
                before=self._dict_to_snapshot(hd["before"]),
                a_note=hd.get("a_note", ""),
                player_rankings={
                    int(pos): name
                    for pos, name in hd.get("player_rankings", {}).items()
                },
            )
            for hd in data.get("history", [])
        ]

        return GameState(
            game_id=data["game_id"],
            config=config,
            started_at=data["started_at"],
            teams={key: self._dict_to_team(td) for key, td in data["teams"].items()},
            round_level=data["round_level"],
            round_owner=data.get("round_owner"),
            next_round_base=data.get("next_round_base"),
            history=history,
            rounds_played=data.get("rounds_played", len(history)),
            is_complete=data.get("is_complete", False),
            champion=data.get("champion"),
            completed_at=data.get("completed_at"),
        )

    def _update_active_link(self, filepath: Path):
        """Point the active link at the most recently saved game."""
        active_link = self.storage_dir / ACTIVE_LINK_NAME

        if active_link.exists() or active_link.is_symlink():
            active_link.unlink()

        active_link.symlink_to(filepath.name)
