"""Score a Guandan game from the command line.

The active game (last one saved) is loaded for every command except ``new``.

Usage:
    python -m src.game_manager.run_game new PLAYERS [T1_NAME [T2_NAME]] [--lenient] [--no-must1] [--manual]
    python -m src.game_manager.run_game play POSITIONS [t1|t2]
    python -m src.game_manager.run_game next
    python -m src.game_manager.run_game undo
    python -m src.game_manager.run_game status
    python -m src.game_manager.run_game stats
    python -m src.game_manager.run_game export PATH(.csv|.txt)

Examples:
    python -m src.game_manager.run_game new 4 Blue Red
    python -m src.game_manager.run_game play 13
    python -m src.game_manager.run_game play "2 3" t2
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from src.game_manager.config import SUPPORTED_PLAYER_COUNTS
from src.game_manager.game_controller import GameController
from src.game_manager.game_initializer import GameInitializer
from src.game_manager.game_state import TEAM_KEYS, GameState
from src.game_manager.round_rules import GameRuleError
from src.game_manager.state_persistence import StatePersistence
from src.logging_config import setup_logging
from src.stats_pipeline.history_export import HistoryExporter
from src.stats_pipeline.player_stats import PlayerStatsCalculator

logger = logging.getLogger(__name__)


class CommandError(Exception):
    """Raised when a command cannot run against the saved games."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="run_game", description="Score a Guandan game"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    new = commands.add_parser("new", help="Start a new game and make it active")
    new.add_argument("players", type=int, choices=SUPPORTED_PLAYER_COUNTS,
                     help="Seats at the table")
    new.add_argument("t1_name", nargs="?", help="Display name for t1")
    new.add_argument("t2_name", nargs="?", help="Display name for t2")
    new.add_argument("--lenient", action="store_true",
                     help="Clear A on any round, not only the team's own")
    new.add_argument("--no-must1", action="store_true",
                     help="Score rounds without requiring first place")
    new.add_argument("--manual", action="store_true",
                     help="Wait for 'next' before moving the round level")

    play = commands.add_parser("play", help="Score one round")
    play.add_argument("positions", help='Finishing positions, e.g. 13 or "1 3"')
    play.add_argument("team", nargs="?", default="t1", choices=TEAM_KEYS,
                      help="Team holding the positions (default: t1)")

    commands.add_parser("next", help="Move to the pending round level")
    commands.add_parser("undo", help="Undo the last round")
    commands.add_parser("status", help="Show levels and round state")
    commands.add_parser("stats", help="Show player statistics and honors")

    export = commands.add_parser("export", help="Write history to .csv or .txt")
    export.add_argument("path", type=Path, help="Output file")

    return parser


def _format_status(state: GameState) -> str:
    status = GameController(state).get_status()
    lines = [
        f"Game {status['game_id']} ({status['player_count']} players, "
        f"{status['rounds_played']} rounds)",
        f"Round level: {status['round_level']}"
        + (f" (pending: {status['next_round_base']})" if status["next_round_base"] else ""),
    ]
    for team in status["teams"].values():
        lines.append(f"  {team['name']}: {team['level']} (A-fails: {team['a_fail_count']})")
    if status["champion"]:
        lines.append(f"Winner: {state.config.team_name(status['champion'])}")
    return "\n".join(lines)


def _require_game(persistence: StatePersistence) -> GameState:
    state = persistence.load_active_game()
    if state is None:
        raise CommandError("No active game. Start one with: new PLAYERS")
    return state


def run_command(args: List[str], persistence: StatePersistence) -> str:
    """Execute one command and return the text to show.

    Raises:
        SystemExit: From argparse, on unknown commands or flags (code 2).
        CommandError: On a missing game or unsupported export format.
        GameRuleError: If the game rejects the round.
        ValueError: If new-game settings are invalid.
    """
    options = build_parser().parse_args(args)

    if options.command == "new":
        team_names = {}
        if options.t1_name:
            team_names["t1"] = options.t1_name
        if options.t2_name:
            team_names["t2"] = options.t2_name
        state = GameInitializer().create_game(
            player_count=options.players,
            team_names=team_names,
            must1=not options.no_must1,
            strict_a=not options.lenient,
            auto_next=not options.manual,
        )
        persistence.save_game(state)
        return _format_status(state)

    state = _require_game(persistence)
    controller = GameController(state)

    if options.command == "play":
        entry = controller.submit_round(options.positions, team=options.team)
        persistence.save_game(state)
        lines = [f"Round {entry.round_number}: {entry.note}"]
        if entry.a_note:
            lines.append(entry.a_note)
        lines.append(_format_status(state))
        return "\n".join(lines)

    if options.command == "next":
        if not controller.advance_round():
            return "No pending round to advance to."
        persistence.save_game(state)
        return _format_status(state)

    if options.command == "undo":
        entry = controller.undo_last()
        persistence.save_game(state)
        return f"Undid round {entry.round_number}\n" + _format_status(state)

    if options.command == "stats":
        calculator = PlayerStatsCalculator()
        stats = calculator.calculate(state.history)
        if stats.empty:
            return "No player rankings recorded yet."
        honors = calculator.calculate_honors(state.history)
        if honors.empty:
            return stats.to_string()
        return stats.to_string() + "\n\nHonors:\n" + honors.to_string()

    if options.command == "export":
        path = options.path
        exporter = HistoryExporter()
        if path.suffix.lower() == ".csv":
            exporter.export_csv(state, path)
        elif path.suffix.lower() == ".txt":
            exporter.export_txt(state, path)
        else:
            raise CommandError(f"Unsupported export format: {path.suffix or path.name}")
        return f"Exported {len(state.history)} rounds to {path}"

    return _format_status(state)


def main(argv: Optional[List[str]] = None, storage_dir: Optional[Path] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    persistence = StatePersistence(storage_dir)
    try:
        print(run_command(args, persistence))
    except (CommandError, GameRuleError, ValueError) as e:
        logger.debug("Command %s failed: %s", args, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    setup_logging()
    sys.exit(main())
