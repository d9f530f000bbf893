from src.game_manager.game_controller import GameController
from src.game_manager.game_initializer import GameInitializer
from src.game_manager.game_state import (
    GameConfig,
    GameState,
    HistoryEntry,
    RoundSnapshot,
)
from src.game_manager.round_rules import GameRuleError, RankInputError, RoundRules
from src.game_manager.state_persistence import StatePersistence

__all__ = [
    "GameConfig",
    "GameController",
    "GameInitializer",
    "GameRuleError",
    "GameState",
    "HistoryEntry",
    "RankInputError",
    "RoundRules",
    "RoundSnapshot",
    "StatePersistence",
]
