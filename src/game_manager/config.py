from pathlib import Path

# Base project directory
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Data directories
GAMES_DIR = PROJECT_ROOT / "data" / "games"
EXPORTS_DIR = PROJECT_ROOT / "data" / "exports"

SUPPORTED_PLAYER_COUNTS = (4, 6, 8)

DEFAULT_TEAM_NAMES = {
    "t1": "Blue",
    "t2": "Red",
}

# Default 4-player upgrades, keyed by the winning pair's positions
DEFAULT_PAIR_RULES = {
    (1, 2): 3,
    (1, 3): 2,
    (1, 4): 1,
    (2, 3): 1,
}

# Default 6-player scoring
DEFAULT_SIX_PLAYER_POINTS = {1: 5, 2: 4, 3: 3, 4: 3, 5: 1, 6: 0}
DEFAULT_SIX_PLAYER_THRESHOLDS = {"g1": 1, "g2": 4, "g3": 7}

# Default 8-player scoring
DEFAULT_EIGHT_PLAYER_POINTS = {1: 7, 2: 6, 3: 5, 4: 4, 5: 3, 6: 2, 7: 1, 8: 0}
DEFAULT_EIGHT_PLAYER_THRESHOLDS = {"g1": 1, "g2": 6, "g3": 11}

# Default preferences
DEFAULT_MUST1 = True       # Winning side must hold first place to score
DEFAULT_STRICT_A = True    # A only clears on the team's own round
DEFAULT_AUTO_NEXT = True   # Advance the round level as soon as a result lands
MAX_HISTORY = 100          # Oldest rounds are dropped past this
