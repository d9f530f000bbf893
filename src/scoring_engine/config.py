# Level progression (low -> high)
LEVEL_SEQUENCE = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")

# Finishing positions needed per side -> total seats
MAX_RANK_BY_NEED = {
    2: 4,
    3: 6,
    4: 8,
}

# Fixed bonus when one side takes every top position
SWEEP_LEVEL_DELTA = 4

# A-level rules
A_CLEAR_UPGRADE = 1
A_FAIL_LIMIT = 3  # Own-round losses at A before reset

NOTE_SEPARATOR = " | "
