"""Rank input parsing.

Turns free-form finishing-position text ("13", "1 3", "1,3") into a sorted
tuple of positions. Bad input is reported through :class:`ParseResult`,
never raised, so the caller can show the message and ask again.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from src.scoring_engine.config import MAX_RANK_BY_NEED


class ParseError(Enum):
    EMPTY_INPUT = "empty_input"
    WRONG_COUNT = "wrong_count"
    OUT_OF_RANGE = "out_of_range"
    DUPLICATE_RANK = "duplicate_rank"


@dataclass(frozen=True)
class ParseResult:
    """Either ``ok`` with ``ranks``, or a failure with ``error``/``message``."""

    ok: bool
    ranks: Tuple[int, ...] = ()
    error: Optional[ParseError] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, ranks) -> "ParseResult":
        return cls(ok=True, ranks=tuple(sorted(ranks)))

    @classmethod
    def failure(cls, error: ParseError, message: str) -> "ParseResult":
        return cls(ok=False, error=error, message=message)


_NON_DIGITS = re.compile(r"[^0-9]+")


def max_rank_for(need: int) -> int:
    """Total seats for a side needing *need* positions (2->4, 3->6, 4->8)."""
    try:
        return MAX_RANK_BY_NEED[need]
    except KeyError:
        raise ValueError(
            f"need must be one of {sorted(MAX_RANK_BY_NEED)} (got {need!r})"
        ) from None


def need_for_players(player_count: int) -> int:
    """Positions held by one side in a game of *player_count* players."""
    for need, max_rank in MAX_RANK_BY_NEED.items():
        if max_rank == player_count:
            return need
    raise ValueError(
        f"player_count must be one of "
        f"{sorted(MAX_RANK_BY_NEED.values())} (got {player_count!r})"
    )


def parse_ranks(text, need: int) -> ParseResult:
    """Parse one side's finishing positions.

    Args:
        text: Raw input. A run of exactly ``need`` digits is read one
            position per digit; anything else is split on non-digits.
        need: Positions per side (2, 3 or 4).

    Returns:
        ParseResult with positions sorted ascending on success.
    """
    max_rank = max_rank_for(need)

    if text is None or not str(text).strip():
        return ParseResult.failure(
            ParseError.EMPTY_INPUT, "Please enter finishing positions"
        )

    trimmed = str(text).strip()

    if len(trimmed) == need and trimmed.isdigit() and trimmed.isascii():
        seen = set()
        for digit in trimmed:
            rank = int(digit)
            if rank < 1 or rank > max_rank:
                return ParseResult.failure(
                    ParseError.OUT_OF_RANGE, "Position out of range"
                )
            if rank in seen:
                return ParseResult.failure(
                    ParseError.DUPLICATE_RANK, "Positions cannot repeat"
                )
            seen.add(rank)
        return ParseResult.success(seen)

    tokens = [t for t in _NON_DIGITS.split(trimmed) if t]
    if len(tokens) != need:
        return ParseResult.failure(
            ParseError.WRONG_COUNT, f"Need {need} positions"
        )

    ranks = [int(t) for t in tokens]
    if any(r < 1 or r > max_rank for r in ranks):
        return ParseResult.failure(
            ParseError.OUT_OF_RANGE, f"Positions must be between 1 and {max_rank}"
        )
    if len(set(ranks)) != len(ranks):
        return ParseResult.failure(
            ParseError.DUPLICATE_RANK, "Positions cannot repeat"
        )

    return ParseResult.success(ranks)
