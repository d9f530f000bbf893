"""The level track: the fixed 2..A progression every team climbs."""

from typing import Sequence

from src.scoring_engine.config import LEVEL_SEQUENCE


class InvalidLevel(ValueError):
    """Raised when a label is not on the level track."""


class LevelTrack:
    """Ordered, immutable sequence of level labels.

    Lookups accept ints and loose strings (``10``, ``" a "``) and normalize
    them to the canonical label before searching.
    """

    def __init__(self, levels: Sequence[str] = LEVEL_SEQUENCE):
        if not levels:
            raise ValueError("levels cannot be empty")
        self._levels = tuple(str(level) for level in levels)
        self._index = {label: i for i, label in enumerate(self._levels)}

    @property
    def levels(self) -> tuple:
        return self._levels

    @property
    def bottom(self) -> str:
        return self._levels[0]

    @property
    def top(self) -> str:
        return self._levels[-1]

    def normalize(self, level) -> str:
        """Return the canonical label for *level*, raising InvalidLevel."""
        label = str(level).strip().upper()
        if label not in self._index:
            raise InvalidLevel(
                f"Unknown level {level!r}. Must be one of: {', '.join(self._levels)}"
            )
        return label

    def is_valid(self, level) -> bool:
        return str(level).strip().upper() in self._index

    def index_of(self, level) -> int:
        """Position of *level* on the track (0 = bottom)."""
        return self._index[self.normalize(level)]

    def advance(self, level, steps: int) -> str:
        """Label ``steps`` places above *level*, clamped at the top."""
        if steps < 0:
            raise ValueError(f"steps must be >= 0 (got {steps})")
        index = min(self.index_of(level) + steps, len(self._levels) - 1)
        return self._levels[index]

    def compare(self, a, b) -> int:
        """-1, 0 or 1 as *a* sits below, level with, or above *b*."""
        ia, ib = self.index_of(a), self.index_of(b)
        if ia < ib:
            return -1
        if ia > ib:
            return 1
        return 0

    def is_top(self, level) -> bool:
        return self.normalize(level) == self.top

    def __len__(self):
        return len(self._levels)


DEFAULT_TRACK = LevelTrack()
