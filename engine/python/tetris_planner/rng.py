"""Seven-bag piece spawner.

Pieces are dealt from shuffled bags holding each tetromino once. Upcoming
pieces are kept in a lookahead buffer, so peeking never disturbs the
sequence that next() deals.
"""

import random
from collections import deque
from typing import Deque, List

from tetris_planner.piece import Tetromino


class SevenBagRNG:
    """Deterministic 7-bag piece generator."""

    BAG = tuple(Tetromino)

    def __init__(self, seed: int):
        """Initialize with a seed for deterministic replay.

        Args:
            seed: Random seed for reproducibility
        """
        self.reset(seed)

    def reset(self, seed: int) -> None:
        """Restart the sequence with a new seed."""
        self.seed = seed
        self.rng = random.Random(seed)
        self.upcoming: Deque[Tetromino] = deque()

    def _fill(self, count: int) -> None:
        while len(self.upcoming) < count:
            bag = list(self.BAG)
            self.rng.shuffle(bag)
            self.upcoming.extend(bag)

    def next(self) -> Tetromino:
        self._fill(1)
        return self.upcoming.popleft()

    def peek(self, count: int) -> List[Tetromino]:
        """Get the next count pieces without dealing them."""
        self._fill(count)
        return list(self.upcoming)[:count]
