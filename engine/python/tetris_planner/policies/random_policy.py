"""Random policy - picks placements uniformly at random."""

import random
from typing import Optional

from tetris_planner.policy import SelectionPolicy
from tetris_planner.search import Placement, PlacementSet


class RandomPolicy(SelectionPolicy):
    """Policy that selects placements uniformly at random.

    This is the default policy of the actuator. It exercises the whole
    pipeline without any opinion about board quality.
    """

    def __init__(self, seed: Optional[int] = None):
        """Initialize random policy.

        Args:
            seed: Random seed for reproducibility (optional)
        """
        super().__init__(name="Random")
        self.rng = random.Random(seed)

    def choose(self, placements: PlacementSet) -> Placement:
        return self.rng.choice(list(placements))
