"""Lowest policy - deterministic pick of the lowest, then leftmost placement."""

from tetris_planner.policy import SelectionPolicy
from tetris_planner.search import Placement, PlacementSet


class LowestPolicy(SelectionPolicy):
    """Policy that always picks the lowest placement.

    Ties are broken by x, then rotation, then shortest queue. Useful for
    reproducible runs; it does not evaluate the resulting board.
    """

    def __init__(self):
        super().__init__(name="Lowest")

    def choose(self, placements: PlacementSet) -> Placement:
        return min(
            placements,
            key=lambda p: (p.state.y, p.state.x, p.state.rotation, len(p.queue)),
        )
