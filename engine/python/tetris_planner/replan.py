"""Target selection that survives replanning."""

import logging
from typing import Optional

from tetris_planner.geometry import State
from tetris_planner.policy import SelectionPolicy
from tetris_planner.search import Placement, PlacementSet

logger = logging.getLogger(__name__)


def choose_target(
    placements: PlacementSet,
    previous_state: Optional[State],
    policy: SelectionPolicy,
) -> Placement:
    """Pick the target placement after a (re)search.

    The previous target is kept whenever it is still reachable, so an
    external nudge to the piece does not change where it is headed. The
    queue always comes from the fresh placement set.

    Args:
        placements: Fresh, non-empty search result
        previous_state: State of the previous target, or None
        policy: Policy used when the previous target is gone

    Returns:
        A member of placements
    """
    if previous_state is not None:
        kept = placements.get(previous_state)
        if kept is not None:
            return kept
        logger.info(f"[Replan] Target {previous_state.as_tuple()} no longer reachable")
    return policy.select(placements)
