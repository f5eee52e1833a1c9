"""Actuator: replays a chosen move queue on the live piece, one action per tick.

The actuator is driven by an external clock. On each call to advance() it
either plans (search plus policy choice) or applies exactly one atomic
action to the live piece through the environment's primitives:

    slide_left(), slide_right(), soft_drop_step(), instant_drop(),
    rotate(direction), lock()

The environment also exposes current_piece, board and extreme_gravity.
"""

import logging
from collections import deque
from enum import Enum
from typing import Deque, Optional, Set

from tetris_planner.geometry import State, drop_to_rest
from tetris_planner.moves import IMMOBILE_QUEUE, Marker, Move, MoveQueueError, QueueEntry
from tetris_planner.policies import RandomPolicy
from tetris_planner.policy import SelectionPolicy
from tetris_planner.replan import choose_target
from tetris_planner.search import Placement, PlacementSet, search

logger = logging.getLogger(__name__)

# Entries that continue a run of soft drops
_DESCENT_RUN = (Move.SOFT_DROP_ONE, Marker.USE_INSTANT_DROP, Marker.END_OF_QUEUE)


class Action(Enum):
    """What the actuator did during one tick."""
    PLAN = "PLAN"
    SLIDE_LEFT = "LEFT"
    SLIDE_RIGHT = "RIGHT"
    SOFT_DROP = "SOFT"
    INSTANT_DROP = "INSTANT"
    ROTATE_CW = "CW"
    ROTATE_CCW = "CCW"
    ROTATE_180 = "180"
    LOCK = "LOCK"


_ROTATE_ACTIONS = {
    Move.ROTATE_CW: Action.ROTATE_CW,
    Move.ROTATE_CCW: Action.ROTATE_CCW,
    Move.ROTATE_180: Action.ROTATE_180,
}


class Actuator:
    """Plans a target placement and walks the live piece to it."""

    def __init__(self, env, policy: Optional[SelectionPolicy] = None):
        """Initialize the actuator.

        Args:
            env: Environment providing the live piece, board and primitives
            policy: Selection policy (default: uniform random)
        """
        self.env = env
        self.policy = policy if policy is not None else RandomPolicy()
        self.needs_target = True
        self.pending_descents = 0
        self.target: Optional[Placement] = None
        self.placements: Optional[PlacementSet] = None
        self.queue: Deque[QueueEntry] = deque()
        # States natural gravity has pulled the current piece into
        self.gravity_states: Set[State] = set()

    def reset(self) -> None:
        """Abandon the current plan; the next tick plans again."""
        self.needs_target = True
        self.pending_descents = 0
        self.target = None
        self.placements = None
        self.queue.clear()
        self.gravity_states.clear()

    def advance(self) -> Action:
        """Run one tick.

        Returns:
            The action performed this tick

        Raises:
            MoveQueueError: If the queue breaks its format
        """
        if self.needs_target:
            self._plan()
            return Action.PLAN

        if self.pending_descents > 0:
            self.env.soft_drop_step()
            self.pending_descents -= 1
            return Action.SOFT_DROP

        entry = self._dequeue()

        if entry is Move.SHIFT_LEFT:
            self.env.slide_left()
            return Action.SLIDE_LEFT
        elif entry is Move.SHIFT_RIGHT:
            self.env.slide_right()
            return Action.SLIDE_RIGHT
        elif entry is Move.SOFT_DROP_ONE:
            return self._descend()
        elif entry in _ROTATE_ACTIONS:
            self.env.rotate(entry.rotation)
            return _ROTATE_ACTIONS[entry]
        elif entry is Marker.END_OF_QUEUE:
            return self._lock()

        raise MoveQueueError(f"Unexpected {entry} at the head of the queue")

    def replan(self, from_state: State, extreme_gravity: bool) -> Placement:
        """Search again from a state the planner did not expect.

        Keeps the previous target if it is still reachable, otherwise asks
        the policy for a new one.

        Args:
            from_state: Actual state of the live piece
            extreme_gravity: Current gravity mode

        Returns:
            The new target placement
        """
        piece = self.env.current_piece
        cells = piece.data.cells_for(from_state.rotation)
        placements = search(self.env.board, piece.data, cells, from_state, extreme_gravity)
        previous = self.target.state if self.target is not None else None
        target = choose_target(placements, previous, self.policy)

        logger.info(
            f"[Actuator] Replan from {from_state.as_tuple()}: "
            f"{len(placements)} placements, target={target.state.as_tuple()}, "
            f"kept={previous == target.state}"
        )
        self._set_target(placements, target)
        return target

    def gravity_replan(self, from_state: State, extreme_gravity: bool) -> Placement:
        """Replan after natural gravity pulled the piece down mid-plan.

        Kicks can lift a piece back up, so a plan may keep climbing to a
        state gravity already pulled it out of. When gravity lands the piece
        on such a state again, the plan is abandoned and the piece drops and
        locks where it is.

        Args:
            from_state: State gravity moved the piece into
            extreme_gravity: Current gravity mode

        Returns:
            The new target placement
        """
        if from_state not in self.gravity_states:
            self.gravity_states.add(from_state)
            return self.replan(from_state, extreme_gravity)

        piece = self.env.current_piece
        cells = piece.data.cells_for(from_state.rotation)
        target = Placement(drop_to_rest(self.env.board, cells, from_state), IMMOBILE_QUEUE)
        placements = PlacementSet()
        placements.add(target.state, target.queue)

        logger.info(
            f"[Actuator] Gravity looped back to {from_state.as_tuple()}: "
            f"locking at {target.state.as_tuple()}"
        )
        self._set_target(placements, target)
        return target

    def _plan(self) -> None:
        piece = self.env.current_piece
        self.gravity_states.clear()
        placements = search(
            self.env.board, piece.data, piece.cells, piece.state, self.env.extreme_gravity
        )
        target = choose_target(placements, None, self.policy)

        logger.info(
            f"[Actuator] Planned {piece.type.value}: {len(placements)} placements, "
            f"target={target.state.as_tuple()}, queue={target.queue.to_list()}"
        )
        self._set_target(placements, target)

    def _set_target(self, placements: PlacementSet, target: Placement) -> None:
        self.placements = placements
        self.target = target
        self.queue = deque(target.queue)
        self.pending_descents = 0
        self.needs_target = False

    def _dequeue(self) -> QueueEntry:
        if not self.queue:
            raise MoveQueueError("Move queue exhausted before END_OF_QUEUE")
        return self.queue.popleft()

    def _descend(self) -> Action:
        """Consume a run of soft drops that starts with the entry just dequeued."""
        drops = 1
        while self.queue and self.queue[0] in _DESCENT_RUN:
            entry = self.queue.popleft()
            if entry is Move.SOFT_DROP_ONE:
                drops += 1
            elif entry is Marker.USE_INSTANT_DROP:
                self.env.instant_drop()
                return Action.INSTANT_DROP
            else:
                return self._lock()

        if not self.queue:
            raise MoveQueueError("Move queue exhausted before END_OF_QUEUE")

        self.env.soft_drop_step()
        self.pending_descents = drops - 1
        return Action.SOFT_DROP

    def _lock(self) -> Action:
        if self.queue:
            raise MoveQueueError(f"Entries after END_OF_QUEUE: {list(self.queue)}")
        self.env.lock()
        self.pending_descents = 0
        self.needs_target = True
        return Action.LOCK
