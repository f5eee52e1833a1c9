"""Breadth-first placement search.

Explores the graph of (x, y, rotation) states reachable from the piece's
current state using the six atomic moves, and returns every resting
state (a state with nothing valid directly below it) together with the
move queue that first reached it. Breadth-first order means each queue
is one of the shortest paths by move count.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from tetris_planner.geometry import (
    Coords,
    State,
    drop_to_rest,
    is_resting,
    is_valid_state,
    rotate_cells,
)
from tetris_planner.moves import (
    EMPTY_QUEUE,
    IMMOBILE_QUEUE,
    SEARCH_ORDER,
    Marker,
    Move,
    MoveQueue,
)
from tetris_planner.piece import PieceData
from tetris_planner.rules import try_rotate

logger = logging.getLogger(__name__)

# A soft drop extending a run of at least this many soft drops onto a
# resting state is followed by an instant drop marker
INSTANT_DROP_RUN = 2


@dataclass(frozen=True)
class Placement:
    """A reachable locking state and the queue that reaches it."""
    state: State
    queue: MoveQueue

    def to_dict(self) -> dict:
        return {
            "x": self.state.x,
            "y": self.state.y,
            "rot": self.state.rotation,
            "queue": self.queue.to_list(),
        }


class PlacementSet:
    """Placements keyed by state, in discovery order."""

    def __init__(self):
        self._placements: Dict[State, Placement] = {}

    def add(self, state: State, queue: MoveQueue) -> None:
        """Record a placement; the first queue found for a state wins."""
        if state not in self._placements:
            self._placements[state] = Placement(state, queue.terminated())

    def get(self, state: State) -> Optional[Placement]:
        return self._placements.get(state)

    def states(self) -> List[State]:
        return list(self._placements)

    def to_list(self) -> List[dict]:
        return [placement.to_dict() for placement in self]

    def __contains__(self, state: object) -> bool:
        return state in self._placements

    def __iter__(self) -> Iterator[Placement]:
        return iter(self._placements.values())

    def __len__(self) -> int:
        return len(self._placements)

    def __repr__(self) -> str:
        return f"PlacementSet({len(self)} placements)"


class _Orientations:
    """Cell offsets per rotation index, derived from one known orientation."""

    def __init__(self, data: PieceData, cells: Coords, rotation: int):
        self._data = data
        self._cells: Dict[int, Coords] = {rotation % 4: list(cells)}

    def get(self, rotation: int) -> Coords:
        rotation %= 4
        if rotation not in self._cells:
            base_rotation, base_cells = next(iter(self._cells.items()))
            cells = base_cells
            for _ in range((rotation - base_rotation) % 4):
                cells = rotate_cells(cells, 1, self._data.kind)
            self._cells[rotation] = cells
        return self._cells[rotation]


def _apply_move(
    board, data: PieceData, orientations: _Orientations, state: State, move: Move
) -> Optional[State]:
    """Compute the state a move leads to, or None if the move is blocked."""
    cells = orientations.get(state.rotation)
    if move.is_rotation:
        result = try_rotate(board, data, cells, state, move.rotation)
        if result is None:
            return None
        return result[1]

    new_state = state.moved(move.dx, move.dy)
    if not is_valid_state(board, cells, new_state):
        return None
    return new_state


def search(
    board,
    data: PieceData,
    cells: Coords,
    initial_state: State,
    extreme_gravity: bool = False,
) -> PlacementSet:
    """Find every placement the piece can reach and lock into.

    Args:
        board: Board providing bounds and occupancy (read only)
        data: Shape data of the piece (pivot convention, kick tables)
        cells: Cell offsets of the piece in the initial state's orientation
        initial_state: Current position and rotation of the piece
        extreme_gravity: If True, every move is followed by a full descent

    Returns:
        Non-empty placement set. Every queue ends with one END_OF_QUEUE.
    """
    orientations = _Orientations(data, cells, initial_state.rotation)
    visited: Dict[State, MoveQueue] = {initial_state: EMPTY_QUEUE}
    frontier: List[Tuple[State, MoveQueue]] = [(initial_state, EMPTY_QUEUE)]
    placements = PlacementSet()

    if is_valid_state(board, cells, initial_state) and is_resting(board, cells, initial_state):
        placements.add(initial_state, IMMOBILE_QUEUE)

    while frontier:
        next_frontier: List[Tuple[State, MoveQueue]] = []

        for state, queue in frontier:
            last_move = queue.last_move()

            for move in SEARCH_ORDER:
                if last_move is not None and move is last_move.inverse:
                    continue

                new_state = _apply_move(board, data, orientations, state, move)
                if new_state is None:
                    continue

                new_cells = orientations.get(new_state.rotation)
                if extreme_gravity:
                    new_state = drop_to_rest(board, new_cells, new_state)

                if new_state in visited:
                    continue

                resting = is_resting(board, new_cells, new_state)
                new_queue = queue.extended(move)
                if (
                    move is Move.SOFT_DROP_ONE
                    and resting
                    and queue.trailing_drops() >= INSTANT_DROP_RUN
                ):
                    new_queue = new_queue.extended(Marker.USE_INSTANT_DROP)

                visited[new_state] = new_queue
                next_frontier.append((new_state, new_queue))

                if resting:
                    placements.add(new_state, new_queue)

        frontier = next_frontier

    if not placements:
        placements.add(initial_state, IMMOBILE_QUEUE)

    logger.debug(
        f"[Search] {data.tetromino.value} from {initial_state.as_tuple()}: "
        f"visited={len(visited)}, placements={len(placements)}, "
        f"extreme_gravity={extreme_gravity}"
    )
    return placements
