"""Cell rotation and collision geometry.

Board coordinates are y-up: row 0 is the floor and a soft drop moves a
piece to y - 1. Cells are (x, y) offsets from the piece origin; the
rotation of a state is already baked into the cells passed around here.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

# Type alias for piece cell offsets
Coords = List[Tuple[int, int]]

# Clockwise 90 degree rotation matrix as (m00, m01, m10, m11), y-up.
# Multiplying by the direction gives the counter-clockwise matrix.
ROTATION_MATRIX = (0, 1, -1, 0)


class ShapeKind(Enum):
    """Rotation pivot convention of a shape."""
    CENTERED_ON_CELL = "cell"            # T, J, L, S, Z
    CENTERED_ON_HALF_CELL = "half_cell"  # I, O


@dataclass(frozen=True)
class State:
    """Position and rotation index of a piece on the board."""
    x: int
    y: int
    rotation: int = 0

    def __post_init__(self):
        object.__setattr__(self, "rotation", self.rotation % 4)

    def moved(self, dx: int, dy: int) -> "State":
        return State(self.x + dx, self.y + dy, self.rotation)

    def rotated(self, direction: int) -> "State":
        return State(self.x, self.y, self.rotation + direction)

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.x, self.y, self.rotation)


def _rotate_once(cells: Sequence[Tuple[int, int]], direction: int, kind: ShapeKind) -> Coords:
    m00, m01, m10, m11 = ROTATION_MATRIX
    rotated = []
    for cx, cy in cells:
        if kind == ShapeKind.CENTERED_ON_HALF_CELL:
            x = cx - 0.5
            y = cy - 0.5
            nx = math.ceil(x * m00 * direction + y * m01 * direction)
            ny = math.ceil(x * m10 * direction + y * m11 * direction)
        else:
            nx = round(cx * m00 * direction + cy * m01 * direction)
            ny = round(cx * m10 * direction + cy * m11 * direction)
        rotated.append((int(nx), int(ny)))
    return rotated


def rotate_cells(cells: Sequence[Tuple[int, int]], direction: int, kind: ShapeKind) -> Coords:
    """Rotate cell offsets around the shape's pivot.

    Half-cell shapes (I, O) pivot on the grid intersection at (0.5, 0.5):
    the cells are shifted by -0.5, rotated, and rounded up. Cell shapes
    pivot on the origin cell and are rounded to nearest.

    Args:
        cells: Cell offsets in the current orientation
        direction: -1 (counter-clockwise), 1 (clockwise) or 2 (180)
        kind: Pivot convention of the shape

    Returns:
        New list of rotated cell offsets (input is not modified)
    """
    if direction == 2:
        return _rotate_once(_rotate_once(cells, 1, kind), 1, kind)
    if direction not in (-1, 1):
        raise ValueError(f"Invalid rotation direction: {direction}")
    return _rotate_once(cells, direction, kind)


def is_valid_state(board, cells: Sequence[Tuple[int, int]], state: State) -> bool:
    """Check that every cell fits inside the board and is unoccupied.

    Args:
        board: Board providing bounds and occupancy
        cells: Cell offsets, already in the state's orientation
        state: Position to test

    Returns:
        True if the piece fits at the state
    """
    bounds = board.bounds
    for dx, dy in cells:
        x = state.x + dx
        y = state.y + dy
        if not bounds.contains(x, y) or board.is_occupied(x, y):
            return False
    return True


def is_resting(board, cells: Sequence[Tuple[int, int]], state: State) -> bool:
    """True if the piece cannot move one row down from this state."""
    return not is_valid_state(board, cells, state.moved(0, -1))


def drop_to_rest(board, cells: Sequence[Tuple[int, int]], state: State) -> State:
    """Lower a state row by row while the row below is still valid."""
    while is_valid_state(board, cells, state.moved(0, -1)):
        state = state.moved(0, -1)
    return state
