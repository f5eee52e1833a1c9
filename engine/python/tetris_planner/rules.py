"""SRS (Super Rotation System) wall kick resolution.

A rotation first turns the cells around the shape's pivot, then tries the
kick offsets of the transition's row in table order. The first offset that
gives a valid state wins; if none does, the rotation is blocked.
"""

from typing import List, Optional, Tuple

from tetris_planner.geometry import Coords, State, is_valid_state, rotate_cells
from tetris_planner.piece import KickTable, PieceData


def wrap(value: int, low: int, high: int) -> int:
    """Wrap value into the half-open range [low, high)."""
    return low + (value - low) % (high - low)


def kick_index(data: PieceData, from_rotation: int, direction: int) -> int:
    """Get the kick table row for a rotation transition.

    For 90 degree turns the row is from_rotation * 2, minus one when turning
    counter-clockwise. For 180 degree turns the row is from_rotation. Both
    are wrapped into the row count of the table they index. Shifted SRS
    pieces use the rotation after the turn in place of from_rotation.

    Args:
        data: Piece shape data providing the tables
        from_rotation: Rotation index before the turn
        direction: -1, 1 or 2

    Returns:
        Row index in [0, len(table))
    """
    if data.shifted_srs:
        from_rotation = wrap(from_rotation + direction, 0, 4)

    if direction == 2:
        return wrap(from_rotation, 0, len(data.wall_kicks_180))

    index = from_rotation * 2
    if direction < 0:
        index -= 1
    return wrap(index, 0, len(data.wall_kicks))


def kick_table(data: PieceData, direction: int) -> KickTable:
    return data.wall_kicks_180 if direction == 2 else data.wall_kicks


def candidates(data: PieceData, index: int, direction: int) -> List[Tuple[int, int]]:
    """Get the ordered kick translations to try for a table row."""
    return list(kick_table(data, direction)[index])


def try_rotate(
    board, data: PieceData, cells: Coords, state: State, direction: int
) -> Optional[Tuple[Coords, State]]:
    """Attempt to rotate cells at a state with wall kicks.

    Args:
        board: Board providing bounds and occupancy
        data: Piece shape data (pivot convention and kick tables)
        cells: Cell offsets in the state's current orientation
        state: Position before the turn
        direction: -1 (CCW), 1 (CW) or 2 (180)

    Returns:
        (rotated_cells, kicked_state) if successful, None if the rotation
        is blocked. The input cells are never modified.
    """
    rotated = rotate_cells(cells, direction, data.kind)
    index = kick_index(data, state.rotation, direction)
    turned = state.rotated(direction)

    for dx, dy in candidates(data, index, direction):
        test_state = turned.moved(dx, dy)
        if is_valid_state(board, rotated, test_state):
            return rotated, test_state

    return None
