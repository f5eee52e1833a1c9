"""Tetromino definitions and the live piece.

Each tetromino is defined by its spawn cells, its pivot convention and its
wall kick tables. Cells for other rotations are derived by rotation, so
the orientation of a piece always agrees with the geometry used by the
placement search.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Tuple

from tetris_planner import srs_data
from tetris_planner.geometry import Coords, ShapeKind, State, rotate_cells

# Type alias for a kick table: rows of (dx, dy) translations
KickTable = List[List[Tuple[int, int]]]


class Tetromino(str, Enum):
    """The seven standard tetrominoes."""
    I = "I"
    O = "O"
    T = "T"
    J = "J"
    L = "L"
    S = "S"
    Z = "Z"


@dataclass(frozen=True)
class PieceData:
    """Immutable shape data for one tetromino."""
    tetromino: Tetromino
    cells: Tuple[Tuple[int, int], ...]
    kind: ShapeKind
    wall_kicks: KickTable = field(repr=False)
    wall_kicks_180: KickTable = field(repr=False)
    # Kick rows are looked up from the target rotation instead of the start
    shifted_srs: bool = False

    def cells_for(self, rotation: int) -> Coords:
        """Get the cell offsets for a rotation index.

        Args:
            rotation: Rotation index (wrapped into 0-3)

        Returns:
            Cell offsets obtained by rotating the spawn cells clockwise
        """
        cells = list(self.cells)
        for _ in range(rotation % 4):
            cells = rotate_cells(cells, 1, self.kind)
        return cells


def _build_pieces() -> Dict[Tetromino, PieceData]:
    pieces = {}
    for tetromino in Tetromino:
        if tetromino in (Tetromino.I, Tetromino.O):
            kind = ShapeKind.CENTERED_ON_HALF_CELL
        else:
            kind = ShapeKind.CENTERED_ON_CELL

        if tetromino == Tetromino.I:
            kicks, kicks_180 = srs_data.WALL_KICKS_I, srs_data.WALL_KICKS_180
        elif tetromino == Tetromino.O:
            kicks, kicks_180 = srs_data.WALL_KICKS_O, srs_data.WALL_KICKS_180_O
        else:
            kicks, kicks_180 = srs_data.WALL_KICKS_JLSTZ, srs_data.WALL_KICKS_180

        pieces[tetromino] = PieceData(
            tetromino=tetromino,
            cells=tuple(srs_data.CELLS[tetromino.value]),
            kind=kind,
            wall_kicks=kicks,
            wall_kicks_180=kicks_180,
        )
    return pieces


PIECES: Dict[Tetromino, PieceData] = _build_pieces()


def get_piece_data(piece_type, shifted_srs: bool = False) -> PieceData:
    """Look up shape data by tetromino or its letter.

    Args:
        piece_type: Tetromino or its letter
        shifted_srs: Look kick rows up from the rotation after the turn

    Raises:
        ValueError: If the piece type is unknown
    """
    try:
        data = PIECES[Tetromino(piece_type)]
    except ValueError:
        raise ValueError(f"Invalid piece type: {piece_type}") from None
    return replace(data, shifted_srs=True) if shifted_srs else data


class Piece:
    """The live piece: shape data plus its current position and rotation."""

    def __init__(
        self, piece_type, x: int = 0, y: int = 0, rotation: int = 0, shifted_srs: bool = False
    ):
        """Initialize a piece.

        Args:
            piece_type: Tetromino or one of "I", "O", "T", "S", "Z", "J", "L"
            x: Board x-coordinate of the origin
            y: Board y-coordinate of the origin (0 at the floor)
            rotation: Rotation index (0-3)
            shifted_srs: Use shifted SRS kick rows
        """
        self.data = get_piece_data(piece_type, shifted_srs)
        self.x = x
        self.y = y
        self.rotation = rotation % 4
        self.cells: Coords = self.data.cells_for(self.rotation)

    @property
    def type(self) -> Tetromino:
        return self.data.tetromino

    @property
    def state(self) -> State:
        return State(self.x, self.y, self.rotation)

    def place(self, state: State, cells: Coords) -> None:
        """Move the piece to a state with the matching cells."""
        self.x = state.x
        self.y = state.y
        self.rotation = state.rotation
        self.cells = list(cells)

    def absolute_cells(self) -> List[Tuple[int, int]]:
        """Get board coordinates of all 4 cells."""
        return [(self.x + dx, self.y + dy) for dx, dy in self.cells]

    def copy(self) -> "Piece":
        piece = Piece(self.type, self.x, self.y, self.rotation, self.data.shifted_srs)
        piece.cells = list(self.cells)
        return piece

    def __repr__(self) -> str:
        return f"Piece({self.type.value}, x={self.x}, y={self.y}, rot={self.rotation})"


def spawn_position(width: int, height: int) -> Tuple[int, int]:
    """Get the spawn origin for a board size.

    Pieces spawn horizontally centred with their top row on the top row
    of the board (spawn cells reach at most one row above the origin).

    Args:
        width: Board width
        height: Board height

    Returns:
        (x, y) spawn coordinates
    """
    return (width // 2 - 1, height - 2)
