"""Board occupancy and bounds."""

from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple


@dataclass(frozen=True)
class Bounds:
    """Integer rectangle of playable cells."""
    x_min: int
    y_min: int
    width: int
    height: int

    @property
    def x_max(self) -> int:
        return self.x_min + self.width

    @property
    def y_max(self) -> int:
        return self.y_min + self.height

    def contains(self, x: int, y: int) -> bool:
        """Check if a cell lies inside the rectangle (max edges exclusive)."""
        return self.x_min <= x < self.x_max and self.y_min <= y < self.y_max


class Board:
    """Tetris board, y-up (row 0 is the floor)."""

    WIDTH = 10
    HEIGHT = 20

    def __init__(self, width: int = WIDTH, height: int = HEIGHT):
        """Initialize an empty board.

        Args:
            width: Number of columns
            height: Number of rows
        """
        self.width = width
        self.height = height
        self.bounds = Bounds(0, 0, width, height)
        # cells[y * width + x] represents the cell at (x, y)
        # 0 = empty, >0 = filled (piece type encoded)
        self.cells: List[int] = [0] * (width * height)

    def get(self, x: int, y: int) -> int:
        """Get cell value at (x, y); out of bounds is treated as solid."""
        if not self.bounds.contains(x, y):
            return 1
        return self.cells[y * self.width + x]

    def set(self, x: int, y: int, value: int) -> None:
        """Set cell value at (x, y). Out of bounds writes are ignored."""
        if self.bounds.contains(x, y):
            self.cells[y * self.width + x] = value

    def is_occupied(self, x: int, y: int) -> bool:
        return self.get(x, y) != 0

    def lock_cells(self, cells: Iterable[Tuple[int, int]], value: int = 1) -> None:
        """Write absolute cells onto the board.

        Args:
            cells: Board coordinates to fill
            value: Cell value to store
        """
        for x, y in cells:
            self.set(x, y, value)

    def get_column_height(self, x: int) -> int:
        """Get the height of a column (0 = empty column)."""
        for y in range(self.height - 1, -1, -1):
            if self.get(x, y) != 0:
                return y + 1
        return 0

    def get_column_heights(self) -> List[int]:
        return [self.get_column_height(x) for x in range(self.width)]

    def copy(self) -> "Board":
        new_board = Board(self.width, self.height)
        new_board.cells = self.cells.copy()
        return new_board

    def to_list(self) -> List[int]:
        """Export board as flat list (for serialization)."""
        return self.cells.copy()

    @classmethod
    def from_list(cls, cells: List[int], width: int = WIDTH, height: int = HEIGHT) -> "Board":
        """Create board from flat list.

        Raises:
            ValueError: If the list length does not match the board size
        """
        if len(cells) != width * height:
            raise ValueError(f"Expected {width * height} cells, got {len(cells)}")
        board = cls(width, height)
        board.cells = list(cells)
        return board

    @classmethod
    def from_rows(cls, rows: Sequence[str], width: int = WIDTH, height: int = HEIGHT) -> "Board":
        """Create board from ASCII rows, bottom-aligned.

        Rows are listed top first, like a picture of the board. "#" marks a
        filled cell, anything else is empty. Rows missing above the given
        ones are empty.

        Raises:
            ValueError: If the rows do not fit the board
        """
        if len(rows) > height:
            raise ValueError(f"Expected at most {height} rows, got {len(rows)}")
        board = cls(width, height)
        for i, row in enumerate(reversed(rows)):
            if len(row) != width:
                raise ValueError(f"Row {i} has {len(row)} columns, expected {width}")
            for x, ch in enumerate(row):
                if ch == "#":
                    board.set(x, i, 1)
        return board
