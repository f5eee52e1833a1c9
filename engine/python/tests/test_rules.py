"""Tests for wall kick resolution."""

from tetris_planner.board import Board
from tetris_planner.geometry import State, is_valid_state
from tetris_planner.piece import PIECES, Tetromino, get_piece_data
from tetris_planner.rules import candidates, kick_index, try_rotate, wrap


def test_wrap():
    """Test wrapping into a half-open range."""
    assert wrap(-1, 0, 8) == 7
    assert wrap(8, 0, 8) == 0
    assert wrap(5, 0, 4) == 1
    assert wrap(-9, 0, 4) == 3


def test_kick_index_rows():
    """Test each 90 degree transition maps onto its SRS row."""
    data = PIECES[Tetromino.T]
    expected = {
        (0, 1): 0,   # 0->R
        (1, -1): 1,  # R->0
        (1, 1): 2,   # R->2
        (2, -1): 3,  # 2->R
        (2, 1): 4,   # 2->L
        (3, -1): 5,  # L->2
        (3, 1): 6,   # L->0
        (0, -1): 7,  # 0->L
    }
    for (from_rotation, direction), row in expected.items():
        assert kick_index(data, from_rotation, direction) == row


def test_kick_index_180_rows():
    """Test 180 degree transitions index by starting rotation."""
    data = PIECES[Tetromino.J]
    for from_rotation in range(4):
        assert kick_index(data, from_rotation, 2) == from_rotation


def test_kick_index_always_in_range():
    """Test the row index never leaves the table, for every piece."""
    for data in PIECES.values():
        for from_rotation in range(-4, 8):
            for direction in (-1, 1):
                index = kick_index(data, from_rotation, direction)
                assert 0 <= index < len(data.wall_kicks)
            index = kick_index(data, from_rotation, 2)
            assert 0 <= index < len(data.wall_kicks_180)


def test_candidates_keep_table_order():
    """Test kick candidates come back in priority order, no offset first."""
    data = PIECES[Tetromino.I]
    assert candidates(data, 0, 1) == [(0, 0), (-2, 0), (1, 0), (-2, -1), (1, 2)]
    assert candidates(data, 0, 2)[0] == (0, 0)


def test_try_rotate_open_board():
    """Test an unobstructed rotation does not move the piece."""
    board = Board()
    data = PIECES[Tetromino.T]

    result = try_rotate(board, data, data.cells_for(0), State(4, 10, 0), 1)

    assert result is not None
    cells, state = result
    assert state == State(4, 10, 1)
    assert cells == data.cells_for(1)


def test_try_rotate_wall_kick():
    """Test rotating against the left wall kicks the piece right."""
    board = Board()
    data = PIECES[Tetromino.T]

    # T pointing right, flush with the left wall; turning back needs x - 1
    result = try_rotate(board, data, data.cells_for(1), State(0, 10, 1), -1)

    assert result is not None
    cells, state = result
    assert state == State(1, 10, 0), "R->0 should use the (1, 0) kick"
    assert is_valid_state(board, cells, state)


def test_try_rotate_blocked():
    """Test a fully blocked rotation fails and leaves the input alone."""
    board = Board.from_rows(["#.#", "..."], width=3, height=2)
    data = PIECES[Tetromino.T]
    cells = data.cells_for(0)

    for direction in (1, -1, 2):
        assert try_rotate(board, data, cells, State(1, 0, 0), direction) is None

    assert cells == data.cells_for(0), "Cells should not change on failure"


def test_try_rotate_i_kick_off_ceiling():
    """Test the I piece kicks down and left when rotating at the ceiling."""
    board = Board()
    data = PIECES[Tetromino.I]

    result = try_rotate(board, data, data.cells_for(0), State(4, 18, 0), 1)

    assert result is not None
    _, state = result
    assert state == State(2, 17, 1), "0->R should fall through to the (-2, -1) kick"


def test_kick_index_shifted_srs():
    """Test shifted SRS pieces look rows up from the rotation after the turn."""
    data = get_piece_data("T", shifted_srs=True)

    assert kick_index(data, 0, 1) == 2, "0->R uses the R->2 row"
    assert kick_index(data, 0, -1) == 5, "0->L uses the L->2 row"
    assert kick_index(data, 3, 1) == 0, "L->0 uses the 0->R row"
    assert kick_index(data, 1, -1) == 7, "R->0 uses the 0->L row"
    assert kick_index(data, 0, 2) == 2
    assert kick_index(data, 3, 2) == 1


def test_try_rotate_shifted_srs():
    """Test a shifted SRS I piece takes a different kick at the ceiling."""
    board = Board()
    data = get_piece_data(Tetromino.I, shifted_srs=True)

    result = try_rotate(board, data, data.cells_for(0), State(4, 18, 0), 1)

    assert result is not None
    _, state = result
    assert state == State(6, 17, 1), "R->2 row should fall through to the (2, -1) kick"
    assert not PIECES[Tetromino.I].shifted_srs, "Shared shape data stays standard"
