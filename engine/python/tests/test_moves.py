"""Tests for moves and the move queue format."""

import pytest

from tetris_planner.moves import (
    EMPTY_QUEUE,
    IMMOBILE_QUEUE,
    SEARCH_ORDER,
    Marker,
    Move,
    MoveQueue,
    MoveQueueError,
)


def test_search_order():
    """Test moves are enumerated in the fixed search order."""
    assert SEARCH_ORDER == (
        Move.SHIFT_LEFT,
        Move.SHIFT_RIGHT,
        Move.SOFT_DROP_ONE,
        Move.ROTATE_CW,
        Move.ROTATE_CCW,
        Move.ROTATE_180,
    )


def test_move_deltas():
    """Test each move's canonical state delta."""
    assert (Move.SHIFT_LEFT.dx, Move.SHIFT_LEFT.dy) == (-1, 0)
    assert (Move.SHIFT_RIGHT.dx, Move.SHIFT_RIGHT.dy) == (1, 0)
    assert (Move.SOFT_DROP_ONE.dx, Move.SOFT_DROP_ONE.dy) == (0, -1)
    assert Move.ROTATE_CW.rotation == 1
    assert Move.ROTATE_CCW.rotation == -1
    assert Move.ROTATE_180.rotation == 2
    assert not Move.SOFT_DROP_ONE.is_rotation
    assert Move.ROTATE_180.is_rotation


def test_move_inverse():
    """Test inverse moves."""
    assert Move.SHIFT_LEFT.inverse is Move.SHIFT_RIGHT
    assert Move.SHIFT_RIGHT.inverse is Move.SHIFT_LEFT
    assert Move.ROTATE_CW.inverse is Move.ROTATE_CCW
    assert Move.ROTATE_180.inverse is Move.ROTATE_180
    assert Move.SOFT_DROP_ONE.inverse is None, "Soft drop cannot be undone"


def test_queue_extended_is_a_copy():
    """Test extending returns a new queue and leaves the original alone."""
    queue = EMPTY_QUEUE.extended(Move.SHIFT_LEFT)
    longer = queue.extended(Move.SOFT_DROP_ONE)

    assert list(queue) == [Move.SHIFT_LEFT]
    assert list(longer) == [Move.SHIFT_LEFT, Move.SOFT_DROP_ONE]
    assert len(EMPTY_QUEUE) == 0


def test_queue_terminated_once():
    """Test END_OF_QUEUE is appended exactly once."""
    queue = MoveQueue((Move.SHIFT_LEFT,)).terminated()

    assert queue.is_terminated()
    assert queue.terminated() == queue
    assert list(queue).count(Marker.END_OF_QUEUE) == 1
    assert IMMOBILE_QUEUE.is_terminated()


def test_queue_cannot_extend_past_end():
    """Test a terminated queue refuses more entries."""
    with pytest.raises(MoveQueueError):
        IMMOBILE_QUEUE.extended(Move.SHIFT_LEFT)


def test_queue_last_move_skips_markers():
    """Test last_move ignores markers."""
    queue = MoveQueue(
        (Move.ROTATE_CW, Move.SOFT_DROP_ONE, Move.SOFT_DROP_ONE, Move.SOFT_DROP_ONE,
         Marker.USE_INSTANT_DROP)
    )
    assert queue.last_move() is Move.SOFT_DROP_ONE
    assert EMPTY_QUEUE.last_move() is None
    assert queue.moves() == [Move.ROTATE_CW] + [Move.SOFT_DROP_ONE] * 3


def test_queue_trailing_drops():
    """Test counting the soft drop run at the end of a queue."""
    assert EMPTY_QUEUE.trailing_drops() == 0
    assert MoveQueue((Move.SOFT_DROP_ONE, Move.SHIFT_LEFT)).trailing_drops() == 0
    assert MoveQueue(
        (Move.SOFT_DROP_ONE, Move.SHIFT_LEFT, Move.SOFT_DROP_ONE, Move.SOFT_DROP_ONE)
    ).trailing_drops() == 2


def test_queue_serialization():
    """Test exporting and importing entry strings."""
    queue = MoveQueue((Move.ROTATE_180, Move.SOFT_DROP_ONE, Marker.END_OF_QUEUE))

    assert queue.to_list() == ["180", "SOFT", "END"]
    assert MoveQueue.from_list(["180", "SOFT", "END"]) == queue


def test_queue_from_list_invalid():
    """Test unknown entries are rejected."""
    with pytest.raises(ValueError):
        MoveQueue.from_list(["LEFT", "HOLD"])
