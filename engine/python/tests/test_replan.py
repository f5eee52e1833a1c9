"""Tests for target selection after a replan."""

from tetris_planner.geometry import State
from tetris_planner.moves import MoveQueue, Move
from tetris_planner.policies import LowestPolicy
from tetris_planner.replan import choose_target
from tetris_planner.search import PlacementSet


def make_placements():
    placements = PlacementSet()
    placements.add(State(3, 0, 0), MoveQueue((Move.SHIFT_LEFT, Move.SOFT_DROP_ONE)))
    placements.add(State(5, 2, 1), MoveQueue((Move.ROTATE_CW,)))
    placements.add(State(0, 1, 3), MoveQueue((Move.ROTATE_CCW, Move.SHIFT_LEFT)))
    return placements


def test_choose_target_without_previous():
    """Test the policy decides when there is no previous target."""
    policy = LowestPolicy()

    target = choose_target(make_placements(), None, policy)

    assert target.state == State(3, 0, 0)
    assert policy.selections == 1


def test_choose_target_keeps_previous():
    """Test a reachable previous target wins over the policy."""
    policy = LowestPolicy()
    placements = make_placements()

    target = choose_target(placements, State(5, 2, 1), policy)

    assert target is placements.get(State(5, 2, 1))
    assert target.queue.is_terminated(), "Queue comes from the fresh set"
    assert policy.selections == 0


def test_choose_target_previous_gone():
    """Test the policy decides when the previous target is unreachable."""
    policy = LowestPolicy()

    target = choose_target(make_placements(), State(7, 0, 2), policy)

    assert target.state == State(3, 0, 0)
    assert policy.selections == 1
