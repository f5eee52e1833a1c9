"""Tests for the actuator state machine and queue replay."""

from collections import deque

import pytest

from tetris_planner.actuator import Action, Actuator
from tetris_planner.board import Board
from tetris_planner.env import GameEnv
from tetris_planner.geometry import State
from tetris_planner.moves import IMMOBILE_QUEUE, Marker, Move, MoveQueue, MoveQueueError
from tetris_planner.piece import Tetromino
from tetris_planner.policy import SelectionPolicy
from tetris_planner.search import search

WELL_ROWS = ["#########."] * 4


class FixedPolicy(SelectionPolicy):
    """Picks a given state when present, otherwise the first placement."""

    def __init__(self, state=None):
        super().__init__(name="Fixed")
        self.state = state

    def choose(self, placements):
        placement = placements.get(self.state) if self.state is not None else None
        return placement if placement is not None else next(iter(placements))


class RecordingEnv(GameEnv):
    """Environment that records failed primitives and the state at lock time."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.failures = []
        self.locked_states = []

    def _try_move(self, dx, dy):
        moved = super()._try_move(dx, dy)
        if not moved:
            self.failures.append(("move", dx, dy, self.current_piece.state))
        return moved

    def rotate(self, direction):
        rotated = super().rotate(direction)
        if not rotated:
            self.failures.append(("rotate", direction, self.current_piece.state))
        return rotated

    def lock(self):
        self._settle()
        self.locked_states.append(self.current_piece.state)
        return super().lock()


def make_env(piece_type=Tetromino.T, rows=None, speed_level=1):
    env = RecordingEnv(speed_level=speed_level)
    board = Board.from_rows(rows) if rows else None
    env.reset(seed=0, board=board)
    env.spawn(piece_type)
    return env


def run_until_lock(actuator, max_ticks=200):
    """Advance the actuator until it locks, returning the actions taken."""
    actions = []
    for _ in range(max_ticks):
        action = actuator.advance()
        actions.append(action)
        if action == Action.LOCK:
            return actions
    pytest.fail(f"No lock after {max_ticks} ticks: {actions}")


def load_queue(actuator, values):
    """Give the actuator a hand-written queue."""
    actuator.queue = deque(MoveQueue.from_list(values))
    actuator.needs_target = False


def test_straight_drop_actions():
    """Test a straight drop plays as plan, instant drop, lock."""
    env = make_env()
    actuator = Actuator(env, FixedPolicy(State(4, 0, 0)))

    actions = run_until_lock(actuator)

    assert actions == [Action.PLAN, Action.INSTANT_DROP, Action.LOCK]
    assert env.locked_states == [State(4, 0, 0)]
    assert env.failures == []
    assert actuator.needs_target, "Actuator should plan again after locking"


def test_actuator_one_action_per_tick():
    """Test a soft drop run without a marker is spread over several ticks."""
    env = make_env()
    actuator = Actuator(env, FixedPolicy())
    load_queue(actuator, ["SOFT", "SOFT", "RIGHT", "END"])

    actions = [actuator.advance() for _ in range(3)]

    assert actions == [Action.SOFT_DROP, Action.SOFT_DROP, Action.SLIDE_RIGHT]
    assert env.current_piece.state == State(5, 16, 0)
    assert actuator.advance() == Action.LOCK
    assert env.locked_states == [State(5, 0, 0)]


def test_actuator_drop_run_into_end():
    """Test a soft drop run ending the queue locks in the same tick."""
    env = make_env()
    actuator = Actuator(env, FixedPolicy())
    load_queue(actuator, ["SOFT", "SOFT", "END"])

    assert actuator.advance() == Action.LOCK
    assert env.pieces_locked == 1


@pytest.mark.parametrize("speed_level", [1, 20])
@pytest.mark.parametrize("piece_type", list(Tetromino))
def test_replay_reaches_every_placement(piece_type, speed_level):
    """Test replaying each queue locks the piece at exactly its target."""
    env = make_env(piece_type, WELL_ROWS, speed_level)
    piece = env.current_piece
    placements = search(env.board, piece.data, piece.cells, piece.state, env.extreme_gravity)

    for placement in placements:
        env = make_env(piece_type, WELL_ROWS, speed_level)
        actuator = Actuator(env, FixedPolicy(placement.state))

        actions = run_until_lock(actuator)

        assert env.failures == [], f"Blocked primitives replaying {placement.queue}"
        assert env.locked_states == [placement.state], f"Wrong lock for {placement.queue}"
        if Marker.USE_INSTANT_DROP in placement.queue.entries:
            assert Action.INSTANT_DROP in actions


def test_actuator_exhausted_queue():
    """Test a queue without END_OF_QUEUE is a format error."""
    env = make_env()
    actuator = Actuator(env, FixedPolicy())
    load_queue(actuator, ["LEFT"])

    assert actuator.advance() == Action.SLIDE_LEFT
    with pytest.raises(MoveQueueError):
        actuator.advance()


def test_actuator_exhausted_drop_run():
    """Test a queue ending in soft drops is a format error."""
    env = make_env()
    actuator = Actuator(env, FixedPolicy())
    load_queue(actuator, ["SOFT", "SOFT"])

    with pytest.raises(MoveQueueError):
        actuator.advance()


def test_actuator_stray_marker():
    """Test an instant drop marker not following a soft drop is rejected."""
    env = make_env()
    actuator = Actuator(env, FixedPolicy())
    load_queue(actuator, ["INSTANT_DROP", "END"])

    with pytest.raises(MoveQueueError):
        actuator.advance()


def test_actuator_entries_after_end():
    """Test END_OF_QUEUE must be the last entry."""
    env = make_env()
    actuator = Actuator(env, FixedPolicy())
    load_queue(actuator, ["END", "LEFT"])

    with pytest.raises(MoveQueueError):
        actuator.advance()
    assert env.pieces_locked == 0, "Nothing should lock on a broken queue"


def test_replan_keeps_reachable_target():
    """Test replanning after a nudge keeps the same target."""
    env = make_env()
    policy = FixedPolicy(State(4, 0, 0))
    actuator = Actuator(env, policy)
    actuator.advance()

    env.slide_left()
    target = actuator.replan(env.current_piece.state, env.extreme_gravity)

    assert target.state == State(4, 0, 0)
    assert policy.selections == 1, "Kept target should not consult the policy"
    run_until_lock(actuator)
    assert env.locked_states == [State(4, 0, 0)]
    assert env.failures == []


def test_replan_picks_new_target_when_blocked():
    """Test replanning asks the policy again when the target is gone."""
    env = make_env()
    policy = FixedPolicy(State(1, 0, 0))
    actuator = Actuator(env, policy)
    actuator.advance()
    assert actuator.target.state == State(1, 0, 0)

    env.board.set(1, 0, 1)
    target = actuator.replan(env.current_piece.state, env.extreme_gravity)

    assert target.state != State(1, 0, 0)
    assert policy.selections == 2
    run_until_lock(actuator)
    assert env.locked_states == [target.state]


def test_replan_clears_pending_descents():
    """Test a replan mid drop run starts from the new queue."""
    env = make_env()
    actuator = Actuator(env, FixedPolicy())
    load_queue(actuator, ["SOFT", "SOFT", "SOFT", "LEFT", "END"])
    actuator.advance()
    assert actuator.pending_descents == 2

    actuator.replan(env.current_piece.state, env.extreme_gravity)

    assert actuator.pending_descents == 0
    assert list(actuator.queue) == list(actuator.target.queue)


def test_actuator_reset():
    """Test reset drops the plan."""
    env = make_env()
    actuator = Actuator(env, FixedPolicy())
    actuator.advance()

    actuator.reset()

    assert actuator.needs_target
    assert actuator.target is None
    assert len(actuator.queue) == 0
    assert actuator.advance() == Action.PLAN


def test_gravity_replan_keeps_target():
    """Test a first gravity move replans toward the same target."""
    env = make_env()
    actuator = Actuator(env, FixedPolicy(State(4, 0, 0)))
    actuator.advance()

    env.soft_drop_step()
    target = actuator.gravity_replan(env.current_piece.state, env.extreme_gravity)

    assert target.state == State(4, 0, 0)
    assert target.queue.moves() == [Move.SOFT_DROP_ONE] * 17


def test_gravity_replan_repeated_state_locks():
    """Test gravity landing on an earlier state stops the plan and locks."""
    env = make_env()
    policy = FixedPolicy(State(1, 0, 0))
    actuator = Actuator(env, policy)
    actuator.advance()

    env.soft_drop_step()
    actuator.gravity_replan(env.current_piece.state, env.extreme_gravity)
    target = actuator.gravity_replan(env.current_piece.state, env.extreme_gravity)

    assert target.state == State(4, 0, 0), "Piece should drop straight down"
    assert target.queue == IMMOBILE_QUEUE
    assert policy.selections == 1
    assert actuator.advance() == Action.LOCK
    assert env.locked_states == [State(4, 0, 0)]
    assert env.failures == []


def test_gravity_states_reset_per_piece():
    """Test the gravity history starts empty for every piece."""
    env = make_env()
    actuator = Actuator(env, FixedPolicy(State(4, 0, 0)))
    actuator.advance()
    env.soft_drop_step()
    actuator.gravity_replan(env.current_piece.state, env.extreme_gravity)
    run_until_lock(actuator)

    assert actuator.advance() == Action.PLAN
    assert actuator.gravity_states == set()
