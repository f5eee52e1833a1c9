"""Moves, queue markers and the move queue format.

A move queue records the path from a piece's current state to one
placement. It is built append-only by the search and consumed front to
back by the actuator. Besides moves it carries two markers:

- USE_INSTANT_DROP follows a run of soft drops that ends on a resting
  state, telling the replayer to drop to rest in one action.
- END_OF_QUEUE is always the last entry and means "lock here".
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union


class MoveQueueError(AssertionError):
    """A move queue broke its format (exhausted before END_OF_QUEUE, etc.)."""


class Move(Enum):
    """Atomic piece moves, in search enumeration order."""
    SHIFT_LEFT = "LEFT"
    SHIFT_RIGHT = "RIGHT"
    SOFT_DROP_ONE = "SOFT"
    ROTATE_CW = "CW"
    ROTATE_CCW = "CCW"
    ROTATE_180 = "180"

    @property
    def dx(self) -> int:
        return _DELTAS[self][0]

    @property
    def dy(self) -> int:
        return _DELTAS[self][1]

    @property
    def rotation(self) -> int:
        return _DELTAS[self][2]

    @property
    def is_rotation(self) -> bool:
        return self.rotation != 0

    @property
    def inverse(self) -> Optional["Move"]:
        """The move that undoes this one, if there is one."""
        return _INVERSES.get(self)


class Marker(Enum):
    """Replay hints stored alongside moves."""
    USE_INSTANT_DROP = "INSTANT_DROP"
    END_OF_QUEUE = "END"


QueueEntry = Union[Move, Marker]

# (dx, dy, rotation) per move
_DELTAS = {
    Move.SHIFT_LEFT: (-1, 0, 0),
    Move.SHIFT_RIGHT: (1, 0, 0),
    Move.SOFT_DROP_ONE: (0, -1, 0),
    Move.ROTATE_CW: (0, 0, 1),
    Move.ROTATE_CCW: (0, 0, -1),
    Move.ROTATE_180: (0, 0, 2),
}

_INVERSES = {
    Move.SHIFT_LEFT: Move.SHIFT_RIGHT,
    Move.SHIFT_RIGHT: Move.SHIFT_LEFT,
    Move.ROTATE_CW: Move.ROTATE_CCW,
    Move.ROTATE_CCW: Move.ROTATE_CW,
    Move.ROTATE_180: Move.ROTATE_180,
}

SEARCH_ORDER: Tuple[Move, ...] = tuple(Move)


@dataclass(frozen=True)
class MoveQueue:
    """Immutable ordered sequence of moves and markers."""
    entries: Tuple[QueueEntry, ...] = ()

    def extended(self, *entries: QueueEntry) -> "MoveQueue":
        """Return a new queue with entries appended.

        Raises:
            MoveQueueError: If the queue is already terminated
        """
        if self.is_terminated():
            raise MoveQueueError("Cannot extend a queue past END_OF_QUEUE")
        return MoveQueue(self.entries + tuple(entries))

    def terminated(self) -> "MoveQueue":
        """Return a copy ending with exactly one END_OF_QUEUE."""
        if self.is_terminated():
            return self
        return MoveQueue(self.entries + (Marker.END_OF_QUEUE,))

    def is_terminated(self) -> bool:
        return bool(self.entries) and self.entries[-1] is Marker.END_OF_QUEUE

    def moves(self) -> List[Move]:
        """Only the moves, markers left out."""
        return [entry for entry in self.entries if isinstance(entry, Move)]

    def last_move(self) -> Optional[Move]:
        """Most recently recorded move, skipping markers."""
        for entry in reversed(self.entries):
            if isinstance(entry, Move):
                return entry
        return None

    def trailing_drops(self) -> int:
        """Number of SOFT_DROP_ONE moves at the end of the queue."""
        count = 0
        for entry in reversed(self.entries):
            if entry is not Move.SOFT_DROP_ONE:
                break
            count += 1
        return count

    def to_list(self) -> List[str]:
        """Export entries as strings (for serialization)."""
        return [entry.value for entry in self.entries]

    @classmethod
    def from_list(cls, values: List[str]) -> "MoveQueue":
        """Create a queue from serialized entry strings.

        Raises:
            ValueError: If a value is not a known move or marker
        """
        entries = []
        for value in values:
            try:
                entries.append(Move(value))
            except ValueError:
                try:
                    entries.append(Marker(value))
                except ValueError:
                    raise ValueError(f"Invalid queue entry: {value}") from None
        return cls(tuple(entries))

    def __iter__(self) -> Iterator[QueueEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"MoveQueue([{', '.join(self.to_list())}])"


EMPTY_QUEUE = MoveQueue()
IMMOBILE_QUEUE = MoveQueue((Marker.END_OF_QUEUE,))
