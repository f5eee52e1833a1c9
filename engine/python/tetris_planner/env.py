"""Game environment: the live board and piece the actuator drives.

This is the collaborator side of the planner. It owns the board, spawns
pieces from a 7-bag and exposes the atomic primitives a move queue is
replayed through. The primitives use the same geometry and kick resolver
as the search, so replaying a queue reaches exactly the planned state.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tetris_planner.board import Board
from tetris_planner.config import PlannerConfig
from tetris_planner.geometry import drop_to_rest, is_valid_state
from tetris_planner.piece import Piece, Tetromino, spawn_position
from tetris_planner.rng import SevenBagRNG
from tetris_planner.rules import try_rotate

logger = logging.getLogger(__name__)

# Cell value written on lock, per piece type
PIECE_VALUES = {"I": 1, "O": 2, "T": 3, "S": 4, "Z": 5, "J": 6, "L": 7}


@dataclass
class Observation:
    """Snapshot of the environment."""
    schema_version: str
    tick: int
    board: Board
    current: Piece
    next_queue: List[Tetromino]
    pieces_locked: int
    top_out: bool
    seed: int
    speed_level: int
    extreme_gravity: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert observation to dictionary for serialization."""
        return {
            "schema_version": self.schema_version,
            "tick": self.tick,
            "board": {
                "w": self.board.width,
                "h": self.board.height,
                "cells": self.board.to_list(),
                "column_heights": self.board.get_column_heights(),
            },
            "current": {
                "type": self.current.type.value,
                "x": self.current.x,
                "y": self.current.y,
                "rot": self.current.rotation,
                "cells": [list(c) for c in self.current.absolute_cells()],
            },
            "next_queue": [t.value for t in self.next_queue],
            "episode": {
                "pieces_locked": self.pieces_locked,
                "top_out": self.top_out,
                "seed": self.seed,
            },
            "config": {
                "speed_level": self.speed_level,
                "extreme_gravity": self.extreme_gravity,
            },
        }


class GameEnv:
    """Board plus live piece, driven one primitive at a time."""

    SCHEMA_VERSION = "p1.0.0"

    def __init__(
        self,
        width: int = Board.WIDTH,
        height: int = Board.HEIGHT,
        speed_level: int = 1,
        extreme_gravity_level: int = 20,
        gravity_ticks: int = 0,
        next_queue_size: int = 3,
        shifted_srs: bool = False,
    ):
        """Initialize the environment.

        Args:
            width: Board width
            height: Board height
            speed_level: Current speed level
            extreme_gravity_level: Speed level from which gravity is instant
            gravity_ticks: Natural gravity drops one row every N ticks (0 = off)
            next_queue_size: Number of next pieces to show
            shifted_srs: Spawn pieces that use shifted SRS kick rows
        """
        self.width = width
        self.height = height
        self.speed_level = speed_level
        self.extreme_gravity_level = extreme_gravity_level
        self.gravity_ticks = gravity_ticks
        self.next_queue_size = next_queue_size
        self.shifted_srs = shifted_srs

        self.board = Board(width, height)
        self.rng: Optional[SevenBagRNG] = None
        self.current_piece: Optional[Piece] = None

        self.tick = 0
        self.pieces_locked = 0
        self.done = False
        self.seed = 0
        self.gravity_counter = 0

    @classmethod
    def from_config(cls, config: PlannerConfig) -> "GameEnv":
        return cls(
            width=config.board_width,
            height=config.board_height,
            speed_level=config.speed_level,
            extreme_gravity_level=config.extreme_gravity_level,
            gravity_ticks=config.gravity_ticks,
            shifted_srs=config.shifted_srs,
        )

    @property
    def extreme_gravity(self) -> bool:
        """True when every move is followed by a full descent."""
        return self.speed_level >= self.extreme_gravity_level

    def reset(self, seed: int, board: Optional[Board] = None) -> Observation:
        """Reset the environment with a new seed.

        Args:
            seed: Random seed for the piece sequence
            board: Starting board (default: empty)

        Returns:
            Initial observation
        """
        self.seed = seed
        self.rng = SevenBagRNG(seed)
        self.board = board.copy() if board is not None else Board(self.width, self.height)
        self.tick = 0
        self.pieces_locked = 0
        self.done = False
        self.gravity_counter = 0

        self.spawn()
        return self.observe()

    def spawn(self, piece_type=None) -> Piece:
        """Spawn a piece at the top of the board.

        Args:
            piece_type: Piece to spawn (default: next piece from the bag)

        Returns:
            The new live piece. The game is over if it does not fit.
        """
        if piece_type is None:
            piece_type = self.rng.next()
        x, y = spawn_position(self.board.width, self.board.height)
        self.current_piece = Piece(piece_type, x, y, 0, self.shifted_srs)
        self.gravity_counter = 0

        if not is_valid_state(self.board, self.current_piece.cells, self.current_piece.state):
            self.done = True
            logger.info(f"[Env] Top out: {self.current_piece} does not fit")
        elif self.extreme_gravity:
            self._settle()
        return self.current_piece

    def slide_left(self) -> bool:
        return self._try_move(-1, 0)

    def slide_right(self) -> bool:
        return self._try_move(1, 0)

    def soft_drop_step(self) -> bool:
        return self._try_move(0, -1)

    def rotate(self, direction: int) -> bool:
        """Try to rotate the live piece with wall kicks.

        Args:
            direction: -1 (CCW), 1 (CW) or 2 (180)

        Returns:
            True if the rotation succeeded
        """
        piece = self.current_piece
        if piece is None or self.done:
            return False

        result = try_rotate(self.board, piece.data, piece.cells, piece.state, direction)
        if result is None:
            return False
        cells, state = result
        piece.place(state, cells)
        if self.extreme_gravity:
            self._settle()
        return True

    def instant_drop(self) -> bool:
        """Drop the live piece to rest without locking it.

        Returns:
            True if the piece moved
        """
        if self.current_piece is None or self.done:
            return False
        start_y = self.current_piece.y
        self._settle()
        return self.current_piece.y != start_y

    def lock(self) -> bool:
        """Drop the live piece to rest, write it to the board and spawn the next.

        Returns:
            True if a piece was locked
        """
        piece = self.current_piece
        if piece is None or self.done:
            return False

        self._settle()
        self.board.lock_cells(piece.absolute_cells(), PIECE_VALUES[piece.type.value])
        self.pieces_locked += 1
        logger.debug(f"[Env] Locked {piece}")

        self.spawn()
        return True

    def perform(self, action: str) -> bool:
        """Apply one primitive by name (for manual control).

        Args:
            action: LEFT, RIGHT, SOFT, CW, CCW, 180, INSTANT or LOCK

        Returns:
            True if the primitive changed the piece

        Raises:
            ValueError: If the action name is unknown
        """
        if action == "LEFT":
            return self.slide_left()
        elif action == "RIGHT":
            return self.slide_right()
        elif action == "SOFT":
            return self.soft_drop_step()
        elif action == "CW":
            return self.rotate(1)
        elif action == "CCW":
            return self.rotate(-1)
        elif action == "180":
            return self.rotate(2)
        elif action == "INSTANT":
            return self.instant_drop()
        elif action == "LOCK":
            return self.lock()
        raise ValueError(f"Invalid action: {action}")

    def apply_gravity(self) -> bool:
        """Advance the clock one tick and apply natural gravity.

        Returns:
            True if gravity moved the piece this tick
        """
        self.tick += 1
        if self.gravity_ticks <= 0 or self.current_piece is None or self.done:
            return False

        self.gravity_counter += 1
        if self.gravity_counter < self.gravity_ticks:
            return False
        self.gravity_counter = 0
        return self.soft_drop_step()

    def observe(self) -> Observation:
        return Observation(
            schema_version=self.SCHEMA_VERSION,
            tick=self.tick,
            board=self.board.copy(),
            current=self.current_piece.copy(),
            next_queue=self.rng.peek(self.next_queue_size) if self.rng else [],
            pieces_locked=self.pieces_locked,
            top_out=self.done,
            seed=self.seed,
            speed_level=self.speed_level,
            extreme_gravity=self.extreme_gravity,
        )

    def _try_move(self, dx: int, dy: int) -> bool:
        piece = self.current_piece
        if piece is None or self.done:
            return False

        new_state = piece.state.moved(dx, dy)
        if not is_valid_state(self.board, piece.cells, new_state):
            return False
        piece.place(new_state, piece.cells)
        if self.extreme_gravity:
            self._settle()
        return True

    def _settle(self) -> None:
        piece = self.current_piece
        piece.place(drop_to_rest(self.board, piece.cells, piece.state), piece.cells)
