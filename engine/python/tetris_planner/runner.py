"""Runner framework for driving the actuator and collecting statistics."""

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from tetris_planner.actuator import Action, Actuator
from tetris_planner.config import PlannerConfig
from tetris_planner.env import GameEnv
from tetris_planner.policy import SelectionPolicy

logger = logging.getLogger(__name__)


@dataclass
class EpisodeStats:
    """Statistics for a single episode."""

    seed: int
    pieces_placed: int
    ticks: int
    actions: Dict[str, int]
    replans: int
    duration_seconds: float
    final_board_state: List[int]  # Flat array of board cells
    max_height: int
    top_out: bool

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "seed": self.seed,
            "pieces_placed": self.pieces_placed,
            "ticks": self.ticks,
            "actions": dict(self.actions),
            "replans": self.replans,
            "duration_seconds": self.duration_seconds,
            "max_height": self.max_height,
            "top_out": self.top_out,
        }


@dataclass
class BenchmarkResults:
    """Results from running a benchmark."""

    policy_name: str
    num_episodes: int
    episodes: List[EpisodeStats] = field(default_factory=list)

    def get_summary(self) -> dict:
        """Get summary statistics across all episodes."""
        if not self.episodes:
            return {}

        n = len(self.episodes)
        return {
            "policy_name": self.policy_name,
            "num_episodes": self.num_episodes,
            "avg_pieces": sum(e.pieces_placed for e in self.episodes) / n,
            "avg_ticks": sum(e.ticks for e in self.episodes) / n,
            "avg_ticks_per_piece": sum(e.ticks for e in self.episodes)
            / max(1, sum(e.pieces_placed for e in self.episodes)),
            "total_replans": sum(e.replans for e in self.episodes),
            "top_outs": sum(1 for e in self.episodes if e.top_out),
            "max_pieces": max(e.pieces_placed for e in self.episodes),
            "min_pieces": min(e.pieces_placed for e in self.episodes),
            "total_duration": sum(e.duration_seconds for e in self.episodes),
        }


class Runner:
    """Drives an environment and actuator tick by tick."""

    def __init__(self, config: Optional[PlannerConfig] = None, max_ticks_per_piece: int = 500):
        """Initialize runner.

        Args:
            config: Planner configuration (default: PlannerConfig())
            max_ticks_per_piece: Safety cap on ticks spent on one piece
        """
        self.config = config if config is not None else PlannerConfig()
        self.max_ticks_per_piece = max_ticks_per_piece

    def run_episode(
        self, policy: SelectionPolicy, seed: int, max_pieces: Optional[int] = None
    ) -> EpisodeStats:
        """Run a single episode.

        Each tick advances the actuator once, then applies natural gravity.
        When gravity moves the piece in the middle of a plan, the actuator
        replans from the piece's new state. A piece that gravity pulls back
        into a state it already passed is dropped and locked where it is.

        Args:
            policy: Selection policy for the actuator
            seed: Random seed for the piece sequence
            max_pieces: Maximum pieces to place (None = until top out)

        Returns:
            Episode statistics

        Raises:
            RuntimeError: If a piece is not locked within max_ticks_per_piece
        """
        env = GameEnv.from_config(self.config)
        env.reset(seed)
        actuator = Actuator(env, policy)

        actions: Dict[str, int] = {}
        replans = 0
        ticks_on_piece = 0
        start_time = time.time()

        while not env.done:
            if max_pieces is not None and env.pieces_locked >= max_pieces:
                break

            action = actuator.advance()
            actions[action.value] = actions.get(action.value, 0) + 1
            ticks_on_piece += 1

            if action == Action.LOCK:
                ticks_on_piece = 0
                continue
            if ticks_on_piece > self.max_ticks_per_piece:
                raise RuntimeError(
                    f"Piece not locked after {self.max_ticks_per_piece} ticks (seed={seed})"
                )

            if env.apply_gravity() and not actuator.needs_target:
                actuator.gravity_replan(env.current_piece.state, env.extreme_gravity)
                replans += 1

        duration = time.time() - start_time

        stats = EpisodeStats(
            seed=seed,
            pieces_placed=env.pieces_locked,
            ticks=sum(actions.values()),
            actions=actions,
            replans=replans,
            duration_seconds=duration,
            final_board_state=env.board.to_list(),
            max_height=max(env.board.get_column_heights()),
            top_out=env.done,
        )

        logger.info(
            f"Episode {seed}: {stats.pieces_placed} pieces, {stats.ticks} ticks, "
            f"{replans} replans, top_out={stats.top_out} ({duration:.2f}s)"
        )
        return stats

    def run_benchmark(
        self,
        policy: SelectionPolicy,
        num_episodes: int,
        seeds: Optional[List[int]] = None,
        max_pieces: Optional[int] = None,
    ) -> BenchmarkResults:
        """Run a benchmark with multiple episodes.

        Args:
            policy: Policy to benchmark
            num_episodes: Number of episodes to run
            seeds: List of seeds (if None, use 0, 1, 2, ...)
            max_pieces: Maximum pieces per episode (None = no limit)

        Returns:
            Benchmark results
        """
        if seeds is None:
            seeds = list(range(num_episodes))
        elif len(seeds) < num_episodes:
            raise ValueError(f"Need {num_episodes} seeds, got {len(seeds)}")

        logger.info(f"Running benchmark: {policy.name}, episodes={num_episodes}")

        results = BenchmarkResults(policy_name=policy.name, num_episodes=num_episodes)
        for seed in seeds[:num_episodes]:
            results.episodes.append(self.run_episode(policy, seed, max_pieces))

        summary = results.get_summary()
        logger.info(
            f"Benchmark complete: {policy.name}, avg pieces {summary['avg_pieces']:.1f}, "
            f"avg ticks/piece {summary['avg_ticks_per_piece']:.1f}, "
            f"replans {summary['total_replans']}"
        )
        return results
