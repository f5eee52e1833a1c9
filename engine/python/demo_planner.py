#!/usr/bin/env python3
"""Demo script: enumerate placements and replay them with the actuator."""

import logging
import sys

from tetris_planner.actuator import Actuator, Action
from tetris_planner.config import PlannerConfig
from tetris_planner.env import GameEnv
from tetris_planner.policies import RandomPolicy, LowestPolicy
from tetris_planner.runner import Runner
from tetris_planner.search import search


def show_placements(config: PlannerConfig) -> None:
    """Print the placement set of the first piece."""
    env = GameEnv.from_config(config)
    env.reset(seed=config.seed or 42)
    piece = env.current_piece
    placements = search(env.board, piece.data, piece.cells, piece.state, env.extreme_gravity)

    print(f"\n{piece} on an empty board: {len(placements)} placements")
    for placement in placements:
        print(f"  {placement.state.as_tuple()}: {' '.join(placement.queue.to_list())}")


def replay_one(config: PlannerConfig) -> None:
    """Print the actions the actuator emits for one piece."""
    env = GameEnv.from_config(config)
    env.reset(seed=config.seed or 42)
    actuator = Actuator(env, RandomPolicy(seed=7))

    actions = []
    while True:
        action = actuator.advance()
        actions.append(action.value)
        if action == Action.LOCK:
            break
    print(f"\nTarget {actuator.target.state.as_tuple()}: {' '.join(actions)}")


def main():
    """Run planner demos."""
    config = PlannerConfig.from_env()
    logging.basicConfig(level=config.log_level)

    print("Tetris Planner Demo")
    print("=" * 60)

    if len(sys.argv) > 1 and sys.argv[1] == "benchmark":
        runner = Runner(config)
        for policy in (RandomPolicy(seed=42), LowestPolicy()):
            results = runner.run_benchmark(policy, num_episodes=5, max_pieces=100)
            summary = results.get_summary()
            print(f"\n{policy.name}: avg pieces {summary['avg_pieces']:.1f}, "
                  f"avg ticks/piece {summary['avg_ticks_per_piece']:.1f}")
    else:
        show_placements(config)
        replay_one(config)

        print("\nTry these commands:")
        print("  python demo_planner.py benchmark  - Run both policies for 5 episodes")
        print("  TETRIS_PLANNER_SPEED_LEVEL=20 python demo_planner.py  - Extreme gravity")


if __name__ == "__main__":
    main()
