"""Collection of placement selection policies."""

from tetris_planner.policies.random_policy import RandomPolicy
from tetris_planner.policies.lowest_policy import LowestPolicy

__all__ = ["RandomPolicy", "LowestPolicy"]


def make_policy(name: str, seed=None):
    """Create a policy by name ("random" or "lowest").

    Raises:
        ValueError: If the name is unknown
    """
    if name.lower() == "random":
        return RandomPolicy(seed=seed)
    elif name.lower() == "lowest":
        return LowestPolicy()
    raise ValueError(f"Unknown policy type: {name}")
