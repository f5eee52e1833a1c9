"""Planner configuration.

Defaults live on the dataclass; entry points may override them from
TETRIS_PLANNER_* environment variables.
"""

import os
from dataclasses import dataclass, fields
from typing import Optional

ENV_PREFIX = "TETRIS_PLANNER_"


@dataclass
class PlannerConfig:
    """Settings shared by the runner, demo and server."""
    move_time: float = 1.0          # Seconds between actuator ticks at 1x speed
    speed_level: int = 1
    extreme_gravity_level: int = 20  # Speed level from which gravity is instant
    gravity_ticks: int = 0          # Natural gravity: 1 row every N ticks (0 = off)
    board_width: int = 10
    board_height: int = 20
    seed: Optional[int] = None
    shifted_srs: bool = False       # Kick rows from the rotation after the turn
    log_level: str = "INFO"

    @property
    def extreme_gravity(self) -> bool:
        return self.speed_level >= self.extreme_gravity_level

    @classmethod
    def from_env(cls, environ=None) -> "PlannerConfig":
        """Build a config from environment variables.

        TETRIS_PLANNER_MOVE_TIME=0.2 sets move_time, and so on. Unset
        variables keep their defaults.

        Raises:
            ValueError: If a variable cannot be converted
        """
        if environ is None:
            environ = os.environ

        values = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            if f.name == "seed":
                values[f.name] = int(raw)
            elif f.name == "move_time":
                values[f.name] = float(raw)
            elif f.name == "log_level":
                values[f.name] = raw.upper()
            elif f.name == "shifted_srs":
                if raw.lower() not in ("0", "1", "true", "false"):
                    raise ValueError(f"Invalid boolean for {f.name}: {raw}")
                values[f.name] = raw.lower() in ("1", "true")
            else:
                values[f.name] = int(raw)
        return cls(**values)
