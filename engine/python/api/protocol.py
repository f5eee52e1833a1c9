"""Protocol data classes for WebSocket communication."""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Literal
from enum import Enum


class MessageType(str, Enum):
    """WebSocket message types."""
    HELLO = "hello"
    RESET = "reset"
    PLAN = "plan"
    STEP = "step"
    AI_PLAY = "ai_play"
    AI_STOP = "ai_stop"
    OBS = "obs"
    PLACEMENTS = "placements"
    ERROR = "error"


@dataclass
class HelloRequest:
    """Client hello message."""
    type: Literal["hello"] = "hello"
    version: str = "p1.0.0"


@dataclass
class HelloResponse:
    """Server hello response."""
    type: Literal["hello"] = "hello"
    version: str = "p1.0.0"
    server: str = "tetris-planner-py"


@dataclass
class ResetRequest:
    """Request to reset the game."""
    seed: Optional[int] = None
    speed_level: Optional[int] = None
    type: Literal["reset"] = "reset"


@dataclass
class PlanRequest:
    """Request the placement set for the live piece."""
    type: Literal["plan"] = "plan"


@dataclass
class StepRequest:
    """Request to apply one primitive to the live piece."""
    action: str  # LEFT, RIGHT, SOFT, CW, CCW, 180, INSTANT, LOCK
    type: Literal["step"] = "step"


@dataclass
class AIPlayRequest:
    """Request to start the actuator playing."""
    policy: str = "random"  # "random" or "lowest"
    seed: Optional[int] = None
    max_pieces: Optional[int] = None
    speed: float = 1.0  # Playback speed multiplier (0.5 = half speed, 2.0 = double speed)
    type: Literal["ai_play"] = "ai_play"


@dataclass
class AIStopRequest:
    """Request to stop the actuator."""
    type: Literal["ai_stop"] = "ai_stop"


@dataclass
class ObservationResponse:
    """Game state observation response."""
    data: Dict[str, Any]  # Observation dict from Observation.to_dict()
    done: bool
    info: Dict[str, Any]
    type: Literal["obs"] = "obs"


@dataclass
class PlacementsResponse:
    """Placement set for the live piece."""
    state: Dict[str, int]
    extreme_gravity: bool
    placements: List[Dict[str, Any]]
    type: Literal["placements"] = "placements"


@dataclass
class ErrorResponse:
    """Error response."""
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    type: Literal["error"] = "error"


class ErrorCode:
    """Standard error codes."""
    INVALID_MESSAGE = "INVALID_MESSAGE"
    INVALID_ACTION = "INVALID_ACTION"
    GAME_NOT_INITIALIZED = "GAME_NOT_INITIALIZED"
    GAME_OVER = "GAME_OVER"


_REQUESTS = {
    MessageType.HELLO: HelloRequest,
    MessageType.RESET: ResetRequest,
    MessageType.PLAN: PlanRequest,
    MessageType.STEP: StepRequest,
    MessageType.AI_PLAY: AIPlayRequest,
    MessageType.AI_STOP: AIStopRequest,
}


def parse_message(data: Dict[str, Any]) -> Any:
    """Parse incoming WebSocket message.

    Args:
        data: JSON message dict

    Returns:
        Parsed message object

    Raises:
        ValueError: If the message type or its fields are invalid
    """
    msg_type = data.get("type")
    try:
        request_cls = _REQUESTS[MessageType(msg_type)]
    except (ValueError, KeyError):
        raise ValueError(f"Unknown message type: {msg_type}") from None

    try:
        return request_cls(**data)
    except TypeError as e:
        raise ValueError(f"Invalid {msg_type} message: {e}") from None


def to_dict(obj: Any) -> Dict[str, Any]:
    """Convert dataclass to dict for JSON serialization."""
    return asdict(obj)
