"""FastAPI WebSocket server for the placement planner."""

import json
import random
import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from tetris_planner.actuator import Action, Actuator
from tetris_planner.config import PlannerConfig
from tetris_planner.env import GameEnv
from tetris_planner.policies import make_policy
from tetris_planner.search import search
from api.protocol import (
    HelloRequest,
    HelloResponse,
    ResetRequest,
    PlanRequest,
    StepRequest,
    AIPlayRequest,
    AIStopRequest,
    ObservationResponse,
    PlacementsResponse,
    ErrorResponse,
    ErrorCode,
    parse_message,
    to_dict,
)

# Configure logging
logging.basicConfig(level=PlannerConfig.from_env().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Tetris Planner API", version="0.1.0")

# Enable CORS for web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],  # Vite default ports
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class GameSession:
    """Manages a single game session."""

    def __init__(self, websocket: Optional[WebSocket], config: Optional[PlannerConfig] = None):
        self.config = config if config is not None else PlannerConfig.from_env()
        self.env: Optional[GameEnv] = None
        self.actuator: Optional[Actuator] = None
        self.initialized = False
        self.ai_playing = False
        self.ai_task: Optional[asyncio.Task] = None
        self.websocket = websocket

    def reset(self, seed: Optional[int] = None, speed_level: Optional[int] = None) -> ObservationResponse:
        """Reset the game environment.

        Args:
            seed: Random seed (generates one if None)
            speed_level: Speed level override (extreme gravity from level 20)

        Returns:
            Initial observation response
        """
        if seed is None:
            seed = self.config.seed if self.config.seed is not None else random.randint(0, 1_000_000)

        self.stop_ai()
        self.env = GameEnv.from_config(self.config)
        if speed_level is not None:
            self.env.speed_level = speed_level
        self.actuator = None

        obs = self.env.reset(seed)
        self.initialized = True

        return ObservationResponse(
            data=obs.to_dict(),
            done=obs.top_out,
            info={"event": "reset", "seed": seed},
        )

    def plan(self) -> PlacementsResponse:
        """Compute the placement set for the live piece.

        Raises:
            ValueError: If game not initialized
        """
        self._require_game()
        piece = self.env.current_piece
        placements = search(
            self.env.board, piece.data, piece.cells, piece.state, self.env.extreme_gravity
        )
        return PlacementsResponse(
            state={"x": piece.x, "y": piece.y, "rot": piece.rotation},
            extreme_gravity=self.env.extreme_gravity,
            placements=placements.to_list(),
        )

    def step(self, action: str) -> ObservationResponse:
        """Apply one manual primitive to the live piece.

        If the actuator has a plan, the manual input invalidates its queue
        and it replans from the piece's new state.

        Raises:
            ValueError: If game not initialized or action invalid
        """
        self._require_game()
        moved = self.env.perform(action)

        info = {"event": "step", "action": action, "moved": moved}
        if action == "LOCK" and self.actuator is not None:
            self.actuator.reset()
        elif moved and self.actuator is not None and not self.actuator.needs_target and not self.env.done:
            target = self.actuator.replan(self.env.current_piece.state, self.env.extreme_gravity)
            info["replanned"] = True
            info["target"] = target.to_dict()

        return ObservationResponse(
            data=self.env.observe().to_dict(),
            done=self.env.done,
            info=info,
        )

    def tick(self) -> ObservationResponse:
        """Advance the actuator by one tick, then apply natural gravity."""
        self._require_game()
        if self.actuator is None:
            self.actuator = Actuator(self.env)
        action = self.actuator.advance()
        info = {"event": "tick", "action": action.value}

        if action == Action.PLAN:
            info["target"] = self.actuator.target.to_dict()
        elif self.env.apply_gravity() and not self.actuator.needs_target and not self.env.done:
            self.actuator.gravity_replan(self.env.current_piece.state, self.env.extreme_gravity)
            info["replanned"] = True

        return ObservationResponse(
            data=self.env.observe().to_dict(),
            done=self.env.done,
            info=info,
        )

    def stop_ai(self) -> None:
        """Stop AI playback. The in-flight queue is simply abandoned."""
        self.ai_playing = False
        if self.ai_task and not self.ai_task.done():
            self.ai_task.cancel()

    def _require_game(self) -> None:
        if not self.initialized or self.env is None:
            raise ValueError("Game not initialized. Send reset first.")

    async def run_ai_playback(self, speed: float, max_pieces: int) -> None:
        """Tick the actuator in the background and stream observations.

        Args:
            speed: Playback speed multiplier (0.5 = slower, 2 = faster)
            max_pieces: Maximum number of pieces to lock
        """
        try:
            delay = self.config.move_time / speed
            start_pieces = self.env.pieces_locked

            logger.info(f"[AI Playback] Starting: policy={self.actuator.policy.name}, speed={speed}x, max_pieces={max_pieces}")

            while self.ai_playing and not self.env.done:
                if self.env.pieces_locked - start_pieces >= max_pieces:
                    break

                obs_response = self.tick()
                await self.websocket.send_text(json.dumps(to_dict(obs_response)))

                if obs_response.done:
                    logger.info(f"[AI Playback] Game ended: pieces={self.env.pieces_locked}")
                    break

                # Planning takes no visible time on the board
                if obs_response.info["action"] != Action.PLAN.value:
                    await asyncio.sleep(delay)

            self.ai_playing = False
            logger.info(f"[AI Playback] Ended: done={self.env.done}, pieces={self.env.pieces_locked}")

        except asyncio.CancelledError:
            logger.info(f"[AI Playback] Cancelled by user")
            self.ai_playing = False
            raise
        except Exception as e:
            logger.error(f"[AI Playback] Error: {e}", exc_info=True)
            self.ai_playing = False
            error = ErrorResponse(
                code=ErrorCode.INVALID_MESSAGE,
                message=f"AI playback error: {str(e)}",
            )
            await self.websocket.send_text(json.dumps(to_dict(error)))


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "tetris-planner-api", "version": "0.1.0"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


async def _send_error(websocket: WebSocket, code: str, message: str) -> None:
    error = ErrorResponse(code=code, message=message)
    await websocket.send_text(json.dumps(to_dict(error)))


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for game communication."""
    await websocket.accept()
    session = GameSession(websocket)

    try:
        while True:
            data = await websocket.receive_text()

            try:
                message = parse_message(json.loads(data))

                if isinstance(message, HelloRequest):
                    await websocket.send_text(json.dumps(to_dict(HelloResponse())))

                elif isinstance(message, ResetRequest):
                    obs_response = session.reset(message.seed, message.speed_level)
                    await websocket.send_text(json.dumps(to_dict(obs_response)))

                elif isinstance(message, PlanRequest):
                    try:
                        response = session.plan()
                        await websocket.send_text(json.dumps(to_dict(response)))
                    except ValueError as e:
                        await _send_error(websocket, ErrorCode.GAME_NOT_INITIALIZED, str(e))

                elif isinstance(message, StepRequest):
                    try:
                        obs_response = session.step(message.action)
                        await websocket.send_text(json.dumps(to_dict(obs_response)))
                    except ValueError as e:
                        await _send_error(websocket, ErrorCode.INVALID_ACTION, str(e))

                elif isinstance(message, AIPlayRequest):
                    logger.info(f"[WS] Received AI play request: policy={message.policy}, speed={message.speed}")
                    try:
                        policy = make_policy(message.policy, seed=message.seed)
                    except ValueError as e:
                        await _send_error(websocket, ErrorCode.INVALID_MESSAGE, str(e))
                        continue

                    # Initialize game if not started yet (takeover mode)
                    if not session.initialized:
                        obs_response = session.reset(message.seed)
                        await websocket.send_text(json.dumps(to_dict(obs_response)))

                    if session.env.done:
                        await _send_error(websocket, ErrorCode.GAME_OVER, "Game over. Send reset first.")
                        continue

                    session.stop_ai()
                    session.actuator = Actuator(session.env, policy)
                    session.ai_playing = True
                    session.ai_task = asyncio.create_task(
                        session.run_ai_playback(
                            speed=message.speed,
                            max_pieces=message.max_pieces or 1000,
                        )
                    )
                    logger.info(f"[WS] AI playback task created: {session.ai_task}")

                elif isinstance(message, AIStopRequest):
                    logger.info(f"[WS] Received AI stop request")
                    session.stop_ai()
                    await websocket.send_text(json.dumps({"type": "ai_stopped"}))

            except json.JSONDecodeError as e:
                await _send_error(websocket, ErrorCode.INVALID_MESSAGE, f"Invalid JSON: {str(e)}")

            except ValueError as e:
                await _send_error(websocket, ErrorCode.INVALID_MESSAGE, str(e))

    except WebSocketDisconnect:
        logger.info("Client disconnected")
        session.stop_ai()
    except Exception as e:
        logger.error(f"WebSocket error: {e}", exc_info=True)
        session.stop_ai()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
