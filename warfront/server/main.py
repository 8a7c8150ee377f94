"""FastAPI server for Warfront.

Provides HTTP endpoints to create and inspect games and a WebSocket per
player session for readiness, command submission and state broadcasts.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from ..engine.errors import NoStartingRegion
from ..utils.config import GameConfig
from .schemas.requests import CreateGameRequest
from .schemas.responses import CreateGameResponse, GameStateResponse, HealthResponse
from .session import GameSessionManager

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_app(sessions: GameSessionManager | None = None) -> FastAPI:
    """Build the application around a session manager.

    Args:
        sessions: Session manager to serve (a new one configured from the
            environment by default)

    Returns:
        Configured FastAPI app
    """
    sessions = sessions or GameSessionManager(GameConfig.from_env())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager for startup/shutdown."""
        logger.info("Warfront server starting...")
        yield
        logger.info("Warfront server shutting down...")
        await app.state.sessions.cleanup_all()

    app = FastAPI(
        title="Warfront API",
        description="Turn-based territory conquest server",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.sessions = sessions

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ============================================
    # API ENDPOINTS
    # ============================================

    @app.get("/api", response_model=HealthResponse)
    async def api_root(request: Request):
        """API root endpoint - server health check."""
        return HealthResponse(
            service="Warfront",
            status="operational",
            activeGames=len(request.app.state.sessions.sessions),
        )

    @app.post("/api/games", response_model=CreateGameResponse)
    async def create_game(body: CreateGameRequest, request: Request):
        """Create a new game on a freshly generated map.

        Example:
            POST /api/games
            {"seed": 42, "mapWidth": 12, "mapHeight": 12, "turnTime": 20}
        """
        try:
            session = request.app.state.sessions.create_session(
                seed=body.seed,
                map_width=body.mapWidth,
                map_height=body.mapHeight,
                turn_time=body.turnTime,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return CreateGameResponse(
            gameId=session.id, seed=session.game.config.seed, state=session.get_state()
        )

    @app.get("/api/games/{game_id}/state", response_model=GameStateResponse)
    async def get_game_state(game_id: str, request: Request):
        """Get current game state and the last turn's events."""
        session = request.app.state.sessions.get(game_id)
        if not session:
            raise HTTPException(status_code=404, detail="Game not found")

        return GameStateResponse(
            gameId=game_id,
            turn=session.game.turn,
            phase=session.phase,
            state=session.get_state(),
            events=session.get_last_turn_events(),
        )

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str, request: Request):
        """Delete a game session."""
        if await request.app.state.sessions.delete(game_id):
            return {"message": f"Game {game_id} deleted"}
        raise HTTPException(status_code=404, detail="Game not found")

    # ============================================
    # WEBSOCKET ENDPOINT
    # ============================================

    @app.websocket("/ws/games/{game_id}")
    async def websocket_endpoint(websocket: WebSocket, game_id: str):
        """One player session.

        Clients send:
        - {"type": "ready"}
        - {"type": "commands", "commands": [[origin, [target, ...]], ...]}
        - {"type": "ping"}

        Clients receive:
        - playerId: Their assigned id (once, on connect)
        - state: Full snapshot, after each resolution and on player join/leave
        - turnStarted: A turn opened, with turnTime in milliseconds
        - requestCommands: The turn timer expired, submit now
        - accepted / rejected: Outcome of a submission
        - error / pong
        """
        session = websocket.app.state.sessions.get(game_id)
        if not session:
            await websocket.close(code=1008, reason="Game not found")
            return

        await websocket.accept()
        try:
            player_id = await session.join(websocket)
        except NoStartingRegion:
            await websocket.send_json({"type": "error", "error": "Game is full"})
            await websocket.close(code=1013, reason="Game is full")
            return

        try:
            while True:
                data = await websocket.receive_json()
                await session.handle_message(player_id, data)

        except WebSocketDisconnect:
            logger.info(f"Player {player_id} disconnected from game {game_id}")
        except Exception as e:
            logger.error(f"WebSocket error in game {game_id}: {e}", exc_info=True)
        finally:
            await session.leave(player_id)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, log_level="info")
