"""
FastAPI web application for the chess battle.

The browser board is a thin renderer: it asks which squares to highlight, submits moves, and polls the game state
(board rows, status, move list, clocks). Engines answer on their own after a short "thinking" delay.

Architecture notes:
- Sync endpoints: FastAPI runs them in a thread pool. Each match serializes its own mutations.
- Every GameError is turned into a JSON error response here, never anywhere deeper.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from uuid import UUID

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.api.models import (
    CreateGameRequest,
    DeleteGameRequest,
    EngineMoveRequest,
    EngineMoveResponse,
    GameControlRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
)
from src.core.config import Settings, get_settings
from src.core.exceptions import (
    GameError,
    GameStateError,
    NotYourTurnError,
    RepositoryError,
)
from src.core.shared_types import Color
from src.db.database import make_engine, make_scoped_session
from src.db.repository import GameRepository, InMemoryGameRepository
from src.db.sql_repository import SQLGameRepository
from src.services.chess_service import ChessService

_log = logging.getLogger(__name__)

IN_MEMORY_DATABASE = "memory"

ERROR_STATUS_CODES: dict[type[GameError], int] = {
    RepositoryError: status.HTTP_404_NOT_FOUND,
    GameStateError: status.HTTP_409_CONFLICT,
    NotYourTurnError: status.HTTP_409_CONFLICT,
}


def build_repository(settings: Settings) -> GameRepository:
    if settings.database_url == IN_MEMORY_DATABASE:
        return InMemoryGameRepository()
    engine = make_engine(settings.database_url)
    return SQLGameRepository(make_scoped_session(engine))


def create_app(service: Optional[ChessService] = None) -> FastAPI:
    settings = service.settings if service else get_settings()
    logging.basicConfig(level=settings.log_level)
    chess_service = service or ChessService(build_repository(settings), settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        chess_service.shutdown()

    app = FastAPI(title="Chess Battle", version="1.0.0", lifespan=lifespan)
    app.state.chess_service = chess_service

    @app.exception_handler(GameError)
    async def handle_game_error(_: Request, exc: GameError) -> JSONResponse:
        status_code = next(
            (
                code
                for error_type, code in ERROR_STATUS_CODES.items()
                if isinstance(exc, error_type)
            ),
            status.HTTP_400_BAD_REQUEST,
        )
        _log.warning("Rejected request (%s): %s", type(exc).__name__, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    # ---------------------------------------------------------------------------
    # Routes
    # ---------------------------------------------------------------------------

    @app.post("/games", response_model=GameResponse, status_code=201)
    def create_game(request: CreateGameRequest) -> GameResponse:
        return chess_service.create_new_game(request)

    @app.get("/games/{game_id}", response_model=GameResponse)
    def get_game(game_id: UUID) -> GameResponse:
        return chess_service.get_game_state(GetGameRequest(game_id=game_id))

    @app.get("/games/{game_id}/legal-moves", response_model=LegalMovesResponse)
    def legal_moves(game_id: UUID, square: str) -> LegalMovesResponse:
        return chess_service.legal_moves(
            LegalMovesRequest(game_id=game_id, square=square)
        )

    @app.post("/games/{game_id}/moves", response_model=MoveResponse)
    def make_move(game_id: UUID, from_square: str, to_square: str) -> MoveResponse:
        return chess_service.make_move(
            MoveRequest(game_id=game_id, from_square=from_square, to_square=to_square)
        )

    @app.get("/games/{game_id}/engine-move", response_model=EngineMoveResponse)
    def engine_move(game_id: UUID, color: Optional[Color] = None) -> EngineMoveResponse:
        return chess_service.engine_move(EngineMoveRequest(game_id=game_id, color=color))

    @app.post("/games/{game_id}/start", response_model=GameResponse)
    def start_game(game_id: UUID) -> GameResponse:
        return chess_service.start_game(GameControlRequest(game_id=game_id))

    @app.post("/games/{game_id}/pause", response_model=GameResponse)
    def pause_game(game_id: UUID) -> GameResponse:
        return chess_service.pause_game(GameControlRequest(game_id=game_id))

    @app.post("/games/{game_id}/reset", response_model=GameResponse)
    def reset_game(game_id: UUID) -> GameResponse:
        return chess_service.reset_game(GameControlRequest(game_id=game_id))

    @app.delete("/games/{game_id}", status_code=204)
    def delete_game(game_id: UUID) -> None:
        chess_service.delete_game(DeleteGameRequest(game_id=game_id))

    return app
