"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.chess.fen import is_valid_fen, is_valid_square
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import Color, EndReason, Status


def _validate_square_name(value: str) -> str:
    if not is_valid_square(value):
        raise InvalidRequestError(f"Cannot interpret {value!r} as a valid square name.")
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    engine_colors: list[Color] = [Color.BLACK]
    starting_fen: Optional[str] = None

    @field_validator("starting_fen")
    @classmethod
    def validate_starting_fen(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value

        value = value.strip()
        if not is_valid_fen(value):
            raise InvalidRequestError(f"Cannot interpret {value!r} as a FEN string.")
        return value


class GetGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    square: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: str
    to_square: str

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class EngineMoveRequest(BaseModel):
    game_id: UUID
    color: Optional[Color] = None


class GameControlRequest(BaseModel):
    """start / pause / reset"""

    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


# --- RESPONSE MODELS ---
class ClockResponse(BaseModel):
    white_seconds: float
    black_seconds: float
    white_display: str
    black_display: str
    running: bool


class GameResponse(BaseModel):
    game_id: UUID
    fen_state: str
    starting_state: str
    board: list[list[str]]
    color_to_move: Color
    status: Status
    end_reason: Optional[EndReason]
    winner: Optional[Color]
    in_check: bool
    match_state: str
    engine_colors: list[Color]
    engine_thinking: bool
    last_move: Optional[str]
    move_history: list[str]
    move_list: list[str]
    movetext: str
    evaluation: int
    white_advantage: float
    clock: ClockResponse


class LegalMovesResponse(BaseModel):
    game_id: UUID
    square: str
    legal_moves: list[str]


class MoveResponse(BaseModel):
    game_id: UUID
    notation: str
    status: Status
    game: GameResponse


class EngineMoveResponse(BaseModel):
    game_id: UUID
    color: Color
    from_square: str
    to_square: str
    uci: str
