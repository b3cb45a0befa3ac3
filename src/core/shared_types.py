"""
Type definitions used across layers
"""

from __future__ import annotations

from enum import StrEnum


class Status(StrEnum):
    ONGOING = "ongoing"
    WHITE_WINS = "white_wins"
    BLACK_WINS = "black_wins"
    STALEMATE = "stalemate"

    @classmethod
    def win_for(cls, color: Color) -> Status:
        return cls.WHITE_WINS if color == Color.WHITE else cls.BLACK_WINS

    @property
    def is_over(self) -> bool:
        return self != Status.ONGOING


class EndReason(StrEnum):
    """Why a game left the ongoing status."""

    KING_CAPTURED = "king_captured"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    TIMEOUT = "timeout"


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> Color:
        return Color.BLACK if self == Color.WHITE else Color.WHITE


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"
