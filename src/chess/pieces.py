"""Chess pieces, their FEN letters and their material value"""

from dataclasses import dataclass
from typing import Self

from src.core.exceptions import InvalidFENError
from src.core.shared_types import Color, PieceType

FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}

# the king is never traded, so it is left out of the material count
PIECE_POINTS: dict[PieceType, int] = {
    PieceType.PAWN: 1,
    PieceType.KNIGHT: 3,
    PieceType.BISHOP: 3,
    PieceType.ROOK: 5,
    PieceType.QUEEN: 9,
}


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color

    @classmethod
    def from_fen(cls, character: str) -> Self:
        """Upper case: white piece, lower case: black piece"""
        piece_type = FEN_TO_PIECE.get(character.lower())
        if piece_type is None:
            raise InvalidFENError(f"{character!r} is not a piece letter.")
        color = Color.WHITE if character.isupper() else Color.BLACK
        return cls(piece_type, color)

    def to_fen(self) -> str:
        letter = PIECE_TO_FEN[self.type]
        return letter.upper() if self.color == Color.WHITE else letter

    @property
    def points(self) -> int:
        return PIECE_POINTS.get(self.type, 0)

    @property
    def letter(self) -> str:
        """Upper case letter used in move notation, regardless of color (pawns included: 'P')"""
        return PIECE_TO_FEN[self.type].upper()
