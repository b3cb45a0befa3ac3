"""
Representation of a single position of the game. The part that can be encoded in a FEN string.

Castling and en passant are not part of this game: their FEN fields are accepted on input (so any standard FEN can be loaded)
but ignored, and always written as "-".
"""

from dataclasses import dataclass
from typing import Self

from src.chess.pieces import FEN_TO_PIECE
from src.chess.square import BOARD_SIZE, FILES, RANKS
from src.core.exceptions import InvalidFENError
from src.core.shared_types import Color

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w - - 0 1"
CASTLING_CHARACTERS = "KQkq"


def is_valid_fen(fen: str) -> bool:
    """
    Check if given string follows proper FEN notation.
    """

    # there should be 6 parts to the string
    parts = fen.split(" ")
    if len(parts) != 6:
        return False

    position, color, castling, en_passant, half_move_counter, full_move_counter = parts
    return (
        is_valid_position(position)
        and is_valid_color_code(color)
        and is_valid_castling_rights(castling)
        and is_valid_en_passant(en_passant)
        and is_valid_move_counter(half_move_counter)
        and is_valid_move_counter(full_move_counter)
    )


def is_valid_position(position: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    rank_fens = position.split("/")
    if len(rank_fens) != BOARD_SIZE:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            # make sure every character is valid
            if character in RANKS:
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                # immediately invalidate if the character is anything else
                return False

        # make sure you are creating a correctly sized board
        if file_count != BOARD_SIZE:
            return False
    return True


def is_valid_color_code(color: str) -> bool:
    return color in {"w", "b"}


def is_valid_castling_rights(castling: str) -> bool:
    """Either '-' or a subset of KQkq in that order."""
    if castling == "-":
        return True
    remaining = CASTLING_CHARACTERS
    for character in castling:
        idx = remaining.find(character)
        if idx == -1:
            return False
        remaining = remaining[idx + 1 :]
    return bool(castling)


def is_valid_en_passant(en_passant: str) -> bool:
    """Valid en passant square encoding should be a square that exists on the board or a '-'"""
    return (en_passant == "-") or is_valid_square(en_passant)


def is_valid_square(square: str) -> bool:
    """Valid square should be a letter for the file + a number for the rank"""
    if len(square) != 2:
        return False
    file_char, rank_char = square[0], square[1]
    return file_char in FILES and rank_char in RANKS


def is_valid_move_counter(counter: str) -> bool:
    return counter.isascii() and counter.isdigit()


@dataclass
class FENState:
    """
    Data that can be constructed from a FEN string.
    ----

    <board position string><active color><castling rights><en passant square><# half move clock><number turns played>

    * The string to describe the board position is described in the Board class
    * The active color is either "w" or "b"
    * Castling rights and en passant square: always "-" here
    * The half move clock counts the number of moves made since the last pawn move or capture (kept for information only)
    * The number of turns starts at 1 and increments after every move black makes.

    ex) The starting position is written as
    rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w - - 0 1
    """

    position: str
    color_to_move: Color
    half_move_clock: int = 0
    num_turns: int = 1

    @classmethod
    def from_fen(cls, fen: str) -> Self:
        """Parse the FEN into data"""

        # raise an exception if invalid FEN:
        if not is_valid_fen(fen):
            raise InvalidFENError(f"Cannot interpret supplied string as FEN: {fen}")

        position, active_color, _, _, half_move_clock, num_turns = fen.split(" ")
        color_to_move = Color.WHITE if active_color == "w" else Color.BLACK
        return cls(position, color_to_move, int(half_move_clock), int(num_turns))

    def to_fen(self) -> str:
        """reverse operation: write a FEN from the given data"""
        active_color = "w" if self.color_to_move == Color.WHITE else "b"
        return f"{self.position} {active_color} - - {self.half_move_clock} {self.num_turns}"

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_FEN)
