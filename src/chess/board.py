"""The Game board holds the `position` (in chess: the configuration of pieces on the board). It has no knowledge of the rules."""

from copy import deepcopy
from dataclasses import dataclass
from typing import Optional, Self

from src.chess.moves import Move
from src.chess.pieces import Piece
from src.chess.square import ALL_SQUARES, BOARD_SIZE, RANKS, Square
from src.core.exceptions import InvalidFENError
from src.core.shared_types import Color, PieceType

STARTING_POSITION = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


@dataclass
class Board:
    position: dict[Square, Piece]  # only occupied squares are stored

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using a given FEN string.

        That is, we supply the first part of the FEN string that denotes the board position
        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank (row 0), starting with rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank (row 7) are the white pieces.
        """
        fen_by_ranks = fen_str.split("/")
        if len(fen_by_ranks) != BOARD_SIZE:
            raise InvalidFENError(
                f"Expected {BOARD_SIZE} ranks in piece placement, got {len(fen_by_ranks)}: {fen_str!r}"
            )

        position: dict[Square, Piece] = {}
        # FEN string is read from top rank (8th) to bottom rank (1st), which matches the row index
        for row, fen_one_rank in enumerate(fen_by_ranks):
            col = 0
            for character in fen_one_rank:
                if character in RANKS:
                    # A number denotes the amount of empty squares after each other
                    col += int(character)
                    continue
                if character.lower() not in "pnbrqk" or col >= BOARD_SIZE:
                    raise InvalidFENError(
                        f"Cannot place {character!r} on rank {BOARD_SIZE - row}: {fen_str!r}"
                    )
                position[Square(row, col)] = Piece.from_fen(character)
                col += 1
            if col != BOARD_SIZE:
                raise InvalidFENError(
                    f"Rank {BOARD_SIZE - row} does not describe {BOARD_SIZE} squares: {fen_one_rank!r}"
                )
        return cls(position)

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION)

    @classmethod
    def empty(cls) -> Self:
        return cls({})

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(self._rank_to_fen(row) for row in range(BOARD_SIZE))

    def _rank_to_fen(self, row: int) -> str:
        """FEN string of a single rank"""
        fen_characters: list[str] = []
        empty_count = 0
        for col in range(BOARD_SIZE):
            piece = self.piece(Square(row, col))

            if piece is not None:
                if empty_count > 0:
                    fen_characters.append(str(empty_count))
                    empty_count = 0
                fen_characters.append(piece.to_fen())
            else:
                empty_count += 1

        # if the entire rank is empty, then we still place this number in the string
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def to_rows(self) -> list[list[str]]:
        """Rows of FEN letters ('' for an empty square), row 0 first. What a renderer needs to draw the board."""
        return [
            [
                piece.to_fen() if (piece := self.piece(Square(row, col))) else ""
                for col in range(BOARD_SIZE)
            ]
            for row in range(BOARD_SIZE)
        ]

    def copy(self) -> Self:
        """Scratch copy to simulate moves on."""
        return deepcopy(self)

    def piece(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def is_empty(self, square: Square) -> bool:
        return square not in self.position

    def place_piece(self, piece: Piece, square: Square) -> None:
        self.position[square] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        return self.position.pop(square, None)

    def locate_color(self, color: Color) -> list[Square]:
        """Squares holding a piece of the given color, in row-major order"""
        return sorted(
            square for square, piece in self.position.items() if piece.color == color
        )

    def find_king(self, color: Color) -> Optional[Square]:
        """First king of that color in row-major order. None if it has disappeared from the board."""
        return next(
            (
                square
                for square in ALL_SQUARES
                if (piece := self.piece(square)) is not None
                and piece.type == PieceType.KING
                and piece.color == color
            ),
            None,
        )

    def has_king(self, color: Color) -> bool:
        return self.find_king(color) is not None

    def move_piece(self, move: Move) -> Optional[Piece]:
        """Update the position on the board. Returns the piece that got captured (if any)."""
        piece_that_moved = self.position.pop(move.from_square)
        captured = self.position.get(move.to_square)
        self.position[move.to_square] = piece_that_moved
        return captured

    def count_material(self) -> dict[Color, int]:
        """Tally the points of material each player has on the board"""
        return {color: self._count_material_player(color) for color in Color}

    def evaluate(self) -> int:
        """Material balance: positive means white is ahead"""
        material = self.count_material()
        return material[Color.WHITE] - material[Color.BLACK]

    def _player_pieces(self, color: Color) -> list[Piece]:
        """find all pieces of a given color"""
        return [piece for piece in self.position.values() if piece.color == color]

    def _count_material_player(self, color: Color) -> int:
        """Tally the points of material for a specific player"""
        return sum([piece.points for piece in self._player_pieces(color)])
