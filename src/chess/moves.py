"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the movement rule for each piece type.
A rule answers: "could the piece on `from_square` reach `to_square`, given how the board looks?"
The same rules also decide which squares a piece attacks (a king is attacked when an enemy piece could move onto it).

Legality (not leaving your own king in check) is checked later, see legality.py
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from src.chess.pieces import Piece
from src.chess.square import ALL_SQUARES, Square
from src.core.shared_types import Color, PieceType


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def piece(self, square: Square) -> Optional[Piece]: ...
    def is_empty(self, square: Square) -> bool: ...


Vector = tuple[int, int]


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_square: Square
    to_square: Square

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface:
        ---
        One of the standard chess notations for moves

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "g1f3": the knight jumps from g1 to f3
        """
        from_sq = Square.from_algebraic(uci[:2])
        to_sq = Square.from_algebraic(uci[2:4])
        return cls(from_sq, to_sq)

    def to_uci(self) -> str:
        """Convert into UCI notation"""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}"


# White moves UP the board (towards row 0), black moves DOWN
PAWN_DIRECTION: dict[Color, int] = {Color.WHITE: -1, Color.BLACK: 1}
PAWN_START_ROW: dict[Color, int] = {Color.WHITE: 6, Color.BLACK: 1}


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _delta(from_square: Square, to_square: Square) -> Vector:
    return to_square.row - from_square.row, to_square.col - from_square.col


def path_is_clear(board: Board, from_square: Square, to_square: Square) -> bool:
    """
    Walk from one square towards the other along a straight line or diagonal.
    True if every square strictly in between is empty (the end points themselves are not inspected).
    """
    d_row, d_col = _delta(from_square, to_square)
    step_row, step_col = _sign(d_row), _sign(d_col)
    row, col = from_square.row + step_row, from_square.col + step_col
    while (row, col) != (to_square.row, to_square.col):
        if not board.is_empty(Square(row, col)):
            return False
        row += step_row
        col += step_col
    return True


# --- MOVEMENT RULES ---
def is_pawn_move(board: Board, from_square: Square, to_square: Square) -> bool:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - It can move by two in their first move (so when on their starting row), if both squares are empty
    - takes diagonally, and only when there is an enemy piece to take

    NOTE: No en passant, no promotion.
    """
    pawn = board.piece(from_square)
    assert pawn is not None
    direction = PAWN_DIRECTION[pawn.color]
    d_row, d_col = _delta(from_square, to_square)
    target = board.piece(to_square)

    if d_col == 0 and target is None:
        if d_row == direction:
            return True
        if d_row == 2 * direction and from_square.row == PAWN_START_ROW[pawn.color]:
            return path_is_clear(board, from_square, to_square)
        return False

    is_enemy_piece = target is not None and target.color != pawn.color
    return abs(d_col) == 1 and d_row == direction and is_enemy_piece


def is_knight_move(board: Board, from_square: Square, to_square: Square) -> bool:
    """Knights jump such that (|delta_row|, |delta_col|) is (2, 1) or (1, 2). Nothing blocks them."""
    d_row, d_col = _delta(from_square, to_square)
    return (abs(d_row), abs(d_col)) in ((2, 1), (1, 2))


def is_bishop_move(board: Board, from_square: Square, to_square: Square) -> bool:
    """Bishops move diagonally: |delta_row| = |delta_col|, through empty squares only"""
    d_row, d_col = _delta(from_square, to_square)
    if abs(d_row) != abs(d_col) or d_row == 0:
        return False
    return path_is_clear(board, from_square, to_square)


def is_rook_move(board: Board, from_square: Square, to_square: Square) -> bool:
    """Rooks move either horizontally or vertically, through empty squares only"""
    d_row, d_col = _delta(from_square, to_square)
    if (d_row == 0) == (d_col == 0):
        return False
    return path_is_clear(board, from_square, to_square)


def is_queen_move(board: Board, from_square: Square, to_square: Square) -> bool:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return is_bishop_move(board, from_square, to_square) or is_rook_move(
        board, from_square, to_square
    )


def is_king_move(board: Board, from_square: Square, to_square: Square) -> bool:
    """
    The king can move by a single square at the time. No castling.

    NOTE: staying put also satisfies the distance check; the caller never offers the origin square as a destination.
    """
    d_row, d_col = _delta(from_square, to_square)
    return abs(d_row) <= 1 and abs(d_col) <= 1


# -- STRATEGY PATTERN: MOVEMENT RULES ---
GeometryFn = Callable[[Board, Square, Square], bool]
MOVEMENT_RULES: dict[PieceType, GeometryFn] = {
    PieceType.PAWN: is_pawn_move,
    PieceType.KNIGHT: is_knight_move,
    PieceType.BISHOP: is_bishop_move,
    PieceType.ROOK: is_rook_move,
    PieceType.QUEEN: is_queen_move,
    PieceType.KING: is_king_move,
}


def is_geometric_move(board: Board, from_square: Square, to_square: Square) -> bool:
    """
    Piece movement rules, ignoring whether your own king ends up in check.
    ---
    * there must be a piece on the starting square
    * the origin square itself is never a destination
    * you cannot land on one of your own pieces
    * the piece type's movement rule must allow it
    """
    piece = board.piece(from_square)
    if piece is None or from_square == to_square:
        return False

    target = board.piece(to_square)
    if target is not None and target.color == piece.color:
        return False

    movement_rule = MOVEMENT_RULES[piece.type]
    return movement_rule(board, from_square, to_square)


def candidate_destinations(board: Board, square: Square) -> list[Square]:
    """All squares (in row-major order) the piece on `square` could reach by its movement rule alone."""
    return [
        to_square
        for to_square in ALL_SQUARES
        if is_geometric_move(board, square, to_square)
    ]
