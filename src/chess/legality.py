"""
Legal moves, check detection and end-of-game classification.

A legal move is one that follows the movement rules (see moves.py) AND does not leave your own king in check.
"""

from enum import StrEnum
from typing import Optional

from src.chess.board import Board
from src.chess.moves import Move, candidate_destinations, is_geometric_move
from src.chess.square import Square
from src.core.shared_types import Color, EndReason, Status


class TerminalState(StrEnum):
    NONE = "none"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"


def is_in_check(board: Board, color: Color) -> bool:
    """
    Is the king of `color` attacked by any of the opponent's pieces?

    Attacks use the movement rules only (the opponent does not need to care about its own king to give check).
    A board without that king is treated as "not in check".
    """
    king_square = board.find_king(color)
    if king_square is None:
        return False

    return any(
        is_geometric_move(board, attacker_square, king_square)
        for attacker_square in board.locate_color(color.opponent)
    )


def _is_putting_yourself_in_check(board: Board, move: Move) -> bool:
    """Return True if the move puts (or leaves) you in check

    plan:
    1. Copy the board
    2. make the candidate move
    3. determine if king is in check on the new board
    """
    moving_piece = board.piece(move.from_square)
    assert moving_piece is not None
    scratch = board.copy()
    scratch.move_piece(move)
    return is_in_check(scratch, moving_piece.color)


def legal_destinations(board: Board, square: Square) -> list[Square]:
    """Legal destinations of the piece on `square`, in row-major order. Empty when the square is empty."""
    return [
        to_square
        for to_square in candidate_destinations(board, square)
        if not _is_putting_yourself_in_check(board, Move(square, to_square))
    ]


def legal_moves(board: Board, square: Square) -> set[Square]:
    return set(legal_destinations(board, square))


def legal_moves_for_color(board: Board, color: Color) -> list[Move]:
    """
    Every legal move of a player.
    ---
    Enumeration order is deterministic: origins row-major, then destinations row-major.
    """
    return [
        Move(from_square, to_square)
        for from_square in board.locate_color(color)
        for to_square in legal_destinations(board, from_square)
    ]


def has_legal_move(board: Board, color: Color) -> bool:
    """Stops at the first piece that can move"""
    return any(
        legal_destinations(board, from_square)
        for from_square in board.locate_color(color)
    )


def checkmate_or_stalemate(board: Board, color: Color) -> TerminalState:
    """No legal move left: checkmate when in check, stalemate otherwise."""
    if has_legal_move(board, color):
        return TerminalState.NONE
    if is_in_check(board, color):
        return TerminalState.CHECKMATE
    return TerminalState.STALEMATE


def missing_king(board: Board) -> Optional[Color]:
    """The color whose king has disappeared from the board (white is checked first)."""
    for color in (Color.WHITE, Color.BLACK):
        if not board.has_king(color):
            return color
    return None


def evaluate_terminal_status(
    board: Board, color_to_move: Color
) -> tuple[Status, Optional[EndReason]]:
    """
    Checks, in this order, whether the game has ended
    ----

    1. A king is gone from the board --> the other side wins right away
    2. The side to move has no legal move --> checkmate (opponent wins) or stalemate (draw)
    """
    color_without_king = missing_king(board)
    if color_without_king is not None:
        return Status.win_for(color_without_king.opponent), EndReason.KING_CAPTURED

    terminal_state = checkmate_or_stalemate(board, color_to_move)
    if terminal_state == TerminalState.CHECKMATE:
        return Status.win_for(color_to_move.opponent), EndReason.CHECKMATE
    if terminal_state == TerminalState.STALEMATE:
        return Status.STALEMATE, EndReason.STALEMATE
    return Status.ONGOING, None
