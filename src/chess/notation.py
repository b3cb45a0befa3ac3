"""
Human readable move notation.

Simplified algebraic notation (not full SAN):
* non-captures: piece letter + destination. Pawns omit the letter --> "e4", "Na3"
* captures: prefix + "x" + destination. The prefix is the origin file for pawns, the piece letter otherwise --> "exd5", "Nxe5"
* no disambiguation between two pieces reaching the same square, no check/mate suffixes.
"""

from typing import Iterable

from src.chess.board import Board
from src.chess.moves import Move
from src.core.shared_types import PieceType, Status

RESULT_TOKENS: dict[Status, str] = {
    Status.ONGOING: "*",
    Status.WHITE_WINS: "1-0",
    Status.BLACK_WINS: "0-1",
    Status.STALEMATE: "1/2-1/2",
}


def move_notation(board: Board, move: Move) -> str:
    """Notation of a move. NOTE: pass the board as it is BEFORE the move is made (needed to detect the capture)."""
    piece = board.piece(move.from_square)
    assert piece is not None, f"No piece to move on {move.from_square.to_algebraic()}"

    destination = move.to_square.to_algebraic()
    is_pawn = piece.type == PieceType.PAWN
    piece_letter = "" if is_pawn else piece.letter

    if board.is_empty(move.to_square):
        return f"{piece_letter}{destination}"

    prefix = move.from_square.file if is_pawn else piece_letter
    return f"{prefix}x{destination}"


def numbered_move_list(notations: Iterable[str]) -> list[str]:
    """Pair up white and black moves: ["1. e4 e5", "2. Nf3"]"""
    notations = list(notations)
    return [
        f"{idx // 2 + 1}. {' '.join(notations[idx : idx + 2])}"
        for idx in range(0, len(notations), 2)
    ]


def to_movetext(notations: Iterable[str], status: Status) -> str:
    """PGN-like movetext, finished by the result token: "1. e4 e5 2. Qh5 *" """
    return " ".join([*numbered_move_list(notations), RESULT_TOKENS[status]])
