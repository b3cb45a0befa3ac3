"""
The "engine": a heuristic move selector, not a search.

Every legal move gets a score (captures first, then moves towards the center), the moves are sorted on that score,
and one of the top few gets picked at random. Weak on purpose: it plays plausible looking moves, nothing more.
"""

import random
from typing import Optional

from src.chess.board import Board
from src.chess.legality import legal_moves_for_color
from src.chess.moves import Move
from src.chess.square import Square
from src.core.exceptions import GameStateError
from src.core.shared_types import Color

CAPTURE_SCORE = 10
BOARD_CENTER = 3.5
MAX_CENTER_SCORE = 6
DEFAULT_TOP_N = 3


def center_control_score(square: Square) -> float:
    """Manhattan distance to the middle of the board, turned into a score: 5 on d4/e4/d5/e5 down to 0 near the edges"""
    center_distance = abs(square.row - BOARD_CENTER) + abs(square.col - BOARD_CENTER)
    return max(0, MAX_CENTER_SCORE - center_distance)


def score_move(board: Board, move: Move) -> float:
    """Any piece on the destination square of a legal move is an enemy piece: that is a capture."""
    capture = CAPTURE_SCORE if not board.is_empty(move.to_square) else 0
    return capture + center_control_score(move.to_square)


def rank_moves(board: Board, moves: list[Move]) -> list[Move]:
    """Best first. Python's sort is stable: equal scores keep their enumeration order."""
    return sorted(moves, key=lambda move: score_move(board, move), reverse=True)


def advantage_percentage(board: Board) -> float:
    """Share of the evaluation bar for white, clamped to [15, 85] so the loser is always visible"""
    return min(85, max(15, 50 + board.evaluate() * 10))


class HeuristicMoveSelector:
    """Picks uniformly among the `top_n` best scoring moves. Inject a seeded `random.Random` for reproducible games."""

    def __init__(
        self, rng: Optional[random.Random] = None, top_n: int = DEFAULT_TOP_N
    ) -> None:
        self.rng = rng or random.Random()
        self.top_n = top_n

    def select_move(self, board: Board, color: Color) -> Move:
        moves = legal_moves_for_color(board, color)
        if not moves:
            raise GameStateError(f"{color} has no legal move to select.")

        top_moves = rank_moves(board, moves)[: self.top_n]
        return top_moves[self.rng.randrange(len(top_moves))]
