"""Unit tests for /src/chess/legality.py"""

from typing import Callable

import pytest

from src.chess.board import Board
from src.chess.legality import (
    TerminalState,
    checkmate_or_stalemate,
    evaluate_terminal_status,
    has_legal_move,
    is_in_check,
    legal_moves,
    legal_moves_for_color,
    missing_king,
)
from src.chess.moves import Move
from src.chess.pieces import Piece
from src.chess.square import ALL_SQUARES, Square
from src.core.shared_types import Color, EndReason, Status

BoardFactory = Callable[[dict[str, str]], Board]

# a few positions with some tension in them (pins, checks, pawns attacking kings)
POSITIONS = [
    "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR",
    "4k3/8/8/8/4r3/8/4B3/4K3",
    "r1bqkb1r/pppp1ppp/2n2n2/4p2Q/2B1P3/8/PPPP1PPP/RNB1K1NR",
    "4k3/3P4/8/8/8/8/8/4K3",
    "6k1/5ppp/8/8/8/8/8/R5K1",
    "8/8/3k4/8/1b6/8/3P4/4K3",
]


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


def mirror(board: Board) -> Board:
    """Flip the board top to bottom and swap the colors of all pieces"""
    mirrored = Board.empty()
    for square, piece in board.position.items():
        mirrored.place_piece(
            Piece(piece.type, piece.color.opponent), Square(7 - square.row, square.col)
        )
    return mirrored


# --- LEGAL MOVES ---
def test_pawn_e2_e4_is_legal() -> None:
    board = Board.starting_position()
    assert legal_moves(board, sq("e2")) == {sq("e3"), sq("e4")}


def test_knight_b1_a3_is_legal() -> None:
    assert sq("a3") in legal_moves(Board.starting_position(), sq("b1"))


def test_twenty_moves_in_starting_position() -> None:
    board = Board.starting_position()
    assert len(legal_moves_for_color(board, Color.WHITE)) == 20
    assert len(legal_moves_for_color(board, Color.BLACK)) == 20


def test_pinned_piece_cannot_move() -> None:
    """The bishop on e2 shields its king from the rook on e4"""
    board = Board.from_fen("4k3/8/8/8/4r3/8/4B3/4K3")
    assert legal_moves(board, sq("e2")) == set()


def test_pinned_piece_may_move_along_the_pin(board_from_pieces: BoardFactory) -> None:
    board = board_from_pieces({"e1": "K", "e2": "R", "e5": "r", "a8": "k"})
    assert legal_moves(board, sq("e2")) == {sq("e3"), sq("e4"), sq("e5")}


def test_king_cannot_walk_into_check(board_from_pieces: BoardFactory) -> None:
    board = board_from_pieces({"e1": "K", "d8": "r", "h8": "k"})
    king_moves = legal_moves(board, sq("e1"))
    assert sq("d1") not in king_moves
    assert sq("d2") not in king_moves
    assert king_moves == {sq("e2"), sq("f1"), sq("f2")}


def test_must_answer_a_check(board_from_pieces: BoardFactory) -> None:
    """In check from the rook: only moves that deal with it remain (block, capture or step aside)"""
    board = board_from_pieces({"e1": "K", "a2": "P", "g1": "N", "e8": "r", "a8": "k"})
    moves = {move.to_uci() for move in legal_moves_for_color(board, Color.WHITE)}
    assert moves == {"e1d1", "e1d2", "e1f1", "e1f2", "g1e2"}


def test_legal_moves_of_empty_square() -> None:
    assert legal_moves(Board.starting_position(), sq("e4")) == set()


def test_enumeration_order_is_row_major() -> None:
    moves = legal_moves_for_color(Board.starting_position(), Color.WHITE)
    assert moves[0] == Move(sq("a2"), sq("a4"))
    assert moves[-1] == Move(sq("g1"), sq("h3"))


@pytest.mark.parametrize("fen", POSITIONS)
def test_legal_moves_never_leave_own_king_in_check(fen: str) -> None:
    board = Board.from_fen(fen)
    for color in Color:
        for move in legal_moves_for_color(board, color):
            scratch = board.copy()
            scratch.move_piece(move)
            assert not is_in_check(scratch, color)


@pytest.mark.parametrize("fen", POSITIONS)
def test_legal_moves_never_capture_own_pieces(fen: str) -> None:
    board = Board.from_fen(fen)
    for square in ALL_SQUARES:
        piece = board.piece(square)
        if piece is None:
            continue
        for destination in legal_moves(board, square):
            target = board.piece(destination)
            assert target is None or target.color != piece.color


def test_legal_moves_do_not_change_the_board() -> None:
    board = Board.from_fen(POSITIONS[2])
    legal_moves_for_color(board, Color.WHITE)
    assert board.to_fen() == POSITIONS[2]


# --- CHECK ---
def test_no_check_in_starting_position() -> None:
    board = Board.starting_position()
    assert not is_in_check(board, Color.WHITE)
    assert not is_in_check(board, Color.BLACK)


def test_check_by_rook_on_back_rank(board_from_pieces: BoardFactory) -> None:
    board = board_from_pieces({"g8": "k", "a8": "R", "g1": "K"})
    assert is_in_check(board, Color.BLACK)
    assert not is_in_check(board, Color.WHITE)


def test_rook_check_blocked(board_from_pieces: BoardFactory) -> None:
    board = board_from_pieces({"g8": "k", "a8": "R", "c8": "b", "g1": "K"})
    assert not is_in_check(board, Color.BLACK)


def test_check_by_pawn(board_from_pieces: BoardFactory) -> None:
    """A pawn gives check diagonally forward, never straight ahead"""
    board = board_from_pieces({"e8": "k", "d7": "P", "e1": "K"})
    assert is_in_check(board, Color.BLACK)

    board = board_from_pieces({"e8": "k", "e7": "P", "e1": "K"})
    assert not is_in_check(board, Color.BLACK)


def test_check_by_knight(board_from_pieces: BoardFactory) -> None:
    board = board_from_pieces({"e1": "K", "f3": "n", "e8": "k"})
    assert is_in_check(board, Color.WHITE)


def test_missing_king_is_not_in_check(board_from_pieces: BoardFactory) -> None:
    board = board_from_pieces({"e8": "k", "d1": "Q"})
    assert not is_in_check(board, Color.WHITE)


@pytest.mark.parametrize("fen", POSITIONS + ["8/8/3k4/2P5/8/8/8/4K3", "4k3/8/8/8/8/8/3p4/4K3"])
def test_check_is_symmetric_under_color_swap(fen: str) -> None:
    board = Board.from_fen(fen)
    mirrored = mirror(board)
    assert is_in_check(board, Color.WHITE) == is_in_check(mirrored, Color.BLACK)
    assert is_in_check(board, Color.BLACK) == is_in_check(mirrored, Color.WHITE)


# --- CHECKMATE / STALEMATE ---
def test_stalemate_with_kings_in_opposite_corners(board_from_pieces: BoardFactory) -> None:
    """Black king on a8 has no square left and is not attacked: stalemate"""
    board = board_from_pieces({"a8": "k", "h1": "K", "b6": "Q"})
    assert not is_in_check(board, Color.BLACK)
    assert not has_legal_move(board, Color.BLACK)
    assert checkmate_or_stalemate(board, Color.BLACK) == TerminalState.STALEMATE
    assert evaluate_terminal_status(board, Color.BLACK) == (Status.STALEMATE, EndReason.STALEMATE)


def test_back_rank_mate(board_from_pieces: BoardFactory) -> None:
    board = board_from_pieces({"g8": "k", "f7": "p", "g7": "p", "h7": "p", "a8": "R", "g1": "K"})
    assert checkmate_or_stalemate(board, Color.BLACK) == TerminalState.CHECKMATE
    assert evaluate_terminal_status(board, Color.BLACK) == (Status.WHITE_WINS, EndReason.CHECKMATE)


def test_check_that_can_be_answered_is_not_mate(board_from_pieces: BoardFactory) -> None:
    board = board_from_pieces({"g8": "k", "f7": "p", "h7": "p", "a8": "R", "g1": "K"})
    assert checkmate_or_stalemate(board, Color.BLACK) == TerminalState.NONE


def test_ongoing_game() -> None:
    assert evaluate_terminal_status(Board.starting_position(), Color.WHITE) == (Status.ONGOING, None)


# --- KING ABSENCE ---
def test_missing_king(board_from_pieces: BoardFactory) -> None:
    assert missing_king(Board.starting_position()) is None
    assert missing_king(board_from_pieces({"e1": "K"})) == Color.BLACK
    assert missing_king(board_from_pieces({"e8": "k"})) == Color.WHITE


def test_king_absence_comes_before_stalemate(board_from_pieces: BoardFactory) -> None:
    """Black has no king (and so no legal move either): that is a win for white, not a stalemate"""
    board = board_from_pieces({"e1": "K", "a7": "p", "a6": "P"})
    assert evaluate_terminal_status(board, Color.BLACK) == (Status.WHITE_WINS, EndReason.KING_CAPTURED)
