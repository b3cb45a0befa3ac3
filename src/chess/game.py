"""
The Game class will be the entrypoint into the domain layer for the service layer.
It is responsible for orchestrating all the business logic required to play a turn of the board game -->
passes this information to the service layer, which can then pass it onwards to the API layer.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Self

from src.chess.board import Board
from src.chess.fen import FENState
from src.chess.legality import (
    evaluate_terminal_status,
    is_in_check,
    legal_moves,
)
from src.chess.moves import Move
from src.chess.notation import move_notation, numbered_move_list, to_movetext
from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    NotYourTurnError,
)
from src.core.models import GameModel
from src.core.shared_types import Color, EndReason, PieceType, Status

_log = logging.getLogger(__name__)


@dataclass
class MoveRecord:
    """Everything needed to display a move in the move list, and to take it back again."""

    move: Move
    piece: Piece
    captured: Optional[Piece]
    notation: str
    half_move_clock_before: int

    @property
    def color(self) -> Color:
        return self.piece.color


@dataclass
class MoveResult:
    notation: str
    status: Status


@dataclass
class Game:
    # --- DOMAIN LAYER API CALLED BY SERVICE---

    board: Board
    state: FENState
    starting_fen: str
    history: list[MoveRecord] = field(default_factory=list)
    status: Status = Status.ONGOING
    end_reason: Optional[EndReason] = None

    @classmethod
    def new_game(cls, starting_fen: Optional[str] = None) -> Self:
        """Start a new game from the standard starting position, or from the supplied FEN."""
        state = (
            FENState.from_fen(starting_fen)
            if starting_fen
            else FENState.starting_position()
        )
        game = cls(
            board=Board.from_fen(state.position),
            state=state,
            starting_fen=state.to_fen(),
        )
        # a custom starting position could already be over
        game._update_game_status()
        return game

    @classmethod
    def from_model(cls, model: GameModel) -> Self:
        """
        Define how to construct a Game from the information the Service layer actually has

        The moves are replayed from the starting position, which rebuilds the move records (so they can be taken back).
        """
        try:
            status = Status(model.status)
            end_reason = EndReason(model.end_reason) if model.end_reason else None
        except ValueError as exc:
            raise GameStateError(
                f"Invalid status code: {model.status!r} / {model.end_reason!r}. \nPick one from {','.join(Status)}"
            ) from exc

        game = cls.new_game(model.starting_fen)
        for uci in model.moves_uci:
            move = Move.from_uci(uci)
            game.apply_move(move.from_square, move.to_square)

        # NOTE: not everything can be replayed (ex. a loss on time), so the stored outcome wins
        game.status = status
        game.end_reason = end_reason
        return game

    def to_model(self) -> GameModel:
        """Encode back into a format the Service layer uses"""
        return GameModel(
            starting_fen=self.starting_fen,
            current_fen=self.to_fen(),
            moves_uci=[record.move.to_uci() for record in self.history],
            notations=self.notations,
            status=self.status.value,
            end_reason=self.end_reason.value if self.end_reason else None,
        )

    def to_fen(self) -> str:
        return self.state.to_fen()

    @property
    def color_to_move(self) -> Color:
        return self.state.color_to_move

    @property
    def is_over(self) -> bool:
        return self.status.is_over

    @property
    def winner(self) -> Optional[Color]:
        if self.status == Status.WHITE_WINS:
            return Color.WHITE
        if self.status == Status.BLACK_WINS:
            return Color.BLACK
        return None

    @property
    def last_move(self) -> Optional[Move]:
        return self.history[-1].move if self.history else None

    @property
    def notations(self) -> list[str]:
        return [record.notation for record in self.history]

    def move_list(self) -> list[str]:
        return numbered_move_list(self.notations)

    def movetext(self) -> str:
        return to_movetext(self.notations, self.status)

    def legal_moves(self, square: Square) -> set[Square]:
        """Squares the piece on `square` may move to (used to highlight them)."""
        return legal_moves(self.board, square)

    def is_in_check(self, color: Optional[Color] = None) -> bool:
        return is_in_check(self.board, color or self.color_to_move)

    def apply_move(self, from_square: Square, to_square: Square) -> MoveResult:
        """
        Attempt to make a move
        -----

        1. make sure the game is still going, and the right side is moving
        2. make sure the move is legal (nothing is touched if it is not)
        3. derive the notation (needs the board BEFORE the move)
        4. update the board and the FEN state (side to move, counters)
        5. update the history of moves
        6. update game status (if needed)
        """
        if self.is_over:
            raise GameStateError(f"Game is not in progress. status: {self.status}")

        moving_piece = self.board.piece(from_square)
        if moving_piece is None:
            raise IllegalMoveError(
                f"There is no piece on {from_square.to_algebraic()} to move."
            )
        if moving_piece.color != self.color_to_move:
            raise NotYourTurnError(
                f"It is not {moving_piece.color}'s turn. Waiting for {self.color_to_move} to make a move first."
            )

        if to_square not in self.legal_moves(from_square):
            raise IllegalMoveError(
                f"Move not allowed: {from_square.to_algebraic()}{to_square.to_algebraic()}"
            )

        move = Move(from_square, to_square)
        notation = move_notation(self.board, move)
        half_move_clock_before = self.state.half_move_clock

        captured = self.board.move_piece(move)
        self._update_fen_state(moving_piece, captured)
        self.history.append(
            MoveRecord(move, moving_piece, captured, notation, half_move_clock_before)
        )
        _log.info("%s played %s (%s)", moving_piece.color, notation, move.to_uci())

        self._update_game_status()
        return MoveResult(notation=notation, status=self.status)

    def undo_move(self) -> MoveRecord:
        """
        Take back the last move: the board, side to move and counters are restored exactly as they were.

        The game was necessarily in progress before that move, so the status goes back to ongoing.
        """
        if not self.history:
            raise GameStateError("There is no move to take back.")

        record = self.history.pop()
        self.board.move_piece(Move(record.move.to_square, record.move.from_square))
        if record.captured is not None:
            self.board.place_piece(record.captured, record.move.to_square)

        self.state.position = self.board.to_fen()
        self.state.color_to_move = record.color
        self.state.half_move_clock = record.half_move_clock_before
        if record.color == Color.BLACK:
            self.state.num_turns -= 1

        self.status = Status.ONGOING
        self.end_reason = None
        return record

    def flag_fall(self, color: Color) -> None:
        """`color` ran out of time: the opponent wins."""
        if self.is_over:
            return
        self._change_status(Status.win_for(color.opponent), EndReason.TIMEOUT)

    def reset(self) -> None:
        """Back to the starting position, without any moves played."""
        self.state = FENState.from_fen(self.starting_fen)
        self.board = Board.from_fen(self.state.position)
        self.history = []
        self.status = Status.ONGOING
        self.end_reason = None
        self._update_game_status()

    # -- PRIVATE HELPERS ---
    def _update_fen_state(self, moving_piece: Piece, captured: Optional[Piece]) -> None:
        """Create/update the FEN state to reflect state after move."""
        self.state.position = self.board.to_fen()

        if moving_piece.type == PieceType.PAWN or captured is not None:
            self.state.half_move_clock = 0
        else:
            self.state.half_move_clock += 1

        if moving_piece.color == Color.BLACK:
            self.state.num_turns += 1

        self.state.color_to_move = moving_piece.color.opponent

    def _update_game_status(self) -> None:
        """Performs checks to see if game has ended and changes status accordingly.

        NOTE the FEN state has already been updated. At this point the side to move is the opponent of the player that just moved.
        """
        status, reason = evaluate_terminal_status(self.board, self.color_to_move)
        if status.is_over:
            self._change_status(status, reason)

    def _change_status(self, new_status: Status, reason: Optional[EndReason]) -> None:
        self.status = new_status
        self.end_reason = reason
        _log.info("Game over: %s (%s)", new_status, reason)
