"""
A live "battle": one game, both clocks, and the engine(s) playing one or both colors.

Only one thing at a time mutates the game: every public method and every engine action runs under the match lock.
"""

import logging
import threading
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Callable, Iterable, Optional

from src.chess.clock import ClockSnapshot, GameClock
from src.chess.engine import HeuristicMoveSelector, advantage_percentage
from src.chess.game import Game, MoveResult
from src.chess.moves import Move
from src.chess.square import Square
from src.core.exceptions import GameStateError
from src.core.models import GameModel
from src.core.shared_types import Color, EndReason, Status
from src.services.engine_scheduler import EngineMoveScheduler

_log = logging.getLogger(__name__)

MoveListener = Callable[["Match", MoveResult], None]
TimeoutListener = Callable[["Match"], None]


class MatchState(StrEnum):
    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True)
class MatchSnapshot:
    """Everything a board renderer reads, copied in one go under the match lock."""

    fen: str
    starting_fen: str
    board: list[list[str]]
    color_to_move: Color
    status: Status
    end_reason: Optional[EndReason]
    winner: Optional[Color]
    in_check: bool
    state: MatchState
    engine_colors: list[Color]
    engine_thinking: bool
    last_move: Optional[str]
    notations: list[str]
    move_list: list[str]
    movetext: str
    evaluation: int
    white_advantage: float
    clock: ClockSnapshot


class Match:
    def __init__(
        self,
        game: Game,
        clock: GameClock,
        selector: HeuristicMoveSelector,
        scheduler_factory: Callable[[threading.RLock], EngineMoveScheduler],
        engine_colors: Iterable[Color] = (),
        on_move: Optional[MoveListener] = None,
        on_timeout: Optional[TimeoutListener] = None,
    ) -> None:
        self.game = game
        self.clock = clock
        self.selector = selector
        self.engine_colors = frozenset(engine_colors)
        self.on_move = on_move
        self.on_timeout = on_timeout
        self._lock = threading.RLock()
        self.scheduler = scheduler_factory(self._lock)
        self.state = MatchState.FINISHED if game.is_over else MatchState.READY

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def engine_thinking(self) -> bool:
        return self.scheduler.is_pending

    def is_engine_turn(self) -> bool:
        return self.game.color_to_move in self.engine_colors

    def to_model(self) -> GameModel:
        with self._lock:
            return replace(
                self.game.to_model(),
                engine_colors=sorted(color.value for color in self.engine_colors),
            )

    def snapshot(self) -> MatchSnapshot:
        with self._lock:
            game = self.game
            last_move = game.last_move
            return MatchSnapshot(
                fen=game.to_fen(),
                starting_fen=game.starting_fen,
                board=game.board.to_rows(),
                color_to_move=game.color_to_move,
                status=game.status,
                end_reason=game.end_reason,
                winner=game.winner,
                in_check=game.is_in_check(),
                state=self.state,
                engine_colors=sorted(self.engine_colors),
                engine_thinking=self.engine_thinking,
                last_move=last_move.to_uci() if last_move else None,
                notations=game.notations,
                move_list=game.move_list(),
                movetext=game.movetext(),
                evaluation=game.board.evaluate(),
                white_advantage=advantage_percentage(game.board),
                clock=self.clock.snapshot(),
            )

    # --- CONTROLS ---
    def start(self) -> None:
        """Start (or resume) the battle. A finished game is reset first."""
        with self._lock:
            if self.state == MatchState.RUNNING:
                return
            if self.game.is_over:
                self._reset()
                if self.game.is_over:
                    # the starting position itself is already decided
                    return
            self.state = MatchState.RUNNING
            self.clock.start(self.game.color_to_move)
            _log.info("Battle started, %s to move", self.game.color_to_move)
            self._maybe_schedule_engine_move()

    def pause(self) -> None:
        """Stop the clock. An engine move that is still being "thought about" is discarded."""
        with self._lock:
            if self.state != MatchState.RUNNING:
                return
            if self.scheduler.cancel():
                _log.info("Pending engine move discarded by pause")
            self.clock.stop()
            self.state = MatchState.PAUSED

    def reset(self) -> None:
        with self._lock:
            self._reset()

    def _reset(self) -> None:
        self.scheduler.cancel()
        self.game.reset()
        self.clock.reset()
        self.state = MatchState.FINISHED if self.game.is_over else MatchState.READY
        _log.info("Battle reset")

    # --- MOVES ---
    def legal_moves(self, square: Square) -> set[Square]:
        with self._lock:
            return self.game.legal_moves(square)

    def submit_move(self, from_square: Square, to_square: Square) -> MoveResult:
        """A move coming from the board (a human player)."""
        with self._lock:
            if self.engine_thinking:
                raise GameStateError("Wait for the engine to finish thinking.")
            if self.state == MatchState.PAUSED:
                raise GameStateError("The battle is paused.")
            self.check_clock()
            result = self.game.apply_move(from_square, to_square)
            self._after_move(result)
            return result

    def suggest_move(self, color: Optional[Color] = None) -> Move:
        """What the engine would play for `color` right now (nothing is played)."""
        with self._lock:
            return self.selector.select_move(
                self.game.board, color or self.game.color_to_move
            )

    def check_clock(self) -> bool:
        """
        Ends the game when the side to move has run out of time. Returns True if that happened.

        The timeout listener hears about it right away: the move that noticed the flag (if any) is rejected afterwards.
        """
        with self._lock:
            color = self.game.color_to_move
            if self.game.is_over or not self.clock.is_flag_fallen(color):
                return False
            self.scheduler.cancel()
            self.game.flag_fall(color)
            self._finish()
            if self.on_timeout is not None:
                self.on_timeout(self)
            return True

    def _after_move(self, result: MoveResult) -> None:
        if self.game.is_over:
            self._finish()
        elif self.clock.is_running:
            self.clock.switch()

        if self.on_move is not None:
            self.on_move(self, result)

        self._maybe_schedule_engine_move()

    def _finish(self) -> None:
        self.clock.stop()
        self.state = MatchState.FINISHED

    def _maybe_schedule_engine_move(self) -> None:
        if self.game.is_over or self.state == MatchState.PAUSED:
            return
        if not self.is_engine_turn():
            return
        # the clock does not run while the engine is thinking
        self.clock.pause()
        self.scheduler.schedule(self._play_engine_move)

    def _play_engine_move(self) -> None:
        """Runs under the match lock, and only if nobody cancelled it in the meantime."""
        if self.state == MatchState.RUNNING:
            self.clock.resume()
        if self.game.is_over:
            return
        move = self.selector.select_move(self.game.board, self.game.color_to_move)
        result = self.game.apply_move(move.from_square, move.to_square)
        self._after_move(result)
