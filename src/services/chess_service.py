"""Orchestration of communication from API router to business logic and persistence layers (and the reverse direction)."""

import logging
import random
import threading
import time
from typing import Callable, Optional
from uuid import UUID

from src.api.models import (
    ClockResponse,
    CreateGameRequest,
    DeleteGameRequest,
    EngineMoveRequest,
    EngineMoveResponse,
    GameControlRequest,
    GameResponse,
    GetGameRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
)
from src.chess.clock import GameClock, format_time
from src.chess.engine import HeuristicMoveSelector
from src.chess.game import Game, MoveResult
from src.chess.square import Square
from src.core.config import Settings, get_settings
from src.core.exceptions import RepositoryError
from src.core.models import GameModel
from src.core.shared_types import Color
from src.db.repository import GameRepository
from src.services.engine_scheduler import EngineMoveScheduler, TimerFactory
from src.services.match import Match

_log = logging.getLogger(__name__)


class ChessService:
    """
    Orchestration of layers for chess game.

    Live matches (clocks, pending engine moves) are kept in memory. Every applied move is also stored in the repository,
    so a game can be picked up again (without its clocks) after a restart.
    """

    def __init__(
        self,
        repository: GameRepository,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        timer_factory: TimerFactory = threading.Timer,
        time_source: Callable[[], float] = time.monotonic,
    ) -> None:
        self.repo = repository
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.timer_factory = timer_factory
        self.time_source = time_source
        self.matches: dict[UUID, Match] = {}
        self._matches_lock = threading.Lock()

    # -- API routes logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Set up a new battle. Engines play the requested colors, the board plays the others."""
        game = Game.new_game(request.starting_fen)
        engine_colors = set(request.engine_colors)
        model = self._to_model(game, engine_colors)

        _, game_id = self.repo.create_game(model)
        match = self._build_match(game_id, game, engine_colors)
        with self._matches_lock:
            self.matches[game_id] = match
        _log.info("Created game %s (engines: %s)", game_id, sorted(engine_colors))
        return self._create_game_response(game_id, match)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        """
        Retrieve current game state.
        ----
        Used in "polling" loop by frontend: it also notices when the side to move has run out of time.
        """
        match = self._fetch_match(request.game_id)
        match.check_clock()
        return self._create_game_response(request.game_id, match)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """Destinations of the piece on the requested square (for highlighting)"""
        match = self._fetch_match(request.game_id)
        destinations = match.legal_moves(Square.from_algebraic(request.square))
        return LegalMovesResponse(
            game_id=request.game_id,
            square=request.square,
            legal_moves=[square.to_algebraic() for square in sorted(destinations)],
        )

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """Make a move attempt. Persisting happens through the match's move listener."""
        match = self._fetch_match(request.game_id)
        result = match.submit_move(
            Square.from_algebraic(request.from_square),
            Square.from_algebraic(request.to_square),
        )
        return MoveResponse(
            game_id=request.game_id,
            notation=result.notation,
            status=result.status,
            game=self._create_game_response(request.game_id, match),
        )

    def engine_move(self, request: EngineMoveRequest) -> EngineMoveResponse:
        """The move the engine would pick for the requested color (default: side to move). Does not play it."""
        match = self._fetch_match(request.game_id)
        with match.lock:
            color = request.color or match.game.color_to_move
            move = match.suggest_move(color)
        return EngineMoveResponse(
            game_id=request.game_id,
            color=color,
            from_square=move.from_square.to_algebraic(),
            to_square=move.to_square.to_algebraic(),
            uci=move.to_uci(),
        )

    def start_game(self, request: GameControlRequest) -> GameResponse:
        match = self._fetch_match(request.game_id)
        match.start()
        self._persist(request.game_id, match)
        return self._create_game_response(request.game_id, match)

    def pause_game(self, request: GameControlRequest) -> GameResponse:
        match = self._fetch_match(request.game_id)
        match.pause()
        return self._create_game_response(request.game_id, match)

    def reset_game(self, request: GameControlRequest) -> GameResponse:
        match = self._fetch_match(request.game_id)
        match.reset()
        self._persist(request.game_id, match)
        return self._create_game_response(request.game_id, match)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record. A pending engine move dies with it."""
        with self._matches_lock:
            match = self.matches.pop(request.game_id, None)
        if match is not None:
            match.scheduler.cancel()
        self.repo.delete_game(request.game_id)

    def shutdown(self) -> None:
        """Cancel every pending engine move (ex. when the app stops)."""
        with self._matches_lock:
            matches = list(self.matches.values())
        for match in matches:
            match.scheduler.cancel()

    # -- Internal helpers --
    def _build_match(
        self, game_id: UUID, game: Game, engine_colors: set[Color]
    ) -> Match:
        clock = GameClock(self.settings.initial_clock_seconds, self.time_source)
        selector = HeuristicMoveSelector(self.rng, top_n=self.settings.engine_top_n)

        def scheduler_factory(lock: threading.RLock) -> EngineMoveScheduler:
            return EngineMoveScheduler(
                lock,
                delay_range=(
                    self.settings.thinking_delay_min,
                    self.settings.thinking_delay_max,
                ),
                rng=self.rng,
                timer_factory=self.timer_factory,
            )

        def store_move(match: Match, result: MoveResult) -> None:
            """Store every applied move (human and engine alike)."""
            self._persist(game_id, match)

        def store_timeout(match: Match) -> None:
            self._persist(game_id, match)

        return Match(
            game,
            clock,
            selector,
            scheduler_factory,
            engine_colors=engine_colors,
            on_move=store_move,
            on_timeout=store_timeout,
        )

    def _persist(self, game_id: UUID, match: Match) -> None:
        if self.repo.update_game(game_id, match.to_model()) is None:
            _log.warning("Game %s disappeared from the repository", game_id)

    def _to_model(self, game: Game, engine_colors: set[Color]) -> GameModel:
        model = game.to_model()
        model.engine_colors = sorted(color.value for color in engine_colors)
        return model

    def _fetch_match(self, game_id: UUID) -> Match:
        """Find the live match, or rebuild it from the repository. Raise an error if neither works."""
        with self._matches_lock:
            match = self.matches.get(game_id)
            if match is not None:
                return match

            game_model = self.repo.get_game(game_id)
            if game_model is None:
                raise RepositoryError(f"Game with {game_id=} not found.")

            match = self._build_match(
                game_id,
                Game.from_model(game_model),
                {Color(color) for color in game_model.engine_colors},
            )
            self.matches[game_id] = match
            _log.info("Restored game %s from the repository", game_id)
            return match

    def _create_game_response(self, game_id: UUID, match: Match) -> GameResponse:
        """Everything a board renderer needs to draw the current state (read in one go, an engine move may be running)."""
        snapshot = match.snapshot()
        clock = snapshot.clock
        return GameResponse(
            game_id=game_id,
            fen_state=snapshot.fen,
            starting_state=snapshot.starting_fen,
            board=snapshot.board,
            color_to_move=snapshot.color_to_move,
            status=snapshot.status,
            end_reason=snapshot.end_reason,
            winner=snapshot.winner,
            in_check=snapshot.in_check,
            match_state=snapshot.state,
            engine_colors=snapshot.engine_colors,
            engine_thinking=snapshot.engine_thinking,
            last_move=snapshot.last_move,
            move_history=snapshot.notations,
            move_list=snapshot.move_list,
            movetext=snapshot.movetext,
            evaluation=snapshot.evaluation,
            white_advantage=snapshot.white_advantage,
            clock=ClockResponse(
                white_seconds=clock.white_remaining,
                black_seconds=clock.black_remaining,
                white_display=format_time(clock.white_remaining),
                black_display=format_time(clock.black_remaining),
                running=clock.is_running,
            ),
        )
