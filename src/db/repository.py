"""Persistence contract (Protocol), plus a dictionary-backed implementation for running without a database."""

import threading
from dataclasses import replace
from typing import Protocol
from uuid import UUID, uuid4

from src.core.models import GameModel


class GameRepository(Protocol):
    """Persistence layer orchestration"""

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        ...

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Add new info to existing record."""
        ...

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        ...


class InMemoryGameRepository:
    """Games live as long as the process. Stores copies, so callers cannot change a record behind its back."""

    def __init__(self) -> None:
        self._games: dict[UUID, GameModel] = {}
        self._lock = threading.Lock()

    def get_game(self, game_id: UUID) -> GameModel | None:
        with self._lock:
            game = self._games.get(game_id)
            return self._copy(game) if game else None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        game_id = uuid4()
        with self._lock:
            self._games[game_id] = self._copy(game)
        return self._copy(game), game_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        with self._lock:
            if game_id not in self._games:
                return None
            self._games[game_id] = self._copy(game)
        return self._copy(game)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        with self._lock:
            return self._games.pop(game_id, None)

    @staticmethod
    def _copy(game: GameModel) -> GameModel:
        return replace(
            game,
            moves_uci=list(game.moves_uci),
            notations=list(game.notations),
            engine_colors=list(game.engine_colors),
        )
