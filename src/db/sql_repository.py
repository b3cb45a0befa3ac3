"""Implementation of (Game)Repository using SQLAlchemy"""

from contextlib import contextmanager
from typing import Iterator
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session, scoped_session

from src.core.models import GameModel
from src.db.schema import DBGame


class SQLGameRepository:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session | scoped_session[Session]) -> None:
        # NOTE: engine moves are stored from timer threads: pass a scoped_session when the repository is shared between threads
        self.db = db_session

    def get_game(self, game_id: UUID) -> GameModel | None:
        """Get game by ID, if record exists."""
        with self._unit_of_work() as db:
            game_db = self._fetch_game(db, game_id)
            if game_db:
                return self._to_model(game_db)
            return None

    def create_game(self, game: GameModel) -> tuple[GameModel, UUID]:
        """Store new game and return the stored data + newly created game ID."""

        new_id = uuid4()
        with self._unit_of_work() as db:
            game_db = DBGame(
                id=new_id,
                starting_fen=game.starting_fen,
                current_fen=game.current_fen,
                moves_uci=game.moves_uci,
                notations=game.notations,
                status=game.status,
                end_reason=game.end_reason,
                engine_colors=game.engine_colors,
            )
            db.add(game_db)
            db.commit()
            db.refresh(game_db)
            return self._to_model(game_db), new_id

    def update_game(self, game_id: UUID, game: GameModel) -> GameModel | None:
        """Add new info to existing record."""
        with self._unit_of_work() as db:
            game_db = self._fetch_game(db, game_id)
            if not game_db:
                return None
            game_db.starting_fen = game.starting_fen
            game_db.current_fen = game.current_fen
            game_db.moves_uci = list(game.moves_uci)
            game_db.notations = list(game.notations)
            game_db.status = game.status
            game_db.end_reason = game.end_reason
            game_db.engine_colors = list(game.engine_colors)
            db.commit()
            db.refresh(game_db)
            return self._to_model(game_db)

    def delete_game(self, game_id: UUID) -> GameModel | None:
        """Remove a game's record."""
        with self._unit_of_work() as db:
            game_db = self._fetch_game(db, game_id)
            if not game_db:
                return None
            game_model = self._to_model(game_db)
            db.delete(game_db)
            db.commit()
            return game_model

    @contextmanager
    def _unit_of_work(self) -> Iterator[Session | scoped_session[Session]]:
        """
        One repository call = one unit of work.

        A scoped_session hands out one session per thread: it is closed and released at the end of every call,
        so the short-lived timer threads that store engine moves leave no session behind.
        A plain Session belongs to the caller and is left open.
        """
        try:
            yield self.db
        finally:
            if isinstance(self.db, scoped_session):
                self.db.remove()

    @staticmethod
    def _fetch_game(db: Session | scoped_session[Session], game_id: UUID) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return db.scalar(query)

    @staticmethod
    def _to_model(game_db: DBGame) -> GameModel:
        """Convert SQLAlchemy model to data transfer model."""
        return GameModel(
            starting_fen=game_db.starting_fen,
            current_fen=game_db.current_fen,
            moves_uci=list(game_db.moves_uci),
            notations=list(game_db.notations),
            status=game_db.status,
            end_reason=game_db.end_reason,
            engine_colors=list(game_db.engine_colors),
        )
