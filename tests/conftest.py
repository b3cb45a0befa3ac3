"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Any, Callable, Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.chess.board import Board
from src.chess.pieces import Piece
from src.chess.square import Square
from src.db.schema import Base

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)

EMPTY_POSITION = "/".join(["8"] * 8)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repository independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


class FakeTimer:
    """Stands in for threading.Timer: nothing runs until the test calls `fire()`."""

    def __init__(
        self,
        interval: float,
        function: Callable[..., Any],
        args: tuple = (),
        kwargs: dict | None = None,
    ) -> None:
        self.interval = interval
        self.function = function
        self.args = args
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        """Run the callback, as a real timer would when its interval elapses (even if cancelled too late)."""
        self.function(*self.args, **self.kwargs)


class FakeTimerFactory:
    def __init__(self) -> None:
        self.timers: list[FakeTimer] = []

    def __call__(self, interval: float, function: Callable[..., Any], **kwargs: Any) -> FakeTimer:
        timer = FakeTimer(interval, function, **kwargs)
        self.timers.append(timer)
        return timer

    @property
    def last(self) -> FakeTimer:
        return self.timers[-1]


class FakeTime:
    """Monotonic time that only moves when told to."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def timer_factory() -> FakeTimerFactory:
    return FakeTimerFactory()


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def board_from_pieces() -> Callable[[dict[str, str]], Board]:
    """Call the inner function with {square name: FEN letter}, ex. {"e1": "K", "e8": "k"}"""

    def _create_board(pieces: dict[str, str]) -> Board:
        board = Board.from_fen(EMPTY_POSITION)
        for square_name, letter in pieces.items():
            board.place_piece(Piece.from_fen(letter), Square.from_algebraic(square_name))
        return board

    return _create_board
