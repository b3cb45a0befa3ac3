"""Tests of the HTTP routes (FastAPI TestClient, in-memory repository, no real timers)"""

import random
from typing import Generator
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from src.api.app import build_repository, create_app
from src.chess.fen import STARTING_FEN
from src.core.config import Settings
from src.db.repository import InMemoryGameRepository
from src.services.chess_service import ChessService
from tests.conftest import FakeTime, FakeTimerFactory

BACK_RANK_MATE_IN_ONE = "6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1"


@pytest.fixture
def client(timer_factory: FakeTimerFactory, fake_time: FakeTime) -> Generator[TestClient, None, None]:
    settings = Settings(database_url="memory")
    service = ChessService(
        build_repository(settings),
        settings,
        rng=random.Random(0),
        timer_factory=timer_factory,
        time_source=fake_time,
    )
    with TestClient(create_app(service)) as test_client:
        yield test_client


def create_game(client: TestClient, **payload) -> str:
    response = client.post("/games", json=payload)
    assert response.status_code == 201
    return response.json()["game_id"]


def test_in_memory_repository_setting() -> None:
    assert isinstance(build_repository(Settings(database_url="memory")), InMemoryGameRepository)


def test_create_and_get_game(client: TestClient) -> None:
    game_id = create_game(client)

    response = client.get(f"/games/{game_id}")
    assert response.status_code == 200
    body = response.json()
    assert body["fen_state"] == STARTING_FEN
    assert body["status"] == "ongoing"
    assert body["engine_colors"] == ["black"]
    assert body["clock"]["white_display"] == "10:00"


def test_create_game_with_invalid_fen(client: TestClient) -> None:
    response = client.post("/games", json={"starting_fen": "not a fen"})
    assert response.status_code == 400
    assert "FEN" in response.json()["detail"]


def test_unknown_game(client: TestClient) -> None:
    response = client.get(f"/games/{uuid4()}")
    assert response.status_code == 404


def test_legal_moves(client: TestClient) -> None:
    game_id = create_game(client)
    response = client.get(f"/games/{game_id}/legal-moves", params={"square": "g1"})
    assert response.status_code == 200
    assert response.json()["legal_moves"] == ["f3", "h3"]

    for square in ("z9", "e²", "e٤"):
        response = client.get(f"/games/{game_id}/legal-moves", params={"square": square})
        assert response.status_code == 400


def test_make_move(client: TestClient) -> None:
    game_id = create_game(client, engine_colors=[])
    response = client.post(
        f"/games/{game_id}/moves", params={"from_square": "b1", "to_square": "a3"}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["notation"] == "Na3"
    assert body["game"]["color_to_move"] == "black"
    assert body["game"]["move_list"] == ["1. Na3"]


@pytest.mark.parametrize(
    "from_square, to_square, status_code",
    [
        ("e2", "e5", 400),  # illegal
        ("e4", "e5", 400),  # no piece
        ("e7", "e5", 409),  # not white's piece
        ("e2", "e9", 400),  # not a square
    ],
)
def test_rejected_moves(client: TestClient, from_square: str, to_square: str, status_code: int) -> None:
    game_id = create_game(client, engine_colors=[])
    response = client.post(
        f"/games/{game_id}/moves", params={"from_square": from_square, "to_square": to_square}
    )
    assert response.status_code == status_code
    assert response.json()["detail"]


def test_no_moves_after_checkmate(client: TestClient) -> None:
    game_id = create_game(client, engine_colors=[], starting_fen=BACK_RANK_MATE_IN_ONE)
    response = client.post(f"/games/{game_id}/moves", params={"from_square": "a1", "to_square": "a8"})
    body = response.json()
    assert body["status"] == "white_wins"
    assert body["game"]["end_reason"] == "checkmate"
    assert body["game"]["movetext"] == "1. Ra8 1-0"

    response = client.post(f"/games/{game_id}/moves", params={"from_square": "h7", "to_square": "h6"})
    assert response.status_code == 409


def test_engine_move(client: TestClient) -> None:
    game_id = create_game(client)
    response = client.get(f"/games/{game_id}/engine-move", params={"color": "black"})
    assert response.status_code == 200
    assert response.json()["uci"] in {"d7d5", "e7e5", "c7c5"}


def test_controls(client: TestClient, timer_factory: FakeTimerFactory) -> None:
    game_id = create_game(client, engine_colors=["white"])

    body = client.post(f"/games/{game_id}/start").json()
    assert body["match_state"] == "running"
    assert body["engine_thinking"]

    body = client.post(f"/games/{game_id}/pause").json()
    assert body["match_state"] == "paused"
    assert not body["engine_thinking"]

    client.post(f"/games/{game_id}/start")
    timer_factory.last.fire()
    assert len(client.get(f"/games/{game_id}").json()["move_history"]) == 1

    body = client.post(f"/games/{game_id}/reset").json()
    assert body["match_state"] == "ready"
    assert body["move_history"] == []


def test_delete_game(client: TestClient) -> None:
    game_id = create_game(client)
    assert client.delete(f"/games/{game_id}").status_code == 204
    assert client.get(f"/games/{game_id}").status_code == 404
