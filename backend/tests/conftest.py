import random
from typing import Callable, List

import pytest
from fastapi.testclient import TestClient

from clubdraw.main import app
from clubdraw.models.player import Player


@pytest.fixture(name="client")
def client_fixture():
    """Provide a test client. The API is stateless, nothing to override."""
    with TestClient(app) as client:
        yield client


@pytest.fixture(name="rng")
def rng_fixture() -> random.Random:
    """Seeded random source so randomized placement is reproducible"""
    return random.Random(1234)


@pytest.fixture(name="make_players")
def make_players_fixture() -> Callable[..., List[Player]]:
    """
    Factory: players with ids 1..n.

    Ratings descend with id (player 1 strongest) unless rated=False.
    """

    def _make(n: int, rated: bool = True) -> List[Player]:
        return [Player(id=i, rating=2000 - 10 * i if rated else None) for i in range(1, n + 1)]

    return _make
