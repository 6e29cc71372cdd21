"""
Shared pytest fixtures.

Game state fixtures are function-scoped so each test gets its own session.
"""

import os
import random
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from wordboard.engine.game_engine import GameEngine  # noqa: E402
from wordboard.engine.session import GameSession  # noqa: E402


@pytest.fixture
def engine() -> GameEngine:
    return GameEngine()


@pytest.fixture
def words() -> set:
    return {"CAT", "CATS", "AT", "TA", "HAT", "HATS", "DOG", "DOGS", "GO", "SO", "TO", "AS", "SCAT", "TRAINED"}


@pytest.fixture
def lobby(engine) -> GameSession:
    """Lobby with alice (host) and bob joined."""
    session = GameSession("test-game", rng=random.Random(7))
    engine.join_game(session, "alice", "Alice")
    engine.join_game(session, "bob", "Bob")
    return session


@pytest.fixture
def started(engine, lobby) -> GameSession:
    """Two-player game in progress with alice to move."""
    result = engine.start_game(lobby)
    assert result.success
    lobby.players.sort(key=lambda p: p.id)
    lobby.current_idx = 0
    return lobby
