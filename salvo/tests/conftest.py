"""
Pytest fixtures for Salvo tests.
"""

import pytest

from ..config import ArenaConfig
from ..bots import ScriptedPeer
from ..engine_core.move import Move
from ..session import GameSession


# Shots at the arena origin can never hit: a body center is always
# at least `radius` from both walls, so at least 14.14 away.
MISS = Move.shoot(0, 0)


@pytest.fixture
def config() -> ArenaConfig:
    return ArenaConfig()


@pytest.fixture
def moves_a() -> list[Move]:
    """A fixed, non-hitting move sequence for side A."""
    return [
        Move.accelerate(100, -30),
        MISS,
        Move.accelerate(-5, 400),
        MISS,
        Move.accelerate(1, 1),
    ]


@pytest.fixture
def moves_b() -> list[Move]:
    """A fixed, non-hitting move sequence for side B."""
    return [
        MISS,
        Move.accelerate(-300, 20),
        Move.accelerate(0, 0),
        MISS,
        Move.accelerate(7, -7),
    ]


def drive(session: GameSession, moves: list[Move]):
    """Drive a session through moves via the normal input flow."""
    results = []
    for move in moves:
        session.transition(move.kind.value)
        results.append(session.confirm(move))
    return results


@pytest.fixture
def play():
    """The drive() helper, as a fixture."""
    return drive


@pytest.fixture
def scripted_session(moves_b) -> GameSession:
    """Fresh session with seeds (11, 22) against a scripted peer."""
    return GameSession.create(11, 22, peer=ScriptedPeer(moves_b))
