"""
Pytest fixtures for Coup tests.
"""

import random

import pytest

from ..config import EngineConfig
from ..engine_core.cards import CardType
from ..engine_core.reducer import Reducer
from ..engine_core.state import GameState
from .helpers import make_player, make_state


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible shuffles."""
    return random.Random(42)


@pytest.fixture
def reducer(rng: random.Random) -> Reducer:
    return Reducer(rng=rng)


@pytest.fixture
def config() -> EngineConfig:
    """Config that does not read the environment."""
    return EngineConfig(seed=7, max_automated_steps=500)


@pytest.fixture
def two_player_state() -> GameState:
    """Alice (Duke, Contessa) to play against Bob (Captain, Assassin), 2 coins each."""
    alice = make_player("p1", "Alice", [CardType.DUKE, CardType.CONTESSA])
    bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.ASSASSIN])
    return make_state([alice, bob])


@pytest.fixture
def three_player_state() -> GameState:
    """Alice to play; Bob and Carol respond in that order."""
    alice = make_player("p1", "Alice", [CardType.DUKE, CardType.ASSASSIN])
    bob = make_player("p2", "Bob", [CardType.CAPTAIN, CardType.CONTESSA])
    carol = make_player("p3", "Carol", [CardType.AMBASSADOR, CardType.CAPTAIN])
    return make_state([alice, bob, carol])
