"""
Pytest fixtures for APPARAT tests.

Provides seeded and fixed-value dice, fresh worlds and in-memory stores.
"""

import pytest
from pathlib import Path

# Add repo root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from apparat.state import (
    MemoryWorldStore,
    WorldManager,
    new_world,
    reset_event_bus,
)
from apparat.state.schema import Character, Personality, Track
from apparat.systems import TurnAdvancer
from apparat.tools import Dice


class FixedDice(Dice):
    """
    Dice double: every percentile roll returns the same value.

    1 makes every roll succeed, 100 makes every roll below 100% fail.
    Ranges return their low end, choices their first item, and weighted
    draws the heaviest item.
    """

    def __init__(self, value: int = 50):
        super().__init__(seed=0)
        self.value = value

    def percentile(self) -> int:
        return self.value

    def between(self, low: int, high: int) -> int:
        return low

    def choice(self, items):
        return list(items)[0]

    def weighted(self, items, weights):
        best = max(range(len(weights)), key=lambda i: weights[i])
        return list(items)[best]


@pytest.fixture(autouse=True)
def fresh_event_bus():
    """Every test starts with an empty global bus."""
    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def dice():
    """Seeded dice for reproducible draws."""
    return Dice(seed=1234)


@pytest.fixture
def lucky_dice():
    """Every roll succeeds."""
    return FixedDice(1)


@pytest.fixture
def unlucky_dice():
    """Every roll short of a certainty fails."""
    return FixedDice(100)


@pytest.fixture
def fixed_dice():
    """Factory for dice that always roll a given value."""
    return FixedDice


@pytest.fixture
def world():
    """Fresh starting world. The player is a Position 3 security officer."""
    return new_world("Test World", seed=42)


@pytest.fixture
def advancer(world, dice):
    """Turn advancer with NPCs switched off."""
    return TurnAdvancer(world, dice, npc_activity=0.0)


@pytest.fixture
def memory_store():
    """In-memory world store for testing."""
    return MemoryWorldStore()


@pytest.fixture
def manager(memory_store):
    """World manager with in-memory store."""
    return WorldManager(memory_store)


@pytest.fixture
def detainee():
    """A mid-ranking official with an unremarkable temperament."""
    return Character(
        id="subject",
        name="Test Subject",
        title="Deputy Director",
        rank=3,
        track=Track.MINISTRY,
        faction="reformists",
        personality=Personality(loyal=50, paranoid=50, ambitious=50, competent=50, ruthless=50),
    )
