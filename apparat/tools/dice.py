"""
Dice for APPARAT.

Every random draw in the engine goes through a Dice instance so a seeded
world replays identically. Nothing here touches the module-level random state.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RollResult:
    """Result of a percentile roll against a success chance."""
    roll: int  # 1-100
    chance: int
    success: bool
    margin: int  # Positive = under the chance, negative = over

    @property
    def narrative(self) -> str:
        """Short description of the result."""
        if self.success:
            if self.margin >= 40:
                return "crushing success"
            elif self.margin >= 15:
                return "solid success"
            else:
                return "narrow success"
        else:
            if self.margin <= -40:
                return "complete failure"
            elif self.margin <= -15:
                return "clear failure"
            else:
                return "near miss"


@dataclass
class Dice:
    """
    Injectable random source.

    Args:
        seed: Seed for reproducible draws. None draws from system entropy.
    """
    seed: int | None = None
    _rng: random.Random = field(init=False, repr=False)

    def __post_init__(self):
        self._rng = random.Random(self.seed)

    def percentile(self) -> int:
        """Uniform integer in [1, 100]."""
        return self._rng.randint(1, 100)

    def between(self, low: int, high: int) -> int:
        """Uniform integer in [low, high]."""
        return self._rng.randint(low, high)

    def chance(self, percent: int) -> bool:
        """True with probability percent/100."""
        return self.percentile() <= percent

    def choice(self, items: Sequence[T]) -> T:
        return self._rng.choice(list(items))

    def weighted(self, items: Sequence[T], weights: Sequence[int]) -> T:
        """Pick one item with integer weights. Zero-weight items are never picked."""
        total = sum(weights)
        if total <= 0:
            raise ValueError("weighted() needs at least one positive weight")
        point = self._rng.randint(1, total)
        running = 0
        for item, weight in zip(items, weights):
            running += weight
            if point <= running:
                return item
        return items[-1]

    def roll_against(self, chance: int, label: str = "") -> RollResult:
        """
        Roll 1-100; success when roll <= chance.

        Args:
            chance: Success chance in percent
            label: What is being rolled (for logging)
        """
        roll = self.percentile()
        success = roll <= chance
        logger.debug(f"Roll {label or '?'}: {roll} vs {chance} -> {'success' if success else 'failure'}")
        return RollResult(roll=roll, chance=chance, success=success, margin=chance - roll)
