"""Tools for APPARAT."""

from .dice import Dice, RollResult

__all__ = ["Dice", "RollResult"]
