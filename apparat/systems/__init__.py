"""Stateful services that act on a World."""

from .detention import DetentionProcess
from .engine import DOMAIN_PROFILES, ActionEngine, DomainProfile
from .planner import NPCPlanner
from .projects import ProjectBoard
from .trials import TrialProcess
from .turns import TurnAdvancer
from .validation import EligibilityValidator

__all__ = [
    "ActionEngine",
    "DetentionProcess",
    "DOMAIN_PROFILES",
    "DomainProfile",
    "EligibilityValidator",
    "NPCPlanner",
    "ProjectBoard",
    "TrialProcess",
    "TurnAdvancer",
]
