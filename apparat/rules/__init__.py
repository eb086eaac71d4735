"""Pure game rules: success odds, interrogation and trial formulas, NPC plans."""

from .success import (
    MAX_CHANCE,
    MIN_CHANCE,
    ActorProfile,
    calculate_success_chance,
    npc_success_chance,
)
from .planning import NPCPlan, plan_ministry_action, plan_security_action

__all__ = [
    "MAX_CHANCE",
    "MIN_CHANCE",
    "ActorProfile",
    "NPCPlan",
    "calculate_success_chance",
    "npc_success_chance",
    "plan_ministry_action",
    "plan_security_action",
]
