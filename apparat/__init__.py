"""
APPARAT: a gated action-resolution engine for a state apparatus.

Players and NPCs request security, diplomacy and ministry actions; the
engine validates them, rolls for success, schedules multi-turn work, and
runs detentions and trials through to their outcomes once per turn.
"""

__version__ = "0.2.0"
