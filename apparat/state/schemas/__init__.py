"""
Result contracts for the engine.

- ValidationResult: validator verdict (no mutation)
- ActionResult: rejected / resolved / scheduled outcome of a request
- TurnReport: everything one turn advance did
"""

from .action import ActionResult, ActionStatus, ValidationResult
from .turn_result import PhaseChange, TurnReport

__all__ = [
    "ActionResult",
    "ActionStatus",
    "ValidationResult",
    "PhaseChange",
    "TurnReport",
]
