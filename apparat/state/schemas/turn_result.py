"""
TurnReport: everything one turn advance did, in the order it happened.

The report is a summary for the caller. The world itself is authoritative.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ..schema import NPCActionEvent
from .action import ActionResult


class PhaseChange(BaseModel):
    """A detention or trial moving to a new phase."""
    record_id: str
    subject_id: str
    subject_name: str
    from_phase: str
    to_phase: str
    note: str = ""


class TurnReport(BaseModel):
    """Result of one TurnAdvancer.advance() call."""
    turn: int
    skipped: bool = False

    detention_changes: list[PhaseChange] = Field(default_factory=list)
    detentions_ended: list[str] = Field(default_factory=list)
    trial_changes: list[PhaseChange] = Field(default_factory=list)
    trials_completed: list[str] = Field(default_factory=list)

    resolved: list[ActionResult] = Field(default_factory=list)
    npc_actions: list[NPCActionEvent] = Field(default_factory=list)
    cooldowns_cleared: int = 0

    advanced_at: datetime = Field(default_factory=datetime.now)

    @property
    def event_count(self) -> int:
        return (
            len(self.detention_changes)
            + len(self.trial_changes)
            + len(self.resolved)
            + len(self.npc_actions)
        )

    @property
    def summary(self) -> list[str]:
        """Human-readable lines for quick display."""
        lines = []
        for change in self.detention_changes:
            lines.append(
                f"[detention] {change.subject_name}: {change.from_phase} -> {change.to_phase}"
            )
        for change in self.trial_changes:
            lines.append(
                f"[trial] {change.subject_name}: {change.from_phase} -> {change.to_phase}"
            )
        for result in self.resolved:
            lines.append(f"[{result.domain.value}] {result.description}")
        for event in self.npc_actions:
            lines.append(f"[npc] {event.description}")
        return lines
