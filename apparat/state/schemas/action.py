"""
Action schemas for the request pipeline.

    request -> ValidationResult -> ActionResult

- ValidationResult: the validator's verdict. Never mutates anything.
- ActionResult: what a request produced. Exactly one of rejected, resolved
  or scheduled. A rejected result is proof that nothing was mutated.
"""

from enum import Enum

from pydantic import BaseModel, Field

from ..schema import Domain, EffectBundle


class ValidationResult(BaseModel):
    """
    Eligibility verdict plus the chance the action would succeed.

    requires_approval is informational: the action may proceed, but a
    superior body has to sign off in the fiction.
    """
    can_execute: bool
    reason: str | None = None
    success_chance: int = 0
    requires_approval: bool = False
    target_too_senior: bool = False

    @classmethod
    def failed(cls, reason: str, **kwargs) -> "ValidationResult":
        return cls(can_execute=False, reason=reason, **kwargs)


class ActionStatus(str, Enum):
    REJECTED = "rejected"
    RESOLVED = "resolved"
    SCHEDULED = "scheduled"


class ActionResult(BaseModel):
    """
    Outcome of one request, or of one pending record coming due.

    narrative_key is the stable handle the text layer uses to pick prose:
    "<domain>.<action_id>.<success|failure>".
    """
    status: ActionStatus
    domain: Domain
    action_id: str
    actor_id: str = "player"
    target_id: str | None = None
    turn: int = 0
    reason: str | None = None

    # Resolved
    succeeded: bool | None = None
    roll: int | None = None
    success_chance: int | None = None
    effects: EffectBundle | None = None
    narrative_key: str | None = None
    description: str = ""

    # Scheduled
    completion_turn: int | None = None
    record_id: str | None = None

    requires_approval: bool = False

    # Sub-processes spawned by the outcome
    detention_id: str | None = None
    trial_id: str | None = None
    implicated_ids: list[str] = Field(default_factory=list)

    @property
    def is_rejected(self) -> bool:
        return self.status == ActionStatus.REJECTED

    @property
    def is_resolved(self) -> bool:
        return self.status == ActionStatus.RESOLVED

    @property
    def is_scheduled(self) -> bool:
        return self.status == ActionStatus.SCHEDULED

    @classmethod
    def rejected(
        cls,
        domain: Domain,
        action_id: str,
        reason: str,
        actor_id: str = "player",
        target_id: str | None = None,
        turn: int = 0,
    ) -> "ActionResult":
        return cls(
            status=ActionStatus.REJECTED,
            domain=domain,
            action_id=action_id,
            actor_id=actor_id,
            target_id=target_id,
            turn=turn,
            reason=reason,
            description=reason,
        )
