"""
Action definitions shared by every domain catalog.

Definitions are frozen: the catalogs are static tables and nothing at runtime
may edit them.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..state.schema import (
    Domain,
    EffectBundle,
    MinistryDepartment,
    TargetKind,
    Track,
)


class RiskTier(str, Enum):
    """
    Ordered risk tiers. Security and diplomacy use minimal..extreme,
    ministry uses routine..extreme.
    """
    ROUTINE = "routine"
    MINIMAL = "minimal"
    LOW = "low"
    MODERATE = "moderate"
    SIGNIFICANT = "significant"
    HIGH = "high"
    MAJOR = "major"
    EXTREME = "extreme"


# Success-chance modifier per risk tier, per domain
RISK_MODIFIERS: dict[Domain, dict[RiskTier, int]] = {
    Domain.SECURITY: {
        RiskTier.MINIMAL: 5,
        RiskTier.LOW: 0,
        RiskTier.MODERATE: -5,
        RiskTier.HIGH: -10,
        RiskTier.EXTREME: -15,
    },
    Domain.DIPLOMACY: {
        RiskTier.MINIMAL: 5,
        RiskTier.LOW: 0,
        RiskTier.MODERATE: -5,
        RiskTier.HIGH: -10,
        RiskTier.EXTREME: -15,
    },
    Domain.MINISTRY: {
        RiskTier.ROUTINE: 10,
        RiskTier.MODERATE: 0,
        RiskTier.SIGNIFICANT: -10,
        RiskTier.MAJOR: -20,
        RiskTier.EXTREME: -30,
    },
}


class SecurityCategory(str, Enum):
    OPERATIVE = "operative"
    INVESTIGATOR = "investigator"
    CASE_OFFICER = "case_officer"
    DIRECTORATE = "directorate"
    COMMAND = "command"
    DIRECTOR = "director"


class DiplomacyCategory(str, Enum):
    OBSERVER = "observer"
    ANALYST = "analyst"
    DEPARTMENTAL = "departmental"
    SENIOR = "senior"
    EXECUTIVE = "executive"
    SUPREME = "supreme"


class MinistryCategory(str, Enum):
    CLERK = "clerk"
    OFFICER = "officer"
    DIRECTOR = "director"
    MINISTER = "minister"
    STATE_COUNCILOR = "state_councilor"
    PREMIER = "premier"


# Each domain has six tiers; the tiers open at the same positions everywhere
TIER_MIN_RANKS = (1, 2, 3, 4, 5, 7)


def category_min_rank(category: Enum) -> int:
    """Minimum position for an action category."""
    members = list(type(category))
    return TIER_MIN_RANKS[members.index(category)]


class ActionDefinition(BaseModel):
    """One catalog entry. Immutable."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    domain: Domain
    category: str
    min_rank: int
    required_track: Track | None = None
    target_kind: TargetKind = TargetKind.NONE

    base_chance: int
    risk: RiskTier
    execution_turns: int = 0  # 0 = immediate
    cooldown_turns: int = 0

    max_target_rank: int | None = None
    approval_above_rank: int | None = None
    requires_committee_approval: bool = False
    can_be_decree: bool = False
    department: MinistryDepartment | None = None
    stackable: bool = False

    success: EffectBundle = Field(default_factory=EffectBundle)
    failure: EffectBundle = Field(default_factory=EffectBundle)

    @property
    def is_immediate(self) -> bool:
        return self.execution_turns == 0

    @property
    def resource_cost(self) -> int:
        """Treasury the success bundle spends."""
        return self.success.resource_cost

    @property
    def risk_modifier(self) -> int:
        return RISK_MODIFIERS[self.domain].get(self.risk, 0)

    @property
    def needs_target(self) -> bool:
        """Whether the target must name a known character or country."""
        return self.target_kind in (TargetKind.CHARACTER, TargetKind.COUNTRY, TargetKind.TREATY)

    def narrative_key(self, succeeded: bool) -> str:
        """Stable key the text layer uses to pick prose for an outcome."""
        return f"{self.domain.value}.{self.id}.{'success' if succeeded else 'failure'}"


def define(
    domain: Domain,
    category: Enum,
    id: str,
    name: str,
    description: str,
    *,
    base_chance: int,
    risk: RiskTier,
    target: TargetKind = TargetKind.NONE,
    cooldown: int = 0,
    execution: int = 0,
    track: Track | None = None,
    max_target_rank: int | None = None,
    approval_above: int | None = None,
    committee: bool = False,
    decree: bool = False,
    department: MinistryDepartment | None = None,
    success: EffectBundle | None = None,
    failure: EffectBundle | None = None,
) -> ActionDefinition:
    """Compact constructor used by the catalog tables."""
    return ActionDefinition(
        id=id,
        name=name,
        description=description,
        domain=domain,
        category=category.value,
        min_rank=category_min_rank(category),
        required_track=track,
        target_kind=target,
        base_chance=base_chance,
        risk=risk,
        execution_turns=execution,
        cooldown_turns=cooldown,
        max_target_rank=max_target_rank,
        approval_above_rank=approval_above,
        requires_committee_approval=committee,
        can_be_decree=decree,
        department=department,
        success=success or EffectBundle(),
        failure=failure or EffectBundle(),
    )
