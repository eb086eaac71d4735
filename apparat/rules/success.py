"""
Success chance calculation.

Pure functions: nothing here mutates state or rolls dice, so every modifier
can be checked directly. All chances are clamped to [MIN_CHANCE, MAX_CHANCE].
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..state.schema import (
    Character,
    Country,
    Domain,
    MinistryDepartment,
    Player,
    PoliticalBloc,
    Track,
    WorldStats,
    clamp,
)

if TYPE_CHECKING:
    from ..catalog.models import ActionDefinition


MIN_CHANCE = 5
MAX_CHANCE = 95

POSITION_BONUS_PER_RANK = 5
NETWORK_BONUS_CAP = 10

# (divisor, cap) for the standing bonus
STANDING_BONUS: dict[Domain, tuple[int, int]] = {
    Domain.SECURITY: (20, 5),
    Domain.DIPLOMACY: (20, 5),
    Domain.MINISTRY: (12, 8),
}


@dataclass(frozen=True)
class ActorProfile:
    """The parts of an actor the calculator reads."""
    rank: int
    track: Track | None = None
    standing: int = 0
    network: int = 0

    @classmethod
    def from_player(cls, player: Player) -> "ActorProfile":
        return cls(
            rank=player.rank,
            track=player.track,
            standing=player.standing,
            network=player.network,
        )

    @classmethod
    def from_character(cls, char: Character) -> "ActorProfile":
        return cls(rank=char.position, track=char.track)


def _div(value: int, divisor: int) -> int:
    """Integer division truncating toward zero, for signed counters."""
    return int(value / divisor)


def clamp_chance(value: int) -> int:
    return clamp(value, MIN_CHANCE, MAX_CHANCE)


def position_bonus(action: "ActionDefinition", actor: ActorProfile) -> int:
    return max(0, actor.rank - action.min_rank) * POSITION_BONUS_PER_RANK


def network_bonus(actor: ActorProfile) -> int:
    return min(NETWORK_BONUS_CAP, max(0, actor.network) // 10)


def standing_bonus(domain: Domain, actor: ActorProfile) -> int:
    divisor, cap = STANDING_BONUS[domain]
    return min(cap, max(0, actor.standing) // divisor)


# -----------------------------------------------------------------------------
# Domain modifiers
# -----------------------------------------------------------------------------

def security_target_modifier(actor: ActorProfile, target: Character | None) -> int:
    """Senior and loyal targets are harder to move against."""
    if target is None:
        return 0
    modifier = 0
    target_rank = target.position
    if target_rank > actor.rank:
        modifier -= (target_rank - actor.rank) * 10
    if target_rank >= 4:
        modifier -= (target_rank - 3) * 5
    if target.personality.loyal > 60:
        modifier -= (target.personality.loyal - 60) // 10
    return modifier


def diplomacy_country_modifier(action: "ActionDefinition", country: Country | None) -> int:
    if country is None:
        return 0
    modifier = 0
    improving = action.success.relationship > 0
    damaging = action.success.relationship < 0

    if improving:
        modifier += _div(country.relationship, 10)
        if country.bloc == PoliticalBloc.SOCIALIST:
            modifier += 10
    elif damaging:
        modifier -= _div(country.relationship, 15)

    if country.military_strength > 70:
        modifier -= 5

    if "espionage" in action.id or "intel" in action.id:
        modifier += country.intelligence_assets // 10

    return modifier


def ministry_world_modifier(action: "ActionDefinition", stats: WorldStats) -> int:
    modifier = 0
    if stats.stability > 60:
        modifier += 8
    elif stats.stability < 30:
        modifier -= 10

    if action.department == MinistryDepartment.FINANCE or action.success.treasury != 0:
        if stats.treasury > 70:
            modifier += 5
        elif stats.treasury < 30:
            modifier -= 10
    return modifier


def ministry_department_modifier(
    action: "ActionDefinition",
    actor: ActorProfile,
    stats: WorldStats,
) -> int:
    department = action.department
    if department is None:
        return 0

    modifier = 0
    if department == MinistryDepartment.FINANCE:
        if stats.treasury > 50:
            modifier += 5
        elif stats.treasury < 30:
            modifier -= 5
    elif department == MinistryDepartment.DEVELOPMENT_REFORM:
        if stats.industrial_output > 50:
            modifier += 5
    elif department == MinistryDepartment.AUDIT:
        if stats.stability < 40:
            modifier += 5  # Audits land harder in unstable times
    elif department == MinistryDepartment.GENERAL_OFFICE:
        if actor.network > 50:
            modifier += 5
    elif department == MinistryDepartment.HUMAN_RESOURCES:
        if actor.standing > 50:
            modifier += 5
    elif department == MinistryDepartment.COMMERCE:
        if stats.international_standing > 50:
            modifier += 5
    elif department == MinistryDepartment.INDUSTRY:
        if stats.industrial_output > 60:
            modifier += 5

    if department.is_commission:
        modifier += 5
    return modifier


def ministry_target_modifier(target: Character | None) -> int:
    if target is None:
        return 0
    modifier = -target.position * 3
    if target.fear > 60:
        modifier -= 10
    if target.disposition > 30:
        modifier += 10
    elif target.disposition < -30:
        modifier -= 10
    return modifier


# -----------------------------------------------------------------------------
# Entry points
# -----------------------------------------------------------------------------

def calculate_success_chance(
    action: "ActionDefinition",
    actor: ActorProfile,
    stats: WorldStats,
    target: Character | Country | None = None,
) -> int:
    """
    Full success chance for a player-initiated action.

    Args:
        action: The catalog entry
        actor: Rank, standing and network of whoever acts
        stats: World counters
        target: Character or Country, matching the action's target kind

    Returns:
        Chance in percent, clamped to [5, 95]
    """
    chance = action.base_chance
    chance += position_bonus(action, actor)
    chance += network_bonus(actor)
    chance += standing_bonus(action.domain, actor)
    chance += action.risk_modifier

    if action.domain == Domain.SECURITY:
        if isinstance(target, Character):
            chance += security_target_modifier(actor, target)
    elif action.domain == Domain.DIPLOMACY:
        if isinstance(target, Country):
            chance += diplomacy_country_modifier(action, target)
    elif action.domain == Domain.MINISTRY:
        chance += ministry_world_modifier(action, stats)
        chance += ministry_department_modifier(action, actor, stats)
        if isinstance(target, Character):
            chance += ministry_target_modifier(target)

    return clamp_chance(chance)


def npc_success_chance(action: "ActionDefinition", rank: int) -> int:
    """Simplified chance for NPC actors: base + rank x 5, nothing else."""
    return clamp_chance(action.base_chance + rank * POSITION_BONUS_PER_RANK)
