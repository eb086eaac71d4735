"""
Effect applicators.

One applicator per domain. The engine hands each outcome bundle to its
domain's applicator with an EffectContext; the applicator moves the
counters and starts whatever sub-process the bundle triggers. Every delta is
applied once, with its sign as written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from ..rules import interrogation as interrogation_rules
from ..state.event_bus import EventBus
from ..state.schema import (
    Character,
    CharacterStatus,
    Country,
    EffectBundle,
    TargetKind,
    World,
    WorldFlag,
    clamp,
)
from ..tools.dice import Dice
from .characters import demote_character, dismiss_character, execute_character

if TYPE_CHECKING:
    from ..catalog.models import ActionDefinition
    from .detention import DetentionProcess
    from .trials import TrialProcess

logger = logging.getLogger(__name__)

WORLD_FIELDS = (
    "stability",
    "treasury",
    "popular_support",
    "elite_loyalty",
    "international_standing",
    "industrial_output",
)

ACTOR_FIELDS = ("standing", "network", "patron_favor", "exposure")


@dataclass
class EffectContext:
    """Everything an applicator may touch for one outcome."""
    world: World
    action: "ActionDefinition"
    dice: Dice
    bus: EventBus
    detentions: "DetentionProcess"
    trials: "TrialProcess"
    actor_id: str = "player"
    target_id: str | None = None
    succeeded: bool = True

    @property
    def is_player(self) -> bool:
        return self.actor_id == "player"

    @property
    def turn(self) -> int:
        return self.world.turn

    def target_character(self) -> Character | None:
        if self.action.target_kind != TargetKind.CHARACTER:
            return None
        return self.world.character(self.target_id)

    def target_country(self) -> Country | None:
        if self.action.target_kind not in (TargetKind.COUNTRY, TargetKind.TREATY):
            return None
        return self.world.country(self.target_id)


@dataclass
class AppliedEffects:
    """Records spawned by applying a bundle."""
    detention_id: str | None = None
    trial_id: str | None = None
    implicated_ids: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


EffectApplicator = Callable[[EffectContext, EffectBundle], AppliedEffects]


# -----------------------------------------------------------------------------
# Shared
# -----------------------------------------------------------------------------

def apply_common(ctx: EffectContext, bundle: EffectBundle) -> AppliedEffects:
    """World counters, the acting player's counters and flags."""
    applied = AppliedEffects()
    stats = ctx.world.stats
    for name in WORLD_FIELDS:
        delta = getattr(bundle, name)
        if delta:
            stats.apply(name, delta)

    if ctx.is_player:
        player = ctx.world.player
        for name in ACTOR_FIELDS:
            delta = getattr(bundle, name)
            if delta:
                setattr(player, name, clamp(getattr(player, name) + delta))

    if bundle.sets_flag is not None:
        ctx.world.set_flag(bundle.sets_flag)
    if bundle.clears_flag is not None:
        ctx.world.clear_flag(bundle.clears_flag)
    return applied


# -----------------------------------------------------------------------------
# Security
# -----------------------------------------------------------------------------

def apply_security_effects(ctx: EffectContext, bundle: EffectBundle) -> AppliedEffects:
    applied = apply_common(ctx, bundle)
    target = ctx.target_character()
    if target is None:
        return applied

    if bundle.suspicion:
        target.suspicion = clamp(target.suspicion + bundle.suspicion)
    if bundle.evidence:
        target.evidence = clamp(target.evidence + bundle.evidence)
        detention = ctx.world.active_detention_for(target.id)
        if detention is not None and bundle.evidence > 0:
            detention.evidence = clamp(detention.evidence + bundle.evidence)
    if bundle.reveals_loyalty:
        target.loyalty_known = True
        applied.notes.append(f"{target.name}'s loyalty is now known")
    if target.status == CharacterStatus.ACTIVE and (bundle.suspicion > 0 or bundle.evidence > 0):
        target.status = CharacterStatus.UNDER_INVESTIGATION

    if bundle.implicates_others:
        named = interrogation_rules.draw_implicated(target, ctx.world.characters, ctx.dice)
        for other_id in named:
            other = ctx.world.character(other_id)
            if other is not None and other.status == CharacterStatus.ACTIVE:
                other.status = CharacterStatus.UNDER_INVESTIGATION
        applied.implicated_ids = named

    if bundle.target_executed:
        execute_character(ctx.world, target, ctx.bus, cause=ctx.action.id)
        applied.notes.append(f"{target.name} eliminated")
        return applied

    if bundle.target_dismissed:
        dismiss_character(ctx.world, target, ctx.bus)
        applied.notes.append(f"{target.name} dismissed")
    if bundle.target_demoted:
        if demote_character(ctx.world, target, ctx.bus):
            applied.notes.append(f"{target.name} demoted")

    # Custody is exclusive: one open detention or trial per official
    if bundle.detains_target and target.is_alive and ctx.world.active_trial_for(target.id) is None:
        detention = ctx.detentions.start(target, initiated_by=ctx.actor_id)
        applied.detention_id = detention.id
        applied.notes.append(f"{target.name} detained")

    if bundle.starts_trial and target.is_alive and ctx.world.active_detention_for(target.id) is None:
        trial = ctx.trials.start(target)
        applied.trial_id = trial.id
        applied.notes.append(f"{target.name} charged")

    return applied


# -----------------------------------------------------------------------------
# Diplomacy
# -----------------------------------------------------------------------------

def apply_diplomacy_effects(ctx: EffectContext, bundle: EffectBundle) -> AppliedEffects:
    applied = apply_common(ctx, bundle)
    country = ctx.target_country()
    if country is None:
        return applied

    if bundle.relationship:
        country.modify_relationship(bundle.relationship)
    if bundle.tension:
        country.tension = clamp(country.tension + bundle.tension)
    if bundle.intelligence:
        country.intelligence_assets = clamp(country.intelligence_assets + bundle.intelligence)
    if bundle.counter_intel:
        country.espionage_activity = clamp(country.espionage_activity + bundle.counter_intel)

    if bundle.bloc_relationship:
        for other in ctx.world.countries:
            if other.id != country.id and other.bloc == country.bloc:
                other.modify_relationship(bundle.bloc_relationship)

    if ctx.succeeded and bundle.treaty is not None and bundle.treaty not in country.treaties:
        country.treaties.append(bundle.treaty)
        applied.notes.append(f"{bundle.treaty.value} signed with {country.name}")

    if ctx.succeeded and ctx.action.target_kind == TargetKind.TREATY and country.treaties:
        dropped = country.treaties.pop()
        applied.notes.append(f"{dropped.value} with {country.name} abrogated")

    return applied


# -----------------------------------------------------------------------------
# Ministry
# -----------------------------------------------------------------------------

def apply_ministry_effects(ctx: EffectContext, bundle: EffectBundle) -> AppliedEffects:
    applied = apply_common(ctx, bundle)

    target = ctx.target_character()
    if target is not None:
        if bundle.disposition:
            target.disposition = clamp(target.disposition + bundle.disposition, -100, 100)
        if bundle.fear:
            target.fear = clamp(target.fear + bundle.fear)

    if bundle.initiates_reform:
        ctx.world.set_flag(WorldFlag.REFORM_UNDERWAY)
        applied.notes.append("Administrative reform underway")
    if bundle.initiates_audit:
        ctx.world.set_flag(WorldFlag.AUDIT_UNDERWAY)
        applied.notes.append("Department audit underway")

    return applied
