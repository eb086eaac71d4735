"""
Eligibility validation.

Checks run in a fixed order and stop at the first failure, so the reason a
player sees is always the most fundamental one. A failed check is a value,
not an exception: the caller gets a ValidationResult with a reason.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..rules.success import ActorProfile, calculate_success_chance, npc_success_chance
from ..state.schema import (
    Character,
    Country,
    Domain,
    TargetKind,
    World,
    WorldFlag,
)
from ..state.schemas import ValidationResult

if TYPE_CHECKING:
    from ..catalog.models import ActionDefinition


# At and above this position an official acts outside their career track
TRANSCENDS_TRACK_RANK = 7

# Concurrent ministry projects
MAX_ACTIVE_PROJECTS = 2


def starts_project(action: "ActionDefinition") -> bool:
    """Ministry actions that open a multi-turn project instead of resolving now."""
    return (
        action.domain == Domain.MINISTRY
        and action.success.initiates_project
        and action.execution_turns > 1
    )


def takes_into_custody(action: "ActionDefinition") -> bool:
    """Actions whose success detains the target or puts them on trial."""
    return action.success.detains_target or action.success.starts_trial


class EligibilityValidator:
    """
    Validates action requests against one world.

    Usage:
        validator = EligibilityValidator(world)
        verdict = validator.validate(action, target_id="c1")
        if not verdict.can_execute:
            print(verdict.reason)
    """

    def __init__(self, world: World):
        self.world = world

    # -------------------------------------------------------------------------
    # Target lookup
    # -------------------------------------------------------------------------

    def resolve_target(
        self,
        action: "ActionDefinition",
        target_id: str | None,
    ) -> Character | Country | None:
        """The character or country a target id names, for actions that need one."""
        if action.target_kind == TargetKind.CHARACTER:
            return self.world.character(target_id)
        if action.target_kind in (TargetKind.COUNTRY, TargetKind.TREATY):
            return self.world.country(target_id)
        return None

    def _check_target(
        self,
        action: "ActionDefinition",
        actor_rank: int,
        target_id: str | None,
    ) -> tuple[ValidationResult | None, Character | Country | None]:
        """Returns (failure or None, resolved target)."""
        if not action.needs_target:
            return None, None

        target = self.resolve_target(action, target_id)
        if target is None:
            return ValidationResult.failed("Must select a target"), None

        if isinstance(target, Character):
            if not target.is_alive or target.rank is None:
                return ValidationResult.failed("Target is no longer active"), target

            if takes_into_custody(action) and self.in_custody(target):
                return ValidationResult.failed("Target is already in custody"), target

            if action.max_target_rank is not None and target.position > action.max_target_rank:
                return ValidationResult.failed(
                    f"Target is Position {target.position}, "
                    f"maximum allowed is Position {action.max_target_rank}",
                    target_too_senior=True,
                ), target

            if (
                action.domain == Domain.MINISTRY
                and target.position >= actor_rank
                and not action.requires_committee_approval
            ):
                return ValidationResult.failed(
                    "Cannot affect officials at or above your position "
                    "without State Council approval",
                    target_too_senior=True,
                ), target

        return None, target

    # -------------------------------------------------------------------------
    # Approval
    # -------------------------------------------------------------------------

    def requires_approval(
        self,
        action: "ActionDefinition",
        actor_rank: int,
        target: Character | Country | None,
    ) -> bool:
        needed = action.requires_committee_approval
        if (
            isinstance(target, Character)
            and action.approval_above_rank is not None
            and target.position > action.approval_above_rank
        ):
            needed = True

        # Emergency powers let top leadership rule by decree
        if (
            needed
            and action.can_be_decree
            and actor_rank >= TRANSCENDS_TRACK_RANK
            and self.world.has_flag(WorldFlag.EMERGENCY_POWERS_ACTIVE)
        ):
            return False
        return needed

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def active_project_count(self) -> int:
        return sum(1 for p in self.world.projects if not p.is_finished)

    def in_custody(self, target: Character) -> bool:
        """Held by an open detention or an open trial."""
        return (
            self.world.active_detention_for(target.id) is not None
            or self.world.active_trial_for(target.id) is not None
        )

    def _check_slots(self, action: "ActionDefinition") -> ValidationResult | None:
        if starts_project(action) and self.active_project_count() >= MAX_ACTIVE_PROJECTS:
            return ValidationResult.failed(
                f"Maximum active projects reached ({MAX_ACTIVE_PROJECTS})"
            )
        return None

    def validate(
        self,
        action: "ActionDefinition",
        target_id: str | None = None,
    ) -> ValidationResult:
        """Full validation for the player."""
        player = self.world.player
        ledger = self.world.ledger(action.domain)

        # 1. Position
        if player.rank < action.min_rank:
            return ValidationResult.failed(
                f"Requires Position {action.min_rank} (you are Position {player.rank})"
            )

        # 2. Career track
        if (
            action.required_track is not None
            and player.track != action.required_track
            and player.rank < TRANSCENDS_TRACK_RANK
        ):
            return ValidationResult.failed(
                f"Requires {action.required_track.label} career track"
            )

        # 3. Cooldown
        if ledger.cooldowns.is_on_cooldown(action.id, self.world.turn):
            remaining = ledger.cooldowns.turns_remaining(action.id, self.world.turn)
            return ValidationResult.failed(f"On cooldown ({remaining} turns remaining)")

        if not action.stackable and ledger.has_unresolved("player", action.id):
            return ValidationResult.failed("Already in progress")

        # 4. Target
        failure, target = self._check_target(action, player.rank, target_id)
        if failure is not None:
            return failure

        # 5. Resources
        cost = action.resource_cost
        if cost > 0 and self.world.stats.treasury < cost:
            return ValidationResult.failed(
                f"Insufficient resources (treasury {self.world.stats.treasury}, need {cost})"
            )

        # 6. Slots
        failure = self._check_slots(action)
        if failure is not None:
            return failure

        chance = calculate_success_chance(
            action,
            ActorProfile.from_player(player),
            self.world.stats,
            target,
        )
        return ValidationResult(
            can_execute=True,
            success_chance=chance,
            requires_approval=self.requires_approval(action, player.rank, target),
        )

    def validate_npc(
        self,
        action: "ActionDefinition",
        npc: Character,
        target_id: str | None = None,
    ) -> ValidationResult:
        """
        Reduced validation for NPC actors: position, cooldown, target, slots.

        NPCs use the simplified success formula.
        """
        if not npc.is_free:
            return ValidationResult.failed("Actor is not free to act")

        if npc.position < action.min_rank:
            return ValidationResult.failed(
                f"Requires Position {action.min_rank} (actor is Position {npc.position})"
            )

        ledger = self.world.ledger(action.domain)
        tracker = ledger.npc_cooldowns.get(npc.id)
        if tracker is not None and tracker.is_on_cooldown(action.id, self.world.turn):
            remaining = tracker.turns_remaining(action.id, self.world.turn)
            return ValidationResult.failed(f"On cooldown ({remaining} turns remaining)")

        if not action.stackable and ledger.has_unresolved(npc.id, action.id):
            return ValidationResult.failed("Already in progress")

        failure, target = self._check_target(action, npc.position, target_id)
        if failure is not None:
            return failure
        if isinstance(target, Character) and target.id == npc.id:
            return ValidationResult.failed("Cannot target self")

        failure = self._check_slots(action)
        if failure is not None:
            return failure

        return ValidationResult(
            can_execute=True,
            success_chance=npc_success_chance(action, npc.position),
        )
