"""
The action engine.

One engine, three domains. A DomainProfile binds a catalog, an effect
applicator and a scheduling rule; everything else (validation, cooldowns,
rolls, pending records) is shared.

    request -> Rejected
            -> Resolved   (roll now, apply bundle)
            -> Scheduled  (pending record or ministry project, resolved by a later sweep)

Side effects of a request are exactly: a cooldown entry, the outcome bundle
(or a scheduled record), and any detention or trial the bundle starts.
A rejected request mutates nothing.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from ..catalog import Catalog, get_catalog
from ..catalog.models import ActionDefinition
from ..rules.success import ActorProfile, calculate_success_chance, npc_success_chance
from ..state.event_bus import EventBus, EventType, get_event_bus
from ..state.schema import Character, Domain, PendingAction, RecordStatus, World
from ..state.schemas import ActionResult, ActionStatus, ValidationResult
from ..tools.dice import Dice
from .detention import DetentionProcess
from .effects import (
    EffectApplicator,
    EffectContext,
    apply_diplomacy_effects,
    apply_ministry_effects,
    apply_security_effects,
)
from .projects import ProjectBoard
from .trials import TrialProcess
from .validation import EligibilityValidator, starts_project

logger = logging.getLogger(__name__)

CORRUPTED_ACTION = "Action data corrupted"


@dataclass(frozen=True)
class DomainProfile:
    """What makes a domain different: its table, its effects, when it defers."""
    domain: Domain
    catalog: Catalog
    apply_effects: EffectApplicator
    schedules: Callable[[ActionDefinition], bool]


def _schedules_when_multi_turn(action: ActionDefinition) -> bool:
    return action.execution_turns > 0


DOMAIN_PROFILES: dict[Domain, DomainProfile] = {
    Domain.SECURITY: DomainProfile(
        Domain.SECURITY,
        get_catalog(Domain.SECURITY),
        apply_security_effects,
        _schedules_when_multi_turn,
    ),
    Domain.DIPLOMACY: DomainProfile(
        Domain.DIPLOMACY,
        get_catalog(Domain.DIPLOMACY),
        apply_diplomacy_effects,
        _schedules_when_multi_turn,
    ),
    Domain.MINISTRY: DomainProfile(
        Domain.MINISTRY,
        get_catalog(Domain.MINISTRY),
        apply_ministry_effects,
        starts_project,
    ),
}


class ActionEngine:
    """
    Validates, resolves and schedules actions for one domain of one world.

    Usage:
        engine = ActionEngine(world, Domain.SECURITY, Dice(seed=7))
        result = engine.request("open_case_file", target_id="c1")
        if result.is_rejected:
            print(result.reason)
    """

    def __init__(
        self,
        world: World,
        domain: Domain,
        dice: Dice,
        bus: EventBus | None = None,
        detentions: DetentionProcess | None = None,
        trials: TrialProcess | None = None,
        profile: DomainProfile | None = None,
    ):
        self.world = world
        self.domain = domain
        self.dice = dice
        self.bus = bus or get_event_bus()
        self.profile = profile or DOMAIN_PROFILES[domain]
        self.trials = trials or TrialProcess(world, dice, self.bus)
        self.detentions = detentions or DetentionProcess(world, dice, self.bus, self.trials)
        self.validator = EligibilityValidator(world)
        self.projects = ProjectBoard(self)

    @property
    def catalog(self) -> Catalog:
        return self.profile.catalog

    @property
    def ledger(self):
        return self.world.ledger(self.domain)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def validate(self, action_id: str, target_id: str | None = None) -> ValidationResult:
        """Player eligibility and odds, without doing anything."""
        return self.validator.validate(self.catalog.require(action_id), target_id)

    def available_actions(self) -> list[tuple[ActionDefinition, ValidationResult]]:
        """Actions open to the player's position, each with an untargeted verdict."""
        return [
            (action, self.validator.validate(action))
            for action in self.catalog.for_rank(self.world.player.rank)
        ]

    def player_success_chance(self, action: ActionDefinition, target_id: str | None) -> int:
        target = self.validator.resolve_target(action, target_id)
        return calculate_success_chance(
            action, ActorProfile.from_player(self.world.player), self.world.stats, target
        )

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def request(
        self,
        action_id: str,
        actor_id: str = "player",
        target_id: str | None = None,
    ) -> ActionResult:
        """
        Attempt an action.

        Args:
            action_id: Catalog id
            actor_id: "player" or an NPC id
            target_id: Character or country id, or a free-form label for
                faction, sector, ministry and policy targets

        Returns:
            ActionResult with status rejected, resolved or scheduled

        Raises:
            UnknownActionError: action_id is not in this domain's catalog
        """
        if actor_id != "player":
            return self.execute_npc(actor_id, action_id, target_id)

        action = self.catalog.require(action_id)
        verdict = self.validator.validate(action, target_id)
        if not verdict.can_execute:
            return self._reject(action, "player", target_id, verdict.reason or "Not allowed")

        self.ledger.cooldowns.set_cooldown(action.id, self.world.turn, action.cooldown_turns)

        if self.profile.schedules(action):
            result = self._schedule(action, "player", target_id, verdict.success_chance)
        else:
            result = self.land(action, "player", target_id, verdict.success_chance)
        result.requires_approval = verdict.requires_approval
        return result

    def execute_npc(
        self,
        npc_id: str,
        action_id: str,
        target_id: str | None = None,
    ) -> ActionResult:
        """Same path as the player, with NPC validation and the simplified formula."""
        action = self.catalog.require(action_id)
        npc = self.world.character(npc_id)
        if npc is None:
            return self._reject(action, npc_id, target_id, "Unknown actor")

        verdict = self.validator.validate_npc(action, npc, target_id)
        if not verdict.can_execute:
            return self._reject(action, npc_id, target_id, verdict.reason or "Not allowed")

        self.ledger.tracker_for(npc.id).set_cooldown(
            action.id, self.world.turn, action.cooldown_turns
        )
        if self.profile.schedules(action):
            return self._schedule(action, npc.id, target_id, verdict.success_chance)
        return self.land(action, npc.id, target_id, verdict.success_chance)

    def _reject(
        self,
        action: ActionDefinition,
        actor_id: str,
        target_id: str | None,
        reason: str,
    ) -> ActionResult:
        self.bus.emit(
            EventType.ACTION_REJECTED,
            world_id=self.world.id,
            turn=self.world.turn,
            domain=self.domain.value,
            action_id=action.id,
            actor_id=actor_id,
            reason=reason,
        )
        return ActionResult.rejected(
            self.domain, action.id, reason, actor_id, target_id, self.world.turn
        )

    # -------------------------------------------------------------------------
    # Scheduling
    # -------------------------------------------------------------------------

    def _schedule(
        self,
        action: ActionDefinition,
        actor_id: str,
        target_id: str | None,
        chance: int,
    ) -> ActionResult:
        turn = self.world.turn
        if self.domain == Domain.MINISTRY:
            project = self.projects.start(action, actor_id, target_id, chance)
            record_id, completion = project.id, project.completion_turn
        else:
            record = PendingAction(
                domain=self.domain,
                action_id=action.id,
                target_id=target_id,
                initiated_turn=turn,
                completion_turn=turn + action.execution_turns,
                initiator=actor_id,
                success_chance=chance,
            )
            self.ledger.pending.append(record)
            record_id, completion = record.id, record.completion_turn

        turns = completion - turn
        description = f"{action.name} initiated. Will complete in {turns} turn(s)."
        logger.info(f"[{self.domain.value}] {actor_id} scheduled {action.id} for turn {completion}")
        self.bus.emit(
            EventType.ACTION_SCHEDULED,
            world_id=self.world.id,
            turn=turn,
            domain=self.domain.value,
            action_id=action.id,
            actor_id=actor_id,
            target_id=target_id,
            record_id=record_id,
            completion_turn=completion,
        )
        return ActionResult(
            status=ActionStatus.SCHEDULED,
            domain=self.domain,
            action_id=action.id,
            actor_id=actor_id,
            target_id=target_id,
            turn=turn,
            success_chance=chance,
            completion_turn=completion,
            record_id=record_id,
            description=description,
        )

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def land(
        self,
        action: ActionDefinition,
        actor_id: str,
        target_id: str | None,
        chance: int,
    ) -> ActionResult:
        """Roll once against the chance and apply the matching bundle."""
        roll = self.dice.roll_against(chance, f"{self.domain.value}.{action.id}")
        bundle = action.success if roll.success else action.failure

        ctx = EffectContext(
            world=self.world,
            action=action,
            dice=self.dice,
            bus=self.bus,
            detentions=self.detentions,
            trials=self.trials,
            actor_id=actor_id,
            target_id=target_id,
            succeeded=roll.success,
        )
        applied = self.profile.apply_effects(ctx, bundle)

        outcome = "succeeded" if roll.success else "failed"
        description = f"{action.name} {outcome}."
        if applied.notes:
            description += " " + "; ".join(applied.notes) + "."

        result = ActionResult(
            status=ActionStatus.RESOLVED,
            domain=self.domain,
            action_id=action.id,
            actor_id=actor_id,
            target_id=target_id,
            turn=self.world.turn,
            succeeded=roll.success,
            roll=roll.roll,
            success_chance=chance,
            effects=bundle,
            narrative_key=action.narrative_key(roll.success),
            description=description,
            detention_id=applied.detention_id,
            trial_id=applied.trial_id,
            implicated_ids=applied.implicated_ids,
        )
        self.bus.emit(
            EventType.ACTION_RESOLVED,
            world_id=self.world.id,
            turn=self.world.turn,
            domain=self.domain.value,
            action_id=action.id,
            actor_id=actor_id,
            target_id=target_id,
            succeeded=roll.success,
            roll=roll.roll,
            chance=chance,
            narrative_key=result.narrative_key,
            changes=bundle.changes(),
        )
        return result

    def resolve_pending(self, turn: int) -> list[ActionResult]:
        """
        Resolve every record due by this turn, each exactly once.

        Records resolved on an earlier sweep are pruned first.
        """
        ledger = self.ledger
        ledger.pending = [
            p for p in ledger.pending
            if p.is_pending or (p.resolved_turn is not None and p.resolved_turn >= turn)
        ]

        results = []
        for record in list(ledger.pending):
            if not record.is_due(turn):
                continue
            result = self._resolve_record(record, turn)
            if result is not None:
                results.append(result)
        return results

    def _resolve_record(self, record: PendingAction, turn: int) -> ActionResult | None:
        action = self.catalog.get(record.action_id)
        if action is None:
            return self._corrupted(record, turn)

        npc: Character | None = None
        if record.initiator != "player":
            npc = self.world.character(record.initiator)
            if npc is None or not npc.is_free:
                self._close(record, turn, RecordStatus.CANCELLED, "Initiator no longer able to act")
                logger.info(f"Pending {record.action_id} cancelled: initiator {record.initiator} unavailable")
                return None

        target = self.validator.resolve_target(action, record.target_id)
        if action.needs_target and target is None:
            self._close(record, turn, RecordStatus.CANCELLED, "Target no longer exists")
            return None
        if isinstance(target, Character) and not target.is_alive:
            self._close(record, turn, RecordStatus.CANCELLED, "Target is no longer active")
            return None

        if npc is not None:
            chance = npc_success_chance(action, npc.position)
        else:
            chance = self.player_success_chance(action, record.target_id)

        result = self.land(action, record.initiator, record.target_id, chance)
        record.status = RecordStatus.RESOLVED
        record.resolved_turn = turn
        record.succeeded = result.succeeded
        record.roll = result.roll
        record.success_chance = chance
        record.result_description = result.description
        record.effects_applied = result.effects
        result.record_id = record.id

        self.bus.emit(
            EventType.PENDING_RESOLVED,
            world_id=self.world.id,
            turn=turn,
            domain=self.domain.value,
            record_id=record.id,
            action_id=action.id,
            succeeded=result.succeeded,
            narrative_key=result.narrative_key,
        )
        return result

    def _close(self, record: PendingAction, turn: int, status: RecordStatus, description: str) -> None:
        record.status = status
        record.resolved_turn = turn
        record.result_description = description

    def _corrupted(self, record: PendingAction, turn: int) -> ActionResult:
        logger.warning(
            f"[{self.domain.value}] Pending record {record.id} names unknown action "
            f"'{record.action_id}'"
        )
        self._close(record, turn, RecordStatus.RESOLVED, CORRUPTED_ACTION)
        record.succeeded = False
        self.bus.emit(
            EventType.STATE_CORRUPTED,
            world_id=self.world.id,
            turn=turn,
            domain=self.domain.value,
            record_id=record.id,
            action_id=record.action_id,
        )
        return ActionResult(
            status=ActionStatus.RESOLVED,
            domain=self.domain,
            action_id=record.action_id,
            actor_id=record.initiator,
            target_id=record.target_id,
            turn=turn,
            succeeded=False,
            record_id=record.id,
            reason=CORRUPTED_ACTION,
            description=CORRUPTED_ACTION,
        )
