"""
Detention process.

A detention moves isolation -> interrogation -> confession -> documentation
-> referral and then ends with an outcome. Each phase has one transition
function in a dispatch table; advance() calls the function for the current
phase and applies the step it returns. Phases never move backwards, evidence
never drops, and a record changes phase at most once per turn.

The one exception to forward motion is the death branch: after eight turns
on a heavy file, a detainee can die in custody.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

from ..rules import interrogation as rules
from ..state.event_bus import EventBus, EventType, get_event_bus
from ..state.schema import (
    Character,
    CharacterStatus,
    ConfessionType,
    Detention,
    DetentionLocation,
    DetentionOutcome,
    DetentionPhase,
    World,
)
from ..state.schemas import PhaseChange
from ..tools.dice import Dice
from .characters import (
    demote_character,
    detain_character,
    execute_character,
    expel_character,
    imprison_character,
    release_character,
)
from .trials import TrialProcess

logger = logging.getLogger(__name__)


ISOLATION_TURNS = 2
INTERROGATION_TURNS = 4
INTERROGATION_EVIDENCE = 50
DOCUMENTATION_TURNS = 8

DEATH_MIN_TURNS = 8
DEATH_MIN_EVIDENCE = 80
DEATH_CHANCE = 5

PROTECTORS_RANGE = (6, 9)

# Referral thresholds on accumulated evidence
CLEARED_BELOW = 15
TRIAL_EVIDENCE = 70
EXPEL_EVIDENCE = 50
DEMOTE_EVIDENCE = 30


@dataclass
class DetentionStep:
    """Result of one transition function. None fields mean no change."""
    next_phase: DetentionPhase | None = None
    outcome: DetentionOutcome | None = None
    confession: ConfessionType | None = None
    implicated: list[str] = field(default_factory=list)
    note: str = ""


def referral_outcome(detention: Detention) -> DetentionOutcome:
    """What the commission recommends once the file is complete."""
    if detention.evidence < CLEARED_BELOW:
        return DetentionOutcome.CLEARED
    cooperated = (
        detention.confession_obtained
        and detention.confession_type != ConfessionType.RESISTED
    )
    if cooperated and detention.evidence >= TRIAL_EVIDENCE:
        return DetentionOutcome.REFERRED_TO_TRIAL
    if detention.evidence >= EXPEL_EVIDENCE:
        return DetentionOutcome.EXPELLED
    if detention.evidence >= DEMOTE_EVIDENCE:
        return DetentionOutcome.DEMOTED
    return DetentionOutcome.WARNED


class DetentionProcess:
    """
    Drives every active detention in a world.

    Usage:
        detentions = DetentionProcess(world, dice, bus)
        record = detentions.start(target, initiated_by="player")
        changes, ended = detentions.advance(world.turn)
    """

    def __init__(
        self,
        world: World,
        dice: Dice,
        bus: EventBus | None = None,
        trials: TrialProcess | None = None,
    ):
        self.world = world
        self.dice = dice
        self.bus = bus or get_event_bus()
        self.trials = trials or TrialProcess(world, dice, self.bus)
        self._transitions: dict[DetentionPhase, Callable[[Detention, Character], DetentionStep]] = {
            DetentionPhase.ISOLATION: self._isolation,
            DetentionPhase.INTERROGATION: self._interrogation,
            DetentionPhase.CONFESSION: self._confession,
            DetentionPhase.DOCUMENTATION: self._documentation,
            DetentionPhase.REFERRAL: self._referral,
        }

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(
        self,
        target: Character,
        initiated_by: str = "player",
        turn: int | None = None,
    ) -> Detention:
        """Take an official into custody. Returns the open record if one exists."""
        existing = self.world.active_detention_for(target.id)
        if existing is not None:
            return existing

        turn = self.world.turn if turn is None else turn
        detention = Detention(
            target_id=target.id,
            target_name=target.name,
            target_rank=target.position,
            initiated_by=initiated_by,
            initiated_turn=turn,
            last_advanced_turn=turn,
            evidence=min(100, target.evidence),
            location=self.dice.choice(list(DetentionLocation)),
            protectors=self.dice.between(*PROTECTORS_RANGE),
        )
        self.world.detentions.append(detention)
        detain_character(target)

        logger.info(f"{target.name} taken into detention ({detention.location.value})")
        self.bus.emit(
            EventType.DETENTION_STARTED,
            world_id=self.world.id,
            turn=turn,
            detention_id=detention.id,
            target_id=target.id,
            initiated_by=initiated_by,
        )
        return detention

    def advance(self, turn: int) -> tuple[list[PhaseChange], list[str]]:
        """
        Advance every active detention to this turn.

        Returns:
            (phase changes, ids of detentions that ended)
        """
        changes: list[PhaseChange] = []
        ended: list[str] = []
        for detention in list(self.world.detentions):
            change = self.advance_detention(detention, turn)
            if change is not None:
                changes.append(change)
            if not detention.is_active:
                ended.append(detention.id)
        return changes, ended

    def advance_detention(self, detention: Detention, turn: int) -> PhaseChange | None:
        """Run one turn of a single detention. A turn already processed is a no-op."""
        if not detention.is_active or turn <= detention.last_advanced_turn:
            return None

        detention.last_advanced_turn = turn
        detention.turns_in_detention = turn - detention.initiated_turn

        target = self.world.character(detention.target_id)
        if target is None:
            logger.warning(
                f"Detention {detention.id}: subject {detention.target_id} no longer exists"
            )
            return self._finish(detention, DetentionOutcome.CLEARED, None, turn, "Subject missing")
        if not target.is_alive:
            return self._finish(detention, DetentionOutcome.DIED_IN_DETENTION, target, turn)

        detention.evidence = min(100, detention.evidence + rules.evidence_gain(self.dice))

        if (
            detention.turns_in_detention > DEATH_MIN_TURNS
            and detention.evidence >= DEATH_MIN_EVIDENCE
            and self.dice.chance(DEATH_CHANCE)
        ):
            return self._finish(
                detention, DetentionOutcome.DIED_IN_DETENTION, target, turn, "Died in custody"
            )

        step = self._transitions[detention.phase](detention, target)
        return self._apply_step(detention, target, step, turn)

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _isolation(self, detention: Detention, target: Character) -> DetentionStep:
        if detention.turns_in_detention >= ISOLATION_TURNS:
            return DetentionStep(DetentionPhase.INTERROGATION, note="Interrogation begins")
        return DetentionStep()

    def _interrogation(self, detention: Detention, target: Character) -> DetentionStep:
        if (
            detention.turns_in_detention >= INTERROGATION_TURNS
            or detention.evidence >= INTERROGATION_EVIDENCE
        ):
            return DetentionStep(DetentionPhase.CONFESSION, note="Pressed for a confession")
        return DetentionStep()

    def _confession(self, detention: Detention, target: Character) -> DetentionStep:
        if detention.is_overdue:
            return DetentionStep(outcome=DetentionOutcome.IMPRISONED, note="Held without end")

        chance = rules.detention_confession_chance(
            target.personality, detention.turns_in_detention, detention.evidence
        )
        if not self.dice.chance(chance):
            return DetentionStep()

        confession = rules.draw_confession_type(target.personality, self.dice)
        implicated = []
        if confession == ConfessionType.IMPLICATED_OTHERS:
            implicated = rules.draw_implicated(target, self.world.characters, self.dice)
        return DetentionStep(
            DetentionPhase.DOCUMENTATION,
            confession=confession,
            implicated=implicated,
            note=f"Confession: {confession.value}",
        )

    def _documentation(self, detention: Detention, target: Character) -> DetentionStep:
        if detention.turns_in_detention >= DOCUMENTATION_TURNS:
            return DetentionStep(
                DetentionPhase.REFERRAL,
                outcome=referral_outcome(detention),
                note="File referred",
            )
        return DetentionStep()

    def _referral(self, detention: Detention, target: Character) -> DetentionStep:
        return DetentionStep(outcome=referral_outcome(detention))

    # -------------------------------------------------------------------------
    # Applying steps
    # -------------------------------------------------------------------------

    def _apply_step(
        self,
        detention: Detention,
        target: Character,
        step: DetentionStep,
        turn: int,
    ) -> PhaseChange | None:
        if step.confession is not None:
            detention.confession_obtained = True
            detention.confession_type = step.confession
            for other_id in step.implicated:
                if other_id not in detention.implicated_ids:
                    detention.implicated_ids.append(other_id)
                other = self.world.character(other_id)
                if other is not None and other.status == CharacterStatus.ACTIVE:
                    other.status = CharacterStatus.UNDER_INVESTIGATION

        change = None
        before = detention.phase
        if step.next_phase is not None and step.next_phase.index > before.index:
            detention.phase = step.next_phase
            change = PhaseChange(
                record_id=detention.id,
                subject_id=detention.target_id,
                subject_name=detention.target_name,
                from_phase=before.value,
                to_phase=step.next_phase.value,
                note=step.note,
            )
            self.bus.emit(
                EventType.DETENTION_PHASE_CHANGED,
                world_id=self.world.id,
                turn=turn,
                detention_id=detention.id,
                before=before.value,
                after=step.next_phase.value,
            )

        if step.outcome is not None:
            ended = self._finish(detention, step.outcome, target, turn, step.note)
            return change or ended
        return change

    def _finish(
        self,
        detention: Detention,
        outcome: DetentionOutcome,
        target: Character | None,
        turn: int,
        note: str = "",
    ) -> PhaseChange:
        """Record the outcome, apply it to the subject and archive the record."""
        detention.outcome = outcome
        detention.ended_turn = turn

        if target is not None:
            self._apply_outcome(detention, outcome, target, turn)

        self.world.detentions = [d for d in self.world.detentions if d.id != detention.id]
        self.world.detention_archive.append(detention)

        logger.info(f"Detention of {detention.target_name} ended: {outcome.value}")
        self.bus.emit(
            EventType.DETENTION_ENDED,
            world_id=self.world.id,
            turn=turn,
            detention_id=detention.id,
            target_id=detention.target_id,
            outcome=outcome.value,
            implicated_ids=list(detention.implicated_ids),
        )
        return PhaseChange(
            record_id=detention.id,
            subject_id=detention.target_id,
            subject_name=detention.target_name,
            from_phase=detention.phase.value,
            to_phase=outcome.value,
            note=note,
        )

    def _apply_outcome(
        self,
        detention: Detention,
        outcome: DetentionOutcome,
        target: Character,
        turn: int,
    ) -> None:
        trial = self.world.active_trial_for(target.id)
        if trial is not None and outcome not in (
            DetentionOutcome.DIED_IN_DETENTION,
            DetentionOutcome.REFERRED_TO_TRIAL,
        ):
            # The open trial keeps the defendant in custody and decides their fate
            logger.info(
                f"{target.name} stays in custody for trial {trial.id}; "
                f"detention outcome {outcome.value} not applied"
            )
            return

        if outcome == DetentionOutcome.DIED_IN_DETENTION:
            execute_character(self.world, target, self.bus, cause="died in detention")
        elif outcome == DetentionOutcome.CLEARED:
            target.is_detained = False
            target.status = CharacterStatus.ACTIVE
        elif outcome == DetentionOutcome.WARNED:
            release_character(target)
        elif outcome == DetentionOutcome.DEMOTED:
            release_character(target)
            demote_character(self.world, target, self.bus)
        elif outcome == DetentionOutcome.EXPELLED:
            expel_character(target)
        elif outcome == DetentionOutcome.IMPRISONED:
            imprison_character(target)
        elif outcome == DetentionOutcome.REFERRED_TO_TRIAL:
            detention.referred_to_trial = True
            target.evidence = max(target.evidence, detention.evidence)
            self.trials.start(
                target,
                charges=rules.charges_from_evidence(detention.evidence),
                turn=turn,
                source_detention_id=detention.id,
            )
