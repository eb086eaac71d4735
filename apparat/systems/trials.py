"""
Show trial process.

A trial moves accusation -> confession_extraction -> public_trial ->
sentencing -> completed. Each phase has a minimum stay; once it has been
served, the phase's transition function runs and the trial moves on. At most
one phase change happens per advance.

Usage:
    trials = TrialProcess(world, dice, bus)
    trial = trials.start(defendant, charges=[TrialCharge.CORRUPTION])
    changes = trials.advance(world.turn)
"""

import logging
from dataclasses import dataclass
from typing import Callable

from ..rules import interrogation as rules
from ..state.event_bus import EventBus, EventType, get_event_bus
from ..state.schema import (
    Character,
    ConfessionType,
    Trial,
    TrialCharge,
    TrialPhase,
    TrialSentence,
    World,
)
from ..state.schemas import PhaseChange
from ..tools.dice import Dice
from .characters import (
    demote_character,
    detain_character,
    execute_character,
    exile_character,
    imprison_character,
    release_character,
)

logger = logging.getLogger(__name__)


# Turns a trial must spend in a phase before it can leave it
PHASE_MIN_TURNS: dict[TrialPhase, int] = {
    TrialPhase.ACCUSATION: 2,
    TrialPhase.CONFESSION_EXTRACTION: 3,
    TrialPhase.PUBLIC_TRIAL: 2,
    TrialPhase.SENTENCING: 1,
}

NEXT_PHASE: dict[TrialPhase, TrialPhase] = {
    TrialPhase.ACCUSATION: TrialPhase.CONFESSION_EXTRACTION,
    TrialPhase.CONFESSION_EXTRACTION: TrialPhase.PUBLIC_TRIAL,
    TrialPhase.PUBLIC_TRIAL: TrialPhase.SENTENCING,
    TrialPhase.SENTENCING: TrialPhase.COMPLETED,
}

MARTYR_POPULAR_SUPPORT_PENALTY = -5


@dataclass
class TrialStep:
    """What leaving a phase did."""
    next_phase: TrialPhase
    note: str = ""


class TrialProcess:
    """Drives every open trial in a world."""

    def __init__(self, world: World, dice: Dice, bus: EventBus | None = None):
        self.world = world
        self.dice = dice
        self.bus = bus or get_event_bus()
        self._transitions: dict[TrialPhase, Callable[[Trial, Character | None, int], TrialStep]] = {
            TrialPhase.ACCUSATION: self._leave_accusation,
            TrialPhase.CONFESSION_EXTRACTION: self._leave_confession_extraction,
            TrialPhase.PUBLIC_TRIAL: self._leave_public_trial,
            TrialPhase.SENTENCING: self._leave_sentencing,
        }

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(
        self,
        defendant: Character,
        charges: list[TrialCharge] | None = None,
        turn: int | None = None,
        source_detention_id: str | None = None,
    ) -> Trial:
        """
        Formally charge an official. Returns the already-open trial if one exists.

        Charges default to what the defendant's evidence file supports.
        """
        existing = self.world.active_trial_for(defendant.id)
        if existing is not None:
            return existing

        turn = self.world.turn if turn is None else turn
        if not charges:
            charges = rules.charges_from_evidence(defendant.evidence)

        trial = Trial(
            defendant_id=defendant.id,
            defendant_name=defendant.name,
            defendant_rank=defendant.position,
            charges=list(charges),
            initiated_turn=turn,
            phase_entered_turn=turn,
            international_condemnation=rules.international_condemnation(
                defendant.position, charges
            ),
            source_detention_id=source_detention_id,
        )
        self.world.trials.append(trial)
        detain_character(defendant)

        logger.info(
            f"Trial opened against {defendant.name}: "
            f"{', '.join(c.value for c in trial.charges)}"
        )
        self.bus.emit(
            EventType.TRIAL_STARTED,
            world_id=self.world.id,
            turn=turn,
            trial_id=trial.id,
            defendant_id=defendant.id,
            charges=[c.value for c in trial.charges],
        )
        return trial

    def advance(self, turn: int) -> list[PhaseChange]:
        """Advance every open trial by at most one phase."""
        changes = []
        for trial in list(self.world.trials):
            change = self.advance_trial(trial, turn)
            if change is not None:
                changes.append(change)
        return changes

    def advance_trial(self, trial: Trial, turn: int) -> PhaseChange | None:
        if trial.is_completed:
            return None
        if turn - trial.phase_entered_turn < PHASE_MIN_TURNS[trial.phase]:
            return None

        defendant = self.world.character(trial.defendant_id)
        before = trial.phase
        step = self._transitions[before](trial, defendant, turn)

        trial.phase = step.next_phase
        trial.phase_entered_turn = turn

        self.bus.emit(
            EventType.TRIAL_PHASE_CHANGED,
            world_id=self.world.id,
            turn=turn,
            trial_id=trial.id,
            before=before.value,
            after=step.next_phase.value,
        )
        if trial.is_completed:
            self._archive(trial)

        return PhaseChange(
            record_id=trial.id,
            subject_id=trial.defendant_id,
            subject_name=trial.defendant_name,
            from_phase=before.value,
            to_phase=step.next_phase.value,
            note=step.note,
        )

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _leave_accusation(self, trial: Trial, defendant: Character | None, turn: int) -> TrialStep:
        return TrialStep(TrialPhase.CONFESSION_EXTRACTION, "Charges read")

    def _leave_confession_extraction(
        self, trial: Trial, defendant: Character | None, turn: int
    ) -> TrialStep:
        if defendant is None or not defendant.is_alive:
            trial.confession_type = None
            return TrialStep(TrialPhase.PUBLIC_TRIAL, "Tried in absentia")

        confession = rules.extract_trial_confession(defendant.personality, self.dice)
        trial.confession_type = confession
        trial.confession_obtained = confession != ConfessionType.RESISTED
        return TrialStep(TrialPhase.PUBLIC_TRIAL, f"Confession: {confession.value}")

    def _leave_public_trial(self, trial: Trial, defendant: Character | None, turn: int) -> TrialStep:
        sentence = rules.draw_sentence(
            trial.charges, trial.confession_type, trial.defendant_rank, self.dice
        )
        trial.sentence = sentence
        trial.intimidation_gained = rules.intimidation_gained(sentence, trial.confession_type)
        trial.martyr_created = rules.creates_martyr(trial.confession_type)
        return TrialStep(TrialPhase.SENTENCING, f"Sentence: {sentence.value}")

    def _leave_sentencing(self, trial: Trial, defendant: Character | None, turn: int) -> TrialStep:
        stats = self.world.stats
        stats.apply("elite_loyalty", trial.intimidation_gained // 10)
        if trial.martyr_created:
            stats.apply("popular_support", MARTYR_POPULAR_SUPPORT_PENALTY)
        stats.apply("international_standing", -trial.international_condemnation)

        if defendant is not None and defendant.is_alive and trial.sentence is not None:
            self._apply_sentence(trial.sentence, defendant)

        trial.completed_turn = turn
        return TrialStep(TrialPhase.COMPLETED, "Verdict carried out")

    def _apply_sentence(self, sentence: TrialSentence, defendant: Character) -> None:
        if sentence == TrialSentence.EXECUTION:
            execute_character(self.world, defendant, self.bus, cause="sentenced")
        elif sentence in (
            TrialSentence.IMPRISONMENT_10,
            TrialSentence.IMPRISONMENT_15,
            TrialSentence.IMPRISONMENT_25,
        ):
            imprison_character(defendant)
        elif sentence == TrialSentence.EXILE:
            exile_character(defendant)
        else:
            release_character(defendant)
            demote_character(self.world, defendant, self.bus)

    def _archive(self, trial: Trial) -> None:
        self.world.trials = [t for t in self.world.trials if t.id != trial.id]
        self.world.trial_archive.append(trial)

        logger.info(
            f"Trial of {trial.defendant_name} completed: "
            f"{trial.sentence.value if trial.sentence else 'no sentence'}"
        )
        self.bus.emit(
            EventType.TRIAL_COMPLETED,
            world_id=self.world.id,
            turn=self.world.turn,
            trial_id=trial.id,
            defendant_id=trial.defendant_id,
            sentence=trial.sentence.value if trial.sentence else None,
            intimidation=trial.intimidation_gained,
            condemnation=trial.international_condemnation,
            martyr=trial.martyr_created,
        )
