"""
Tests for the detention process.

Fixed-value dice make the phase timing exact: evidence grows by 5 a turn,
and a roll of 1 always confesses while a roll of 100 never does.
"""

import pytest

from apparat.state.event_bus import EventType, get_event_bus
from apparat.state.schema import (
    CharacterStatus,
    ConfessionType,
    Detention,
    DetentionOutcome,
    DetentionPhase,
    TrialCharge,
)
from apparat.systems.detention import DetentionProcess, referral_outcome


@pytest.fixture
def detained_world(world, detainee):
    world.characters.append(detainee)
    return world


def _run(process, detention, turns):
    """Advance one detention through a range of turns, collecting phase changes."""
    changes = {}
    for turn in turns:
        change = process.advance_detention(detention, turn)
        if change is not None:
            changes[turn] = change
    return changes


class TestStart:
    """Taking an official into custody."""

    def test_start_detains_subject(self, detained_world, detainee, lucky_dice):
        process = DetentionProcess(detained_world, lucky_dice)
        detention = process.start(detainee)

        assert detention.phase == DetentionPhase.ISOLATION
        assert detention.initiated_turn == detained_world.turn
        assert detention.target_rank == 3
        assert 6 <= detention.protectors <= 9
        assert detainee.is_detained
        assert detainee.status == CharacterStatus.DETAINED
        assert get_event_bus().get_history(EventType.DETENTION_STARTED)

    def test_start_is_idempotent_per_subject(self, detained_world, detainee, lucky_dice):
        process = DetentionProcess(detained_world, lucky_dice)
        first = process.start(detainee)
        second = process.start(detainee)
        assert first is second
        assert len(detained_world.detentions) == 1

    def test_start_carries_existing_evidence(self, detained_world, detainee, lucky_dice):
        detainee.evidence = 40
        detention = DetentionProcess(detained_world, lucky_dice).start(detainee)
        assert detention.evidence == 40


class TestPhaseTiming:
    """Minimum stays and evidence shortcuts."""

    def test_isolation_then_interrogation_then_confession(self, detained_world, detainee, lucky_dice):
        process = DetentionProcess(detained_world, lucky_dice)
        detention = process.start(detainee)

        changes = _run(process, detention, range(2, 6))

        assert set(changes) == {3, 5}
        assert changes[3].to_phase == "interrogation"
        assert changes[5].to_phase == "confession"
        assert detention.phase == DetentionPhase.CONFESSION
        assert detention.evidence == 20

    def test_heavy_file_shortens_interrogation(self, detained_world, detainee, lucky_dice):
        detainee.evidence = 60
        process = DetentionProcess(detained_world, lucky_dice)
        detention = process.start(detainee)

        _run(process, detention, range(2, 5))
        assert detention.phase == DetentionPhase.CONFESSION

    def test_one_phase_change_per_turn(self, detained_world, detainee, lucky_dice):
        """Even a jump of many turns only moves one phase."""
        detainee.evidence = 90
        process = DetentionProcess(detained_world, lucky_dice)
        detention = process.start(detainee)

        process.advance_detention(detention, 5)
        assert detention.phase == DetentionPhase.INTERROGATION

    def test_same_turn_twice_is_noop(self, detained_world, detainee, lucky_dice):
        process = DetentionProcess(detained_world, lucky_dice)
        detention = process.start(detainee)

        process.advance_detention(detention, 2)
        evidence = detention.evidence
        assert process.advance_detention(detention, 2) is None
        assert detention.evidence == evidence

    def test_evidence_never_drops(self, detained_world, detainee, dice):
        process = DetentionProcess(detained_world, dice)
        detention = process.start(detainee)
        seen = [detention.evidence]
        for turn in range(2, 14):
            process.advance_detention(detention, turn)
            seen.append(detention.evidence)
            if not detention.is_active:
                break
        assert seen == sorted(seen)
        assert all(value <= 100 for value in seen)


class TestOutcomes:
    """How detentions end."""

    def test_resisted_confession_leads_to_demotion(self, detained_world, detainee, lucky_dice):
        process = DetentionProcess(detained_world, lucky_dice)
        detention = process.start(detainee)

        changes = _run(process, detention, range(2, 10))

        assert changes[6].to_phase == "documentation"
        assert detention.confession_obtained
        assert detention.confession_type == ConfessionType.RESISTED
        assert changes[9].to_phase == "referral"

        assert detention.outcome == DetentionOutcome.DEMOTED
        assert detention.ended_turn == 9
        assert detention.evidence == 40
        assert detainee.rank == 1
        assert detainee.status == CharacterStatus.UNDER_INVESTIGATION
        assert not detainee.is_detained
        assert detained_world.detentions == []
        assert detained_world.detention_archive == [detention]

    def test_never_confessing_ends_in_prison(self, detained_world, detainee, unlucky_dice):
        process = DetentionProcess(detained_world, unlucky_dice)
        detention = process.start(detainee)

        _run(process, detention, range(2, 14))
        assert detention.is_active
        assert detention.phase == DetentionPhase.CONFESSION

        process.advance_detention(detention, 14)
        assert detention.outcome == DetentionOutcome.IMPRISONED
        assert detainee.status == CharacterStatus.IMPRISONED
        assert detainee.rank == 0

    def test_death_in_custody(self, detained_world, detainee, lucky_dice):
        """Past eight turns on a heavy file, the death roll comes first."""
        detainee.evidence = 90
        process = DetentionProcess(detained_world, lucky_dice)
        detention = process.start(detainee)

        process.advance_detention(detention, 10)

        assert detention.outcome == DetentionOutcome.DIED_IN_DETENTION
        assert detainee.status == CharacterStatus.EXECUTED
        assert detainee.rank is None

    def test_cooperative_heavy_file_goes_to_trial(self, detained_world, detainee, unlucky_dice):
        process = DetentionProcess(detained_world, unlucky_dice)
        detention = process.start(detainee)
        detention.phase = DetentionPhase.DOCUMENTATION
        detention.evidence = 80
        detention.confession_obtained = True
        detention.confession_type = ConfessionType.COMPLIANT

        process.advance_detention(detention, 9)

        assert detention.outcome == DetentionOutcome.REFERRED_TO_TRIAL
        assert detention.referred_to_trial
        trial = detained_world.active_trial_for(detainee.id)
        assert trial is not None
        assert trial.source_detention_id == detention.id
        assert trial.charges == [
            TrialCharge.CORRUPTION,
            TrialCharge.ECONOMIC_SABOTAGE,
            TrialCharge.COUNTER_REVOLUTIONARY,
        ]
        assert detainee.is_detained

    def test_open_trial_keeps_subject_in_custody(self, detained_world, detainee, lucky_dice):
        """A detention ending mid-trial leaves the sentence to the trial."""
        process = DetentionProcess(detained_world, lucky_dice)
        detention = process.start(detainee)
        _run(process, detention, range(2, 4))
        trial = process.trials.start(detainee, turn=4)

        _run(process, detention, range(4, 10))

        assert detention.outcome == DetentionOutcome.DEMOTED
        assert detained_world.trials == [trial]
        assert detainee.is_detained
        assert not detainee.is_free
        assert detainee.status == CharacterStatus.DETAINED
        assert detainee.rank == 3

    def test_missing_subject_clears(self, detained_world, detainee, lucky_dice):
        process = DetentionProcess(detained_world, lucky_dice)
        detention = process.start(detainee)
        detained_world.characters.remove(detainee)

        process.advance_detention(detention, 2)
        assert detention.outcome == DetentionOutcome.CLEARED

    def test_advance_reports_ended_ids(self, detained_world, detainee, lucky_dice):
        process = DetentionProcess(detained_world, lucky_dice)
        detention = process.start(detainee)
        detained_world.characters.remove(detainee)

        changes, ended = process.advance(2)
        assert ended == [detention.id]
        assert len(changes) == 1


class TestReferralOutcome:
    """Evidence thresholds for the commission's recommendation."""

    def _detention(self, evidence, confession=None):
        return Detention(
            target_id="x",
            target_name="X",
            initiated_turn=1,
            evidence=evidence,
            confession_obtained=confession is not None,
            confession_type=confession,
        )

    @pytest.mark.parametrize("evidence,confession,outcome", [
        (10, None, DetentionOutcome.CLEARED),
        (20, None, DetentionOutcome.WARNED),
        (35, None, DetentionOutcome.DEMOTED),
        (55, None, DetentionOutcome.EXPELLED),
        (90, None, DetentionOutcome.EXPELLED),
        (90, ConfessionType.RESISTED, DetentionOutcome.EXPELLED),
        (70, ConfessionType.COMPLIANT, DetentionOutcome.REFERRED_TO_TRIAL),
        (69, ConfessionType.COMPLIANT, DetentionOutcome.EXPELLED),
        (10, ConfessionType.COMPLIANT, DetentionOutcome.CLEARED),
    ])
    def test_thresholds(self, evidence, confession, outcome):
        assert referral_outcome(self._detention(evidence, confession)) == outcome
