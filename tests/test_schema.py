"""Tests for schema models and their small helpers."""

import pytest
from pydantic import ValidationError

from apparat.state.schema import (
    Character,
    CharacterStatus,
    Country,
    CooldownTracker,
    DomainLedger,
    EffectBundle,
    PendingAction,
    Domain,
    WorldStats,
)


class TestCooldownTracker:
    """Action id -> first usable turn."""

    def test_unknown_action_is_usable(self):
        assert not CooldownTracker().is_on_cooldown("anything", 5)

    def test_usable_again_on_the_stored_turn(self):
        tracker = CooldownTracker()
        assert tracker.set_cooldown("open_case_file", 4, 3) == 7
        assert tracker.is_on_cooldown("open_case_file", 6)
        assert not tracker.is_on_cooldown("open_case_file", 7)
        assert tracker.turns_remaining("open_case_file", 5) == 2

    def test_negative_cooldown_is_zero(self):
        tracker = CooldownTracker()
        assert tracker.set_cooldown("x", 4, -2) == 4

    def test_clear_expired(self):
        tracker = CooldownTracker(cooldowns={"a": 3, "b": 9})
        assert tracker.clear_expired(3) == 1
        assert tracker.cooldowns == {"b": 9}


class TestDomainLedger:
    """Per-actor trackers and pending lookups."""

    def test_player_uses_shared_tracker(self):
        ledger = DomainLedger()
        assert ledger.tracker_for("player") is ledger.cooldowns

    def test_npc_tracker_created_and_pruned(self):
        ledger = DomainLedger()
        ledger.tracker_for("volkov").set_cooldown("x", 1, 1)
        assert "volkov" in ledger.npc_cooldowns
        assert ledger.clear_expired(2) == 1
        assert ledger.npc_cooldowns == {}

    def test_has_unresolved(self):
        ledger = DomainLedger(pending=[PendingAction(
            domain=Domain.SECURITY,
            action_id="open_case_file",
            initiated_turn=1,
            completion_turn=3,
        )])
        assert ledger.has_unresolved("player", "open_case_file")
        assert not ledger.has_unresolved("volkov", "open_case_file")


class TestEffectBundle:
    """Sparse signed deltas."""

    def test_resource_cost(self):
        assert EffectBundle(treasury=-5).resource_cost == 5
        assert EffectBundle(treasury=5).resource_cost == 0

    def test_changes_only_lists_set_fields(self):
        assert EffectBundle(stability=3, starts_detention=True).changes() == {
            "stability": 3,
            "starts_detention": True,
        }
        assert EffectBundle().is_empty()

    def test_frozen(self):
        with pytest.raises(ValidationError):
            EffectBundle().stability = 1


class TestActors:
    """Clamping and liveness."""

    def test_stats_clamped(self):
        stats = WorldStats(stability=95)
        assert stats.apply("stability", 20) == 100
        assert stats.apply("stability", -150) == 0

    def test_relationship_clamped(self):
        country = Country(id="x", name="X", relationship=90)
        assert country.modify_relationship(50) == 100

    def test_vacated_position(self):
        char = Character(name="Gone", rank=None, status=CharacterStatus.EXECUTED)
        assert char.position == 0
        assert not char.is_alive
        assert not char.is_free
