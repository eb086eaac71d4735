"""Tests for the action engine request pipeline."""

import pytest

from apparat.errors import UnknownActionError
from apparat.state.event_bus import EventType, get_event_bus
from apparat.state.schema import (
    CharacterStatus,
    Domain,
    RecordStatus,
    TreatyType,
)
from apparat.state.schemas import ActionStatus
from apparat.systems import TurnAdvancer


@pytest.fixture
def lucky(world, lucky_dice):
    """Advancer whose every roll succeeds."""
    return TurnAdvancer(world, lucky_dice, npc_activity=0.0)


@pytest.fixture
def unlucky(world, unlucky_dice):
    """Advancer whose every uncertain roll fails."""
    return TurnAdvancer(world, unlucky_dice, npc_activity=0.0)


class TestImmediateResolution:
    """Immediate actions roll once and apply one bundle."""

    def test_success_applies_success_bundle(self, world, lucky):
        engine = lucky.engine(Domain.SECURITY)
        expected_chance = engine.validate("open_case_file", "kozlov").success_chance

        result = engine.request("open_case_file", target_id="kozlov")

        assert result.status == ActionStatus.RESOLVED
        assert result.succeeded is True
        assert result.success_chance == expected_chance
        assert result.narrative_key == "security.open_case_file.success"

        kozlov = world.character("kozlov")
        assert kozlov.suspicion == 15
        assert kozlov.evidence == 15
        assert kozlov.status == CharacterStatus.UNDER_INVESTIGATION
        assert world.player.standing == 53

    def test_failure_applies_failure_bundle(self, world, unlucky):
        result = unlucky.engine(Domain.SECURITY).request("open_case_file", target_id="kozlov")

        assert result.succeeded is False
        assert result.narrative_key == "security.open_case_file.failure"
        assert world.player.standing == 45
        assert world.character("kozlov").evidence == 0

    def test_cooldown_set_on_request(self, world, lucky):
        engine = lucky.engine(Domain.SECURITY)
        engine.request("open_case_file", target_id="kozlov")

        again = engine.request("open_case_file", target_id="sokolova")
        assert again.is_rejected
        assert again.reason == "On cooldown (2 turns remaining)"

    def test_cooldown_set_even_on_failure(self, world, unlucky):
        engine = unlucky.engine(Domain.SECURITY)
        engine.request("open_case_file", target_id="kozlov")
        assert world.security.cooldowns.is_on_cooldown("open_case_file", world.turn)

    def test_diplomacy_request(self, world, lucky):
        result = lucky.engine(Domain.DIPLOMACY).request("request_briefing", target_id="china")
        assert result.is_resolved
        assert result.succeeded
        assert world.player.standing == 51

    def test_treaty_abrogation(self, world, lucky):
        world.player.rank = 7
        china = world.country("china")
        assert china.treaties == [TreatyType.TRADE_AGREEMENT]

        result = lucky.engine(Domain.DIPLOMACY).request("abrogate_treaty", target_id="china")

        assert result.succeeded
        assert china.treaties == []
        assert china.relationship == 15 - 35

    def test_resolved_event_carries_narrative_key(self, world, lucky):
        lucky.engine(Domain.SECURITY).request("open_case_file", target_id="kozlov")
        events = get_event_bus().get_history(EventType.ACTION_RESOLVED)
        assert len(events) == 1
        assert events[0].data["narrative_key"] == "security.open_case_file.success"
        assert events[0].data["changes"]["evidence"] == 15


class TestRejection:
    """A rejected request is proof nothing changed."""

    def test_rejection_mutates_nothing(self, world, lucky):
        before = world.model_dump_json()
        result = lucky.engine(Domain.SECURITY).request("open_case_file", target_id="volkov")

        assert result.is_rejected
        assert result.status == ActionStatus.REJECTED
        assert result.succeeded is None
        assert world.model_dump_json() == before

    def test_rejection_emits_event(self, world, lucky):
        lucky.engine(Domain.SECURITY).request("initiate_senior_investigation", target_id="kozlov")
        events = get_event_bus().get_history(EventType.ACTION_REJECTED)
        assert events[0].data["reason"] == "Requires Position 5 (you are Position 3)"

    def test_unknown_action_raises(self, lucky):
        with pytest.raises(UnknownActionError):
            lucky.engine(Domain.SECURITY).request("no_such_action")

    def test_action_from_another_domain_is_unknown(self, lucky):
        with pytest.raises(UnknownActionError):
            lucky.engine(Domain.DIPLOMACY).request("open_case_file", target_id="kozlov")


class TestSubProcesses:
    """Outcome bundles that start detentions and trials."""

    def test_shuanggui_starts_detention(self, world, lucky):
        world.player.rank = 4
        result = lucky.engine(Domain.SECURITY).request("order_shuanggui", target_id="kozlov")

        assert result.succeeded
        assert result.detention_id is not None
        detention = world.active_detention_for("kozlov")
        assert detention.id == result.detention_id
        assert detention.initiated_turn == world.turn
        assert world.character("kozlov").is_detained
        assert world.stats.elite_loyalty == 60

    def test_detention_first_advances_on_next_turn(self, world, lucky):
        lucky.engine(Domain.SECURITY).request("request_shuanggui", target_id="kozlov")
        detention = world.active_detention_for("kozlov")
        assert detention.turns_in_detention == 0

        lucky.advance()
        assert detention.turns_in_detention == 1

    def test_detained_official_cannot_be_detained_twice(self, world, lucky):
        world.player.rank = 4
        engine = lucky.engine(Domain.SECURITY)
        engine.request("order_shuanggui", target_id="kozlov")
        world.security.cooldowns.cooldowns.clear()
        second = engine.request("order_shuanggui", target_id="kozlov")
        assert second.reason == "Target is already in custody"
        assert len([d for d in world.detentions if d.target_id == "kozlov"]) == 1

    def test_detainee_cannot_also_be_charged(self, world, lucky):
        world.player.rank = 4
        engine = lucky.engine(Domain.SECURITY)
        engine.request("order_shuanggui", target_id="kozlov")

        result = engine.request("recommend_prosecution", target_id="kozlov")

        assert result.is_rejected
        assert world.active_trial_for("kozlov") is None

    def test_recommend_prosecution_starts_trial(self, world, lucky):
        world.player.rank = 4
        result = lucky.engine(Domain.SECURITY).request("recommend_prosecution", target_id="kozlov")
        assert result.trial_id is not None
        assert world.active_trial_for("kozlov") is not None


class TestScheduling:
    """Multi-turn actions leave a pending record and land later."""

    def test_scheduled_action_changes_nothing_yet(self, world, lucky):
        result = lucky.engine(Domain.SECURITY).request("conduct_surveillance", target_id="belov")

        assert result.is_scheduled
        assert result.completion_turn == world.turn + 1
        assert result.succeeded is None
        assert world.character("belov").evidence == 0

        pending = world.security.active_pending()
        assert len(pending) == 1
        assert pending[0].id == result.record_id
        assert pending[0].status == RecordStatus.IN_PROGRESS

    def test_scheduled_action_lands_on_completion_turn(self, world, lucky):
        lucky.engine(Domain.SECURITY).request("conduct_surveillance", target_id="belov")
        report = lucky.advance()

        assert len(report.resolved) == 1
        assert report.resolved[0].succeeded
        assert world.character("belov").evidence == 10

    def test_same_action_not_stackable(self, world, lucky):
        engine = lucky.engine(Domain.SECURITY)
        engine.request("conduct_surveillance", target_id="belov")
        world.security.cooldowns.cooldowns.clear()

        again = engine.request("conduct_surveillance", target_id="lebedev")
        assert again.reason == "Already in progress"


class TestNPCRequests:
    """NPCs go through the same pipeline."""

    def test_npc_request(self, world, lucky):
        result = lucky.engine(Domain.SECURITY).request(
            "open_case_file", actor_id="petrova", target_id="belov"
        )
        assert result.succeeded
        assert result.actor_id == "petrova"
        assert world.character("belov").evidence == 15
        # NPC outcomes do not move the player's counters
        assert world.player.standing == 50
        assert world.security.npc_cooldowns["petrova"].is_on_cooldown("open_case_file", world.turn)

    def test_unknown_npc_rejected(self, lucky):
        result = lucky.engine(Domain.SECURITY).request(
            "open_case_file", actor_id="ghost", target_id="belov"
        )
        assert result.reason == "Unknown actor"

    def test_available_actions_lists_position_actions(self, world, lucky):
        listed = lucky.engine(Domain.SECURITY).available_actions()
        assert listed
        assert all(action.min_rank <= world.player.rank for action, _ in listed)
