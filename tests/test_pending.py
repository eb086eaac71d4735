"""Tests for pending action resolution across turns."""

import pytest

from apparat.state.event_bus import EventType, get_event_bus
from apparat.state.schema import (
    CharacterStatus,
    Domain,
    PendingAction,
    RecordStatus,
    TreatyType,
)
from apparat.systems import TurnAdvancer
from apparat.systems.engine import CORRUPTED_ACTION


@pytest.fixture
def mid_game(world):
    """World at turn 10, with turn 9 already processed and a senior player."""
    world.turn = 10
    world.last_advanced_turn = 9
    world.player.rank = 4
    return world


@pytest.fixture
def lucky(mid_game, lucky_dice):
    return TurnAdvancer(mid_game, lucky_dice, npc_activity=0.0)


class TestResolveOnce:
    """A pending record resolves on its completion turn, exactly once."""

    def test_trade_negotiation_lifecycle(self, mid_game, lucky):
        """Requested on turn 10 with three execution turns: due on turn 13."""
        result = lucky.engine(Domain.DIPLOMACY).request("negotiate_trade", target_id="china")
        assert result.is_scheduled
        assert result.completion_turn == 13
        assert result.requires_approval

        record = mid_game.diplomacy.pending[0]

        for turn in (11, 12):
            report = lucky.advance(turn)
            assert report.resolved == []
            assert record.status == RecordStatus.IN_PROGRESS

        report = lucky.advance(13)
        assert len(report.resolved) == 1
        resolved = report.resolved[0]
        assert resolved.succeeded
        assert resolved.record_id == record.id
        assert resolved.narrative_key == "diplomacy.negotiate_trade.success"

        assert record.status == RecordStatus.RESOLVED
        assert record.resolved_turn == 13
        assert record.succeeded is True
        assert record.effects_applied is not None

        china = mid_game.country("china")
        assert china.relationship == 25
        assert china.treaties == [TreatyType.TRADE_AGREEMENT]

        # Resolved records are pruned on the next sweep
        report = lucky.advance(14)
        assert report.resolved == []
        assert mid_game.diplomacy.pending == []

    def test_replayed_turn_does_not_resolve_again(self, mid_game, lucky):
        lucky.engine(Domain.DIPLOMACY).request("negotiate_trade", target_id="china")
        lucky.advance(13)
        relationship = mid_game.country("china").relationship

        report = lucky.advance(13)
        assert report.skipped
        assert mid_game.country("china").relationship == relationship

    def test_skipped_turns_resolve_overdue_records(self, mid_game, lucky):
        """Jumping straight past the completion turn still resolves the record once."""
        lucky.engine(Domain.DIPLOMACY).request("negotiate_trade", target_id="china")
        report = lucky.advance(20)
        assert len(report.resolved) == 1

    def test_pending_resolved_event(self, mid_game, lucky):
        lucky.engine(Domain.DIPLOMACY).request("negotiate_trade", target_id="china")
        lucky.advance(13)
        events = get_event_bus().get_history(EventType.PENDING_RESOLVED)
        assert len(events) == 1
        assert events[0].data["action_id"] == "negotiate_trade"


class TestCancelledAndCorrupted:
    """Records that can no longer land."""

    def test_unknown_action_id_resolves_as_failure(self, mid_game, lucky):
        record = PendingAction(
            domain=Domain.SECURITY,
            action_id="deleted_action",
            initiated_turn=9,
            completion_turn=11,
        )
        mid_game.security.pending.append(record)

        report = lucky.advance(11)

        assert len(report.resolved) == 1
        assert report.resolved[0].succeeded is False
        assert report.resolved[0].reason == CORRUPTED_ACTION
        assert record.status == RecordStatus.RESOLVED
        assert get_event_bus().get_history(EventType.STATE_CORRUPTED)

    def test_target_gone_cancels(self, mid_game, lucky):
        lucky.engine(Domain.SECURITY).request("conduct_surveillance", target_id="belov")
        belov = mid_game.character("belov")
        belov.status = CharacterStatus.EXECUTED
        belov.rank = None

        report = lucky.advance(11)

        record = mid_game.security.pending[0]
        assert report.resolved == []
        assert record.status == RecordStatus.CANCELLED
        assert record.result_description == "Target is no longer active"

    def test_initiator_detained_cancels(self, mid_game, lucky):
        lucky.engine(Domain.SECURITY).request(
            "launch_formal_investigation", actor_id="petrova", target_id="belov"
        )
        mid_game.character("petrova").is_detained = True

        report = lucky.advance(12)

        assert report.resolved == []
        assert mid_game.security.pending[0].status == RecordStatus.CANCELLED
        assert mid_game.character("belov").evidence == 0

    def test_npc_record_uses_npc_formula(self, mid_game, lucky):
        lucky.engine(Domain.SECURITY).request(
            "launch_formal_investigation", actor_id="petrova", target_id="belov"
        )
        report = lucky.advance(12)
        assert report.resolved[0].success_chance == 60 + 4 * 5
        assert mid_game.character("belov").evidence == 30
