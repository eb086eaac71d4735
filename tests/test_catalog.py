"""
Tests for the static action catalogs.

The catalogs are data, so these tests pin the shape of the tables:
sizes, rank gating, and that every definition is internally consistent.
"""

import pytest
from pydantic import ValidationError

from apparat.catalog import (
    CATALOGS,
    DIPLOMACY_CATALOG,
    MINISTRY_CATALOG,
    SECURITY_CATALOG,
    Catalog,
    get_catalog,
)
from apparat.catalog.models import (
    RISK_MODIFIERS,
    MinistryCategory,
    RiskTier,
    SecurityCategory,
    category_min_rank,
    define,
)
from apparat.errors import UnknownActionError
from apparat.state.schema import Domain, TargetKind, Track


class TestCatalogSizes:
    """Each domain ships its full table."""

    def test_security_has_thirty_actions(self):
        assert len(SECURITY_CATALOG) == 30

    def test_diplomacy_has_twenty_four_actions(self):
        assert len(DIPLOMACY_CATALOG) == 24

    def test_ministry_has_twenty_two_actions(self):
        assert len(MINISTRY_CATALOG) == 22

    def test_every_domain_has_a_catalog(self):
        assert set(CATALOGS) == set(Domain)
        for domain in Domain:
            assert get_catalog(domain).domain == domain


class TestCatalogLookup:
    """get / require / rank filters."""

    def test_get_returns_none_for_unknown(self):
        assert SECURITY_CATALOG.get("no_such_action") is None

    def test_require_raises_for_unknown(self):
        with pytest.raises(UnknownActionError) as exc:
            SECURITY_CATALOG.require("no_such_action")
        assert "no_such_action" in str(exc.value)
        assert "security" in str(exc.value)

    def test_contains(self):
        assert "open_case_file" in SECURITY_CATALOG
        assert "open_case_file" not in DIPLOMACY_CATALOG

    def test_for_rank_only_returns_reachable_actions(self):
        for action in SECURITY_CATALOG.for_rank(3):
            assert action.min_rank <= 3

    def test_for_rank_and_locked_partition_the_catalog(self):
        open_ids = {a.id for a in MINISTRY_CATALOG.for_rank(4)}
        locked_ids = {a.id for a in MINISTRY_CATALOG.locked_for_rank(4)}
        assert open_ids.isdisjoint(locked_ids)
        assert len(open_ids) + len(locked_ids) == len(MINISTRY_CATALOG)

    def test_by_category(self):
        directors = SECURITY_CATALOG.by_category(SecurityCategory.DIRECTOR.value)
        assert directors
        assert all(a.min_rank == 7 for a in directors)

    def test_duplicate_ids_rejected(self):
        action = SECURITY_CATALOG.require("open_case_file")
        with pytest.raises(ValueError):
            Catalog(Domain.SECURITY, [action, action])


class TestDefinitions:
    """Internal consistency of every definition."""

    @pytest.mark.parametrize("catalog", list(CATALOGS.values()), ids=lambda c: c.domain.value)
    def test_base_chance_in_range(self, catalog):
        for action in catalog:
            assert 0 < action.base_chance <= 100, action.id

    @pytest.mark.parametrize("catalog", list(CATALOGS.values()), ids=lambda c: c.domain.value)
    def test_risk_tier_known_to_domain(self, catalog):
        for action in catalog:
            assert action.risk in RISK_MODIFIERS[catalog.domain], action.id

    @pytest.mark.parametrize("catalog", list(CATALOGS.values()), ids=lambda c: c.domain.value)
    def test_definitions_belong_to_their_domain(self, catalog):
        for action in catalog:
            assert action.domain == catalog.domain

    def test_tier_ranks(self):
        assert category_min_rank(SecurityCategory.OPERATIVE) == 1
        assert category_min_rank(SecurityCategory.COMMAND) == 5
        assert category_min_rank(SecurityCategory.DIRECTOR) == 7
        assert category_min_rank(MinistryCategory.PREMIER) == 7

    def test_security_actions_require_security_track(self):
        for action in SECURITY_CATALOG:
            assert action.required_track == Track.SECURITY

    def test_only_direct_espionage_is_track_gated_in_diplomacy(self):
        gated = [a.id for a in DIPLOMACY_CATALOG if a.required_track is not None]
        assert gated == ["direct_espionage"]

    def test_abrogate_treaty_targets_a_treaty(self):
        assert DIPLOMACY_CATALOG.require("abrogate_treaty").target_kind == TargetKind.TREATY

    def test_definitions_are_frozen(self):
        action = SECURITY_CATALOG.require("open_case_file")
        with pytest.raises(ValidationError):
            action.base_chance = 1

    def test_narrative_key(self):
        action = SECURITY_CATALOG.require("open_case_file")
        assert action.narrative_key(True) == "security.open_case_file.success"
        assert action.narrative_key(False) == "security.open_case_file.failure"

    def test_define_derives_min_rank_from_category(self):
        action = define(
            Domain.SECURITY, SecurityCategory.DIRECTORATE, "probe", "Probe", "",
            base_chance=50, risk=RiskTier.LOW,
        )
        assert action.min_rank == 4
        assert action.is_immediate
        assert action.resource_cost == 0
