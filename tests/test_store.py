"""Tests for world storage, salvage and legacy import."""

import json
import logging

import pytest

from apparat.state.schema import (
    SCHEMA_VERSION,
    ConfessionType,
    Detention,
    DetentionLocation,
    DetentionPhase,
    Domain,
    EffectBundle,
    MinistryDepartment,
    PendingAction,
    Project,
    ProjectPhase,
    RecordStatus,
    WorldFlag,
)
from apparat.state.store import (
    JsonWorldStore,
    MemoryWorldStore,
    WorldStore,
    migrate_legacy_variables,
    validate_world,
)


@pytest.fixture
def json_store(tmp_path):
    return JsonWorldStore(tmp_path / "worlds")


class TestProtocol:
    """Both stores satisfy the WorldStore protocol."""

    def test_json_store(self, json_store):
        assert isinstance(json_store, WorldStore)

    def test_memory_store(self, memory_store):
        assert isinstance(memory_store, WorldStore)


class TestRoundTrip:
    """Cooldowns, pending actions, detentions and projects survive a save."""

    @pytest.fixture(params=["json", "memory"])
    def store(self, request, tmp_path):
        if request.param == "json":
            return JsonWorldStore(tmp_path / "worlds")
        return MemoryWorldStore()

    @pytest.fixture
    def busy_world(self, world):
        world.set_flag(WorldFlag.AUDIT_UNDERWAY)
        world.security.cooldowns.set_cooldown("open_case_file", 1, 2)
        world.security.tracker_for("volkov").set_cooldown("order_shuanggui", 1, 2)
        world.diplomacy.pending.append(PendingAction(
            domain=Domain.DIPLOMACY,
            action_id="negotiate_trade",
            target_id="china",
            initiated_turn=1,
            completion_turn=4,
            success_chance=62,
        ))
        world.security.pending.append(PendingAction(
            domain=Domain.SECURITY,
            action_id="conduct_surveillance",
            target_id="belov",
            initiated_turn=1,
            completion_turn=2,
            status=RecordStatus.RESOLVED,
            resolved_turn=2,
            succeeded=True,
            roll=17,
            effects_applied=EffectBundle(suspicion=5, evidence=10),
        ))
        world.detentions.append(Detention(
            target_id="kozlov",
            target_name="Mikhail Kozlov",
            target_rank=3,
            initiated_turn=1,
            phase=DetentionPhase.DOCUMENTATION,
            turns_in_detention=5,
            last_advanced_turn=6,
            evidence=55,
            confession_obtained=True,
            confession_type=ConfessionType.IMPLICATED_OTHERS,
            implicated_ids=["belov", "petrova"],
            location=DetentionLocation.SANITARIUM,
            protectors=8,
        ))
        world.projects.append(Project(
            action_id="direct_major_project",
            name="Direct Major State Project",
            department=MinistryDepartment.DEVELOPMENT_REFORM,
            target="steel",
            initiated_turn=1,
            completion_turn=5,
            success_chance=48,
            phase=ProjectPhase.EXECUTION,
            progress=2,
        ))
        return world

    def test_collections_are_lossless(self, store, busy_world):
        store.save(busy_world)

        loaded = store.load(busy_world.id)

        assert loaded is not None
        assert loaded.security == busy_world.security
        assert loaded.diplomacy == busy_world.diplomacy
        assert loaded.ministry == busy_world.ministry
        assert loaded.detentions == busy_world.detentions
        assert loaded.projects == busy_world.projects
        assert loaded.flags == busy_world.flags
        assert loaded.characters == busy_world.characters


class TestJsonWorldStore:
    """File-based persistence."""

    def test_backup_on_second_save(self, json_store, world):
        json_store.save(world)
        json_store.save(world)
        assert (json_store.worlds_dir / f"{world.id}.json.bak").exists()

    def test_partial_id(self, json_store, world):
        json_store.save(world)
        assert json_store.load(world.id[:4]).id == world.id

    def test_missing_world(self, json_store):
        assert json_store.load("nope") is None

    def test_unreadable_json(self, json_store, caplog):
        (json_store.worlds_dir / "broken.json").write_text("{not json")
        with caplog.at_level(logging.WARNING):
            assert json_store.load("broken") is None
        assert "broken.json" in caplog.text

    def test_non_object_json(self, json_store):
        (json_store.worlds_dir / "list.json").write_text("[1, 2, 3]")
        assert json_store.load("list") is None

    def test_list_all(self, json_store, world):
        json_store.save(world)
        (json_store.worlds_dir / ".apparat_config.json").write_text("{}")

        worlds = json_store.list_all()

        assert len(worlds) == 1
        assert worlds[0]["id"] == world.id
        assert worlds[0]["name"] == "Test World"
        assert worlds[0]["turn"] == 1

    def test_delete(self, json_store, world):
        json_store.save(world)
        assert json_store.exists(world.id)
        assert json_store.delete(world.id)
        assert not json_store.exists(world.id)
        assert not json_store.delete(world.id)


class TestMemoryWorldStore:
    """In-memory persistence returns fresh copies."""

    def test_load_is_a_copy(self, memory_store, world):
        memory_store.save(world)
        loaded = memory_store.load(world.id)
        loaded.turn = 99
        assert memory_store.load(world.id).turn == 1

    def test_partial_id(self, memory_store, world):
        memory_store.save(world)
        assert memory_store.load(world.id[:3]).id == world.id

    def test_clear(self, memory_store, world):
        memory_store.save(world)
        memory_store.clear()
        assert memory_store.list_all() == []


class TestSalvage:
    """Broken collections are emptied; a broken core is refused."""

    def test_broken_collection_is_reset(self, world, caplog):
        data = json.loads(world.model_dump_json())
        data["detentions"] = [{"target_id": "x"}]
        data["flags"] = ["not_a_flag"]

        with caplog.at_level(logging.WARNING):
            loaded = validate_world(data)

        assert loaded is not None
        assert loaded.detentions == []
        assert loaded.flags == set()
        assert loaded.characters == world.characters
        assert "'detentions' failed validation" in caplog.text

    def test_broken_core_is_refused(self, world):
        data = json.loads(world.model_dump_json())
        data["player"] = {"rank": "senior"}
        assert validate_world(data) is None

    def test_salvaged_file_loads_from_disk(self, json_store, world):
        data = json.loads(world.model_dump_json())
        data["projects"] = "garbage"
        (json_store.worlds_dir / f"{world.id}.json").write_text(json.dumps(data))

        loaded = json_store.load(world.id)
        assert loaded is not None
        assert loaded.projects == []


class TestLegacyImport:
    """Saves written with the string side-table."""

    def _legacy(self, world, variables):
        data = json.loads(world.model_dump_json(exclude={"security", "diplomacy", "ministry", "detentions", "projects"}))
        data["schema_version"] = "1.4.0"
        data["variables"] = variables
        return data

    def test_cooldowns_and_pending(self, world):
        variables = {
            "security_cooldowns": json.dumps({"cooldowns": {"open_case_file": 5}}),
            "security_pending_actions": json.dumps([{
                "id": "0f8fad5b-d9cb-469f-a165-70867728950e",
                "actionId": "conduct_surveillance",
                "targetCharacterId": "belov",
                "initiatedTurn": 3,
                "completionTurn": 4,
                "initiatedBy": "player",
                "status": "pending",
                "successChance": 80,
            }]),
            "_pending_diplomatic_actions": json.dumps([{
                "id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                "actionId": "negotiate_trade",
                "targetCountryId": "china",
                "initiatedTurn": 2,
                "completionTurn": 5,
                "succeeded": True,
                "resultDescription": "Trade agreement signed",
            }]),
        }
        world_ = validate_world(self._legacy(world, variables))

        assert world_.schema_version == SCHEMA_VERSION
        assert world_.security.cooldowns.cooldowns == {"open_case_file": 5}

        record = world_.security.pending[0]
        assert record.id == "0f8fad5b-d9cb-469f-a165-70867728950e"
        assert record.target_id == "belov"
        assert record.status == RecordStatus.IN_PROGRESS

        diplomatic = world_.diplomacy.pending[0]
        assert diplomatic.status == RecordStatus.RESOLVED
        assert diplomatic.succeeded is True

    def test_detentions_and_projects(self, world):
        variables = {
            "active_detentions": json.dumps([{
                "id": "c1d2e3f4-aaaa-bbbb-cccc-ddddeeeeffff",
                "targetCharacterId": "kozlov",
                "targetName": "Mikhail Kozlov",
                "targetPosition": 3,
                "initiatedTurn": 2,
                "phase": "confession",
                "turnsInDetention": 4,
                "evidenceAccumulated": 45,
                "confessionObtained": True,
                "confessionType": "scripted",
                "location": "trainingCenter",
            }]),
            "ministry_projects": json.dumps([{
                "id": "a0a0a0a0-1111-2222-3333-444455556666",
                "actionId": "direct_major_project",
                "department": "developmentReform",
                "targetMinistry": "steel",
                "initiatedTurn": 1,
                "completionTurn": 4,
                "successChance": 60,
                "phase": "execution",
                "progress": 2,
            }]),
        }
        world_ = validate_world(self._legacy(world, variables))

        detention = world_.detentions[0]
        assert detention.phase == DetentionPhase.CONFESSION
        assert detention.confession_type == ConfessionType.COMPLIANT
        assert detention.last_advanced_turn == 6
        assert detention.location.value == "training_center"

        project = world_.projects[0]
        assert project.phase == ProjectPhase.EXECUTION
        assert project.department.value == "development_reform"
        assert project.target == "steel"

    def test_one_bad_key_costs_only_its_collection(self, world, caplog):
        variables = {
            "ministry_cooldowns": "{not json",
            "_diplomatic_cooldowns": json.dumps({"cooldowns": {"request_briefing": 2}}),
            "some_unknown_key": "whatever",
        }
        with caplog.at_level(logging.WARNING):
            world_ = validate_world(self._legacy(world, variables))

        assert world_.ministry.cooldowns.cooldowns == {}
        assert world_.diplomacy.cooldowns.cooldowns == {"request_briefing": 2}
        assert "ministry_cooldowns" in caplog.text

    def test_migration_drops_side_table(self, world):
        data = migrate_legacy_variables(self._legacy(world, {}))
        assert "variables" not in data
        assert data["schema_version"] == SCHEMA_VERSION

    def test_migration_marks_saved_turn_processed(self, world):
        world.turn = 6
        data = migrate_legacy_variables(self._legacy(world, {}))
        assert data["last_advanced_turn"] == 6

    def test_ids_sharing_a_prefix_stay_distinct(self, world):
        def surveillance(record_id):
            return {
                "id": record_id,
                "actionId": "conduct_surveillance",
                "targetCharacterId": "belov",
                "initiatedTurn": 3,
                "completionTurn": 4,
            }

        variables = {"security_pending_actions": json.dumps([
            surveillance("0f8fad5b-0000-4000-8000-000000000001"),
            surveillance("0f8fad5b-0000-4000-8000-000000000002"),
        ])}
        world_ = validate_world(self._legacy(world, variables))

        ids = [p.id for p in world_.security.pending]
        assert len(set(ids)) == 2
