"""
World storage abstraction.

Separates persistence from engine logic for testability.

Loading is forgiving: a collection that no longer validates is dropped back
to empty (and logged) instead of failing the whole save, and saves written
with the old string side-table (`variables`) are lifted into typed fields.
"""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Protocol, runtime_checkable

from pydantic import ValidationError

from .schema import (
    SCHEMA_VERSION,
    ConfessionType,
    CooldownTracker,
    Detention,
    DetentionLocation,
    DetentionOutcome,
    DetentionPhase,
    Domain,
    MinistryDepartment,
    PendingAction,
    Project,
    ProjectPhase,
    RecordStatus,
    World,
)

logger = logging.getLogger(__name__)

# Top-level fields that may be emptied to rescue an otherwise valid save
SALVAGEABLE_FIELDS = (
    "flags",
    "security",
    "diplomacy",
    "ministry",
    "detentions",
    "detention_archive",
    "trials",
    "trial_archive",
    "projects",
    "npc_log",
)


# -----------------------------------------------------------------------------
# Legacy side-table import
# -----------------------------------------------------------------------------

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(value: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", value).lower()


def _decode(raw: Any) -> Any:
    """Side-table values were JSON strings; tolerate already-decoded ones."""
    return json.loads(raw) if isinstance(raw, str) else raw


def _legacy_status(value: str | None) -> RecordStatus:
    if value in ("completed",):
        return RecordStatus.RESOLVED
    if value in ("cancelled", "blocked"):
        return RecordStatus.CANCELLED
    return RecordStatus.IN_PROGRESS


def _legacy_confession(value: str | None) -> ConfessionType | None:
    if value is None:
        return None
    if value == "scripted":
        return ConfessionType.COMPLIANT
    return ConfessionType(_snake(value))


def _legacy_department(value: str | None) -> MinistryDepartment:
    try:
        return MinistryDepartment(_snake(value or ""))
    except ValueError:
        return MinistryDepartment.GENERAL_OFFICE


def _cooldowns(raw: Any) -> dict:
    return CooldownTracker.model_validate(_decode(raw)).model_dump(mode="json")


def _security_pending(raw: Any) -> list[dict]:
    records = []
    for item in _decode(raw):
        record = PendingAction(
            id=str(item["id"]),
            domain=Domain.SECURITY,
            action_id=item["actionId"],
            target_id=item.get("targetCharacterId"),
            initiated_turn=item["initiatedTurn"],
            completion_turn=item["completionTurn"],
            initiator=item.get("initiatedBy", "player"),
            status=_legacy_status(item.get("status")),
            success_chance=item.get("successChance", 0),
        )
        records.append(record.model_dump(mode="json"))
    return records


def _diplomacy_pending(raw: Any) -> list[dict]:
    records = []
    for item in _decode(raw):
        succeeded = item.get("succeeded")
        record = PendingAction(
            id=str(item["id"]),
            domain=Domain.DIPLOMACY,
            action_id=item["actionId"],
            target_id=item.get("targetCountryId"),
            initiated_turn=item["initiatedTurn"],
            completion_turn=item["completionTurn"],
            initiator=item.get("initiatedBy", "player"),
            status=RecordStatus.IN_PROGRESS if succeeded is None else RecordStatus.RESOLVED,
            succeeded=succeeded,
            result_description=item.get("resultDescription"),
        )
        records.append(record.model_dump(mode="json"))
    return records


def _detentions(raw: Any) -> list[dict]:
    records = []
    for item in _decode(raw):
        outcome = item.get("outcome")
        initiated = item["initiatedTurn"]
        served = item.get("turnsInDetention", 0)
        record = Detention(
            id=str(item["id"]),
            target_id=item["targetCharacterId"],
            target_name=item["targetName"],
            target_rank=item.get("targetPosition", 0),
            initiated_by=item.get("initiatedByCharacterId", "player"),
            initiated_turn=initiated,
            phase=DetentionPhase(item.get("phase", "isolation")),
            turns_in_detention=served,
            last_advanced_turn=initiated + served,
            evidence=item.get("evidenceAccumulated", 0),
            confession_obtained=item.get("confessionObtained", False),
            confession_type=_legacy_confession(item.get("confessionType")),
            implicated_ids=item.get("implicatedCharacterIds", []),
            location=DetentionLocation(_snake(item.get("location", "guestHouse"))),
            protectors=item.get("accompanyingProtectors", 6),
            outcome=DetentionOutcome(_snake(outcome)) if outcome else None,
            referred_to_trial=item.get("referredToTrial", False),
        )
        records.append(record.model_dump(mode="json"))
    return records


def _projects(raw: Any) -> list[dict]:
    records = []
    for item in _decode(raw):
        record = Project(
            id=str(item["id"]),
            action_id=item["actionId"],
            name=item.get("name", item["actionId"]),
            department=_legacy_department(item.get("department")),
            target=item.get("targetMinistry"),
            initiated_turn=item["initiatedTurn"],
            completion_turn=item["completionTurn"],
            success_chance=item["successChance"],
            phase=ProjectPhase(item.get("phase", "planning")),
            progress=item.get("progress", 0),
        )
        records.append(record.model_dump(mode="json"))
    return records


# variables key -> (path into the typed world, decoder)
LEGACY_KEYS: dict[str, tuple[tuple[str, ...], Callable[[Any], Any]]] = {
    "security_cooldowns": (("security", "cooldowns"), _cooldowns),
    "security_pending_actions": (("security", "pending"), _security_pending),
    "active_detentions": (("detentions",), _detentions),
    "_diplomatic_cooldowns": (("diplomacy", "cooldowns"), _cooldowns),
    "_pending_diplomatic_actions": (("diplomacy", "pending"), _diplomacy_pending),
    "ministry_cooldowns": (("ministry", "cooldowns"), _cooldowns),
    "ministry_projects": (("projects",), _projects),
}


def migrate_legacy_variables(data: dict) -> dict:
    """
    Lift the old string side-table into typed world fields.

    Each key is decoded on its own: one undecodable entry costs only that
    collection. Unknown keys are dropped. Record ids are kept whole.
    """
    variables = data.pop("variables", None)
    if not isinstance(variables, dict):
        return data

    for key, raw in variables.items():
        mapping = LEGACY_KEYS.get(key)
        if mapping is None:
            logger.debug(f"Ignoring legacy variable '{key}'")
            continue
        path, decoder = mapping
        try:
            value = decoder(raw)
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"Legacy variable '{key}' could not be decoded; starting empty ({e})")
            continue

        node = data
        for part in path[:-1]:
            node = node.setdefault(part, {})
        node[path[-1]] = value

    # The side-table predates replay protection; treat the saved turn as processed
    if not data.get("last_advanced_turn") and data.get("turn", 1) > 1:
        data["last_advanced_turn"] = data["turn"]
    data["schema_version"] = SCHEMA_VERSION
    logger.info(f"Migrated legacy side-table for world {data.get('id', '?')}")
    return data


# -----------------------------------------------------------------------------
# Salvage
# -----------------------------------------------------------------------------

def validate_world(data: dict) -> World | None:
    """
    Validate raw save data, salvaging broken collections.

    Returns None when the core of the world (identity, actors, counters)
    does not validate.
    """
    if "variables" in data:
        data = migrate_legacy_variables(data)

    try:
        return World.model_validate(data)
    except ValidationError as e:
        broken = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}

    core = broken.difference(SALVAGEABLE_FIELDS)
    if core:
        logger.warning(f"World {data.get('id', '?')} is unreadable: invalid {sorted(core)}")
        return None

    for field in sorted(broken):
        logger.warning(f"World {data.get('id', '?')}: '{field}' failed validation; reset to empty")
        data.pop(field, None)

    try:
        return World.model_validate(data)
    except ValidationError as e:
        logger.warning(f"World {data.get('id', '?')} could not be salvaged: {e.error_count()} errors")
        return None


# -----------------------------------------------------------------------------
# Stores
# -----------------------------------------------------------------------------

@runtime_checkable
class WorldStore(Protocol):
    """
    Abstract storage interface for worlds.

    Implementations:
    - JsonWorldStore: File-based persistence (production)
    - MemoryWorldStore: In-memory storage (testing)
    """

    def save(self, world: World) -> None:
        """Persist a world."""
        ...

    def load(self, world_id: str) -> World | None:
        """Load a world by ID. Returns None if not found."""
        ...

    def delete(self, world_id: str) -> bool:
        """Delete a world. Returns True if deleted."""
        ...

    def list_all(self) -> list[dict]:
        """List all worlds with metadata."""
        ...

    def exists(self, world_id: str) -> bool:
        """Check if a world exists."""
        ...


class JsonWorldStore:
    """
    File-based world storage using JSON.

    Features:
    - Automatic backup on save
    - Partial ID matching on load
    - Collection salvage and legacy import on load
    """

    def __init__(self, worlds_dir: Path | str = "worlds"):
        self.worlds_dir = Path(worlds_dir)
        self.worlds_dir.mkdir(parents=True, exist_ok=True)

    def _world_files(self) -> list[Path]:
        # Dotfiles (config) live alongside the saves
        return [f for f in self.worlds_dir.glob("*.json") if not f.name.startswith(".")]

    def save(self, world: World) -> None:
        """Save world to JSON file with backup."""
        world.touch()
        world_file = self.worlds_dir / f"{world.id}.json"

        # Backup previous save
        if world_file.exists():
            backup = world_file.with_suffix(".json.bak")
            backup.write_text(world_file.read_text())

        world_file.write_text(world.model_dump_json(indent=2))

    def load(self, world_id: str) -> World | None:
        """
        Load world by ID or partial match.

        Supports:
        - Full ID: "a1b2c3d4"
        - Partial prefix: "a1b2"
        """
        world_file = self.worlds_dir / f"{world_id}.json"

        if not world_file.exists():
            for f in self._world_files():
                if f.stem.startswith(world_id):
                    world_file = f
                    break

        if not world_file.exists():
            return None

        try:
            data = json.loads(world_file.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read {world_file.name}: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"{world_file.name} does not contain a world")
            return None
        return validate_world(data)

    def delete(self, world_id: str) -> bool:
        """Delete world file."""
        world_file = self.worlds_dir / f"{world_id}.json"

        if world_file.exists():
            world_file.unlink()
            return True

        return False

    def list_all(self) -> list[dict]:
        """
        List all worlds sorted by modification time.

        Returns list of dicts with: id, name, turn, updated_at
        """
        worlds = []

        for f in sorted(
            self._world_files(),
            key=lambda x: x.stat().st_mtime,
            reverse=True,
        ):
            try:
                data = json.loads(f.read_text())
                if not isinstance(data, dict):
                    continue

                worlds.append({
                    "id": data.get("id", f.stem),
                    "name": data.get("name", "Unnamed"),
                    "turn": data.get("turn", 1),
                    "updated_at": datetime.fromisoformat(data.get("updated_at", "2000-01-01")),
                })
            except (json.JSONDecodeError, ValueError):
                continue

        return worlds

    def exists(self, world_id: str) -> bool:
        """Check if world file exists."""
        return (self.worlds_dir / f"{world_id}.json").exists()


class MemoryWorldStore:
    """
    In-memory world storage for testing.

    No file I/O. Worlds are stored as JSON snapshots so a load returns a
    fresh copy, the same as reading a file back.
    """

    def __init__(self):
        self.worlds: dict[str, str] = {}

    def save(self, world: World) -> None:
        world.touch()
        self.worlds[world.id] = world.model_dump_json()

    def load(self, world_id: str) -> World | None:
        snapshot = self.worlds.get(world_id)
        if snapshot is None:
            for wid, candidate in self.worlds.items():
                if wid.startswith(world_id):
                    snapshot = candidate
                    break
        if snapshot is None:
            return None
        return validate_world(json.loads(snapshot))

    def delete(self, world_id: str) -> bool:
        if world_id in self.worlds:
            del self.worlds[world_id]
            return True
        return False

    def list_all(self) -> list[dict]:
        worlds = []
        for snapshot in self.worlds.values():
            data = json.loads(snapshot)
            worlds.append({
                "id": data["id"],
                "name": data["name"],
                "turn": data["turn"],
                "updated_at": datetime.fromisoformat(data["updated_at"]),
            })
        worlds.sort(key=lambda x: x["updated_at"], reverse=True)
        return worlds

    def exists(self, world_id: str) -> bool:
        return world_id in self.worlds

    def clear(self) -> None:
        """Clear all worlds (test utility)."""
        self.worlds.clear()
