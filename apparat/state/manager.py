"""
World lifecycle management.

Handles create, load, list, save, delete, and hands out the per-world
turn advancer that every action request and turn goes through.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from ..errors import NoWorldLoadedError
from ..tools.dice import Dice
from .event_bus import EventType, get_event_bus
from .scenario import new_world
from .schema import SCHEMA_VERSION, Domain, World
from .store import JsonWorldStore, WorldStore

if TYPE_CHECKING:
    from .schemas import ActionResult, TurnReport
    from ..systems.turns import TurnAdvancer

logger = logging.getLogger(__name__)


def _version_tuple(version: str) -> tuple[int, ...]:
    """Convert version string to tuple for proper numeric comparison.

    "1.10.0" must sort after "1.2.0".
    """
    try:
        return tuple(int(x) for x in version.split("."))
    except ValueError:
        return (0, 0, 0)


class WorldManager:
    """
    Manages world lifecycle and turn operations.

    Storage is delegated to a WorldStore implementation:
    - JsonWorldStore for production (file-based)
    - MemoryWorldStore for testing (in-memory)

    Usage:
        manager = WorldManager("worlds")
        manager.create_world("Spring Plenum", seed=7)
        manager.request_action(Domain.SECURITY, "open_case_file", "kozlov")
        manager.advance_turn()
        manager.save_world()
    """

    def __init__(self, store: WorldStore | Path | str = "worlds", npc_activity: float = 1.0):
        """
        Initialize with a store.

        Args:
            store: WorldStore instance, or path for JsonWorldStore
            npc_activity: Multiplier on NPC per-turn action chances
        """
        if isinstance(store, (Path, str)):
            self.store = JsonWorldStore(Path(store))
        else:
            self.store = store

        self.npc_activity = npc_activity
        self.current: World | None = None
        self._advancer: TurnAdvancer | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def create_world(self, name: str, seed: int | None = None) -> World:
        """Create a new world from the starting scenario and set it as current."""
        world = new_world(name, seed)
        self._set_current(world)
        self.save_world()

        logger.info(f"Created world '{name}' ({world.id}, seed={seed})")
        get_event_bus().emit(EventType.WORLD_CREATED, world_id=world.id, turn=world.turn, name=name)
        return world

    def load_world(self, world_id: str) -> World | None:
        """
        Load a world by ID or partial match.

        Supports:
        - Full ID: "a1b2c3d4"
        - Numeric index from list: "1", "2", etc.
        """
        if world_id.isdigit():
            worlds = self.list_worlds()
            idx = int(world_id) - 1
            if 0 <= idx < len(worlds):
                world_id = worlds[idx]["id"]

        world = self.store.load(world_id)
        if world is None:
            logger.warning(f"No world matching '{world_id}'")
            return None

        if self._migrate_world(world):
            self.store.save(world)

        self._set_current(world)
        logger.info(f"Loaded world '{world.name}' ({world.id}) at turn {world.turn}")
        get_event_bus().emit(EventType.WORLD_LOADED, world_id=world.id, turn=world.turn)
        return world

    def _migrate_world(self, world: World) -> bool:
        """
        Migrate world to current schema version.

        Returns True if any migration was performed.
        """
        migrated = False

        # 1.x -> 2.0.0: last_advanced_turn did not exist; assume the
        # current turn was already processed so it is not replayed
        if _version_tuple(world.schema_version) < _version_tuple("2.0.0"):
            if world.last_advanced_turn == 0 and world.turn > 1:
                world.last_advanced_turn = world.turn
            world.schema_version = SCHEMA_VERSION
            migrated = True

        if migrated:
            logger.info(f"Migrated world {world.id} to schema {SCHEMA_VERSION}")
        return migrated

    def save_world(self) -> bool:
        """Save current world to store."""
        if not self.current:
            return False

        self.store.save(self.current)
        logger.info(f"Saved world {self.current.id} at turn {self.current.turn}")
        get_event_bus().emit(EventType.WORLD_SAVED, world_id=self.current.id, turn=self.current.turn)
        return True

    def delete_world(self, world_id: str) -> str | None:
        """Delete a world by ID. Returns deleted ID or None."""
        if world_id.isdigit():
            worlds = self.list_worlds()
            idx = int(world_id) - 1
            if 0 <= idx < len(worlds):
                world_id = worlds[idx]["id"]

        if self.store.delete(world_id):
            if self.current and self.current.id == world_id:
                self._set_current(None)
            return world_id

        return None

    def list_worlds(self) -> list[dict]:
        """
        List all worlds with relative timestamps.

        Returns list of dicts with: id, name, turn, updated_at, display_time
        """
        worlds = self.store.list_all()
        for world in worlds:
            world["display_time"] = self._format_relative_time(world["updated_at"])
        return worlds

    def require_current(self) -> World:
        if self.current is None:
            raise NoWorldLoadedError()
        return self.current

    def _set_current(self, world: World | None) -> None:
        self.current = world
        self._advancer = None

    # -------------------------------------------------------------------------
    # Turn operations
    # -------------------------------------------------------------------------

    def advancer(self) -> TurnAdvancer:
        """The turn advancer for the current world, built on first use."""
        # Lazy import to avoid circular imports
        from ..systems.turns import TurnAdvancer

        world = self.require_current()
        if self._advancer is None or self._advancer.world is not world:
            # Offset by turn so a reloaded world does not replay its first rolls
            seed = None if world.seed is None else world.seed + world.turn
            self._advancer = TurnAdvancer(world, Dice(seed=seed), npc_activity=self.npc_activity)
        return self._advancer

    def request_action(
        self,
        domain: Domain,
        action_id: str,
        target_id: str | None = None,
    ) -> ActionResult:
        """Request an action as the player."""
        return self.advancer().engine(domain).request(action_id, target_id=target_id)

    def advance_turn(self, turn: int | None = None) -> TurnReport:
        return self.advancer().advance(turn)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _format_relative_time(self, dt: datetime) -> str:
        """Format timestamp as relative time (Today, Yesterday, etc.)."""
        now = datetime.now()
        diff = now - dt

        if diff < timedelta(days=1) and dt.date() == now.date():
            return "Today"
        elif diff < timedelta(days=2) and (now.date() - dt.date()).days == 1:
            return "Yesterday"
        elif diff < timedelta(days=7):
            return dt.strftime("%A")
        else:
            return dt.strftime("%b %d")

    def get_summary(self) -> str:
        """Generate a brief summary of current world state."""
        if not self.current:
            return "No world loaded."

        w = self.current
        lines = [
            f"World: {w.name} ({w.id})",
            f"Turn: {w.turn} | Player: {w.player.title}, Position {w.player.rank}",
            f"Stability {w.stats.stability} | Treasury {w.stats.treasury} | "
            f"Standing {w.stats.international_standing}",
            f"Detentions: {len(w.detentions)} | Trials: {len(w.trials)} | "
            f"Projects: {len(w.projects)}",
        ]
        return "\n".join(lines)
