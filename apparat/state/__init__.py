"""State management for APPARAT worlds."""

from .schema import (
    SCHEMA_VERSION,
    Character,
    CharacterStatus,
    Country,
    Detention,
    DetentionPhase,
    Domain,
    PendingAction,
    Player,
    Project,
    Track,
    Trial,
    TrialPhase,
    World,
    WorldFlag,
    WorldStats,
)
from .manager import WorldManager
from .scenario import new_world
from .store import JsonWorldStore, MemoryWorldStore, WorldStore
from .event_bus import (
    EventBus,
    EventType,
    GameEvent,
    get_event_bus,
    reset_event_bus,
)

__all__ = [
    # Schema
    "SCHEMA_VERSION",
    "Character",
    "CharacterStatus",
    "Country",
    "Detention",
    "DetentionPhase",
    "Domain",
    "PendingAction",
    "Player",
    "Project",
    "Track",
    "Trial",
    "TrialPhase",
    "World",
    "WorldFlag",
    "WorldStats",
    # Manager
    "WorldManager",
    "new_world",
    # Store
    "WorldStore",
    "JsonWorldStore",
    "MemoryWorldStore",
    # Events
    "EventBus",
    "EventType",
    "GameEvent",
    "get_event_bus",
    "reset_event_bus",
]
