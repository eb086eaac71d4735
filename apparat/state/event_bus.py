"""
Event bus for APPARAT engine outcomes.

The engine never writes prose. It publishes what happened (with a stable
narrative key) and whoever renders text subscribes here.

Usage:
    from .event_bus import get_event_bus, EventType

    bus = get_event_bus()
    bus.on(EventType.ACTION_RESOLVED, my_handler)

    bus.emit(EventType.ACTION_RESOLVED, narrative_key="security.open_case_file.success")

    def my_handler(event: GameEvent):
        print(f"Outcome {event.narrative_key}")

    bus.on_all(log_everything)  # every event type
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Engine events that can be published."""

    # Actions
    ACTION_RESOLVED = "action.resolved"
    ACTION_REJECTED = "action.rejected"
    ACTION_SCHEDULED = "action.scheduled"
    PENDING_RESOLVED = "pending.resolved"

    # Ministry projects
    PROJECT_STARTED = "project.started"
    PROJECT_COMPLETED = "project.completed"

    # Detention
    DETENTION_STARTED = "detention.started"
    DETENTION_PHASE_CHANGED = "detention.phase_changed"
    DETENTION_ENDED = "detention.ended"

    # Trials
    TRIAL_STARTED = "trial.started"
    TRIAL_PHASE_CHANGED = "trial.phase_changed"
    TRIAL_COMPLETED = "trial.completed"

    # Characters
    NPC_ACTED = "npc.acted"
    CHARACTER_EXECUTED = "character.executed"
    CHARACTER_DISMISSED = "character.dismissed"
    CHARACTER_DEMOTED = "character.demoted"

    # Turn and persistence
    TURN_ADVANCED = "turn.advanced"
    STATE_CORRUPTED = "state.corrupted"
    WORLD_CREATED = "world.created"
    WORLD_LOADED = "world.loaded"
    WORLD_SAVED = "world.saved"


@dataclass
class GameEvent:
    """
    One published outcome.

    data always carries whatever the emitter passed as keyword arguments;
    action outcomes include a narrative_key.
    """

    type: EventType
    data: dict = field(default_factory=dict)
    world_id: str = ""
    turn: int = 0
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def narrative_key(self) -> str | None:
        return self.data.get("narrative_key")

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.data}"


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """
    Synchronous event bus.

    Listeners are called immediately on emit(): typed listeners first, in
    subscription order, then catch-all listeners. A failing listener is
    logged and skipped; the others still run.
    """

    def __init__(self, history_limit: int = 100):
        self._listeners: dict[EventType, list[EventHandler]] = {}
        self._catch_all: list[EventHandler] = []
        self._history: list[GameEvent] = []
        self._history_limit = history_limit

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe to one event type. Subscribing twice is a no-op."""
        handlers = self._listeners.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)

    def on_all(self, handler: EventHandler) -> None:
        """Subscribe to every event type."""
        if handler not in self._catch_all:
            self._catch_all.append(handler)

    def off(self, event_type: EventType | None, handler: EventHandler) -> None:
        """Unsubscribe. event_type None removes a catch-all listener."""
        handlers = self._catch_all if event_type is None else self._listeners.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(
        self,
        event_type: EventType,
        world_id: str = "",
        turn: int = 0,
        **data,
    ) -> GameEvent:
        """
        Record an event and hand it to its listeners.

        Args:
            event_type: The type of event
            world_id: World the event belongs to
            turn: Turn on which it happened
            **data: Event payload

        Returns:
            The emitted GameEvent
        """
        event = GameEvent(type=event_type, data=data, world_id=world_id, turn=turn)

        self._history.append(event)
        del self._history[:-self._history_limit]

        for handler in [*self._listeners.get(event_type, []), *self._catch_all]:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Listener for {event_type.value} failed: {e}")

        return event

    def clear(self) -> None:
        """Drop all listeners and history."""
        self._listeners.clear()
        self._catch_all.clear()
        self._history.clear()

    def get_history(
        self,
        event_type: EventType | None = None,
        world_id: str | None = None,
    ) -> list[GameEvent]:
        """Recent events, oldest first, optionally filtered by type and world."""
        return [
            e for e in self._history
            if (event_type is None or e.type == event_type)
            and (world_id is None or e.world_id == world_id)
        ]

    def listener_count(self, event_type: EventType | None = None) -> int:
        """Listeners for one type, or catch-all listeners when type is None."""
        if event_type is None:
            return len(self._catch_all)
        return len(self._listeners.get(event_type, []))


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """The process-wide bus, created on first use."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    """Forget the process-wide bus. Tests call this between cases."""
    global _event_bus
    _event_bus = None
