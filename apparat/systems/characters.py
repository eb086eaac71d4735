"""
Character fates.

The one place that changes who an official is: executed, dismissed, demoted,
imprisoned, exiled, expelled or released. Detention, trials and security
effects all go through here so the world counters move the same way every
time.
"""

import logging

from ..state.event_bus import EventBus, EventType
from ..state.schema import Character, CharacterStatus, World

logger = logging.getLogger(__name__)

DISGRACED_TITLE = "Disgraced Former Official"
DEFAULT_DEMOTION_LEVELS = 2


def execute_character(world: World, char: Character, bus: EventBus, cause: str = "") -> None:
    """Kill an official. The position is vacated and the elite takes note."""
    if not char.is_alive:
        return
    former_rank = char.rank
    char.status = CharacterStatus.EXECUTED
    char.is_detained = False
    char.rank = None

    world.stats.apply("elite_loyalty", 10)
    world.stats.apply("international_standing", -5)
    world.stats.apply("stability", -3)

    logger.info(f"{char.name} executed ({cause or 'unspecified'})")
    bus.emit(
        EventType.CHARACTER_EXECUTED,
        world_id=world.id,
        turn=world.turn,
        character_id=char.id,
        name=char.name,
        former_rank=former_rank,
        cause=cause,
    )


def dismiss_character(world: World, char: Character, bus: EventBus) -> None:
    """Strip an official of their post."""
    char.rank = 0
    char.title = DISGRACED_TITLE
    bus.emit(
        EventType.CHARACTER_DISMISSED,
        world_id=world.id,
        turn=world.turn,
        character_id=char.id,
        name=char.name,
    )


def demote_character(
    world: World,
    char: Character,
    bus: EventBus,
    levels: int = DEFAULT_DEMOTION_LEVELS,
) -> bool:
    """Drop an official by some levels. Officials already near the bottom keep their post."""
    if char.rank is None or char.rank <= levels:
        return False
    before = char.rank
    char.rank -= levels
    bus.emit(
        EventType.CHARACTER_DEMOTED,
        world_id=world.id,
        turn=world.turn,
        character_id=char.id,
        name=char.name,
        before=before,
        after=char.rank,
    )
    return True


def detain_character(char: Character) -> None:
    char.is_detained = True
    char.status = CharacterStatus.DETAINED


def release_character(char: Character) -> None:
    """Back to work, with a file that never closes."""
    char.is_detained = False
    if char.is_alive:
        char.status = CharacterStatus.UNDER_INVESTIGATION


def imprison_character(char: Character) -> None:
    char.is_detained = False
    char.status = CharacterStatus.IMPRISONED
    char.rank = 0


def exile_character(char: Character) -> None:
    char.is_detained = False
    char.status = CharacterStatus.EXILED
    char.rank = 0


def expel_character(char: Character) -> None:
    """Expelled from the Party and out of the apparatus."""
    char.is_detained = False
    char.status = CharacterStatus.EXPELLED
    char.rank = 0
    char.title = DISGRACED_TITLE
