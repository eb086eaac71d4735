"""
Starting world.

A fixed roster of officials and foreign powers. The seed only jitters
personalities, so two worlds created with the same seed are identical.
"""

from ..tools.dice import Dice
from .schema import (
    Character,
    Country,
    NPCGoal,
    Personality,
    Player,
    PoliticalBloc,
    Track,
    TreatyType,
    World,
)

# Personality traits drift this far either side of the roster value
PERSONALITY_JITTER = 10

# (id, name, title, rank, track, faction, goals, (loyal, paranoid, ambitious, competent, ruthless))
OFFICIALS = [
    ("volkov", "Viktor Volkov", "Chairman of State Security", 6, Track.SECURITY,
     "old_guard", [NPCGoal.ROOT_OUT_TRAITORS], (60, 80, 55, 70, 85)),
    ("petrova", "Anna Petrova", "Deputy Chief Investigator", 4, Track.SECURITY,
     "reformists", [NPCGoal.PURGE_ENEMIES], (45, 60, 75, 65, 60)),
    ("kozlov", "Mikhail Kozlov", "Case Officer", 3, Track.SECURITY,
     "youth_league", [NPCGoal.PROTECT_POSITION], (55, 50, 40, 55, 35)),
    ("orlov", "Dmitri Orlov", "Minister of Finance", 5, Track.MINISTRY,
     "reformists", [NPCGoal.PROTECT_POSITION], (50, 40, 70, 75, 30)),
    ("sokolova", "Elena Sokolova", "Deputy Director of State Planning", 3, Track.MINISTRY,
     "old_guard", [], (65, 35, 45, 60, 25)),
    ("lebedev", "Pavel Lebedev", "Department Clerk", 2, Track.MINISTRY,
     "youth_league", [], (70, 30, 55, 45, 20)),
    ("morozov", "Grigori Morozov", "Ambassador-at-Large", 4, Track.DIPLOMACY,
     "old_guard", [], (55, 45, 50, 70, 40)),
    ("novikova", "Irina Novikova", "Regional Party Secretary", 3, Track.PARTY,
     "reformists", [NPCGoal.PROTECT_POSITION], (40, 55, 80, 60, 50)),
    ("fedorov", "Yuri Fedorov", "Colonel, General Staff", 4, Track.MILITARY,
     "princelings", [], (60, 50, 60, 65, 70)),
    ("zaitsev", "Boris Zaitsev", "Planning Economist", 2, Track.ECONOMIC,
     "youth_league", [], (50, 35, 60, 70, 20)),
    ("belov", "Sergei Belov", "Provincial Official", 1, Track.PARTY,
     "princelings", [], (45, 40, 65, 40, 45)),
]

# (id, name, bloc, relationship, tension, military strength, treaties)
COUNTRIES = [
    ("soviet_union", "Soviet Union", PoliticalBloc.SOCIALIST, 55, 25, 95,
     [TreatyType.MUTUAL_DEFENSE, TreatyType.TRADE_AGREEMENT]),
    ("germany", "Germany", PoliticalBloc.SOCIALIST, 70, 10, 65,
     [TreatyType.MUTUAL_DEFENSE, TreatyType.TRADE_AGREEMENT]),
    ("cuba", "Cuba", PoliticalBloc.CAPITALIST, -75, 80, 30, []),
    ("canada", "Canada", PoliticalBloc.CAPITALIST, -70, 75, 45, []),
    ("united_kingdom", "United Kingdom", PoliticalBloc.CAPITALIST, -60, 65, 70, []),
    ("france", "France", PoliticalBloc.CAPITALIST, -25, 40, 55, []),
    ("italy", "Italy", PoliticalBloc.NON_ALIGNED, -55, 50, 55, []),
    ("spain", "Spain", PoliticalBloc.NON_ALIGNED, -50, 45, 45, []),
    ("japan", "Japan", PoliticalBloc.NON_ALIGNED, -65, 70, 80, []),
    ("china", "China", PoliticalBloc.NON_ALIGNED, 15, 35, 40, [TreatyType.TRADE_AGREEMENT]),
    ("mexico", "Mexico", PoliticalBloc.NON_ALIGNED, 10, 30, 35, []),
]


def _personality(traits: tuple[int, ...], dice: Dice) -> Personality:
    loyal, paranoid, ambitious, competent, ruthless = (
        max(0, min(100, t + dice.between(-PERSONALITY_JITTER, PERSONALITY_JITTER)))
        for t in traits
    )
    return Personality(
        loyal=loyal,
        paranoid=paranoid,
        ambitious=ambitious,
        competent=competent,
        ruthless=ruthless,
    )


def build_characters(dice: Dice) -> list[Character]:
    return [
        Character(
            id=char_id,
            name=name,
            title=title,
            rank=rank,
            track=track,
            faction=faction,
            goals=list(goals),
            personality=_personality(traits, dice),
        )
        for char_id, name, title, rank, track, faction, goals, traits in OFFICIALS
    ]


def build_countries() -> list[Country]:
    return [
        Country(
            id=country_id,
            name=name,
            bloc=bloc,
            relationship=relationship,
            tension=tension,
            military_strength=strength,
            treaties=list(treaties),
        )
        for country_id, name, bloc, relationship, tension, strength, treaties in COUNTRIES
    ]


def new_world(name: str = "Unnamed", seed: int | None = None, player: Player | None = None) -> World:
    """Build the starting world. The player begins as a Position 3 security officer."""
    dice = Dice(seed=seed)
    return World(
        name=name,
        seed=seed,
        player=player or Player(title="Case Officer", rank=3, track=Track.SECURITY, network=20),
        characters=build_characters(dice),
        countries=build_countries(),
    )
