"""
NPC plan selection.

Given the world as an NPC sees it, pick the one action they would take this
turn. Selection is priority ordered; the planner service decides whether the
NPC acts at all and then executes the plan.
"""

from dataclasses import dataclass

from ..state.schema import Character, Domain, NPCGoal, Track, World

# Per-turn probability that an eligible NPC acts, by domain
NPC_ACTION_CHANCE: dict[Domain, int] = {
    Domain.SECURITY: 25,
    Domain.MINISTRY: 15,
}

NPC_MIN_RANK: dict[Domain, int] = {
    Domain.SECURITY: 3,
    Domain.MINISTRY: 2,
}

NPC_TRACK: dict[Domain, Track] = {
    Domain.SECURITY: Track.SECURITY,
    Domain.MINISTRY: Track.MINISTRY,
}

INVESTIGATIVE_GOALS = {NPCGoal.ROOT_OUT_TRAITORS, NPCGoal.PURGE_ENEMIES}


@dataclass(frozen=True)
class NPCPlan:
    """One intended action."""
    action_id: str
    priority: int
    target_id: str | None = None
    reason: str = ""


def is_eligible(npc: Character, domain: Domain) -> bool:
    """Whether an NPC is in a position to act in a domain at all."""
    if domain not in NPC_TRACK:
        return False
    return (
        npc.is_free
        and npc.track == NPC_TRACK[domain]
        and npc.position >= NPC_MIN_RANK[domain]
    )


def investigation_targets(npc: Character, world: World) -> list[Character]:
    """Junior officials an investigator could move against."""
    targets = []
    for other in world.characters:
        if other.id == npc.id or not other.is_free:
            continue
        if other.position >= npc.position:
            continue
        # Below Position 5 an investigator stays out of their own faction's business
        if npc.position < 5 and npc.faction is not None and other.faction == npc.faction:
            continue
        targets.append(other)
    return targets


def plan_security_action(npc: Character, world: World, pick) -> NPCPlan | None:
    """
    Security NPCs with an investigative goal go after a junior official;
    otherwise they keep someone under surveillance.

    Args:
        npc: The acting character
        world: Current world
        pick: Callable choosing one element from a non-empty list
    """
    if set(npc.goals) & INVESTIGATIVE_GOALS:
        targets = investigation_targets(npc, world)
        if targets:
            target = pick(targets)
            if npc.position >= 5:
                action_id = "order_shuanggui"
            elif npc.position >= 4:
                action_id = "launch_formal_investigation"
            else:
                action_id = "open_case_file"
            return NPCPlan(action_id, 60, target.id, "investigative goal")

    if npc.position >= 2:
        others = [c for c in world.characters if c.id != npc.id and c.is_free]
        if others:
            return NPCPlan("conduct_surveillance", 30, pick(others).id, "routine watch")
    return None


# (predicate, minimum rank, action id, priority, reason) checked in order
MINISTRY_RULES = [
    (lambda s: s.stability < 40, 3, "implement_policy", 80, "low stability"),
    (lambda s: s.treasury < 40, 4, "negotiate_budget", 75, "low treasury"),
    (lambda s: s.industrial_output < 40, 5, "coordinate_commission_work", 70, "low output"),
    (lambda s: True, 3, "conduct_inspection", 40, "routine oversight"),
    (lambda s: True, 2, "coordinate_departments", 30, "routine coordination"),
]


def plan_ministry_action(npc: Character, world: World) -> NPCPlan | None:
    """Ministry NPCs respond to the weakest national counter they can address."""
    for predicate, min_rank, action_id, priority, reason in MINISTRY_RULES:
        if npc.position >= min_rank and predicate(world.stats):
            return NPCPlan(action_id, priority, None, reason)
    return None
