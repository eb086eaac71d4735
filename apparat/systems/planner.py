"""
NPC autonomous planner.

Each turn, every eligible NPC gets one chance (per domain) to act. Those who
act pick a plan from rules.planning and execute it through the same engine
the player uses, with the simplified NPC success formula.
"""

import logging

from ..catalog import get_catalog
from ..rules.planning import (
    NPC_ACTION_CHANCE,
    NPCPlan,
    is_eligible,
    plan_ministry_action,
    plan_security_action,
)
from ..state.event_bus import EventBus, EventType, get_event_bus
from ..state.schema import Character, Domain, NPCActionEvent, World
from ..state.schemas import ActionResult
from ..tools.dice import Dice
from .engine import ActionEngine

logger = logging.getLogger(__name__)

PLANNED_DOMAINS = (Domain.SECURITY, Domain.MINISTRY)

SECURITY_SUCCESS_TEMPLATES = {
    "conduct_surveillance": "{title} {name} placed {target} under surveillance.",
    "open_case_file": "{title} {name} opened a discipline inspection case on {target}.",
    "launch_formal_investigation": "The security bureau launched a formal investigation into {target}.",
    "order_shuanggui": "{target} was detained under shuanggui by order of {name}.",
}


def describe_npc_action(
    domain: Domain,
    npc: Character,
    plan: NPCPlan,
    target: Character | None,
    result: ActionResult,
) -> str:
    """One factual line for the NPC log."""
    action = get_catalog(domain).require(plan.action_id)
    target_name = target.name if target else "unknown subject"
    title = npc.title or ("Security Official" if domain == Domain.SECURITY else "Ministry Official")

    if result.is_scheduled:
        return f"{title} {npc.name} began {action.name.lower()} (due turn {result.completion_turn})."
    if not result.succeeded:
        return f"{npc.name} attempted {action.name.lower()} but was unsuccessful."
    template = SECURITY_SUCCESS_TEMPLATES.get(plan.action_id) if domain == Domain.SECURITY else None
    if template:
        return template.format(title=title, name=npc.name, target=target_name)
    return f"{npc.name} carried out {action.name.lower()}."


class NPCPlanner:
    """
    Rolls for NPC activity and executes the chosen plans.

    Usage:
        planner = NPCPlanner(world, dice, engines)
        events = planner.run(turn)
    """

    def __init__(
        self,
        world: World,
        dice: Dice,
        engines: dict[Domain, ActionEngine],
        bus: EventBus | None = None,
        activity: float = 1.0,
    ):
        self.world = world
        self.dice = dice
        self.engines = engines
        self.bus = bus or get_event_bus()
        self.activity = activity  # Scales the per-turn action chance

    def action_chance(self, domain: Domain) -> int:
        return int(NPC_ACTION_CHANCE[domain] * self.activity)

    def plan_for(self, npc: Character, domain: Domain) -> NPCPlan | None:
        if domain == Domain.SECURITY:
            return plan_security_action(npc, self.world, self.dice.choice)
        if domain == Domain.MINISTRY:
            return plan_ministry_action(npc, self.world)
        return None

    def run(self, turn: int) -> list[NPCActionEvent]:
        """Give every eligible NPC their chance to act this turn."""
        events = []
        for domain in PLANNED_DOMAINS:
            chance = self.action_chance(domain)
            for npc in list(self.world.characters):
                if not is_eligible(npc, domain):
                    continue
                if not self.dice.chance(chance):
                    continue
                event = self._act(npc, domain, turn)
                if event is not None:
                    events.append(event)
        return events

    def _act(self, npc: Character, domain: Domain, turn: int) -> NPCActionEvent | None:
        plan = self.plan_for(npc, domain)
        if plan is None:
            return None

        result = self.engines[domain].execute_npc(npc.id, plan.action_id, plan.target_id)
        if result.is_rejected:
            logger.debug(f"NPC {npc.name} could not {plan.action_id}: {result.reason}")
            return None

        target = self.world.character(plan.target_id)
        event = NPCActionEvent(
            turn=turn,
            domain=domain,
            character_id=npc.id,
            character_name=npc.name,
            action_id=plan.action_id,
            target_id=plan.target_id,
            succeeded=result.succeeded if result.is_resolved else None,
            description=describe_npc_action(domain, npc, plan, target, result),
        )
        self.world.log_npc_action(event)

        logger.info(f"NPC {npc.name}: {event.description}")
        self.bus.emit(
            EventType.NPC_ACTED,
            world_id=self.world.id,
            turn=turn,
            domain=domain.value,
            character_id=npc.id,
            action_id=plan.action_id,
            target_id=plan.target_id,
            succeeded=event.succeeded,
            priority=plan.priority,
            reason=plan.reason,
        )
        return event
