"""
Turn advancer.

The single per-turn entry point. It sequences, it does not resolve:

    1. detentions, then trials
    2. pending actions (security, diplomacy, ministry), then ministry projects
    3. NPC planning (security, ministry)
    4. expired cooldowns are dropped

The order is part of the contract: an action resolved in step 2 may start a
detention, and that detention first advances on the following turn.

Usage:
    advancer = TurnAdvancer(world, Dice(seed=42))
    result = advancer.engine(Domain.SECURITY).request("open_case_file", target_id="c1")
    report = advancer.advance()
"""

import logging

from ..errors import StaleTurnError
from ..state.event_bus import EventBus, EventType, get_event_bus
from ..state.schema import Domain, World
from ..state.schemas import TurnReport
from ..tools.dice import Dice
from .detention import DetentionProcess
from .engine import ActionEngine
from .planner import NPCPlanner
from .trials import TrialProcess

logger = logging.getLogger(__name__)

PENDING_ORDER = (Domain.SECURITY, Domain.DIPLOMACY, Domain.MINISTRY)


class TurnAdvancer:
    """
    Owns the per-world services and drives them once per turn.

    All services share one Dice, so a seeded world replays identically.
    """

    def __init__(
        self,
        world: World,
        dice: Dice,
        bus: EventBus | None = None,
        npc_activity: float = 1.0,
    ):
        self.world = world
        self.dice = dice
        self.bus = bus or get_event_bus()
        self.trials = TrialProcess(world, dice, self.bus)
        self.detentions = DetentionProcess(world, dice, self.bus, self.trials)
        self.engines: dict[Domain, ActionEngine] = {
            domain: ActionEngine(
                world,
                domain,
                dice,
                self.bus,
                detentions=self.detentions,
                trials=self.trials,
            )
            for domain in Domain
        }
        self.planner = NPCPlanner(world, dice, self.engines, self.bus, activity=npc_activity)

    def engine(self, domain: Domain) -> ActionEngine:
        return self.engines[domain]

    def advance(self, turn: int | None = None) -> TurnReport:
        """
        Advance the world to a turn (default: the next one).

        Calling again for the turn just processed returns a skipped report and
        changes nothing.

        Raises:
            StaleTurnError: turn is earlier than one already processed
        """
        world = self.world
        turn = world.turn + 1 if turn is None else turn

        if turn < world.last_advanced_turn:
            raise StaleTurnError(turn, world.last_advanced_turn)
        if turn == world.last_advanced_turn:
            logger.warning(f"Turn {turn} already advanced; skipping")
            return TurnReport(turn=turn, skipped=True)

        world.turn = turn
        report = TurnReport(turn=turn)

        # 1. Sub-processes
        report.detention_changes, report.detentions_ended = self.detentions.advance(turn)
        trial_changes = self.trials.advance(turn)
        report.trial_changes = trial_changes
        report.trials_completed = [c.record_id for c in trial_changes if c.to_phase == "completed"]

        # 2. Deferred outcomes
        for domain in PENDING_ORDER:
            report.resolved.extend(self.engines[domain].resolve_pending(turn))
        report.resolved.extend(self.engines[Domain.MINISTRY].projects.advance(turn))

        # 3. NPCs
        report.npc_actions = self.planner.run(turn)

        # 4. Cooldown bookkeeping
        for domain in Domain:
            report.cooldowns_cleared += world.ledger(domain).clear_expired(turn)

        world.last_advanced_turn = turn
        world.touch()

        logger.info(
            f"Turn {turn}: {len(report.detention_changes)} detention changes, "
            f"{len(report.trial_changes)} trial changes, {len(report.resolved)} resolved, "
            f"{len(report.npc_actions)} NPC actions"
        )
        self.bus.emit(
            EventType.TURN_ADVANCED,
            world_id=world.id,
            turn=turn,
            resolved=len(report.resolved),
            npc_actions=len(report.npc_actions),
        )
        return report
