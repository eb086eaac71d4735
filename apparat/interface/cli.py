"""
APPARAT command-line interface.

One subcommand per operation; every command that changes the world saves
it before exiting.

Usage:
    apparat new "Spring Plenum" --seed 7
    apparat actions --domain security
    apparat act security open_case_file --target kozlov
    apparat advance --turns 3
    apparat simulate --turns 20 --seed 1
"""

import argparse
import logging
import sys
from pathlib import Path

from ..config import load_config
from ..errors import EngineError
from ..state import MemoryWorldStore, WorldManager, get_event_bus
from ..state.schema import Domain
from .renderer import (
    THEME,
    console,
    show_action_result,
    show_actions,
    show_event,
    show_status,
    show_turn_report,
    show_world_list,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="apparat", description="APPARAT - state apparatus simulation")
    parser.add_argument(
        "--worlds-dir",
        default=None,
        help="Directory holding world saves (default from config)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log at DEBUG level",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Create a world")
    new.add_argument("name")
    new.add_argument("--seed", type=int, default=None)

    sub.add_parser("list", help="List saved worlds")

    status = sub.add_parser("status", help="Show the current world")
    status.add_argument("--world", default="1", help="World id, prefix or list index")

    actions = sub.add_parser("actions", help="List actions open to the player")
    actions.add_argument("--domain", choices=[d.value for d in Domain], default=Domain.SECURITY.value)
    actions.add_argument("--world", default="1")

    act = sub.add_parser("act", help="Request an action")
    act.add_argument("domain", choices=[d.value for d in Domain])
    act.add_argument("action")
    act.add_argument("--target", default=None)
    act.add_argument("--world", default="1")

    advance = sub.add_parser("advance", help="Advance turns")
    advance.add_argument("--turns", type=int, default=1)
    advance.add_argument("--world", default="1")

    simulate = sub.add_parser("simulate", help="Run NPC-only turns on a fresh in-memory world")
    simulate.add_argument("--turns", type=int, default=10)
    simulate.add_argument("--seed", type=int, default=None)

    return parser


def _load(manager: WorldManager, world_id: str) -> bool:
    if manager.load_world(world_id) is None:
        console.print(f"[{THEME['danger']}]No world matching '{world_id}'[/{THEME['danger']}]")
        return False
    return True


def cmd_new(manager: WorldManager, args, config) -> int:
    seed = args.seed if args.seed is not None else config.get("seed")
    world = manager.create_world(args.name, seed=seed)
    console.print(f"Created [{THEME['accent']}]{world.name}[/{THEME['accent']}] ({world.id})")
    return 0


def cmd_list(manager: WorldManager, args, config) -> int:
    show_world_list(manager.list_worlds())
    return 0


def cmd_status(manager: WorldManager, args, config) -> int:
    if not _load(manager, args.world):
        return 1
    show_status(manager.current)
    return 0


def cmd_actions(manager: WorldManager, args, config) -> int:
    if not _load(manager, args.world):
        return 1
    domain = Domain(args.domain)
    engine = manager.advancer().engine(domain)
    show_actions(domain, engine.available_actions(), manager.require_current().player.rank)
    return 0


def cmd_act(manager: WorldManager, args, config) -> int:
    if not _load(manager, args.world):
        return 1
    result = manager.request_action(Domain(args.domain), args.action, args.target)
    show_action_result(result)
    if not result.is_rejected:
        manager.save_world()
    return 0 if not result.is_rejected else 2


def cmd_advance(manager: WorldManager, args, config) -> int:
    if not _load(manager, args.world):
        return 1
    for _ in range(max(1, args.turns)):
        show_turn_report(manager.advance_turn())
    manager.save_world()
    return 0


def cmd_simulate(manager: WorldManager, args, config) -> int:
    seed = args.seed if args.seed is not None else config.get("seed")
    sim = WorldManager(MemoryWorldStore(), npc_activity=manager.npc_activity)
    sim.create_world("Simulation", seed=seed)
    for _ in range(max(1, args.turns)):
        show_turn_report(sim.advance_turn())
    console.print()
    show_status(sim.current)
    return 0


COMMANDS = {
    "new": cmd_new,
    "list": cmd_list,
    "status": cmd_status,
    "actions": cmd_actions,
    "act": cmd_act,
    "advance": cmd_advance,
    "simulate": cmd_simulate,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Config lives beside the saves; --worlds-dir picks which config too
    config = load_config(args.worlds_dir or "worlds")
    worlds_dir = Path(args.worlds_dir or config.get("worlds_dir", "worlds"))

    level = logging.DEBUG if args.verbose else getattr(
        logging, str(config.get("log_level", "WARNING")).upper(), logging.WARNING
    )
    logging.basicConfig(level=level, format=LOG_FORMAT)

    if config.get("show_events"):
        get_event_bus().on_all(show_event)

    manager = WorldManager(worlds_dir, npc_activity=float(config.get("npc_activity", 1.0)))
    try:
        return COMMANDS[args.command](manager, args, config)
    except EngineError as e:
        logger.debug(f"{args.command} failed: {e}")
        console.print(f"[{THEME['danger']}]{e}[/{THEME['danger']}]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
