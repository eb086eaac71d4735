"""
Display and rendering helpers for the APPARAT CLI.

Handles theming, status displays, action tables and turn reports.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..catalog import get_catalog
from ..catalog.models import ActionDefinition
from ..state.event_bus import GameEvent
from ..state.schema import Domain, World
from ..state.schemas import ActionResult, TurnReport, ValidationResult

# Shared console instance
console = Console()

# -----------------------------------------------------------------------------
# Theme: grey paper, red stamps
# -----------------------------------------------------------------------------

THEME = {
    "primary": "steel_blue",
    "secondary": "grey70",
    "warning": "dark_goldenrod",
    "danger": "dark_red",
    "accent": "cyan",
    "success": "green3",
    "dim": "dim",
    "text": "grey85",
}


def _styled(text: str, key: str) -> str:
    style = THEME[key]
    return f"[{style}]{text}[/{style}]"


def _stat_style(value: int) -> str:
    if value < 30:
        return THEME["danger"]
    if value < 50:
        return THEME["warning"]
    return THEME["success"]


def show_world_list(worlds: list[dict]) -> None:
    if not worlds:
        console.print(_styled("No worlds saved", "dim"))
        return

    table = Table(title="Worlds", box=None)
    table.add_column("#", style=THEME["dim"])
    table.add_column("ID", style=THEME["accent"])
    table.add_column("Name", style=THEME["text"])
    table.add_column("Turn", justify="right")
    table.add_column("Updated", style=THEME["dim"])
    for i, world in enumerate(worlds, 1):
        table.add_row(
            str(i),
            world["id"],
            world["name"],
            str(world["turn"]),
            world.get("display_time", ""),
        )
    console.print(table)


def show_status(world: World | None) -> None:
    """Show the player, national counters and open cases."""
    if world is None:
        console.print(_styled("No world loaded", "dim"))
        return

    p = world.player
    table = Table(
        title=f"[bold {THEME['primary']}]{world.name}[/bold {THEME['primary']}]",
        show_header=False,
        box=None,
    )
    table.add_column("Key", style=THEME["dim"])
    table.add_column("Value", style=THEME["secondary"])

    table.add_row("Turn", str(world.turn))
    table.add_row("Position", f"{p.title} (Position {p.rank}, {p.track.label})")
    table.add_row("Standing", f"{p.standing}  Network {p.network}  Exposure {p.exposure}")
    for stat, value in world.stats.model_dump().items():
        label = stat.replace("_", " ").title()
        table.add_row(label, f"[{_stat_style(value)}]{value}[/{_stat_style(value)}]")
    if world.flags:
        table.add_row("Flags", ", ".join(sorted(f.value for f in world.flags)))
    console.print(table)

    if world.detentions or world.trials or world.projects:
        console.print()
        cases = Table(title="Open cases", box=None)
        cases.add_column("Kind", style=THEME["dim"])
        cases.add_column("Subject")
        cases.add_column("Phase", style=THEME["warning"])
        cases.add_column("Since", justify="right")
        for d in world.detentions:
            cases.add_row("detention", d.target_name, d.phase.value, str(d.initiated_turn))
        for t in world.trials:
            cases.add_row("trial", t.defendant_name, t.phase.value, str(t.initiated_turn))
        for pr in world.projects:
            cases.add_row("project", pr.name, pr.phase.value, str(pr.initiated_turn))
        console.print(cases)


def show_actions(
    domain: Domain,
    actions: list[tuple[ActionDefinition, ValidationResult]],
    rank: int,
) -> None:
    """Table of actions open to the player, plus the ones still locked."""
    table = Table(title=f"{domain.value.title()} actions", box=None)
    table.add_column("ID", style=THEME["accent"])
    table.add_column("Name", style=THEME["text"])
    table.add_column("Risk", style=THEME["dim"])
    table.add_column("Turns", justify="right")
    table.add_column("Chance", justify="right")
    table.add_column("Status")

    for action, verdict in actions:
        if verdict.can_execute:
            status = _styled("ready", "success")
            if verdict.requires_approval:
                status = _styled("needs approval", "warning")
        else:
            status = _styled(verdict.reason or "blocked", "danger")
        table.add_row(
            action.id,
            action.name,
            action.risk.value,
            str(action.execution_turns),
            f"{verdict.success_chance}%",
            status,
        )
    console.print(table)

    locked = get_catalog(domain).locked_for_rank(rank)
    if locked:
        names = ", ".join(f"{a.name} (P{a.min_rank})" for a in locked[:6])
        more = f" and {len(locked) - 6} more" if len(locked) > 6 else ""
        console.print(_styled(f"Locked: {names}{more}", "dim"))


def show_action_result(result: ActionResult) -> None:
    if result.is_rejected:
        console.print(Panel(result.reason or "Rejected", title="Rejected", border_style=THEME["danger"]))
        return

    if result.is_scheduled:
        console.print(Panel(
            result.description or f"Due on turn {result.completion_turn}",
            title="Scheduled",
            border_style=THEME["warning"],
        ))
        return

    style = THEME["success"] if result.succeeded else THEME["danger"]
    lines = [result.description or ""]
    if result.roll is not None:
        lines.append(_styled(f"Rolled {result.roll} against {result.success_chance}%", "dim"))
    if result.requires_approval:
        lines.append(_styled("Requires approval from above", "warning"))
    console.print(Panel(
        "\n".join(line for line in lines if line),
        title="Success" if result.succeeded else "Failure",
        border_style=style,
    ))


def show_turn_report(report: TurnReport) -> None:
    if report.skipped:
        console.print(_styled(f"Turn {report.turn} already processed", "dim"))
        return

    console.print(f"[bold {THEME['primary']}]Turn {report.turn}[/bold {THEME['primary']}]")
    if not report.summary:
        console.print(_styled("  A quiet fortnight.", "dim"))
    for line in report.summary:
        console.print(f"  {line}", markup=False)


def show_event(event: GameEvent) -> None:
    console.print(f"  event {event.type.value} {event.data}", style=THEME["dim"], markup=False)
