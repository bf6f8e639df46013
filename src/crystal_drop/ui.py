from typing import Optional

from rich.console import Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table

from crystal_drop.config import MAX_BUILDING_FLOORS
from crystal_drop.state_queue import SingleSlotQueue
from crystal_drop.state_snapshot import SearchState


COLORS = {
    "current": "bold yellow on black",
    "broken": "bright_red",
    "safe": "spring_green2",
    "planned": "cyan",
    "untested": "dim",
    "found": "bold white on red",
}


def floor_style(state: SearchState, floor: int) -> str:
    """Pick the style for one floor of the building."""
    if state.found_floor == floor:
        return COLORS["found"]
    if not state.finished and state.current_floor == floor:
        return COLORS["current"]
    if state.broke_at(floor):
        return COLORS["broken"]
    if floor in state.drops:
        return COLORS["safe"]
    if floor in state.sequence:
        return COLORS["planned"]
    return COLORS["untested"]


def render_building(state: SearchState) -> Table:
    """Floors from the top down, one row each."""
    table = Table(show_header=False, show_edge=False, padding=(0, 1))
    table.add_column("Floor", justify="right", no_wrap=True)
    table.add_column("Drops", no_wrap=True)

    for floor in reversed(range(state.n)):
        style = floor_style(state, floor)
        count = state.drops.count(floor)
        marks = "●" * count
        table.add_row(f"[{style}]Floor {floor}[/{style}]", marks)
    return table


def render_summary(state: SearchState, secret_f: Optional[int] = None) -> Table:
    table = Table(show_header=False, show_edge=False, padding=(0, 2))
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", overflow="fold")

    found = "—" if state.found_floor is None else str(state.found_floor)
    secret = str(secret_f) if state.finished and secret_f is not None else "—"
    table.add_row("k", str(state.k))
    table.add_row("Planned", ", ".join(str(f) for f in state.sequence) or "—")
    table.add_row("Drops", ", ".join(str(f) for f in state.drops) or "—")
    table.add_row("Phase", state.phase)
    table.add_row("Found f", found)
    table.add_row("Total drops", str(state.total_drops))
    table.add_row("Secret f", secret)
    if state.inconsistency:
        table.add_row("[red]Inconsistent[/red]", f"[red]{state.inconsistency}[/red]")
    return table


def render(state: Optional[SearchState], secret_f: Optional[int] = None):
    """Render the search state snapshot."""
    if state is None:
        return Panel("Waiting for first drop…", title="Crystal Ball Drop", border_style="dim")

    title = f"{state.n} floors  |  k = {state.k}  |  v{state.version}"
    summary = render_summary(state, secret_f)
    if 0 < state.n <= MAX_BUILDING_FLOORS:
        body = Group(render_building(state), summary)
    else:
        body = summary

    border = "green" if state.finished and state.found_floor is not None else "blue"
    if state.inconsistency:
        border = "red"
    return Panel(body, title=title, border_style=border)


def ui_loop(state_queue: SingleSlotQueue[SearchState], secret_f: Optional[int] = None) -> Optional[SearchState]:
    """Render states until the queue closes. Returns the last state seen."""
    last: Optional[SearchState] = None
    with Live(render(None), refresh_per_second=30, screen=False) as live:
        for state in state_queue:
            last = state
            live.update(render(state, secret_f))
    return last
