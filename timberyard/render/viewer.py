"""Rich viewer rendering for TickPayload."""

from __future__ import annotations

from rich.columns import Columns
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from timberyard.render.world_map import render_overview
from timberyard.sim.contracts import STATUS_LABELS, Position, SiteStatus, TickPayload


def render_tick(
    payload: TickPayload,
    *,
    max_events: int = 5,
    map_width: int = 48,
    map_height: int = 18,
) -> RenderableType:
    header = Text(
        f"Tick {payload.tick}  t={payload.elapsed:.1f}s  dt={payload.dt:.2f}s",
        style="bold",
    )
    agents = _render_agents(payload)
    events = _render_events(payload, max_events=max_events)
    overlay = _render_registry(payload)
    overview = Panel(
        Text("\n").join(render_overview(payload, width=map_width, height=map_height)),
        title="Overview",
    )

    left = Group(header, agents, events)
    right = Group(overlay, overview)
    return Columns([Panel(left, title="Simulation"), Panel(right, title="World")])


def _render_agents(payload: TickPayload) -> RenderableType:
    table = Table(title="Agents", show_header=True, header_style="bold")
    table.add_column("Agent")
    table.add_column("State")
    table.add_column("Wood", justify="right")
    table.add_column("Position")
    table.add_column("Heading", justify="right")

    for agent in payload.agents:
        table.add_row(
            agent.name,
            STATUS_LABELS[agent.status],
            str(agent.inventory),
            _format_position(agent.position),
            f"{agent.heading:.0f}",
        )
    if not payload.agents:
        table.add_row("-", "None", "-", "-", "-")
    return table


def _render_registry(payload: TickPayload) -> RenderableType:
    registry = payload.registry
    building = [
        site
        for site in registry.reserved_sites
        if site.status == SiteStatus.UNDER_CONSTRUCTION
    ]
    table = Table(show_header=False)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Trees left", str(len(payload.resources)))
    table.add_row("Claimed trees", str(len(registry.claimed_resources)))
    table.add_row("Reserved sites", str(len(registry.reserved_sites)))
    table.add_row(
        "Under construction",
        ", ".join(f"{site.owner_id} {site.progress:.0%}" for site in building)
        or "None",
    )
    table.add_row("Structures", str(len(registry.completed_structures)))
    return Panel(table, title="Registry")


def _render_events(payload: TickPayload, *, max_events: int) -> RenderableType:
    table = Table(title="Recent Events", show_header=True, header_style="bold")
    table.add_column("Kind")
    table.add_column("Detail")

    events = payload.events or []
    for event in events[-max_events:]:
        table.add_row(event.kind.value, _format_payload(event.payload))
    if not events:
        table.add_row("-", "None")
    return table


def _format_position(position: Position) -> str:
    return "(" + ", ".join(f"{value:.1f}" for value in position) + ")"


def _format_payload(payload: dict) -> str:
    if not payload:
        return "-"
    return ", ".join(f"{key}={value}" for key, value in payload.items())
