"""Top-down ASCII overview of trees, sites, structures and agents."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from timberyard.sim.contracts import Position, SiteStatus, TickPayload

GROUND_SYMBOL = "."
TREE_SYMBOL = "T"
CLAIMED_TREE_SYMBOL = "t"
RESERVED_SYMBOL = "+"
CONSTRUCTION_SYMBOL = "%"
STRUCTURE_SYMBOL = "#"
AGENT_SYMBOL = "@"

TILE_STYLES = {
    GROUND_SYMBOL: "grey50",
    TREE_SYMBOL: "green3",
    CLAIMED_TREE_SYMBOL: "yellow3",
    RESERVED_SYMBOL: "yellow",
    CONSTRUCTION_SYMBOL: "bright_magenta",
    STRUCTURE_SYMBOL: "bright_white",
}
AGENT_STYLE = "bright_cyan"


@dataclass(frozen=True)
class MapBounds:
    min_x: float
    min_z: float
    max_x: float
    max_z: float

    def to_cell(self, position: Position, width: int, height: int) -> tuple[int, int]:
        span_x = max(self.max_x - self.min_x, 1e-9)
        span_z = max(self.max_z - self.min_z, 1e-9)
        col = int((position[0] - self.min_x) / span_x * (width - 1) + 0.5)
        # North (+z) is drawn at the top.
        row = int((self.max_z - position[2]) / span_z * (height - 1) + 0.5)
        return _clamp(col, 0, width - 1), _clamp(row, 0, height - 1)


def compute_bounds(payload: TickPayload, *, padding: float = 2.0) -> MapBounds:
    points = [resource.position for resource in payload.resources]
    points.extend(agent.position for agent in payload.agents)
    points.extend(site.position for site in payload.registry.reserved_sites)
    points.extend(item.position for item in payload.registry.completed_structures)
    if not points:
        return MapBounds(-padding, -padding, padding, padding)
    xs = [point[0] for point in points]
    zs = [point[2] for point in points]
    return MapBounds(
        min(xs) - padding, min(zs) - padding, max(xs) + padding, max(zs) + padding
    )


def render_overview(
    payload: TickPayload,
    *,
    width: int = 60,
    height: int = 24,
    bounds: MapBounds | None = None,
) -> list[Text]:
    width = max(2, width)
    height = max(2, height)
    bounds = bounds or compute_bounds(payload)
    grid = [[GROUND_SYMBOL] * width for _ in range(height)]
    styles = [[TILE_STYLES[GROUND_SYMBOL]] * width for _ in range(height)]

    def place(position: Position, symbol: str, style: str) -> None:
        col, row = bounds.to_cell(position, width, height)
        grid[row][col] = symbol
        styles[row][col] = style

    for resource in payload.resources:
        symbol = CLAIMED_TREE_SYMBOL if resource.claimed else TREE_SYMBOL
        place(resource.position, symbol, TILE_STYLES[symbol])
    for structure in payload.registry.completed_structures:
        place(structure.position, STRUCTURE_SYMBOL, TILE_STYLES[STRUCTURE_SYMBOL])
    for site in payload.registry.reserved_sites:
        symbol = (
            CONSTRUCTION_SYMBOL
            if site.status == SiteStatus.UNDER_CONSTRUCTION
            else RESERVED_SYMBOL
        )
        place(site.position, symbol, TILE_STYLES[symbol])
    for agent in payload.agents:
        place(agent.position, AGENT_SYMBOL, AGENT_STYLE)

    lines: list[Text] = []
    for row, row_styles in zip(grid, styles):
        line = Text()
        for symbol, style in zip(row, row_styles):
            line.append(symbol, style=style)
        lines.append(line)
    return lines


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))
