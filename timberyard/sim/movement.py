"""Deterministic straight-line movement helpers."""

from __future__ import annotations

from timberyard.sim.contracts import Position
from timberyard.sim.world_state import AgentState
from timberyard.sim.world_utils import distance, heading_to


def step_towards(origin: Position, target: Position, max_distance: float) -> Position:
    """Move from origin toward target by at most max_distance, never overshooting."""
    remaining = distance(origin, target)
    if remaining <= max_distance or remaining == 0:
        return target
    scale = max_distance / remaining
    return (
        origin[0] + (target[0] - origin[0]) * scale,
        origin[1] + (target[1] - origin[1]) * scale,
        origin[2] + (target[2] - origin[2]) * scale,
    )


def turn_towards(heading: float, desired: float, max_delta: float) -> float:
    """Rotate heading toward desired along the shorter arc, at most max_delta."""
    delta = (desired - heading + 180.0) % 360.0 - 180.0
    if abs(delta) <= max_delta:
        return desired % 360.0
    step = max_delta if delta > 0 else -max_delta
    return (heading + step) % 360.0


def advance_agent(agent: AgentState, target: Position, dt: float) -> float:
    """Advance one tick of motion toward target and return the remaining distance."""
    desired = heading_to(agent.position, target)
    if desired is not None:
        agent.heading = turn_towards(
            agent.heading, desired, agent.config.turn_rate * dt
        )
    agent.position = step_towards(
        agent.position, target, agent.config.move_speed * dt
    )
    return distance(agent.position, target)


def face(agent: AgentState, target: Position) -> None:
    desired = heading_to(agent.position, target)
    if desired is not None:
        agent.heading = desired
