"""Expanding-ring search for a clear construction site."""

from __future__ import annotations

import math
from typing import Iterator

from timberyard.sim.contracts import Position
from timberyard.sim.registry import CoordinationRegistry
from timberyard.sim.resource_field import ResourceField
from timberyard.sim.world_utils import is_clear


def find_site(
    origin: Position,
    registry: CoordinationRegistry,
    field: ResourceField,
    min_clearance: float,
    search_radius_start: float,
    search_radius_max: float,
    *,
    radius_step: float = 1.0,
    samples: int = 12,
    densify_radius: float = 10.0,
) -> Position | None:
    """Return the first candidate at least min_clearance from every obstacle.

    Rings grow by radius_step from search_radius_start. Each time the radius
    passes densify_radius the sample count and the threshold both double,
    keeping candidate spacing roughly constant. Candidates within a ring are
    visited by ascending angle, so the same obstacles always give the same
    answer. Obstacles are resource nodes, completed structures and reserved
    sites.
    """
    if min_clearance <= 0:
        raise ValueError("min_clearance must be positive")
    if radius_step <= 0:
        raise ValueError("radius_step must be positive")
    if samples < 1:
        raise ValueError("samples must be at least 1")
    if densify_radius <= 0:
        raise ValueError("densify_radius must be positive")

    obstacles = field.positions() + registry.obstacles()
    radius = search_radius_start
    count = samples
    threshold = densify_radius
    while radius <= search_radius_max:
        if radius > threshold:
            count *= 2
            threshold *= 2
        for candidate in ring_candidates(origin, radius, count):
            if is_clear(candidate, obstacles, min_clearance):
                return candidate
        radius += radius_step
    return None


def ring_candidates(origin: Position, radius: float, count: int) -> Iterator[Position]:
    ox, oy, oz = origin
    for index in range(count):
        angle = 2.0 * math.pi * index / count
        yield (
            round(ox + radius * math.cos(angle), 6),
            oy,
            round(oz + radius * math.sin(angle), 6),
        )
