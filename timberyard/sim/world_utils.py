"""Vector helpers for positions in world space (y is up)."""

from __future__ import annotations

import math
from typing import Iterable

from timberyard.sim.contracts import Position


def distance(a: Position, b: Position) -> float:
    return math.dist(a, b)


def heading_to(origin: Position, target: Position) -> float | None:
    """Yaw in degrees from origin toward target, 0 facing +z.

    Returns None when the points share the same ground position.
    """
    dx = target[0] - origin[0]
    dz = target[2] - origin[2]
    if dx == 0 and dz == 0:
        return None
    return math.degrees(math.atan2(dx, dz)) % 360.0


def is_clear(
    candidate: Position, obstacles: Iterable[Position], min_clearance: float
) -> bool:
    for obstacle in obstacles:
        if distance(candidate, obstacle) < min_clearance:
            return False
    return True
