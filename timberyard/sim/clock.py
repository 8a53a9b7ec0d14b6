"""Simulation clock with fixed or wall-clock time steps."""

from __future__ import annotations

import time
from typing import Callable


class SimulationClock:
    def __init__(
        self,
        fixed_dt: float | None = None,
        *,
        time_source: Callable[[], float] = time.monotonic,
        max_dt: float = 0.25,
    ) -> None:
        if fixed_dt is not None and fixed_dt <= 0:
            raise ValueError("fixed_dt must be positive")
        self.fixed_dt = fixed_dt
        self.max_dt = max_dt
        self._time_source = time_source
        self._last: float | None = None
        self.tick = 0
        self.elapsed = 0.0

    def advance(self, dt: float | None = None) -> float:
        """Move to the next tick and return the time delta it covers.

        An explicit dt wins, then fixed_dt, then the wall-clock delta since the
        previous call (clamped to max_dt; zero on the very first call).
        """
        if dt is None:
            dt = self.fixed_dt if self.fixed_dt is not None else self._wall_delta()
        if dt < 0:
            raise ValueError("dt must be non-negative")
        self.tick += 1
        self.elapsed += dt
        return dt

    def reset(self) -> None:
        self.tick = 0
        self.elapsed = 0.0
        self._last = None

    def _wall_delta(self) -> float:
        now = self._time_source()
        last, self._last = self._last, now
        if last is None:
            return 0.0
        return min(self.max_dt, max(0.0, now - last))
