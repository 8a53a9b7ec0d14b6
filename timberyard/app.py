"""Application entry for running the simulation loop."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler

from timberyard.db.replay_log import (
    append_tick_payload,
    create_run_folder,
    write_header,
)
from timberyard.render.viewer import render_tick
from timberyard.sim.config import SimulationConfig
from timberyard.sim.tick_loop import run_ticks
from timberyard.sim.world_loader import generate_world, load_world_state
from timberyard.sim.world_state import WorldState

DEFAULT_TICKS = 600
DEFAULT_LOG_LEVEL = "WARNING"

logger = logging.getLogger(__name__)


def configure_logging(
    level: str | None = None, *, console: Console | None = None
) -> None:
    resolved = (
        level or os.getenv("TIMBERYARD_LOG_LEVEL") or DEFAULT_LOG_LEVEL
    ).upper()
    logging.basicConfig(
        level=resolved,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_world(
    *,
    scenario: Path | None = None,
    config: SimulationConfig | None = None,
) -> WorldState:
    scenario = scenario or _env_path("TIMBERYARD_SCENARIO")
    if scenario is not None:
        logger.info("Loading scenario %s", scenario)
        return load_world_state(path=scenario)
    config = config or SimulationConfig()
    logger.info(
        "Generating forest: %d trees, %d agents, seed %d",
        config.resource_count,
        config.agent_count,
        config.seed,
    )
    return generate_world(config)


def run_simulation(
    base_dir: Path,
    *,
    ticks: int | None = DEFAULT_TICKS,
    scenario: Path | None = None,
    config: SimulationConfig | None = None,
    dt: float | None = None,
    workers: int | None = None,
) -> Path:
    run_dir, log_path, state = _start_run(
        base_dir, ticks=ticks, scenario=scenario, config=config
    )
    for payload in run_ticks(
        state, ticks=ticks, dt=_resolve_dt(dt), workers=workers
    ):
        append_tick_payload(log_path, payload)
    logger.info(
        "Run %s finished: %d structures, %d trees left",
        run_dir.name,
        len(state.registry.completed_structures),
        len(state.resource_field),
    )
    return run_dir


def run_simulation_live(
    base_dir: Path,
    *,
    ticks: int | None = DEFAULT_TICKS,
    scenario: Path | None = None,
    config: SimulationConfig | None = None,
    dt: float | None = None,
    workers: int | None = None,
    tick_delay: float = 0.05,
    console: Console | None = None,
) -> Path:
    run_dir, log_path, state = _start_run(
        base_dir, ticks=ticks, scenario=scenario, config=config
    )
    console = console or Console()
    with Live(console=console, auto_refresh=False) as live:
        for payload in run_ticks(
            state, ticks=ticks, dt=_resolve_dt(dt), workers=workers
        ):
            append_tick_payload(log_path, payload)
            live.update(render_tick(payload), refresh=True)
            if tick_delay:
                time.sleep(tick_delay)
    return run_dir


def _start_run(
    base_dir: Path,
    *,
    ticks: int | None,
    scenario: Path | None,
    config: SimulationConfig | None,
) -> tuple[Path, Path, WorldState]:
    scenario = scenario or _env_path("TIMBERYARD_SCENARIO")
    if scenario is None:
        config = config or SimulationConfig()
    run_dir, log_path = create_run_folder(base_dir)
    write_header(
        log_path,
        metadata={
            "run_id": run_dir.name,
            "created_at": run_dir.name,
            "ticks": ticks,
            "scenario": str(scenario) if scenario else None,
        },
        config=None if scenario else config,
    )
    return run_dir, log_path, build_world(scenario=scenario, config=config)


def _resolve_dt(dt: float | None) -> float | None:
    if dt is not None:
        return dt
    raw = os.getenv("TIMBERYARD_DT")
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"TIMBERYARD_DT must be a number, got {raw!r}") from None


def _env_path(name: str) -> Path | None:
    raw = os.getenv(name)
    return Path(raw) if raw else None
