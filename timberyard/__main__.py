"""Module entry point for `python -m timberyard`."""

from __future__ import annotations

import argparse
from pathlib import Path

from rich.console import Console

from timberyard.app import (
    DEFAULT_TICKS,
    configure_logging,
    run_simulation,
    run_simulation_live,
)
from timberyard.db.replay_log import RUN_LOG_NAME, latest_run_folder
from timberyard.render.live_tail import tail_replay_log
from timberyard.render.replay_reader import read_tick_payloads
from timberyard.render.viewer import render_tick
from timberyard.sim.config import SimulationConfig

DEFAULT_REPLAY_DIR = Path("replay")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Timberyard simulation.")
    parser.add_argument(
        "--ticks",
        type=int,
        default=DEFAULT_TICKS,
        help="Number of ticks to run. Use 0 or less to run until interrupted.",
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=None,
        help="Seconds of simulated time per tick (default from config).",
    )
    parser.add_argument(
        "--scenario",
        type=Path,
        default=None,
        help="Scenario JSON to load instead of a generated forest.",
    )
    parser.add_argument("--agents", type=int, default=None, help="Generated agents.")
    parser.add_argument("--trees", type=int, default=None, help="Generated trees.")
    parser.add_argument("--seed", type=int, default=0, help="Forest seed.")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Step agents on a thread pool of this size.",
    )
    parser.add_argument(
        "--replay-dir",
        type=Path,
        default=DEFAULT_REPLAY_DIR,
        help="Base replay directory for new runs.",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Render every tick live while the simulation runs.",
    )
    parser.add_argument(
        "--view",
        action="store_true",
        help="Tail the latest (or --replay) run log in the live viewer.",
    )
    parser.add_argument(
        "--replay",
        type=Path,
        default=None,
        help="Print a saved run folder tick by tick.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default TIMBERYARD_LOG_LEVEL or WARNING).",
    )
    args = parser.parse_args()
    console = Console()
    configure_logging(args.log_level, console=console)

    if args.view:
        run_folder = args.replay or latest_run_folder(args.replay_dir)
        if run_folder is None:
            raise SystemExit("No run folder found. Run a simulation first.")
        tail_replay_log(run_folder / RUN_LOG_NAME, from_start=args.replay is not None)
        return

    if args.replay is not None:
        _replay_run(args.replay, console)
        return

    config = _build_config(args)
    ticks = args.ticks if args.ticks > 0 else None
    if args.watch:
        created_run = run_simulation_live(
            args.replay_dir,
            ticks=ticks,
            scenario=args.scenario,
            config=config,
            dt=args.dt,
            workers=args.workers,
            console=console,
        )
    else:
        created_run = run_simulation(
            args.replay_dir,
            ticks=ticks,
            scenario=args.scenario,
            config=config,
            dt=args.dt,
            workers=args.workers,
        )
    console.print(f"Run saved to {created_run}")


def _build_config(args: argparse.Namespace) -> SimulationConfig:
    overrides: dict[str, object] = {"seed": args.seed}
    if args.agents is not None:
        overrides["agent_count"] = args.agents
    if args.trees is not None:
        overrides["resource_count"] = args.trees
    if args.dt is not None:
        overrides["dt"] = args.dt
    return SimulationConfig(**overrides)


def _replay_run(run_folder: Path, console: Console) -> None:
    log_path = run_folder / RUN_LOG_NAME
    if not log_path.exists():
        raise SystemExit(f"No replay log at {log_path}.")
    for payload in read_tick_payloads(log_path):
        console.print(render_tick(payload))


if __name__ == "__main__":
    main()
