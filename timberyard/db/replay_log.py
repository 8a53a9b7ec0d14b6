"""Append-only JSONL replay logs of tick payloads."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from timberyard.sim.config import SimulationConfig
from timberyard.sim.contracts import TickPayload

SCHEMA_VERSION = 1
RUN_LOG_NAME = "run.jsonl"


def create_run_folder(
    base_dir: Path, *, timestamp: str | None = None
) -> tuple[Path, Path]:
    run_id = timestamp or _format_timestamp(datetime.now(timezone.utc))
    run_dir = base_dir / run_id
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir, run_dir / RUN_LOG_NAME


def write_header(
    path: Path,
    metadata: dict[str, Any],
    *,
    config: SimulationConfig | None = None,
) -> None:
    record: dict[str, Any] = {
        "type": "header",
        "schema_version": SCHEMA_VERSION,
        "metadata": metadata,
    }
    if config is not None:
        record["config"] = config.model_dump(mode="json")
    _append_record(path, record)


def append_tick_payload(path: Path, payload: TickPayload) -> None:
    _append_record(
        path,
        {
            "type": "tick",
            "schema_version": SCHEMA_VERSION,
            "payload": payload.model_dump(mode="json"),
        },
    )


def latest_run_folder(base_dir: Path) -> Path | None:
    if not base_dir.exists():
        return None
    run_dirs = [path for path in base_dir.iterdir() if (path / RUN_LOG_NAME).exists()]
    if not run_dirs:
        return None
    return sorted(run_dirs)[-1]


def _append_record(path: Path, record: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(json.dumps(record))
        handle.write("\n")


def _format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%dT%H-%M-%SZ")
