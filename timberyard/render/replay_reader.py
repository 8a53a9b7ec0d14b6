"""Read replay logs and yield TickPayloads."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator

from pydantic import ValidationError

from timberyard.sim.contracts import TickPayload


def read_tick_payloads(path: Path) -> Iterator[TickPayload]:
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            payload = parse_tick_line(line)
            if payload is not None:
                yield payload


def read_header(path: Path) -> dict[str, Any] | None:
    with path.open("r", encoding="utf-8") as handle:
        for line in handle:
            record = _parse_record(line)
            if record and record.get("type") == "header":
                return record
    return None


def parse_tick_line(line: str) -> TickPayload | None:
    """Return the payload of a tick record, or None for headers and bad lines."""
    record = _parse_record(line)
    if not record or record.get("type") != "tick":
        return None
    payload = record.get("payload")
    if payload is None:
        return None
    try:
        return TickPayload.model_validate(payload)
    except ValidationError:
        return None


def _parse_record(line: str) -> dict | None:
    try:
        return json.loads(line)
    except json.JSONDecodeError:
        return None
