"""Build worlds from JSON scenario files or seeded random forests."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from random import Random

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from timberyard.sim.config import AgentConfig, SimulationConfig
from timberyard.sim.contracts import Position
from timberyard.sim.errors import ScenarioError
from timberyard.sim.world_state import WorldState


@dataclass(frozen=True)
class WorldPaths:
    base_dir: Path = Path("world")

    @property
    def scenario_json(self) -> Path:
        return self.base_dir / "scenario.json"


class AgentDef(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str | None = None
    position: Position = (0.0, 0.0, 0.0)
    inventory: int = Field(default=0, ge=0)
    # Per-agent overrides merged over the scenario defaults.
    config: dict[str, float | int] = Field(default_factory=dict)


class ScenarioConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    dt: float = Field(default=0.1, gt=0)
    defaults: AgentConfig = Field(default_factory=AgentConfig)
    resources: list[Position] = Field(default_factory=list)
    agents: list[AgentDef] = Field(default_factory=list)


def load_scenario(
    *, paths: WorldPaths | None = None, path: Path | None = None
) -> ScenarioConfig:
    scenario_path = path or (paths or WorldPaths()).scenario_json
    raw = _load_json(scenario_path)
    try:
        return ScenarioConfig.model_validate(raw)
    except ValidationError as exc:
        raise ScenarioError(f"Invalid scenario {scenario_path}: {exc}") from exc


def load_world_state(
    *, paths: WorldPaths | None = None, path: Path | None = None
) -> WorldState:
    scenario = load_scenario(paths=paths, path=path)
    state = WorldState.create(
        scenario.resources,
        min_clearance=scenario.defaults.min_clearance,
        dt=scenario.dt,
    )
    for agent in scenario.agents:
        config = _merge_config(scenario.defaults, agent)
        state.spawn_agent(
            agent.id,
            name=agent.name,
            position=agent.position,
            config=config,
            inventory=agent.inventory,
        )
    return state


def generate_world(config: SimulationConfig) -> WorldState:
    """Scatter a seeded forest and place agents on a small ring at the origin."""
    rng = Random(config.seed)
    extent = config.extent
    resources = [
        (
            round(rng.uniform(-extent, extent), 3),
            0.0,
            round(rng.uniform(-extent, extent), 3),
        )
        for _ in range(config.resource_count)
    ]
    state = WorldState.create(
        resources, min_clearance=config.agent.min_clearance, dt=config.dt
    )
    for index in range(config.agent_count):
        angle = 2.0 * math.pi * index / max(1, config.agent_count)
        state.spawn_agent(
            f"chopper-{index + 1}",
            name=f"Chopper {index + 1}",
            position=(round(math.cos(angle), 3), 0.0, round(math.sin(angle), 3)),
            config=config.agent,
        )
    return state


def _merge_config(defaults: AgentConfig, agent: AgentDef) -> AgentConfig:
    if not agent.config:
        return defaults
    try:
        return AgentConfig.model_validate(
            {**defaults.model_dump(), **agent.config}
        )
    except ValidationError as exc:
        raise ScenarioError(f"Invalid config for agent {agent.id}: {exc}") from exc


def _load_json(path: Path) -> dict:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise FileNotFoundError(f"Missing scenario file: {path}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ScenarioError(f"Scenario {path} is not valid JSON: {exc}") from exc
