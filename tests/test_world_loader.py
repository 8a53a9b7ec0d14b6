import json
from pathlib import Path

import pytest

from timberyard.sim.config import SimulationConfig
from timberyard.sim.errors import ScenarioError
from timberyard.sim.world_loader import (
    WorldPaths,
    generate_world,
    load_scenario,
    load_world_state,
)

WORLD_DIR = Path(__file__).resolve().parent.parent / "world"


def test_bundled_scenario_loads() -> None:
    state = load_world_state(paths=WorldPaths(WORLD_DIR))

    assert list(state.agents) == ["ada", "bram", "cato"]
    assert len(state.resource_field) == 12
    assert state.agents["cato"].config.move_speed == 4.0
    assert state.agents["cato"].config.site_retry_delay == 2.0
    assert state.agents["ada"].config.move_speed == 3.0
    assert state.clock.fixed_dt == 0.1


def test_missing_scenario_names_the_path(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="scenario.json"):
        load_scenario(paths=WorldPaths(tmp_path))


def test_malformed_json_is_a_scenario_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ScenarioError):
        load_scenario(path=path)


def test_invalid_agent_override_is_a_scenario_error(tmp_path: Path) -> None:
    path = tmp_path / "scenario.json"
    path.write_text(
        json.dumps(
            {
                "resources": [[1.0, 0.0, 1.0]],
                "agents": [{"id": "ada", "config": {"build_cost": 9}}],
            }
        ),
        encoding="utf-8",
    )

    with pytest.raises(ScenarioError):
        load_world_state(path=path)


def test_generated_world_is_seeded() -> None:
    config = SimulationConfig(seed=11, agent_count=2, resource_count=5)

    first = generate_world(config)
    second = generate_world(config)
    other = generate_world(SimulationConfig(seed=12, agent_count=2, resource_count=5))

    assert first.resource_field.positions() == second.resource_field.positions()
    assert first.resource_field.positions() != other.resource_field.positions()
    assert list(first.agents) == ["chopper-1", "chopper-2"]
    assert all(abs(x) <= config.extent for x, _, _ in first.resource_field.positions())
