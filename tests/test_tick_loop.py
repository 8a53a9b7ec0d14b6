import itertools
import math
from collections import Counter

from timberyard.sim.config import AgentConfig, SimulationConfig
from timberyard.sim.contracts import EventKind, TickPayload
from timberyard.sim.tick_loop import run_ticks
from timberyard.sim.world_loader import generate_world

FAST = AgentConfig(chop_duration=0.5, build_duration=1.0, move_speed=4.0)


def _config(**overrides) -> SimulationConfig:
    values = {
        "seed": 7,
        "agent_count": 4,
        "resource_count": 30,
        "extent": 12.0,
        "dt": 0.1,
        "agent": FAST,
    }
    values.update(overrides)
    return SimulationConfig(**values)


def test_ticks_and_snapshots_in_registration_order() -> None:
    state = generate_world(_config())
    payloads = list(run_ticks(state, ticks=3))

    assert [payload.tick for payload in payloads] == [1, 2, 3]
    assert payloads[-1].elapsed == state.clock.elapsed
    assert [agent.agent_id for agent in payloads[0].agents] == [
        "chopper-1",
        "chopper-2",
        "chopper-3",
        "chopper-4",
    ]


def test_explicit_dt_overrides_clock() -> None:
    state = generate_world(_config())
    payload = next(iter(run_ticks(state, ticks=1, dt=0.25)))

    assert payload.dt == 0.25


def test_sequential_runs_are_reproducible() -> None:
    first = list(run_ticks(generate_world(_config()), ticks=200))
    second = list(run_ticks(generate_world(_config()), ticks=200))

    assert first[-1].model_dump() == second[-1].model_dump()


def test_invariants_hold_for_a_long_run() -> None:
    config = _config()
    _assert_invariants(list(run_ticks(generate_world(config), ticks=600)), config)


def test_invariants_hold_with_threaded_agents() -> None:
    config = _config(agent_count=8, resource_count=40)
    payloads = list(run_ticks(generate_world(config), ticks=400, workers=4))

    _assert_invariants(payloads, config)


def _assert_invariants(payloads: list[TickPayload], config: SimulationConfig) -> None:
    chopped: Counter[str] = Counter()
    built = 0
    for payload in payloads:
        claims = payload.registry.claimed_resources
        for agent in payload.agents:
            if agent.target_resource_id is not None:
                assert claims[agent.target_resource_id] == agent.agent_id
        held = [agent.target_resource_id for agent in payload.agents]
        held = [resource_id for resource_id in held if resource_id is not None]
        assert len(held) == len(set(held))

        occupied = [site.position for site in payload.registry.reserved_sites]
        occupied.extend(
            structure.position for structure in payload.registry.completed_structures
        )
        for a, b in itertools.combinations(occupied, 2):
            assert math.dist(a, b) >= config.agent.min_clearance - 1e-9

        for event in payload.events or []:
            if event.kind == EventKind.CHOP:
                chopped[event.payload["resource_id"]] += 1
            elif event.kind == EventKind.BUILD:
                built += 1

    assert all(count == 1 for count in chopped.values())
    final = payloads[-1]
    inventory = sum(agent.inventory for agent in final.agents)
    assert inventory + built * config.agent.build_cost == sum(chopped.values())
    assert len(final.registry.completed_structures) == built
    assert len(final.resources) == config.resource_count - sum(chopped.values())
