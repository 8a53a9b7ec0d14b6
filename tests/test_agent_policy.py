import math

import pytest

from timberyard.sim.agent_policy import HANDLERS
from timberyard.sim.config import AgentConfig
from timberyard.sim.contracts import AgentStatus, EventKind, SiteStatus
from timberyard.sim.errors import InvalidStateTransition
from timberyard.sim.tick_loop import step
from timberyard.sim.world_state import WorldState

DT = 0.5


def _world(*trees) -> WorldState:
    return WorldState.create(list(trees), min_clearance=3.0, dt=DT)


def _run(state: WorldState, ticks: int) -> None:
    for _ in range(ticks):
        step(state)


def test_every_status_has_a_handler() -> None:
    assert set(HANDLERS) == set(AgentStatus)


def test_empty_field_goes_idle_until_a_tree_appears() -> None:
    state = _world()
    agent = state.spawn_agent("ada", config=AgentConfig(idle_recheck_interval=0.0))

    payload = step(state)
    assert agent.status == AgentStatus.IDLE
    assert payload.events is not None
    assert payload.events[0].kind == EventKind.IDLE

    _run(state, 3)
    assert agent.status == AgentStatus.IDLE

    state.resource_field.add((5.0, 0.0, 0.0))
    step(state)
    assert agent.status == AgentStatus.SEARCHING


def test_idle_waits_for_recheck_interval() -> None:
    state = _world()
    agent = state.spawn_agent("ada", config=AgentConfig(idle_recheck_interval=1.0))
    step(state)
    state.resource_field.add((5.0, 0.0, 0.0))

    step(state)
    assert agent.status == AgentStatus.IDLE
    step(state)
    assert agent.status == AgentStatus.SEARCHING


def test_chop_adds_exactly_one_and_removes_the_tree() -> None:
    state = _world((1.0, 0.0, 0.0))
    agent = state.spawn_agent("ada", config=AgentConfig(chop_duration=1.0))

    step(state)
    assert agent.status == AgentStatus.CHOPPING
    assert agent.target_resource_id == "tree-1"
    assert state.registry.claimant("tree-1") == "ada"

    step(state)
    assert agent.inventory == 0

    step(state)
    assert agent.inventory == 1
    assert agent.status == AgentStatus.SEARCHING
    assert agent.target_resource_id is None
    assert len(state.resource_field) == 0
    assert state.registry.claimed_resources == frozenset()
    assert not state.registry.try_claim("tree-1", "bram")

    step(state)
    assert agent.status == AgentStatus.IDLE


def test_moves_straight_and_turns_at_bounded_rate() -> None:
    state = _world((10.0, 0.0, 0.0))
    agent = state.spawn_agent(
        "ada", config=AgentConfig(move_speed=2.0, turn_rate=90.0)
    )

    step(state)

    assert agent.status == AgentStatus.SEARCHING
    assert agent.position == pytest.approx((1.0, 0.0, 0.0))
    assert agent.heading == pytest.approx(45.0)

    step(state)
    assert agent.heading == pytest.approx(90.0)


def test_second_agent_targets_a_different_tree() -> None:
    state = _world((10.0, 0.0, 0.0), (12.0, 0.0, 0.0))
    ada = state.spawn_agent("ada")
    bram = state.spawn_agent("bram")

    step(state)

    assert ada.target_resource_id == "tree-1"
    assert bram.target_resource_id == "tree-2"


def test_full_build_cycle_deducts_build_cost() -> None:
    state = _world()
    config = AgentConfig(move_speed=10.0, build_duration=1.0, build_cost=2)
    agent = state.spawn_agent("ada", config=config, inventory=4)

    step(state)
    assert agent.status == AgentStatus.SELECTING_BUILD_SPOT

    step(state)
    assert agent.status == AgentStatus.MOVING_TO_BUILD_SPOT
    assert agent.site_position == (3.0, 0.0, 0.0)
    assert state.registry.site((3.0, 0.0, 0.0)).owner_id == "ada"

    step(state)
    assert agent.status == AgentStatus.BUILDING
    assert agent.position == pytest.approx((3.0, 0.0, 0.0))
    assert agent.heading == pytest.approx(90.0)

    step(state)
    site = state.registry.site((3.0, 0.0, 0.0))
    assert site.status == SiteStatus.UNDER_CONSTRUCTION
    assert site.progress == pytest.approx(0.5)
    assert agent.inventory == 4

    payload = step(state)
    assert agent.status == AgentStatus.SEARCHING
    assert agent.inventory == 2
    assert agent.site_position is None
    assert state.registry.reserved_sites == []
    structures = state.registry.completed_structures
    assert [structure.position for structure in structures] == [(3.0, 0.0, 0.0)]
    assert any(event.kind == EventKind.BUILD for event in payload.events or [])


def test_two_agents_ready_on_same_tick_reserve_apart() -> None:
    state = _world()
    ada = state.spawn_agent("ada", inventory=3)
    bram = state.spawn_agent("bram", inventory=3)

    step(state)
    assert ada.status == AgentStatus.SELECTING_BUILD_SPOT
    assert bram.status == AgentStatus.SELECTING_BUILD_SPOT

    step(state)

    assert ada.status == AgentStatus.MOVING_TO_BUILD_SPOT
    assert bram.status == AgentStatus.MOVING_TO_BUILD_SPOT
    assert ada.site_position != bram.site_position
    assert math.dist(ada.site_position, bram.site_position) >= 3.0
    assert len(state.registry.reserved_sites) == 2


def test_agent_with_smaller_clearance_still_reserves() -> None:
    state = _world()
    ada = state.spawn_agent("ada", inventory=3)
    config = AgentConfig(min_clearance=1.0, search_radius_start=1.0)
    bram = state.spawn_agent("bram", config=config, inventory=3)

    _run(state, 2)

    assert ada.status == AgentStatus.MOVING_TO_BUILD_SPOT
    assert bram.status == AgentStatus.MOVING_TO_BUILD_SPOT
    assert math.dist(ada.site_position, bram.site_position) >= 3.0


def test_tree_destroyed_mid_chop_falls_back_to_searching() -> None:
    state = _world((1.0, 0.0, 0.0))
    agent = state.spawn_agent("ada")
    step(state)
    assert agent.status == AgentStatus.CHOPPING

    state.resource_field.remove("tree-1")
    step(state)

    assert agent.status == AgentStatus.SEARCHING
    assert agent.target_resource_id is None
    assert agent.inventory == 0
    assert state.registry.claimed_resources == frozenset()

    step(state)
    assert agent.status == AgentStatus.IDLE


def test_lost_reservation_falls_back_to_searching() -> None:
    state = _world()
    agent = state.spawn_agent("ada", config=AgentConfig(move_speed=0.5), inventory=3)
    _run(state, 2)
    assert agent.status == AgentStatus.MOVING_TO_BUILD_SPOT

    state.registry.release_site(agent.site_position)
    step(state)

    assert agent.status == AgentStatus.SEARCHING
    assert agent.site_position is None


def test_destroying_builder_discards_partial_structure() -> None:
    state = _world()
    config = AgentConfig(move_speed=10.0, build_duration=5.0)
    state.spawn_agent("ada", config=config, inventory=3)
    _run(state, 4)
    assert state.agents["ada"].status == AgentStatus.BUILDING

    state.destroy_agent("ada")
    payload = step(state)

    assert "ada" not in state.agents
    assert state.registry.reserved_sites == []
    assert state.registry.completed_structures == []
    assert payload.events is not None
    assert payload.events[0].kind == EventKind.DESTROY
    assert payload.events[0].payload["sites"] == 1


def test_destroying_chopper_frees_its_tree() -> None:
    state = _world((1.0, 0.0, 0.0))
    state.spawn_agent("ada")
    step(state)

    state.destroy_agent("ada")
    assert not state.resource_field.get("tree-1").claimed
    assert state.registry.claimed_resources == frozenset()

    bram = state.spawn_agent("bram")
    step(state)

    assert state.registry.claimant("tree-1") == "bram"
    assert bram.target_resource_id == "tree-1"


def test_chopping_without_target_is_a_broken_invariant() -> None:
    state = _world((1.0, 0.0, 0.0))
    agent = state.spawn_agent("ada")
    agent.status = AgentStatus.CHOPPING

    with pytest.raises(InvalidStateTransition):
        step(state)


def test_building_without_site_is_a_broken_invariant() -> None:
    state = _world()
    agent = state.spawn_agent("ada")
    agent.status = AgentStatus.BUILDING

    with pytest.raises(InvalidStateTransition):
        step(state)


@pytest.mark.parametrize(
    ("retry_delay", "expected"),
    [
        (0.0, AgentStatus.SELECTING_BUILD_SPOT),
        (2.0, AgentStatus.CHOPPING),
    ],
)
def test_site_retry_policy(retry_delay: float, expected: AgentStatus) -> None:
    state = _world((0.0, 0.0, 0.0))
    config = AgentConfig(
        search_radius_start=1.0,
        search_radius_max=2.0,
        site_retry_delay=retry_delay,
    )
    agent = state.spawn_agent("ada", config=config, inventory=3)

    step(state)
    assert agent.status == AgentStatus.SELECTING_BUILD_SPOT
    step(state)
    assert agent.status == AgentStatus.SEARCHING
    assert agent.retry_timer == retry_delay

    step(state)
    assert agent.status == expected


def test_reset_restores_initial_state() -> None:
    state = _world((1.0, 0.0, 0.0))
    agent = state.spawn_agent("ada", inventory=2)
    _run(state, 2)

    state.reset()

    assert state.tick == 0
    assert agent.status == AgentStatus.SEARCHING
    assert agent.inventory == 0
    assert agent.target_resource_id is None
    assert state.registry.claimed_resources == frozenset()
    assert not state.resource_field.get("tree-1").claimed
