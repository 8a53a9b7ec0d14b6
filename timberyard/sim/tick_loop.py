"""Tick loop orchestration."""

from __future__ import annotations

from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Iterable

from timberyard.sim.agent_policy import TickContext, step_agent
from timberyard.sim.contracts import TickPayload
from timberyard.sim.world_state import WorldState


def run_ticks(
    state: WorldState,
    ticks: int | None,
    *,
    dt: float | None = None,
    workers: int | None = None,
) -> Iterable[TickPayload]:
    """Advance the world and yield one payload per tick.

    With workers > 1 the agents of a tick are stepped on a thread pool; the
    registry lock keeps claims and reservations exclusive, but the winner of
    a race is then no longer reproducible.
    """
    executor = None
    if workers and workers > 1:
        executor = ThreadPoolExecutor(max_workers=workers)
    step_count = 0
    try:
        while ticks is None or step_count < ticks:
            yield step(state, dt=dt, executor=executor)
            step_count += 1
    finally:
        if executor is not None:
            executor.shutdown(wait=True)


def step(
    state: WorldState,
    *,
    dt: float | None = None,
    executor: Executor | None = None,
) -> TickPayload:
    delta = state.clock.advance(dt)
    events = state.drain_events()
    agents = list(state.agents.values())
    contexts = [
        TickContext(
            resource_field=state.resource_field,
            registry=state.registry,
            dt=delta,
            tick=state.clock.tick,
        )
        for _ in agents
    ]

    if executor is None:
        for agent, ctx in zip(agents, contexts):
            step_agent(agent, ctx)
    else:
        # Consuming the iterator re-raises any handler error.
        list(executor.map(step_agent, agents, contexts))

    for ctx in contexts:
        events.extend(ctx.events)

    return TickPayload(
        tick=state.clock.tick,
        elapsed=state.clock.elapsed,
        dt=delta,
        agents=[agent.snapshot() for agent in agents],
        registry=state.registry.snapshot(),
        resources=state.resource_field.snapshot(),
        events=events or None,
    )
