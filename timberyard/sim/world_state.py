"""World and agent runtime state for one simulation session."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from timberyard.sim.clock import SimulationClock
from timberyard.sim.config import AgentConfig
from timberyard.sim.contracts import (
    AgentSnapshot,
    AgentStatus,
    Event,
    EventKind,
    Position,
)
from timberyard.sim.registry import CoordinationRegistry
from timberyard.sim.resource_field import ResourceField

logger = logging.getLogger(__name__)


@dataclass
class AgentState:
    agent_id: str
    name: str
    position: Position
    config: AgentConfig = field(default_factory=AgentConfig)
    heading: float = 0.0
    status: AgentStatus = AgentStatus.SEARCHING
    inventory: int = 0
    target_resource_id: str | None = None
    site_position: Position | None = None
    chop_timer: float = 0.0
    build_timer: float = 0.0
    idle_timer: float = 0.0
    retry_timer: float = 0.0

    @property
    def ready_to_build(self) -> bool:
        return self.inventory >= self.config.build_threshold and self.retry_timer <= 0

    def snapshot(self) -> AgentSnapshot:
        return AgentSnapshot(
            agent_id=self.agent_id,
            name=self.name,
            position=self.position,
            heading=self.heading,
            status=self.status,
            inventory=self.inventory,
            target_resource_id=self.target_resource_id,
            site_position=self.site_position,
        )

    def restart(self) -> None:
        self.status = AgentStatus.SEARCHING
        self.inventory = 0
        self.target_resource_id = None
        self.site_position = None
        self.chop_timer = 0.0
        self.build_timer = 0.0
        self.idle_timer = 0.0
        self.retry_timer = 0.0


@dataclass
class WorldState:
    resource_field: ResourceField
    registry: CoordinationRegistry
    clock: SimulationClock
    agents: dict[str, AgentState] = field(default_factory=dict)
    pending_events: list[Event] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        resources: list[Position] | None = None,
        *,
        min_clearance: float = 3.0,
        dt: float | None = None,
    ) -> "WorldState":
        resource_field = ResourceField(resources or [])
        registry = CoordinationRegistry(resource_field, min_clearance=min_clearance)
        return cls(
            resource_field=resource_field,
            registry=registry,
            clock=SimulationClock(dt),
        )

    @property
    def tick(self) -> int:
        return self.clock.tick

    def spawn_agent(
        self,
        agent_id: str,
        *,
        name: str | None = None,
        position: Position = (0.0, 0.0, 0.0),
        config: AgentConfig | None = None,
        inventory: int = 0,
    ) -> AgentState:
        if agent_id in self.agents:
            raise ValueError(f"Agent {agent_id} already exists.")
        agent = AgentState(
            agent_id=agent_id,
            name=name or agent_id,
            position=tuple(position),
            config=config or AgentConfig(),
            inventory=inventory,
        )
        self.agents[agent_id] = agent
        return agent

    def destroy_agent(self, agent_id: str) -> AgentState | None:
        """Remove an agent, rolling back its claims and unfinished construction."""
        agent = self.agents.pop(agent_id, None)
        if agent is None:
            return None
        claims, sites = self.registry.release_all(agent_id)
        logger.info(
            "Destroyed %s in %s (released %d claims, %d sites)",
            agent_id,
            agent.status.value,
            claims,
            sites,
        )
        self.pending_events.append(
            Event(
                kind=EventKind.DESTROY,
                payload={"agent_id": agent_id, "claims": claims, "sites": sites},
            )
        )
        return agent

    def drain_events(self) -> list[Event]:
        events, self.pending_events = self.pending_events, []
        return events

    def reset(self) -> None:
        """Clear the registry and clock and send every agent back to searching."""
        self.registry.reset()
        self.clock.reset()
        self.pending_events.clear()
        for agent in self.agents.values():
            agent.restart()

