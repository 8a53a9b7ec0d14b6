"""Woodcutter state machine.

Each tick an agent runs exactly one handler, chosen from HANDLERS by its
current status. Handlers compute one increment of motion or work and never
wait; any multi-tick activity is resumed from the timers stored on the agent.
Shared state is only touched through CoordinationRegistry and ResourceField.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from timberyard.sim.contracts import AgentStatus, Event, EventKind, Position
from timberyard.sim.errors import (
    ClaimConflict,
    InvalidStateTransition,
    NoResourceAvailable,
    NoSiteFound,
)
from timberyard.sim.locator import find_site
from timberyard.sim.movement import advance_agent, face
from timberyard.sim.registry import CoordinationRegistry
from timberyard.sim.resource_field import ResourceField, ResourceNode
from timberyard.sim.world_state import AgentState
from timberyard.sim.world_utils import distance

logger = logging.getLogger(__name__)


@dataclass
class TickContext:
    resource_field: ResourceField
    registry: CoordinationRegistry
    dt: float
    tick: int = 0
    events: list[Event] = field(default_factory=list)

    def emit(self, kind: EventKind, agent: AgentState, **payload) -> None:
        self.events.append(
            Event(kind=kind, payload={"agent_id": agent.agent_id, **payload})
        )


Handler = Callable[[AgentState, TickContext], None]


def step_agent(agent: AgentState, ctx: TickContext) -> None:
    agent.retry_timer = max(0.0, agent.retry_timer - ctx.dt)
    HANDLERS[agent.status](agent, ctx)


def transition(agent: AgentState, status: AgentStatus) -> None:
    if status == AgentStatus.CHOPPING and agent.target_resource_id is None:
        raise InvalidStateTransition(f"{agent.agent_id} cannot chop without a target")
    if (
        status in (AgentStatus.MOVING_TO_BUILD_SPOT, AgentStatus.BUILDING)
        and agent.site_position is None
    ):
        raise InvalidStateTransition(
            f"{agent.agent_id} cannot enter {status.value} without a reserved site"
        )
    if status == AgentStatus.CHOPPING:
        agent.chop_timer = 0.0
    elif status == AgentStatus.BUILDING:
        agent.build_timer = 0.0
    elif status == AgentStatus.IDLE:
        agent.idle_timer = 0.0
    logger.debug("%s: %s -> %s", agent.agent_id, agent.status.value, status.value)
    agent.status = status


def _handle_searching(agent: AgentState, ctx: TickContext) -> None:
    if agent.ready_to_build:
        _drop_target(agent, ctx)
        transition(agent, AgentStatus.SELECTING_BUILD_SPOT)
        return

    try:
        node = _acquire_target(agent, ctx)
    except NoResourceAvailable:
        ctx.emit(EventKind.IDLE, agent, inventory=agent.inventory)
        transition(agent, AgentStatus.IDLE)
        return
    except ClaimConflict as exc:
        logger.debug("%s: %s", agent.agent_id, exc)
        ctx.emit(EventKind.CONFLICT, agent, resource_id=exc.target, holder=exc.holder)
        return

    remaining = distance(agent.position, node.position)
    if remaining > agent.config.harvest_range:
        remaining = advance_agent(agent, node.position, ctx.dt)
    if remaining <= agent.config.harvest_range:
        face(agent, node.position)
        transition(agent, AgentStatus.CHOPPING)


def _handle_chopping(agent: AgentState, ctx: TickContext) -> None:
    node_id = agent.target_resource_id
    if node_id is None:
        raise InvalidStateTransition(f"{agent.agent_id} is chopping without a target")
    if not _holds_claim(agent, ctx, node_id):
        logger.debug("%s: target %s vanished while chopping", agent.agent_id, node_id)
        _drop_target(agent, ctx)
        transition(agent, AgentStatus.SEARCHING)
        return

    agent.chop_timer += ctx.dt
    if agent.chop_timer < agent.config.chop_duration:
        return

    agent.inventory += 1
    ctx.resource_field.remove(node_id)
    ctx.registry.release(node_id, agent.agent_id)
    agent.target_resource_id = None
    ctx.emit(EventKind.CHOP, agent, resource_id=node_id, inventory=agent.inventory)
    if agent.ready_to_build:
        transition(agent, AgentStatus.SELECTING_BUILD_SPOT)
    else:
        transition(agent, AgentStatus.SEARCHING)


def _handle_selecting_build_spot(agent: AgentState, ctx: TickContext) -> None:
    try:
        position = _reserve_site(agent, ctx)
    except (NoSiteFound, ClaimConflict) as exc:
        logger.debug("%s: %s", agent.agent_id, exc)
        ctx.emit(EventKind.CONFLICT, agent, reason=type(exc).__name__)
        agent.retry_timer = agent.config.site_retry_delay
        transition(agent, AgentStatus.SEARCHING)
        return
    agent.site_position = position
    ctx.emit(EventKind.RESERVE, agent, position=position)
    transition(agent, AgentStatus.MOVING_TO_BUILD_SPOT)


def _handle_moving_to_build_spot(agent: AgentState, ctx: TickContext) -> None:
    site = _held_site(agent, ctx)
    if site is None:
        transition(agent, AgentStatus.SEARCHING)
        return

    remaining = advance_agent(agent, site, ctx.dt)
    if remaining > agent.config.build_range:
        return
    face(agent, site)
    ctx.registry.begin_construction(site)
    ctx.emit(EventKind.BUILD_START, agent, position=site)
    transition(agent, AgentStatus.BUILDING)


def _handle_building(agent: AgentState, ctx: TickContext) -> None:
    site = _held_site(agent, ctx)
    if site is None:
        transition(agent, AgentStatus.SEARCHING)
        return

    agent.build_timer += ctx.dt
    duration = agent.config.build_duration
    progress = 1.0 if duration <= 0 else agent.build_timer / duration
    ctx.registry.update_progress(site, progress)
    if progress < 1.0:
        return

    structure = ctx.registry.complete_site(site)
    agent.site_position = None
    if structure is None:
        logger.debug("%s: reservation at %s lost at completion", agent.agent_id, site)
    else:
        agent.inventory -= agent.config.build_cost
        ctx.emit(
            EventKind.BUILD,
            agent,
            structure_id=structure.structure_id,
            position=structure.position,
            inventory=agent.inventory,
        )
    transition(agent, AgentStatus.SEARCHING)


def _handle_idle(agent: AgentState, ctx: TickContext) -> None:
    agent.idle_timer += ctx.dt
    if agent.idle_timer < agent.config.idle_recheck_interval:
        return
    agent.idle_timer = 0.0
    if agent.ready_to_build:
        transition(agent, AgentStatus.SELECTING_BUILD_SPOT)
    elif ctx.resource_field.has_unclaimed():
        transition(agent, AgentStatus.SEARCHING)


HANDLERS: dict[AgentStatus, Handler] = {
    AgentStatus.SEARCHING: _handle_searching,
    AgentStatus.CHOPPING: _handle_chopping,
    AgentStatus.SELECTING_BUILD_SPOT: _handle_selecting_build_spot,
    AgentStatus.MOVING_TO_BUILD_SPOT: _handle_moving_to_build_spot,
    AgentStatus.BUILDING: _handle_building,
    AgentStatus.IDLE: _handle_idle,
}


def _acquire_target(agent: AgentState, ctx: TickContext) -> ResourceNode:
    if agent.target_resource_id is not None:
        if _holds_claim(agent, ctx, agent.target_resource_id):
            node = ctx.resource_field.get(agent.target_resource_id)
            if node is not None:
                return node
        _drop_target(agent, ctx)

    node = ctx.resource_field.find_nearest_unclaimed(agent.position)
    if node is None:
        raise NoResourceAvailable(f"{agent.agent_id} found no unclaimed resource")
    if not ctx.registry.try_claim(node.node_id, agent.agent_id):
        raise ClaimConflict(node.node_id, holder=ctx.registry.claimant(node.node_id))
    agent.target_resource_id = node.node_id
    ctx.emit(EventKind.CLAIM, agent, resource_id=node.node_id)
    return node


def _holds_claim(agent: AgentState, ctx: TickContext, node_id: str) -> bool:
    return (
        node_id in ctx.resource_field
        and ctx.registry.claimant(node_id) == agent.agent_id
    )


def _drop_target(agent: AgentState, ctx: TickContext) -> None:
    if agent.target_resource_id is None:
        return
    ctx.registry.release(agent.target_resource_id, agent.agent_id)
    agent.target_resource_id = None


def _reserve_site(agent: AgentState, ctx: TickContext) -> Position:
    config = agent.config
    clearance = max(config.min_clearance, ctx.registry.min_clearance)
    position = find_site(
        agent.position,
        ctx.registry,
        ctx.resource_field,
        clearance,
        config.search_radius_start,
        config.search_radius_max,
        radius_step=config.search_radius_step,
        samples=config.search_samples,
        densify_radius=config.search_densify_radius,
    )
    if position is None:
        raise NoSiteFound(
            f"{agent.agent_id} found no site within {config.search_radius_max}"
        )
    if not ctx.registry.try_reserve_site(position, agent.agent_id):
        raise ClaimConflict(position)
    return position


def _held_site(agent: AgentState, ctx: TickContext) -> Position | None:
    """Return the agent's reserved position, clearing it if the site vanished."""
    position = agent.site_position
    if position is None:
        raise InvalidStateTransition(
            f"{agent.agent_id} is in {agent.status.value} without a reserved site"
        )
    site = ctx.registry.site(position)
    if site is None or site.owner_id != agent.agent_id:
        logger.debug("%s: reservation at %s vanished", agent.agent_id, position)
        agent.site_position = None
        return None
    return site.position
