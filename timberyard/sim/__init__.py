"""Simulation core: resource field, coordination registry and agents."""

from timberyard.sim.agent_policy import HANDLERS, TickContext, step_agent
from timberyard.sim.clock import SimulationClock
from timberyard.sim.config import AgentConfig, SimulationConfig
from timberyard.sim.contracts import (
    STATUS_LABELS,
    AgentSnapshot,
    AgentStatus,
    Event,
    EventKind,
    RegistrySnapshot,
    ResourceSnapshot,
    SiteStatus,
    TickPayload,
)
from timberyard.sim.errors import (
    ClaimConflict,
    CoordinationError,
    InvalidStateTransition,
    NoResourceAvailable,
    NoSiteFound,
    ScenarioError,
)
from timberyard.sim.locator import find_site
from timberyard.sim.registry import BuildSite, CoordinationRegistry, Structure
from timberyard.sim.resource_field import ResourceField, ResourceNode
from timberyard.sim.tick_loop import run_ticks, step
from timberyard.sim.world_state import AgentState, WorldState

__all__ = [
    "AgentConfig",
    "AgentSnapshot",
    "AgentState",
    "AgentStatus",
    "BuildSite",
    "ClaimConflict",
    "CoordinationError",
    "CoordinationRegistry",
    "Event",
    "EventKind",
    "HANDLERS",
    "InvalidStateTransition",
    "NoResourceAvailable",
    "NoSiteFound",
    "RegistrySnapshot",
    "ResourceField",
    "ResourceNode",
    "ResourceSnapshot",
    "STATUS_LABELS",
    "ScenarioError",
    "SimulationClock",
    "SimulationConfig",
    "SiteStatus",
    "Structure",
    "TickContext",
    "TickPayload",
    "WorldState",
    "find_site",
    "run_ticks",
    "step",
    "step_agent",
]
