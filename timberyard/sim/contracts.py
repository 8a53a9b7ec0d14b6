"""Read-only snapshot contracts shared with presentation code."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

Position = tuple[float, float, float]


class AgentStatus(str, Enum):
    SEARCHING = "SEARCHING"
    CHOPPING = "CHOPPING"
    SELECTING_BUILD_SPOT = "SELECTING_BUILD_SPOT"
    MOVING_TO_BUILD_SPOT = "MOVING_TO_BUILD_SPOT"
    BUILDING = "BUILDING"
    IDLE = "IDLE"


STATUS_LABELS: dict[AgentStatus, str] = {
    AgentStatus.SEARCHING: "Searching for Trees",
    AgentStatus.CHOPPING: "Chopping Trees",
    AgentStatus.SELECTING_BUILD_SPOT: "Selecting Build Spot",
    AgentStatus.MOVING_TO_BUILD_SPOT: "Moving to Build",
    AgentStatus.BUILDING: "Building",
    AgentStatus.IDLE: "Idle (No trees)",
}


class SiteStatus(str, Enum):
    RESERVED = "RESERVED"
    UNDER_CONSTRUCTION = "UNDER_CONSTRUCTION"
    COMPLETED = "COMPLETED"


class EventKind(str, Enum):
    CLAIM = "CLAIM"
    CHOP = "CHOP"
    RESERVE = "RESERVE"
    BUILD_START = "BUILD_START"
    BUILD = "BUILD"
    IDLE = "IDLE"
    CONFLICT = "CONFLICT"
    DESTROY = "DESTROY"


class Event(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: EventKind
    payload: dict[str, Any] = Field(default_factory=dict)


class AgentSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    agent_id: str
    name: str
    position: Position
    heading: float
    status: AgentStatus
    inventory: int
    target_resource_id: str | None = None
    site_position: Position | None = None


class ResourceSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    node_id: str
    position: Position
    claimed: bool = False


class SiteSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    position: Position
    owner_id: str
    status: SiteStatus
    progress: float = 0.0


class StructureSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    structure_id: str
    position: Position
    owner_id: str
    completed: bool = True


class RegistrySnapshot(BaseModel):
    """Copy of the coordination registry, safe to hand to map overlays."""

    model_config = ConfigDict(extra="forbid")

    claimed_resources: dict[str, str] = Field(default_factory=dict)
    reserved_sites: list[SiteSnapshot] = Field(default_factory=list)
    completed_structures: list[StructureSnapshot] = Field(default_factory=list)


class TickPayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    tick: int
    elapsed: float
    dt: float
    agents: list[AgentSnapshot] = Field(default_factory=list)
    registry: RegistrySnapshot = Field(default_factory=RegistrySnapshot)
    resources: list[ResourceSnapshot] = Field(default_factory=list)
    events: list[Event] | None = None
