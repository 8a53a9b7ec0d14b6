"""Agent and simulation configuration models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AgentConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    move_speed: float = Field(default=3.0, gt=0)
    # Degrees per second.
    turn_rate: float = Field(default=360.0, gt=0)
    harvest_range: float = Field(default=1.5, gt=0)
    chop_duration: float = Field(default=5.0, ge=0)
    build_threshold: int = Field(default=3, ge=1)
    build_cost: int = Field(default=3, ge=0)
    build_range: float = Field(default=1.5, gt=0)
    build_duration: float = Field(default=5.0, ge=0)
    min_clearance: float = Field(default=3.0, gt=0)
    search_radius_start: float = Field(default=3.0, ge=0)
    search_radius_max: float = Field(default=30.0, gt=0)
    search_radius_step: float = Field(default=1.0, gt=0)
    search_samples: int = Field(default=12, ge=1)
    search_densify_radius: float = Field(default=10.0, gt=0)
    idle_recheck_interval: float = Field(default=1.0, ge=0)
    # Seconds to keep harvesting after losing or failing a site search.
    site_retry_delay: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def validate_ranges(self) -> "AgentConfig":
        if self.build_cost > self.build_threshold:
            raise ValueError("build_cost cannot exceed build_threshold")
        if self.search_radius_start > self.search_radius_max:
            raise ValueError("search_radius_start must not exceed search_radius_max")
        return self


class SimulationConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    dt: float = Field(default=0.1, gt=0)
    ticks: int | None = Field(default=None, ge=0)
    seed: int = 0
    agent_count: int = Field(default=3, ge=0)
    resource_count: int = Field(default=40, ge=0)
    # Half-width of the square area generated forests are scattered over.
    extent: float = Field(default=20.0, gt=0)
    agent: AgentConfig = Field(default_factory=AgentConfig)
