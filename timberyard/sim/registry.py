"""Coordination registry: claims, site reservations and completed structures.

Every mutation happens under a single lock per registry so that the check and
the write of a claim or reservation are one indivisible step, even when agents
are stepped from worker threads. Lock order is registry before field.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from timberyard.sim.contracts import (
    Position,
    RegistrySnapshot,
    SiteSnapshot,
    SiteStatus,
    StructureSnapshot,
)
from timberyard.sim.resource_field import ResourceField
from timberyard.sim.world_utils import is_clear

logger = logging.getLogger(__name__)


@dataclass
class BuildSite:
    position: Position
    owner_id: str
    status: SiteStatus = SiteStatus.RESERVED
    progress: float = 0.0

    def snapshot(self) -> SiteSnapshot:
        return SiteSnapshot(
            position=self.position,
            owner_id=self.owner_id,
            status=self.status,
            progress=self.progress,
        )


@dataclass(frozen=True)
class Structure:
    structure_id: str
    position: Position
    owner_id: str
    completed: bool = True

    def snapshot(self) -> StructureSnapshot:
        return StructureSnapshot(
            structure_id=self.structure_id,
            position=self.position,
            owner_id=self.owner_id,
            completed=self.completed,
        )


class CoordinationRegistry:
    def __init__(self, field: ResourceField, *, min_clearance: float = 3.0) -> None:
        if min_clearance <= 0:
            raise ValueError("min_clearance must be positive")
        self._field = field
        self.min_clearance = min_clearance
        self._lock = threading.RLock()
        self._claims: dict[str, str] = {}
        self._sites: dict[Position, BuildSite] = {}
        self._structures: list[Structure] = []
        self._structure_counter = 0

    @property
    def claimed_resources(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._claims)

    @property
    def reserved_sites(self) -> list[Position]:
        with self._lock:
            return list(self._sites)

    @property
    def completed_structures(self) -> list[Structure]:
        with self._lock:
            return list(self._structures)

    def try_claim(self, resource_id: str, agent_id: str) -> bool:
        with self._lock:
            node = self._field.get(resource_id)
            if node is None or node.claimed or resource_id in self._claims:
                return False
            node.claimed = True
            self._claims[resource_id] = agent_id
            return True

    def release(self, resource_id: str, agent_id: str | None = None) -> bool:
        """Drop a claim. With agent_id, only a claim held by that agent is dropped."""
        with self._lock:
            holder = self._claims.get(resource_id)
            if holder is None:
                return False
            if agent_id is not None and holder != agent_id:
                return False
            del self._claims[resource_id]
            node = self._field.get(resource_id)
            if node is not None:
                node.claimed = False
            return True

    def claimant(self, resource_id: str) -> str | None:
        with self._lock:
            return self._claims.get(resource_id)

    def try_reserve_site(self, position: Position, agent_id: str) -> bool:
        position = tuple(position)
        with self._lock:
            if not is_clear(position, self._occupied(), self.min_clearance):
                return False
            self._sites[position] = BuildSite(position=position, owner_id=agent_id)
            return True

    def release_site(self, position: Position) -> bool:
        with self._lock:
            return self._sites.pop(tuple(position), None) is not None

    def site(self, position: Position) -> BuildSite | None:
        with self._lock:
            return self._sites.get(tuple(position))

    def begin_construction(self, position: Position) -> bool:
        with self._lock:
            site = self._sites.get(tuple(position))
            if site is None or site.status != SiteStatus.RESERVED:
                return False
            site.status = SiteStatus.UNDER_CONSTRUCTION
            site.progress = 0.0
            return True

    def update_progress(self, position: Position, progress: float) -> None:
        with self._lock:
            site = self._sites.get(tuple(position))
            if site is not None:
                site.progress = min(1.0, max(0.0, progress))

    def complete_site(self, position: Position) -> Structure | None:
        with self._lock:
            site = self._sites.pop(tuple(position), None)
            if site is None:
                return None
            self._structure_counter += 1
            structure = Structure(
                structure_id=f"structure-{self._structure_counter}",
                position=site.position,
                owner_id=site.owner_id,
            )
            self._structures.append(structure)
        logger.info(
            "%s completed %s at %s",
            structure.owner_id,
            structure.structure_id,
            _format_position(structure.position),
        )
        return structure

    def release_all(self, agent_id: str) -> tuple[int, int]:
        """Release every claim and reservation held by agent_id.

        Returns the number of claims and sites dropped. Unfinished construction
        goes with its reservation.
        """
        with self._lock:
            claims = [rid for rid, holder in self._claims.items() if holder == agent_id]
            for resource_id in claims:
                self.release(resource_id)
            sites = [
                pos for pos, site in self._sites.items() if site.owner_id == agent_id
            ]
            for position in sites:
                del self._sites[position]
        return len(claims), len(sites)

    def obstacles(self) -> list[Position]:
        with self._lock:
            return self._occupied()

    def snapshot(self) -> RegistrySnapshot:
        with self._lock:
            return RegistrySnapshot(
                claimed_resources=dict(self._claims),
                reserved_sites=[site.snapshot() for site in self._sites.values()],
                completed_structures=[
                    structure.snapshot() for structure in self._structures
                ],
            )

    def reset(self) -> None:
        with self._lock:
            for resource_id in list(self._claims):
                self.release(resource_id)
            self._sites.clear()
            self._structures.clear()
            self._structure_counter = 0

    def _occupied(self) -> list[Position]:
        occupied = list(self._sites)
        occupied.extend(structure.position for structure in self._structures)
        return occupied


def _format_position(position: Position) -> str:
    return "(" + ", ".join(f"{value:.1f}" for value in position) + ")"
