"""Shared field of harvestable resource nodes (trees)."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterable, Iterator

from timberyard.sim.contracts import Position, ResourceSnapshot
from timberyard.sim.world_utils import distance


@dataclass
class ResourceNode:
    node_id: str
    position: Position
    # Flipped only by CoordinationRegistry, together with its claim table.
    claimed: bool = False

    def snapshot(self) -> ResourceSnapshot:
        return ResourceSnapshot(
            node_id=self.node_id, position=self.position, claimed=self.claimed
        )


class ResourceField:
    """Insertion-ordered set of resource nodes.

    The field does not enforce claims; it only stores nodes and answers
    nearest-node queries.
    """

    def __init__(self, positions: Iterable[Position] = ()) -> None:
        self._nodes: dict[str, ResourceNode] = {}
        self._next_id = 1
        self._lock = threading.RLock()
        for position in positions:
            self.add(position)

    def add(self, position: Position, *, node_id: str | None = None) -> ResourceNode:
        with self._lock:
            if node_id is None:
                node_id = self._allocate_id()
            elif node_id in self._nodes:
                raise ValueError(f"Resource {node_id} already exists.")
            node = ResourceNode(node_id=node_id, position=tuple(position))
            self._nodes[node_id] = node
            return node

    def get(self, node_id: str) -> ResourceNode | None:
        with self._lock:
            return self._nodes.get(node_id)

    def remove(self, node_id: str) -> bool:
        with self._lock:
            return self._nodes.pop(node_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._nodes.clear()

    def find_nearest_unclaimed(self, from_position: Position) -> ResourceNode | None:
        nearest: ResourceNode | None = None
        best = float("inf")
        with self._lock:
            for node in self._nodes.values():
                if node.claimed:
                    continue
                dist = distance(from_position, node.position)
                if dist < best:
                    best = dist
                    nearest = node
        return nearest

    def has_unclaimed(self) -> bool:
        with self._lock:
            return any(not node.claimed for node in self._nodes.values())

    def positions(self) -> list[Position]:
        with self._lock:
            return [node.position for node in self._nodes.values()]

    def snapshot(self) -> list[ResourceSnapshot]:
        with self._lock:
            return [node.snapshot() for node in self._nodes.values()]

    def __contains__(self, node_id: object) -> bool:
        with self._lock:
            return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[ResourceNode]:
        with self._lock:
            return iter(list(self._nodes.values()))

    def _allocate_id(self) -> str:
        while True:
            node_id = f"tree-{self._next_id}"
            self._next_id += 1
            if node_id not in self._nodes:
                return node_id
