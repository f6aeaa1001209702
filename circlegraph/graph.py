"""Complete-graph adjacency model over the ring items."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

import numpy as np

from .math_utils import distance
from .types import EdgeKey, InvalidIndex, Point, check_index

if TYPE_CHECKING:
    from .geometry import GeometryEngine
    from .responsive import LayoutConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphStats:
    node_count: int
    total_connections: int
    possible_connections: int
    density: float
    average_degree: float


@dataclass(frozen=True)
class ConnectionInfo:
    a: int
    b: int
    start: Point
    end: Point
    distance: float
    is_opposite: bool


class ConnectionGraph:
    """Symmetric boolean adjacency over ``[0, N)`` with an empty diagonal."""

    def __init__(self, item_count: int = 0, *, complete: bool = True):
        if item_count < 0:
            raise InvalidIndex(f"item count must be non-negative (got {item_count})")
        self._n = int(item_count)
        self._adjacency = np.zeros((self._n, self._n), dtype=bool)
        if complete:
            self.build_complete()

    @property
    def item_count(self) -> int:
        return self._n

    @property
    def adjacency(self) -> np.ndarray:
        return self._adjacency.copy()

    def build_complete(self, item_count: Optional[int] = None) -> None:
        if item_count is not None:
            if item_count < 0:
                raise InvalidIndex(f"item count must be non-negative (got {item_count})")
            self._n = int(item_count)
        self._adjacency = ~np.eye(self._n, dtype=bool)
        logger.info("Complete graph built with %d nodes", self._n)

    def update_item_count(self, item_count: int) -> bool:
        """Discard the adjacency and rebuild a complete graph of ``item_count`` nodes."""

        if item_count == self._n:
            return False
        previous = self._n
        self.build_complete(item_count)
        logger.info("Graph rebuilt: %d -> %d nodes", previous, item_count)
        return True

    def is_valid_edge(self, a: int, b: int) -> bool:
        return a != b and 0 <= a < self._n and 0 <= b < self._n

    def _check_pair(self, a: int, b: int) -> None:
        check_index(a, self._n)
        check_index(b, self._n)
        if a == b:
            raise ValueError(f"self-connection on node {a} is not allowed")

    def add_edge(self, a: int, b: int) -> None:
        self._check_pair(a, b)
        self._adjacency[a, b] = self._adjacency[b, a] = True

    def remove_edge(self, a: int, b: int) -> None:
        self._check_pair(a, b)
        self._adjacency[a, b] = self._adjacency[b, a] = False

    def are_connected(self, a: int, b: int) -> bool:
        if not self.is_valid_edge(a, b):
            return False
        return bool(self._adjacency[a, b])

    def edges(self) -> List[EdgeKey]:
        """Every connected unordered pair once, as ``(a, b)`` with ``a < b``."""

        upper = np.argwhere(np.triu(self._adjacency, k=1))
        return [(int(a), int(b)) for a, b in upper]

    def neighbors(self, index: int) -> List[int]:
        check_index(index, self._n)
        return [int(i) for i in np.flatnonzero(self._adjacency[index])]

    def degree(self, index: int) -> int:
        check_index(index, self._n)
        return int(self._adjacency[index].sum())

    def stats(self) -> GraphStats:
        total = int(np.triu(self._adjacency, k=1).sum())
        possible = self._n * (self._n - 1) // 2
        return GraphStats(
            node_count=self._n,
            total_connections=total,
            possible_connections=possible,
            density=total / possible if possible else 0.0,
            average_degree=2.0 * total / self._n if self._n else 0.0,
        )

    def connections_with_positions(
        self, geometry: "GeometryEngine", config: Optional["LayoutConfig"] = None
    ) -> List[ConnectionInfo]:
        infos: List[ConnectionInfo] = []
        for a, b in self.edges():
            start = geometry.circle_position(a, self._n, config)
            end = geometry.circle_position(b, self._n, config)
            infos.append(
                ConnectionInfo(
                    a=a,
                    b=b,
                    start=start,
                    end=end,
                    distance=distance(start, end),
                    is_opposite=geometry.is_opposite_pair(a, b, self._n),
                )
            )
        return infos
