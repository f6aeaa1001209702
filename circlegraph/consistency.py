from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Set

from .math_utils import distance
from .types import EdgeKey

if TYPE_CHECKING:
    from .coordinator import LayoutCoordinator

_RADIUS_TOL = 1e-6


@dataclass
class ConsistencyWarning:
    kind: str
    message: str

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        return f'[{self.kind}] {self.message}'


def _check_edges(edges: List[EdgeKey], n: int) -> List[ConsistencyWarning]:
    warnings: List[ConsistencyWarning] = []
    expected = n * (n - 1) // 2
    if len(edges) != expected:
        warnings.append(ConsistencyWarning('edge-count', f'expected {expected} edges for {n} items, found {len(edges)}'))
    seen: Set[EdgeKey] = set()
    for a, b in edges:
        if a == b:
            warnings.append(ConsistencyWarning('self-connection', f'edge ({a},{b}) connects a node to itself'))
        if not a < b:
            warnings.append(ConsistencyWarning('edge-order', f'edge ({a},{b}) is not in canonical order'))
        if (a, b) in seen:
            warnings.append(ConsistencyWarning('edge-duplicate', f'edge ({a},{b}) listed twice'))
        seen.add((a, b))
    return warnings


def check_consistency(coordinator: 'LayoutCoordinator') -> List[ConsistencyWarning]:
    """Cross-check graph, geometry and connectors of a coordinator."""

    config = coordinator.config
    n = coordinator.item_count
    geometry = coordinator.geometry
    edges = coordinator.graph.edges()
    warnings = _check_edges(edges, n)

    if coordinator.graph.item_count != n:
        warnings.append(
            ConsistencyWarning('graph-size', f'graph has {coordinator.graph.item_count} nodes, layout expects {n}')
        )

    stats = geometry.cache_stats()
    if stats['size'] and stats['fingerprint'] != config.fingerprint(n):
        warnings.append(ConsistencyWarning('stale-cache', 'geometry cache was filled under another config'))

    for index in range(n):
        pos = geometry.circle_position(index, n, config)
        if abs(distance(pos, config.center) - config.radius) > _RADIUS_TOL * max(1.0, config.radius):
            warnings.append(ConsistencyWarning('off-circle', f'item {index} is not on the configured circle'))

    if not coordinator.is_settled:
        warnings.append(ConsistencyWarning('not-settled', 'layout cycle has not settled yet'))

    paths = coordinator.paths
    if paths.is_enabled and coordinator.connectors_built:
        if paths.pending_rebuild:
            warnings.append(ConsistencyWarning('stale-connectors', 'connectors do not reflect the current config'))
        keys = {conn.key for conn in paths.connectors}
        if keys != set(edges):
            missing = len(set(edges) - keys)
            extra = len(keys - set(edges))
            warnings.append(
                ConsistencyWarning('connector-mismatch', f'{missing} edge(s) without connector, {extra} orphan connector(s)')
            )
        for conn in paths.connectors:
            opposite = geometry.is_opposite_pair(conn.a, conn.b, n)
            if opposite != conn.path.is_straight:
                shape = 'curved' if opposite else 'straight'
                warnings.append(ConsistencyWarning('curvature', f'connector {conn.key} is {shape}'))

    return warnings
