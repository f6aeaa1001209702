"""Per-connector visual state and the hover highlight overlay."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, List, Mapping, Optional, Set

from .geometry import GeometryEngine
from .responsive import LayoutConfig
from .types import EdgeKey, MissingRenderSurface, PathDescriptor, normalize_edge

if TYPE_CHECKING:
    from .animation import AnimationCollaborator
    from .surface import RenderSurface

logger = logging.getLogger(__name__)


class PathState(Enum):
    """Persisted connector state, advanced by user toggles."""

    DIM = "dim"
    PRIMARY = "primary"
    SECONDARY = "secondary"

    def next(self) -> "PathState":
        return _CYCLE[self]


_CYCLE = {
    PathState.DIM: PathState.PRIMARY,
    PathState.PRIMARY: PathState.SECONDARY,
    PathState.SECONDARY: PathState.DIM,
}


@dataclass(frozen=True)
class VisualAttributes:
    color: str
    width: float
    opacity: float


@dataclass
class Connector:
    a: int
    b: int
    path: PathDescriptor
    state: PathState = PathState.DIM
    highlighted_by: Set[int] = field(default_factory=set)
    hovered: bool = False

    @property
    def key(self) -> EdgeKey:
        return (self.a, self.b)

    @property
    def highlighted(self) -> bool:
        return bool(self.highlighted_by)

    def touches(self, index: int) -> bool:
        return self.a == index or self.b == index


class PathStateMachine:
    """Owns connector states; rendering goes to the surface or the animator.

    Without a render surface the machine is disabled: every connector
    operation returns without touching state and the first skip of each
    operation is logged as a warning, so callers never need to guard against
    a missing surface themselves.
    """

    def __init__(
        self,
        surface: Optional["RenderSurface"],
        geometry: GeometryEngine,
        config: LayoutConfig,
        animator: Optional["AnimationCollaborator"] = None,
    ):
        self.surface = surface
        self.geometry = geometry
        self.animator = animator
        self.pending_rebuild = False
        self._config = config
        self._total_items = 0
        self._connectors: Dict[EdgeKey, Connector] = {}
        self._skipped: Set[str] = set()
        if surface is None:
            logger.warning("No render surface supplied - connectors are disabled")
        else:
            surface.set_viewport(config.container_width, config.container_height)

    @property
    def is_enabled(self) -> bool:
        return self.surface is not None

    @property
    def config(self) -> LayoutConfig:
        return self._config

    def require_surface(self) -> "RenderSurface":
        if self.surface is None:
            raise MissingRenderSurface("connector rendering is unavailable")
        return self.surface

    def _skip(self, operation: str) -> None:
        if operation in self._skipped:
            logger.debug("Connector %s skipped - no render surface", operation)
            return
        self._skipped.add(operation)
        logger.warning("Connector %s skipped - no render surface", operation)

    def mark_config_changed(self, config: LayoutConfig) -> None:
        self._config = config
        self.pending_rebuild = True
        if self.surface is not None:
            self.surface.set_viewport(config.container_width, config.container_height)

    # ------------------------------------------------------------------ queries

    @property
    def connectors(self) -> List[Connector]:
        return list(self._connectors.values())

    @property
    def connector_count(self) -> int:
        return len(self._connectors)

    def connector(self, a: int, b: int) -> Optional[Connector]:
        return self._connectors.get(normalize_edge(a, b))

    def connectors_for(self, index: int) -> List[Connector]:
        return [conn for conn in self._connectors.values() if conn.touches(index)]

    def state_of(self, a: int, b: int) -> Optional[PathState]:
        conn = self.connector(a, b)
        return conn.state if conn is not None else None

    def snapshot_states(self) -> Dict[EdgeKey, PathState]:
        return {key: conn.state for key, conn in self._connectors.items()}

    def visual_attributes(self, connector: Connector) -> VisualAttributes:
        cfg = self._config
        if connector.state is PathState.SECONDARY:
            color = cfg.secondary_color
        else:
            color = cfg.primary_color

        if connector.state is PathState.DIM:
            opacity = cfg.opacity.light_highlight if connector.highlighted else cfg.opacity.light
        else:
            opacity = cfg.opacity.highlight if connector.highlighted else cfg.opacity.normal

        wide = connector.highlighted or connector.hovered
        width = cfg.stroke_width.hover if wide else cfg.stroke_width.normal
        return VisualAttributes(color=color, width=width, opacity=opacity)

    # ------------------------------------------------------------------ construction

    def create_connectors(self, edges: Iterable[EdgeKey], total_items: int, *, draw_in: bool = False) -> int:
        """Create one connector per edge; ``draw_in`` asks the animator to stroke them in."""

        if not self.is_enabled:
            self._skip("creation")
            return 0
        edges = list(edges)
        if not edges:
            logger.warning("No connections supplied for connector creation")
            return 0
        self._total_items = total_items
        settings = self._config.animation
        for order, (a, b) in enumerate(edges):
            conn = self._create(a, b)
            if draw_in and self.animator is not None:
                self.animator.draw_path(
                    conn.key,
                    duration=settings.path_stroke_duration,
                    delay=order * settings.path_stroke_delay,
                )
        logger.info("Created %d connectors for %d items", len(edges), total_items)
        return len(edges)

    def _create(self, a: int, b: int) -> Connector:
        a, b = normalize_edge(a, b)
        path = self.geometry.edge_path(a, b, self._total_items, self._config)
        conn = Connector(a=a, b=b, path=path)
        self._connectors[conn.key] = conn
        self.surface.add_path(conn.key, path, self.visual_attributes(conn))
        return conn

    def clear(self) -> None:
        if self.surface is not None:
            for key in self._connectors:
                self.surface.remove_path(key)
        self._connectors.clear()

    def restore_states(self, states: Mapping[EdgeKey, PathState]) -> int:
        """Reapply persisted states to connectors whose key survived; returns the count."""

        restored = 0
        for key, conn in self._connectors.items():
            prior = states.get(key)
            if prior is None:
                continue
            conn.state = prior
            restored += 1
            if prior is not PathState.DIM:
                self._apply(conn)
        return restored

    def rebuild(
        self,
        edges: Iterable[EdgeKey],
        total_items: int,
        config: Optional[LayoutConfig] = None,
        *,
        draw_in: bool = False,
    ) -> int:
        """Regenerate every connector for a new edge set, keeping states by key."""

        if config is not None:
            self._config = config
        self.pending_rebuild = False
        if not self.is_enabled:
            self._skip("rebuild")
            return 0
        states = self.snapshot_states()
        self.clear()
        self.create_connectors(edges, total_items, draw_in=draw_in)
        restored = self.restore_states(states)
        logger.info(
            "Rebuilt %d connectors (%d states restored, %d dropped)",
            len(self._connectors),
            restored,
            len(states) - restored,
        )
        return restored

    def update_paths(self, total_items: Optional[int] = None, config: Optional[LayoutConfig] = None) -> int:
        """Recompute connector geometry in place, leaving states untouched."""

        if config is not None:
            self._config = config
        if total_items is not None:
            self._total_items = total_items
        self.pending_rebuild = False
        if not self.is_enabled:
            self._skip("update")
            return 0
        for conn in self._connectors.values():
            conn.path = self.geometry.edge_path(conn.a, conn.b, self._total_items, self._config)
            self.surface.update_path(conn.key, conn.path)
            self.surface.set_attributes(conn.key, self.visual_attributes(conn))
        return len(self._connectors)

    # ------------------------------------------------------------------ user actions

    def _apply(self, conn: Connector) -> None:
        attrs = self.visual_attributes(conn)
        if self.animator is not None:
            self.animator.animate_path(conn.key, attrs, duration=self._config.animation.state_duration)
        else:
            self.surface.set_attributes(conn.key, attrs)

    def toggle(self, a: int, b: int) -> Optional[PathState]:
        if not self.is_enabled:
            self._skip("toggle")
            return None
        conn = self.connector(a, b)
        if conn is None:
            logger.warning("Toggle ignored for unknown connector %s", normalize_edge(a, b))
            return None
        conn.state = conn.state.next()
        self._apply(conn)
        logger.debug("Connector %s -> %s", conn.key, conn.state.value)
        return conn.state

    def highlight(self, index: int, active: bool) -> List[EdgeKey]:
        """Apply or lift the hover overlay of node ``index`` on its connectors.

        A connector stays highlighted while either endpoint still holds its
        overlay.
        """

        if not self.is_enabled:
            self._skip("highlight")
            return []
        touched = self.connectors_for(index)
        for conn in touched:
            if active:
                conn.highlighted_by.add(index)
            else:
                conn.highlighted_by.discard(index)
            self._apply(conn)
        return [conn.key for conn in touched]

    def hover_path(self, a: int, b: int, active: bool) -> Optional[VisualAttributes]:
        if not self.is_enabled:
            self._skip("hover")
            return None
        conn = self.connector(a, b)
        if conn is None:
            logger.warning("Hover ignored for unknown connector %s", normalize_edge(a, b))
            return None
        conn.hovered = active
        self._apply(conn)
        return self.visual_attributes(conn)

    def reset_all(self) -> int:
        if not self.is_enabled:
            self._skip("reset")
            return 0
        for conn in self._connectors.values():
            conn.state = PathState.DIM
            self._apply(conn)
        logger.info("All %d connectors reset to dim", len(self._connectors))
        return len(self._connectors)


__all__ = ["PathState", "VisualAttributes", "Connector", "PathStateMachine"]
