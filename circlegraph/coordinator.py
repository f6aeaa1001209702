"""Orchestrates geometry, graph and connectors across breakpoint changes."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from .geometry import GeometryEngine
from .graph import ConnectionGraph
from .paths import PathState, PathStateMachine, VisualAttributes
from .responsive import LayoutConfig, ResponsiveConfigManager
from .types import EdgeKey, MissingCollaborator

if TYPE_CHECKING:
    from .animation import AnimationCollaborator
    from .surface import RenderSurface

logger = logging.getLogger(__name__)

REBUILD = "rebuild"
REPOSITION = "reposition"
INITIAL = "initial"


@dataclass
class LayoutCycle:
    """One layout pass waiting on per-item completions."""

    token: int
    kind: str
    breakpoint: str
    expected: int
    completed: int = 0
    settled: bool = False


SettledCallback = Callable[[LayoutCycle], None]


class LayoutCoordinator:
    """Drives the layout through initial load and breakpoint changes.

    Every pass gets a fresh cycle token. Item completions are counted against
    the cycle that issued them; a completion arriving after its cycle was
    superseded is dropped, so an old pass can never settle a newer one.
    Connectors are first created when the initial pass settles; afterwards a
    rebuild regenerates them immediately and a reposition only moves them.
    """

    def __init__(
        self,
        manager: ResponsiveConfigManager,
        available_items: int,
        *,
        animator: Optional["AnimationCollaborator"] = None,
        surface: Optional["RenderSurface"] = None,
        geometry: Optional[GeometryEngine] = None,
        strict: bool = False,
    ):
        self.manager = manager
        self.available_items = int(available_items)
        self.animator = animator
        self.strict = strict

        manager.set_item_count(self.available_items)
        self.config: LayoutConfig = manager.current_config()
        self.geometry = geometry or GeometryEngine()
        self.geometry.set_config(self.config)
        self.item_count = self.config.effective_item_count(self.available_items)
        self.graph = ConnectionGraph(self.item_count)
        self.paths = PathStateMachine(surface, self.geometry, self.config, animator)

        self._cycle: Optional[LayoutCycle] = None
        self._tokens = itertools.count(1)
        self._listeners: List[SettledCallback] = []
        self._connectors_built = False
        self._subscription: Optional[int] = manager.subscribe(self.handle_breakpoint_change)

    # ------------------------------------------------------------------ state

    @property
    def cycle(self) -> Optional[LayoutCycle]:
        return self._cycle

    @property
    def is_settled(self) -> bool:
        return self._cycle is not None and self._cycle.settled

    @property
    def connectors_built(self) -> bool:
        return self._connectors_built

    def on_settled(self, callback: SettledCallback) -> None:
        self._listeners.append(callback)

    def stats(self) -> Dict[str, object]:
        return {
            "breakpoint": self.config.breakpoint,
            "available_items": self.available_items,
            "item_count": self.item_count,
            "edge_count": len(self.graph.edges()),
            "connector_count": self.paths.connector_count,
            "connectors_enabled": self.paths.is_enabled,
            "settled": self.is_settled,
            "cycle": self._cycle.token if self._cycle else None,
        }

    # ------------------------------------------------------------------ lifecycle

    def start(self) -> LayoutCycle:
        """Run the initial load: items grow out of the center onto the circle."""

        animator = self._require_animator()
        cycle = self._begin_cycle(INITIAL)
        if animator is not None:
            cx, cy = self.config.center
            half = self.config.item_size / 2.0
            for index in range(self.available_items):
                if index >= self.item_count:
                    animator.hide_item(index)
                else:
                    animator.place_item(index, (cx - half, cy - half), scale=0.0)
        self._dispatch_moves(cycle, delay_factor=1.0)
        return cycle

    def decide(self, previous: LayoutConfig, current: LayoutConfig) -> str:
        before = self.item_count
        after = current.effective_item_count(self.available_items)
        if before != after or previous.container_extent != current.container_extent:
            return REBUILD
        return REPOSITION

    def handle_breakpoint_change(self, name: str) -> LayoutCycle:
        previous = self.config
        config = self.manager.current_config(self.available_items)
        logger.info("Applying breakpoint %s (requested %s)", config.breakpoint, name)

        self.config = config
        self.geometry.invalidate()
        self.geometry.set_config(config)
        self.paths.mark_config_changed(config)

        if self.decide(previous, config) == REBUILD:
            return self._rebuild()
        return self._reposition()

    def update_available_items(self, count: int) -> LayoutCycle:
        self.available_items = int(count)
        self.manager.set_item_count(self.available_items)
        return self.handle_breakpoint_change(self.manager.current_breakpoint_name)

    def refresh(self) -> Optional[LayoutCycle]:
        """Force a recalculation; repositions when the breakpoint did not move."""

        before = self.manager.current_breakpoint_name
        self.manager.force_recalculate(self.available_items)
        if self.manager.current_breakpoint_name == before:
            return self.handle_breakpoint_change(before)
        return self._cycle

    def close(self) -> None:
        if self._subscription is not None:
            self.manager.unsubscribe(self._subscription)
            self._subscription = None
        self.paths.clear()
        self._cycle = None

    # ------------------------------------------------------------------ passes

    def _rebuild(self) -> LayoutCycle:
        animator = self._require_animator()
        previous = self.item_count
        count = self.config.effective_item_count(self.available_items)
        self.graph.update_item_count(count)
        self.item_count = count
        cycle = self._begin_cycle(REBUILD)
        if self._connectors_built:
            self.paths.rebuild(self.graph.edges(), count, self.config)
        if animator is not None:
            for index in range(count, max(previous, self.available_items)):
                animator.hide_item(index)
        self._dispatch_moves(cycle, delay_factor=1.0)
        return cycle

    def _reposition(self) -> LayoutCycle:
        self._require_animator()
        cycle = self._begin_cycle(REPOSITION)
        if self._connectors_built:
            self.paths.update_paths(self.item_count, self.config)
        self._dispatch_moves(cycle, delay_factor=self.config.animation.reposition_delay_factor)
        return cycle

    def _require_animator(self) -> Optional["AnimationCollaborator"]:
        if self.animator is None and self.strict:
            raise MissingCollaborator("an animation collaborator is required to move items")
        return self.animator

    def _begin_cycle(self, kind: str) -> LayoutCycle:
        if self._cycle is not None and not self._cycle.settled:
            logger.info(
                "Cycle %d (%s) superseded after %d/%d completions",
                self._cycle.token,
                self._cycle.kind,
                self._cycle.completed,
                self._cycle.expected,
            )
        cycle = LayoutCycle(
            token=next(self._tokens),
            kind=kind,
            breakpoint=self.config.breakpoint,
            expected=self.item_count,
        )
        self._cycle = cycle
        return cycle

    def _dispatch_moves(self, cycle: LayoutCycle, *, delay_factor: float) -> None:
        if cycle.expected == 0:
            self._settle(cycle)
            return
        if self.animator is None:
            logger.warning("No animation collaborator - settling cycle %d without transitions", cycle.token)
            self._settle(cycle)
            return

        settings = self.config.animation
        for index in range(cycle.expected):
            target = self.geometry.anchor_position(index, cycle.expected, self.config)
            self.animator.move_item(
                index,
                target,
                duration=settings.duration,
                delay=index * settings.item_delay * delay_factor,
                on_complete=partial(self._item_completed, cycle.token, index),
            )

    def _item_completed(self, token: int, index: int) -> None:
        cycle = self._cycle
        if cycle is None or cycle.token != token:
            logger.debug("Ignoring stale completion of item %d from cycle %d", index, token)
            return
        if cycle.settled:
            logger.debug("Ignoring completion of item %d after cycle %d settled", index, token)
            return
        cycle.completed += 1
        if cycle.completed >= cycle.expected:
            self._settle(cycle)

    def _settle(self, cycle: LayoutCycle) -> None:
        cycle.settled = True
        if not self._connectors_built:
            self.paths.rebuild(self.graph.edges(), self.item_count, self.config, draw_in=True)
            self._connectors_built = True
        logger.info(
            "Cycle %d (%s) settled on %s with %d items",
            cycle.token,
            cycle.kind,
            cycle.breakpoint,
            cycle.expected,
        )
        for callback in list(self._listeners):
            try:
                callback(cycle)
            except Exception:
                logger.warning("Settled listener failed for cycle %d", cycle.token, exc_info=True)

    # ------------------------------------------------------------------ user actions

    def toggle_connector(self, a: int, b: int) -> Optional[PathState]:
        return self.paths.toggle(a, b)

    def hover_connector(self, a: int, b: int, active: bool) -> Optional[VisualAttributes]:
        return self.paths.hover_path(a, b, active)

    def highlight_item(self, index: int, active: bool) -> List[EdgeKey]:
        return self.paths.highlight(index, active)

    def reset_connectors(self) -> int:
        return self.paths.reset_all()


__all__ = ["LayoutCycle", "LayoutCoordinator", "REBUILD", "REPOSITION", "INITIAL"]
