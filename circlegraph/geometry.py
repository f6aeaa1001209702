"""Circle placement and connector curvature with a fingerprint-keyed cache."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from .logging_utils import apply_debug_logging
from .math_utils import midpoint, normalize
from .responsive import Fingerprint, LayoutConfig
from .types import InvalidConfig, PathDescriptor, Point, check_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedPosition:
    circle: Point
    anchor: Point


class GeometryEngine:
    """Derives node positions and connector paths from a :class:`LayoutConfig`.

    Position queries are memoized per node index. The cache carries the
    fingerprint (center, radius, item size, item count) it was filled under
    and is dropped wholesale as soon as a query arrives with a different
    fingerprint, so a position computed for one config is never served for
    another.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        self._config = config
        self._fingerprint: Optional[Fingerprint] = None
        self._cache: Dict[int, CachedPosition] = {}

    @property
    def config(self) -> Optional[LayoutConfig]:
        return self._config

    def set_config(self, config: LayoutConfig) -> None:
        self._config = config

    def invalidate(self) -> None:
        if self._cache:
            logger.debug("Dropping %d cached positions", len(self._cache))
        self._cache.clear()
        self._fingerprint = None

    def _resolve(self, config: Optional[LayoutConfig]) -> LayoutConfig:
        resolved = config if config is not None else self._config
        if resolved is None:
            raise InvalidConfig("GeometryEngine has no layout config")
        return resolved

    def _sync(self, config: LayoutConfig, total_items: int) -> None:
        fingerprint = config.fingerprint(total_items)
        if fingerprint != self._fingerprint:
            self.invalidate()
            self._fingerprint = fingerprint

    @staticmethod
    def item_angle(index: int, total_items: int) -> float:
        return 2.0 * math.pi * index / total_items

    def _lookup(self, index: int, total_items: int, config: Optional[LayoutConfig]) -> CachedPosition:
        check_index(index, total_items)
        cfg = self._resolve(config)
        self._sync(cfg, total_items)
        cached = self._cache.get(index)
        if cached is None:
            theta = self.item_angle(index, total_items)
            cx, cy = cfg.center
            circle = (cx + cfg.radius * math.cos(theta), cy + cfg.radius * math.sin(theta))
            half = cfg.item_size / 2.0
            cached = CachedPosition(circle=circle, anchor=(circle[0] - half, circle[1] - half))
            self._cache[index] = cached
        return cached

    def circle_position(self, index: int, total_items: int, config: Optional[LayoutConfig] = None) -> Point:
        return self._lookup(index, total_items, config).circle

    def anchor_position(self, index: int, total_items: int, config: Optional[LayoutConfig] = None) -> Point:
        return self._lookup(index, total_items, config).anchor

    @staticmethod
    def is_opposite_pair(a: int, b: int, total_items: int) -> bool:
        return total_items > 0 and total_items % 2 == 0 and abs(a - b) == total_items // 2

    def arc_control_point(
        self,
        pos_a: Point,
        pos_b: Point,
        config: Optional[LayoutConfig] = None,
        height_ratio: Optional[float] = None,
    ) -> Point:
        cfg = self._resolve(config)
        ratio = cfg.arc_height_ratio if height_ratio is None else height_ratio
        mid = midpoint(pos_a, pos_b)
        # Zero vector when the midpoint sits on the center; the control point
        # then collapses onto the midpoint.
        ux, uy = normalize((cfg.center[0] - mid[0], cfg.center[1] - mid[1]))
        height = cfg.radius * ratio
        return mid[0] + ux * height, mid[1] + uy * height

    def connector_path(
        self,
        pos_a: Point,
        pos_b: Point,
        config: Optional[LayoutConfig] = None,
        *,
        straight: bool = False,
    ) -> PathDescriptor:
        if straight:
            return PathDescriptor(start=pos_a, end=pos_b)
        return PathDescriptor(start=pos_a, end=pos_b, control=self.arc_control_point(pos_a, pos_b, config))

    def edge_path(self, a: int, b: int, total_items: int, config: Optional[LayoutConfig] = None) -> PathDescriptor:
        pos_a = self.circle_position(a, total_items, config)
        pos_b = self.circle_position(b, total_items, config)
        return self.connector_path(pos_a, pos_b, config, straight=self.is_opposite_pair(a, b, total_items))

    def positions_array(self, total_items: int, config: Optional[LayoutConfig] = None) -> np.ndarray:
        """Return an ``(N, 2)`` array of circle positions (uncached)."""

        cfg = self._resolve(config)
        if total_items <= 0:
            return np.zeros((0, 2), dtype=float)
        theta = 2.0 * np.pi * np.arange(total_items) / total_items
        cx, cy = cfg.center
        return np.column_stack((cx + cfg.radius * np.cos(theta), cy + cfg.radius * np.sin(theta)))

    def precompute_positions(self, total_items: int, config: Optional[LayoutConfig] = None) -> int:
        cfg = self._resolve(config)
        if total_items <= 0:
            return 0
        self._sync(cfg, total_items)
        circles = self.positions_array(total_items, cfg)
        anchors = circles - cfg.item_size / 2.0
        for index in range(total_items):
            if index not in self._cache:
                self._cache[index] = CachedPosition(
                    circle=(float(circles[index, 0]), float(circles[index, 1])),
                    anchor=(float(anchors[index, 0]), float(anchors[index, 1])),
                )
        logger.debug("Precomputed %d positions for %s", total_items, cfg.breakpoint)
        return total_items

    def cache_stats(self) -> Dict[str, object]:
        return {
            "size": len(self._cache),
            "fingerprint": self._fingerprint,
            "entries": sorted(self._cache),
        }


apply_debug_logging(globals(), logger=logger, skip={"GeometryEngine.item_angle", "GeometryEngine.config"})
