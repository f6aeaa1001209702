"""Breakpoint tiers and default style settings."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .types import InvalidConfig


@dataclass(frozen=True)
class Breakpoint:
    """A named viewport-width range with its base layout metrics."""

    name: str
    min_width: int
    max_width: Optional[int]  # inclusive, None for the open-ended top tier
    container: float
    center: float
    radius: float
    item_size: float
    item_count: int

    def contains(self, width: float) -> bool:
        if width < self.min_width:
            return False
        return self.max_width is None or width < self.max_width + 1


@dataclass(frozen=True)
class PathStyle:
    """Connector colors, opacity levels and stroke width scaling."""

    primary_color: str = "#ff6b6b"
    secondary_color: str = "#00ff00"
    normal_width_divisor: float = 120.0
    normal_width_floor: float = 3.0
    hover_width_divisor: float = 75.0
    hover_width_floor: float = 5.0
    opacity_normal: float = 0.8
    opacity_light: float = 0.15
    opacity_highlight: float = 1.0
    opacity_light_highlight: float = 0.3
    arc_height_ratio: float = 0.3


@dataclass(frozen=True)
class AnimationSettings:
    """Durations (seconds) handed to the animation collaborator."""

    duration: float = 0.8
    item_delay: float = 0.1
    reposition_delay_factor: float = 0.5
    state_duration: float = 0.3
    path_stroke_delay: float = 0.2
    path_stroke_duration: float = 1.5


MOBILE = Breakpoint("mobile", 0, 480, container=300, center=150, radius=100, item_size=60, item_count=4)
TABLET = Breakpoint("tablet", 481, 768, container=400, center=200, radius=150, item_size=80, item_count=6)
DESKTOP = Breakpoint("desktop", 769, None, container=600, center=300, radius=250, item_size=100, item_count=12)

DEFAULT_BREAKPOINTS: Tuple[Breakpoint, ...] = (MOBILE, TABLET, DESKTOP)

DEFAULT_DEBOUNCE_MS = 300.0
DEFAULT_ITEM_COUNT = 8

_DEFAULT_STYLE = PathStyle()
_DEFAULT_ANIMATION = AnimationSettings()


def get_default_style() -> PathStyle:
    return copy.deepcopy(_DEFAULT_STYLE)


def set_default_style(style: PathStyle) -> None:
    global _DEFAULT_STYLE
    _DEFAULT_STYLE = copy.deepcopy(style)


def get_default_animation() -> AnimationSettings:
    return copy.deepcopy(_DEFAULT_ANIMATION)


def set_default_animation(settings: AnimationSettings) -> None:
    global _DEFAULT_ANIMATION
    _DEFAULT_ANIMATION = copy.deepcopy(settings)


def validate_breakpoints(tiers: Sequence[Breakpoint]) -> None:
    """Check that ``tiers`` cover ``[0, inf)`` contiguously without overlap.

    Tiers must be listed in ascending width order, start at zero, leave no
    gap between neighbours and only the last one may be open-ended. Base
    metrics and item counts are checked for sign here as well. A tier with a
    degenerate container is rejected later by config derivation, so at least
    one tier must have positive metrics to serve as its fallback.
    """

    if not tiers:
        raise InvalidConfig("at least one breakpoint is required")
    names = [tier.name for tier in tiers]
    if len(set(names)) != len(names):
        raise InvalidConfig(f"breakpoint names must be unique (got {names})")
    if tiers[0].min_width != 0:
        raise InvalidConfig(f"first breakpoint '{tiers[0].name}' must start at width 0")
    for prev, nxt in zip(tiers, tiers[1:]):
        if prev.max_width is None:
            raise InvalidConfig(f"only the last breakpoint may be open-ended ('{prev.name}' is not last)")
        if nxt.min_width != prev.max_width + 1:
            raise InvalidConfig(
                f"breakpoints '{prev.name}' and '{nxt.name}' are not contiguous "
                f"({prev.max_width} -> {nxt.min_width})"
            )
    if tiers[-1].max_width is not None:
        raise InvalidConfig(f"last breakpoint '{tiers[-1].name}' must be open-ended")
    for tier in tiers:
        if tier.max_width is not None and tier.max_width < tier.min_width:
            raise InvalidConfig(f"breakpoint '{tier.name}' has an empty width range")
        if tier.item_count < 0:
            raise InvalidConfig(f"breakpoint '{tier.name}' has a negative item count")
        for metric in ("container", "center", "radius", "item_size"):
            if getattr(tier, metric) < 0:
                raise InvalidConfig(f"breakpoint '{tier.name}' has negative {metric}")
    if not any(tier.container > 0 and tier.radius > 0 and tier.item_size > 0 for tier in tiers):
        raise InvalidConfig("at least one breakpoint needs positive container, radius and item size")


__all__ = [
    "Breakpoint",
    "PathStyle",
    "AnimationSettings",
    "MOBILE",
    "TABLET",
    "DESKTOP",
    "DEFAULT_BREAKPOINTS",
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_ITEM_COUNT",
    "get_default_style",
    "set_default_style",
    "get_default_animation",
    "set_default_animation",
    "validate_breakpoints",
]
