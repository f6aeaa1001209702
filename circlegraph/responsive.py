"""Breakpoint detection, layout config derivation and change notification."""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .config import (
    DEFAULT_BREAKPOINTS,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_ITEM_COUNT,
    AnimationSettings,
    Breakpoint,
    PathStyle,
    get_default_animation,
    get_default_style,
    validate_breakpoints,
)
from .scheduler import ManualScheduler, Scheduler, TimerHandle
from .types import InvalidConfig, Point

logger = logging.getLogger(__name__)

BreakpointCallback = Callable[[str], None]
SubscriptionToken = int
Fingerprint = Tuple[float, float, float, float, int]


@dataclass(frozen=True)
class StrokeWidths:
    normal: float
    hover: float


@dataclass(frozen=True)
class OpacityLevels:
    normal: float
    light: float
    highlight: float
    light_highlight: float


@dataclass(frozen=True)
class LayoutConfig:
    """Immutable layout snapshot for one breakpoint and item count."""

    breakpoint: str
    center: Point
    radius: float
    item_size: float
    container_width: float
    container_height: float
    item_count: int
    max_items: int
    stroke_width: StrokeWidths
    opacity: OpacityLevels
    arc_height_ratio: float
    primary_color: str
    secondary_color: str
    animation: AnimationSettings

    @property
    def container_extent(self) -> Tuple[float, float]:
        return self.container_width, self.container_height

    def effective_item_count(self, available: int) -> int:
        return max(0, min(available, self.max_items))

    def fingerprint(self, total_items: int) -> Fingerprint:
        return (
            float(self.center[0]),
            float(self.center[1]),
            float(self.radius),
            float(self.item_size),
            int(total_items),
        )


def _js_round(value: float) -> int:
    return int(math.floor(value + 0.5))


def detect_breakpoint(width: float, tiers: Sequence[Breakpoint] = DEFAULT_BREAKPOINTS) -> Breakpoint:
    """Return the single tier whose width range contains ``width``.

    Widths below the first tier's minimum resolve to the first tier.
    """

    for tier in tiers:
        if tier.contains(width):
            return tier
    return tiers[0]


def derive_config(
    tier: Breakpoint,
    item_count: int,
    style: Optional[PathStyle] = None,
    animation: Optional[AnimationSettings] = None,
) -> LayoutConfig:
    """Compute the layout snapshot for ``tier``.

    Stroke widths scale with the container extent and never drop below the
    style floors; arc ratio, opacities and colors are shared by all tiers.
    """

    style = style or get_default_style()
    animation = animation or get_default_animation()
    if item_count < 0:
        raise InvalidConfig(f"item count must be non-negative (got {item_count})")
    for metric in ("container", "radius", "item_size"):
        value = getattr(tier, metric)
        if value <= 0:
            raise InvalidConfig(f"breakpoint '{tier.name}' derived non-positive {metric} ({value})")

    normal = max(style.normal_width_floor, _js_round(tier.container / style.normal_width_divisor))
    hover = max(style.hover_width_floor, _js_round(tier.container / style.hover_width_divisor))

    return LayoutConfig(
        breakpoint=tier.name,
        center=(float(tier.center), float(tier.center)),
        radius=float(tier.radius),
        item_size=float(tier.item_size),
        container_width=float(tier.container),
        container_height=float(tier.container),
        item_count=int(item_count),
        max_items=int(tier.item_count),
        stroke_width=StrokeWidths(normal=float(normal), hover=float(hover)),
        opacity=OpacityLevels(
            normal=style.opacity_normal,
            light=style.opacity_light,
            highlight=style.opacity_highlight,
            light_highlight=style.opacity_light_highlight,
        ),
        arc_height_ratio=style.arc_height_ratio,
        primary_color=style.primary_color,
        secondary_color=style.secondary_color,
        animation=animation,
    )


class ResponsiveConfigManager:
    """Configuration provider tracking the active breakpoint.

    Resize signals are coalesced on the injected scheduler; subscribers hear
    about a breakpoint only after the debounce window settles on a tier that
    differs from the last one announced. Without an explicit scheduler a
    :class:`~circlegraph.scheduler.ManualScheduler` is used and a warning is
    logged, since nothing advances it on its own; hosts driven
    by an event loop should pass an ``AsyncioScheduler``.
    """

    def __init__(
        self,
        viewport_width: float = 1024,
        breakpoints: Optional[Iterable[Breakpoint]] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        debounce_ms: float = DEFAULT_DEBOUNCE_MS,
        item_count: int = DEFAULT_ITEM_COUNT,
        style: Optional[PathStyle] = None,
        animation: Optional[AnimationSettings] = None,
    ):
        tiers = tuple(breakpoints) if breakpoints is not None else DEFAULT_BREAKPOINTS
        validate_breakpoints(tiers)
        self.breakpoints: Tuple[Breakpoint, ...] = tiers
        if scheduler is None:
            logger.warning(
                "No scheduler supplied - resize signals settle only when the ManualScheduler is advanced"
            )
            scheduler = ManualScheduler()
        self.scheduler: Scheduler = scheduler
        self.debounce_ms = float(debounce_ms)
        self.style = style or get_default_style()
        self.animation = animation or get_default_animation()

        self._item_count = int(item_count)
        self._width = float(viewport_width)
        self._current = detect_breakpoint(self._width, self.breakpoints)
        self._cache: Dict[Tuple[str, int], LayoutConfig] = {}
        self._subscribers: Dict[SubscriptionToken, BreakpointCallback] = {}
        self._tokens = itertools.count(1)
        self._timer: Optional[TimerHandle] = None

        logger.info(
            "Responsive config initialised at width %.0f (breakpoint=%s)",
            self._width,
            self._current.name,
        )

    # ------------------------------------------------------------------ queries

    @property
    def viewport_width(self) -> float:
        return self._width

    @property
    def current_breakpoint(self) -> Breakpoint:
        return self._current

    @property
    def current_breakpoint_name(self) -> str:
        return self._current.name

    def is_breakpoint(self, name: str) -> bool:
        return self._current.name == name

    @property
    def item_count(self) -> int:
        return self._item_count

    def set_item_count(self, count: int) -> None:
        if count < 0:
            raise InvalidConfig(f"item count must be non-negative (got {count})")
        self._item_count = int(count)

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def get_breakpoint(self, width: Optional[float] = None) -> Breakpoint:
        return detect_breakpoint(self._width if width is None else width, self.breakpoints)

    def breakpoint_named(self, name: str) -> Breakpoint:
        for tier in self.breakpoints:
            if tier.name == name:
                return tier
        raise KeyError(f"Unknown breakpoint '{name}'")

    def derive_config(self, tier: Breakpoint, item_count: Optional[int] = None) -> LayoutConfig:
        """Return the cached snapshot for ``(tier, item_count)``, deriving it on a miss."""

        count = self._item_count if item_count is None else int(item_count)
        key = (tier.name, count)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        config = self._derive_with_fallback(tier, count)
        self._cache[key] = config
        return config

    def current_config(self, item_count: Optional[int] = None) -> LayoutConfig:
        return self.derive_config(self._current, item_count)

    def _derive_with_fallback(self, tier: Breakpoint, item_count: int) -> LayoutConfig:
        try:
            return derive_config(tier, item_count, self.style, self.animation)
        except InvalidConfig as exc:
            logger.warning("Config derivation failed for '%s': %s", tier.name, exc)
            last_error = exc

        for candidate in self._nearest_tiers(tier):
            try:
                config = derive_config(candidate, item_count, self.style, self.animation)
            except InvalidConfig as exc:
                last_error = exc
                continue
            logger.warning("Falling back to breakpoint '%s' defaults for '%s'", candidate.name, tier.name)
            return config
        raise last_error

    def _nearest_tiers(self, tier: Breakpoint) -> List[Breakpoint]:
        origin = self.breakpoints.index(tier) if tier in self.breakpoints else 0
        others = [(abs(idx - origin), idx, t) for idx, t in enumerate(self.breakpoints) if t is not tier]
        return [t for _, _, t in sorted(others, key=lambda item: (item[0], item[1]))]

    # ------------------------------------------------------------------ cache

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_snapshot(self) -> Dict[Tuple[str, int], LayoutConfig]:
        return dict(self._cache)

    def force_recalculate(self, item_count: Optional[int] = None) -> LayoutConfig:
        """Re-detect the tier and rebuild the config, bypassing cache and debounce."""

        self._cancel_timer()
        self.clear_cache()
        tier = self.get_breakpoint()
        changed = tier.name != self._current.name
        self._current = tier
        config = self.current_config(item_count)
        logger.info("Forced recalculation at width %.0f (breakpoint=%s)", self._width, tier.name)
        if changed:
            self._notify(tier.name)
        return config

    # ------------------------------------------------------------------ subscriptions

    def subscribe(self, callback: BreakpointCallback) -> SubscriptionToken:
        for token, existing in self._subscribers.items():
            if existing == callback:
                return token
        token = next(self._tokens)
        self._subscribers[token] = callback
        return token

    def unsubscribe(self, token: SubscriptionToken) -> bool:
        return self._subscribers.pop(token, None) is not None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    # ------------------------------------------------------------------ resize signal

    def on_resize(self, width: float) -> None:
        """Record a viewport width and (re)arm the debounce timer."""

        self._width = float(width)
        self._cancel_timer()
        self._timer = self.scheduler.call_later(self.debounce_ms, self._settle)
        logger.debug("Resize to %.0f, debounce armed for %.0f ms", width, self.debounce_ms)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _settle(self) -> None:
        self._timer = None
        tier = self.get_breakpoint()
        if tier.name == self._current.name:
            logger.debug("Resize settled on unchanged breakpoint %s", tier.name)
            return
        logger.info("Breakpoint changed %s -> %s", self._current.name, tier.name)
        self.clear_cache()
        self._current = tier
        self._notify(tier.name)

    def _notify(self, name: str) -> None:
        for token, callback in list(self._subscribers.items()):
            try:
                callback(name)
            except Exception:
                logger.warning("Breakpoint subscriber %d failed", token, exc_info=True)

    def close(self) -> None:
        self._cancel_timer()
        self._subscribers.clear()
        self.clear_cache()


__all__ = [
    "StrokeWidths",
    "OpacityLevels",
    "LayoutConfig",
    "detect_breakpoint",
    "derive_config",
    "ResponsiveConfigManager",
]
