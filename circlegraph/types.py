"""Shared value types and the exception hierarchy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

Point = Tuple[float, float]
EdgeKey = Tuple[int, int]


class CircleGraphError(Exception):
    """Base class for every error raised by the layout core."""


class InvalidIndex(CircleGraphError, IndexError):
    """Raised when a node index falls outside ``[0, N)``."""


class InvalidConfig(CircleGraphError, ValueError):
    """Raised when a derived layout metric is non-positive or a tier table is malformed."""


class MissingRenderSurface(CircleGraphError, RuntimeError):
    """Raised when an operation needs a render surface and none was supplied."""


class MissingCollaborator(CircleGraphError, RuntimeError):
    """Raised when the animation collaborator is required but unavailable."""


def normalize_edge(a: int, b: int) -> EdgeKey:
    """Return the canonical ``(low, high)`` key for an unordered pair."""

    return (a, b) if a <= b else (b, a)


def check_index(index: int, total_items: int) -> None:
    if not 0 <= index < total_items:
        raise InvalidIndex(f"index {index} outside [0, {total_items})")


def _fmt(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in {"", "-0"} else text


@dataclass(frozen=True)
class PathDescriptor:
    """Connector geometry: a segment, or a quadratic curve when ``control`` is set."""

    start: Point
    end: Point
    control: Optional[Point] = None

    @property
    def kind(self) -> str:
        return "line" if self.control is None else "quadratic"

    @property
    def is_straight(self) -> bool:
        return self.control is None

    def to_svg(self) -> str:
        sx, sy = self.start
        ex, ey = self.end
        if self.control is None:
            return f"M {_fmt(sx)} {_fmt(sy)} L {_fmt(ex)} {_fmt(ey)}"
        cx, cy = self.control
        return f"M {_fmt(sx)} {_fmt(sy)} Q {_fmt(cx)} {_fmt(cy)} {_fmt(ex)} {_fmt(ey)}"

    def cubic_controls(self) -> Tuple[Point, Point]:
        """Return the two cubic Bézier controls equivalent to this quadratic curve."""

        if self.control is None:
            return self.start, self.end
        (sx, sy), (cx, cy), (ex, ey) = self.start, self.control, self.end
        c1 = (sx + 2.0 / 3.0 * (cx - sx), sy + 2.0 / 3.0 * (cy - sy))
        c2 = (ex + 2.0 / 3.0 * (cx - ex), ey + 2.0 / 3.0 * (cy - ey))
        return c1, c2


__all__ = [
    "Point",
    "EdgeKey",
    "CircleGraphError",
    "InvalidIndex",
    "InvalidConfig",
    "MissingRenderSurface",
    "MissingCollaborator",
    "normalize_edge",
    "check_index",
    "PathDescriptor",
]
