from __future__ import annotations

import math
from typing import Tuple

from .types import Point

_EPS = 1e-12


def midpoint(a: Point, b: Point) -> Point:
    return (a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def normalize(v: Tuple[float, float]) -> Tuple[float, float]:
    """Return the unit vector along ``v``, or ``(0, 0)`` for a zero-length vector."""

    length = math.hypot(v[0], v[1])
    if length <= _EPS:
        return 0.0, 0.0
    return v[0] / length, v[1] / length


__all__ = ["midpoint", "distance", "normalize"]
