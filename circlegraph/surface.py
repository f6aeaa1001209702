"""Render surface contract for connector paths."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Protocol, Tuple

from .types import EdgeKey, PathDescriptor

if TYPE_CHECKING:
    from .paths import VisualAttributes


class RenderSurface(Protocol):
    def set_viewport(self, width: float, height: float) -> None:
        ...

    def add_path(self, key: EdgeKey, path: PathDescriptor, attributes: "VisualAttributes") -> None:
        ...

    def update_path(self, key: EdgeKey, path: PathDescriptor) -> None:
        ...

    def set_attributes(self, key: EdgeKey, attributes: "VisualAttributes") -> None:
        ...

    def remove_path(self, key: EdgeKey) -> None:
        ...


@dataclass
class SurfaceElement:
    path: PathDescriptor
    attributes: "VisualAttributes"


class InMemorySurface:
    """Keeps path elements in a dict; stands in for an SVG layer."""

    def __init__(self) -> None:
        self.elements: Dict[EdgeKey, SurfaceElement] = {}
        self.viewport: Optional[Tuple[float, float]] = None

    def set_viewport(self, width: float, height: float) -> None:
        self.viewport = (width, height)

    def add_path(self, key: EdgeKey, path: PathDescriptor, attributes: "VisualAttributes") -> None:
        self.elements[key] = SurfaceElement(path, attributes)

    def update_path(self, key: EdgeKey, path: PathDescriptor) -> None:
        self.elements[key].path = path

    def set_attributes(self, key: EdgeKey, attributes: "VisualAttributes") -> None:
        self.elements[key].attributes = attributes

    def remove_path(self, key: EdgeKey) -> None:
        self.elements.pop(key, None)

    def __len__(self) -> int:
        return len(self.elements)

    def __contains__(self, key: object) -> bool:
        return key in self.elements


__all__ = ["RenderSurface", "SurfaceElement", "InMemorySurface"]
