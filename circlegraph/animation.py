"""Animation collaborator contract and in-process implementations.

The layout core never tweens anything itself. It hands target positions and
visual attributes to an object implementing :class:`AnimationCollaborator`
and waits for one completion callback per item transition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Protocol, Sequence, Set

from .types import EdgeKey, Point

if TYPE_CHECKING:
    from .paths import VisualAttributes

logger = logging.getLogger(__name__)

Completion = Callable[[], None]


class AnimationCollaborator(Protocol):
    def place_item(self, index: int, position: Point, *, scale: float = 1.0) -> None:
        ...

    def hide_item(self, index: int) -> None:
        ...

    def move_item(
        self,
        index: int,
        target: Point,
        *,
        duration: float,
        delay: float,
        on_complete: Completion,
    ) -> None:
        ...

    def animate_path(self, key: EdgeKey, attributes: "VisualAttributes", *, duration: float) -> None:
        ...

    def draw_path(self, key: EdgeKey, *, duration: float, delay: float) -> None:
        ...


@dataclass
class ItemTransition:
    index: int
    target: Point
    duration: float
    delay: float
    on_complete: Completion = field(repr=False)


class RecordingAnimator:
    """Queues item transitions until the host completes them.

    Completions can be delivered in any order via :meth:`complete`, which
    lets callers reproduce out-of-order and late callbacks.
    """

    def __init__(self) -> None:
        self.placements: Dict[int, Point] = {}
        self.scales: Dict[int, float] = {}
        self.positions: Dict[int, Point] = {}
        self.hidden: Set[int] = set()
        self.path_updates: List[tuple] = []
        self.draw_ins: List[tuple] = []
        self.history: List[ItemTransition] = []
        self._pending: List[ItemTransition] = []

    @property
    def pending(self) -> List[ItemTransition]:
        return list(self._pending)

    def place_item(self, index: int, position: Point, *, scale: float = 1.0) -> None:
        self.hidden.discard(index)
        self.placements[index] = position
        self.positions[index] = position
        self.scales[index] = scale

    def hide_item(self, index: int) -> None:
        self.hidden.add(index)

    def move_item(
        self,
        index: int,
        target: Point,
        *,
        duration: float,
        delay: float,
        on_complete: Completion,
    ) -> None:
        self.hidden.discard(index)
        transition = ItemTransition(index, target, duration, delay, on_complete)
        self.history.append(transition)
        self._pending.append(transition)

    def animate_path(self, key: EdgeKey, attributes: "VisualAttributes", *, duration: float) -> None:
        self.path_updates.append((key, attributes, duration))

    def draw_path(self, key: EdgeKey, *, duration: float, delay: float) -> None:
        self.draw_ins.append((key, duration, delay))

    def _finish(self, transition: ItemTransition) -> None:
        self.positions[transition.index] = transition.target
        self.scales[transition.index] = 1.0
        transition.on_complete()

    def complete(self, position: int = 0) -> ItemTransition:
        """Complete the pending transition at queue ``position``."""

        transition = self._pending.pop(position)
        self._finish(transition)
        return transition

    def complete_all(self, order: Optional[Sequence[int]] = None) -> int:
        """Complete every pending transition, optionally in a given queue order."""

        batch = self._pending
        self._pending = []
        if order is not None:
            batch = [batch[i] for i in order]
        for transition in batch:
            self._finish(transition)
        return len(batch)


class ImmediateAnimator(RecordingAnimator):
    """Applies every transition at once and reports completion synchronously."""

    def move_item(
        self,
        index: int,
        target: Point,
        *,
        duration: float,
        delay: float,
        on_complete: Completion,
    ) -> None:
        self.hidden.discard(index)
        transition = ItemTransition(index, target, duration, delay, on_complete)
        self.history.append(transition)
        self._finish(transition)


__all__ = ["AnimationCollaborator", "ItemTransition", "RecordingAnimator", "ImmediateAnimator"]
