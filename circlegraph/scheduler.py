"""Injectable timers used for resize debouncing.

Delays are expressed in milliseconds. ``ManualScheduler`` keeps a virtual
clock that only moves when :meth:`ManualScheduler.advance` is called, which
keeps debounce behaviour deterministic in tests and in the CLI simulation.
``AsyncioScheduler`` delegates to an event loop for interactive hosts.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)

_COMPACT_MIN = 32


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def now(self) -> float:
        ...

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        ...


@dataclass(order=True)
class _ManualTimer:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler driven explicitly by :meth:`advance`."""

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._queue: List[_ManualTimer] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> _ManualTimer:
        self._compact()
        timer = _ManualTimer(self._now + max(0.0, float(delay_ms)), next(self._seq), callback)
        heapq.heappush(self._queue, timer)
        return timer

    def _compact(self) -> None:
        while self._queue and self._queue[0].cancelled:
            heapq.heappop(self._queue)
        if len(self._queue) > _COMPACT_MIN and self.pending * 2 < len(self._queue):
            self._queue = [timer for timer in self._queue if not timer.cancelled]
            heapq.heapify(self._queue)

    @property
    def queued(self) -> int:
        """Timers held in the queue, cancelled ones included."""

        return len(self._queue)

    @property
    def pending(self) -> int:
        return sum(1 for timer in self._queue if not timer.cancelled)

    def advance(self, delta_ms: float) -> int:
        """Move the clock forward, firing due timers in order. Returns the number fired."""

        target = self._now + max(0.0, float(delta_ms))
        fired = 0
        while self._queue and self._queue[0].due <= target:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = timer.due
            timer.callback()
            fired += 1
        self._now = target
        return fired

    def run_all(self) -> int:
        """Fire every pending timer, moving the clock to the last due time."""

        fired = 0
        while self._queue:
            timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self._now = max(self._now, timer.due)
            timer.callback()
            fired += 1
        return fired


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time() * 1000.0

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        logger.debug("Scheduling callback in %.1f ms", delay_ms)
        return self.loop.call_later(max(0.0, delay_ms) / 1000.0, callback)


__all__ = ["TimerHandle", "Scheduler", "ManualScheduler", "AsyncioScheduler"]
