"""Single-threaded callback scheduling.

The engine and the turn timer only ever need "run this callback after *delay*
seconds, and let me cancel it". An ``asyncio`` event loop already provides
exactly that via ``loop.call_later``, so any running loop can be passed
wherever a :class:`Scheduler` is expected. :class:`ManualScheduler` is a
virtual clock for tests and headless simulation: nothing runs until the owner
calls :meth:`~ManualScheduler.run_pending` or :meth:`~ManualScheduler.advance`.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import Any, Callable, List, Protocol, Tuple

logger = logging.getLogger(__name__)


class Handle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Handle: ...


class ManualHandle:
    __slots__ = ("when", "callback", "args", "cancelled")

    def __init__(self, when: float, callback: Callable[..., Any], args: Tuple[Any, ...]) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler; callbacks run in (due time, scheduling order)."""

    def __init__(self) -> None:
        self.now: float = 0.0
        self._queue: List[Tuple[float, int, ManualHandle]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualHandle:
        handle = ManualHandle(self.now + max(0.0, delay), callback, args)
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
        return handle

    @property
    def pending(self) -> int:
        """Number of scheduled, not-yet-cancelled callbacks."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def next_due(self) -> float | None:
        for when, _, handle in sorted(self._queue):
            if not handle.cancelled:
                return when
        return None

    def run_pending(self) -> int:
        """Run every callback due at the current time, including ones they schedule.

        Returns the number of callbacks executed.
        """
        ran = 0
        while self._queue and self._queue[0][0] <= self.now:
            _, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            handle.callback(*handle.args)
            ran += 1
        return ran

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing callbacks at their due times in order."""
        target = self.now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            self.now = max(self.now, self._queue[0][0])
            ran += self.run_pending()
        self.now = target
        ran += self.run_pending()
        return ran
