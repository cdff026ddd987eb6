"""
Schedulers that drive the capture sequence.

The controller only needs ``call_later(delay, callback)`` returning a handle
with ``cancel()``, plus ``time()``. An asyncio event loop provides both;
ManualClock provides them with virtual time so a whole session can be stepped
deterministically.
"""

import heapq
import itertools
from typing import Callable, List, Protocol


class Handle(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    def time(self) -> float: ...

    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle: ...


class ManualHandle:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualClock:
    """Virtual-time scheduler advanced explicitly by the caller."""

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: List = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualHandle:
        if delay < 0:
            raise ValueError(f"Negative delay: {delay}")
        handle = ManualHandle(self._now + delay, callback)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        """Number of scheduled, not cancelled callbacks."""
        return sum(1 for _, _, h in self._queue if not h.cancelled)

    def advance(self, seconds: float) -> None:
        """
        Move time forward, running every callback that falls due, in order.

        Callbacks scheduled while advancing run too if they fall inside the
        window. An exception from a callback stops the advance and propagates;
        time stays at that callback's due time.
        """
        if seconds < 0:
            raise ValueError(f"Cannot go back in time: {seconds}")
        target = self._now + seconds

        while self._queue and self._queue[0][0] <= target + 1e-9:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = max(self._now, when)
            handle.callback()

        self._now = target

