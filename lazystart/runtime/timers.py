"""Cooperative one-shot timers for a single-threaded loop.

Nothing here spawns threads: the owner of a ``TimerLoop`` calls
``run_due()`` from its loop and callbacks run on that stack.
"""

from __future__ import annotations

import heapq
import itertools
import time
from collections.abc import Callable


class TimerHandle:
    """Handle returned by ``TimerLoop.call_later``."""

    __slots__ = ("deadline", "callback", "cancelled")

    def __init__(self, deadline: float, callback: Callable[[], None]) -> None:
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "armed"
        return f"<TimerHandle deadline={self.deadline:.3f} {state}>"


class TimerLoop:
    """Deadline-ordered one-shot timers driven by an injected clock."""

    def __init__(self, monotonic: Callable[[], float] = time.monotonic) -> None:
        self._monotonic = monotonic
        self._heap: list[tuple[float, int, TimerHandle]] = []
        self._sequence = itertools.count()

    def now(self) -> float:
        return self._monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self._monotonic() + max(0.0, float(delay)), callback)
        heapq.heappush(self._heap, (handle.deadline, next(self._sequence), handle))
        return handle

    def _drop_cancelled(self) -> None:
        while self._heap and self._heap[0][2].cancelled:
            heapq.heappop(self._heap)

    def next_deadline(self) -> float | None:
        self._drop_cancelled()
        return self._heap[0][0] if self._heap else None

    def pending_count(self) -> int:
        return sum(1 for _deadline, _seq, handle in self._heap if not handle.cancelled)

    def run_due(self) -> int:
        """Run every expired timer once; return how many callbacks ran.

        Timers armed by a callback are deferred to a later call even when
        their deadline has already passed.
        """
        now = self._monotonic()
        due: list[TimerHandle] = []
        while self._heap and self._heap[0][0] <= now:
            _deadline, _seq, handle = heapq.heappop(self._heap)
            if not handle.cancelled:
                due.append(handle)

        ran = 0
        for handle in due:
            # An earlier callback in this batch may have cancelled it.
            if handle.cancelled:
                continue
            handle.callback()
            ran += 1
        return ran
