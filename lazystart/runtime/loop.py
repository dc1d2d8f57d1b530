"""Single-threaded event loop driving save timers and the directory watcher.

All entry mutation, timer callbacks and file I/O happen on the caller's
thread; the loop only sleeps between due timers and watcher polls.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from .watch import AutostartWatcher

if TYPE_CHECKING:
    from ..entries.manager import AutostartManager


def _sleep_seconds(manager: AutostartManager, watcher: AutostartWatcher, max_idle_seconds: float) -> float:
    now = manager.timers.now()
    wake_at = min(now + max_idle_seconds, watcher.next_poll_at())
    deadline = manager.timers.next_deadline()
    if deadline is not None:
        wake_at = min(wake_at, deadline)
    return max(0.0, wake_at - now)


def run_event_loop(
    manager: AutostartManager,
    watcher: AutostartWatcher,
    *,
    should_stop: Callable[[], bool],
    sleep: Callable[[float], None] = time.sleep,
    max_idle_seconds: float = 1.0,
) -> None:
    """Run timers and watcher polls until ``should_stop()`` returns true.

    Pending writes are flushed before returning so an interrupted session
    never loses edits.
    """
    try:
        while not should_stop():
            manager.timers.run_due()
            for event in watcher.maybe_poll():
                manager.handle_watch_event(event)
            if should_stop():
                break
            sleep(_sleep_seconds(manager, watcher, max_idle_seconds))
    finally:
        manager.flush_all()
