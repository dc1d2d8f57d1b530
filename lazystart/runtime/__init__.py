"""Runtime plumbing: directory table, config, timers, watcher and loop."""

from __future__ import annotations

from .directories import AutostartDirectories
from .loop import run_event_loop
from .timers import TimerHandle, TimerLoop
from .watch import AutostartWatcher, WatchEvent

__all__ = [
    "AutostartDirectories",
    "AutostartWatcher",
    "TimerHandle",
    "TimerLoop",
    "WatchEvent",
    "run_event_loop",
]
