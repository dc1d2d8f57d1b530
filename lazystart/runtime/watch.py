"""Poll-based change detection for autostart directories.

Each poll takes a stat snapshot of every ``*.desktop`` file in every
directory and diffs it against the previous one.
"""

from __future__ import annotations

import os
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from .directories import AutostartDirectories

DESKTOP_SUFFIX = ".desktop"

WATCH_CREATED = "created"
WATCH_CHANGED = "changed"
WATCH_DELETED = "deleted"

_StatSignature = tuple[int, int, int]
_Snapshot = dict[tuple[int, str], _StatSignature]


@dataclass(frozen=True)
class WatchEvent:
    """One file appearing, changing or disappearing in directory ``position``."""

    kind: str
    path: Path
    position: int


def _file_stat_signature(entry: os.DirEntry) -> _StatSignature | None:
    """Return ``(mtime_ns, size, inode)`` for a regular file, else ``None``."""
    try:
        if not entry.is_file():
            return None
        st = entry.stat()
    except OSError:
        return None
    return (st.st_mtime_ns, st.st_size, st.st_ino)


def snapshot_directories(directories: AutostartDirectories) -> _Snapshot:
    """Stat every desktop file; missing or unreadable directories read as empty."""
    snapshot: _Snapshot = {}
    for position, directory in enumerate(directories.paths):
        try:
            with os.scandir(directory) as entries:
                for entry in entries:
                    if not entry.name.endswith(DESKTOP_SUFFIX):
                        continue
                    signature = _file_stat_signature(entry)
                    if signature is not None:
                        snapshot[(position, entry.name)] = signature
        except OSError:
            continue
    return snapshot


def diff_snapshots(directories: AutostartDirectories, before: _Snapshot, after: _Snapshot) -> list[WatchEvent]:
    """Deletions first, then creations and changes, each by position then name."""
    deleted = sorted(key for key in before if key not in after)
    updated = sorted(key for key, sig in after.items() if before.get(key) != sig)

    events = [
        WatchEvent(kind=WATCH_DELETED, path=directories.paths[position] / name, position=position)
        for position, name in deleted
    ]
    for position, name in updated:
        kind = WATCH_CHANGED if (position, name) in before else WATCH_CREATED
        events.append(WatchEvent(kind=kind, path=directories.paths[position] / name, position=position))
    return events


@dataclass
class AutostartWatcher:
    directories: AutostartDirectories
    monotonic: Callable[[], float] = time.monotonic
    poll_seconds: float = 1.0
    last_poll: float | None = None
    _snapshot: _Snapshot | None = field(default=None, repr=False)

    def prime(self) -> None:
        """Record the current state as baseline without reporting events."""
        self._snapshot = snapshot_directories(self.directories)
        self.last_poll = self.monotonic()

    def poll(self) -> list[WatchEvent]:
        current = snapshot_directories(self.directories)
        self.last_poll = self.monotonic()
        if self._snapshot is None:
            self._snapshot = current
            return []
        events = diff_snapshots(self.directories, self._snapshot, current)
        self._snapshot = current
        return events

    def next_poll_at(self) -> float:
        if self.last_poll is None:
            return self.monotonic()
        return self.last_poll + self.poll_seconds

    def maybe_poll(self) -> list[WatchEvent]:
        """Poll at most once per ``poll_seconds``."""
        if self.last_poll is not None and (self.monotonic() - self.last_poll) < self.poll_seconds:
            return []
        return self.poll()
