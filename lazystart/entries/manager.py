"""Registry of autostart entries keyed by basename.

The manager owns the directory table, the timer loop and the observer list,
and is passed explicitly to every engine operation that needs cross-entry
lookups.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

from ..runtime.config import DEFAULT_DESKTOP_NAMES, DEFAULT_SAVE_DELAY_SECONDS
from ..runtime.directories import AutostartDirectories
from ..runtime.timers import TimerLoop
from ..runtime.watch import DESKTOP_SUFFIX, WATCH_DELETED, WatchEvent
from .persistence import dispose_entry, flush_entry
from .resolver import reload_at, resolve_observation
from .types import EVENT_ADDED, EVENT_REMOVED, AutostartEntry, EntryEvent

logger = logging.getLogger(__name__)

EntryListener = Callable[[EntryEvent], None]


class AutostartManager:
    """Holds exactly one ``AutostartEntry`` per basename."""

    def __init__(
        self,
        directories: AutostartDirectories,
        *,
        desktop_names: tuple[str, ...] = DEFAULT_DESKTOP_NAMES,
        timers: TimerLoop | None = None,
        save_delay: float = DEFAULT_SAVE_DELAY_SECONDS,
    ) -> None:
        self.directories = directories
        self.desktop_names = tuple(desktop_names)
        self.timers = timers if timers is not None else TimerLoop()
        self.save_delay = save_delay
        self._entries: dict[str, AutostartEntry] = {}
        self._listeners: list[EntryListener] = []

    @property
    def user_dir(self) -> Path:
        return self.directories.user_dir

    def dir_for(self, position: int | None) -> Path | None:
        return self.directories.dir_for(position)

    def find(self, basename: str) -> AutostartEntry | None:
        return self._entries.get(basename)

    def __contains__(self, basename: object) -> bool:
        return basename in self._entries

    def __iter__(self) -> Iterator[AutostartEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self, *, include_hidden: bool = True) -> list[AutostartEntry]:
        """Entries sorted by display text, then basename."""
        selected = [
            entry
            for entry in self._entries.values()
            if include_hidden or not (entry.hidden or entry.nodisplay)
        ]
        return sorted(selected, key=lambda entry: (entry.description.casefold(), entry.basename))

    def add(self, entry: AutostartEntry) -> None:
        existing = self._entries.get(entry.basename)
        if existing is entry:
            return
        if existing is not None:
            raise ValueError(f"duplicate autostart entry {entry.basename!r}")
        self._entries[entry.basename] = entry
        self.emit(EVENT_ADDED, entry.basename)

    def subscribe(self, listener: EntryListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: EntryListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def emit(self, kind: str, basename: str) -> None:
        """Notify listeners; a ``removed`` entry also leaves the registry."""
        if kind == EVENT_REMOVED:
            self._entries.pop(basename, None)
        event = EntryEvent(kind=kind, basename=basename)
        for listener in list(self._listeners):
            listener(event)

    def fill(self) -> None:
        """Scan every directory in priority order and resolve each desktop file."""
        for position, directory in enumerate(self.directories.paths):
            try:
                paths = sorted(p for p in directory.iterdir() if p.name.endswith(DESKTOP_SUFFIX))
            except OSError:
                continue
            for path in paths:
                if path.is_file():
                    resolve_observation(self, path, position)

    def handle_watch_event(self, event: WatchEvent) -> None:
        if not event.path.name.endswith(DESKTOP_SUFFIX):
            return
        if event.kind == WATCH_DELETED:
            self._handle_deleted(event.path, event.position)
        else:
            resolve_observation(self, event.path, event.position)

    def _handle_deleted(self, path: Path, position: int) -> None:
        entry = self.find(path.name)
        if entry is None:
            return

        if entry.xdg_system_position == position:
            shadow = self.directories.find_basename(entry.basename, start=position + 1)
            entry.xdg_system_position = shadow[0] if shadow is not None else None

        if entry.xdg_position != position or entry.save_pending:
            # Either a shadow went away, or the pending write recreates the file.
            return

        found = self.directories.find_basename(entry.basename, start=position + 1)
        while found is not None:
            if reload_at(self, entry, found[1], found[0]) is not None:
                return
            found = self.directories.find_basename(entry.basename, start=found[0] + 1)

        logger.debug("Autostart entry %s disappeared", entry.basename)
        self.emit(EVENT_REMOVED, entry.basename)

    def flush_all(self) -> bool:
        """Write every pending edit now; returns whether all writes succeeded."""
        ok = True
        for entry in self:
            if not flush_entry(self, entry):
                ok = False
        return ok

    def close(self) -> None:
        for entry in self:
            dispose_entry(self, entry)
        self._listeners.clear()
