"""Decide which directory's copy of an entry is authoritative.

Observations arrive per ``(path, position)`` from the initial directory scan
and from the watcher. Lower positions win; position 0 is the user directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .loader import apply_record, load_entry_record
from .types import EVENT_CHANGED, AutostartEntry, DirtyField

if TYPE_CHECKING:
    from .manager import AutostartManager


def _min_position(current: int | None, position: int) -> int:
    return position if current is None else min(current, position)


def resolve_observation(manager: AutostartManager, path: Path, position: int) -> AutostartEntry | None:
    """Apply one observation of ``path`` found in directory ``position``.

    Returns the entry that was created or reloaded from ``path``, or ``None``
    when the observation was ignored (own write, lower priority, pending
    write, or an unparseable/ineligible file).
    """
    path = Path(path)
    basename = path.name
    entry = manager.find(basename)

    if entry is not None:
        if entry.xdg_position == position and entry.suppress_next_change_event:
            entry.suppress_next_change_event = False
            return None

        outranked = entry.xdg_position is not None and entry.xdg_position < position
        if outranked or entry.save_pending:
            # Only a system directory can be a shadow.
            if position >= 1:
                entry.xdg_system_position = _min_position(entry.xdg_system_position, position)
            return None

    record = load_entry_record(path, manager.desktop_names)
    if record is None:
        return None

    is_new = entry is None
    if entry is None:
        entry = AutostartEntry(basename=basename, path=path)

    entry.path = path
    apply_record(entry, record)
    if position >= 1:
        entry.xdg_system_position = _min_position(entry.xdg_system_position, position)
    entry.xdg_position = position
    entry.dirty = DirtyField.NONE
    entry.pending_origin_path = None
    entry.suppress_next_change_event = False

    if is_new:
        manager.add(entry)
    else:
        manager.emit(EVENT_CHANGED, basename)
    return entry


def reload_at(manager: AutostartManager, entry: AutostartEntry, path: Path, position: int) -> AutostartEntry | None:
    """Re-resolve ``entry`` from another directory after its file went away."""
    entry.xdg_position = None
    return resolve_observation(manager, path, position)
