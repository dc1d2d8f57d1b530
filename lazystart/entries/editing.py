"""User-facing mutations: edit, hide, delete, create and import entries."""

from __future__ import annotations

import logging
import shlex
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from ..runtime.directories import USER_POSITION
from .allocator import find_free_basename
from .loader import apply_record, load_entry_record
from .persistence import ensure_user_dir, queue_save
from .types import (
    EVENT_CHANGED,
    EVENT_REMOVED,
    AutostartEntry,
    DirtyField,
    str_equal,
    text_is_blank,
)

if TYPE_CHECKING:
    from .manager import AutostartManager

logger = logging.getLogger(__name__)


def set_hidden(manager: AutostartManager, entry: AutostartEntry, hidden: bool) -> None:
    hidden = bool(hidden)
    if hidden == entry.hidden:
        return
    entry.hidden = hidden
    entry.dirty |= DirtyField.HIDDEN
    queue_save(manager, entry)
    manager.emit(EVENT_CHANGED, entry.basename)


def update_entry(
    manager: AutostartManager,
    entry: AutostartEntry,
    *,
    name: str | None,
    comment: str | None,
    exec_: str | None,
    delay: int,
) -> bool:
    """Apply edited values; only fields that really differ are marked dirty.

    Returns whether anything changed.
    """
    changed = False
    if not str_equal(name, entry.name):
        changed = True
        entry.name = name
        entry.dirty |= DirtyField.NAME
    if not str_equal(comment, entry.comment):
        changed = True
        entry.comment = comment
        entry.dirty |= DirtyField.COMMENT
    if not str_equal(exec_, entry.exec):
        changed = True
        entry.exec = exec_
        entry.dirty |= DirtyField.EXEC
    delay = max(0, int(delay))
    if delay != entry.delay:
        changed = True
        entry.delay = delay
        entry.dirty |= DirtyField.DELAY

    if changed:
        entry.update_description()
        queue_save(manager, entry)
        manager.emit(EVENT_CHANGED, entry.basename)
    return changed


def delete_entry(manager: AutostartManager, entry: AutostartEntry) -> None:
    """Remove a user-only entry, or hide an entry that shadows a system one."""
    if entry.xdg_position == USER_POSITION and entry.xdg_system_position is None:
        if entry.save_timer is not None:
            entry.save_timer.cancel()
            entry.save_timer = None
        if entry.path.exists():
            try:
                entry.path.unlink()
            except OSError as exc:
                logger.warning("Could not remove %s: %s", entry.path, exc)
        # Stays hidden even if the unlink above failed.
        entry.hidden = True
        entry.dirty = DirtyField.NONE
        entry.pending_origin_path = None
        manager.emit(EVENT_REMOVED, entry.basename)
        return

    entry.hidden = True
    entry.dirty |= DirtyField.HIDDEN
    queue_save(manager, entry)
    manager.emit(EVENT_CHANGED, entry.basename)


def create_entry(
    manager: AutostartManager,
    *,
    name: str | None,
    comment: str | None,
    exec_: str,
    delay: int = 0,
) -> AutostartEntry | None:
    """Create a new user entry for ``exec_``; ``None`` if no file name is usable."""
    if text_is_blank(exec_):
        raise ValueError("an autostart entry needs a command")

    try:
        argv = shlex.split(exec_)
    except ValueError as exc:
        logger.warning("Cannot parse command %r: %s", exec_, exc)
        return None
    if not argv:
        return None

    basename = find_free_basename(manager, argv[0])
    if basename is None:
        logger.warning("No free autostart file name for %r", argv[0])
        return None

    entry = AutostartEntry(
        basename=basename,
        path=manager.user_dir / basename,
        hidden=False,
        nodisplay=False,
        name=exec_ if text_is_blank(name) else name,
        exec=exec_,
        comment=comment,
        icon=None,
        delay=max(0, int(delay)),
        xdg_position=USER_POSITION,
        xdg_system_position=None,
        dirty=DirtyField.ALL,
    )
    entry.update_description()
    queue_save(manager, entry)
    manager.add(entry)
    return entry


def copy_desktop_file(manager: AutostartManager, source: Path) -> AutostartEntry | None:
    """Import an existing desktop file as a new, enabled user entry."""
    source = Path(source)
    basename = find_free_basename(manager, source.name)
    if basename is None:
        return None

    target = manager.user_dir / basename
    ensure_user_dir(manager)
    try:
        shutil.copyfile(source, target)
    except OSError as exc:
        logger.warning("Could not copy %s to %s: %s", source, target, exc)
        return None

    record = load_entry_record(target, manager.desktop_names)
    if record is None:
        try:
            target.unlink()
        except OSError as exc:
            logger.warning("Could not remove %s: %s", target, exc)
        return None

    entry = AutostartEntry(basename=basename, path=target, xdg_position=USER_POSITION)
    apply_record(entry, record)
    # Listeners first see the entry in its final, enabled state.
    if entry.hidden:
        entry.hidden = False
        entry.dirty |= DirtyField.HIDDEN
        queue_save(manager, entry)
    manager.add(entry)
    return entry
