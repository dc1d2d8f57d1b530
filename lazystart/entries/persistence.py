"""Debounced saving of entry edits into the user autostart directory.

Edits mark fields dirty and (re)arm one timer per entry. When the timer
fires the entry is either written, or, when the user copy would be identical
to the system file it shadows, the user copy is deleted instead.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..desktop_file import (
    KEY_COMMENT,
    KEY_EXEC,
    KEY_HIDDEN,
    KEY_NAME,
    DesktopFile,
    DesktopFileError,
    set_autostart_delay,
)
from .loader import read_entry_record
from .types import AutostartEntry, DirtyField, str_equal

if TYPE_CHECKING:
    from .manager import AutostartManager

logger = logging.getLogger(__name__)

USER_DIR_MODE = 0o700


def queue_save(manager: AutostartManager, entry: AutostartEntry) -> None:
    """Arm (or re-arm) the save timer, forking the entry into the user dir."""
    if entry.save_timer is not None:
        entry.save_timer.cancel()
        entry.save_timer = None

    if entry.xdg_position != 0:
        entry.xdg_position = 0
        # A previous failed save already recorded the true origin.
        if entry.pending_origin_path is None:
            entry.pending_origin_path = entry.path
        entry.path = manager.user_dir / entry.basename

    entry.save_timer = manager.timers.call_later(manager.save_delay, lambda: _on_save_timer(manager, entry))


def _on_save_timer(manager: AutostartManager, entry: AutostartEntry) -> None:
    entry.save_timer = None
    save_entry(manager, entry)


def user_equals_system(manager: AutostartManager, entry: AutostartEntry) -> Path | None:
    """Return the shadowed system file when it already holds the entry's values.

    ``nodisplay`` is not part of the comparison.
    """
    system_dir = manager.dir_for(entry.xdg_system_position)
    if system_dir is None:
        return None

    system_path = system_dir / entry.basename
    record = read_entry_record(system_path)
    if record is None:
        return None

    if record.hidden != entry.hidden:
        return None
    if not str_equal(record.name, entry.name):
        return None
    if not str_equal(record.comment, entry.comment):
        return None
    if not str_equal(record.exec, entry.exec):
        return None
    if not str_equal(record.icon, entry.icon):
        return None
    if record.delay != entry.delay:
        return None
    return system_path


def _save_done(entry: AutostartEntry) -> None:
    entry.dirty = DirtyField.NONE
    entry.pending_origin_path = None


def ensure_user_dir(manager: AutostartManager) -> None:
    try:
        manager.user_dir.mkdir(mode=USER_DIR_MODE, parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Could not create %s: %s", manager.user_dir, exc)


def _build_desktop_file(entry: AutostartEntry) -> DesktopFile:
    """Start from the origin file and apply only the dirty fields."""
    base_path = entry.pending_origin_path or entry.path
    try:
        desktop_file = DesktopFile.load(base_path)
    except DesktopFileError:
        desktop_file = DesktopFile.populated()

    if entry.dirty & DirtyField.HIDDEN:
        desktop_file.set_boolean(KEY_HIDDEN, entry.hidden)
    if entry.dirty & DirtyField.NAME:
        desktop_file.set_locale_string(KEY_NAME, entry.name)
        desktop_file.ensure_untranslated(KEY_NAME)
    if entry.dirty & DirtyField.COMMENT:
        desktop_file.set_locale_string(KEY_COMMENT, entry.comment)
        desktop_file.ensure_untranslated(KEY_COMMENT)
    if entry.dirty & DirtyField.EXEC:
        desktop_file.set_string(KEY_EXEC, entry.exec)
    if entry.dirty & DirtyField.DELAY:
        set_autostart_delay(desktop_file, entry.delay)
    return desktop_file


def save_entry(manager: AutostartManager, entry: AutostartEntry) -> bool:
    """Persist pending edits; return whether the entry is now clean on disk.

    On failure the dirty mask and origin path are kept so the next edit or
    flush retries from the same origin.
    """
    system_path = user_equals_system(manager, entry)
    if system_path is not None:
        if entry.path.exists():
            try:
                entry.path.unlink()
            except OSError as exc:
                logger.warning("Could not remove redundant %s: %s", entry.path, exc)
        entry.path = system_path
        entry.xdg_position = entry.xdg_system_position
        _save_done(entry)
        return True

    desktop_file = _build_desktop_file(entry)
    ensure_user_dir(manager)
    try:
        desktop_file.save(entry.path)
    except OSError as exc:
        logger.warning("Could not save %s file: %s", entry.path, exc)
        return False

    entry.suppress_next_change_event = True
    _save_done(entry)
    return True


def flush_entry(manager: AutostartManager, entry: AutostartEntry) -> bool:
    """Save now instead of waiting for the timer; retries a failed save too."""
    if entry.save_timer is not None:
        entry.save_timer.cancel()
        entry.save_timer = None
    if not entry.dirty:
        return True
    return save_entry(manager, entry)


def dispose_entry(manager: AutostartManager, entry: AutostartEntry) -> None:
    """Teardown: never leave an armed timer behind, and never drop its edits."""
    if entry.save_timer is not None:
        entry.save_timer.cancel()
        entry.save_timer = None
        save_entry(manager, entry)
