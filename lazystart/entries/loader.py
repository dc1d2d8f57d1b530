"""Parse desktop files into entry records and filter by desktop environment."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ..desktop_file import (
    KEY_COMMENT,
    KEY_EXEC,
    KEY_HIDDEN,
    KEY_ICON,
    KEY_NAME,
    KEY_NO_DISPLAY,
    KEY_NOT_SHOW_IN,
    KEY_ONLY_SHOW_IN,
    DesktopFile,
    DesktopFileError,
    get_autostart_delay,
)
from .types import AutostartEntry, EntryRecord, text_is_blank

logger = logging.getLogger(__name__)


def is_eligible(desktop_file: DesktopFile, desktop_names: Iterable[str]) -> bool:
    """Apply ``OnlyShowIn``/``NotShowIn`` against the current desktop identifiers."""
    names = set(desktop_names)
    only_show_in = desktop_file.get_string_list(KEY_ONLY_SHOW_IN)
    if only_show_in is not None and names.isdisjoint(only_show_in):
        return False
    not_show_in = desktop_file.get_string_list(KEY_NOT_SHOW_IN)
    if not_show_in is not None and not names.isdisjoint(not_show_in):
        return False
    return True


def record_from_desktop_file(desktop_file: DesktopFile) -> EntryRecord:
    return EntryRecord(
        hidden=desktop_file.get_boolean(KEY_HIDDEN, False),
        nodisplay=desktop_file.get_boolean(KEY_NO_DISPLAY, False),
        name=desktop_file.get_locale_string(KEY_NAME),
        exec=desktop_file.get_string(KEY_EXEC),
        comment=desktop_file.get_locale_string(KEY_COMMENT),
        icon=desktop_file.get_locale_string(KEY_ICON),
        delay=get_autostart_delay(desktop_file),
    )


def _load(path: Path) -> DesktopFile | None:
    try:
        return DesktopFile.load(path)
    except DesktopFileError as exc:
        logger.debug("Skipping unparseable autostart file: %s", exc)
        return None


def read_entry_record(path: Path) -> EntryRecord | None:
    """Parse ``path`` without eligibility filtering; ``None`` when unreadable."""
    desktop_file = _load(path)
    if desktop_file is None:
        return None
    return record_from_desktop_file(desktop_file)


def load_entry_record(path: Path, desktop_names: Iterable[str]) -> EntryRecord | None:
    """Parse ``path`` and return its record only if it applies to this desktop."""
    desktop_file = _load(path)
    if desktop_file is None:
        return None
    if not is_eligible(desktop_file, desktop_names):
        logger.debug("Skipping %s: not shown in this desktop", path)
        return None
    return record_from_desktop_file(desktop_file)


def apply_record(entry: AutostartEntry, record: EntryRecord) -> None:
    """Copy ``record`` into ``entry``; a blank name falls back to the command."""
    entry.hidden = record.hidden
    entry.nodisplay = record.nodisplay
    entry.name = record.exec if text_is_blank(record.name) else record.name
    entry.exec = record.exec
    entry.comment = record.comment
    entry.icon = record.icon
    entry.delay = record.delay
    entry.update_description()
