"""Domain datatypes for autostart entries."""

from __future__ import annotations

import enum
import os
from dataclasses import dataclass, field
from pathlib import Path

from ..runtime.timers import TimerHandle

NO_NAME = "No name"
NO_DESCRIPTION = "No description"

EVENT_ADDED = "added"
EVENT_CHANGED = "changed"
EVENT_REMOVED = "removed"


class DirtyField(enum.IntFlag):
    """Persisted fields changed since the last successful write.

    There is no icon bit: the icon is never edited, it is only compared
    when checking whether a user override still differs from its system copy.
    """

    NONE = 0
    HIDDEN = 0x0001
    NAME = 0x0002
    EXEC = 0x0004
    COMMENT = 0x0008
    DELAY = 0x0010
    ALL = 0xFFFF


def text_is_blank(text: str | None) -> bool:
    return text is None or not text.strip()


def str_equal(a: str | None, b: str | None) -> bool:
    """Compare strings treating an empty value and a missing one as equal."""
    return (a or "") == (b or "")


@dataclass(frozen=True)
class EntryIcon:
    """Display icon: a file on disk or a name looked up in the icon theme."""

    kind: str
    value: str

    @classmethod
    def from_icon(cls, icon: str | None) -> EntryIcon | None:
        if not icon:
            return None
        if os.path.isabs(icon):
            return cls(kind="file", value=icon)
        return cls(kind="themed", value=icon)


@dataclass(frozen=True)
class EntryRecord:
    """Field values read from one desktop file, before any fallback."""

    hidden: bool = False
    nodisplay: bool = False
    name: str | None = None
    exec: str | None = None
    comment: str | None = None
    icon: str | None = None
    delay: int = 0


@dataclass(frozen=True)
class EntryEvent:
    kind: str
    basename: str


def build_description(name: str | None, exec_: str | None, comment: str | None) -> str:
    if not text_is_blank(name):
        primary = name
    elif not text_is_blank(exec_):
        primary = exec_
    else:
        primary = NO_NAME
    secondary = comment if not text_is_blank(comment) else NO_DESCRIPTION
    return f"{primary}\n{secondary}"


@dataclass(eq=False)
class AutostartEntry:
    """One logical autostart program, identified by its file basename.

    ``xdg_position`` is the index of the directory ``path`` points into and
    ``xdg_system_position`` the best system directory (index >= 1) also
    holding ``basename``; both are ``None`` when unknown.
    """

    basename: str
    path: Path
    hidden: bool = False
    nodisplay: bool = False
    name: str | None = None
    exec: str | None = None
    comment: str | None = None
    icon: str | None = None
    delay: int = 0
    description: str = ""
    xdg_position: int | None = None
    xdg_system_position: int | None = None
    dirty: DirtyField = DirtyField.NONE
    pending_origin_path: Path | None = None
    suppress_next_change_event: bool = False
    save_timer: TimerHandle | None = field(default=None, repr=False)
    _icon_cache: tuple[str | None, EntryIcon | None] | None = field(default=None, repr=False)

    @property
    def resolved_icon(self) -> EntryIcon | None:
        if self._icon_cache is None or self._icon_cache[0] != self.icon:
            self._icon_cache = (self.icon, EntryIcon.from_icon(self.icon))
        return self._icon_cache[1]

    @property
    def save_pending(self) -> bool:
        return self.save_timer is not None

    @property
    def primary_text(self) -> str:
        return self.description.partition("\n")[0]

    def update_description(self) -> None:
        self.description = build_description(self.name, self.exec, self.comment)
