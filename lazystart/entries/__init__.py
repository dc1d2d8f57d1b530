"""Autostart entry engine.

This package contains the non-UI entry primitives:
- the entry datatype, dirty-field mask and change events
- desktop-file loading with desktop-environment filtering
- overlay resolution across prioritized directories
- debounced persistence with redundant-override cleanup
- basename allocation and user-facing edit operations
- the registry holding one entry per basename
"""

from __future__ import annotations

from .allocator import FIND_MAX_TRY, find_free_basename
from .editing import copy_desktop_file, create_entry, delete_entry, set_hidden, update_entry
from .loader import apply_record, is_eligible, load_entry_record, read_entry_record
from .manager import AutostartManager, EntryListener
from .persistence import dispose_entry, flush_entry, queue_save, save_entry, user_equals_system
from .resolver import reload_at, resolve_observation
from .types import (
    EVENT_ADDED,
    EVENT_CHANGED,
    EVENT_REMOVED,
    AutostartEntry,
    DirtyField,
    EntryEvent,
    EntryIcon,
    EntryRecord,
    str_equal,
    text_is_blank,
)

__all__ = [
    "AutostartEntry",
    "AutostartManager",
    "DirtyField",
    "EntryEvent",
    "EntryIcon",
    "EntryListener",
    "EntryRecord",
    "EVENT_ADDED",
    "EVENT_CHANGED",
    "EVENT_REMOVED",
    "FIND_MAX_TRY",
    "apply_record",
    "copy_desktop_file",
    "create_entry",
    "delete_entry",
    "dispose_entry",
    "find_free_basename",
    "flush_entry",
    "is_eligible",
    "load_entry_record",
    "queue_save",
    "read_entry_record",
    "reload_at",
    "resolve_observation",
    "save_entry",
    "set_hidden",
    "str_equal",
    "text_is_blank",
    "update_entry",
    "user_equals_system",
]
