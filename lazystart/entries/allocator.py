"""Collision-free basenames for new user autostart files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..runtime.watch import DESKTOP_SUFFIX

if TYPE_CHECKING:
    from .manager import AutostartManager

FIND_MAX_TRY = 10000


def find_free_basename(manager: AutostartManager, suggested: str) -> str | None:
    """Return ``base.desktop``, ``base-1.desktop``, ... whichever is free first.

    A candidate is free when neither the registry nor the user directory
    knows it. Returns ``None`` after ``FIND_MAX_TRY`` candidates.
    """
    base = suggested.rsplit("/", 1)[-1]
    if base.endswith(DESKTOP_SUFFIX):
        base = base[: -len(DESKTOP_SUFFIX)]
    if not base:
        return None

    for attempt in range(FIND_MAX_TRY):
        candidate = f"{base}{DESKTOP_SUFFIX}" if attempt == 0 else f"{base}-{attempt}{DESKTOP_SUFFIX}"
        if manager.find(candidate) is None and not (manager.user_dir / candidate).exists():
            return candidate
    return None
