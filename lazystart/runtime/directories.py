"""Ordered autostart directory table.

Position 0 is the user's writable autostart directory; positions 1..N are
read-only system directories, highest priority first.
"""

from __future__ import annotations

import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from platformdirs.unix import Unix

AUTOSTART_SUBDIR = "autostart"
USER_POSITION = 0


@dataclass(frozen=True)
class AutostartDirectories:
    """Immutable precedence table of autostart directories."""

    paths: tuple[Path, ...]

    def __post_init__(self) -> None:
        if not self.paths:
            raise ValueError("at least the user autostart directory is required")

    @classmethod
    def from_paths(cls, paths: Iterable[Path | str]) -> AutostartDirectories:
        """Build a table, dropping repeated directories but keeping first-seen order."""
        unique: list[Path] = []
        for raw in paths:
            path = Path(raw).expanduser()
            if path not in unique:
                unique.append(path)
        return cls(paths=tuple(unique))

    @classmethod
    def from_environment(cls) -> AutostartDirectories:
        """Resolve ``$XDG_CONFIG_HOME`` and ``$XDG_CONFIG_DIRS`` autostart dirs."""
        dirs = Unix(multipath=True)
        config_roots = [dirs.user_config_dir]
        config_roots.extend(p for p in dirs.site_config_dir.split(os.pathsep) if p.strip())
        return cls.from_paths(Path(root) / AUTOSTART_SUBDIR for root in config_roots)

    @property
    def user_dir(self) -> Path:
        return self.paths[USER_POSITION]

    def __len__(self) -> int:
        return len(self.paths)

    def dir_for(self, position: int | None) -> Path | None:
        if position is None or position < 0 or position >= len(self.paths):
            return None
        return self.paths[position]

    def find_basename(self, basename: str, *, start: int = 0) -> tuple[int, Path] | None:
        """Return the first ``(position, path)`` at or after ``start`` holding ``basename``."""
        for position in range(max(0, start), len(self.paths)):
            candidate = self.paths[position] / basename
            if candidate.is_file():
                return position, candidate
        return None
