from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from lazystart.runtime.directories import AutostartDirectories
from lazystart.runtime.watch import WATCH_CHANGED, WATCH_CREATED, WATCH_DELETED, AutostartWatcher


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class AutostartWatcherTests(unittest.TestCase):
    def test_poll_reports_created_changed_and_deleted_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            directories = AutostartDirectories.from_paths([root / "user", root / "system"])
            for path in directories.paths:
                path.mkdir()
            stale = directories.paths[1] / "old.desktop"
            stale.write_text("x", encoding="utf-8")
            edited = directories.user_dir / "edit.desktop"
            edited.write_text("x", encoding="utf-8")

            watcher = AutostartWatcher(directories, monotonic=_FakeClock())
            watcher.prime()
            self.assertEqual(watcher.poll(), [])

            stale.unlink()
            edited.write_text("longer content", encoding="utf-8")
            (directories.paths[1] / "new.desktop").write_text("x", encoding="utf-8")
            (directories.paths[1] / "ignored.txt").write_text("x", encoding="utf-8")
            events = watcher.poll()

            self.assertEqual(
                [(event.kind, event.path.name, event.position) for event in events],
                [
                    (WATCH_DELETED, "old.desktop", 1),
                    (WATCH_CHANGED, "edit.desktop", 0),
                    (WATCH_CREATED, "new.desktop", 1),
                ],
            )
            self.assertEqual(events[0].path, stale)

    def test_missing_directory_appearing_later_is_picked_up(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            directories = AutostartDirectories.from_paths([root / "user"])
            watcher = AutostartWatcher(directories, monotonic=_FakeClock())
            watcher.prime()

            directories.user_dir.mkdir()
            (directories.user_dir / "a.desktop").write_text("x", encoding="utf-8")

            self.assertEqual([event.kind for event in watcher.poll()], [WATCH_CREATED])

    def test_maybe_poll_respects_interval(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            directories = AutostartDirectories.from_paths([root])
            clock = _FakeClock()
            watcher = AutostartWatcher(directories, monotonic=clock, poll_seconds=1.0)
            self.assertEqual(watcher.next_poll_at(), 0.0)
            watcher.prime()

            (root / "a.desktop").write_text("x", encoding="utf-8")
            clock.now = 0.5
            self.assertEqual(watcher.maybe_poll(), [])
            self.assertEqual(watcher.next_poll_at(), 1.0)

            clock.now = 1.0
            self.assertEqual(len(watcher.maybe_poll()), 1)
            self.assertEqual(watcher.next_poll_at(), 2.0)

    def test_first_poll_without_prime_only_records_baseline(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "a.desktop").write_text("x", encoding="utf-8")
            watcher = AutostartWatcher(AutostartDirectories.from_paths([root]), monotonic=_FakeClock())

            self.assertEqual(watcher.poll(), [])


if __name__ == "__main__":
    unittest.main()
