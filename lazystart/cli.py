"""Command-line front door for lazystart.

Parses CLI options, builds the entry registry from the XDG autostart
directories and dispatches one subcommand. Mutating commands flush their
debounced writes before exiting.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .entries import (
    AutostartEntry,
    AutostartManager,
    EntryEvent,
    copy_desktop_file,
    create_entry,
    delete_entry,
    set_hidden,
    update_entry,
)
from .runtime import config
from .runtime.directories import AutostartDirectories
from .runtime.loop import run_event_loop
from .runtime.timers import TimerLoop
from .runtime.watch import AutostartWatcher


def _nonnegative_int(value: str) -> int:
    """argparse type for delays in seconds."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazystart",
        description="Manage XDG autostart entries across user and system directories.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details.")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log errors.")
    parser.add_argument("--user-dir", type=Path, default=None, help="Override the writable autostart directory.")
    parser.add_argument(
        "--system-dir",
        type=Path,
        action="append",
        default=None,
        help="Override the system autostart directories (repeatable, highest priority first).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    list_parser = sub.add_parser("list", help="List autostart entries.")
    list_parser.add_argument("--all", action="store_true", help="Include hidden and NoDisplay entries.")

    add_parser = sub.add_parser("add", help="Create a new autostart entry.")
    add_parser.add_argument("exec", help="Command line to launch.")
    add_parser.add_argument("--name", default=None)
    add_parser.add_argument("--comment", default=None)
    add_parser.add_argument("--delay", type=_nonnegative_int, default=0)

    edit_parser = sub.add_parser("edit", help="Change fields of an entry.")
    edit_parser.add_argument("basename")
    edit_parser.add_argument("--name", default=None)
    edit_parser.add_argument("--comment", default=None)
    edit_parser.add_argument("--exec", dest="exec_", default=None)
    edit_parser.add_argument("--delay", type=_nonnegative_int, default=None)

    for command, help_text in (
        ("enable", "Launch the entry at session start."),
        ("disable", "Keep the entry but do not launch it."),
        ("remove", "Delete the entry (or hide it when a system copy exists)."),
    ):
        command_parser = sub.add_parser(command, help=help_text)
        command_parser.add_argument("basename")

    copy_parser = sub.add_parser("copy", help="Import an existing desktop file.")
    copy_parser.add_argument("file", type=Path)

    sub.add_parser("watch", help="Print entry changes until interrupted.")
    return parser


def configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.ERROR if quiet else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_manager(user_dir: Path | None, system_dirs: list[Path] | None) -> AutostartManager:
    """Create a filled registry, honoring directory overrides."""
    if user_dir is None and system_dirs is None:
        directories = AutostartDirectories.from_environment()
    else:
        defaults = AutostartDirectories.from_environment()
        paths = [user_dir if user_dir is not None else defaults.user_dir]
        paths.extend(system_dirs if system_dirs is not None else defaults.paths[1:])
        directories = AutostartDirectories.from_paths(paths)

    manager = AutostartManager(
        directories,
        desktop_names=config.load_desktop_names(),
        timers=TimerLoop(),
        save_delay=config.load_save_delay_seconds(),
    )
    manager.fill()
    return manager


def format_entry(entry: AutostartEntry) -> str:
    state = "disabled" if entry.hidden else "enabled"
    if entry.nodisplay:
        state += ",nodisplay"
    return f"{state:<18} {entry.basename:<32} delay={entry.delay:<4} {entry.primary_text}  ({entry.path})"


def _require_entry(manager: AutostartManager, basename: str) -> AutostartEntry:
    entry = manager.find(basename)
    if entry is None and not basename.endswith(".desktop"):
        entry = manager.find(f"{basename}.desktop")
    if entry is None:
        raise SystemExit(f"No autostart entry named {basename!r}")
    return entry


def _watch(manager: AutostartManager) -> None:
    def print_event(event: EntryEvent) -> None:
        sys.stdout.write(f"{event.kind} {event.basename}\n")
        sys.stdout.flush()

    watcher = AutostartWatcher(
        manager.directories,
        monotonic=manager.timers.now,
        poll_seconds=config.load_watch_poll_seconds(),
    )
    watcher.prime()
    manager.subscribe(print_event)
    try:
        run_event_loop(manager, watcher, should_stop=lambda: False)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments and run one subcommand; returns the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    manager = build_manager(args.user_dir, args.system_dir)

    if args.command == "list":
        for entry in manager.entries(include_hidden=args.all):
            sys.stdout.write(format_entry(entry) + "\n")
        return 0

    if args.command == "watch":
        _watch(manager)
        return 0

    if args.command == "add":
        try:
            entry = create_entry(manager, name=args.name, comment=args.comment, exec_=args.exec, delay=args.delay)
        except ValueError as exc:
            sys.stderr.write(f"Could not create an autostart entry: {exc}\n")
            return 1
        if entry is None:
            sys.stderr.write(f"Could not create an autostart entry for {args.exec!r}\n")
            return 1
        sys.stdout.write(f"{entry.basename}\n")
    elif args.command == "copy":
        if not args.file.is_file():
            raise SystemExit(f"Path not found: {args.file}")
        entry = copy_desktop_file(manager, args.file)
        if entry is None:
            sys.stderr.write(f"Could not import {args.file}\n")
            return 1
        sys.stdout.write(f"{entry.basename}\n")
    else:
        entry = _require_entry(manager, args.basename)
        if args.command == "edit":
            update_entry(
                manager,
                entry,
                name=args.name if args.name is not None else entry.name,
                comment=args.comment if args.comment is not None else entry.comment,
                exec_=args.exec_ if args.exec_ is not None else entry.exec,
                delay=args.delay if args.delay is not None else entry.delay,
            )
        elif args.command in ("enable", "disable"):
            set_hidden(manager, entry, args.command == "disable")
        elif args.command == "remove":
            delete_entry(manager, entry)

    return 0 if manager.flush_all() else 1
