"""Persistent JSON config helpers.

Stores the desktop identifiers used for ``OnlyShowIn``/``NotShowIn``
filtering, the write debounce delay and the watcher poll interval.
Malformed or missing config falls back to defaults.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "lazystart"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_DESKTOP_NAMES = ("MATE",)
DEFAULT_SAVE_DELAY_SECONDS = 2.0
DEFAULT_WATCH_POLL_SECONDS = 1.0


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("Ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem/serialization errors are logged and otherwise ignored so a
    read-only config directory never breaks entry management.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Could not save config %s: %s", CONFIG_PATH, exc)


def _load_positive_float(key: str, default: float) -> float:
    """Read a strictly positive number, rejecting booleans and other types."""
    value = load_config().get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if value <= 0:
        return default
    return float(value)


def load_desktop_names(environ: Mapping[str, str] | None = None) -> tuple[str, ...]:
    """Return the desktop identifiers entries are filtered against.

    A ``desktop_names`` list in the config wins; otherwise the colon-separated
    ``$XDG_CURRENT_DESKTOP`` is used; otherwise ``DEFAULT_DESKTOP_NAMES``.
    """
    value = load_config().get("desktop_names")
    if isinstance(value, list):
        names = tuple(item.strip() for item in value if isinstance(item, str) and item.strip())
        if names:
            return names

    env = os.environ if environ is None else environ
    current = env.get("XDG_CURRENT_DESKTOP", "")
    names = tuple(part.strip() for part in current.split(":") if part.strip())
    return names or DEFAULT_DESKTOP_NAMES


def save_desktop_names(names: list[str]) -> None:
    cleaned = [str(name).strip() for name in names if str(name).strip()]
    config = load_config()
    if cleaned:
        config["desktop_names"] = cleaned
    else:
        config.pop("desktop_names", None)
    save_config(config)


def load_save_delay_seconds() -> float:
    """Debounce window between the last edit and the disk write."""
    return _load_positive_float("save_delay_seconds", DEFAULT_SAVE_DELAY_SECONDS)


def load_watch_poll_seconds() -> float:
    return _load_positive_float("watch_poll_seconds", DEFAULT_WATCH_POLL_SECONDS)
