"""Desktop-entry key/value file codec.

Reads and writes ``.desktop`` style files while keeping comments, unknown
keys and translations in place, so an edited file differs from its origin
only in the keys that were actually set.
"""

from __future__ import annotations

import contextlib
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

DESKTOP_GROUP = "Desktop Entry"

KEY_TYPE = "Type"
KEY_HIDDEN = "Hidden"
KEY_NO_DISPLAY = "NoDisplay"
KEY_NAME = "Name"
KEY_COMMENT = "Comment"
KEY_EXEC = "Exec"
KEY_ICON = "Icon"
KEY_ONLY_SHOW_IN = "OnlyShowIn"
KEY_NOT_SHOW_IN = "NotShowIn"
KEY_AUTOSTART_DELAY = "X-MATE-Autostart-Delay"

_KEY_RE = re.compile(r"^[^\[\]=]+(\[[^\[\]]+\])?$")
_UNESCAPES = {"s": " ", "n": "\n", "t": "\t", "r": "\r", "\\": "\\"}


class DesktopFileError(ValueError):
    """Raised when a desktop file cannot be read or parsed."""


def _locale_variants(locale: str) -> list[str]:
    """Expand ``lang_TERRITORY.CODESET@MODIFIER`` into fallback variants.

    Ordering matches GLib: modifier before territory before codeset, most
    specific first.
    """
    rest, _, modifier = locale.partition("@")
    rest, _, codeset = rest.partition(".")
    language, _, territory = rest.partition("_")
    variants: list[str] = []
    for mod in ([modifier, ""] if modifier else [""]):
        for terr in ([territory, ""] if territory else [""]):
            for cs in ([codeset, ""] if codeset else [""]):
                name = language
                if terr:
                    name += f"_{terr}"
                if cs:
                    name += f".{cs}"
                if mod:
                    name += f"@{mod}"
                if name not in variants:
                    variants.append(name)
    return variants


def language_names(environ: Mapping[str, str] | None = None) -> tuple[str, ...]:
    """Return the user's preferred language names, always ending with ``C``."""
    env = os.environ if environ is None else environ
    value = ""
    for var in ("LANGUAGE", "LC_ALL", "LC_MESSAGES", "LANG"):
        value = env.get(var, "")
        if value:
            break

    names: list[str] = []
    for locale in value.split(":"):
        locale = locale.strip()
        if not locale or locale == "POSIX" or locale == "C" or locale.startswith("C."):
            continue
        for variant in _locale_variants(locale):
            if variant not in names:
                names.append(variant)
    names.append("C")
    return tuple(names)


def unescape_value(raw: str) -> str:
    out: list[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw) and raw[i + 1] in _UNESCAPES:
            out.append(_UNESCAPES[raw[i + 1]])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def escape_value(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )
    if escaped.startswith(" "):
        escaped = "\\s" + escaped[1:]
    return escaped


def _split_list(raw: str) -> list[str]:
    """Split a ``;``-separated raw value, honoring ``\\;`` escapes."""
    items: list[str] = []
    current: list[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw):
            nxt = raw[i + 1]
            current.append(";" if nxt == ";" else raw[i : i + 2])
            i += 2
            continue
        if ch == ";":
            items.append(unescape_value("".join(current)))
            current = []
        else:
            current.append(ch)
        i += 1
    if current:
        items.append(unescape_value("".join(current)))
    return items


@dataclass
class _Line:
    """One physical line: a ``key=value`` pair, or a comment/blank when ``key`` is ``None``."""

    key: str | None
    text: str


@dataclass
class _Group:
    name: str
    lines: list[_Line] = field(default_factory=list)

    def get_raw(self, key: str) -> str | None:
        for line in self.lines:
            if line.key == key:
                return line.text
        return None

    def set_raw(self, key: str, raw: str) -> None:
        for line in self.lines:
            if line.key == key:
                line.text = raw
                return
        # Keep new keys ahead of trailing blank lines separating groups.
        insert_at = len(self.lines)
        while insert_at > 0 and self.lines[insert_at - 1].key is None and not self.lines[insert_at - 1].text.strip():
            insert_at -= 1
        self.lines.insert(insert_at, _Line(key=key, text=raw))

    def keys(self) -> list[str]:
        return [line.key for line in self.lines if line.key is not None]


class DesktopFile:
    """In-memory desktop entry file with typed access to the main group."""

    def __init__(self) -> None:
        self._preamble: list[_Line] = []
        self._groups: list[_Group] = []

    @classmethod
    def populated(cls) -> DesktopFile:
        """Return the smallest record other readers accept as valid."""
        desktop_file = cls()
        desktop_file.set_string(KEY_TYPE, "Application")
        desktop_file.set_string(KEY_EXEC, "/bin/false")
        return desktop_file

    @classmethod
    def parse(cls, text: str) -> DesktopFile:
        desktop_file = cls()
        current: _Group | None = None
        for lineno, raw_line in enumerate(text.splitlines(), start=1):
            stripped = raw_line.strip()
            if not stripped or stripped.startswith("#"):
                target = current.lines if current is not None else desktop_file._preamble
                target.append(_Line(key=None, text=raw_line))
                continue
            if stripped.startswith("["):
                if not stripped.endswith("]") or len(stripped) < 3 or "[" in stripped[1:-1] or "]" in stripped[1:-1]:
                    raise DesktopFileError(f"line {lineno}: invalid group header {stripped!r}")
                current = desktop_file._group(stripped[1:-1], create=True)
                continue

            key, sep, value = raw_line.partition("=")
            key = key.strip()
            if not sep or not _KEY_RE.match(key):
                raise DesktopFileError(f"line {lineno}: invalid key/value line {stripped!r}")
            if current is None:
                raise DesktopFileError(f"line {lineno}: key {key!r} outside of any group")
            current.set_raw(key, value.lstrip())

        if desktop_file._group(DESKTOP_GROUP) is None:
            raise DesktopFileError(f"missing [{DESKTOP_GROUP}] group")
        return desktop_file

    @classmethod
    def load(cls, path: Path) -> DesktopFile:
        """Load and parse ``path``; every failure surfaces as ``DesktopFileError``."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DesktopFileError(f"cannot read {path}: {exc}") from exc
        try:
            return cls.parse(text)
        except DesktopFileError as exc:
            raise DesktopFileError(f"{path}: {exc}") from exc

    def _group(self, name: str, *, create: bool = False) -> _Group | None:
        for group in self._groups:
            if group.name == name:
                return group
        if not create:
            return None
        group = _Group(name=name)
        self._groups.append(group)
        return group

    def _main_group(self) -> _Group:
        group = self._group(DESKTOP_GROUP, create=True)
        assert group is not None
        return group

    def keys(self) -> list[str]:
        group = self._group(DESKTOP_GROUP)
        return group.keys() if group is not None else []

    def has_key(self, key: str) -> bool:
        return self.get_raw(key) is not None

    def get_raw(self, key: str) -> str | None:
        group = self._group(DESKTOP_GROUP)
        return group.get_raw(key) if group is not None else None

    def get_string(self, key: str) -> str | None:
        raw = self.get_raw(key)
        return unescape_value(raw) if raw is not None else None

    def get_locale_string(self, key: str, languages: tuple[str, ...] | None = None) -> str | None:
        """Return the best translation of ``key``, falling back to the plain key."""
        for language in languages if languages is not None else language_names():
            if language == "C":
                break
            raw = self.get_raw(f"{key}[{language}]")
            if raw is not None:
                return unescape_value(raw)
        return self.get_string(key)

    def get_boolean(self, key: str, default: bool = False) -> bool:
        raw = self.get_raw(key)
        if raw is None:
            return default
        value = raw.strip()
        if value in ("true", "1"):
            return True
        if value in ("false", "0"):
            return False
        return default

    def get_integer(self, key: str, default: int = 0) -> int:
        raw = self.get_raw(key)
        if raw is None:
            return default
        try:
            return int(raw.strip())
        except ValueError:
            return default

    def get_string_list(self, key: str) -> list[str] | None:
        raw = self.get_raw(key)
        return _split_list(raw) if raw is not None else None

    def set_string(self, key: str, value: str | None) -> None:
        self._main_group().set_raw(key, escape_value(value or ""))

    def set_boolean(self, key: str, value: bool) -> None:
        self._main_group().set_raw(key, "true" if value else "false")

    def set_integer(self, key: str, value: int) -> None:
        self._main_group().set_raw(key, str(int(value)))

    def set_locale_string(self, key: str, value: str | None, languages: tuple[str, ...] | None = None) -> None:
        """Store ``value`` for the current locale, or the plain key under C."""
        locale = None
        for language in languages if languages is not None else language_names():
            if "." not in language:
                locale = language
                break
        if locale is None or locale == "C":
            self.set_string(key, value)
        else:
            self.set_string(f"{key}[{locale}]", value)

    def ensure_untranslated(self, key: str, languages: tuple[str, ...] | None = None) -> None:
        """Give non-localized readers a value when only a translation exists."""
        if self.has_key(key):
            return
        value = self.get_locale_string(key, languages)
        if value is not None:
            self.set_string(key, value)

    def to_text(self) -> str:
        out = [line.text for line in self._preamble]
        for group in self._groups:
            out.append(f"[{group.name}]")
            for line in group.lines:
                out.append(line.text if line.key is None else f"{line.key}={line.text}")
        return "\n".join(out) + "\n"

    def save(self, path: Path) -> None:
        """Atomically write the file; raises ``OSError`` on failure."""
        path = Path(path)
        tmp = path.parent / (path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as handle:
                handle.write(self.to_text())
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp, path)
        except OSError:
            with contextlib.suppress(OSError):
                tmp.unlink(missing_ok=True)
            raise


def get_autostart_delay(desktop_file: DesktopFile) -> int:
    """Read the launch delay in seconds; malformed or negative values read as 0."""
    return max(0, desktop_file.get_integer(KEY_AUTOSTART_DELAY, 0))


def set_autostart_delay(desktop_file: DesktopFile, delay: int) -> None:
    desktop_file.set_integer(KEY_AUTOSTART_DELAY, max(0, int(delay)))
