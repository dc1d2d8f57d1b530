"""Tests for the desktop-entry codec.

Covers parsing failures, typed getters, localized lookups and writes that
keep unrelated content intact.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from lazystart.desktop_file import (
    DesktopFile,
    DesktopFileError,
    get_autostart_delay,
    language_names,
    set_autostart_delay,
)

SAMPLE = """\
# Installed by the distribution
[Desktop Entry]
Type=Application
Name=Clock
Name[de]=Uhr
Name[de_AT]=Uhrl
Comment=Shows\\sthe time
Exec=clock --tray
OnlyShowIn=MATE;XFCE;
NotShowIn=KDE\\;Plasma;
X-MATE-Autostart-Delay=7
Hidden=true

[Desktop Action Quit]
Name=Quit
"""


class DesktopFileParsingTests(unittest.TestCase):
    def test_typed_getters_decode_values(self) -> None:
        desktop_file = DesktopFile.parse(SAMPLE)

        self.assertEqual(desktop_file.get_string("Exec"), "clock --tray")
        self.assertEqual(desktop_file.get_string("Comment"), "Shows the time")
        self.assertTrue(desktop_file.get_boolean("Hidden"))
        self.assertFalse(desktop_file.get_boolean("NoDisplay"))
        self.assertEqual(desktop_file.get_string_list("OnlyShowIn"), ["MATE", "XFCE"])
        self.assertEqual(desktop_file.get_string_list("NotShowIn"), ["KDE;Plasma"])
        self.assertEqual(get_autostart_delay(desktop_file), 7)
        self.assertIsNone(desktop_file.get_string("Icon"))

    def test_locale_string_prefers_most_specific_translation(self) -> None:
        desktop_file = DesktopFile.parse(SAMPLE)

        self.assertEqual(desktop_file.get_locale_string("Name", ("de_AT", "de", "C")), "Uhrl")
        self.assertEqual(desktop_file.get_locale_string("Name", ("de_CH", "de", "C")), "Uhr")
        self.assertEqual(desktop_file.get_locale_string("Name", ("fr", "C")), "Clock")
        self.assertEqual(desktop_file.get_locale_string("Name", ("C",)), "Clock")

    def test_invalid_lines_raise(self) -> None:
        for text in (
            "[Desktop Entry]\nthis is not a pair\n",
            "Name=before any group\n[Desktop Entry]\n",
            "[Desktop Entry\nName=x\n",
            "[Other]\nName=x\n",
        ):
            with self.subTest(text=text):
                with self.assertRaises(DesktopFileError):
                    DesktopFile.parse(text)

    def test_load_wraps_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(DesktopFileError):
                DesktopFile.load(Path(tmp) / "missing.desktop")

    def test_malformed_booleans_and_delay_fall_back(self) -> None:
        desktop_file = DesktopFile.parse(
            "[Desktop Entry]\nHidden=maybe\nX-MATE-Autostart-Delay=-4\nNoDisplay=1\n"
        )
        self.assertFalse(desktop_file.get_boolean("Hidden", False))
        self.assertTrue(desktop_file.get_boolean("NoDisplay"))
        self.assertEqual(get_autostart_delay(desktop_file), 0)

        desktop_file = DesktopFile.parse("[Desktop Entry]\nX-MATE-Autostart-Delay=soon\n")
        self.assertEqual(get_autostart_delay(desktop_file), 0)


class DesktopFileWritingTests(unittest.TestCase):
    def test_save_keeps_comments_translations_and_other_groups(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "clock.desktop"
            desktop_file = DesktopFile.parse(SAMPLE)
            desktop_file.set_boolean("Hidden", False)
            desktop_file.set_string("Exec", "clock --no-tray")
            set_autostart_delay(desktop_file, 3)
            desktop_file.save(target)

            text = target.read_text(encoding="utf-8")
            reloaded = DesktopFile.load(target)
            leftovers = sorted(p.name for p in Path(tmp).iterdir())

        self.assertEqual(leftovers, ["clock.desktop"])
        self.assertTrue(text.startswith("# Installed by the distribution\n[Desktop Entry]\n"))
        self.assertIn("Name[de]=Uhr\n", text)
        self.assertIn("[Desktop Action Quit]\nName=Quit\n", text)
        self.assertFalse(reloaded.get_boolean("Hidden", True))
        self.assertEqual(reloaded.get_string("Exec"), "clock --no-tray")
        self.assertEqual(get_autostart_delay(reloaded), 3)

    def test_new_keys_are_added_to_main_group(self) -> None:
        desktop_file = DesktopFile.parse(SAMPLE)
        desktop_file.set_string("Icon", "clock-app")

        text = desktop_file.to_text()
        main_group = text.split("[Desktop Action Quit]")[0]
        self.assertIn("Icon=clock-app\n", main_group)

    def test_values_are_escaped_and_unescaped(self) -> None:
        desktop_file = DesktopFile.populated()
        desktop_file.set_string("Comment", " leading space\nand a newline\\")

        self.assertIn("Comment=\\sleading space\\nand a newline\\\\\n", desktop_file.to_text())
        reparsed = DesktopFile.parse(desktop_file.to_text())
        self.assertEqual(reparsed.get_string("Comment"), " leading space\nand a newline\\")

    def test_populated_record_is_valid(self) -> None:
        reparsed = DesktopFile.parse(DesktopFile.populated().to_text())
        self.assertEqual(reparsed.get_string("Type"), "Application")
        self.assertEqual(reparsed.get_string("Exec"), "/bin/false")

    def test_set_locale_string_uses_first_language_without_codeset(self) -> None:
        desktop_file = DesktopFile.populated()
        desktop_file.set_locale_string("Name", "Uhr", ("de_DE.UTF-8", "de_DE", "de", "C"))
        desktop_file.ensure_untranslated("Name", ("de_DE.UTF-8", "de_DE", "de", "C"))

        self.assertEqual(desktop_file.get_raw("Name[de_DE]"), "Uhr")
        self.assertEqual(desktop_file.get_raw("Name"), "Uhr")

    def test_set_locale_string_under_c_writes_plain_key(self) -> None:
        desktop_file = DesktopFile.populated()
        desktop_file.set_locale_string("Comment", None, ("C",))

        self.assertEqual(desktop_file.get_raw("Comment"), "")
        self.assertEqual(desktop_file.keys().count("Comment"), 1)

    def test_ensure_untranslated_keeps_existing_plain_value(self) -> None:
        desktop_file = DesktopFile.parse(SAMPLE)
        desktop_file.set_locale_string("Name", "Zeit", ("de", "C"))
        desktop_file.ensure_untranslated("Name", ("de", "C"))

        self.assertEqual(desktop_file.get_string("Name"), "Clock")
        self.assertEqual(desktop_file.get_locale_string("Name", ("de", "C")), "Zeit")


class LanguageNamesTests(unittest.TestCase):
    def test_variants_follow_glib_order(self) -> None:
        names = language_names({"LANG": "de_DE.UTF-8@euro"})
        self.assertEqual(
            names,
            (
                "de_DE.UTF-8@euro",
                "de_DE@euro",
                "de.UTF-8@euro",
                "de@euro",
                "de_DE.UTF-8",
                "de_DE",
                "de.UTF-8",
                "de",
                "C",
            ),
        )

    def test_language_overrides_lang_and_c_is_skipped(self) -> None:
        self.assertEqual(language_names({"LANGUAGE": "fr:C", "LANG": "de_DE"}), ("fr", "C"))
        self.assertEqual(language_names({"LC_ALL": "C.UTF-8"}), ("C",))
        self.assertEqual(language_names({}), ("C",))


if __name__ == "__main__":
    unittest.main()
