"""Tests for settings precedence and JSON preference persistence.

Flags beat ``git config twig.*`` which beats the JSON file; malformed files
fall back to defaults.
"""

from __future__ import annotations

import json
import logging
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from twig import config, logging_setup
from twig.status_model.rendering import DEFAULT_INDENT


class _FakeGitConfig:
    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values = dict(values or {})

    def config_value(self, key: str) -> str | None:
        return self.values.get(key)

    def config_regexp(self, pattern: str) -> dict[str, str]:
        prefix = pattern.lstrip("^").replace("\\.", ".")
        return {key: value for key, value in self.values.items() if key.startswith(prefix)}


class _ConfigFileTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.config_path = Path(self._tmp.name) / "twig" / "config.json"
        patcher = mock.patch("twig.config.CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)

    def write_raw(self, text: str) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(text, encoding="utf-8")


class ConfigFileTests(_ConfigFileTestCase):
    def test_missing_file_loads_empty(self) -> None:
        self.assertEqual(config.load_config(), {})

    def test_malformed_and_non_object_files_load_empty(self) -> None:
        self.write_raw("{not json")
        self.assertEqual(config.load_config(), {})
        self.write_raw("[1, 2, 3]")
        self.assertEqual(config.load_config(), {})

    def test_theme_name_round_trip_keeps_other_keys(self) -> None:
        config.save_config({"indent": 4})
        config.save_theme_name("rounded")
        self.assertEqual(config.load_theme_name(), "rounded")
        saved = json.loads(self.config_path.read_text(encoding="utf-8"))
        self.assertEqual(saved, {"indent": 4, "theme": "rounded"})

    def test_blank_theme_name_is_not_saved(self) -> None:
        config.save_theme_name("   ")
        self.assertFalse(self.config_path.exists())
        self.write_raw('{"theme": 7}')
        self.assertIsNone(config.load_theme_name())


class PrecedenceTests(_ConfigFileTestCase):
    def test_indent_precedence_and_clamping(self) -> None:
        config.save_config({"indent": 5})
        git = _FakeGitConfig({"twig.indent": "6"})
        self.assertEqual(config.resolve_indent(None), 5)
        self.assertEqual(config.resolve_indent(None, git), 6)
        self.assertEqual(config.resolve_indent(8, git), 8)
        self.assertEqual(config.resolve_indent(50, git), 10)
        self.assertEqual(config.resolve_indent(None, _FakeGitConfig({"twig.indent": "wide"})), 5)

    def test_indent_default(self) -> None:
        self.assertEqual(config.resolve_indent(None), DEFAULT_INDENT)

    def test_collapse_precedence(self) -> None:
        self.assertFalse(config.resolve_collapse(False))
        config.save_config({"collapse": True})
        self.assertTrue(config.resolve_collapse(False))
        self.assertFalse(config.resolve_collapse(False, _FakeGitConfig({"twig.collapse": "false"})))
        self.assertTrue(config.resolve_collapse(True, _FakeGitConfig({"twig.collapse": "false"})))

    def test_theme_precedence_skips_unknown_names(self) -> None:
        config.save_theme_name("ascii")
        self.assertEqual(config.resolve_theme_name(None), "ascii")
        git = _FakeGitConfig({"twig.theme": "Rounded"})
        self.assertEqual(config.resolve_theme_name(None, git), "rounded")
        self.assertEqual(config.resolve_theme_name("nerd", git), "nerd")
        self.assertEqual(config.resolve_theme_name("sparkly", git), "rounded")

    def test_key_overrides_merge_json_then_git(self) -> None:
        config.save_config({"keys": {"Quit": "x", "stage": "a", "bad": 3}})
        git = _FakeGitConfig({"twig.key.stage": "b", "twig.indent": "4"})
        self.assertEqual(config.load_key_overrides(git), {"quit": "x", "stage": "b"})

    def test_glyph_overrides_come_from_git_config(self) -> None:
        git = _FakeGitConfig({"twig.theme.branch": "+", "twig.key.quit": "x"})
        self.assertEqual(config.load_glyph_overrides(git), {"branch": "+"})
        self.assertEqual(config.load_glyph_overrides(None), {})

    def test_resolve_settings(self) -> None:
        git = _FakeGitConfig({"twig.collapse": "yes", "twig.theme": "ascii", "twig.key.commit": "C"})
        settings = config.resolve_settings(git, indent=4)
        self.assertEqual(settings.indent, 4)
        self.assertTrue(settings.collapse)
        self.assertEqual(settings.theme_name, "ascii")
        self.assertEqual(settings.key_overrides, {"commit": "C"})

    def test_parse_helpers(self) -> None:
        self.assertTrue(config.parse_bool("On"))
        self.assertFalse(config.parse_bool("0"))
        self.assertIsNone(config.parse_bool("maybe"))
        self.assertIsNone(config.parse_int(True))
        self.assertEqual(config.parse_int(" 7 "), 7)


class LoggingSetupTests(unittest.TestCase):
    def tearDown(self) -> None:
        logging_setup.reset_logging_for_tests()

    def test_level_from_name(self) -> None:
        self.assertEqual(logging_setup.level_from_name("debug"), logging.DEBUG)
        self.assertEqual(logging_setup.level_from_name(None), logging.WARNING)
        self.assertEqual(logging_setup.level_from_name("chatty"), logging.WARNING)

    def test_records_go_to_log_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "logs" / "twig.log"
            self.assertEqual(logging_setup.configure_logging("info", log_path), log_path)
            logging.getLogger("twig.session").info("staged %d path(s)", 2)
            logging.getLogger("twig.session").debug("hidden")
            logging_setup.reset_logging_for_tests()
            text = log_path.read_text(encoding="utf-8")
        self.assertIn("INFO twig.session: staged 2 path(s)", text)
        self.assertNotIn("hidden", text)

    def test_reconfigure_replaces_handler(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            logging_setup.configure_logging("info", Path(tmp) / "a.log")
            logging_setup.configure_logging("info", Path(tmp) / "b.log")
            file_handlers = [
                handler for handler in logging.getLogger("twig").handlers if isinstance(handler, logging.FileHandler)
            ]
            self.assertEqual(len(file_handlers), 1)
            logging_setup.reset_logging_for_tests()

    def test_unwritable_log_path_installs_one_silent_handler(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("", encoding="utf-8")
            for _attempt in range(3):
                self.assertIsNone(logging_setup.configure_logging("info", blocker / "twig.log"))
            handlers = logging.getLogger("twig").handlers
            self.assertEqual(len(handlers), 1)
            self.assertIsInstance(handlers[0], logging.NullHandler)

            log_path = Path(tmp) / "twig.log"
            self.assertEqual(logging_setup.configure_logging("info", log_path), log_path)
            handlers = logging.getLogger("twig").handlers
            self.assertEqual(len(handlers), 1)
            self.assertIsInstance(handlers[0], logging.FileHandler)
            logging_setup.reset_logging_for_tests()


if __name__ == "__main__":
    unittest.main()
