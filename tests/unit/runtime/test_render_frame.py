"""Tests for frame composition: tree rows, bottom bar, diff view and overlays."""

from __future__ import annotations

import unittest

from twig.ansi import display_width, strip_ansi
from twig.git import Worktree
from twig.runtime import render
from twig.runtime.keys import build_keymap
from twig.session import Session
from twig.ui_theme import DEFAULT_PALETTE, resolve_theme

from tests.unit.session.fakes import FakeBackend

PLAIN_ASCII = resolve_theme("ascii", no_color=True)
WIDTH = 60
HEIGHT = 14

DIFF = (
    "diff --git a/src/a.py b/src/a.py\n"
    "--- a/src/a.py\n"
    "+++ b/src/a.py\n"
    "@@ -1,2 +1,2 @@\n"
    "-two\n"
    "+TWO\n"
    "@@ -9,1 +9,2 @@\n"
    "+ten\n"
)


def make_session(lines=("## main", " M src/a.py", "?? b.txt"), stats=None, theme=PLAIN_ASCII):
    backend = FakeBackend(list(lines), stats)
    session = Session(backend, theme=theme)
    session.refresh()
    return session, backend


class HelperTests(unittest.TestCase):
    def test_selected_with_ansi_keeps_reverse_after_resets(self) -> None:
        self.assertEqual(render.selected_with_ansi("a\033[0mb"), "\033[7ma\033[0;7mb\033[0m")
        self.assertEqual(render.selected_with_ansi(""), "")

    def test_with_background_reapplies_after_resets(self) -> None:
        self.assertEqual(render.with_background("x\033[0my", "\033[41m"), "\033[41mx\033[0m\033[41my\033[0m")
        self.assertEqual(render.with_background("plain", ""), "plain")

    def test_status_indicator(self) -> None:
        palette = PLAIN_ASCII.palette
        self.assertEqual(render.status_indicator("+", palette), "[+]")
        self.assertEqual(render.status_indicator("?", palette), "[?]")
        self.assertEqual(render.status_indicator("M", palette), "[M]")
        self.assertEqual(render.status_indicator(" ", palette), "   ")

    def test_key_labels(self) -> None:
        self.assertEqual(render.key_label(" "), "Space")
        self.assertEqual(render.key_label("CTRL_R"), "Ctrl+R")
        self.assertEqual(render.key_label("ALT_v"), "Alt+v")
        self.assertEqual(render.key_label("gg"), "gg")

    def test_help_lines_follow_key_overrides(self) -> None:
        lines = [strip_ansi(line) for line in render.help_lines(build_keymap({"quit": "x"}), PLAIN_ASCII.palette)]
        quit_line = next(line for line in lines if line.endswith("quit"))
        self.assertIn("x", quit_line)
        self.assertIn("Navigation", lines)


class TreeFrameTests(unittest.TestCase):
    def test_lines_fill_the_screen_width_and_height(self) -> None:
        session, _backend = make_session()
        lines = render.compose_tree_lines(session, WIDTH, HEIGHT)
        self.assertEqual(len(lines), HEIGHT)
        for line in lines:
            self.assertEqual(display_width(line), WIDTH)

    def test_title_and_rows(self) -> None:
        session, _backend = make_session()
        lines = [strip_ansi(line) for line in render.compose_tree_lines(session, WIDTH, HEIGHT)]
        self.assertTrue(lines[0].startswith(" twig | Filter: All"))
        self.assertIn("On branch main", lines[0])
        self.assertTrue(lines[1].startswith(">> [M] |- src"))
        self.assertTrue(lines[2].startswith("   [M] |  `- a.py (M)"))
        self.assertTrue(lines[3].startswith("   [?] `- b.txt (??)"))

    def test_visual_rows_are_marked(self) -> None:
        session, _backend = make_session()
        session.toggle_visual_mode()
        session.next()
        lines = [strip_ansi(line) for line in render.compose_tree_lines(session, WIDTH, HEIGHT)]
        self.assertIn("-- VISUAL --", lines[0])
        self.assertTrue(lines[1].startswith(" * "))
        self.assertTrue(lines[2].startswith(">> "))

    def test_selected_row_gets_background_when_colored(self) -> None:
        session, _backend = make_session(theme=resolve_theme("ascii"))
        lines = render.compose_tree_lines(session, WIDTH, HEIGHT)
        self.assertTrue(lines[1].startswith(DEFAULT_PALETTE.selected_row))

    def test_bottom_bar_shows_totals_and_help_hint(self) -> None:
        session, _backend = make_session(stats={"src/a.py": (3, 1)})
        bar = strip_ansi(render.compose_bottom_bar(session, WIDTH))
        self.assertTrue(bar.startswith(" 2 files changed | 3 +++- 1"))
        self.assertTrue(bar.endswith("[?] Help "))

    def test_bottom_bar_summary_bar_caps_at_fifteen(self) -> None:
        session, _backend = make_session(stats={"src/a.py": (300, 100)})
        bar = strip_ansi(render.compose_bottom_bar(session, 80))
        self.assertIn("| 300 " + "+" * 11 + "-" * 4 + " 100", bar)

    def test_bottom_bar_prefers_search_then_status(self) -> None:
        session, _backend = make_session()
        session.set_status_message("Copied b.txt")
        self.assertIn("Copied b.txt", render.compose_bottom_bar(session, WIDTH))
        session.start_search()
        session.append_search_char("a")
        self.assertTrue(strip_ansi(render.compose_bottom_bar(session, WIDTH)).startswith(" /a_"))
        session.accept_search()
        self.assertTrue(strip_ansi(render.compose_bottom_bar(session, WIDTH)).startswith(" Search: a"))

    def test_split_layout_has_two_titled_panes(self) -> None:
        session, _backend = make_session(lines=["M  s.py", " M u.py"])
        session.toggle_layout()
        lines = [strip_ansi(line) for line in render.compose_tree_lines(session, WIDTH, HEIGHT)]
        self.assertTrue(any("Staged Changes" in line for line in lines))
        self.assertTrue(any("Unstaged Changes" in line for line in lines))
        self.assertEqual(len(lines), HEIGHT)

    def test_empty_pane_placeholder(self) -> None:
        session, _backend = make_session(lines=[])
        lines = [strip_ansi(line) for line in render.compose_tree_lines(session, WIDTH, HEIGHT)]
        self.assertIn(render.EMPTY_PANE_TEXT, lines[1])

    def test_easter_egg_centers_top_level_rows(self) -> None:
        session, _backend = make_session()
        session.toggle_easter_egg()
        lines = [strip_ansi(line) for line in render.compose_tree_lines(session, WIDTH, HEIGHT)]
        self.assertIn("actual tree view", lines[0])
        self.assertTrue(lines[1].startswith(" " * (WIDTH // 2)))

    def test_pane_layout_splits_body_rows(self) -> None:
        session, _backend = make_session()
        ((pane, title, rows),) = render.pane_layout(session, HEIGHT)
        self.assertIs(pane, session.unified)
        self.assertEqual(title, "")
        self.assertEqual(rows, HEIGHT - render.HEADER_ROWS - render.FOOTER_ROWS)


class DiffFrameTests(unittest.TestCase):
    def _open_diff(self):
        session, backend = make_session()
        backend.diff_text = DIFF
        session.next()
        session.show_diff()
        return session

    def test_diff_frame_shows_title_body_and_hints(self) -> None:
        session = self._open_diff()
        lines = [strip_ansi(line) for line in render.compose_diff_lines(session, WIDTH, HEIGHT)]
        self.assertEqual(len(lines), HEIGHT)
        self.assertIn("Diff src/a.py (p to patch)", lines[0])
        self.assertTrue(lines[1].startswith("diff --git"))
        self.assertIn("p patch", lines[-1])

    def test_patch_mode_footer_counts_hunks(self) -> None:
        session = self._open_diff()
        session.toggle_patch_mode()
        lines = [strip_ansi(line) for line in render.compose_diff_lines(session, WIDTH, HEIGHT)]
        self.assertIn("Patch Mode", lines[0])
        self.assertIn("hunk 1/2", lines[-1])
        self.assertTrue(lines[1].startswith("@@ -1,2 +1,2 @@"))

    def test_search_footer(self) -> None:
        session = self._open_diff()
        session.start_diff_search()
        session.append_diff_search_char("+")
        footer = strip_ansi(render.compose_diff_lines(session, WIDTH, HEIGHT)[-1])
        self.assertIn("Search: +_", footer)
        self.assertIn("[1/5]", footer)
        session.append_diff_search_char("zzz")
        footer = strip_ansi(render.compose_diff_lines(session, WIDTH, HEIGHT)[-1])
        self.assertIn("(no matches)", footer)


class FrameAndModalTests(unittest.TestCase):
    def test_render_frame_clears_and_positions_rows(self) -> None:
        session, _backend = make_session()
        frame = render.render_frame(session, build_keymap(), WIDTH, HEIGHT)
        self.assertTrue(frame.startswith("\033[H\033[J"))
        self.assertIn("\033[1;1H", frame)
        self.assertIn(f"\033[{HEIGHT};1H", frame)

    def test_help_modal(self) -> None:
        session, _backend = make_session()
        session.toggle_help()
        frame = strip_ansi(render.render_frame(session, build_keymap(), 80, 40))
        self.assertIn("twig help", frame)
        self.assertIn("Navigation", frame)
        self.assertIn("Ctrl+R", frame)

    def test_worktree_modal(self) -> None:
        session, backend = make_session()
        backend.worktree_list = [Worktree("/repo", "0123456789abcdef", "refs/heads/main")]
        session.toggle_worktrees()
        frame = strip_ansi(render.render_frame(session, build_keymap(), 80, 24))
        self.assertIn("Switch Linked Worktree", frame)
        self.assertIn("main", frame)
        self.assertIn("HEAD: 0123456789ab", frame)

    def test_commit_modal(self) -> None:
        session, _backend = make_session()
        session.open_commit_dialog()
        session.append_commit_char("w")
        session.append_commit_char("i")
        frame = strip_ansi(render.render_frame(session, build_keymap(), 80, 24))
        self.assertIn("Commit Message", frame)
        self.assertIn("wi_", frame)

    def test_help_body_rows_fit_terminal(self) -> None:
        self.assertLessEqual(render.help_body_rows(80, 10), 8)
        self.assertGreaterEqual(render.help_body_rows(80, 10), 1)


if __name__ == "__main__":
    unittest.main()
