"""Main interactive event loop for the terminal UI.

Coordinates rendering, status-message expiry, scroll bookkeeping and input
dispatch. Feature logic lives on ``Session``; ``SessionKeyHandler`` only maps
key tokens onto session actions for whichever overlay or view is active.
"""

from __future__ import annotations

import logging
import os
import shutil
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from ..session import Session, ViewMode
from . import keys as actions
from .input import read_key
from .keys import build_registry
from .render import diff_body_rows, help_body_rows, help_lines, pane_layout, render_frame, write_frame
from .terminal import TerminalController

logger = logging.getLogger(__name__)

INPUT_POLL_MS = 100
DEFAULT_PAGE_ROWS = 10

_SCROLL_DOWN_KEYS = frozenset({"j", "DOWN"})
_SCROLL_UP_KEYS = frozenset({"k", "UP"})
_PAGE_DOWN_KEYS = frozenset({"PAGE_DOWN", "CTRL_F", "CTRL_D"})
_PAGE_UP_KEYS = frozenset({"PAGE_UP", "CTRL_B", "CTRL_U"})


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Side effects the key handler performs outside the session."""

    copy_to_clipboard: Callable[[str], bool]
    save_theme_name: Callable[[str], None]


def _is_text_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class SessionKeyHandler:
    """Route key tokens to session actions for the active view or overlay."""

    def __init__(self, session: Session, keymap: Mapping[str, str], callbacks: RuntimeLoopCallbacks) -> None:
        self.session = session
        self.keymap = dict(keymap)
        self.callbacks = callbacks
        self.page_rows = DEFAULT_PAGE_ROWS
        self.diff_page_rows = DEFAULT_PAGE_ROWS
        self.pending_key = ""
        self.should_quit = False
        self.registry = build_registry(self.keymap, self._tree_handlers())

    def _guarded(self, action: Callable[[], object]) -> Callable[[], bool]:
        def handler() -> bool:
            self.session.run_action(action)
            return True

        return handler

    def _tree_handlers(self) -> dict[str, Callable[[], bool]]:
        s = self.session
        g = self._guarded
        return {
            actions.QUIT: g(self._quit),
            actions.SEARCH: g(s.start_search),
            actions.DOWN: g(s.next),
            actions.UP: g(s.previous),
            actions.COLLAPSE: g(s.collapse_node),
            actions.COLLAPSE_ALL: g(s.collapse_all),
            actions.EXPAND: g(s.expand_node),
            actions.EXPAND_ALL: g(s.expand_all),
            actions.NEXT_FILE: g(s.next_file),
            actions.PREV_FILE: g(s.previous_file),
            actions.STAGE: g(s.toggle_stage),
            actions.FILTER: g(s.toggle_filter),
            actions.LAYOUT: g(s.toggle_layout),
            actions.EASTER_EGG: g(s.toggle_easter_egg),
            actions.THEME: g(self._toggle_theme),
            actions.SWITCH_PANE: g(s.toggle_focus),
            actions.DIFF: g(s.show_diff),
            actions.HELP: g(s.toggle_help),
            actions.BACK: g(s.back),
            actions.TOP: g(s.jump_to_top),
            actions.BOTTOM: g(s.jump_to_bottom),
            actions.CENTER: g(self._center),
            actions.PAGE_UP: g(lambda: s.scroll_paging(-self.page_rows)),
            actions.PAGE_DOWN: g(lambda: s.scroll_paging(self.page_rows)),
            actions.YANK: g(self._yank),
            actions.VISUAL: g(s.toggle_visual_mode),
            actions.UNDO: g(s.undo_staging),
            actions.REDO: g(s.redo_staging),
            actions.COMMIT: g(s.open_commit_dialog),
            actions.WORKTREES: g(s.toggle_worktrees),
        }

    def _quit(self) -> None:
        self.should_quit = True

    def _toggle_theme(self) -> None:
        self.session.toggle_theme()
        self.callbacks.save_theme_name(self.session.theme.name)
        self.session.set_status_message(f"Theme: {self.session.theme.name}")

    def _center(self) -> None:
        pane = self.session.active_pane()
        if pane.selected is not None:
            pane.scroll = max(0, pane.selected - self.page_rows // 2)

    def _yank(self) -> None:
        text = self.session.yank_paths()
        if not text:
            return
        count = len(text.splitlines())
        if self.callbacks.copy_to_clipboard(text):
            label = text if count == 1 else f"{count} paths"
            self.session.set_status_message(f"Copied {label}")
        else:
            self.session.set_status_message("No clipboard tool available")

    def handle(self, key: str) -> None:
        """Apply one normalized key token to the session."""
        s = self.session
        if s.show_commit_dialog:
            self._handle_commit_key(key)
        elif s.show_worktrees:
            self._handle_worktree_key(key)
        elif s.show_help:
            self._handle_help_key(key)
        elif s.view_mode is ViewMode.DIFF:
            self._handle_diff_key(key)
        elif s.is_typing_search:
            self._handle_search_key(key)
        else:
            self._handle_tree_key(key)

    def _handle_commit_key(self, key: str) -> None:
        s = self.session
        if key == "ESC":
            s.close_commit_dialog()
        elif key == "ENTER":
            s.run_action(s.confirm_commit)
        elif key == "BACKSPACE":
            s.pop_commit_char()
        elif _is_text_key(key):
            s.append_commit_char(key)

    def _handle_worktree_key(self, key: str) -> None:
        s = self.session
        if key in _SCROLL_DOWN_KEYS:
            s.move_worktree_selection(1)
        elif key in _SCROLL_UP_KEYS:
            s.move_worktree_selection(-1)
        elif key == "ENTER":
            s.run_action(s.switch_worktree)
        elif key in {"ESC", "q"} or self.keymap.get(key) == actions.WORKTREES:
            s.show_worktrees = False

    def _handle_help_key(self, key: str) -> None:
        s = self.session
        if key in _SCROLL_DOWN_KEYS:
            s.scroll_help(1)
        elif key in _SCROLL_UP_KEYS:
            s.scroll_help(-1)
        elif key in _PAGE_DOWN_KEYS:
            s.scroll_help(self.page_rows)
        elif key in _PAGE_UP_KEYS:
            s.scroll_help(-self.page_rows)
        elif key in {"ESC", "q", "ENTER"} or self.keymap.get(key) == actions.HELP:
            s.toggle_help()

    def _handle_search_key(self, key: str) -> None:
        s = self.session
        if key == "ESC":
            s.cancel_search()
        elif key == "ENTER":
            s.accept_search()
        elif key == "BACKSPACE":
            s.pop_search_char()
        elif key == "DOWN":
            s.next()
        elif key == "UP":
            s.previous()
        elif _is_text_key(key):
            s.append_search_char(key)

    def _handle_diff_key(self, key: str) -> None:
        s = self.session
        if s.is_diff_search:
            if key == "ESC":
                s.cancel_diff_search()
            elif key == "ENTER":
                s.accept_diff_search()
            elif key == "BACKSPACE":
                s.pop_diff_search_char()
            elif _is_text_key(key):
                s.append_diff_search_char(key)
            return

        if s.patch_mode:
            if key in _SCROLL_DOWN_KEYS:
                s.next_hunk()
                return
            if key in _SCROLL_UP_KEYS:
                s.prev_hunk()
                return
            if key in {" ", "s"}:
                s.run_action(s.stage_hunk)
                return

        if key in _SCROLL_DOWN_KEYS:
            s.scroll_diff(1)
        elif key in _SCROLL_UP_KEYS:
            s.scroll_diff(-1)
        elif key in _PAGE_DOWN_KEYS:
            s.scroll_diff(self.diff_page_rows)
        elif key in _PAGE_UP_KEYS:
            s.scroll_diff(-self.diff_page_rows)
        elif key in {"g", "HOME"}:
            s.diff_scroll = 0
        elif key in {"G", "END"}:
            s.scroll_diff(len(s.diff_lines))
        elif key == "/":
            s.start_diff_search()
        elif key == "n":
            s.next_diff_match()
        elif key == "N":
            s.prev_diff_match()
        elif key == "p":
            s.toggle_patch_mode()
        elif key == "?":
            s.toggle_help()
        elif key in {"q", "ESC", "ENTER", "h", "LEFT"}:
            s.close_diff()

    def _handle_tree_key(self, key: str) -> None:
        if self.pending_key:
            combo = self.pending_key + key
            self.pending_key = ""
            if self.registry.dispatch(combo) is not None:
                return
        if self.registry.has_prefix(key):
            self.pending_key = key
            return
        self.registry.dispatch(key)


def sync_view(session: Session, handler: SessionKeyHandler, width: int, height: int) -> bool:
    """Keep selections on screen and bound help scrolling; return whether anything moved."""
    changed = False
    layout = pane_layout(session, height)
    for pane, _title, rows_visible in layout:
        count = len(session.pane_rows(pane))
        scroll = pane.scroll
        if pane.selected is not None:
            if pane.selected < scroll:
                scroll = pane.selected
            elif pane.selected >= scroll + rows_visible:
                scroll = pane.selected - rows_visible + 1
        scroll = max(0, min(scroll, max(0, count - rows_visible)))
        if scroll != pane.scroll:
            pane.scroll = scroll
            changed = True
    active = session.active_pane()
    handler.page_rows = next((rows for pane, _t, rows in layout if pane is active), DEFAULT_PAGE_ROWS)
    handler.diff_page_rows = diff_body_rows(height)

    body_rows = help_body_rows(width, height)
    session.max_help_scroll = max(0, len(help_lines(handler.keymap, session.theme.palette)) - body_rows)
    if session.help_scroll > session.max_help_scroll:
        session.help_scroll = session.max_help_scroll
        changed = True
    return changed


def run_main_loop(
    session: Session,
    terminal: TerminalController,
    stdin_fd: int,
    stdout_fd: int,
    handler: SessionKeyHandler,
    terminal_size: Callable[[tuple[int, int]], os.terminal_size] = shutil.get_terminal_size,
) -> None:
    """Run the interactive TUI loop until a quit action occurs."""
    dirty = True
    skip_next_lf = False
    last_size: os.terminal_size | None = None

    with terminal.raw_mode():
        while not handler.should_quit:
            size = terminal_size((80, 24))
            if size != last_size:
                last_size = size
                dirty = True
            if session.expire_status_message(time.monotonic()):
                dirty = True
            if sync_view(session, handler, size.columns, size.lines):
                dirty = True

            if dirty:
                write_frame(stdout_fd, render_frame(session, handler.keymap, size.columns, size.lines))
                dirty = False

            try:
                key = read_key(stdin_fd, timeout_ms=INPUT_POLL_MS)
            except KeyboardInterrupt:
                # Ignore SIGINT-style interrupts so terminal copy shortcuts do not exit the app.
                continue
            if key == "":
                continue
            if skip_next_lf and key == "ENTER_LF":
                skip_next_lf = False
                continue

            if key == "ENTER_CR":
                key = "ENTER"
                skip_next_lf = True
            elif key == "ENTER_LF":
                key = "ENTER"
                skip_next_lf = False
            else:
                skip_next_lf = False

            handler.handle(key)
            dirty = True
    logger.debug("interactive loop finished")
