"""Interactive session state and the actions that mutate it.

``Session`` owns every piece of interactive state: per-pane rows and
selections, layout/filter/focus modes, visual selection, staging history,
the diff view with its search and patch-mode hunk selection, and the
worktree, commit and help overlays. Actions talk to git through the injected
backend and then call ``refresh`` to rebuild display rows.

Row selections are indices into the *search-filtered* row list of a pane;
the unfiltered rows are never mutated by searching.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from ..ansi import strip_ansi
from ..errors import GitCommandError
from ..git.patch import Hunk, build_patch, parse_diff
from ..git.worktrees import Worktree
from ..status_model import (
    NO_FILTER,
    FlatNode,
    StatusFilter,
    build_status_tree,
    flatten_tree,
    is_staged,
    is_untracked,
    iter_directory_paths,
    max_name_width,
)
from ..status_model.build import STATUS_HEADER_PREFIX
from ..status_model.parser import parse_status_line
from ..status_model.rendering import DEFAULT_INDENT, clamp_indent
from ..ui_theme import UNICODE_THEME, UITheme, apply_glyph_overrides, next_theme_name, resolve_theme
from .history import ActionHistory
from .state import FilterMode, Focus, Layout, StageAction, ViewMode

logger = logging.getLogger(__name__)

DIFF_PLACEHOLDER = "(No diff or binary file)"
STATUS_MESSAGE_SECONDS = 2.5


class SessionBackend(Protocol):
    """Git operations the session drives."""

    def status_lines(self) -> list[str]: ...

    def diff_stats(self) -> dict[str, tuple[int, int]]: ...

    def diff(self, paths: Sequence[str], staged: bool = False, untracked: bool = False) -> str: ...

    def stage(self, paths: Sequence[str]) -> None: ...

    def unstage(self, paths: Sequence[str]) -> None: ...

    def commit(self, message: str) -> None: ...

    def apply_patch(self, patch_text: str, cached: bool = True, reverse: bool = False) -> None: ...

    def worktrees(self) -> list[Worktree]: ...


@dataclass
class PaneState:
    """Rows of one tree pane plus its selection and viewport offset."""

    rows: list[FlatNode] = field(default_factory=list)
    selected: int | None = None
    scroll: int = 0


@dataclass(frozen=True)
class _RefreshResult:
    unified: list[FlatNode]
    staged: list[FlatNode]
    unstaged: list[FlatNode]
    name_width: int
    branch_header: str
    changed_files: int
    global_stats: tuple[int, int]


class Session:
    """All interactive state of one twig session."""

    def __init__(
        self,
        backend: SessionBackend,
        indent: int = DEFAULT_INDENT,
        collapse: bool = False,
        theme: UITheme = UNICODE_THEME,
        glyph_overrides: dict[str, str] | None = None,
    ) -> None:
        self.backend = backend
        self.indent = clamp_indent(indent)
        self.collapse = collapse
        self.glyph_overrides = dict(glyph_overrides or {})
        self.theme = apply_glyph_overrides(theme, self.glyph_overrides)

        self.view_mode = ViewMode.TREE
        self.layout = Layout.UNIFIED
        self.filter_mode = FilterMode.ALL
        self.focus = Focus.UNSTAGED

        self.unified = PaneState()
        self.staged = PaneState()
        self.unstaged = PaneState()
        self.collapsed_paths: set[str] = set()
        self.max_name_width = 0
        self.global_stats: tuple[int, int] | None = None
        self.changed_files = 0
        self.branch_header = ""

        self.search_query = ""
        self.is_typing_search = False

        self.is_visual_mode = False
        self.visual_origin: int | None = None
        self.hit_top_edge = False
        self.hit_bottom_edge = False

        self.history = ActionHistory()

        self.diff_content = ""
        self.diff_path: str | None = None
        self.diff_scroll = 0
        self.diff_search_query = ""
        self.is_diff_search = False
        self.diff_matches: list[int] = []
        self.current_diff_match: int | None = None

        self.patch_mode = False
        self.diff_headers: list[str] = []
        self.diff_hunks: list[Hunk] = []
        self.selected_hunk_idx: int | None = None

        self.show_worktrees = False
        self.worktrees: list[Worktree] = []
        self.worktree_selected: int | None = None

        self.show_commit_dialog = False
        self.commit_message = ""

        self.show_help = False
        self.help_scroll = 0
        self.max_help_scroll = 0

        self.status_message = ""
        self.status_message_until = 0.0

    # ------------------------------------------------------------------
    # refresh and row access

    def _build_rows(
        self,
        lines: list[str],
        stats: dict[str, tuple[int, int]],
        status_filter: StatusFilter = NO_FILTER,
        collapse: bool | None = None,
    ) -> list[FlatNode]:
        tree = build_status_tree(lines, stats, status_filter)
        return flatten_tree(
            tree,
            self.theme,
            indent=self.indent,
            collapsed_paths=self.collapsed_paths,
            collapse=self.collapse if collapse is None else collapse,
        )

    def _compute_refresh(self) -> _RefreshResult:
        lines = self.backend.status_lines()
        stats = self.backend.diff_stats()

        unified: list[FlatNode] = []
        staged: list[FlatNode] = []
        unstaged: list[FlatNode] = []
        if self.layout is Layout.SPLIT:
            staged = self._build_rows(lines, stats, StatusFilter(staged_only=True))
            unstaged = [row for row in self._build_rows(lines, stats) if not is_staged(row.raw_status)]
            name_width = max(max_name_width(staged), max_name_width(unstaged))
        elif self.layout is Layout.COMPACT:
            unified = self._build_rows(lines, stats, collapse=True)
            name_width = max_name_width(unified)
        else:
            status_filter = StatusFilter(
                staged_only=self.filter_mode is FilterMode.STAGED,
                modified_only=self.filter_mode is FilterMode.MODIFIED,
            )
            unified = self._build_rows(lines, stats, status_filter)
            name_width = max_name_width(unified)

        header = lines[0] if lines and lines[0].startswith(STATUS_HEADER_PREFIX) else ""
        changed = sum(
            1 for line in lines if not line.startswith(STATUS_HEADER_PREFIX) and parse_status_line(line)
        )
        added = sum(pair[0] for pair in stats.values())
        deleted = sum(pair[1] for pair in stats.values())
        return _RefreshResult(
            unified=unified,
            staged=staged,
            unstaged=unstaged,
            name_width=name_width,
            branch_header=header,
            changed_files=changed,
            global_stats=(added, deleted),
        )

    def refresh(self) -> None:
        """Rebuild rows for the current layout from fresh git output.

        On ``GitCommandError`` nothing is assigned, so the previous rows and
        selections stay on screen, and the error propagates.
        """
        result = self._compute_refresh()
        self.unified.rows = result.unified
        self.staged.rows = result.staged
        self.unstaged.rows = result.unstaged
        self.max_name_width = result.name_width
        self.branch_header = result.branch_header
        self.changed_files = result.changed_files
        self.global_stats = result.global_stats
        for pane in self._layout_panes():
            pane.selected = self._clamp_selection(pane.selected, len(self.filter_nodes(pane.rows, self.search_query)))

    @staticmethod
    def _clamp_selection(selected: int | None, count: int) -> int | None:
        if count <= 0:
            return None
        if selected is None:
            return 0
        return min(selected, count - 1)

    @staticmethod
    def filter_nodes(rows: Sequence[FlatNode], query: str) -> list[FlatNode]:
        """Return rows whose name or full path contains ``query``, case-insensitively."""
        if not query:
            return list(rows)
        needle = query.lower()
        return [row for row in rows if needle in row.name.lower() or needle in row.full_path.lower()]

    def _layout_panes(self) -> tuple[PaneState, ...]:
        if self.layout is Layout.SPLIT:
            return (self.staged, self.unstaged)
        return (self.unified,)

    def active_pane(self) -> PaneState:
        if self.layout is Layout.SPLIT:
            return self.staged if self.focus is Focus.STAGED else self.unstaged
        return self.unified

    def pane_rows(self, pane: PaneState) -> list[FlatNode]:
        """Search-filtered rows of ``pane``."""
        return self.filter_nodes(pane.rows, self.search_query)

    def visible_rows(self) -> list[FlatNode]:
        """Search-filtered rows of the active pane."""
        return self.pane_rows(self.active_pane())

    def selected_index(self) -> int | None:
        return self.active_pane().selected

    def selected_node(self) -> FlatNode | None:
        index = self.active_pane().selected
        rows = self.visible_rows()
        if index is None or not 0 <= index < len(rows):
            return None
        return rows[index]

    def _select_path(self, path: str) -> bool:
        for index, row in enumerate(self.visible_rows()):
            if row.full_path == path:
                self.active_pane().selected = index
                return True
        return False

    # ------------------------------------------------------------------
    # modes

    def toggle_layout(self) -> None:
        """Cycle unified -> split -> compact -> unified and refresh."""
        self.layout = self.layout.next()
        self._exit_visual_mode()
        self.refresh()

    def toggle_easter_egg(self) -> None:
        self.layout = Layout.UNIFIED if self.layout is Layout.EASTER_EGG else Layout.EASTER_EGG
        self._exit_visual_mode()
        self.refresh()

    def toggle_filter(self) -> None:
        """Cycle the status filter; only the unified layout filters."""
        if self.layout is not Layout.UNIFIED:
            return
        self.filter_mode = self.filter_mode.next()
        self.refresh()

    def toggle_focus(self) -> None:
        if self.layout is not Layout.SPLIT:
            return
        self.focus = self.focus.next()
        self._exit_visual_mode()
        self.hit_top_edge = False
        self.hit_bottom_edge = False

    def toggle_theme(self) -> None:
        """Switch to the next glyph theme, keeping color and icon settings."""
        theme = resolve_theme(next_theme_name(self.theme.name), no_color=not self.theme.colored)
        theme = theme.with_simple_icons(self.theme.simple_icons)
        self.theme = apply_glyph_overrides(theme, self.glyph_overrides)
        self.refresh()

    # ------------------------------------------------------------------
    # movement

    def next(self) -> None:
        """Move down; at the last row, flag the edge first and wrap on the next press."""
        rows = self.visible_rows()
        if not rows:
            return
        pane = self.active_pane()
        if pane.selected is None:
            pane.selected = 0
            return
        if pane.selected >= len(rows) - 1:
            if self.hit_bottom_edge:
                self.hit_bottom_edge = False
                pane.selected = 0
            else:
                self.hit_bottom_edge = True
            return
        self.hit_bottom_edge = False
        self.hit_top_edge = False
        pane.selected += 1

    def previous(self) -> None:
        """Move up; at the first row, flag the edge first and wrap on the next press."""
        rows = self.visible_rows()
        if not rows:
            return
        pane = self.active_pane()
        if pane.selected is None:
            pane.selected = 0
            return
        if pane.selected == 0:
            if self.hit_top_edge:
                self.hit_top_edge = False
                pane.selected = len(rows) - 1
            else:
                self.hit_top_edge = True
            return
        self.hit_top_edge = False
        self.hit_bottom_edge = False
        pane.selected -= 1

    def next_file(self) -> None:
        """Move to the next file row, skipping directories, for at most one lap."""
        rows = self.visible_rows()
        if not rows:
            return
        pane = self.active_pane()
        index = pane.selected or 0
        self.hit_top_edge = False
        for _ in range(len(rows)):
            if index >= len(rows) - 1:
                if not self.hit_bottom_edge:
                    self.hit_bottom_edge = True
                    pane.selected = index
                    return
                self.hit_bottom_edge = False
                index = 0
            else:
                index += 1
            if not rows[index].is_dir:
                self.hit_bottom_edge = False
                pane.selected = index
                return

    def previous_file(self) -> None:
        """Move to the previous file row, skipping directories, for at most one lap."""
        rows = self.visible_rows()
        if not rows:
            return
        pane = self.active_pane()
        index = pane.selected or 0
        self.hit_bottom_edge = False
        for _ in range(len(rows)):
            if index == 0:
                if not self.hit_top_edge:
                    self.hit_top_edge = True
                    pane.selected = 0
                    return
                self.hit_top_edge = False
                index = len(rows) - 1
            else:
                index -= 1
            if not rows[index].is_dir:
                self.hit_top_edge = False
                pane.selected = index
                return

    def jump_to_top(self) -> None:
        self.active_pane().selected = 0 if self.visible_rows() else None
        self.hit_top_edge = False
        self.hit_bottom_edge = False

    def jump_to_bottom(self) -> None:
        rows = self.visible_rows()
        if rows:
            self.active_pane().selected = len(rows) - 1
        self.hit_top_edge = False
        self.hit_bottom_edge = False

    def scroll_paging(self, amount: int) -> None:
        """Move the selection by ``amount`` rows, clamped to the list without wrapping."""
        rows = self.visible_rows()
        if not rows:
            return
        pane = self.active_pane()
        if pane.selected is None:
            pane.selected = 0
            return
        pane.selected = max(0, min(len(rows) - 1, pane.selected + amount))

    def reset_selection(self) -> None:
        for pane in (self.unified, self.staged, self.unstaged):
            pane.selected = 0 if self.pane_rows(pane) else None
            pane.scroll = 0

    # ------------------------------------------------------------------
    # visual mode

    def toggle_visual_mode(self) -> None:
        if self.is_visual_mode:
            self._exit_visual_mode()
            return
        index = self.active_pane().selected
        if index is not None:
            self.is_visual_mode = True
            self.visual_origin = index

    def _exit_visual_mode(self) -> None:
        self.is_visual_mode = False
        self.visual_origin = None

    def visual_range(self) -> tuple[int, int] | None:
        """Inclusive ``(start, end)`` between the origin and the live cursor."""
        if not self.is_visual_mode or self.visual_origin is None:
            return None
        current = self.active_pane().selected
        if current is None:
            return None
        return min(self.visual_origin, current), max(self.visual_origin, current)

    def _scoped_rows(self) -> list[FlatNode]:
        """Rows an action applies to: the visual range, else the selected row."""
        span = self.visual_range()
        if span is not None:
            start, end = span
            return self.visible_rows()[start : end + 1]
        node = self.selected_node()
        return [node] if node is not None else []

    # ------------------------------------------------------------------
    # staging

    def _apply_stage_action(self, paths: Sequence[str], action: StageAction) -> None:
        if action is StageAction.STAGE:
            self.backend.stage(paths)
        else:
            self.backend.unstage(paths)

    def toggle_stage(self) -> None:
        """Stage or unstage the selection as one undoable action.

        Direction comes from the first row: staged rows are unstaged, anything
        else is staged.
        """
        was_visual = self.is_visual_mode
        rows = self._scoped_rows()
        if not rows:
            if was_visual:
                self._exit_visual_mode()
            return
        action = StageAction.UNSTAGE if is_staged(rows[0].raw_status) else StageAction.STAGE
        paths: list[str] = []
        for row in rows:
            for path in row.paths:
                if path not in paths:
                    paths.append(path)
        self._apply_stage_action(paths, action)
        self.history.push_action(paths, action)
        logger.info("%s %d path(s)", action.value, len(paths))
        if was_visual:
            self._exit_visual_mode()
        self.refresh()

    def undo_staging(self) -> None:
        entry = self.history.undo()
        if entry is None:
            self.set_status_message("Nothing to undo")
            return
        self._apply_stage_action(entry.paths, entry.action.inverse())
        self.refresh()

    def redo_staging(self) -> None:
        entry = self.history.redo()
        if entry is None:
            self.set_status_message("Nothing to redo")
            return
        self._apply_stage_action(entry.paths, entry.action)
        self.refresh()

    # ------------------------------------------------------------------
    # folding

    def collapse_node(self) -> None:
        """Fold the selected directory, or every directory in the visual range."""
        was_visual = self.is_visual_mode
        changed = False
        for row in self._scoped_rows():
            if row.is_dir and not row.is_folded:
                self.collapsed_paths.add(row.full_path)
                changed = True
        if was_visual:
            self._exit_visual_mode()
        if changed or was_visual:
            self.refresh()

    def expand_node(self) -> None:
        """Unfold the selected directory, or every directory in the visual range."""
        was_visual = self.is_visual_mode
        changed = False
        for row in self._scoped_rows():
            if row.is_dir and row.is_folded:
                self.collapsed_paths.difference_update(row.fold_keys)
                changed = True
        if was_visual:
            self._exit_visual_mode()
        if changed or was_visual:
            self.refresh()

    def collapse_all(self) -> None:
        tree = build_status_tree(self.backend.status_lines())
        self.collapsed_paths.update(iter_directory_paths(tree))
        self.refresh()

    def expand_all(self) -> None:
        self.collapsed_paths.clear()
        self.refresh()

    # ------------------------------------------------------------------
    # diff view

    @property
    def diff_lines(self) -> list[str]:
        return self.diff_content.splitlines()

    def show_diff(self) -> None:
        """Open the diff view for the selected file row.

        Git failures are shown in the diff pane instead of propagating.
        """
        node = self.selected_node()
        if node is None or node.is_dir:
            return
        staged = is_staged(node.raw_status)
        untracked = is_untracked(node.raw_status)
        try:
            content = self.backend.diff(node.paths, staged=staged, untracked=untracked)
        except GitCommandError as exc:
            logger.warning("diff failed for %s: %s", node.full_path, exc)
            content = f"Error running git diff: {exc}"
        else:
            if not content and not untracked:
                content = DIFF_PLACEHOLDER
        self.diff_content = content
        self.diff_path = node.full_path
        self.view_mode = ViewMode.DIFF
        self.diff_scroll = 0
        self._clear_diff_search()
        self._leave_patch_mode()

    def close_diff(self) -> None:
        self.view_mode = ViewMode.TREE
        self.diff_content = ""
        self.diff_path = None
        self.diff_scroll = 0
        self._clear_diff_search()
        self._leave_patch_mode()

    def scroll_diff(self, amount: int) -> None:
        max_scroll = max(0, len(self.diff_lines) - 1)
        self.diff_scroll = max(0, min(max_scroll, self.diff_scroll + amount))

    def _clear_diff_search(self) -> None:
        self.diff_search_query = ""
        self.is_diff_search = False
        self.diff_matches = []
        self.current_diff_match = None

    def start_diff_search(self) -> None:
        self.is_diff_search = True

    def append_diff_search_char(self, ch: str) -> None:
        self.diff_search_query += ch
        self.search_diff()

    def pop_diff_search_char(self) -> None:
        self.diff_search_query = self.diff_search_query[:-1]
        self.search_diff()

    def accept_diff_search(self) -> None:
        self.is_diff_search = False

    def cancel_diff_search(self) -> None:
        self._clear_diff_search()

    def search_diff(self) -> None:
        """Collect line indices whose plain text contains the query, case-insensitively."""
        self.diff_matches = []
        self.current_diff_match = None
        if not self.diff_search_query:
            return
        needle = self.diff_search_query.lower()
        self.diff_matches = [
            index for index, line in enumerate(self.diff_lines) if needle in strip_ansi(line).lower()
        ]
        if self.diff_matches:
            self.current_diff_match = 0
            self._jump_to_diff_match()

    def next_diff_match(self) -> None:
        if not self.diff_matches:
            return
        current = self.current_diff_match or 0
        self.current_diff_match = (current + 1) % len(self.diff_matches)
        self._jump_to_diff_match()

    def prev_diff_match(self) -> None:
        if not self.diff_matches:
            return
        current = self.current_diff_match or 0
        self.current_diff_match = (current - 1) % len(self.diff_matches)
        self._jump_to_diff_match()

    def _jump_to_diff_match(self) -> None:
        if self.current_diff_match is None:
            return
        self.diff_scroll = self.diff_matches[self.current_diff_match]

    # ------------------------------------------------------------------
    # patch mode

    def toggle_patch_mode(self) -> None:
        """Enter or leave hunk selection; only available in the diff view."""
        if self.view_mode is not ViewMode.DIFF:
            return
        if self.patch_mode:
            self._leave_patch_mode()
            return
        self.patch_mode = True
        self.diff_headers, self.diff_hunks = parse_diff(self.diff_content)
        if self.diff_hunks:
            self.selected_hunk_idx = 0
            self._jump_to_hunk()

    def _leave_patch_mode(self) -> None:
        self.patch_mode = False
        self.diff_headers = []
        self.diff_hunks = []
        self.selected_hunk_idx = None

    def selected_hunk(self) -> Hunk | None:
        if self.selected_hunk_idx is None or not 0 <= self.selected_hunk_idx < len(self.diff_hunks):
            return None
        return self.diff_hunks[self.selected_hunk_idx]

    def next_hunk(self) -> None:
        if self.selected_hunk_idx is not None and self.selected_hunk_idx < len(self.diff_hunks) - 1:
            self.selected_hunk_idx += 1
            self._jump_to_hunk()

    def prev_hunk(self) -> None:
        if self.selected_hunk_idx is not None and self.selected_hunk_idx > 0:
            self.selected_hunk_idx -= 1
            self._jump_to_hunk()

    def _jump_to_hunk(self) -> None:
        hunk = self.selected_hunk()
        if hunk is not None:
            self.diff_scroll = hunk.display_start

    def stage_hunk(self) -> None:
        """Apply the selected hunk to the index, then reopen the diff for the same file.

        Hunks of staged rows are applied in reverse, which unstages them.
        Patch mode is left before the refresh since hunk offsets go stale.
        """
        hunk = self.selected_hunk()
        node = self.selected_node()
        if hunk is None or node is None or node.full_path != self.diff_path:
            return
        patch = build_patch(self.diff_headers, hunk)
        self.backend.apply_patch(patch, cached=True, reverse=is_staged(node.raw_status))
        path = node.full_path
        self._leave_patch_mode()
        self.refresh()
        if self._select_path(path):
            self.show_diff()
        else:
            self.close_diff()

    # ------------------------------------------------------------------
    # search prompt

    def start_search(self) -> None:
        self.is_typing_search = True

    def append_search_char(self, ch: str) -> None:
        self.search_query += ch
        self.reset_selection()

    def pop_search_char(self) -> None:
        self.search_query = self.search_query[:-1]
        self.reset_selection()

    def cancel_search(self) -> None:
        self.is_typing_search = False
        self.search_query = ""
        self.reset_selection()

    def accept_search(self) -> None:
        self.is_typing_search = False

    def back(self) -> None:
        """Leave visual mode, or clear an applied search."""
        if self.is_visual_mode:
            self._exit_visual_mode()
            return
        if self.search_query:
            self.cancel_search()

    # ------------------------------------------------------------------
    # commit dialog

    def open_commit_dialog(self) -> None:
        self.show_commit_dialog = True
        self.commit_message = ""

    def close_commit_dialog(self) -> None:
        self.show_commit_dialog = False
        self.commit_message = ""

    def append_commit_char(self, ch: str) -> None:
        self.commit_message += ch

    def pop_commit_char(self) -> None:
        self.commit_message = self.commit_message[:-1]

    def confirm_commit(self) -> None:
        message = self.commit_message.strip()
        if not message:
            return
        self.backend.commit(message)
        self.close_commit_dialog()
        self.history.clear()
        self.set_status_message("Committed")
        self.refresh()

    # ------------------------------------------------------------------
    # linked worktrees

    def toggle_worktrees(self) -> None:
        if self.show_worktrees:
            self.show_worktrees = False
            return
        self.worktrees = self.backend.worktrees()
        self.worktree_selected = 0 if self.worktrees else None
        self.show_worktrees = True

    def move_worktree_selection(self, delta: int) -> None:
        if not self.worktrees:
            self.worktree_selected = None
            return
        current = self.worktree_selected or 0
        self.worktree_selected = max(0, min(len(self.worktrees) - 1, current + delta))

    def switch_worktree(self) -> None:
        """Change the process working directory to the chosen linked worktree."""
        if self.worktree_selected is None or not 0 <= self.worktree_selected < len(self.worktrees):
            return
        worktree = self.worktrees[self.worktree_selected]
        try:
            os.chdir(worktree.path)
        except OSError as exc:
            logger.warning("cannot switch to %s: %s", worktree.path, exc)
            self.set_status_message(f"Cannot switch to {worktree.path}: {exc.strerror or exc}")
            return
        logger.info("switched to linked worktree %s", worktree.path)
        self.show_worktrees = False
        self.history.clear()
        self.collapsed_paths.clear()
        self._exit_visual_mode()
        self.search_query = ""
        self.refresh()
        self.reset_selection()
        self.set_status_message(f"Switched to {worktree.branch_label} ({worktree.path})")

    # ------------------------------------------------------------------
    # help overlay

    def toggle_help(self) -> None:
        self.show_help = not self.show_help
        self.help_scroll = 0
        self.is_diff_search = False

    def scroll_help(self, amount: int) -> None:
        self.help_scroll = max(0, min(self.max_help_scroll, self.help_scroll + amount))

    # ------------------------------------------------------------------
    # misc

    def yank_paths(self) -> str:
        """Return the selected paths newline-joined, leaving visual mode."""
        was_visual = self.is_visual_mode
        paths = [row.full_path for row in self._scoped_rows()]
        if was_visual:
            self._exit_visual_mode()
        return "\n".join(paths)

    def set_status_message(self, message: str, seconds: float = STATUS_MESSAGE_SECONDS) -> None:
        self.status_message = message
        self.status_message_until = time.monotonic() + seconds

    def expire_status_message(self, now: float) -> bool:
        """Clear an expired status message, returning whether anything changed."""
        if self.status_message and now >= self.status_message_until:
            self.status_message = ""
            self.status_message_until = 0.0
            return True
        return False

    def run_action(self, action: Callable[[], object]) -> bool:
        """Run ``action``; git failures become a status message instead of propagating."""
        try:
            action()
        except GitCommandError as exc:
            logger.warning("action failed: %s", exc)
            self.set_status_message(str(exc))
            return False
        return True
