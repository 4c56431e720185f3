"""Frame composition for the interactive session.

Builds each screen as a list of ANSI lines from session state and writes
fully composed frames. Overlays (help, linked worktrees, commit message) are
drawn as positioned boxes over the base frame. Composition never mutates the
session.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence

from ..ansi import clip_ansi_line, display_width, pad_ansi_line, strip_ansi
from ..session import FilterMode, Layout, PaneState, Session, ViewMode
from ..status_model import FlatNode, format_branch_header, format_row_stats
from ..status_model.rendering import SUMMARY_BAR_CAP, format_diff_stat_bar
from ..ui_theme import Palette, UITheme
from . import keys as actions
from .highlight import colorize_diff

HEADER_ROWS = 1
FOOTER_ROWS = 2
HIGHLIGHT_SYMBOL = ">> "
VISUAL_SYMBOL = " * "
EMPTY_PANE_TEXT = "(no changes)"
EASTER_EGG_TITLE = "\U0001f384 actual tree view \U0001f384"

_KEY_LABELS: dict[str, str] = {
    " ": "Space",
    "ENTER": "Enter",
    "ESC": "Esc",
    "TAB": "Tab",
    "UP": "Up",
    "DOWN": "Down",
    "LEFT": "Left",
    "RIGHT": "Right",
    "HOME": "Home",
    "END": "End",
    "PAGE_UP": "PgUp",
    "PAGE_DOWN": "PgDn",
    "BACKSPACE": "Backspace",
}

HELP_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Navigation",
        (
            (actions.DOWN, "move down"),
            (actions.UP, "move up"),
            (actions.COLLAPSE, "fold directory"),
            (actions.EXPAND, "unfold directory"),
            (actions.COLLAPSE_ALL, "fold all"),
            (actions.EXPAND_ALL, "unfold all"),
            (actions.NEXT_FILE, "next file"),
            (actions.PREV_FILE, "previous file"),
            (actions.TOP, "jump to top"),
            (actions.BOTTOM, "jump to bottom"),
            (actions.PAGE_DOWN, "page down"),
            (actions.PAGE_UP, "page up"),
            (actions.CENTER, "center cursor"),
        ),
    ),
    (
        "Actions",
        (
            (actions.STAGE, "stage/unstage file or directory"),
            (actions.DIFF, "view inline diff"),
            (actions.SEARCH, "search files"),
            (actions.VISUAL, "visual selection"),
            (actions.UNDO, "undo staging"),
            (actions.REDO, "redo staging"),
            (actions.COMMIT, "commit staged changes"),
            (actions.YANK, "yank path to clipboard"),
        ),
    ),
    (
        "Views",
        (
            (actions.FILTER, "cycle filter (unified view)"),
            (actions.LAYOUT, "cycle layout (unified/split/compact)"),
            (actions.SWITCH_PANE, "switch pane (split view)"),
            (actions.THEME, "cycle theme"),
            (actions.WORKTREES, "switch linked worktree"),
            (actions.EASTER_EGG, "actual tree view"),
        ),
    ),
    (
        "General",
        (
            (actions.HELP, "toggle this help"),
            (actions.BACK, "back / clear search"),
            (actions.QUIT, "quit"),
        ),
    ),
)

DIFF_HELP_LINES: tuple[tuple[str, str], ...] = (
    ("j/k, Up/Down", "scroll diff"),
    ("PgUp/PgDn", "page"),
    ("/  n/N", "search diff, next/previous match"),
    ("p", "toggle patch mode"),
    ("j/k, Space", "select hunk, stage hunk (patch mode)"),
    ("q, Esc, Enter", "back to tree"),
)


def selected_with_ansi(text: str) -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text:
        return text

    # Keep reverse video active even when the text contains internal resets.
    return "\033[7m" + text.replace("\033[0m", "\033[0;7m") + "\033[0m"


def with_background(text: str, sgr: str) -> str:
    """Re-apply ``sgr`` after every reset inside ``text``."""
    if not sgr:
        return text
    return sgr + text.replace("\033[0m", "\033[0m" + sgr) + "\033[0m"


def key_label(token: str) -> str:
    if token in _KEY_LABELS:
        return _KEY_LABELS[token]
    if token.startswith("CTRL_"):
        return f"Ctrl+{token[5:]}"
    if token.startswith("ALT_"):
        return f"Alt+{token[4:]}"
    return token


def help_lines(keymap: Mapping[str, str], palette: Palette) -> list[str]:
    """Build help text from the live key map so overrides show up."""
    lines: list[str] = []
    for heading, entries in HELP_SECTIONS:
        lines.append(f"{palette.help_heading}{heading}{palette.reset}")
        for action, description in entries:
            bound = [key_label(key) for key, value in keymap.items() if value == action]
            if not bound:
                continue
            keys_text = ", ".join(bound)
            lines.append(f"  {palette.help_key}{keys_text}{palette.reset}  {description}")
        lines.append("")
    lines.append(f"{palette.help_heading}Diff view{palette.reset}")
    for keys_text, description in DIFF_HELP_LINES:
        lines.append(f"  {palette.help_key}{keys_text}{palette.reset}  {description}")
    return lines


def status_indicator(status: str, palette: Palette) -> str:
    """Return the three-column ``[+]``/``[?]``/``[M]`` gutter for a status class."""
    if status == "+":
        return f"{palette.staged}[+]{palette.reset}"
    if status == "?":
        return f"{palette.untracked}[?]{palette.reset}"
    if status == " ":
        return "   "
    return f"{palette.unstaged}[M]{palette.reset}"


def easter_egg_offset(row: FlatNode, index: int, width: int) -> str:
    """Indent rows to alternate sides of the screen, top level centered."""
    if row.depth == 0:
        return " " * (width // 2)
    if index % 2 == 0:
        return " " * 4
    return " " * (width // 2 + 4)


def render_tree_row(
    row: FlatNode,
    theme: UITheme,
    name_width: int,
    width: int,
    *,
    selected: bool = False,
    in_visual: bool = False,
    offset: str = "",
) -> str:
    """Render one tree row padded to ``width`` columns."""
    palette = theme.palette
    marker = HIGHLIGHT_SYMBOL if selected else VISUAL_SYMBOL if in_visual else " " * len(HIGHLIGHT_SYMBOL)
    body = f"{offset}{marker}{status_indicator(row.status, palette)} {row.connector}{row.name_colored}"
    stats = format_row_stats(row.stats, theme)
    if stats:
        used = display_width(row.connector) + display_width(row.name)
        body += " " * max(0, name_width - used) + stats
    line = pad_ansi_line(body, width)
    if selected:
        return with_background(line, palette.selected_row)
    if in_visual:
        return with_background(line, palette.visual_row)
    return line


def pane_layout(session: Session, height: int) -> list[tuple[PaneState, str, int]]:
    """Return ``(pane, title, body_rows)`` for each pane of the current layout."""
    body = max(1, height - HEADER_ROWS - FOOTER_ROWS)
    if session.layout is Layout.SPLIT:
        usable = max(2, body - 2)
        staged_rows = max(1, usable // 2)
        unstaged_rows = max(1, usable - staged_rows)
        return [
            (session.staged, "Staged Changes", staged_rows),
            (session.unstaged, "Unstaged Changes", unstaged_rows),
        ]
    return [(session.unified, "", body)]


def _title_line(session: Session, width: int) -> str:
    palette = session.theme.palette
    if session.layout is Layout.EASTER_EGG:
        mode = EASTER_EGG_TITLE
    elif session.layout is Layout.SPLIT:
        mode = "Split"
    elif session.layout is Layout.COMPACT:
        mode = f"Filter: {FilterMode.ALL.label} (Compact)"
    else:
        mode = f"Filter: {session.filter_mode.label}"
    left = f" {palette.bold}twig{palette.reset} | {mode}"
    if session.is_visual_mode:
        left += f" | {palette.search_prompt}-- VISUAL --{palette.reset}"
    branch = format_branch_header(session.branch_header, session.theme)
    if branch:
        gap = width - display_width(left) - display_width(branch) - 1
        if gap >= 2:
            return pad_ansi_line(f"{left}{' ' * gap}{branch}", width)
    return pad_ansi_line(left, width)


def _pane_rule(title: str, focused: bool, theme: UITheme, width: int) -> str:
    palette = theme.palette
    color = palette.border_focus if focused else palette.border
    label = f"{theme.tree_dash * 2} {title} "
    fill = theme.tree_dash * max(0, width - display_width(label))
    return f"{color}{label}{fill}{palette.reset}"


def _pane_lines(session: Session, pane: PaneState, rows_visible: int, width: int, active: bool) -> list[str]:
    theme = session.theme
    rows = session.pane_rows(pane)
    if not rows:
        empty = f"{theme.palette.dim}   {EMPTY_PANE_TEXT}{theme.palette.reset}"
        return [pad_ansi_line(empty, width)] + [" " * width] * (rows_visible - 1)

    span = session.visual_range() if active else None
    easter_egg = session.layout is Layout.EASTER_EGG
    out: list[str] = []
    for index in range(pane.scroll, min(len(rows), pane.scroll + rows_visible)):
        row = rows[index]
        out.append(
            render_tree_row(
                row,
                theme,
                session.max_name_width,
                width,
                selected=active and index == pane.selected,
                in_visual=span is not None and span[0] <= index <= span[1],
                offset=easter_egg_offset(row, index, width) if easter_egg else "",
            )
        )
    out.extend([" " * width] * (rows_visible - len(out)))
    return out


def compose_bottom_bar(session: Session, width: int) -> str:
    """Search prompt, status message, or changed-file totals with a summary bar."""
    theme = session.theme
    palette = theme.palette
    if session.is_typing_search or session.search_query:
        prefix = "/" if session.is_typing_search else "Search: "
        cursor = "_" if session.is_typing_search else ""
        return pad_ansi_line(f" {palette.search_prompt}{prefix}{session.search_query}{cursor}{palette.reset}", width)
    if session.status_message:
        return pad_ansi_line(f" {palette.status_message}{session.status_message}{palette.reset}", width)

    added, deleted = session.global_stats or (0, 0)
    left = f" {session.changed_files} files changed "
    if added + deleted > 0:
        bar = format_diff_stat_bar(added, deleted, theme, cap=SUMMARY_BAR_CAP)
        left += (
            f"| {palette.stat_added}{added}{palette.reset} {bar} "
            f"{palette.stat_deleted}{deleted}{palette.reset}"
        )
    right = f" [{palette.search_prompt}?{palette.reset}] Help "
    gap = width - display_width(left) - display_width(right)
    if gap < 1:
        return pad_ansi_line(left, width)
    return f"{left}{' ' * gap}{right}"


def compose_tree_lines(session: Session, width: int, height: int) -> list[str]:
    """Compose the full tree-view frame as ``height`` lines."""
    theme = session.theme
    lines = [_title_line(session, width)]
    active = session.active_pane()
    for pane, title, rows_visible in pane_layout(session, height):
        if title:
            lines.append(_pane_rule(title, pane is active, theme, width))
        lines.extend(_pane_lines(session, pane, rows_visible, width, pane is active))
    while len(lines) < height - FOOTER_ROWS:
        lines.append(" " * width)
    lines = lines[: max(0, height - FOOTER_ROWS)]
    lines.append(f"{theme.palette.border}{theme.tree_dash * width}{theme.palette.reset}")
    lines.append(compose_bottom_bar(session, width))
    return lines[:height]


def diff_body_rows(height: int) -> int:
    return max(1, height - 2)


def _diff_footer(session: Session, width: int) -> str:
    palette = session.theme.palette
    if session.is_diff_search or session.diff_search_query:
        if session.diff_matches:
            current = (session.current_diff_match or 0) + 1
            count = f" [{current}/{len(session.diff_matches)}] "
        else:
            count = " (no matches) "
        cursor = "_" if session.is_diff_search else ""
        return pad_ansi_line(
            f" {palette.search_prompt}Search:{palette.reset} {session.diff_search_query}{cursor}"
            f"{palette.dim}{count}{palette.reset}",
            width,
        )
    if session.status_message:
        return pad_ansi_line(f" {palette.status_message}{session.status_message}{palette.reset}", width)
    if session.patch_mode:
        if not session.diff_hunks:
            hint = "no hunks to stage   p exit patch mode"
        else:
            hint = (
                f"hunk {(session.selected_hunk_idx or 0) + 1}/{len(session.diff_hunks)}   "
                "j/k select   Space stage   p exit"
            )
    else:
        hint = "j/k scroll   / search   n/N match   p patch   q back"
    return pad_ansi_line(f" {palette.dim}{hint}{palette.reset}", width)


def compose_diff_lines(session: Session, width: int, height: int) -> list[str]:
    """Compose the diff-view frame, highlighting the selected hunk in patch mode."""
    theme = session.theme
    palette = theme.palette
    mode = "Patch Mode: Space to stage, p to exit" if session.patch_mode else "p to patch"
    title = f" {palette.bold}Diff{palette.reset} {session.diff_path or ''} ({mode})"
    lines = [pad_ansi_line(title, width)]

    display = colorize_diff(session.diff_content) if theme.colored else tuple(session.diff_lines)
    hunk = session.selected_hunk() if session.patch_mode else None
    current_match = (
        session.diff_matches[session.current_diff_match] if session.current_diff_match is not None else None
    )
    body_rows = diff_body_rows(height)
    for index in range(session.diff_scroll, session.diff_scroll + body_rows):
        if index >= len(display):
            lines.append(" " * width)
            continue
        text = pad_ansi_line(display[index], width)
        if hunk is not None:
            if hunk.contains_line(index):
                text = with_background(text, palette.hunk_selected)
            else:
                text = f"{palette.dim}{strip_ansi(text)}{palette.reset}"
        if index == current_match:
            text = selected_with_ansi(text)
        lines.append(text)
    lines.append(_diff_footer(session, width))
    return lines[:height]


def _modal_geometry(width: int, height: int, max_w: int, max_h: int) -> tuple[int, int, int, int]:
    modal_w = max(10, min(max_w, width - 4))
    modal_h = max(5, min(max_h, height - 2))
    x = max(0, (width - modal_w) // 2)
    y = max(0, (height - modal_h) // 2)
    return x, y, modal_w, modal_h


def draw_modal(
    title: str,
    body: Sequence[str],
    palette: Palette,
    geometry: tuple[int, int, int, int],
    border_color: str,
) -> str:
    """Return positioned escape output for a rounded box with ``body`` inside."""
    x, y, modal_w, modal_h = geometry
    inner_w = max(1, modal_w - 2)
    inner_h = max(1, modal_h - 2)
    out: list[str] = []
    out.append(f"\033[{y + 1};{x + 1}H{border_color}╭{'─' * inner_w}╮{palette.reset}")
    for i in range(inner_h):
        text = body[i] if i < len(body) else ""
        content = pad_ansi_line(f" {text}", inner_w)
        out.append(f"\033[{y + 2 + i};{x + 1}H{border_color}│{palette.reset}{content}{palette.reset}")
        out.append(f"{border_color}│{palette.reset}")
    out.append(f"\033[{y + modal_h};{x + 1}H{border_color}╰{'─' * inner_w}╯{palette.reset}")

    label = f" {title} "
    title_x = x + max(1, (modal_w - display_width(label)) // 2)
    out.append(f"\033[{y + 1};{title_x + 1}H{palette.bold}{clip_ansi_line(label, inner_w)}{palette.reset}")
    return "".join(out)


HELP_MAX_WIDTH = 72
HELP_MAX_HEIGHT = 30


def help_body_rows(width: int, height: int) -> int:
    _x, _y, _w, modal_h = _modal_geometry(width, height, HELP_MAX_WIDTH, HELP_MAX_HEIGHT)
    return max(1, modal_h - 2)


def render_help_modal(session: Session, keymap: Mapping[str, str], width: int, height: int) -> str:
    palette = session.theme.palette
    geometry = _modal_geometry(width, height, HELP_MAX_WIDTH, HELP_MAX_HEIGHT)
    lines = help_lines(keymap, palette)
    visible = lines[session.help_scroll : session.help_scroll + max(1, geometry[3] - 2)]
    return draw_modal("twig help", visible, palette, geometry, palette.border_focus)


def render_worktree_modal(session: Session, width: int, height: int) -> str:
    palette = session.theme.palette
    geometry = _modal_geometry(width, height, 80, 2 * len(session.worktrees) + 4)
    body: list[str] = []
    if not session.worktrees:
        body.append(f"{palette.dim}(no linked worktrees){palette.reset}")
    for index, worktree in enumerate(session.worktrees):
        selected = index == session.worktree_selected
        marker = HIGHLIGHT_SYMBOL if selected else " " * len(HIGHLIGHT_SYMBOL)
        line = f"{marker}{palette.diff_hunk}{worktree.branch_label:<15}{palette.reset} {worktree.path}"
        body.append(selected_with_ansi(line) if selected and palette.reset else line)
        body.append(f"{' ' * len(marker)}{palette.dim}HEAD: {worktree.head[:12]}{palette.reset}")
    return draw_modal("Switch Linked Worktree", body, palette, geometry, palette.diff_hunk)


def render_commit_modal(session: Session, width: int, height: int) -> str:
    palette = session.theme.palette
    geometry = _modal_geometry(width, height, 64, 6)
    body = [
        f"{session.commit_message}_",
        "",
        f"{palette.bold}Enter{palette.reset} to commit, {palette.bold}Esc{palette.reset} to cancel",
    ]
    return draw_modal("Commit Message", body, palette, geometry, palette.staged)


def render_frame(session: Session, keymap: Mapping[str, str], width: int, height: int) -> str:
    """Return the complete escape output for one frame."""
    if session.view_mode is ViewMode.DIFF:
        lines = compose_diff_lines(session, width, height)
    else:
        lines = compose_tree_lines(session, width, height)
    out = ["\033[H\033[J"]
    for row, line in enumerate(lines):
        out.append(f"\033[{row + 1};1H{line}\033[0m")
    if session.show_help:
        out.append(render_help_modal(session, keymap, width, height))
    elif session.show_worktrees:
        out.append(render_worktree_modal(session, width, height))
    elif session.show_commit_dialog:
        out.append(render_commit_modal(session, width, height))
    return "".join(out)


def write_frame(fd: int, frame: str) -> None:
    os.write(fd, frame.encode("utf-8", errors="replace"))
