"""Formatting helpers for status-tree rows, diff-stat bars and branch headers."""

from __future__ import annotations

from collections.abc import Sequence

from ..ansi import display_width
from ..icons import icon_for
from ..ui_theme import UITheme
from .parser import is_staged
from .types import FlatNode

DIFF_STAT_BAR_CAP = 10
SUMMARY_BAR_CAP = 15
DEFAULT_INDENT = 3
MIN_INDENT = 2
MAX_INDENT = 10


def clamp_indent(indent: int) -> int:
    return max(MIN_INDENT, min(MAX_INDENT, int(indent)))


def diff_stat_bar_counts(added: int, deleted: int, cap: int = DIFF_STAT_BAR_CAP) -> tuple[int, int]:
    """Return ``(plus, minus)`` glyph counts for a diff-stat bar.

    Totals within ``cap`` are shown exactly. Larger totals are scaled so the
    two counts keep the add/delete ratio and always sum to ``cap``.
    """
    total = added + deleted
    if total <= cap:
        return added, deleted
    plus = round(added / total * cap)
    return plus, cap - plus


def format_diff_stat_bar(added: int, deleted: int, theme: UITheme, cap: int = DIFF_STAT_BAR_CAP) -> str:
    """Render colored plus/minus glyphs for one diff-stat bar."""
    plus, minus = diff_stat_bar_counts(added, deleted, cap)
    palette = theme.palette
    out: list[str] = []
    if plus:
        out.append(f"{palette.stat_added}{theme.diff_bar_plus * plus}{palette.reset}")
    if minus:
        out.append(f"{palette.stat_deleted}{theme.diff_bar_minus * minus}{palette.reset}")
    return "".join(out)


def format_row_stats(stats: tuple[int, int] | None, theme: UITheme) -> str:
    """Return `` | TOTAL BAR`` for rows with line changes, else ``""``."""
    if stats is None:
        return ""
    added, deleted = stats
    total = added + deleted
    if total <= 0:
        return ""
    return f" | {total} {format_diff_stat_bar(added, deleted, theme)}"


def file_label(name: str, status: str, theme: UITheme) -> tuple[str, str]:
    """Return ``(plain, colored)`` labels for a file row: icon, name, ``(STATUS)``."""
    palette = theme.palette
    icon = icon_for(name, False, theme)
    color = palette.staged if is_staged(status) else palette.unstaged
    plain = f"{icon}{name} ({status})"
    colored = f"{icon}{color}{name}{palette.reset} ({status})"
    return plain, colored


def directory_label(name: str, theme: UITheme) -> tuple[str, str]:
    """Return ``(plain, colored)`` labels for a directory row."""
    palette = theme.palette
    icon = icon_for(name, True, theme)
    return f"{icon}{name}", f"{icon}{palette.dir_name}{name}{palette.reset}"


def max_name_width(rows: Sequence[FlatNode]) -> int:
    """Return the widest ``connector + name`` over the whole row sequence."""
    return max((display_width(row.connector) + display_width(row.name) for row in rows), default=0)


def render_rows(rows: Sequence[FlatNode], theme: UITheme, name_width: int | None = None) -> list[str]:
    """Render flattened rows as plain-output lines with aligned stats columns."""
    width = max_name_width(rows) if name_width is None else name_width
    out: list[str] = []
    for row in rows:
        used = display_width(row.connector) + display_width(row.name)
        stats = format_row_stats(row.stats, theme)
        padding = " " * max(0, width - used) if stats else ""
        out.append(f"{row.connector}{row.name_colored}{padding}{stats}")
    return out


def render_tree(rows: Sequence[FlatNode], theme: UITheme, root_name: str = ".") -> str:
    """Render the non-interactive tree text: root line then one line per row."""
    palette = theme.palette
    lines = [f"{palette.bold}{root_name}{palette.reset}"]
    lines.extend(render_rows(rows, theme))
    return "\n".join(lines) + "\n"


def format_branch_header(line: str, theme: UITheme) -> str:
    """Render a ``## branch...upstream [ahead N, behind M]`` porcelain header.

    Returns ``""`` for empty input.
    """
    if not line:
        return ""
    palette = theme.palette
    content = line.removeprefix("##").strip()

    no_commits_prefix = "No commits yet on "
    if content.startswith(no_commits_prefix):
        return f"On branch {content[len(no_commits_prefix):]} (No commits yet)"

    local, sep, rest = content.partition("...")
    remote = None
    counts = None
    if sep:
        remote, bracket, tail = rest.partition(" [")
        counts = tail.rstrip("]") if bracket else None
    else:
        local, bracket, tail = content.partition(" [")
        counts = tail.rstrip("]") if bracket else None

    out = [f"On branch {palette.bold}{local}{palette.reset}"]
    if remote:
        out.append(f" -> {remote}")
    if counts:
        for part in counts.split(", "):
            if part.startswith("ahead "):
                out.append(f" {palette.stat_added}↑{part.removeprefix('ahead ')}{palette.reset}")
            elif part.startswith("behind "):
                out.append(f" {palette.stat_deleted}↓{part.removeprefix('behind ')}{palette.reset}")
            elif part == "gone":
                out.append(f" {palette.stat_deleted}(gone){palette.reset}")
    return "".join(out)
