"""Porcelain status-line parsing and filter policy.

Turns one ``git status --porcelain`` line into a normalized status code and
the path text, resolves rename records into a tree location plus a display
name, and decides which records survive the staged/modified/untracked filters.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

UNTRACKED = "??"
STAGED_SUFFIX = "+"
RENAME_SEPARATOR = " -> "
MIN_STATUS_LINE_LENGTH = 4

_C_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "t": 0x09,
    "n": 0x0A,
    "v": 0x0B,
    "f": 0x0C,
    "r": 0x0D,
    '"': 0x22,
    "\\": 0x5C,
}


@dataclass(frozen=True)
class StatusRecord:
    """Raw two-character status code and path text from one porcelain line."""

    code: str
    path_text: str


@dataclass(frozen=True)
class ResolvedPath:
    """Where a status record lands in the tree and how it is labelled.

    ``location`` is the tree insertion path (the old path for renames) and
    ``stats_key`` the path numstat output reports (the new path for renames).
    """

    location: str
    display_name: str
    stats_key: str
    rename_to: str | None = None


@dataclass(frozen=True)
class StatusFilter:
    """Record filters applied before tree insertion; active flags compose with AND."""

    staged_only: bool = False
    modified_only: bool = False
    untracked_only: bool = False

    def accepts(self, status: str) -> bool:
        if self.staged_only and not status.endswith(STAGED_SUFFIX):
            return False
        if self.modified_only and status == UNTRACKED:
            return False
        if self.untracked_only and status != UNTRACKED:
            return False
        return True


NO_FILTER = StatusFilter()


def is_staged(status: str) -> bool:
    return status.endswith(STAGED_SUFFIX)


def is_untracked(status: str) -> bool:
    return status == UNTRACKED


def status_class(status: str) -> str:
    """Return the one-character class shown in status gutters.

    ``+`` staged, ``?`` untracked, ``M`` any other change, space for no status.
    """
    if not status:
        return " "
    if is_staged(status):
        return "+"
    if is_untracked(status):
        return "?"
    return "M"


def split_status_line(line: str) -> StatusRecord | None:
    """Split a porcelain line into its code and path text, or ``None`` if too short."""
    if len(line) < MIN_STATUS_LINE_LENGTH:
        return None
    return StatusRecord(code=line[:2], path_text=line[3:])


def normalize_status(code: str) -> str:
    """Map a two-letter index/worktree code to a normalized status."""
    index_state, worktree_state = code[0], code[1]
    if index_state == "?" and worktree_state == "?":
        return UNTRACKED
    if worktree_state == " ":
        return f"{index_state}{STAGED_SUFFIX}"
    return worktree_state


def parse_status_line(line: str) -> tuple[str, str] | None:
    """Parse one porcelain line into ``(path_text, normalized_status)``.

    Lines shorter than four characters are malformed and yield ``None``.
    """
    record = split_status_line(line)
    if record is None:
        return None
    return record.path_text, normalize_status(record.code)


def unquote_path(text: str) -> str:
    """Undo git's C-style quoting of unusual path names.

    Unquoted text is returned unchanged; octal escapes are collected as raw
    bytes so multi-byte UTF-8 names decode correctly.
    """
    if len(text) < 2 or not (text.startswith('"') and text.endswith('"')):
        return text

    body = text[1:-1]
    out = bytearray()
    index = 0
    while index < len(body):
        ch = body[index]
        if ch != "\\" or index + 1 >= len(body):
            out.extend(ch.encode("utf-8"))
            index += 1
            continue
        nxt = body[index + 1]
        octal = body[index + 1 : index + 4]
        if len(octal) == 3 and all(c in "01234567" for c in octal):
            out.append(int(octal, 8) & 0xFF)
            index += 4
            continue
        if nxt in _C_ESCAPES:
            out.append(_C_ESCAPES[nxt])
        else:
            out.extend(("\\" + nxt).encode("utf-8"))
        index += 2
    return out.decode("utf-8", errors="replace")


def resolve_path(path_text: str, code: str) -> ResolvedPath:
    """Resolve tree location, display name and stats key for a record.

    ``code`` is the raw two-letter porcelain code, so a rename is recognized
    even when the worktree column (``RM``) decides the normalized status.
    """
    if "R" in code and RENAME_SEPARATOR in path_text:
        parts = path_text.split(RENAME_SEPARATOR)
        if len(parts) == 2:
            old = unquote_path(parts[0])
            new = unquote_path(parts[1])
            old_name = posixpath.basename(old)
            if posixpath.dirname(old) == posixpath.dirname(new):
                display = f"{old_name}{RENAME_SEPARATOR}{posixpath.basename(new)}"
            else:
                display = f"{old_name}{RENAME_SEPARATOR}{new}"
            return ResolvedPath(location=old, display_name=display, stats_key=new, rename_to=new)

    path = unquote_path(path_text)
    return ResolvedPath(location=path, display_name=posixpath.basename(path.rstrip("/")), stats_key=path)
