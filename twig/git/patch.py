"""Hunk-level parsing of unified diff text and patch reconstruction.

``parse_diff`` splits a diff blob into its file header lines and an ordered
list of hunks with display-line offsets; ``build_patch`` rebuilds a minimal
single-hunk patch that ``git apply`` accepts.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..ansi import strip_ansi

HUNK_MARKER = "@@"


@dataclass(frozen=True)
class Hunk:
    """One ``@@`` block of a diff.

    ``content`` holds the marker line plus body lines, newline-terminated.
    ``display_start``/``display_end`` are inclusive line indices into the
    diff text the hunk was parsed from.
    """

    header: str
    content: str
    display_start: int
    display_end: int

    def contains_line(self, line_index: int) -> bool:
        return self.display_start <= line_index <= self.display_end


def parse_diff(diff_text: str) -> tuple[list[str], list[Hunk]]:
    """Split ``diff_text`` into ``(header_lines, hunks)``.

    Escape sequences are stripped before matching so colored and plain
    renderings of the same diff parse identically.
    """
    lines = [strip_ansi(line) for line in diff_text.splitlines()]
    headers: list[str] = []
    hunks: list[Hunk] = []

    index = 0
    while index < len(lines) and not lines[index].startswith(HUNK_MARKER):
        headers.append(lines[index])
        index += 1

    while index < len(lines):
        start = index
        body = [lines[index]]
        index += 1
        while index < len(lines) and not lines[index].startswith(HUNK_MARKER):
            body.append(lines[index])
            index += 1
        hunks.append(
            Hunk(
                header=lines[start],
                content="".join(f"{line}\n" for line in body),
                display_start=start,
                display_end=index - 1,
            )
        )

    return headers, hunks


def build_patch(headers: list[str], hunk: Hunk) -> str:
    """Return the file headers followed by one hunk, ready for ``git apply``."""
    return "".join(f"{line}\n" for line in headers) + hunk.content
