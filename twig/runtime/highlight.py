"""Diff colorizing for the diff view.

Diff text is fetched from git without color so hunks re-apply cleanly; it
is highlighted here with Pygments' ``DiffLexer`` purely for display.
"""

from __future__ import annotations

from functools import lru_cache

_PYGMENTS_READY = False
_PYGMENTS_AVAILABLE = False
_PYGMENTS_HIGHLIGHT = None
_DIFF_LEXER = None
_TERMINAL_FORMATTER = None


def _ensure_pygments_loaded() -> bool:
    """Import and cache Pygments callables on first use.

    Returns whether Pygments is available in the runtime environment.
    """
    global _PYGMENTS_READY, _PYGMENTS_AVAILABLE, _PYGMENTS_HIGHLIGHT, _DIFF_LEXER, _TERMINAL_FORMATTER
    if _PYGMENTS_READY:
        return _PYGMENTS_AVAILABLE

    _PYGMENTS_READY = True
    try:
        from pygments import highlight as pygments_highlight
        from pygments.formatters import TerminalFormatter
        from pygments.lexers import DiffLexer
    except ImportError:
        _PYGMENTS_AVAILABLE = False
        return False

    _DIFF_LEXER = DiffLexer(stripnl=False, ensurenl=False)
    _TERMINAL_FORMATTER = TerminalFormatter()
    _PYGMENTS_HIGHLIGHT = pygments_highlight
    _PYGMENTS_AVAILABLE = True
    return True


@lru_cache(maxsize=8)
def colorize_diff(diff_text: str) -> tuple[str, ...]:
    """Return one ANSI-colored display line per line of ``diff_text``.

    The plain lines are returned when Pygments is missing or fails, and when
    highlighting would change the line count, so hunk offsets always index
    the same rows.
    """
    plain = tuple(diff_text.splitlines())
    if not diff_text or not _ensure_pygments_loaded():
        return plain
    try:
        colored = tuple(_PYGMENTS_HIGHLIGHT(diff_text, _DIFF_LEXER, _TERMINAL_FORMATTER).splitlines())
    except Exception:
        return plain
    if len(colored) != len(plain):
        return plain
    return colored
