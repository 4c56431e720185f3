"""Runtime composition layer for the interactive session.

Builds the session, wires key handling and side-effect callbacks, and starts
the loop on the controlling terminal.
"""

from __future__ import annotations

import logging
import os
import sys

from ..config import Settings, save_theme_name
from ..session import Session, SessionBackend
from ..ui_theme import UITheme
from .clipboard import copy_text_to_clipboard
from .keys import build_keymap
from .loop import RuntimeLoopCallbacks, SessionKeyHandler, run_main_loop
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def build_session(settings: Settings, backend: SessionBackend, theme: UITheme) -> Session:
    """Create a session from resolved settings and load the first snapshot."""
    session = Session(
        backend,
        indent=settings.indent,
        collapse=settings.collapse,
        theme=theme,
        glyph_overrides=settings.glyph_overrides,
    )
    session.refresh()
    return session


def run_session(settings: Settings, backend: SessionBackend, theme: UITheme) -> None:
    """Run the interactive session until the user quits.

    Raises ``SystemExit`` when stdin or stdout is not a terminal. Git failures
    during the initial load propagate to the caller.
    """
    if not os.isatty(sys.stdin.fileno()) or not os.isatty(sys.stdout.fileno()):
        raise SystemExit("Interactive mode requires a terminal.")

    session = build_session(settings, backend, theme)
    keymap = build_keymap(settings.key_overrides)
    handler = SessionKeyHandler(
        session,
        keymap,
        RuntimeLoopCallbacks(
            copy_to_clipboard=copy_text_to_clipboard,
            save_theme_name=save_theme_name,
        ),
    )

    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)
    logger.info("starting interactive session in %s", os.getcwd())
    run_main_loop(session, terminal, stdin_fd, stdout_fd, handler)
