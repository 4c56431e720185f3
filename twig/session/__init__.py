"""Interactive session state machine.

``Session`` holds selection, layout, filter, visual-mode, history, diff and
patch-mode state and orchestrates git calls through an injected backend.
"""

from __future__ import annotations

from .history import ActionHistory, HistoryEntry
from .session import DIFF_PLACEHOLDER, PaneState, Session, SessionBackend
from .state import FilterMode, Focus, Layout, StageAction, ViewMode

__all__ = [
    "ActionHistory",
    "HistoryEntry",
    "DIFF_PLACEHOLDER",
    "PaneState",
    "Session",
    "SessionBackend",
    "FilterMode",
    "Focus",
    "Layout",
    "StageAction",
    "ViewMode",
]
