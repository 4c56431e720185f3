"""Linear undo/redo history of staging actions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .state import StageAction


@dataclass(frozen=True)
class HistoryEntry:
    """Paths touched by one staging action and the direction applied."""

    paths: tuple[str, ...]
    action: StageAction


@dataclass
class ActionHistory:
    """Undo and redo stacks; recording a fresh action clears redo."""

    undo_stack: list[HistoryEntry] = field(default_factory=list)
    redo_stack: list[HistoryEntry] = field(default_factory=list)

    def push_action(self, paths: Sequence[str], action: StageAction) -> HistoryEntry:
        entry = HistoryEntry(paths=tuple(paths), action=action)
        self.undo_stack.append(entry)
        self.redo_stack.clear()
        return entry

    def undo(self) -> HistoryEntry | None:
        """Move the latest entry to the redo stack and return it."""
        if not self.undo_stack:
            return None
        entry = self.undo_stack.pop()
        self.redo_stack.append(entry)
        return entry

    def redo(self) -> HistoryEntry | None:
        """Move the latest undone entry back to the undo stack and return it."""
        if not self.redo_stack:
            return None
        entry = self.redo_stack.pop()
        self.undo_stack.append(entry)
        return entry

    def clear(self) -> None:
        self.undo_stack.clear()
        self.redo_stack.clear()

    @property
    def can_undo(self) -> bool:
        return bool(self.undo_stack)

    @property
    def can_redo(self) -> bool:
        return bool(self.redo_stack)
