"""Mode enums for the interactive session."""

from __future__ import annotations

from enum import Enum


class ViewMode(Enum):
    TREE = "tree"
    DIFF = "diff"


class Layout(Enum):
    """Tree layouts. ``next`` cycles the regular three; the easter egg exits to unified."""

    UNIFIED = "unified"
    SPLIT = "split"
    COMPACT = "compact"
    EASTER_EGG = "easter_egg"

    def next(self) -> Layout:
        if self is Layout.UNIFIED:
            return Layout.SPLIT
        if self is Layout.SPLIT:
            return Layout.COMPACT
        return Layout.UNIFIED


class FilterMode(Enum):
    ALL = "All"
    MODIFIED = "Modified"
    STAGED = "Staged"

    def next(self) -> FilterMode:
        order = list(FilterMode)
        return order[(order.index(self) + 1) % len(order)]

    @property
    def label(self) -> str:
        return self.value


class Focus(Enum):
    STAGED = "staged"
    UNSTAGED = "unstaged"

    def next(self) -> Focus:
        return Focus.UNSTAGED if self is Focus.STAGED else Focus.STAGED


class StageAction(Enum):
    STAGE = "stage"
    UNSTAGE = "unstage"

    def inverse(self) -> StageAction:
        return StageAction.UNSTAGE if self is StageAction.STAGE else StageAction.STAGE
