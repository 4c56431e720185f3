"""Git command surface, unified-diff hunk parsing and worktree listing."""

from __future__ import annotations

from .commands import GitBackend
from .patch import Hunk, build_patch, parse_diff
from .worktrees import Worktree, parse_worktrees

__all__ = [
    "GitBackend",
    "Hunk",
    "parse_diff",
    "build_patch",
    "Worktree",
    "parse_worktrees",
]
