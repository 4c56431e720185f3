"""In-memory git backend used by session and runtime tests."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from twig.errors import GitCommandError
from twig.git import Worktree


class FakeBackend:
    def __init__(self, lines: Sequence[str], stats: dict[str, tuple[int, int]] | None = None) -> None:
        self.lines = list(lines)
        self.stats = dict(stats or {})
        self.diff_text = ""
        self.diff_error: GitCommandError | None = None
        self.fail_status = False
        self.worktree_list: list[Worktree] = []
        self.on_apply: Callable[[], None] | None = None
        self.calls: list[tuple] = []

    def status_lines(self) -> list[str]:
        if self.fail_status:
            raise GitCommandError(["git", "status"], 128, "fatal: boom")
        return list(self.lines)

    def diff_stats(self) -> dict[str, tuple[int, int]]:
        return dict(self.stats)

    def diff(self, paths: Sequence[str], staged: bool = False, untracked: bool = False) -> str:
        self.calls.append(("diff", tuple(paths), staged, untracked))
        if self.diff_error is not None:
            raise self.diff_error
        return self.diff_text

    def stage(self, paths: Sequence[str]) -> None:
        self.calls.append(("stage", tuple(paths)))

    def unstage(self, paths: Sequence[str]) -> None:
        self.calls.append(("unstage", tuple(paths)))

    def commit(self, message: str) -> None:
        self.calls.append(("commit", message))

    def apply_patch(self, patch_text: str, cached: bool = True, reverse: bool = False) -> None:
        self.calls.append(("apply", patch_text, cached, reverse))
        if self.on_apply is not None:
            self.on_apply()

    def worktrees(self) -> list[Worktree]:
        return list(self.worktree_list)

    def staging_calls(self) -> list[tuple]:
        return [call for call in self.calls if call[0] in {"stage", "unstage"}]
