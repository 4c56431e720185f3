"""Linked-worktree listing parsed from ``git worktree list --porcelain``."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Worktree:
    """One linked worktree checkout of the repository."""

    path: str
    head: str = ""
    branch: str = ""

    @property
    def branch_label(self) -> str:
        """Short branch name, or ``(detached)`` when no branch is checked out."""
        if not self.branch:
            return "(detached)"
        return self.branch.removeprefix("refs/heads/")


def parse_worktrees(output: str) -> list[Worktree]:
    """Parse blank-line-delimited porcelain records keyed by ``worktree``/``HEAD``/``branch``."""
    worktrees: list[Worktree] = []
    fields: dict[str, str] = {}

    def flush() -> None:
        path = fields.get("worktree", "")
        if path:
            worktrees.append(Worktree(path=path, head=fields.get("HEAD", ""), branch=fields.get("branch", "")))
        fields.clear()

    for line in output.splitlines():
        if not line.strip():
            flush()
            continue
        key, sep, value = line.partition(" ")
        if not sep:
            continue
        if key in {"worktree", "HEAD", "branch"}:
            fields[key] = value
    flush()
    return worktrees
