"""Git command surface used by the status tree and the interactive session.

Every repository read or mutation goes through ``GitBackend``. Commands run
synchronously from the repository top level, since porcelain paths are
root-relative; failures raise ``GitCommandError`` carrying git's
standard-error text.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Sequence

from ..errors import GitCommandError
from ..status_model.build import STATUS_HEADER_PREFIX, parse_numstat
from .worktrees import Worktree, parse_worktrees

logger = logging.getLogger(__name__)

GIT_EXECUTABLE = "git"
DIFF_EXIT_DIFFERENCES = 1
NULL_DEVICE = "/dev/null"


class GitBackend:
    """Thin wrapper around the ``git`` executable with fixed argument sets."""

    def __init__(self, executable: str = GIT_EXECUTABLE) -> None:
        self.executable = executable
        self._root_for: tuple[str, str | None] | None = None

    def repo_root(self) -> str | None:
        """Return the work tree top level for the current directory, or ``None``.

        Cached per working directory so a worktree switch re-resolves it.
        """
        cwd = os.getcwd()
        if self._root_for is None or self._root_for[0] != cwd:
            try:
                root = self._run(["rev-parse", "--show-toplevel"], at_root=False).strip() or None
            except GitCommandError:
                root = None
            self._root_for = (cwd, root)
        return self._root_for[1]

    def _run(
        self,
        args: Sequence[str],
        *,
        input_text: str | None = None,
        ok_codes: tuple[int, ...] = (0,),
        at_root: bool = True,
    ) -> str:
        command = [self.executable, *args]
        cwd = self.repo_root() if at_root else None
        logger.debug("running %s in %s", " ".join(command), cwd or ".")
        try:
            proc = subprocess.run(
                command,
                input=input_text,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                cwd=cwd,
            )
        except OSError as exc:
            logger.warning("could not start %s: %s", command[:2], exc)
            raise GitCommandError(command, None, str(exc)) from exc
        if proc.returncode not in ok_codes:
            logger.warning("%s exited with %s: %s", command[:2], proc.returncode, proc.stderr.strip())
            raise GitCommandError(command, proc.returncode, proc.stderr)
        return proc.stdout

    def status_lines(self) -> list[str]:
        """Return porcelain status lines, branch header first when present."""
        return self._run(["status", "--porcelain", "-b", "-u"]).splitlines()

    def status_header(self) -> str:
        """Return the ``##`` branch header line, or ``""`` when unavailable."""
        try:
            lines = self._run(["status", "--porcelain", "-b"]).splitlines()
        except GitCommandError:
            return ""
        if lines and lines[0].startswith(STATUS_HEADER_PREFIX):
            return lines[0]
        return ""

    def diff_stats(self) -> dict[str, tuple[int, int]]:
        """Return per-path ``(added, deleted)`` summed over unstaged and staged diffs."""
        stats: dict[str, tuple[int, int]] = {}
        parse_numstat(self._run(["diff", "--numstat"]), stats)
        parse_numstat(self._run(["diff", "--cached", "--numstat"]), stats)
        return stats

    def diff(self, paths: Sequence[str], staged: bool = False, untracked: bool = False) -> str:
        """Return uncolored diff text for ``paths``.

        ``staged`` diffs the index against HEAD; ``untracked`` diffs against an
        empty baseline. Exit code 1 means differences were found.
        """
        args = ["diff", "--no-color"]
        if staged:
            args.append("--cached")
        if untracked:
            args.extend(["--no-index", "--", NULL_DEVICE, *paths])
        else:
            args.extend(["--", *paths])
        return self._run(args, ok_codes=(0, DIFF_EXIT_DIFFERENCES))

    def stage(self, paths: Sequence[str]) -> None:
        self._run(["add", "-A", "--", *paths])

    def unstage(self, paths: Sequence[str]) -> None:
        self._run(["restore", "--staged", "--", *paths])

    def commit(self, message: str) -> None:
        self._run(["commit", "-m", message])

    def apply_patch(self, patch_text: str, cached: bool = True, reverse: bool = False) -> None:
        """Pipe ``patch_text`` into ``git apply``, optionally targeting the index."""
        args = ["apply"]
        if cached:
            args.append("--cached")
        if reverse:
            args.append("--reverse")
        args.append("-")
        self._run(args, input_text=patch_text)

    def worktrees(self) -> list[Worktree]:
        return parse_worktrees(self._run(["worktree", "list", "--porcelain"]))

    def config_value(self, key: str) -> str | None:
        """Return ``git config <key>`` or ``None`` when unset or git fails."""
        try:
            value = self._run(["config", key]).strip()
        except GitCommandError:
            return None
        return value or None

    def config_regexp(self, pattern: str) -> dict[str, str]:
        """Return ``{key: value}`` for every config entry matching ``pattern``."""
        try:
            output = self._run(["config", "--get-regexp", pattern])
        except GitCommandError:
            return {}
        values: dict[str, str] = {}
        for line in output.splitlines():
            key, sep, value = line.partition(" ")
            if sep:
                values[key] = value
        return values
