"""Exception types raised across twig modules."""

from __future__ import annotations


class TwigError(Exception):
    """Base class for errors twig reports to the operator."""


class GitCommandError(TwigError):
    """A git invocation failed to launch or exited unsuccessfully.

    ``stderr`` holds the captured standard-error text (empty when the process
    never started) and ``returncode`` is ``None`` for launch failures.
    """

    def __init__(self, args: list[str], returncode: int | None, stderr: str = "") -> None:
        self.command = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        super().__init__(self._describe())

    def _describe(self) -> str:
        label = " ".join(self.command[:2]) if self.command else "git"
        if self.returncode is None:
            detail = self.stderr or "could not be started"
            return f"{label} failed: {detail}"
        if self.stderr:
            return f"{label} failed: {self.stderr}"
        return f"{label} failed with exit code {self.returncode}"
