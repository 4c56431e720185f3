"""twig: git status as a tree, plus an interactive staging session.

``main`` runs the command-line entry point; the status model, git surface,
session and terminal runtime live in subpackages.
"""

from __future__ import annotations


def main(*args, **kwargs):
    """Lazily import the CLI so ``import twig`` stays cheap."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["main"]
