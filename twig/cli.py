"""Command-line front door for twig.

Parses CLI options, resolves settings from git config and the JSON
preferences file, then either prints the status tree, opens the changed files
in ``$EDITOR``, or dispatches into the interactive session runtime.
"""

from __future__ import annotations

import argparse
import logging
import os
import shlex
import subprocess
import sys

from .config import Settings, resolve_settings
from .errors import GitCommandError
from .git import GitBackend
from .logging_setup import configure_logging
from .status_model import StatusFilter, build_status_tree, flatten_tree, format_branch_header, iter_files, render_tree
from .ui_theme import UITheme, apply_glyph_overrides, available_theme_names, resolve_theme

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vim"
CLEAN_MESSAGE = "(working directory clean)"


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twig",
        description="Show git status as a tree, or browse and stage changes interactively.",
    )
    parser.add_argument("-i", "--indent", type=_positive_int, default=None, help="Indent width per level (2-10).")
    parser.add_argument("-c", "--collapse", action="store_true", help="Collapse single-child directory chains.")
    parser.add_argument("-I", "--interactive", action="store_true", help="Start the interactive session.")
    parser.add_argument("-s", "--staged-only", action="store_true", help="Only show staged changes.")
    parser.add_argument("-m", "--modified-only", action="store_true", help="Hide untracked files.")
    parser.add_argument("--untracked-only", action="store_true", help="Only show untracked files.")
    parser.add_argument("-o", "--open", action="store_true", help="Open every changed file in $EDITOR.")
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--simple-icons", action="store_true", help="Use plain glyphs instead of file-type icons.")
    parser.add_argument("--no-color", action="store_true", help="Disable color output even on TTY.")
    parser.add_argument("--log-level", default=None, help="Log level for the twig log file (default WARNING).")
    return parser


def build_theme(settings: Settings, *, simple_icons: bool, no_color: bool) -> UITheme:
    theme = resolve_theme(settings.theme_name, no_color=no_color).with_simple_icons(simple_icons)
    return apply_glyph_overrides(theme, settings.glyph_overrides)


def render_status_view(
    backend: GitBackend,
    settings: Settings,
    theme: UITheme,
    status_filter: StatusFilter,
) -> str:
    """Return the non-interactive output: branch header, then tree or the clean marker."""
    lines = backend.status_lines()
    tree = build_status_tree(lines, backend.diff_stats(), status_filter)
    rows = flatten_tree(tree, theme, indent=settings.indent, collapse=settings.collapse)

    out: list[str] = []
    header = format_branch_header(backend.status_header(), theme)
    if header:
        out.append(header + "\n")
    if rows:
        out.append(render_tree(rows, theme))
    else:
        out.append(CLEAN_MESSAGE + "\n")
    return "".join(out)


def open_in_editor(backend: GitBackend, status_filter: StatusFilter) -> None:
    """Launch ``$EDITOR`` (or vim) on every changed file that survives the filters."""
    tree = build_status_tree(backend.status_lines(), status_filter=status_filter)
    paths = [node.rename_to or node.path for node in iter_files(tree)]
    if not paths:
        print("No modified files to open.")
        return

    cmd = shlex.split(os.environ.get("EDITOR", "").strip() or DEFAULT_EDITOR)
    logger.info("opening %d file(s) with %s", len(paths), cmd[0])
    try:
        proc = subprocess.run([*cmd, *paths], check=False, cwd=backend.repo_root())
    except OSError as exc:
        raise SystemExit(f"Failed to launch editor: {exc}") from exc
    if proc.returncode != 0:
        logger.warning("editor %s exited with %s", cmd[0], proc.returncode)
        raise SystemExit(f"Editor exited with error (status {proc.returncode})")


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run the requested twig mode."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.interactive and args.open:
        raise SystemExit("Cannot use both --interactive and --open")

    backend = GitBackend()
    settings = resolve_settings(backend, indent=args.indent, collapse=args.collapse, theme=args.theme)
    status_filter = StatusFilter(
        staged_only=args.staged_only,
        modified_only=args.modified_only,
        untracked_only=args.untracked_only,
    )

    try:
        if args.open:
            open_in_editor(backend, status_filter)
            return
        if args.interactive:
            from .runtime import run_session

            theme = build_theme(settings, simple_icons=args.simple_icons, no_color=args.no_color)
            run_session(settings, backend, theme)
            return
        no_color = args.no_color or not sys.stdout.isatty()
        theme = build_theme(settings, simple_icons=args.simple_icons, no_color=no_color)
        sys.stdout.write(render_status_view(backend, settings, theme, status_filter))
    except GitCommandError as exc:
        logger.error("%s", exc)
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
