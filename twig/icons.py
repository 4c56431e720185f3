"""Nerd Font icon lookup for tree rows.

Special names win over extensions. Unknown names fall back to the theme's
generic directory/file icon.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from .ui_theme import UITheme

_SPECIAL_NAMES: dict[str, str] = {
    "LICENSE": "",
    "Makefile": "",
    "Dockerfile": "",
    "pyproject.toml": "",
    "package.json": "",
    ".env": "",
    ".gitignore": "",
}

_SPECIAL_DIRECTORIES: dict[str, str] = {
    "src": "",
    "tests": "",
    "build": "",
    "dist": "",
    "target": "",
    "docs": "",
    "config": "",
    "scripts": "",
    "assets": "",
    ".git": "",
    ".github": "",
}

_EXTENSIONS: dict[str, str] = {
    "py": "",
    "rs": "",
    "toml": "",
    "md": "",
    "json": "",
    "yml": "",
    "yaml": "",
    "lock": "",
    "sh": "",
    "js": "",
    "ts": "",
    "go": "",
    "rb": "",
    "java": "",
    "c": "",
    "cpp": "",
    "swift": "",
    "kt": "",
    "css": "",
    "html": "",
    "sql": "",
    "png": "",
    "jpg": "",
    "jpeg": "",
    "gif": "",
    "svg": "",
}


def lookup_icon(name: str, is_dir: bool) -> str | None:
    """Return the specific icon glyph for ``name`` or ``None`` when generic."""
    if is_dir:
        return _SPECIAL_DIRECTORIES.get(name)
    special = _SPECIAL_NAMES.get(name)
    if special is not None:
        return special
    suffix = PurePosixPath(name).suffix
    if not suffix:
        return None
    return _EXTENSIONS.get(suffix[1:].lower())


def icon_for(name: str, is_dir: bool, theme: UITheme) -> str:
    """Return icon prefix (glyph plus trailing space) for a tree row, or ``""``."""
    generic = theme.icon_dir if is_dir else theme.icon_file
    if not theme.is_nerd or theme.simple_icons:
        return generic
    specific = lookup_icon(name, is_dir)
    return f"{specific} " if specific else generic
