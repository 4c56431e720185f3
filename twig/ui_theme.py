"""UI theme definitions and selection helpers.

A theme is a set of tree-drawing glyphs (connectors, diff-stat bar glyphs and
optional icons) plus an ANSI palette. The palette can be swapped for a plain
one when color output is disabled without changing the glyphs.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace


@dataclass(frozen=True)
class Palette:
    """Semantic ANSI palette used by renderers."""

    reset: str
    bold: str
    dim: str
    reverse: str
    dir_name: str
    file_name: str
    staged: str
    unstaged: str
    untracked: str
    stat_added: str
    stat_deleted: str
    diff_hunk: str
    selected_row: str
    visual_row: str
    hunk_selected: str
    border: str
    border_focus: str
    search_prompt: str
    status_message: str
    help_heading: str
    help_key: str
    help_dim: str


DEFAULT_PALETTE = Palette(
    reset="\033[0m",
    bold="\033[1m",
    dim="\033[2m",
    reverse="\033[7m",
    dir_name="\033[1;34m",
    file_name="\033[38;5;252m",
    staged="\033[32m",
    unstaged="\033[31m",
    untracked="\033[31m",
    stat_added="\033[32m",
    stat_deleted="\033[31m",
    diff_hunk="\033[36m",
    selected_row="\033[1;48;5;236m",
    visual_row="\033[48;5;238m",
    hunk_selected="\033[1;48;5;236m",
    border="\033[38;5;240m",
    border_focus="\033[33m",
    search_prompt="\033[33m",
    status_message="\033[38;5;214m",
    help_heading="\033[1;38;5;81m",
    help_key="\033[38;5;229m",
    help_dim="\033[2;38;5;250m",
)

PLAIN_PALETTE = Palette(**{item.name: "" for item in fields(Palette)})


@dataclass(frozen=True)
class UITheme:
    """Tree glyphs, icon policy and palette for one named theme."""

    name: str
    tree_vertical: str
    tree_branch: str
    tree_end: str
    tree_dash: str
    icon_dir: str
    icon_file: str
    diff_bar_plus: str
    diff_bar_minus: str
    is_nerd: bool = False
    simple_icons: bool = False
    palette: Palette = DEFAULT_PALETTE

    def with_simple_icons(self, simple: bool) -> UITheme:
        return replace(self, simple_icons=bool(simple))

    def without_color(self) -> UITheme:
        return replace(self, palette=PLAIN_PALETTE)

    @property
    def colored(self) -> bool:
        return self.palette is not PLAIN_PALETTE


ASCII_THEME = UITheme(
    name="ascii",
    tree_vertical="|",
    tree_branch="|",
    tree_end="`",
    tree_dash="-",
    icon_dir="",
    icon_file="",
    diff_bar_plus="+",
    diff_bar_minus="-",
)

UNICODE_THEME = UITheme(
    name="unicode",
    tree_vertical="│",
    tree_branch="├",
    tree_end="└",
    tree_dash="─",
    icon_dir="",
    icon_file="",
    diff_bar_plus="█",
    diff_bar_minus="█",
)

ROUNDED_THEME = replace(UNICODE_THEME, name="rounded", tree_end="╰")

NERD_THEME = UITheme(
    name="nerd",
    tree_vertical="│",
    tree_branch="├",
    tree_end="└",
    tree_dash="─",
    icon_dir="\uf07b ",
    icon_file="\uf15b ",
    diff_bar_plus="█",
    diff_bar_minus="█",
    is_nerd=True,
)

_THEMES: dict[str, UITheme] = {
    ASCII_THEME.name: ASCII_THEME,
    UNICODE_THEME.name: UNICODE_THEME,
    ROUNDED_THEME.name: ROUNDED_THEME,
    NERD_THEME.name: NERD_THEME,
}

THEME_CYCLE: tuple[str, ...] = ("ascii", "unicode", "rounded", "nerd")
DEFAULT_THEME_NAME = UNICODE_THEME.name

# git config keys under ``twig.theme.`` mapped to theme fields.
GLYPH_OVERRIDE_FIELDS: dict[str, str] = {
    "vertical": "tree_vertical",
    "branch": "tree_branch",
    "end": "tree_end",
    "dash": "tree_dash",
    "bar_plus": "diff_bar_plus",
    "bar_minus": "diff_bar_minus",
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable theme names in cycle order."""
    return THEME_CYCLE


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME_NAME
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME_NAME


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    theme = _THEMES[normalize_theme_name(name)]
    return theme.without_color() if no_color else theme


def next_theme_name(name: str) -> str:
    """Return the theme that follows ``name`` in the interactive cycle."""
    current = normalize_theme_name(name)
    index = THEME_CYCLE.index(current)
    return THEME_CYCLE[(index + 1) % len(THEME_CYCLE)]


def apply_glyph_overrides(theme: UITheme, overrides: dict[str, str]) -> UITheme:
    """Replace single-character glyphs named in ``overrides``.

    Keys are the short names of ``GLYPH_OVERRIDE_FIELDS``; values must be
    exactly one character, anything else is ignored.
    """
    changes: dict[str, str] = {}
    for key, value in overrides.items():
        field_name = GLYPH_OVERRIDE_FIELDS.get(key.strip().lower())
        if field_name is None or len(value) != 1:
            continue
        changes[field_name] = value
    return replace(theme, **changes) if changes else theme


__all__ = [
    "Palette",
    "UITheme",
    "DEFAULT_PALETTE",
    "PLAIN_PALETTE",
    "ASCII_THEME",
    "UNICODE_THEME",
    "ROUNDED_THEME",
    "NERD_THEME",
    "THEME_CYCLE",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
    "next_theme_name",
    "apply_glyph_overrides",
]
