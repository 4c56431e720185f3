"""Status-tree parsing, construction, transforms and row formatting.

Defines ``FileNode``/``DirectoryNode``/``FlatNode`` and the helpers that turn
porcelain status output into flattened, connector-prefixed display rows.
"""

from __future__ import annotations

from .build import build_status_tree, iter_directory_paths, iter_files, parse_numstat
from .parser import (
    NO_FILTER,
    StatusFilter,
    is_staged,
    is_untracked,
    parse_status_line,
    resolve_path,
    status_class,
)
from .rendering import (
    DIFF_STAT_BAR_CAP,
    SUMMARY_BAR_CAP,
    clamp_indent,
    diff_stat_bar_counts,
    format_branch_header,
    format_diff_stat_bar,
    format_row_stats,
    max_name_width,
    render_rows,
    render_tree,
)
from .transform import collapse_chains, flatten_tree
from .types import ROOT_PATH, DirectoryNode, FileNode, FlatNode, StatusNode

__all__ = [
    "ROOT_PATH",
    "DirectoryNode",
    "FileNode",
    "FlatNode",
    "StatusNode",
    "StatusFilter",
    "NO_FILTER",
    "parse_status_line",
    "resolve_path",
    "status_class",
    "is_staged",
    "is_untracked",
    "build_status_tree",
    "iter_directory_paths",
    "iter_files",
    "parse_numstat",
    "collapse_chains",
    "flatten_tree",
    "DIFF_STAT_BAR_CAP",
    "SUMMARY_BAR_CAP",
    "clamp_indent",
    "diff_stat_bar_counts",
    "format_diff_stat_bar",
    "format_row_stats",
    "format_branch_header",
    "max_name_width",
    "render_rows",
    "render_tree",
]
