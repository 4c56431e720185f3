"""Presentational transforms over a frozen status tree.

``collapse_chains`` merges runs of single-child directories into one node and
``flatten_tree`` turns a tree into display rows with connector prefixes. The
two folding mechanisms are independent: chain collapsing is a tree-to-tree
pass, operator folds are applied during flattening.
"""

from __future__ import annotations

from collections.abc import Collection

from ..ui_theme import UITheme
from .parser import status_class
from .rendering import DEFAULT_INDENT, clamp_indent, directory_label, file_label
from .types import DirectoryNode, FileNode, FlatNode, StatusNode

CHAIN_DIVIDER = "/"


def _collapse(node: StatusNode, divider: str) -> StatusNode:
    if not isinstance(node, DirectoryNode):
        return node

    name = node.name
    fold_keys = node.fold_keys
    current = node
    if not node.is_root:
        while len(current.children) == 1 and isinstance(current.children[0], DirectoryNode):
            current = current.children[0]
            name = f"{name}{divider}{current.name}"
            fold_keys = fold_keys + current.fold_keys

    return DirectoryNode(
        name=name,
        path=current.path,
        children=tuple(_collapse(child, divider) for child in current.children),
        fold_keys=fold_keys,
    )


def collapse_chains(root: DirectoryNode, divider: str = CHAIN_DIVIDER) -> DirectoryNode:
    """Return a copy of ``root`` with single-child directory chains merged.

    A directory whose only child is a directory becomes one synthetic node
    named ``parent<divider>child`` that addresses the leaf-most directory's
    path and adopts its children. The root is never merged.
    """
    collapsed = _collapse(root, divider)
    assert isinstance(collapsed, DirectoryNode)
    return collapsed


def _is_folded(node: DirectoryNode, collapsed_paths: Collection[str]) -> bool:
    return any(key in collapsed_paths for key in node.fold_keys)


def flatten_tree(
    root: DirectoryNode,
    theme: UITheme,
    indent: int = DEFAULT_INDENT,
    collapsed_paths: Collection[str] = frozenset(),
    collapse: bool = False,
) -> list[FlatNode]:
    """Flatten ``root``'s descendants into display rows, depth-first.

    The root row itself is not emitted. Directories folded through
    ``collapsed_paths`` contribute their own row but no descendants.
    """
    indent = clamp_indent(indent)
    tree = collapse_chains(root) if collapse else root
    dashes = theme.tree_dash * (indent - 2)
    rows: list[FlatNode] = []

    def walk(directory: DirectoryNode, prefix: str, depth: int) -> None:
        count = len(directory.children)
        for position, child in enumerate(directory.children):
            is_last = position == count - 1
            glyph = theme.tree_end if is_last else theme.tree_branch
            connector = f"{prefix}{glyph}{dashes} "
            if isinstance(child, DirectoryNode):
                folded = _is_folded(child, collapsed_paths)
                plain, colored = directory_label(child.name, theme)
                rows.append(
                    FlatNode(
                        name=plain,
                        name_colored=colored,
                        full_path=child.path,
                        is_dir=True,
                        status=status_class(child.status),
                        raw_status=child.status,
                        connector=connector,
                        stats=None,
                        depth=depth,
                        action_paths=child.action_paths,
                        fold_keys=child.fold_keys,
                        is_folded=folded,
                    )
                )
                if not folded:
                    extension = " " if is_last else theme.tree_vertical
                    walk(child, f"{prefix}{extension}{' ' * (indent - 1)}", depth + 1)
                continue

            assert isinstance(child, FileNode)
            plain, colored = file_label(child.name, child.status, theme)
            rows.append(
                FlatNode(
                    name=plain,
                    name_colored=colored,
                    full_path=child.path,
                    is_dir=False,
                    status=status_class(child.status),
                    raw_status=child.status,
                    connector=connector,
                    stats=child.stats,
                    depth=depth,
                    action_paths=child.action_paths,
                )
            )

    walk(tree, "", 0)
    return rows
