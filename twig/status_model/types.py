"""Status-tree datatypes used across model, session and rendering modules."""

from __future__ import annotations

from dataclasses import dataclass, field

from .parser import is_staged

ROOT_PATH = "."


@dataclass(frozen=True)
class FileNode:
    """One changed file leaf of the frozen status tree."""

    name: str
    path: str
    status: str
    stats: tuple[int, int] | None = None
    rename_to: str | None = None

    is_dir = False

    @property
    def action_paths(self) -> tuple[str, ...]:
        """Paths a stage/unstage/diff command must address for this file."""
        if self.rename_to and self.rename_to != self.path:
            return (self.path, self.rename_to)
        return (self.path,)


def _node_sort_key(node: FileNode | DirectoryNode) -> tuple[bool, str]:
    return (not node.is_dir, node.name)


def _aggregate_status(children: tuple[FileNode | DirectoryNode, ...]) -> str:
    has_files = False
    for child in children:
        if child.is_dir:
            if not child.status:
                continue
            if child.status != "M+":
                return "M"
            has_files = True
            continue
        if not is_staged(child.status):
            return "M"
        has_files = True
    return "M+" if has_files else ""


@dataclass(frozen=True)
class DirectoryNode:
    """Directory of the frozen status tree.

    Children are sorted directories-first then by name on construction, and
    ``status`` is derived from them: ``M+`` when every descendant file is
    staged, ``M`` when any is not, empty when there are no descendant files.
    ``fold_keys`` lists every directory path merged into this node by chain
    collapsing; a plain directory carries only its own path.
    """

    name: str
    path: str
    children: tuple[FileNode | DirectoryNode, ...] = ()
    fold_keys: tuple[str, ...] = ()
    status: str = field(init=False)

    is_dir = True

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.children, key=_node_sort_key))
        object.__setattr__(self, "children", ordered)
        if not self.fold_keys:
            object.__setattr__(self, "fold_keys", (self.path,))
        object.__setattr__(self, "status", _aggregate_status(ordered))

    @property
    def is_root(self) -> bool:
        return self.path == ROOT_PATH

    @property
    def action_paths(self) -> tuple[str, ...]:
        return (self.path,)


StatusNode = FileNode | DirectoryNode


@dataclass(frozen=True)
class FlatNode:
    """One renderable row produced by depth-first flattening of the tree."""

    name: str
    name_colored: str
    full_path: str
    is_dir: bool
    status: str
    raw_status: str
    connector: str
    stats: tuple[int, int] | None = None
    depth: int = 0
    action_paths: tuple[str, ...] = ()
    fold_keys: tuple[str, ...] = ()
    is_folded: bool = False

    @property
    def paths(self) -> tuple[str, ...]:
        """Paths staging commands address for this row."""
        return self.action_paths or (self.full_path,)
