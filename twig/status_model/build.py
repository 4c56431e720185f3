"""Status-tree construction from porcelain lines and numstat tables.

Records are inserted into a mutable builder tree keyed by path component and
then frozen bottom-up into sorted ``DirectoryNode``/``FileNode`` values, so
input order never affects the result.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
import re

from .parser import NO_FILTER, StatusFilter, normalize_status, resolve_path, split_status_line
from .types import ROOT_PATH, DirectoryNode, FileNode, StatusNode

STATUS_HEADER_PREFIX = "##"

_NUMSTAT_BRACE_RENAME_RE = re.compile(r"^(?P<head>.*)\{(?P<old>[^{}]*) => (?P<new>[^{}]*)\}(?P<tail>.*)$")


@dataclass
class _BuilderNode:
    name: str
    path: str
    children: dict[str, _BuilderNode] = field(default_factory=dict)
    status: str | None = None
    stats: tuple[int, int] | None = None
    rename_to: str | None = None


def _join(parent: str, name: str) -> str:
    return name if parent == ROOT_PATH else f"{parent}/{name}"


def _insert(
    root: _BuilderNode,
    location: str,
    display_name: str,
    status: str,
    stats: tuple[int, int] | None,
    rename_to: str | None,
) -> None:
    components = [part for part in location.split("/") if part and part != "."]
    if not components:
        return

    current = root
    for part in components[:-1]:
        child = current.children.get(part)
        if child is None or child.status is not None:
            child = _BuilderNode(name=part, path=_join(current.path, part))
            current.children[part] = child
        current = child

    leaf_path = _join(current.path, components[-1])
    current.children[components[-1]] = _BuilderNode(
        name=display_name,
        path=leaf_path,
        status=status,
        stats=stats,
        rename_to=rename_to,
    )


def _freeze(builder: _BuilderNode) -> StatusNode:
    if builder.status is not None:
        return FileNode(
            name=builder.name,
            path=builder.path,
            status=builder.status,
            stats=builder.stats,
            rename_to=builder.rename_to,
        )
    return DirectoryNode(
        name=builder.name,
        path=builder.path,
        children=tuple(_freeze(child) for child in builder.children.values()),
    )


def build_status_tree(
    lines: Iterable[str],
    stats: dict[str, tuple[int, int]] | None = None,
    status_filter: StatusFilter = NO_FILTER,
) -> DirectoryNode:
    """Build the frozen status tree rooted at ``"."``.

    Branch header lines and malformed lines are skipped; filtered-out records
    are never inserted. The root is returned even when nothing survives.
    """
    stats = stats or {}
    root = _BuilderNode(name=ROOT_PATH, path=ROOT_PATH)
    for line in lines:
        if line.startswith(STATUS_HEADER_PREFIX):
            continue
        record = split_status_line(line)
        if record is None:
            continue
        status = normalize_status(record.code)
        if not status_filter.accepts(status):
            continue
        resolved = resolve_path(record.path_text, record.code)
        _insert(
            root,
            resolved.location,
            resolved.display_name,
            status,
            stats.get(resolved.stats_key),
            resolved.rename_to,
        )

    frozen = _freeze(root)
    assert isinstance(frozen, DirectoryNode)
    return frozen


def iter_directory_paths(root: DirectoryNode) -> Iterator[str]:
    """Yield the path of every directory below ``root`` in tree order."""
    for child in root.children:
        if isinstance(child, DirectoryNode):
            yield child.path
            yield from iter_directory_paths(child)


def iter_files(root: DirectoryNode) -> Iterator[FileNode]:
    """Yield file leaves depth-first in tree order."""
    for child in root.children:
        if isinstance(child, DirectoryNode):
            yield from iter_files(child)
        else:
            yield child


def _numstat_target_path(path_text: str) -> str:
    """Return the post-rename path of a numstat path column."""
    match = _NUMSTAT_BRACE_RENAME_RE.match(path_text)
    if match:
        joined = f"{match.group('head')}{match.group('new')}{match.group('tail')}"
        return joined.replace("//", "/")
    if " => " in path_text:
        return path_text.split(" => ", 1)[1]
    return path_text


def parse_numstat(output: str, into: dict[str, tuple[int, int]] | None = None) -> dict[str, tuple[int, int]]:
    """Merge ``added<TAB>deleted<TAB>path`` lines into a per-path table by summing.

    Binary files report ``-`` counts, which count as zero.
    """
    table = into if into is not None else {}
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) < 3:
            continue
        added = int(parts[0]) if parts[0].isdigit() else 0
        deleted = int(parts[1]) if parts[1].isdigit() else 0
        path = _numstat_target_path("\t".join(parts[2:]))
        prev_added, prev_deleted = table.get(path, (0, 0))
        table[path] = (prev_added + added, prev_deleted + deleted)
    return table
