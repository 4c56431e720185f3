"""Tests for flattening, folding, chain collapsing and plain-text rendering."""

from __future__ import annotations

import unittest

from twig.status_model import (
    build_status_tree,
    clamp_indent,
    collapse_chains,
    diff_stat_bar_counts,
    flatten_tree,
    format_branch_header,
    format_row_stats,
    max_name_width,
    render_tree,
)
from twig.ui_theme import resolve_theme

PLAIN_ASCII = resolve_theme("ascii", no_color=True)

LINES = [" M src/lib/a.py", " M src/b.py", "?? z.txt"]


class FlattenTreeTests(unittest.TestCase):
    def test_rows_carry_connectors_depths_and_labels(self) -> None:
        rows = flatten_tree(build_status_tree(LINES), PLAIN_ASCII)
        self.assertEqual(
            [(row.connector, row.name, row.depth) for row in rows],
            [
                ("|- ", "src", 0),
                ("|  |- ", "lib", 1),
                ("|  |  `- ", "a.py (M)", 2),
                ("|  `- ", "b.py (M)", 1),
                ("`- ", "z.txt (??)", 0),
            ],
        )
        self.assertEqual([row.status for row in rows], ["M", "M", "M", "M", "?"])

    def test_indent_widens_connector_dashes(self) -> None:
        rows = flatten_tree(build_status_tree(["?? a.txt"]), PLAIN_ASCII, indent=5)
        self.assertEqual(rows[0].connector, "`--- ")

    def test_folded_directory_hides_descendants(self) -> None:
        rows = flatten_tree(build_status_tree(LINES), PLAIN_ASCII, collapsed_paths={"src"})
        self.assertEqual([row.full_path for row in rows], ["src", "z.txt"])
        self.assertTrue(rows[0].is_folded)

    def test_nested_fold_keeps_siblings(self) -> None:
        rows = flatten_tree(build_status_tree(LINES), PLAIN_ASCII, collapsed_paths={"src/lib"})
        self.assertEqual([row.full_path for row in rows], ["src", "src/lib", "src/b.py", "z.txt"])

    def test_chain_collapse_merges_single_child_directories(self) -> None:
        tree = build_status_tree([" M a/b/c/file.py", "?? top.txt"])
        rows = flatten_tree(tree, PLAIN_ASCII, collapse=True)
        self.assertEqual(rows[0].name, "a/b/c")
        self.assertEqual(rows[0].full_path, "a/b/c")
        self.assertEqual(rows[0].fold_keys, ("a", "a/b", "a/b/c"))
        self.assertEqual(rows[1].full_path, "a/b/c/file.py")

    def test_fold_applies_to_collapsed_chain_by_any_member_path(self) -> None:
        tree = build_status_tree([" M a/b/c/file.py"])
        rows = flatten_tree(tree, PLAIN_ASCII, collapsed_paths={"a/b"}, collapse=True)
        self.assertEqual(len(rows), 1)
        self.assertTrue(rows[0].is_folded)

    def test_collapse_chains_leaves_branching_directories(self) -> None:
        tree = collapse_chains(build_status_tree([" M a/x.py", " M a/b/y.py"]))
        (a,) = tree.children
        self.assertEqual(a.name, "a")

    def test_empty_tree_flattens_to_no_rows(self) -> None:
        self.assertEqual(flatten_tree(build_status_tree([]), PLAIN_ASCII), [])


class RenderingTests(unittest.TestCase):
    def test_render_tree_aligns_stats(self) -> None:
        tree = build_status_tree([" M a.py", " M longer_name.py"], {"a.py": (3, 1), "longer_name.py": (1, 0)})
        rows = flatten_tree(tree, PLAIN_ASCII)
        text = render_tree(rows, PLAIN_ASCII)
        short = "|- a.py (M)"
        long = "`- longer_name.py (M)"
        padding = " " * (len(long) - len(short))
        self.assertEqual(text, f".\n{short}{padding} | 4 +++-\n{long} | 1 +\n")
        self.assertEqual(max_name_width(rows), len("`- longer_name.py (M)"))

    def test_rows_without_changes_have_no_stats(self) -> None:
        self.assertEqual(format_row_stats(None, PLAIN_ASCII), "")
        self.assertEqual(format_row_stats((0, 0), PLAIN_ASCII), "")

    def test_bar_counts_are_exact_within_cap(self) -> None:
        self.assertEqual(diff_stat_bar_counts(1, 2), (1, 2))
        self.assertEqual(diff_stat_bar_counts(4, 6), (4, 6))

    def test_bar_counts_scale_to_cap(self) -> None:
        for added, deleted in ((30, 10), (100, 0), (1, 99), (7, 8), (500, 499)):
            with self.subTest(added=added, deleted=deleted):
                plus, minus = diff_stat_bar_counts(added, deleted)
                self.assertEqual(plus + minus, 10)
                self.assertGreaterEqual(plus, 0)
                self.assertGreaterEqual(minus, 0)
        self.assertEqual(sum(diff_stat_bar_counts(40, 60, cap=15)), 15)

    def test_indent_is_clamped(self) -> None:
        self.assertEqual(clamp_indent(1), 2)
        self.assertEqual(clamp_indent(4), 4)
        self.assertEqual(clamp_indent(50), 10)

    def test_branch_header_formats_tracking_counts(self) -> None:
        header = format_branch_header("## main...origin/main [ahead 2, behind 1]", PLAIN_ASCII)
        self.assertEqual(header, "On branch main -> origin/main ↑2 ↓1")

    def test_branch_header_without_upstream(self) -> None:
        self.assertEqual(format_branch_header("## feature", PLAIN_ASCII), "On branch feature")

    def test_branch_header_before_first_commit(self) -> None:
        self.assertEqual(
            format_branch_header("## No commits yet on main", PLAIN_ASCII),
            "On branch main (No commits yet)",
        )

    def test_empty_branch_header(self) -> None:
        self.assertEqual(format_branch_header("", PLAIN_ASCII), "")


if __name__ == "__main__":
    unittest.main()
