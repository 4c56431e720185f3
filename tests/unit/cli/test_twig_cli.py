"""CLI entrypoint behavior tests.

Covers the non-interactive tree output, ``--open`` editor launching and the
error paths that turn into ``SystemExit`` messages.
"""

from __future__ import annotations

import io
import subprocess
import tempfile
import unittest
from contextlib import redirect_stderr
from pathlib import Path
from unittest import mock

from twig import cli
from twig.errors import GitCommandError


class _FakeGit:
    def __init__(self, lines: list[str], stats: dict[str, tuple[int, int]] | None = None) -> None:
        self.lines = lines
        self.stats = dict(stats or {})
        self.fail = False

    def status_lines(self) -> list[str]:
        if self.fail:
            raise GitCommandError(["git", "status"], 128, "fatal: not a git repository")
        return list(self.lines)

    def status_header(self) -> str:
        return self.lines[0] if self.lines and self.lines[0].startswith("## ") else ""

    def diff_stats(self) -> dict[str, tuple[int, int]]:
        return dict(self.stats)

    def config_value(self, key: str) -> str | None:
        return None

    def config_regexp(self, pattern: str) -> dict[str, str]:
        return {}

    def repo_root(self) -> str | None:
        return "/repo"


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        config_patch = mock.patch("twig.config.CONFIG_PATH", Path(tmp.name) / "config.json")
        logging_patch = mock.patch("twig.cli.configure_logging")
        for patcher in (config_patch, logging_patch):
            patcher.start()
            self.addCleanup(patcher.stop)

    def run_main(self, backend: _FakeGit, argv: list[str]) -> str:
        stdout = io.StringIO()
        with mock.patch("twig.cli.GitBackend", return_value=backend), mock.patch("sys.stdout", stdout):
            cli.main(argv)
        return stdout.getvalue()

    def test_default_output_prints_header_and_tree(self) -> None:
        backend = _FakeGit(["## main", " M src/a.py", "?? notes.txt"], {"src/a.py": (2, 1)})
        output = self.run_main(backend, ["--theme", "ascii"])
        lines = output.splitlines()
        self.assertEqual(lines[0], "On branch main")
        self.assertEqual(lines[1], ".")
        self.assertTrue(any("a.py (M)" in line and "| 3 ++-" in line for line in lines))
        self.assertTrue(any("notes.txt (??)" in line for line in lines))
        self.assertNotIn("\033[", output)

    def test_filters_are_applied(self) -> None:
        backend = _FakeGit(["## main", " M src/a.py", "?? notes.txt"])
        output = self.run_main(backend, ["--theme", "ascii", "--untracked-only"])
        self.assertIn("notes.txt", output)
        self.assertNotIn("a.py", output)

    def test_clean_tree_message(self) -> None:
        output = self.run_main(_FakeGit(["## main"]), ["--theme", "ascii"])
        self.assertEqual(output, "On branch main\n(working directory clean)\n")

    def test_interactive_and_open_are_exclusive(self) -> None:
        with self.assertRaises(SystemExit) as ctx:
            self.run_main(_FakeGit([]), ["-I", "-o"])
        self.assertEqual(str(ctx.exception), "Cannot use both --interactive and --open")

    def test_git_failure_becomes_system_exit(self) -> None:
        backend = _FakeGit([])
        backend.fail = True
        with self.assertRaises(SystemExit) as ctx:
            self.run_main(backend, [])
        self.assertIn("not a git repository", str(ctx.exception))

    def test_invalid_indent_is_rejected(self) -> None:
        with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as ctx:
            self.run_main(_FakeGit([]), ["--indent", "0"])
        self.assertEqual(ctx.exception.code, 2)

    def test_open_launches_editor_with_changed_paths(self) -> None:
        backend = _FakeGit(["## main", " M src/a.py", "R  old.py -> new.py", "?? notes.txt"])
        with mock.patch.dict("os.environ", {"EDITOR": "code --wait"}), mock.patch(
            "twig.cli.subprocess.run", return_value=subprocess.CompletedProcess([], 0)
        ) as run:
            self.run_main(backend, ["-o", "--modified-only"])
        run.assert_called_once()
        command = run.call_args.args[0]
        self.assertEqual(command[:2], ["code", "--wait"])
        self.assertEqual(sorted(command[2:]), ["new.py", "src/a.py"])
        self.assertEqual(run.call_args.kwargs["cwd"], "/repo")

    def test_open_reports_editor_failure_status(self) -> None:
        backend = _FakeGit([" M a.py"])
        with mock.patch.dict("os.environ", {"EDITOR": "vim"}), mock.patch(
            "twig.cli.subprocess.run", return_value=subprocess.CompletedProcess([], 1)
        ):
            with self.assertRaises(SystemExit) as ctx:
                self.run_main(backend, ["-o"])
        self.assertEqual(str(ctx.exception), "Editor exited with error (status 1)")

    def test_open_without_changes_reports_and_skips_editor(self) -> None:
        with mock.patch("twig.cli.subprocess.run") as run:
            output = self.run_main(_FakeGit(["## main"]), ["-o"])
        run.assert_not_called()
        self.assertEqual(output, "No modified files to open.\n")

    def test_open_reports_editor_launch_failure(self) -> None:
        backend = _FakeGit([" M a.py"])
        with mock.patch.dict("os.environ", {"EDITOR": "no-such-editor"}), mock.patch(
            "twig.cli.subprocess.run", side_effect=FileNotFoundError(2, "No such file or directory")
        ):
            with self.assertRaises(SystemExit) as ctx:
                self.run_main(backend, ["-o"])
        self.assertIn("Failed to launch editor", str(ctx.exception))

    def test_interactive_dispatches_to_runtime(self) -> None:
        backend = _FakeGit([" M a.py"])
        with mock.patch("twig.runtime.run_session") as run_session:
            self.run_main(backend, ["-I", "--theme", "rounded", "--no-color"])
        run_session.assert_called_once()
        settings, passed_backend, theme = run_session.call_args.args
        self.assertIs(passed_backend, backend)
        self.assertEqual(settings.theme_name, "rounded")
        self.assertFalse(theme.colored)


if __name__ == "__main__":
    unittest.main()
