"""Tests for the git-backed ignore matcher."""

from __future__ import annotations

import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from smarttree.gitignore import GitIgnoreMatcher, load_gitignore_matcher


class GitIgnoreMatcherTests(unittest.TestCase):
    def test_is_ignored_checks_files_and_ancestor_directories(self) -> None:
        matcher = GitIgnoreMatcher(
            root=Path("/project"),
            ignored_files=frozenset({"notes.tmp"}),
            ignored_dirs=frozenset({"build", "docs/generated"}),
        )

        self.assertTrue(matcher.is_ignored("notes.tmp"))
        self.assertTrue(matcher.is_ignored("build"))
        self.assertTrue(matcher.is_ignored("build/out/app.js"))
        self.assertTrue(matcher.is_ignored("docs/generated/index.html"))
        self.assertFalse(matcher.is_ignored("docs/guide.md"))
        self.assertFalse(matcher.is_ignored("buildscripts/run.sh"))
        self.assertFalse(matcher.is_ignored(""))

    def test_load_parses_nul_separated_git_output(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            completed = subprocess.CompletedProcess(
                args=[],
                returncode=0,
                stdout=b"cache/\x00debug.log\x00nested/tmp/\x00",
            )
            with mock.patch("smarttree.gitignore.shutil.which", return_value="/usr/bin/git"), mock.patch(
                "smarttree.gitignore.subprocess.run", return_value=completed
            ) as run:
                matcher = load_gitignore_matcher(root)

            self.assertIsNotNone(matcher)
            assert matcher is not None
            self.assertEqual(matcher.ignored_dirs, frozenset({"cache", "nested/tmp"}))
            self.assertEqual(matcher.ignored_files, frozenset({"debug.log"}))
            command = run.call_args.args[0]
            self.assertEqual(command[:3], ["git", "-C", str(root)])
            self.assertIn("--exclude-standard", command)

    def test_load_returns_none_without_git(self) -> None:
        with mock.patch("smarttree.gitignore.shutil.which", return_value=None):
            self.assertIsNone(load_gitignore_matcher(Path("/anywhere")))

    def test_load_returns_none_outside_repository(self) -> None:
        error = subprocess.CalledProcessError(128, ["git"])
        with mock.patch("smarttree.gitignore.shutil.which", return_value="/usr/bin/git"), mock.patch(
            "smarttree.gitignore.subprocess.run", side_effect=error
        ):
            self.assertIsNone(load_gitignore_matcher(Path("/anywhere")))


if __name__ == "__main__":
    unittest.main()
