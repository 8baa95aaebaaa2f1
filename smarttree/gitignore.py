"""Gitignore-aware path filtering backed by ``git ls-files``.

Git already knows how to combine nested and parent ``.gitignore`` files,
``.git/info/exclude`` and the global excludes file, so the matcher asks it
for the ignored set once per scan instead of re-implementing those rules.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GitIgnoreMatcher:
    """Ignored paths under one scan root, keyed by slash-joined relative path.

    ``ignored_dirs`` lets parent checks reject whole subtrees.
    """

    root: Path
    ignored_files: frozenset[str]
    ignored_dirs: frozenset[str]

    def is_ignored(self, rel_path: str) -> bool:
        """Return whether ``rel_path`` (relative to ``root``) is git-ignored."""
        if not rel_path:
            return False
        if rel_path in self.ignored_files:
            return True
        current = rel_path
        while current:
            if current in self.ignored_dirs:
                return True
            current, _sep, _tail = current.rpartition("/")
        return False


def load_gitignore_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Build a matcher by querying git for ignored files/directories.

    Returns ``None`` when git is unavailable, ``root`` is not inside a repo,
    or the probing command fails. Paths are reported relative to ``root``
    even when the repository root is higher up.
    """
    if shutil.which("git") is None:
        logger.debug("git not found on PATH; gitignore rules disabled")
        return None

    try:
        proc = subprocess.run(
            [
                "git",
                "-C",
                str(root),
                "ls-files",
                "-z",
                "--others",
                "-i",
                "--exclude-standard",
                "--directory",
            ],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.debug("gitignore probe failed under %s: %s", root, exc)
        return None

    ignored_files: set[str] = set()
    ignored_dirs: set[str] = set()
    for raw in proc.stdout.split(b"\x00"):
        if not raw:
            continue
        rel = raw.decode("utf-8", errors="replace")
        is_dir = rel.endswith("/")
        rel = rel.rstrip("/")
        if not rel or rel.startswith("../"):
            continue
        if is_dir:
            ignored_dirs.add(rel)
        else:
            ignored_files.add(rel)

    logger.debug(
        "gitignore matcher for %s: %d files, %d directories",
        root,
        len(ignored_files),
        len(ignored_dirs),
    )
    return GitIgnoreMatcher(
        root=root,
        ignored_files=frozenset(ignored_files),
        ignored_dirs=frozenset(ignored_dirs),
    )


__all__ = ["GitIgnoreMatcher", "load_gitignore_matcher"]
