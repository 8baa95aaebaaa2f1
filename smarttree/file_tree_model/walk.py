"""Bounded filesystem traversal that materializes a ``Tree`` arena.

The walk is depth-first and pre-order: a directory node is inserted before
any of its children, so every child's parent is already in the arena when
the child arrives. Listing order is whatever ``os.scandir`` yields; sorting
is a render-time concern.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import pathspec

from ..gitignore import GitIgnoreMatcher, load_gitignore_matcher
from ..patterns import compile_patterns, spec_matches
from .types import Node, NodeKind, Tree, parent_rel_path

if TYPE_CHECKING:
    from ..config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryFilter:
    """Visibility rules applied to every entry below the scan root.

    Include patterns win over everything else; then hidden entries, ignore
    patterns and git-ignored paths are dropped in that order.
    """

    show_hidden: bool
    ignore_spec: pathspec.PathSpec | None = None
    include_spec: pathspec.PathSpec | None = None
    gitignore: GitIgnoreMatcher | None = None

    def is_visible(self, rel_path: str, name: str, is_dir: bool) -> bool:
        if spec_matches(self.include_spec, rel_path, is_dir):
            return True
        if not self.show_hidden and name.startswith("."):
            return False
        if spec_matches(self.ignore_spec, rel_path, is_dir):
            return False
        if self.gitignore is not None and self.gitignore.is_ignored(rel_path):
            return False
        return True


def build_entry_filter(config: Config, root: Path) -> EntryFilter:
    """Compile the configured ignore/include globs and optional gitignore matcher.

    Raises ``InvalidPatternError`` for malformed patterns.
    """
    ignore_spec = compile_patterns(config.ignore) if config.ignore else None
    include_spec = compile_patterns(config.include) if config.include else None
    gitignore = load_gitignore_matcher(root) if config.respect_gitignore else None
    return EntryFilter(
        show_hidden=config.hidden,
        ignore_spec=ignore_spec,
        include_spec=include_spec,
        gitignore=gitignore,
    )


def display_root_name(path: Path) -> str:
    """Return the final path segment, or the whole path when it has none."""
    return path.name or str(path)


def describe_os_error(exc: OSError) -> str:
    """Return a short human-readable message for a traversal fault."""
    if isinstance(exc, PermissionError):
        return "permission denied"
    if exc.strerror:
        return exc.strerror.lower()
    return str(exc)


def _list_directory(directory: Path) -> tuple[list[os.DirEntry[str]], OSError | None]:
    """Return ``(entries, error)`` for one directory in listing order."""
    try:
        with os.scandir(directory) as entries:
            return list(entries), None
    except OSError as exc:
        return [], exc


def single_file_tree(path: Path) -> Tree:
    """Build the one-node tree used when the scan root is a regular file."""
    node = Node(name=display_root_name(path), rel_path="", kind=NodeKind.FILE)
    return Tree(root_path=path, nodes=[node], truncated=False, truncated_at=1)


def build_tree(config: Config, entry_filter: EntryFilter | None = None) -> Tree:
    """Walk ``config.root`` and return the node arena.

    Traversal stops as soon as ``config.max_items`` entries have been
    inserted and another eligible entry shows up; the tree is then marked
    truncated. Unreadable directories become error nodes and the walk goes
    on with their siblings. Symlinks are never followed.
    """
    root_path = config.root.resolve()
    if root_path.is_file():
        return single_file_tree(root_path)

    if entry_filter is None:
        entry_filter = build_entry_filter(config, root_path)

    nodes: list[Node] = [Node(name=display_root_name(root_path), rel_path="", kind=NodeKind.DIR)]
    index: dict[str, int] = {"": 0}

    def insert(node: Node) -> None:
        node_id = len(nodes)
        nodes.append(node)
        index[node.rel_path] = node_id
        nodes[index[parent_rel_path(node.rel_path)]].children.append(node_id)

    count = 0
    truncated = False

    root_entries, root_error = _list_directory(root_path)
    if root_error is not None:
        logger.warning("cannot read %s: %s", root_path, describe_os_error(root_error))

    stack: list[tuple[str, int, Iterator[os.DirEntry[str]]]] = []
    if config.depth >= 1:
        stack.append(("", 1, iter(root_entries)))

    while stack:
        parent_rel, depth, entries = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            continue

        name = entry.name
        rel_path = f"{parent_rel}/{name}" if parent_rel else name
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
        except OSError:
            is_dir = False

        if not entry_filter.is_visible(rel_path, name, is_dir):
            continue
        if count >= config.max_items:
            truncated = True
            break
        count += 1

        if not is_dir:
            insert(Node(name=name, rel_path=rel_path, kind=NodeKind.FILE))
            continue

        if depth >= config.depth:
            insert(Node(name=name, rel_path=rel_path, kind=NodeKind.DIR))
            continue

        child_entries, scan_error = _list_directory(Path(entry.path))
        if scan_error is not None:
            message = describe_os_error(scan_error)
            logger.debug("traversal fault at %s: %s", rel_path, message)
            insert(Node(name=name, rel_path=rel_path, kind=NodeKind.ERROR, error=message))
            continue

        insert(Node(name=name, rel_path=rel_path, kind=NodeKind.DIR))
        stack.append((rel_path, depth + 1, iter(child_entries)))

    if truncated:
        logger.debug("walk truncated after %d items", count)
    return Tree(root_path=root_path, nodes=nodes, truncated=truncated, truncated_at=count)


__all__ = [
    "EntryFilter",
    "build_entry_filter",
    "build_tree",
    "describe_os_error",
    "display_root_name",
    "single_file_tree",
]
