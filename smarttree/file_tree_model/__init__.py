"""Domain model for one scanned project tree.

This package contains non-rendering tree primitives:
- the node arena and module/workspace annotation datatypes
- the bounded filesystem walk that builds the arena
"""

from __future__ import annotations

from .types import (
    Lens,
    ModuleInfo,
    ModuleKind,
    Node,
    NodeKind,
    OutputFormat,
    Tree,
    WorkspaceInfo,
    WorkspaceKind,
    WorkspaceResolved,
    is_within,
    parent_rel_path,
)
from .walk import EntryFilter, build_entry_filter, build_tree, single_file_tree

__all__ = [
    "Lens",
    "OutputFormat",
    "NodeKind",
    "ModuleKind",
    "WorkspaceKind",
    "ModuleInfo",
    "Node",
    "Tree",
    "WorkspaceInfo",
    "WorkspaceResolved",
    "is_within",
    "parent_rel_path",
    "EntryFilter",
    "build_entry_filter",
    "build_tree",
    "single_file_tree",
]
