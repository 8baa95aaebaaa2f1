"""Arena datatypes for one scanned project tree plus module/workspace tags."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class Lens(str, enum.Enum):
    """Rendering mode selecting which nodes are shown."""

    MODULE = "module"
    FILES = "files"


class OutputFormat(str, enum.Enum):
    """Final text shape: raw tree or tree inside a markdown code fence."""

    TEXT = "text"
    MD = "md"


class NodeKind(enum.Enum):
    DIR = "dir"
    FILE = "file"
    ERROR = "error"


class ModuleKind(enum.Enum):
    """Ecosystem detected from manifest files.

    ``priority`` breaks ties when one directory carries several ecosystems'
    manifests; lower wins.
    """

    NODE = ("node", 0, "[node]")
    PYTHON = ("python", 1, "[py]")
    RUST = ("rust", 2, "[rs]")
    GO = ("go", 3, "[go]")
    JAVA = ("java", 4, "[java]")
    DOTNET = ("dotnet", 5, "[dotnet]")
    UNKNOWN = ("unknown", 6, "[module]")

    def __init__(self, label: str, priority: int, tag: str) -> None:
        self.label = label
        self.priority = priority
        self.tag = tag


class WorkspaceKind(enum.Enum):
    PNPM = "pnpm"
    NPM = "npm"
    LERNA = "lerna"
    CARGO = "cargo"
    GO = "go"
    TURBO = "turbo"
    NX = "nx"

    @property
    def label(self) -> str:
        return self.value


@dataclass(frozen=True)
class ModuleInfo:
    """Annotation attached to a directory node that holds a module manifest."""

    kind: ModuleKind
    summary: str | None
    markers: tuple[str, ...]


@dataclass
class Node:
    """One filesystem entry stored in a ``Tree`` arena.

    ``rel_path`` is slash-joined and relative to the scan root; it is empty
    for the root node. ``children`` holds arena indices in traversal order.
    """

    name: str
    rel_path: str
    kind: NodeKind
    children: list[int] = field(default_factory=list)
    module: ModuleInfo | None = None
    error: str | None = None

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIR


@dataclass
class Tree:
    """Dense node arena; index ``root`` (always 0) is the scan root."""

    root_path: Path
    nodes: list[Node]
    truncated: bool = False
    truncated_at: int = 0
    root: int = 0

    def node_path(self, node_id: int) -> Path:
        """Return the absolute filesystem path for ``node_id``."""
        rel_path = self.nodes[node_id].rel_path
        return self.root_path / rel_path if rel_path else self.root_path


@dataclass(frozen=True)
class WorkspaceInfo:
    """Workspace manifest found at the scan root with its raw member globs."""

    kind: WorkspaceKind
    patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class WorkspaceResolved:
    """Workspace kind plus concrete package-root relative paths in the tree."""

    kind: WorkspaceKind
    package_roots: tuple[str, ...] = ()


def parent_rel_path(rel_path: str) -> str:
    """Return the slash-joined parent of ``rel_path`` (``""`` for top level)."""
    head, _sep, _tail = rel_path.rpartition("/")
    return head


def is_within(rel_path: str, root: str) -> bool:
    """Return whether ``rel_path`` equals ``root`` or lies beneath it."""
    if not root:
        return True
    return rel_path == root or rel_path.startswith(root + "/")


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
    "parent_rel_path",
    "is_within",
]
