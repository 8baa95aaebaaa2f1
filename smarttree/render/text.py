"""Connector-based text layout for an annotated ``Tree``.

Rendering is a pure function of the tree, the resolved workspace and the
config: children are filtered by lens, sorted, capped per directory and
emitted depth-first with ASCII or Unicode connectors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..file_tree_model.types import Lens, Node, NodeKind, Tree, WorkspaceResolved, parent_rel_path

if TYPE_CHECKING:
    from ..config import Config


@dataclass(frozen=True)
class TreeChars:
    """Four-column connector set used for every depth of one render."""

    mid: str
    end: str
    vert: str
    space: str


ASCII_CHARS = TreeChars(mid="|-- ", end="`-- ", vert="|   ", space="    ")
UNICODE_CHARS = TreeChars(mid="├── ", end="└── ", vert="│   ", space="    ")


def tree_chars(unicode: bool) -> TreeChars:
    return UNICODE_CHARS if unicode else ASCII_CHARS


def module_paths(tree: Tree) -> set[str]:
    """Return every annotated module path plus all of its ancestors (and the root)."""
    paths: set[str] = {""}
    for node in tree.nodes:
        if node.module is None:
            continue
        current = node.rel_path
        while current and current not in paths:
            paths.add(current)
            current = parent_rel_path(current)
    return paths


def child_sort_key(node: Node) -> tuple[int, str, str]:
    """Directories first, then case-insensitive name, then exact name."""
    return (0 if node.kind is NodeKind.DIR else 1, node.name.lower(), node.name)


def select_children(
    tree: Tree,
    node_id: int,
    lens: Lens,
    visible_module_paths: set[str],
    key_dirs: frozenset[str],
) -> list[int]:
    """Return the lens-filtered, sorted child ids of ``node_id``."""
    parent = tree.nodes[node_id]
    children = list(parent.children)

    if lens is Lens.MODULE:
        parent_is_module = parent.module is not None
        markers = frozenset(parent.module.markers) if parent.module is not None else frozenset()

        def keep(child_id: int) -> bool:
            child = tree.nodes[child_id]
            if child.kind is NodeKind.DIR:
                if parent_is_module and child.name in key_dirs:
                    return True
                return child.rel_path in visible_module_paths
            return parent_is_module and child.name in markers

        children = [child_id for child_id in children if keep(child_id)]

    children.sort(key=lambda child_id: child_sort_key(tree.nodes[child_id]))
    return children


def _module_suffix(node: Node) -> str:
    if node.module is None:
        return ""
    suffix = f"  {node.module.kind.tag}"
    if node.module.summary:
        suffix += f"  {node.module.summary}"
    return suffix


def format_root_label(node: Node, workspace: WorkspaceResolved | None) -> str:
    label = f"{node.name}/" if node.kind is NodeKind.DIR else node.name
    if workspace is not None:
        label += f"  [workspace: {workspace.kind.label}]"
    return label + _module_suffix(node)


def format_node_label(node: Node) -> str:
    if node.kind is NodeKind.DIR:
        label = f"{node.name}/"
    elif node.kind is NodeKind.ERROR and node.error:
        label = f"{node.name} ({node.error})"
    else:
        label = node.name
    return label + _module_suffix(node)


def render_text(tree: Tree, workspace: WorkspaceResolved | None, config: Config) -> str:
    """Render ``tree`` as newline-joined text without a trailing newline."""
    chars = tree_chars(config.unicode)
    visible_module_paths = module_paths(tree) if config.lens is Lens.MODULE else set()
    key_dirs = frozenset(config.key_dirs)
    max_children = max(0, config.max_children)

    lines_out: list[str] = [format_root_label(tree.nodes[tree.root], workspace)]

    def walk(node_id: int, prefix: str) -> None:
        """Emit rows for the children of ``node_id`` depth-first."""
        children = select_children(tree, node_id, config.lens, visible_module_paths, key_dirs)
        if not children:
            return

        omitted = max(0, len(children) - max_children)
        shown = children[: len(children) - omitted]
        for idx, child_id in enumerate(shown):
            last = omitted == 0 and idx == len(shown) - 1
            child = tree.nodes[child_id]
            lines_out.append(f"{prefix}{chars.end if last else chars.mid}{format_node_label(child)}")
            if child.kind is NodeKind.DIR:
                walk(child_id, prefix + (chars.space if last else chars.vert))

        if omitted:
            lines_out.append(f"{prefix}{chars.end}... ({omitted} more)")

    walk(tree.root, "")

    if tree.truncated:
        lines_out.append(f"... (truncated after reaching max-items={config.max_items})")
    return "\n".join(lines_out)


__all__ = [
    "ASCII_CHARS",
    "UNICODE_CHARS",
    "TreeChars",
    "child_sort_key",
    "format_node_label",
    "format_root_label",
    "module_paths",
    "render_text",
    "select_children",
    "tree_chars",
]
