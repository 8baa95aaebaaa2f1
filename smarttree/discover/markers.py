"""Module detection from ecosystem manifest files plus tree annotation."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..file_tree_model.types import ModuleInfo, ModuleKind, NodeKind, Tree, WorkspaceResolved, is_within
from .summary import read_summary

logger = logging.getLogger(__name__)

MARKER_FILES: dict[str, ModuleKind] = {
    "package.json": ModuleKind.NODE,
    "pyproject.toml": ModuleKind.PYTHON,
    "setup.py": ModuleKind.PYTHON,
    "setup.cfg": ModuleKind.PYTHON,
    "Cargo.toml": ModuleKind.RUST,
    "go.mod": ModuleKind.GO,
    "pom.xml": ModuleKind.JAVA,
    "build.gradle": ModuleKind.JAVA,
    "build.gradle.kts": ModuleKind.JAVA,
}
MARKER_SUFFIXES: dict[str, ModuleKind] = {
    ".csproj": ModuleKind.DOTNET,
}


@dataclass(frozen=True)
class ModuleCandidate:
    """Directory holding at least one manifest, before workspace scoping."""

    node_id: int
    kind: ModuleKind
    markers: tuple[str, ...]


def marker_kind_for_file(name: str) -> ModuleKind | None:
    """Return the ecosystem a manifest filename identifies, if any."""
    kind = MARKER_FILES.get(name)
    if kind is not None:
        return kind
    for suffix, suffix_kind in MARKER_SUFFIXES.items():
        if name.endswith(suffix):
            return suffix_kind
    return None


def collect_module_candidates(tree: Tree) -> list[ModuleCandidate]:
    """Find directories whose direct file children include manifests.

    When several ecosystems are present the lowest ``ModuleKind.priority``
    wins. Candidates come back in arena order.
    """
    candidates: list[ModuleCandidate] = []
    for node_id, node in enumerate(tree.nodes):
        if node.kind is not NodeKind.DIR:
            continue
        markers: list[str] = []
        kinds: list[ModuleKind] = []
        for child_id in node.children:
            child = tree.nodes[child_id]
            if child.kind is NodeKind.DIR:
                continue
            kind = marker_kind_for_file(child.name)
            if kind is not None:
                markers.append(child.name)
                kinds.append(kind)
        if markers:
            best = min(kinds, key=lambda kind: kind.priority)
            candidates.append(ModuleCandidate(node_id=node_id, kind=best, markers=tuple(markers)))
    return candidates


def annotate_modules(
    tree: Tree,
    candidates: list[ModuleCandidate],
    workspace: WorkspaceResolved | None,
) -> None:
    """Attach ``ModuleInfo`` to candidate directories in place.

    With a resolved workspace that names package roots, only the scan root
    and directories inside some package root are annotated.
    """
    package_roots = workspace.package_roots if workspace is not None else ()
    for candidate in candidates:
        node = tree.nodes[candidate.node_id]
        if package_roots and node.rel_path and not any(
            is_within(node.rel_path, root) for root in package_roots
        ):
            logger.debug("skipping module outside workspace packages: %s", node.rel_path)
            continue
        summary = read_summary(tree.node_path(candidate.node_id), candidate.kind)
        node.module = ModuleInfo(kind=candidate.kind, summary=summary, markers=candidate.markers)


__all__ = [
    "MARKER_FILES",
    "MARKER_SUFFIXES",
    "ModuleCandidate",
    "annotate_modules",
    "collect_module_candidates",
    "marker_kind_for_file",
]
