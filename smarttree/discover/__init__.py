"""Discovery pipeline: walk, detect modules and workspace, annotate.

The tree is built once by the walker and then annotated once in place;
after ``discover`` returns it is only read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..file_tree_model.types import Tree, WorkspaceResolved
from ..file_tree_model.walk import build_tree
from .markers import ModuleCandidate, annotate_modules, collect_module_candidates
from .summary import read_summary
from .workspace import detect_workspace, resolve_package_roots

if TYPE_CHECKING:
    from ..config import Config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiscoverResult:
    """Annotated tree plus the resolved workspace, if one was detected."""

    tree: Tree
    workspace: WorkspaceResolved | None


def discover(config: Config) -> DiscoverResult:
    """Run the full discovery pipeline for ``config``.

    Raises ``InvalidPatternError`` when a configured or declared glob is
    malformed.
    """
    tree = build_tree(config)

    workspace_root = tree.root_path.parent if tree.root_path.is_file() else tree.root_path
    workspace_info = detect_workspace(workspace_root)
    candidates = collect_module_candidates(tree)

    workspace: WorkspaceResolved | None = None
    if workspace_info is not None:
        package_roots = resolve_package_roots(tree, workspace_info, candidates)
        workspace = WorkspaceResolved(kind=workspace_info.kind, package_roots=package_roots)
        logger.debug(
            "detected %s workspace with package roots: %s",
            workspace.kind.label,
            ", ".join(package_roots) or "(none)",
        )

    annotate_modules(tree, candidates, workspace)
    return DiscoverResult(tree=tree, workspace=workspace)


__all__ = [
    "DiscoverResult",
    "ModuleCandidate",
    "annotate_modules",
    "collect_module_candidates",
    "detect_workspace",
    "discover",
    "read_summary",
    "resolve_package_roots",
]
