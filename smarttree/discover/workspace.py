"""Monorepo workspace detection and package-root resolution.

Detection only looks at the scan root, in a fixed order; the first manifest
that qualifies decides the workspace kind. Resolution prefers the declared
member globs and falls back to the ``packages/*``-style naming convention.
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path

import yaml

from ..file_tree_model.types import NodeKind, Tree, WorkspaceInfo, WorkspaceKind, parent_rel_path
from ..patterns import compile_patterns, parse_glob, spec_matches
from .markers import ModuleCandidate

logger = logging.getLogger(__name__)

GROUP_DIRS: frozenset[str] = frozenset({"packages", "apps", "services", "libs"})


def _string_items(value: object) -> tuple[str, ...] | None:
    """Return the string members of a list, or ``None`` when not a list."""
    if not isinstance(value, list):
        return None
    return tuple(item for item in value if isinstance(item, str))


def parse_pnpm_workspace(path: Path) -> tuple[str, ...]:
    """Return ``packages`` globs from ``pnpm-workspace.yaml`` (empty on any fault)."""
    try:
        doc = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        logger.debug("cannot parse %s: %s", path, exc)
        return ()
    if not isinstance(doc, dict):
        return ()
    return _string_items(doc.get("packages")) or ()


def _load_json_object(path: Path) -> dict[str, object] | None:
    try:
        value = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        logger.debug("cannot parse %s: %s", path, exc)
        return None
    return value if isinstance(value, dict) else None


def parse_package_json_workspaces(path: Path) -> tuple[str, ...] | None:
    """Return ``workspaces`` globs (array or ``{packages: [...]}`` form).

    ``None`` means the manifest does not declare a workspace.
    """
    value = _load_json_object(path)
    if value is None:
        return None
    workspaces = value.get("workspaces")
    if isinstance(workspaces, list):
        return _string_items(workspaces)
    if isinstance(workspaces, dict):
        return _string_items(workspaces.get("packages"))
    return None


def parse_lerna_packages(path: Path) -> tuple[str, ...] | None:
    value = _load_json_object(path)
    if value is None:
        return None
    return _string_items(value.get("packages"))


def parse_cargo_workspace(path: Path) -> tuple[str, ...] | None:
    """Return ``workspace.members`` globs, or ``None`` without a ``[workspace]`` table."""
    try:
        with path.open("rb") as handle:
            value = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.debug("cannot parse %s: %s", path, exc)
        return None
    workspace = value.get("workspace")
    if not isinstance(workspace, dict):
        return None
    return _string_items(workspace.get("members")) or ()


def parse_go_work(path: Path) -> tuple[str, ...]:
    """Return ``use`` directives from ``go.work``, single-line and block form.

    Tokens are kept raw, ``./`` prefix included.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("cannot read %s: %s", path, exc)
        return ()

    patterns: list[str] = []
    in_block = False
    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith("use "):
            rest = stripped[len("use") :].strip()
            if rest.startswith("("):
                in_block = True
                continue
            if rest:
                patterns.append(rest)
            continue
        if in_block:
            if stripped.startswith(")"):
                in_block = False
                continue
            if not stripped or stripped.startswith("//"):
                continue
            patterns.append(stripped)
    return tuple(patterns)


def detect_workspace(root: Path) -> WorkspaceInfo | None:
    """Return the workspace declared at ``root``, checking manifests in priority order."""
    pnpm = root / "pnpm-workspace.yaml"
    if pnpm.is_file():
        return WorkspaceInfo(WorkspaceKind.PNPM, parse_pnpm_workspace(pnpm))

    package_json = root / "package.json"
    if package_json.is_file():
        patterns = parse_package_json_workspaces(package_json)
        if patterns is not None:
            return WorkspaceInfo(WorkspaceKind.NPM, patterns)

    lerna = root / "lerna.json"
    if lerna.is_file():
        patterns = parse_lerna_packages(lerna)
        if patterns is not None:
            return WorkspaceInfo(WorkspaceKind.LERNA, patterns)

    cargo = root / "Cargo.toml"
    if cargo.is_file():
        patterns = parse_cargo_workspace(cargo)
        if patterns is not None:
            return WorkspaceInfo(WorkspaceKind.CARGO, patterns)

    go_work = root / "go.work"
    if go_work.is_file():
        return WorkspaceInfo(WorkspaceKind.GO, parse_go_work(go_work))

    if (root / "turbo.json").is_file():
        return WorkspaceInfo(WorkspaceKind.TURBO)
    if (root / "nx.json").is_file():
        return WorkspaceInfo(WorkspaceKind.NX)
    return None


def normalize_pattern(pattern: str) -> str:
    """Strip surrounding whitespace and any leading ``./`` or ``/``."""
    trimmed = pattern.strip()
    while trimmed.startswith("./"):
        trimmed = trimmed[2:]
    return trimmed.lstrip("/")


def _anchored_lines(patterns: tuple[str, ...]) -> list[str]:
    """Anchor member globs at the scan root; a leading ``!`` stays a negation.

    Raises ``InvalidPatternError`` naming the declared pattern when it is malformed.
    """
    lines: list[str] = []
    for pattern in patterns:
        parse_glob(pattern.strip())
        negate = pattern.startswith("!")
        body = normalize_pattern(pattern[1:] if negate else pattern)
        if not body:
            continue
        lines.append(("!/" if negate else "/") + body)
    return lines


def roots_from_patterns(tree: Tree, patterns: tuple[str, ...]) -> set[str]:
    """Match member globs against every node path.

    A matching directory is a root itself; a matching file contributes its
    parent directory. Entries that only match because an ancestor matched
    are skipped. Raises ``InvalidPatternError`` for malformed globs.
    """
    lines = _anchored_lines(patterns)
    if not lines:
        return set()
    spec = compile_patterns(lines)
    matched: set[str] = set()
    roots: set[str] = set()
    # Arena order puts parents first.
    for node in tree.nodes:
        if not node.rel_path:
            continue
        is_dir = node.kind is NodeKind.DIR
        if not spec_matches(spec, node.rel_path, is_dir):
            continue
        matched.add(node.rel_path)
        parent = parent_rel_path(node.rel_path)
        if parent in matched:
            continue
        roots.add(node.rel_path if is_dir else parent)
    return roots


def heuristic_package_roots(tree: Tree, candidates: list[ModuleCandidate]) -> set[str]:
    """Treat modules under ``packages/``, ``apps/``, ``services/`` or ``libs/`` as members.

    The second-level directory (``apps/web`` for ``apps/web/server``) is the root.
    """
    roots: set[str] = set()
    for candidate in candidates:
        parts = tree.nodes[candidate.node_id].rel_path.split("/")
        if len(parts) < 2 or parts[0] not in GROUP_DIRS:
            continue
        roots.add("/".join(parts[:2]))
    return roots


def resolve_package_roots(
    tree: Tree,
    info: WorkspaceInfo,
    candidates: list[ModuleCandidate],
) -> tuple[str, ...]:
    """Return sorted package-root relative paths for a detected workspace."""
    roots = roots_from_patterns(tree, info.patterns) if info.patterns else set()
    if not roots:
        roots = heuristic_package_roots(tree, candidates)
        if roots:
            logger.debug("workspace globs matched nothing; using naming heuristic")
    return tuple(sorted(roots))


__all__ = [
    "GROUP_DIRS",
    "detect_workspace",
    "heuristic_package_roots",
    "normalize_pattern",
    "parse_cargo_workspace",
    "parse_go_work",
    "parse_lerna_packages",
    "parse_package_json_workspaces",
    "parse_pnpm_workspace",
    "resolve_package_roots",
    "roots_from_patterns",
]
