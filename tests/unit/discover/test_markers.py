"""Tests for manifest-based module detection and annotation."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from smarttree.discover.markers import (
    ModuleCandidate,
    annotate_modules,
    collect_module_candidates,
    marker_kind_for_file,
)
from smarttree.file_tree_model.types import (
    ModuleKind,
    Node,
    NodeKind,
    Tree,
    WorkspaceKind,
    WorkspaceResolved,
)


def _tree(root: Path, entries: list[tuple[str, NodeKind]]) -> Tree:
    """Build an arena from ``(rel_path, kind)`` pairs listed parents first."""
    nodes = [Node(name=root.name, rel_path="", kind=NodeKind.DIR)]
    index = {"": 0}
    for rel_path, kind in entries:
        parent, _sep, name = rel_path.rpartition("/")
        index[rel_path] = len(nodes)
        nodes.append(Node(name=name, rel_path=rel_path, kind=kind))
        nodes[index[parent]].children.append(index[rel_path])
    return Tree(root_path=root, nodes=nodes, truncated_at=len(entries))


class MarkerKindTests(unittest.TestCase):
    def test_marker_table_covers_each_ecosystem(self) -> None:
        self.assertIs(marker_kind_for_file("package.json"), ModuleKind.NODE)
        for name in ("pyproject.toml", "setup.py", "setup.cfg"):
            self.assertIs(marker_kind_for_file(name), ModuleKind.PYTHON)
        self.assertIs(marker_kind_for_file("Cargo.toml"), ModuleKind.RUST)
        self.assertIs(marker_kind_for_file("go.mod"), ModuleKind.GO)
        for name in ("pom.xml", "build.gradle", "build.gradle.kts"):
            self.assertIs(marker_kind_for_file(name), ModuleKind.JAVA)
        self.assertIs(marker_kind_for_file("App.csproj"), ModuleKind.DOTNET)
        self.assertIsNone(marker_kind_for_file("README.md"))
        self.assertIsNone(marker_kind_for_file("cargo.toml"))


class CollectCandidatesTests(unittest.TestCase):
    def test_detects_node_module_marker(self) -> None:
        tree = _tree(Path("/repo"), [("package.json", NodeKind.FILE)])

        candidates = collect_module_candidates(tree)

        self.assertEqual(candidates, [ModuleCandidate(node_id=0, kind=ModuleKind.NODE, markers=("package.json",))])

    def test_priority_prefers_node_over_python_regardless_of_order(self) -> None:
        tree = _tree(
            Path("/repo"),
            [("pyproject.toml", NodeKind.FILE), ("Cargo.toml", NodeKind.FILE), ("package.json", NodeKind.FILE)],
        )

        (candidate,) = collect_module_candidates(tree)

        self.assertIs(candidate.kind, ModuleKind.NODE)
        self.assertEqual(candidate.markers, ("pyproject.toml", "Cargo.toml", "package.json"))

    def test_only_direct_file_children_count(self) -> None:
        tree = _tree(
            Path("/repo"),
            [
                ("lib", NodeKind.DIR),
                ("lib/deep", NodeKind.DIR),
                ("lib/deep/go.mod", NodeKind.FILE),
                ("package.json", NodeKind.DIR),
            ],
        )

        candidates = collect_module_candidates(tree)

        self.assertEqual([tree.nodes[c.node_id].rel_path for c in candidates], ["lib/deep"])
        self.assertIs(candidates[0].kind, ModuleKind.GO)


class AnnotateModulesTests(unittest.TestCase):
    def _write_layout(self, root: Path) -> Tree:
        (root / "package.json").write_text(json.dumps({"name": "mono"}), encoding="utf-8")
        for rel in ("apps/web", "tools/gen"):
            (root / rel).mkdir(parents=True)
            (root / rel / "package.json").write_text(
                json.dumps({"name": rel.split("/")[-1]}),
                encoding="utf-8",
            )
        return _tree(
            root,
            [
                ("package.json", NodeKind.FILE),
                ("apps", NodeKind.DIR),
                ("apps/web", NodeKind.DIR),
                ("apps/web/package.json", NodeKind.FILE),
                ("tools", NodeKind.DIR),
                ("tools/gen", NodeKind.DIR),
                ("tools/gen/package.json", NodeKind.FILE),
            ],
        )

    def test_annotates_every_candidate_without_workspace(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            tree = self._write_layout(Path(tmp).resolve())
            candidates = collect_module_candidates(tree)

            annotate_modules(tree, candidates, None)

            annotated = {node.rel_path: node.module for node in tree.nodes if node.module is not None}
            self.assertEqual(set(annotated), {"", "apps/web", "tools/gen"})
            self.assertEqual(annotated["apps/web"].summary, "web")
            self.assertEqual(annotated["apps/web"].markers, ("package.json",))

    def test_workspace_roots_scope_annotation_but_keep_root(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            tree = self._write_layout(Path(tmp).resolve())
            candidates = collect_module_candidates(tree)
            workspace = WorkspaceResolved(kind=WorkspaceKind.NPM, package_roots=("apps/web",))

            annotate_modules(tree, candidates, workspace)

            annotated = {node.rel_path for node in tree.nodes if node.module is not None}
            self.assertEqual(annotated, {"", "apps/web"})

    def test_empty_package_root_list_annotates_everything(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            tree = self._write_layout(Path(tmp).resolve())
            candidates = collect_module_candidates(tree)
            workspace = WorkspaceResolved(kind=WorkspaceKind.TURBO, package_roots=())

            annotate_modules(tree, candidates, workspace)

            annotated = {node.rel_path for node in tree.nodes if node.module is not None}
            self.assertEqual(annotated, {"", "apps/web", "tools/gen"})


if __name__ == "__main__":
    unittest.main()
