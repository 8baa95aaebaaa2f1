"""Tests for YAML config-file loading and option merging."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

import yaml

from smarttree import config as config_module
from smarttree.config import (
    DEFAULT_IGNORE,
    DEFAULT_KEY_DIRS,
    CliOptions,
    Config,
    ConfigFile,
    default_config_template,
    find_config_file,
    init_config_file,
    load_config,
    merge_config,
    parse_config_data,
)
from smarttree.errors import ConfigParseError, ConfigReadError
from smarttree.file_tree_model.types import Lens, OutputFormat


class ParseConfigDataTests(unittest.TestCase):
    def test_empty_document_is_empty_config(self) -> None:
        self.assertEqual(parse_config_data(Path("c.yaml"), None), ConfigFile())

    def test_valid_values_are_converted(self) -> None:
        parsed = parse_config_data(
            Path("c.yaml"),
            {
                "lens": "files",
                "format": "md",
                "depth": 2,
                "max_children": 0,
                "hidden": True,
                "ignore": ["*.log"],
                "key_dirs": ["lib"],
                "unknown_key": 42,
            },
        )

        self.assertIs(parsed.lens, Lens.FILES)
        self.assertIs(parsed.format, OutputFormat.MD)
        self.assertEqual(parsed.depth, 2)
        self.assertEqual(parsed.max_children, 0)
        self.assertTrue(parsed.hidden)
        self.assertEqual(parsed.ignore, ("*.log",))
        self.assertEqual(parsed.key_dirs, ("lib",))
        self.assertIsNone(parsed.include)

    def test_invalid_values_raise_parse_error(self) -> None:
        bad_documents = [
            ["not", "a", "mapping"],
            {"lens": "tree"},
            {"depth": -1},
            {"depth": True},
            {"hidden": "yes"},
            {"ignore": "node_modules"},
            {"include": [1, 2]},
        ]
        for document in bad_documents:
            with self.subTest(document=document):
                with self.assertRaises(ConfigParseError):
                    parse_config_data(Path("c.yaml"), document)


class MergeConfigTests(unittest.TestCase):
    def test_cli_beats_file_beats_defaults(self) -> None:
        file_config = ConfigFile(lens=Lens.FILES, depth=7, max_items=10, unicode=True, hidden=False)
        options = CliOptions(path=Path("/p"), depth=2, ascii=True, hidden=True)

        merged = merge_config(options, file_config)

        self.assertIs(merged.lens, Lens.FILES)
        self.assertEqual(merged.depth, 2)
        self.assertEqual(merged.max_items, 10)
        self.assertFalse(merged.unicode)
        self.assertTrue(merged.hidden)
        self.assertIs(merged.format, OutputFormat.TEXT)

    def test_pattern_lists_accumulate_and_key_dirs_replace(self) -> None:
        file_config = ConfigFile(ignore=("tmp",), include=("dist",), key_dirs=("lib",))
        options = CliOptions(path=Path("/p"), ignore=("*.bak",), include=("build",))

        merged = merge_config(options, file_config)

        self.assertEqual(merged.ignore, DEFAULT_IGNORE + ("tmp", "*.bak"))
        self.assertEqual(merged.include, ("dist", "build"))
        self.assertEqual(merged.key_dirs, ("lib",))

    def test_gitignore_flags_override_file(self) -> None:
        file_off = ConfigFile(respect_gitignore=False)
        self.assertTrue(merge_config(CliOptions(respect_gitignore=True), file_off).respect_gitignore)
        self.assertFalse(merge_config(CliOptions(), file_off).respect_gitignore)
        self.assertFalse(merge_config(CliOptions(no_respect_gitignore=True), ConfigFile()).respect_gitignore)
        self.assertTrue(merge_config(CliOptions(), ConfigFile()).respect_gitignore)


class LoadConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        self._user_config = mock.patch.object(config_module, "USER_CONFIG_PATH", self.root / "user" / "config.yaml")
        self._user_config.start()

    def tearDown(self) -> None:
        self._user_config.stop()
        self._tmp.cleanup()

    def test_project_files_searched_in_order(self) -> None:
        (self.root / "smarttree.yaml").write_text("depth: 1\n", encoding="utf-8")
        self.assertEqual(find_config_file(self.root), self.root / "smarttree.yaml")

        (self.root / ".smarttree.yaml").write_text("depth: 2\n", encoding="utf-8")
        self.assertEqual(find_config_file(self.root), self.root / ".smarttree.yaml")

        loaded = load_config(CliOptions(path=self.root))
        self.assertEqual(loaded.depth, 2)

    def test_user_config_is_fallback(self) -> None:
        user_config = self.root / "user" / "config.yaml"
        user_config.parent.mkdir()
        user_config.write_text("max_children: 5\n", encoding="utf-8")

        self.assertEqual(find_config_file(self.root), user_config)
        self.assertEqual(load_config(CliOptions(path=self.root)).max_children, 5)

    def test_file_root_searches_parent_directory(self) -> None:
        (self.root / ".smarttree.yml").write_text("lens: files\n", encoding="utf-8")
        target = self.root / "single.txt"
        target.write_text("x\n", encoding="utf-8")

        self.assertIs(load_config(CliOptions(path=target)).lens, Lens.FILES)

    def test_no_config_skips_files(self) -> None:
        (self.root / ".smarttree.yaml").write_text("depth: [oops\n", encoding="utf-8")

        loaded = load_config(CliOptions(path=self.root, no_config=True))

        self.assertEqual(loaded, Config(root=self.root))

    def test_explicit_config_errors_are_typed(self) -> None:
        broken = self.root / "broken.yaml"
        broken.write_text("depth: [oops\n", encoding="utf-8")
        with self.assertRaises(ConfigParseError) as parse_ctx:
            load_config(CliOptions(path=self.root, config=broken))
        self.assertIn(f"failed to parse config file at {broken}", str(parse_ctx.exception))

        with self.assertRaises(ConfigReadError):
            load_config(CliOptions(path=self.root, config=self.root / "missing.yaml"))

    def test_init_writes_template_once(self) -> None:
        target = init_config_file(self.root)

        self.assertEqual(target, self.root / ".smarttree.yaml")
        parsed = parse_config_data(target, yaml.safe_load(target.read_text(encoding="utf-8")))
        self.assertEqual(merge_config(CliOptions(path=self.root), parsed), Config(root=self.root))
        self.assertEqual(parsed.key_dirs, DEFAULT_KEY_DIRS)
        with self.assertRaises(FileExistsError):
            init_config_file(self.root)

    def test_template_mentions_every_setting(self) -> None:
        template = default_config_template()
        for key in ("lens", "format", "depth", "max_items", "max_children", "ignore", "include", "key_dirs"):
            self.assertIn(f"{key}:", template)


if __name__ == "__main__":
    unittest.main()
