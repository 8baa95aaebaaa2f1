"""Resolved run configuration plus YAML config-file loading and merging.

Values come from command-line options first, then the config file, then the
built-in defaults below. Unlike per-entry scan faults, a config file that
cannot be read or parsed aborts the run with a typed error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

import yaml
from platformdirs import user_config_dir

from .errors import ConfigParseError, ConfigReadError
from .file_tree_model.types import Lens, OutputFormat

logger = logging.getLogger(__name__)

T = TypeVar("T")

APP_NAME = "smarttree"
DEFAULT_DEPTH = 4
DEFAULT_MAX_ITEMS = 20_000
DEFAULT_MAX_CHILDREN = 200
DEFAULT_RESPECT_GITIGNORE = True
DEFAULT_HIDDEN = False
DEFAULT_UNICODE = False

DEFAULT_KEY_DIRS: tuple[str, ...] = (
    "src",
    "tests",
    "test",
    "docs",
    "examples",
    "scripts",
    "public",
    "include",
    "cmd",
    "bin",
)

DEFAULT_IGNORE: tuple[str, ...] = (
    ".git",
    "node_modules",
    "dist",
    "build",
    "out",
    ".next",
    ".turbo",
    ".cache",
    ".pnpm-store",
    "coverage",
    ".venv",
    "venv",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
    "target",
    ".idea",
    ".vscode",
    ".DS_Store",
    "Thumbs.db",
)

CONFIG_FILENAMES: tuple[str, ...] = (".smarttree.yaml", ".smarttree.yml", "smarttree.yaml")
INIT_CONFIG_FILENAME = CONFIG_FILENAMES[0]
USER_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / "config.yaml"

_INT_KEYS = ("depth", "max_items", "max_children")
_BOOL_KEYS = ("respect_gitignore", "hidden", "unicode")
_LIST_KEYS = ("ignore", "include", "key_dirs")


@dataclass(frozen=True)
class Config:
    """Fully resolved settings consumed by discovery and rendering."""

    root: Path
    lens: Lens = Lens.MODULE
    format: OutputFormat = OutputFormat.TEXT
    depth: int = DEFAULT_DEPTH
    max_items: int = DEFAULT_MAX_ITEMS
    max_children: int = DEFAULT_MAX_CHILDREN
    respect_gitignore: bool = DEFAULT_RESPECT_GITIGNORE
    hidden: bool = DEFAULT_HIDDEN
    unicode: bool = DEFAULT_UNICODE
    ignore: tuple[str, ...] = DEFAULT_IGNORE
    include: tuple[str, ...] = ()
    key_dirs: tuple[str, ...] = DEFAULT_KEY_DIRS


@dataclass(frozen=True)
class CliOptions:
    """Raw command-line values; ``None`` means "not given on the command line"."""

    path: Path = Path(".")
    lens: Lens | None = None
    format: OutputFormat | None = None
    depth: int | None = None
    max_items: int | None = None
    max_children: int | None = None
    respect_gitignore: bool = False
    no_respect_gitignore: bool = False
    config: Path | None = None
    no_config: bool = False
    ignore: tuple[str, ...] = ()
    include: tuple[str, ...] = ()
    hidden: bool = False
    unicode: bool = False
    ascii: bool = False


@dataclass(frozen=True)
class ConfigFile:
    """Settings read from a YAML config file; ``None`` means "not set"."""

    lens: Lens | None = None
    format: OutputFormat | None = None
    depth: int | None = None
    max_items: int | None = None
    max_children: int | None = None
    respect_gitignore: bool | None = None
    hidden: bool | None = None
    unicode: bool | None = None
    ignore: tuple[str, ...] | None = None
    include: tuple[str, ...] | None = None
    key_dirs: tuple[str, ...] | None = None
    path: Path | None = field(default=None, compare=False)


def config_search_root(path: Path) -> Path:
    """Return the directory searched for config files (parent for file roots)."""
    if path.is_file():
        return path.parent
    return path


def find_config_file(root: Path) -> Path | None:
    """Return the first project config file in ``root``, else the user config."""
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    if USER_CONFIG_PATH.is_file():
        return USER_CONFIG_PATH
    return None


def _parse_enum(
    path: Path, key: str, value: object, enum_type: type[Lens] | type[OutputFormat]
) -> Lens | OutputFormat:
    choices = [member.value for member in enum_type]
    if not isinstance(value, str) or value not in choices:
        raise ConfigParseError(path, f"'{key}' must be one of: {', '.join(choices)}")
    return enum_type(value)


def parse_config_data(path: Path, data: object) -> ConfigFile:
    """Validate a decoded YAML document into a ``ConfigFile``.

    An empty document is an empty config. Unknown keys are ignored.
    """
    if data is None:
        return ConfigFile(path=path)
    if not isinstance(data, dict):
        raise ConfigParseError(path, "top-level value must be a mapping")

    values: dict[str, object] = {"path": path}
    if data.get("lens") is not None:
        values["lens"] = _parse_enum(path, "lens", data["lens"], Lens)
    if data.get("format") is not None:
        values["format"] = _parse_enum(path, "format", data["format"], OutputFormat)

    for key in _INT_KEYS:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigParseError(path, f"'{key}' must be a non-negative integer")
        values[key] = value

    for key in _BOOL_KEYS:
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, bool):
            raise ConfigParseError(path, f"'{key}' must be true or false")
        values[key] = value

    for key in _LIST_KEYS:
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ConfigParseError(path, f"'{key}' must be a list of strings")
        values[key] = tuple(value)

    return ConfigFile(**values)


def load_config_file(path: Path) -> ConfigFile:
    """Read and validate one YAML config file."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigReadError(path, str(exc)) from exc
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigParseError(path, str(exc)) from exc
    logger.debug("loaded config file %s", path)
    return parse_config_data(path, data)


def _pick(*values: T | None) -> T | None:
    for value in values:
        if value is not None:
            return value
    return None


def merge_config(options: CliOptions, file_config: ConfigFile) -> Config:
    """Combine command-line options, file settings and defaults."""
    if options.no_respect_gitignore:
        respect_gitignore = False
    elif options.respect_gitignore:
        respect_gitignore = True
    else:
        respect_gitignore = _pick(file_config.respect_gitignore, DEFAULT_RESPECT_GITIGNORE)

    hidden = True if options.hidden else _pick(file_config.hidden, DEFAULT_HIDDEN)

    if options.ascii:
        unicode = False
    elif options.unicode:
        unicode = True
    else:
        unicode = _pick(file_config.unicode, DEFAULT_UNICODE)

    ignore = DEFAULT_IGNORE + (file_config.ignore or ()) + tuple(options.ignore)
    include = (file_config.include or ()) + tuple(options.include)
    key_dirs = file_config.key_dirs if file_config.key_dirs is not None else DEFAULT_KEY_DIRS

    return Config(
        root=options.path,
        lens=_pick(options.lens, file_config.lens, Lens.MODULE),
        format=_pick(options.format, file_config.format, OutputFormat.TEXT),
        depth=_pick(options.depth, file_config.depth, DEFAULT_DEPTH),
        max_items=_pick(options.max_items, file_config.max_items, DEFAULT_MAX_ITEMS),
        max_children=_pick(options.max_children, file_config.max_children, DEFAULT_MAX_CHILDREN),
        respect_gitignore=respect_gitignore,
        hidden=hidden,
        unicode=unicode,
        ignore=ignore,
        include=include,
        key_dirs=key_dirs,
    )


def load_config(options: CliOptions) -> Config:
    """Resolve the run configuration for ``options``.

    Raises ``ConfigReadError``/``ConfigParseError`` for a bad config file.
    """
    if options.no_config:
        config_path = None
    elif options.config is not None:
        config_path = options.config
    else:
        config_path = find_config_file(config_search_root(options.path))

    file_config = load_config_file(config_path) if config_path is not None else ConfigFile()
    return merge_config(options, file_config)


def default_config_template() -> str:
    """Return the commented YAML written by ``smarttree --init``."""
    lines = [
        "# smarttree configuration",
        "# Command-line options override the values below.",
        "",
        f"lens: {Lens.MODULE.value}        # module | files",
        f"format: {OutputFormat.TEXT.value}        # text | md",
        f"depth: {DEFAULT_DEPTH}",
        f"max_items: {DEFAULT_MAX_ITEMS}",
        f"max_children: {DEFAULT_MAX_CHILDREN}",
        f"respect_gitignore: {str(DEFAULT_RESPECT_GITIGNORE).lower()}",
        f"hidden: {str(DEFAULT_HIDDEN).lower()}",
        f"unicode: {str(DEFAULT_UNICODE).lower()}",
        "",
        "# Extra ignore patterns, added to the built-in list.",
        "ignore: []",
        "",
        "# Patterns that stay visible even when ignored.",
        "include: []",
        "",
        "# Directory names shown under modules in the module lens.",
        "key_dirs:",
    ]
    lines.extend(f"  - {name}" for name in DEFAULT_KEY_DIRS)
    return "\n".join(lines) + "\n"


def init_config_file(directory: Path) -> Path:
    """Write the default config template into ``directory``.

    Raises ``FileExistsError`` instead of overwriting an existing file.
    """
    target = config_search_root(directory) / INIT_CONFIG_FILENAME
    with target.open("x", encoding="utf-8") as handle:
        handle.write(default_config_template())
    return target


__all__ = [
    "APP_NAME",
    "CONFIG_FILENAMES",
    "DEFAULT_DEPTH",
    "DEFAULT_IGNORE",
    "DEFAULT_KEY_DIRS",
    "DEFAULT_MAX_CHILDREN",
    "DEFAULT_MAX_ITEMS",
    "USER_CONFIG_PATH",
    "CliOptions",
    "Config",
    "ConfigFile",
    "config_search_root",
    "default_config_template",
    "find_config_file",
    "init_config_file",
    "load_config",
    "load_config_file",
    "merge_config",
    "parse_config_data",
]
