"""Best-effort one-line summaries for detected modules.

Each ecosystem reader returns ``None`` when its manifest is missing,
unreadable or silent; the README scan is the shared last resort. Nothing in
this module raises for bad manifests.
"""

from __future__ import annotations

import configparser
import json
import logging
import os
import re
import tomllib
from collections.abc import Callable
from pathlib import Path

from ..file_tree_model.types import ModuleKind

logger = logging.getLogger(__name__)

README_READ_BYTES = 4_096

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def _sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def normalize_summary(text: str | None) -> str | None:
    """Collapse ``text`` to one terminal-safe line, or ``None`` when blank."""
    if text is None:
        return None
    candidate = _sanitize_terminal_text(" ".join(text.split()))
    return candidate or None


def _join_name_description(name: object, description: object) -> str | None:
    """Format ``name - description`` falling back to whichever is a string."""
    name = name if isinstance(name, str) and name else None
    description = description if isinstance(description, str) and description else None
    if name and description:
        return f"{name} - {description}"
    return name or description


def _read_json(path: Path) -> object | None:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        logger.debug("cannot parse %s: %s", path, exc)
        return None


def _read_toml(path: Path) -> dict[str, object] | None:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.debug("cannot parse %s: %s", path, exc)
        return None


def read_package_json(module_path: Path) -> str | None:
    """Summarize ``package.json``: name/description, then ``main``, then ``bin``."""
    value = _read_json(module_path / "package.json")
    if not isinstance(value, dict):
        return None

    summary = _join_name_description(value.get("name"), value.get("description"))
    if summary:
        return summary

    main = value.get("main")
    if isinstance(main, str):
        return f"main: {main}"

    bin_field = value.get("bin")
    if isinstance(bin_field, str):
        return f"bin: {bin_field}"
    if isinstance(bin_field, dict) and bin_field:
        return f"bin: {next(iter(bin_field))}"
    return None


def read_cargo_toml(module_path: Path) -> str | None:
    """Summarize the ``[package]`` table of ``Cargo.toml``."""
    value = _read_toml(module_path / "Cargo.toml")
    if value is None:
        return None
    package = value.get("package")
    if not isinstance(package, dict):
        return None
    return _join_name_description(package.get("name"), package.get("description"))


def read_pyproject(module_path: Path) -> str | None:
    """Summarize ``pyproject.toml`` from ``[project]``, then ``[tool.poetry]``."""
    value = _read_toml(module_path / "pyproject.toml")
    if value is None:
        return None

    project = value.get("project")
    if isinstance(project, dict):
        summary = _join_name_description(project.get("name"), project.get("description"))
        if summary:
            return summary

    tool = value.get("tool")
    poetry = tool.get("poetry") if isinstance(tool, dict) else None
    if isinstance(poetry, dict):
        return _join_name_description(poetry.get("name"), poetry.get("description"))
    return None


def read_setup_cfg(module_path: Path) -> str | None:
    """Summarize the ``[metadata]`` section of a legacy ``setup.cfg``."""
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        parser.read_string((module_path / "setup.cfg").read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, configparser.Error) as exc:
        logger.debug("cannot parse setup.cfg in %s: %s", module_path, exc)
        return None

    section = next((name for name in parser.sections() if name.lower() == "metadata"), None)
    if section is None:
        return None

    def field(key: str) -> str | None:
        raw = parser.get(section, key, fallback=None)
        if raw is None:
            return None
        return raw.strip().strip("\"'") or None

    return _join_name_description(field("name"), field("description"))


def read_python_manifest(module_path: Path) -> str | None:
    return read_pyproject(module_path) or read_setup_cfg(module_path)


def read_go_mod(module_path: Path) -> str | None:
    """Return the ``module ...`` line of ``go.mod`` verbatim."""
    try:
        content = (module_path / "go.mod").read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("cannot read go.mod in %s: %s", module_path, exc)
        return None
    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith("module "):
            return stripped
    return None


def _first_nonblank_line(path: Path) -> str | None:
    try:
        with path.open("rb") as handle:
            sample = handle.read(README_READ_BYTES)
    except OSError:
        return None
    text = sample.decode("utf-8", errors="replace")
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return None


def read_readme_line(module_path: Path) -> str | None:
    """Return the first non-blank line of the first readable ``README*`` file."""
    try:
        names = sorted(name for name in os.listdir(module_path) if name.lower().startswith("readme"))
    except OSError:
        return None
    for name in names:
        line = _first_nonblank_line(module_path / name)
        if line:
            return line
    return None


_MANIFEST_READERS: dict[ModuleKind, Callable[[Path], str | None]] = {
    ModuleKind.NODE: read_package_json,
    ModuleKind.PYTHON: read_python_manifest,
    ModuleKind.RUST: read_cargo_toml,
    ModuleKind.GO: read_go_mod,
}


def read_summary(module_path: Path, kind: ModuleKind) -> str | None:
    """Return a one-line summary for the module at ``module_path``."""
    reader = _MANIFEST_READERS.get(kind)
    summary = normalize_summary(reader(module_path)) if reader is not None else None
    if summary:
        return summary
    return normalize_summary(read_readme_line(module_path))


__all__ = [
    "README_READ_BYTES",
    "normalize_summary",
    "read_cargo_toml",
    "read_go_mod",
    "read_package_json",
    "read_pyproject",
    "read_readme_line",
    "read_setup_cfg",
    "read_summary",
]
