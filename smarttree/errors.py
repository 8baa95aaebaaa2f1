"""Fatal error types surfaced to the command-line front door.

Per-entry traversal faults and manifest parse failures never reach this
module: they become error nodes or missing summaries instead.
"""

from __future__ import annotations

from pathlib import Path


class SmarttreeError(Exception):
    """Base class for failures that abort a run before rendering."""


class ConfigReadError(SmarttreeError):
    """Config file exists but could not be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to read config file at {path}: {reason}")


class ConfigParseError(SmarttreeError):
    """Config file was read but is not a valid smarttree config."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"failed to parse config file at {path}: {reason}")


class InvalidPatternError(SmarttreeError):
    """A glob pattern from configuration or a workspace manifest is malformed."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid glob pattern '{pattern}': {reason}")


__all__ = [
    "SmarttreeError",
    "ConfigReadError",
    "ConfigParseError",
    "InvalidPatternError",
]
