"""Gitignore-style glob compilation shared by the walker and workspace resolver.

``pathspec`` treats most malformed globs as literal text, so each pattern is
checked here first. ``{a,b}`` alternates are expanded into plain patterns
before compilation since ``gitwildmatch`` has no brace syntax.
"""

from __future__ import annotations

import itertools
from collections.abc import Iterable

import pathspec

from .errors import InvalidPatternError

GlobPart = str | list[str]


def _class_end(pattern: str, start: int) -> int:
    """Return the index just past the ``]`` closing the class opened at ``start``."""
    pos = start + 1
    if pos < len(pattern) and pattern[pos] in "!^":
        pos += 1
    if pos < len(pattern) and pattern[pos] == "]":
        pos += 1
    while pos < len(pattern) and pattern[pos] != "]":
        if pattern[pos] == "\\":
            pos += 1
        pos += 1
    if pos >= len(pattern):
        raise InvalidPatternError(pattern, "unclosed character class")
    return pos + 1


def parse_glob(pattern: str) -> list[GlobPart]:
    """Split ``pattern`` into literal runs and alternate groups.

    Raises ``InvalidPatternError`` for an unclosed ``[``, unbalanced or
    nested braces, a dangling escape, or ``**`` that is not a whole path
    segment.
    """
    parts: list[GlobPart] = []
    literal: list[str] = []
    group: list[str] | None = None
    current: list[str] = []
    segment_start = 1 if pattern.startswith("!") else 0
    literal.append(pattern[:segment_start])

    pos = segment_start
    while pos < len(pattern):
        char = pattern[pos]
        buf = current if group is not None else literal

        if char == "\\":
            if pos + 1 >= len(pattern):
                raise InvalidPatternError(pattern, "dangling escape")
            buf.append(pattern[pos : pos + 2])
            pos += 2
            continue

        if char == "[":
            end = _class_end(pattern, pos)
            buf.append(pattern[pos:end])
            pos = end
            continue

        if char == "*":
            end = pos
            while end < len(pattern) and pattern[end] == "*":
                end += 1
            run = end - pos
            if run > 2:
                raise InvalidPatternError(pattern, "too many consecutive '*'")
            if run == 2:
                whole_before = pos == segment_start or pattern[pos - 1] == "/"
                whole_after = end == len(pattern) or pattern[end] == "/"
                if not (whole_before and whole_after):
                    raise InvalidPatternError(pattern, "'**' must be a whole path segment")
            buf.append(pattern[pos:end])
            pos = end
            continue

        if char == "{":
            if group is not None:
                raise InvalidPatternError(pattern, "nested alternate groups are not allowed")
            parts.append("".join(literal))
            literal = []
            group = []
            current = []
        elif char == "," and group is not None:
            group.append("".join(current))
            current = []
        elif char == "}":
            if group is None:
                raise InvalidPatternError(pattern, "unopened alternate group")
            group.append("".join(current))
            parts.append(group)
            group = None
        else:
            buf.append(char)
        pos += 1

    if group is not None:
        raise InvalidPatternError(pattern, "unclosed alternate group")
    parts.append("".join(literal))
    return parts


def expand_glob(pattern: str) -> list[str]:
    """Return the brace-free patterns ``pattern`` stands for."""
    choices = [[part] if isinstance(part, str) else part for part in parse_glob(pattern)]
    return ["".join(combo) for combo in itertools.product(*choices)]


def compile_patterns(patterns: Iterable[str]) -> pathspec.PathSpec:
    """Compile ``patterns`` into one ``PathSpec``.

    Each pattern is validated and compiled on its own first so a syntax
    error names the offending pattern instead of the whole list.
    """
    lines: list[str] = []
    for pattern in patterns:
        expanded = expand_glob(pattern)
        try:
            pathspec.PathSpec.from_lines("gitwildmatch", expanded)
        except ValueError as exc:
            raise InvalidPatternError(pattern, str(exc)) from exc
        lines.extend(expanded)
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def spec_matches(spec: pathspec.PathSpec | None, rel_path: str, is_dir: bool) -> bool:
    """Return whether slash-joined ``rel_path`` matches ``spec``.

    Directories are tested with a trailing slash so ``name/`` patterns only
    hit directories.
    """
    if spec is None or not rel_path:
        return False
    candidate = f"{rel_path}/" if is_dir else rel_path
    return spec.match_file(candidate)


__all__ = ["compile_patterns", "expand_glob", "parse_glob", "spec_matches"]
