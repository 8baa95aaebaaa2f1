"""Final output assembly: text tree, optionally fenced as markdown."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..file_tree_model.types import OutputFormat, Tree, WorkspaceResolved
from .text import render_text

if TYPE_CHECKING:
    from ..config import Config


def render_markdown(text: str) -> str:
    """Wrap rendered tree text verbatim in a ``text`` code fence."""
    return f"```text\n{text}\n```"


def render(tree: Tree, workspace: WorkspaceResolved | None, config: Config) -> str:
    """Render the annotated tree in the configured format.

    The result always ends with exactly one newline.
    """
    text = render_text(tree, workspace, config)
    output = render_markdown(text) if config.format is OutputFormat.MD else text
    return output.rstrip("\n") + "\n"


__all__ = ["render", "render_markdown", "render_text"]
