"""Command-line front door for smarttree.

Parses CLI options, merges them with the config file, runs discovery and
prints the rendered tree to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import CliOptions, init_config_file, load_config
from .discover import discover
from .errors import SmarttreeError
from .file_tree_model.types import Lens, OutputFormat
from .render import render

EPILOG = """Examples:
  smarttree
  smarttree . --lens files --depth 3
  smarttree --format md --max-children 60
  smarttree --init
"""


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _nonnegative_int(value: str) -> int:
    """argparse type for integer values that may be zero."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError("value must be >= 0")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smarttree",
        description="Project-aware tree output.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("path", nargs="?", default=".", help="Path to scan (default: current directory).")
    parser.add_argument(
        "--lens",
        choices=[lens.value for lens in Lens],
        default=None,
        help="Output lens: module or files.",
    )
    parser.add_argument(
        "--format",
        choices=[fmt.value for fmt in OutputFormat],
        default=None,
        help="Output format: text or md.",
    )
    parser.add_argument("--depth", type=_positive_int, default=None, help="Max depth to traverse.")
    parser.add_argument("--max-items", type=_positive_int, default=None, help="Max total items to visit.")
    parser.add_argument(
        "--max-children",
        type=_nonnegative_int,
        default=None,
        help="Max children per directory to display.",
    )
    gitignore = parser.add_mutually_exclusive_group()
    gitignore.add_argument(
        "--respect-gitignore",
        action="store_true",
        help="Respect .gitignore and related files.",
    )
    gitignore.add_argument(
        "--no-respect-gitignore",
        action="store_true",
        help="Do not respect .gitignore and related files.",
    )
    parser.add_argument("--config", metavar="PATH", default=None, help="Path to config file.")
    parser.add_argument("--no-config", action="store_true", help="Disable config file loading.")
    parser.add_argument(
        "--init",
        action="store_true",
        help="Create a default .smarttree.yaml in the target directory and exit.",
    )
    parser.add_argument(
        "--ignore",
        metavar="PATTERN",
        action="append",
        default=[],
        help="Add an ignore pattern (repeatable).",
    )
    parser.add_argument(
        "--include",
        metavar="PATTERN",
        action="append",
        default=[],
        help="Add an include pattern that overrides ignore (repeatable).",
    )
    parser.add_argument("--hidden", action="store_true", help="Show hidden files and directories.")
    charset = parser.add_mutually_exclusive_group()
    charset.add_argument("--unicode", action="store_true", help="Use Unicode tree characters.")
    charset.add_argument("--ascii", action="store_true", help="Use ASCII tree characters.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log discovery details to stderr.")
    return parser


def options_from_args(args: argparse.Namespace) -> CliOptions:
    """Translate parsed arguments into the config layer's option record."""
    return CliOptions(
        path=Path(args.path),
        lens=Lens(args.lens) if args.lens is not None else None,
        format=OutputFormat(args.format) if args.format is not None else None,
        depth=args.depth,
        max_items=args.max_items,
        max_children=args.max_children,
        respect_gitignore=args.respect_gitignore,
        no_respect_gitignore=args.no_respect_gitignore,
        config=Path(args.config) if args.config is not None else None,
        no_config=args.no_config,
        ignore=tuple(args.ignore),
        include=tuple(args.include),
        hidden=args.hidden,
        unicode=args.unicode,
        ascii=args.ascii,
    )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and print the project tree for the target path.

    Fatal configuration and pattern errors exit with a message on stderr.
    """
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    path = Path(args.path)
    if not path.exists():
        raise SystemExit(f"Path not found: {path}")

    if args.init:
        try:
            target = init_config_file(path)
        except FileExistsError as exc:
            raise SystemExit(f"Config file already exists: {exc.filename}") from exc
        except OSError as exc:
            raise SystemExit(f"smarttree: cannot write config file: {exc}") from exc
        sys.stdout.write(f"Created {target}\n")
        return

    try:
        config = load_config(options_from_args(args))
        result = discover(config)
    except SmarttreeError as exc:
        raise SystemExit(f"smarttree: {exc}") from exc

    sys.stdout.write(render(result.tree, result.workspace, config))


if __name__ == "__main__":
    main()
