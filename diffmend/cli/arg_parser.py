"""Argument parsing for the diffmend CLI."""

import argparse
from collections.abc import Sequence
from pathlib import Path

from diffmend import __version__


def add_strip_arg(parser: argparse.ArgumentParser) -> None:
    """Add -p/--strip argument to a parser."""
    parser.add_argument(
        "--strip", "-p",
        type=int,
        default=None,
        metavar="N",
        help="Strip N leading path segments from file names (default: from config, 0)",
    )


def add_reverse_arg(parser: argparse.ArgumentParser) -> None:
    """Add -R/--reverse and --no-reverse arguments to a parser."""
    parser.add_argument(
        "--reverse", "-R",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Swap old and new sides of every diff",
    )


def _patch_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "patch",
        help="Patch file to read ('-' for stdin)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="diffmend",
        description="Apply unified and context diffs with fuzzy hunk placement",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="FILE",
        help="Config file to use instead of the layered .diffmend/config.json lookup",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output to stderr",
    )

    subparsers = parser.add_subparsers(dest="command")

    # apply - write the patch into a directory tree
    apply_parser = subparsers.add_parser(
        "apply",
        help="Apply a patch to files",
        description="Apply every diff of a patch; failed hunks go to reject files.",
    )
    _patch_arg(apply_parser)
    apply_parser.add_argument(
        "--directory", "-d",
        type=Path,
        default=Path("."),
        metavar="DIR",
        help="Directory the patch paths are relative to (default: current directory)",
    )
    add_strip_arg(apply_parser)
    apply_parser.add_argument(
        "--fuzz", "-F",
        type=int,
        default=None,
        metavar="N",
        help="Try offsets up to N lines around each hunk (default: from config, 0)",
    )
    apply_parser.add_argument(
        "--ignore-whitespace", "-l",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Ignore whitespace differences when matching lines",
    )
    add_reverse_arg(apply_parser)
    apply_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would happen without changing any file",
    )
    apply_parser.add_argument(
        "--exclude",
        nargs="+",
        default=[],
        metavar="PATH",
        help="Skip diffs for these paths (after stripping)",
    )

    # show - list the diffs in a patch
    show_parser = subparsers.add_parser(
        "show",
        help="List the files and hunks in a patch",
    )
    _patch_arg(show_parser)
    add_strip_arg(show_parser)
    add_reverse_arg(show_parser)

    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)
