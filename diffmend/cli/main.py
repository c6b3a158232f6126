"""Entry point for the diffmend CLI."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from diffmend.cli.arg_parser import build_parser
from diffmend.cli.commands import (
    EXIT_CANCELLED,
    EXIT_ERROR,
    cmd_apply,
    cmd_show,
    load_cli_config,
)
from diffmend.core.log import configure_logging


def run(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, run the selected command and return its exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return EXIT_ERROR

    config = load_cli_config(args.config)
    if config is None:
        return EXIT_ERROR

    log_file = Path(config.logging.file).expanduser() if config.logging.file else None
    console_level = logging.DEBUG if args.verbose else config.logging.level_number
    configure_logging(level=logging.INFO, console_level=console_level, log_file=log_file)

    if args.command == "apply":
        return cmd_apply(args, config)
    if args.command == "show":
        return cmd_show(args, config)
    parser.error(f"unknown command: {args.command}")
    return EXIT_ERROR


def main() -> None:
    """Console script entry point."""
    try:
        exit_code = run()
    except KeyboardInterrupt:
        # Ctrl+C outside a patch run (while reading or parsing)
        exit_code = EXIT_CANCELLED
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
