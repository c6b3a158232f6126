"""Shared Rich Console instance for diffmend."""

from __future__ import annotations

import sys

from rich.console import Console

_console: Console | None = None


def get_console() -> Console:
    """Get the shared Console instance.

    Created on first access. Output goes to stdout; colors are disabled
    automatically when stdout is not a terminal.
    """
    global _console
    if _console is None:
        _console = Console(
            highlight=False,
            markup=True,
            legacy_windows=sys.platform == "win32",
        )
    return _console


def set_console(console: Console) -> None:
    """Set a custom Console instance.

    Useful for testing or custom configurations.
    """
    global _console
    _console = console
