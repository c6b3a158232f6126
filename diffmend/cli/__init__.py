"""Command-line interface."""

from diffmend.cli.main import main, run

__all__ = ["main", "run"]
