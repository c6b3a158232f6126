"""Terminal output helpers."""

from diffmend.display.console import get_console, set_console

__all__ = ["get_console", "set_console"]
