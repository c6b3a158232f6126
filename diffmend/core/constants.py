"""Core constants and paths for diffmend.

Single source of truth for global paths. All modules should import from here
instead of hardcoding paths like `Path.home() / ".diffmend"`.
"""

from pathlib import Path

DIFFMEND_DIR_NAME = ".diffmend"
CONFIG_FILE_NAME = "config.json"

# Path literal that stands for "no file" in patch headers
DEV_NULL = "/dev/null"


def get_diffmend_dir() -> Path:
    """Get ~/.diffmend (global config directory)."""
    return Path.home() / DIFFMEND_DIR_NAME
