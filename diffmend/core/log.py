"""Logging setup for the diffmend namespace.

Library modules only create module loggers (``logging.getLogger(__name__)``);
handlers are attached here, once, by the CLI or an embedding application.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "diffmend"

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: int = logging.INFO,
    console_level: int = logging.WARNING,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure handlers for the diffmend namespace logger.

    Sets up a stderr console handler and, when ``log_file`` is given, a
    rotating file handler (max 5MB per file, 3 backup files).

    Args:
        level: Logging level for file output (default INFO).
        console_level: Logging level for console output (default WARNING).
        log_file: Optional log file. Parent directories are created.

    Returns:
        The configured ``diffmend`` logger.
    """
    diffmend_logger = logging.getLogger(LOGGER_NAME)

    # Remove any existing handlers to avoid duplicates on reconfigure
    for handler in list(diffmend_logger.handlers):
        diffmend_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
    diffmend_logger.addHandler(console_handler)

    effective = console_level
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        diffmend_logger.addHandler(file_handler)
        effective = min(level, console_level)

    diffmend_logger.setLevel(effective)

    # Don't propagate to root logger
    diffmend_logger.propagate = False

    if log_file is not None:
        diffmend_logger.info("File logging configured: %s", log_file)
    return diffmend_logger
