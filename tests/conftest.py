"""Shared pytest fixtures and configuration for pytest."""

import logging
from collections.abc import Iterator

import pytest

from diffmend.core.log import LOGGER_NAME
from diffmend.display import console


@pytest.fixture(autouse=True)
def reset_diffmend_state() -> Iterator[None]:
    """Undo logging and console changes made by CLI runs."""
    yield
    diffmend_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(diffmend_logger.handlers):
        diffmend_logger.removeHandler(handler)
        handler.close()
    diffmend_logger.propagate = True
    diffmend_logger.setLevel(logging.NOTSET)
    console._console = None
