"""Core types and helpers."""

from diffmend.core.cancel import CancellationToken
from diffmend.core.errors import (
    ConfigError,
    DiffmendError,
    MalformedPatchError,
    PathSecurityError,
    StorageError,
)
from diffmend.core.log import configure_logging

__all__ = [
    "CancellationToken",
    "configure_logging",
    "DiffmendError",
    "ConfigError",
    "MalformedPatchError",
    "PathSecurityError",
    "StorageError",
]
