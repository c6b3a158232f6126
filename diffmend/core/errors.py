"""Typed exception hierarchy for diffmend."""

from __future__ import annotations


class DiffmendError(Exception):
    """Base class for all diffmend errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(DiffmendError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""


class MalformedPatchError(DiffmendError):
    """Raised when patch text violates its format and cannot be parsed safely.

    Attributes:
        line: The offending patch line, if known.
    """

    def __init__(self, message: str, line: str | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"{message}: {line.rstrip()!r}"
        super().__init__(message)


class PathSecurityError(DiffmendError):
    """Raised when a patch path escapes the storage root."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Path security violation for '{path}': {reason}")


class StorageError(DiffmendError):
    """Raised by host storage adapters for failures other than OSError."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")
