"""Host interfaces (protocols) consumed by the patch orchestrator.

The orchestrator never touches the filesystem, a terminal or a UI directly.
It reads and writes through a Storage, reports through a ProgressMonitor and
surfaces rejected hunks through an Annotator. Using Protocols enables
structural subtyping without requiring inheritance.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class Severity(Enum):
    """Severity of a marker raised against a file."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Marker:
    """An annotation attached to a path."""

    path: str
    severity: Severity
    message: str


class Storage(Protocol):
    """Byte-level access to the files a patch targets.

    Paths are the relative, '/'-separated paths found in the patch (after
    prefix stripping). Failures surface as OSError (FileNotFoundError for a
    missing file on read) or StorageError.
    """

    def read(self, path: str) -> bytes:
        """Return the file's bytes.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        ...

    def exists(self, path: str) -> bool:
        """Return True if the file exists."""
        ...

    def write(self, path: str, data: bytes) -> None:
        """Replace the contents of an existing file (or create it)."""
        ...

    def create(self, path: str, data: bytes) -> None:
        """Create a new file, including missing parent directories."""
        ...

    def delete(self, path: str) -> None:
        """Delete the file."""
        ...


class ProgressMonitor(Protocol):
    """Coarse progress reporting with cooperative cancellation.

    Example:
        class PrintingMonitor:
            def begin(self, total_units: int) -> None:
                print(f"0/{total_units}")

            def sub_task(self, description: str) -> None:
                print(description)

            def worked(self, units: int) -> None: ...
            def is_cancelled(self) -> bool: return False
            def done(self) -> None: ...
    """

    def begin(self, total_units: int) -> None:
        """Start the task with the given amount of work."""
        ...

    def worked(self, units: int) -> None:
        """Report that units of work were completed."""
        ...

    def is_cancelled(self) -> bool:
        """Return True if the user asked to stop."""
        ...

    def sub_task(self, description: str) -> None:
        """Describe the step currently being worked on."""
        ...

    def done(self) -> None:
        """Finish the task."""
        ...


class Annotator(Protocol):
    """Attaches markers to files, e.g. for files with rejected hunks."""

    def add_marker(self, path: str, severity: Severity, message: str) -> Marker:
        """Attach a marker to path.

        Raises:
            Exception: Implementations may fail; callers treat markers as
                best-effort.
        """
        ...
