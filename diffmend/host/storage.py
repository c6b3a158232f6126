"""Storage implementations for the patch orchestrator."""

from __future__ import annotations

import logging
from pathlib import Path

from diffmend.core.paths import atomic_write_bytes, resolve_under
from diffmend.host.interfaces import Storage

logger = logging.getLogger(__name__)


class FileSystemStorage:
    """File-backed storage rooted at a directory.

    Every path is resolved under the root (escapes raise PathSecurityError),
    writes are atomic, and the kind of every change is recorded in
    ``changes`` ('created' | 'updated' | 'deleted').
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self._changes: dict[str, str] = {}

    def _resolve(self, path: str) -> Path:
        return resolve_under(self.root, path)

    def _record(self, path: str, change: str) -> None:
        prev = self._changes.get(path)
        if prev == "created" and change == "updated":
            return
        if prev == "created" and change == "deleted":
            del self._changes[path]
            return
        self._changes[path] = change

    @property
    def changes(self) -> dict[str, str]:
        """Map of relative paths to the kind of change made."""
        return dict(self._changes)

    def read(self, path: str) -> bytes:
        target = self._resolve(path)
        with target.open("rb") as fh:
            return fh.read()

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def write(self, path: str, data: bytes) -> None:
        target = self._resolve(path)
        existed = target.exists()
        target.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_bytes(target, data)
        logger.debug("Wrote %d bytes to %s", len(data), target)
        self._record(path, "updated" if existed else "created")

    def create(self, path: str, data: bytes) -> None:
        target = self._resolve(path)
        if target.exists():
            raise FileExistsError(f"File already exists: {path}")
        self.write(path, data)

    def delete(self, path: str) -> None:
        target = self._resolve(path)
        target.unlink()
        logger.debug("Deleted %s", target)
        self._record(path, "deleted")


class MemoryStorage:
    """Dict-backed storage, for tests and for embedding the engine."""

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files: dict[str, bytes] = dict(files or {})

    def read(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None

    def exists(self, path: str) -> bool:
        return path in self.files

    def write(self, path: str, data: bytes) -> None:
        self.files[path] = data

    def create(self, path: str, data: bytes) -> None:
        if path in self.files:
            raise FileExistsError(f"File already exists: {path}")
        self.files[path] = data

    def delete(self, path: str) -> None:
        try:
            del self.files[path]
        except KeyError:
            raise FileNotFoundError(path) from None


class DryRunStorage:
    """Reads through to another storage; keeps writes and deletes in memory.

    Used for ``--dry-run``: the orchestrator runs unchanged while the base
    storage is never modified. ``writes`` and ``deletes`` show what a real
    run would have done.
    """

    def __init__(self, base: Storage) -> None:
        self._base = base
        self.writes: dict[str, bytes] = {}
        self.deletes: set[str] = set()

    def read(self, path: str) -> bytes:
        if path in self.deletes:
            raise FileNotFoundError(path)
        if path in self.writes:
            return self.writes[path]
        return self._base.read(path)

    def exists(self, path: str) -> bool:
        if path in self.deletes:
            return False
        return path in self.writes or self._base.exists(path)

    def write(self, path: str, data: bytes) -> None:
        self.deletes.discard(path)
        self.writes[path] = data

    def create(self, path: str, data: bytes) -> None:
        if self.exists(path):
            raise FileExistsError(f"File already exists: {path}")
        self.write(path, data)

    def delete(self, path: str) -> None:
        if not self.exists(path):
            raise FileNotFoundError(path)
        self.writes.pop(path, None)
        self.deletes.add(path)
