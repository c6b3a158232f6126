"""Tests for diffmend.host storage, markers and progress."""

from pathlib import Path

import pytest

from diffmend.core.cancel import CancellationToken
from diffmend.core.errors import PathSecurityError
from diffmend.host.interfaces import Severity
from diffmend.host.markers import MarkerStore
from diffmend.host.progress import NullProgressMonitor
from diffmend.host.storage import DryRunStorage, FileSystemStorage, MemoryStorage
from diffmend.patch.patcher import OutcomeStatus, PatchOptions, Patcher


class TestFileSystemStorage:
    """Tests for FileSystemStorage."""

    def test_read_write(self, tmp_path: Path) -> None:
        (tmp_path / "f.txt").write_bytes(b"a\r\n")
        storage = FileSystemStorage(tmp_path)

        assert storage.read("f.txt") == b"a\r\n"
        storage.write("f.txt", b"b\n")

        assert (tmp_path / "f.txt").read_bytes() == b"b\n"
        assert storage.changes == {"f.txt": "updated"}

    def test_create_makes_parents(self, tmp_path: Path) -> None:
        storage = FileSystemStorage(tmp_path)

        storage.create("deep/dir/new.txt", b"x")

        assert (tmp_path / "deep" / "dir" / "new.txt").read_bytes() == b"x"
        assert storage.changes == {"deep/dir/new.txt": "created"}

    def test_create_existing_fails(self, tmp_path: Path) -> None:
        (tmp_path / "f.txt").write_bytes(b"")
        with pytest.raises(FileExistsError):
            FileSystemStorage(tmp_path).create("f.txt", b"x")

    def test_read_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            FileSystemStorage(tmp_path).read("missing.txt")

    def test_delete(self, tmp_path: Path) -> None:
        (tmp_path / "f.txt").write_bytes(b"")
        storage = FileSystemStorage(tmp_path)

        storage.delete("f.txt")

        assert not (tmp_path / "f.txt").exists()
        assert storage.exists("f.txt") is False
        assert storage.changes == {"f.txt": "deleted"}

    def test_create_then_delete_leaves_no_change(self, tmp_path: Path) -> None:
        storage = FileSystemStorage(tmp_path)
        storage.create("tmp.txt", b"x")
        storage.delete("tmp.txt")

        assert storage.changes == {}

    def test_escape_refused(self, tmp_path: Path) -> None:
        storage = FileSystemStorage(tmp_path / "root")
        with pytest.raises(PathSecurityError):
            storage.write("../evil.txt", b"x")

    def test_patch_end_to_end(self, tmp_path: Path) -> None:
        """A patch applied to a directory tree writes files and rejects."""
        (tmp_path / "f.txt").write_bytes(b"one\ntwo\nthree\n")
        (tmp_path / "g.txt").write_bytes(b"unrelated\n")
        patcher = Patcher(PatchOptions(strip_prefix_segments=1))
        patcher.parse(
            "--- a/f.txt\n+++ b/f.txt\n@@ -1,3 +1,3 @@\n one\n-two\n+TWO\n three\n"
            "--- a/g.txt\n+++ b/g.txt\n@@ -1 +1 @@\n-missing\n+x\n"
        )

        report = patcher.apply_all(FileSystemStorage(tmp_path))

        assert [o.status for o in report.outcomes] == [
            OutcomeStatus.APPLIED,
            OutcomeStatus.PARTIAL,
        ]
        assert (tmp_path / "f.txt").read_bytes() == b"one\nTWO\nthree\n"
        assert (tmp_path / "g.txt.rej").read_text() == "@@ -1,1 +1,1 @@\n-missing\n+x\n"


class TestDryRunStorage:
    """Tests for DryRunStorage."""

    def test_writes_stay_in_memory(self) -> None:
        base = MemoryStorage({"f.txt": b"old"})
        storage = DryRunStorage(base)

        storage.write("f.txt", b"new")
        storage.create("g.txt", b"g")

        assert storage.read("f.txt") == b"new"
        assert storage.exists("g.txt")
        assert base.files == {"f.txt": b"old"}
        assert storage.writes == {"f.txt": b"new", "g.txt": b"g"}

    def test_delete_hides_file(self) -> None:
        base = MemoryStorage({"f.txt": b"old"})
        storage = DryRunStorage(base)

        storage.delete("f.txt")

        assert storage.exists("f.txt") is False
        with pytest.raises(FileNotFoundError):
            storage.read("f.txt")
        assert base.exists("f.txt")

    def test_delete_missing(self) -> None:
        with pytest.raises(FileNotFoundError):
            DryRunStorage(MemoryStorage()).delete("nope")


class TestMemoryStorage:
    def test_missing_read(self) -> None:
        with pytest.raises(FileNotFoundError):
            MemoryStorage().read("x")

    def test_create_existing(self) -> None:
        with pytest.raises(FileExistsError):
            MemoryStorage({"x": b""}).create("x", b"y")


class TestMarkerStore:
    def test_add_marker(self) -> None:
        store = MarkerStore()

        marker = store.add_marker("f.txt", Severity.WARNING, "1 hunk failed")

        assert marker.path == "f.txt"
        assert store.for_path("f.txt") == [marker]
        assert store.for_path("other") == []
        store.clear()
        assert store.markers == []


class TestNullProgressMonitor:
    def test_counts_and_cancellation(self) -> None:
        token = CancellationToken()
        monitor = NullProgressMonitor(token)

        monitor.begin(20)
        monitor.worked(10)
        assert (monitor.total, monitor.completed) == (20, 10)
        assert monitor.is_cancelled() is False

        token.cancel()
        assert monitor.is_cancelled() is True

    def test_without_token(self) -> None:
        assert NullProgressMonitor().is_cancelled() is False
