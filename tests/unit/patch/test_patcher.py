"""Tests for diffmend.patch.patcher module."""

import pytest

from diffmend.config.schema import Config, PatchConfig
from diffmend.core.cancel import CancellationToken
from diffmend.core.errors import StorageError
from diffmend.host.interfaces import Marker, Severity
from diffmend.host.markers import MarkerStore
from diffmend.host.progress import NullProgressMonitor
from diffmend.host.storage import MemoryStorage
from diffmend.patch.headers import IndexPathPolicy
from diffmend.patch.patcher import (
    WORK_UNIT,
    OutcomeStatus,
    PatchOptions,
    Patcher,
)
from diffmend.patch.types import DiffKind

CHANGE_PATCH = """\
--- a/f.txt
+++ b/f.txt
@@ -1,3 +1,3 @@
 one
-two
+TWO
 three
"""

MULTI_PATCH = """\
--- /dev/null
+++ b/dir/new.txt
@@ -0,0 +1,2 @@
+hello
+world
--- a/old.txt
+++ /dev/null
@@ -1 +0,0 @@
-bye
--- a/f.txt
+++ b/f.txt
@@ -1,3 +1,3 @@
 one
-two
+TWO
 three
"""

TWO_HUNK_PATCH = """\
--- a/f.txt
+++ b/f.txt
@@ -1,1 +1,1 @@
-a
+A
@@ -9,1 +9,1 @@
-i
+I
"""


class RecordingMonitor(NullProgressMonitor):
    """Records calls; cancels after `cancel_after` diffs."""

    def __init__(self, cancel_after: int | None = None) -> None:
        super().__init__(CancellationToken())
        self.cancel_after = cancel_after
        self.tasks: list[str] = []
        self.finished = False

    def sub_task(self, description: str) -> None:
        self.tasks.append(description)

    def worked(self, units: int) -> None:
        super().worked(units)
        if self.cancel_after is not None and self.completed >= self.cancel_after * WORK_UNIT:
            assert self.token is not None
            self.token.cancel()

    def done(self) -> None:
        self.finished = True


class FailingAnnotator:
    def add_marker(self, path: str, severity: Severity, message: str) -> Marker:
        raise RuntimeError("marker service down")


class FailingWriteStorage(MemoryStorage):
    def write(self, path: str, data: bytes) -> None:
        if path == "f.txt":
            raise StorageError(path, "read-only")
        super().write(path, data)


class RejectWriteFailingStorage(MemoryStorage):
    def write(self, path: str, data: bytes) -> None:
        if path.endswith(".rej"):
            raise StorageError(path, "disk full")
        super().write(path, data)



class TestPatchOptions:
    """Tests for PatchOptions setters."""

    def test_setters_report_change(self) -> None:
        options = PatchOptions()

        assert options.set_fuzz(2) is True
        assert options.set_fuzz(2) is False
        assert options.set_strip_prefix_segments(1) is True
        assert options.set_ignore_whitespace(False) is False
        assert options.set_reversed(True) is True

    def test_negative_values_rejected(self) -> None:
        options = PatchOptions()
        with pytest.raises(ValueError):
            options.set_fuzz(-1)
        with pytest.raises(ValueError):
            options.set_strip_prefix_segments(-2)
        with pytest.raises(ValueError):
            PatchOptions(fuzz=-1)


class TestPatcherPaths:
    """Tests for target path computation."""

    def test_strip_prefix(self) -> None:
        patcher = Patcher(PatchOptions(strip_prefix_segments=1))
        diff = patcher.parse(CHANGE_PATCH)[0]

        assert patcher.get_path(diff) == "f.txt"

    def test_strip_keeps_last_segment(self) -> None:
        """Stripping more segments than the path has leaves it unchanged."""
        patcher = Patcher(PatchOptions(strip_prefix_segments=5))
        diff = patcher.parse(CHANGE_PATCH)[0]

        assert patcher.get_path(diff) == "a/f.txt"

    def test_from_config(self) -> None:
        config = Config(
            patch=PatchConfig(
                strip_prefix_segments=1,
                fuzz=3,
                ignore_whitespace=True,
                index_path_policy="header",
                reject_suffix=".orig.rej",
            )
        )

        patcher = Patcher.from_config(config)

        assert patcher.options.fuzz == 3
        assert patcher.options.ignore_whitespace is True
        assert patcher.index_policy is IndexPathPolicy.HEADER
        assert patcher.reject_suffix == ".orig.rej"


class TestPatcherReverse:
    """Tests for reversed patches."""

    def test_set_reversed_reverses_parsed_diffs(self) -> None:
        patcher = Patcher()
        diff = patcher.parse(MULTI_PATCH)[0]
        assert diff.kind is DiffKind.ADDITION

        assert patcher.set_reversed(True) is True
        assert diff.kind is DiffKind.DELETION
        assert patcher.set_reversed(True) is False

        patcher.set_reversed(False)
        assert diff.kind is DiffKind.ADDITION

    def test_parse_applies_reversed_option(self) -> None:
        patcher = Patcher(PatchOptions(reversed=True))
        patcher.parse(CHANGE_PATCH)

        result = patcher.patch_text(patcher.diffs[0], "one\nTWO\nthree\n")

        assert result.new_content == "one\ntwo\nthree\n"


class TestApplyAll:
    """Tests for Patcher.apply_all()."""

    def test_change(self) -> None:
        patcher = Patcher(PatchOptions(strip_prefix_segments=1))
        patcher.parse(CHANGE_PATCH)
        storage = MemoryStorage({"f.txt": b"one\ntwo\nthree\n"})

        report = patcher.apply_all(storage)

        assert report.success
        assert storage.files["f.txt"] == b"one\nTWO\nthree\n"
        assert report.outcomes[0].status is OutcomeStatus.APPLIED
        assert report.outcomes[0].applied == 1

    def test_addition_deletion_and_change(self) -> None:
        patcher = Patcher(PatchOptions(strip_prefix_segments=1))
        patcher.parse(MULTI_PATCH)
        storage = MemoryStorage({"old.txt": b"bye\n", "f.txt": b"one\ntwo\nthree\n"})
        monitor = RecordingMonitor()

        report = patcher.apply_all(storage, progress=monitor)

        assert report.success
        assert storage.files == {
            "dir/new.txt": b"hello\nworld\n",
            "f.txt": b"one\nTWO\nthree\n",
        }
        assert [o.status for o in report.outcomes] == [
            OutcomeStatus.APPLIED,
            OutcomeStatus.DELETED,
            OutcomeStatus.APPLIED,
        ]
        assert monitor.total == 3 * WORK_UNIT
        assert monitor.completed == 3 * WORK_UNIT
        assert monitor.tasks == ["dir/new.txt", "old.txt", "f.txt"]
        assert monitor.finished

    def test_missing_target_is_patched_as_empty(self) -> None:
        patcher = Patcher()
        patcher.parse("--- a\n+++ a\n@@ -0,0 +1 @@\n+first\n")
        storage = MemoryStorage()

        report = patcher.apply_all(storage)

        assert report.success
        assert storage.files["a"] == b"first\n"

    def test_rejects_write_report_and_marker(self) -> None:
        patcher = Patcher(PatchOptions(strip_prefix_segments=1))
        patcher.parse(CHANGE_PATCH)
        storage = MemoryStorage({"f.txt": b"something\nelse\n"})
        markers = MarkerStore()

        report = patcher.apply_all(storage, annotator=markers)

        outcome = report.outcomes[0]
        assert outcome.status is OutcomeStatus.PARTIAL
        assert outcome.rejected == 1
        assert outcome.reject_path == "f.txt.rej"
        assert report.rejected_count == 1
        assert report.success is False
        assert storage.files["f.txt"] == b"something\nelse\n"
        assert storage.files["f.txt.rej"] == b"@@ -1,3 +1,3 @@\n one\n-two\n+TWO\n three\n"
        assert len(markers.markers) == 1
        assert markers.markers[0].path == "f.txt"
        assert markers.markers[0].severity is Severity.WARNING

    def test_rejects_disabled(self) -> None:
        patcher = Patcher(PatchOptions(strip_prefix_segments=1), write_rejects=False)
        patcher.parse(CHANGE_PATCH)
        storage = MemoryStorage({"f.txt": b"other\n"})

        report = patcher.apply_all(storage)

        assert report.outcomes[0].reject_path is None
        assert "f.txt.rej" not in storage.files

    def test_marker_failure_is_not_fatal(self) -> None:
        patcher = Patcher(PatchOptions(strip_prefix_segments=1))
        patcher.parse(CHANGE_PATCH)
        storage = MemoryStorage({"f.txt": b"other\n"})

        report = patcher.apply_all(storage, annotator=FailingAnnotator())

        assert report.outcomes[0].status is OutcomeStatus.PARTIAL
        assert "f.txt.rej" in storage.files

    def test_storage_failure_continues(self) -> None:
        patcher = Patcher(PatchOptions(strip_prefix_segments=1))
        patcher.parse(MULTI_PATCH)
        storage = FailingWriteStorage({"f.txt": b"one\ntwo\nthree\n"})

        report = patcher.apply_all(storage)

        statuses = [o.status for o in report.outcomes]
        # old.txt does not exist, f.txt cannot be written
        assert statuses == [
            OutcomeStatus.APPLIED,
            OutcomeStatus.FAILED,
            OutcomeStatus.FAILED,
        ]
        assert report.outcomes[2].error == "f.txt: read-only"
        assert storage.files["dir/new.txt"] == b"hello\nworld\n"
        assert report.success is False

    def test_reject_write_failure_keeps_partial_outcome(self) -> None:
        """The patched target and hunk counts survive a failed reject write."""
        patcher = Patcher(PatchOptions(strip_prefix_segments=1))
        patcher.parse(TWO_HUNK_PATCH)
        storage = RejectWriteFailingStorage({"f.txt": b"a\nb\nc\nd\ne\nf\ng\nh\nX\n"})
        markers = MarkerStore()

        report = patcher.apply_all(storage, annotator=markers)

        outcome = report.outcomes[0]
        assert outcome.status is OutcomeStatus.PARTIAL
        assert (outcome.applied, outcome.rejected) == (1, 1)
        assert outcome.reject_path is None
        assert outcome.error == "f.txt.rej: disk full"
        assert storage.files["f.txt"] == b"A\nb\nc\nd\ne\nf\ng\nh\nX\n"
        assert "f.txt.rej" not in storage.files
        assert len(markers.markers) == 1
        assert markers.markers[0].path == "f.txt"
        assert "see" not in markers.markers[0].message

    def test_disabled_diff_skipped(self) -> None:
        patcher = Patcher(PatchOptions(strip_prefix_segments=1))
        patcher.parse(CHANGE_PATCH)
        patcher.diffs[0].enabled = False
        storage = MemoryStorage({"f.txt": b"one\ntwo\nthree\n"})

        report = patcher.apply_all(storage)

        assert report.outcomes[0].status is OutcomeStatus.SKIPPED
        assert storage.files["f.txt"] == b"one\ntwo\nthree\n"
        assert report.success

    def test_cancellation_between_diffs(self) -> None:
        """Work done before cancellation is kept; the rest is not started."""
        patcher = Patcher(PatchOptions(strip_prefix_segments=1))
        patcher.parse(MULTI_PATCH)
        storage = MemoryStorage({"old.txt": b"bye\n", "f.txt": b"one\ntwo\nthree\n"})
        monitor = RecordingMonitor(cancel_after=1)

        report = patcher.apply_all(storage, progress=monitor)

        assert report.cancelled is True
        assert report.success is False
        assert len(report.outcomes) == 1
        assert "dir/new.txt" in storage.files
        assert "old.txt" in storage.files
        assert monitor.finished

    def test_undecodable_bytes_round_trip(self) -> None:
        patcher = Patcher()
        patcher.parse("--- f\n+++ f\n@@ -2 +2 @@\n-b\n+B\n")
        storage = MemoryStorage({"f": b"\xff\xfe\nb\n"})

        # Range "-2" is the tolerant length-only form: lines 1-2 of the file
        report = patcher.apply_all(storage)

        assert report.outcomes[0].status is OutcomeStatus.PARTIAL

        patcher.parse("--- f\n+++ f\n@@ -2,1 +2,1 @@\n-b\n+B\n")
        report = patcher.apply_all(storage)

        assert report.success
        assert storage.files["f"] == b"\xff\xfe\nB\n"
