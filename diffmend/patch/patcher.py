"""Orchestrator that parses a patch and applies it through host interfaces.

The Patcher owns the parsed diffs and the patch options. apply_all() walks
the diffs in order, reading and writing through a Storage, reporting to a
ProgressMonitor and raising markers through an Annotator for files whose
hunks could not all be applied.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, TextIO

from diffmend.core.errors import StorageError
from diffmend.core.paths import detect_line_ending, strip_path_segments
from diffmend.host.interfaces import Severity
from diffmend.patch.applier import ApplyResult, apply_diff
from diffmend.patch.headers import IndexPathPolicy
from diffmend.patch.lines import LineReader
from diffmend.patch.parser import parse_patch
from diffmend.patch.reject import REJECT_SUFFIX, format_rejects, reject_path
from diffmend.patch.types import Diff, DiffKind

if TYPE_CHECKING:
    from diffmend.config.schema import Config
    from diffmend.host.interfaces import Annotator, ProgressMonitor, Storage

logger = logging.getLogger(__name__)

# Progress units reported per diff
WORK_UNIT = 10

DECODE_ERRORS = "surrogateescape"


class PatchOptions:
    """Options controlling how diffs are located and applied.

    Every setter returns True if the value actually changed.
    """

    def __init__(
        self,
        strip_prefix_segments: int = 0,
        fuzz: int = 0,
        ignore_whitespace: bool = False,
        reversed: bool = False,
    ) -> None:
        self.strip_prefix_segments = 0
        self.fuzz = 0
        self.ignore_whitespace = False
        self.reversed = False
        self.set_strip_prefix_segments(strip_prefix_segments)
        self.set_fuzz(fuzz)
        self.set_ignore_whitespace(ignore_whitespace)
        self.set_reversed(reversed)

    def __repr__(self) -> str:
        return (
            f"PatchOptions(strip_prefix_segments={self.strip_prefix_segments}, "
            f"fuzz={self.fuzz}, ignore_whitespace={self.ignore_whitespace}, "
            f"reversed={self.reversed})"
        )

    def set_strip_prefix_segments(self, count: int) -> bool:
        if count < 0:
            raise ValueError(f"strip_prefix_segments must be non-negative, got {count}")
        if count == self.strip_prefix_segments:
            return False
        self.strip_prefix_segments = count
        return True

    def set_fuzz(self, fuzz: int) -> bool:
        if fuzz < 0:
            raise ValueError(f"fuzz must be non-negative, got {fuzz}")
        if fuzz == self.fuzz:
            return False
        self.fuzz = fuzz
        return True

    def set_ignore_whitespace(self, ignore: bool) -> bool:
        if ignore == self.ignore_whitespace:
            return False
        self.ignore_whitespace = ignore
        return True

    def set_reversed(self, reversed: bool) -> bool:
        if reversed == self.reversed:
            return False
        self.reversed = reversed
        return True


class OutcomeStatus(Enum):
    """What happened to one file during apply_all()."""

    APPLIED = "applied"
    PARTIAL = "partial"
    DELETED = "deleted"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class FileOutcome:
    """Result of processing a single diff.

    Attributes:
        path: Target path after prefix stripping
        kind: Addition, deletion or change
        status: Outcome of the diff
        applied: Number of hunks applied
        rejected: Number of hunks rejected
        reject_path: Path of the written reject report, if any
        error: Storage error message; set for FAILED outcomes and for
            PARTIAL ones whose reject report could not be written
    """

    path: str
    kind: DiffKind
    status: OutcomeStatus
    applied: int = 0
    rejected: int = 0
    reject_path: str | None = None
    error: str | None = None


@dataclass
class PatchReport:
    """Outcome of apply_all()."""

    outcomes: list[FileOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def rejected_count(self) -> int:
        """Total number of rejected hunks."""
        return sum(outcome.rejected for outcome in self.outcomes)

    @property
    def success(self) -> bool:
        """True if nothing was rejected, failed or cancelled."""
        if self.cancelled:
            return False
        return all(
            outcome.status not in (OutcomeStatus.PARTIAL, OutcomeStatus.FAILED)
            for outcome in self.outcomes
        )


class Patcher:
    """Parses a patch and applies its diffs.

    Example:
        patcher = Patcher(PatchOptions(strip_prefix_segments=1, fuzz=2))
        patcher.parse(patch_text)
        report = patcher.apply_all(FileSystemStorage(Path.cwd()))
        if not report.success:
            ...
    """

    def __init__(
        self,
        options: PatchOptions | None = None,
        *,
        index_policy: IndexPathPolicy = IndexPathPolicy.INDEX,
        reject_suffix: str = REJECT_SUFFIX,
        write_rejects: bool = True,
        add_markers: bool = True,
        encoding: str = "utf-8",
    ) -> None:
        self.options = options or PatchOptions()
        self.index_policy = index_policy
        self.reject_suffix = reject_suffix
        self.write_rejects = write_rejects
        self.add_markers = add_markers
        self.encoding = encoding
        self._diffs: list[Diff] = []

    @classmethod
    def from_config(cls, config: Config) -> Patcher:
        """Create a Patcher from the patch section of a loaded Config."""
        patch = config.patch
        options = PatchOptions(
            strip_prefix_segments=patch.strip_prefix_segments,
            fuzz=patch.fuzz,
            ignore_whitespace=patch.ignore_whitespace,
            reversed=patch.reversed,
        )
        return cls(
            options,
            index_policy=IndexPathPolicy(patch.index_path_policy),
            reject_suffix=patch.reject_suffix,
            write_rejects=patch.write_rejects,
            add_markers=patch.add_markers,
            encoding=patch.encoding,
        )

    @property
    def diffs(self) -> list[Diff]:
        """Parsed diffs, in patch order."""
        return self._diffs

    def parse(self, source: str | TextIO) -> list[Diff]:
        """Parse patch text, replacing any previously parsed diffs.

        Raises:
            MalformedPatchError: If the patch text is malformed.
        """
        diffs = parse_patch(source, index_policy=self.index_policy)
        if self.options.reversed:
            for diff in diffs:
                diff.reverse()
        self._diffs = diffs
        logger.info("Parsed %d diff(s)", len(diffs))
        return diffs

    def set_strip_prefix_segments(self, count: int) -> bool:
        return self.options.set_strip_prefix_segments(count)

    def set_fuzz(self, fuzz: int) -> bool:
        return self.options.set_fuzz(fuzz)

    def set_ignore_whitespace(self, ignore: bool) -> bool:
        return self.options.set_ignore_whitespace(ignore)

    def set_reversed(self, reversed: bool) -> bool:
        """Change direction; already parsed diffs are reversed in place."""
        changed = self.options.set_reversed(reversed)
        if changed:
            for diff in self._diffs:
                diff.reverse()
        return changed

    def get_path(self, diff: Diff) -> str:
        """Target path of a diff after stripping leading segments."""
        return strip_path_segments(diff.path, self.options.strip_prefix_segments)

    def patch_lines(self, diff: Diff, lines: list[str]) -> ApplyResult:
        """Apply a diff to lines in place with the current options."""
        return apply_diff(
            diff,
            lines,
            fuzz=self.options.fuzz,
            ignore_whitespace=self.options.ignore_whitespace,
        )

    def patch_text(self, diff: Diff, text: str) -> ApplyResult:
        """Apply a diff to text; the patched text is result.new_content."""
        with LineReader.from_text(text) as reader:
            lines = reader.read_lines()
        return self.patch_lines(diff, lines)

    def _decode(self, data: bytes) -> str:
        return data.decode(self.encoding, errors=DECODE_ERRORS)

    def _encode(self, text: str) -> bytes:
        return text.encode(self.encoding, errors=DECODE_ERRORS)

    def _warn_line_endings(self, diff: Diff, path: str, text: str) -> None:
        if not text or not diff.hunks or self.options.ignore_whitespace:
            return
        hunk_text = "".join(line for hunk in diff.hunks for _, line in hunk.lines)
        if not hunk_text:
            return
        target_ending = detect_line_ending(text)
        patch_ending = detect_line_ending(hunk_text)
        if target_ending != patch_ending:
            logger.warning(
                "%s uses %r line endings but the patch uses %r; hunks may not match",
                path, target_ending, patch_ending,
            )

    def _apply_one(
        self, diff: Diff, path: str, storage: Storage, annotator: Annotator | None
    ) -> FileOutcome:
        kind = diff.kind
        if kind is DiffKind.DELETION:
            storage.delete(path)
            logger.info("Deleted %s", path)
            return FileOutcome(path, kind, OutcomeStatus.DELETED, applied=len(diff.hunks))

        if kind is DiffKind.ADDITION:
            text = ""
        else:
            try:
                text = self._decode(storage.read(path))
            except FileNotFoundError:
                logger.info("%s does not exist, patching an empty file", path)
                text = ""
            self._warn_line_endings(diff, path, text)

        result = self.patch_text(diff, text)
        for warning in result.warnings:
            logger.info("%s: %s", path, warning)

        data = self._encode(result.new_content)
        if kind is DiffKind.ADDITION and not storage.exists(path):
            storage.create(path, data)
        else:
            storage.write(path, data)

        outcome = FileOutcome(
            path,
            kind,
            OutcomeStatus.APPLIED if result.success else OutcomeStatus.PARTIAL,
            applied=len(result.applied_hunks),
            rejected=len(result.rejects),
        )
        if result.rejects:
            self._record_rejects(diff, path, result, storage, annotator, outcome)
        return outcome

    def _record_rejects(
        self,
        diff: Diff,
        path: str,
        result: ApplyResult,
        storage: Storage,
        annotator: Annotator | None,
        outcome: FileOutcome,
    ) -> None:
        count = len(result.rejects)
        total = len(diff.hunks)
        logger.warning("%d of %d hunk(s) rejected for %s", count, total, path)

        if self.write_rejects:
            report = format_rejects(result.rejects)
            if report is not None:
                target = reject_path(path, self.reject_suffix)
                try:
                    storage.write(target, self._encode(report))
                except (OSError, StorageError) as e:
                    # The target is already written; keep the partial outcome
                    logger.error("Failed to write reject file %s: %s", target, e)
                    outcome.error = str(e)
                else:
                    outcome.reject_path = target

        if self.add_markers and annotator is not None:
            message = f"{count} of {total} hunk(s) could not be applied"
            if outcome.reject_path is not None:
                message += f", see {outcome.reject_path}"
            try:
                annotator.add_marker(path, Severity.WARNING, message)
            except Exception as e:
                logger.error("Failed to add marker for %s: %s", path, e)

    def apply_all(
        self,
        storage: Storage,
        progress: ProgressMonitor | None = None,
        annotator: Annotator | None = None,
    ) -> PatchReport:
        """Apply every parsed diff in order.

        Rejected hunks and storage failures are recorded per file and never
        abort the run. Cancellation is polled before each diff; files already
        written stay written.

        Returns:
            PatchReport with one FileOutcome per processed diff.
        """
        report = PatchReport()
        if progress is not None:
            progress.begin(len(self._diffs) * WORK_UNIT)

        try:
            for diff in self._diffs:
                if progress is not None and progress.is_cancelled():
                    logger.info("Patch run cancelled")
                    report.cancelled = True
                    break

                path = self.get_path(diff)
                if not diff.enabled:
                    logger.debug("Skipping disabled diff for %s", path)
                    report.outcomes.append(FileOutcome(path, diff.kind, OutcomeStatus.SKIPPED))
                else:
                    if progress is not None:
                        progress.sub_task(path)
                    try:
                        outcome = self._apply_one(diff, path, storage, annotator)
                    except (OSError, StorageError) as e:
                        logger.error("Failed to patch %s: %s", path, e)
                        outcome = FileOutcome(
                            path, diff.kind, OutcomeStatus.FAILED, error=str(e)
                        )
                    report.outcomes.append(outcome)

                if progress is not None:
                    progress.worked(WORK_UNIT)
        finally:
            if progress is not None:
                progress.done()

        return report
