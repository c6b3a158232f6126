"""Types for the in-memory representation of a parsed patch.

A patch is a list of Diffs, one per file. Each Diff owns an ordered list of
Hunks, and each Hunk holds tagged lines whose content keeps the original
end-of-line bytes so patched files can be reassembled exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from diffmend.core.errors import MalformedPatchError
from diffmend.patch.lines import content_length

NO_NEWLINE_MARKER = "\\ No newline at end of file"


class LineTag(str, Enum):
    """Role of a hunk line, valued by its unified-diff prefix."""

    CONTEXT = " "
    INSERT = "+"
    DELETE = "-"

    @classmethod
    def from_prefix(cls, prefix: str) -> LineTag:
        """Map a unified-diff prefix character to a tag.

        Raises:
            MalformedPatchError: If the prefix is not ' ', '+' or '-'.
        """
        try:
            return cls(prefix)
        except ValueError:
            raise MalformedPatchError(f"Unknown hunk line prefix {prefix!r}") from None

    def flipped(self) -> LineTag:
        """Swap INSERT and DELETE; CONTEXT is unchanged."""
        if self is LineTag.INSERT:
            return LineTag.DELETE
        if self is LineTag.DELETE:
            return LineTag.INSERT
        return self


HunkLine = tuple[LineTag, str]


@dataclass
class Hunk:
    """A single contiguous change region of a Diff.

    Attributes:
        old_start: Start line in the original file (1-based, as in the header)
        old_length: Number of original lines covered (context + removed)
        new_start: Start line in the new file (1-based, as in the header)
        new_length: Number of new lines (context + added)
        lines: (tag, content) pairs; content keeps its line terminator
        section: Text after the closing @@ of a unified range line
        matched: Set after the hunk was applied successfully
    """

    old_start: int
    old_length: int
    new_start: int
    new_length: int
    lines: list[HunkLine] = field(default_factory=list)
    section: str = ""
    matched: bool = False

    def __post_init__(self) -> None:
        self.lines = [(LineTag.from_prefix(tag), text) for tag, text in self.lines]

    @classmethod
    def from_unified_lines(
        cls,
        old_range: tuple[int, int],
        new_range: tuple[int, int],
        raw_lines: list[str],
        section: str = "",
    ) -> Hunk:
        """Build a hunk from prefixed lines such as ``"+added\\n"``.

        Raises:
            MalformedPatchError: If a line is empty or has an unknown prefix.
        """
        lines: list[HunkLine] = []
        for raw in raw_lines:
            if not raw:
                raise MalformedPatchError("Empty hunk line")
            lines.append((LineTag.from_prefix(raw[0]), raw[1:]))
        return cls(
            old_start=old_range[0],
            old_length=old_range[1],
            new_start=new_range[0],
            new_length=new_range[1],
            lines=lines,
            section=section,
        )

    @property
    def old_index(self) -> int:
        """0-based position of the hunk in the original file.

        An empty range names the line after which the change goes, so its
        start is already the 0-based index.
        """
        if self.old_length == 0:
            return max(self.old_start, 0)
        return max(self.old_start - 1, 0)

    @property
    def new_index(self) -> int:
        """0-based position of the hunk in the new file."""
        if self.new_length == 0:
            return max(self.new_start, 0)
        return max(self.new_start - 1, 0)

    def count_removals(self) -> int:
        """Count lines being removed."""
        return sum(1 for tag, _ in self.lines if tag is LineTag.DELETE)

    def count_additions(self) -> int:
        """Count lines being added."""
        return sum(1 for tag, _ in self.lines if tag is LineTag.INSERT)

    def count_context(self) -> int:
        """Count context lines."""
        return sum(1 for tag, _ in self.lines if tag is LineTag.CONTEXT)

    def compute_counts(self) -> tuple[int, int]:
        """Compute actual old and new lengths from the lines.

        Returns:
            Tuple of (old_length, new_length):
            old_length = context + removals, new_length = context + additions
        """
        context = self.count_context()
        return (context + self.count_removals(), context + self.count_additions())

    def reverse(self) -> None:
        """Swap the old and new sides in place."""
        self.old_start, self.new_start = self.new_start, self.old_start
        self.old_length, self.new_length = self.new_length, self.old_length
        self.lines = [(tag.flipped(), text) for tag, text in self.lines]

    def content(self) -> str:
        """Render the lines in unified format.

        A line without terminator (last line of a file lacking a final
        newline) is followed by the usual ``\\ No newline at end of file``.
        """
        parts: list[str] = []
        for tag, text in self.lines:
            parts.append(tag.value + text)
            if content_length(text) == len(text):
                parts.append("\n" + NO_NEWLINE_MARKER + "\n")
        return "".join(parts)

    def rejected_description(self) -> str:
        """One-line description of the hunk's ranges for reject reports."""
        return (
            f"@@ -{self.old_start},{self.old_length} "
            f"+{self.new_start},{self.new_length} @@"
        )


class DiffKind(Enum):
    """Kind of file change a Diff describes."""

    ADDITION = "addition"
    DELETION = "deletion"
    CHANGE = "change"


@dataclass
class Diff:
    """All changes for a single file.

    Attributes:
        old_path: Original path from the header, None for /dev/null
        new_path: New path from the header, None for /dev/null
        old_timestamp: Timestamp of the original file, if it could be parsed
        new_timestamp: Timestamp of the new file, if it could be parsed
        hunks: Hunks in file order (ascending original position)
        enabled: Whether the orchestrator applies this diff
    """

    old_path: str | None
    new_path: str | None
    old_timestamp: datetime | None = None
    new_timestamp: datetime | None = None
    hunks: list[Hunk] = field(default_factory=list)
    enabled: bool = True
    _finished: bool = field(default=False, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.old_path is None and self.new_path is None:
            raise MalformedPatchError("Diff header names no file on either side")

    @property
    def kind(self) -> DiffKind:
        """Derive the change kind from which paths are present."""
        if self.old_path is None:
            return DiffKind.ADDITION
        if self.new_path is None:
            return DiffKind.DELETION
        return DiffKind.CHANGE

    @property
    def path(self) -> str:
        """Path of the file the diff applies to (old path when present)."""
        if self.old_path is not None:
            return self.old_path
        # __post_init__ rejects diffs without either path
        return self.new_path  # type: ignore[return-value]

    @property
    def is_finished(self) -> bool:
        """True once the parser has completed this diff."""
        return self._finished

    def add_hunk(self, hunk: Hunk) -> None:
        """Append a hunk while the diff is being parsed."""
        if self._finished:
            raise RuntimeError(f"Diff for {self.path} is already finished")
        self.hunks.append(hunk)

    def finish(self) -> None:
        """Mark the diff complete; later add_hunk() calls fail."""
        self._finished = True

    def reverse(self) -> None:
        """Swap old and new sides of the diff and of every hunk, in place."""
        self.old_path, self.new_path = self.new_path, self.old_path
        self.old_timestamp, self.new_timestamp = self.new_timestamp, self.old_timestamp
        for hunk in self.hunks:
            hunk.reverse()
