"""Parser for unified and context diff files.

This module turns patch text into Diff and Hunk objects. Each file section
is read by a format-specific reader selected from its first header line:
``--- `` starts a unified diff, ``*** `` a context diff. Lines before a
recognized header (mail headers, ``diff`` command lines, commentary) are
skipped; an ``Index:`` line is remembered as a hint for the next file name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TextIO

from diffmend.core.errors import MalformedPatchError
from diffmend.patch.headers import (
    ContextRange,
    IndexPathPolicy,
    parse_context_new_range,
    parse_context_old_range,
    parse_file_header,
    parse_unified_range,
)
from diffmend.patch.lines import LineCursor, LineReader, content_length, strip_terminator
from diffmend.patch.normalize import unify_lines
from diffmend.patch.types import Diff, Hunk, LineTag

logger = logging.getLogger(__name__)

HUNK_SEPARATOR = "***************"

# Lines that start a mail signature; editors often drop the trailing space
SIGNATURE_SEPARATORS = ("-- ", "--")


@dataclass
class DiffParseResult:
    """Outcome of reading one file section.

    Attributes:
        diff: The finished Diff, or None if the header pair was incomplete
        next_line: First line not belonging to the section (also left on
            the cursor), None at end of input
    """

    diff: Diff | None
    next_line: str | None


def _new_diff(old_line: str, new_line: str, index_name: str | None,
              policy: IndexPathPolicy) -> Diff:
    old = parse_file_header(old_line, index_name, policy)
    new = parse_file_header(new_line, index_name, policy)
    return Diff(
        old_path=old.path,
        new_path=new.path,
        old_timestamp=old.timestamp,
        new_timestamp=new.timestamp,
    )


def _is_unified_header(cursor: LineCursor, line: str) -> bool:
    """Check whether line starts the next file of a unified patch."""
    if not line.startswith("--- "):
        return False
    following = cursor.peek()
    return following is not None and following.startswith("+++ ")


def read_unified_diff(
    cursor: LineCursor,
    first_line: str,
    index_name: str | None = None,
    policy: IndexPathPolicy = IndexPathPolicy.INDEX,
) -> DiffParseResult:
    """Read one file section of a unified diff.

    Args:
        cursor: Cursor positioned after first_line
        first_line: The ``--- old`` header line
        index_name: File name from a preceding ``Index:`` line
        policy: Which name wins when index_name and a header disagree

    Hunk lines are collected by their leading character. Once a hunk holds
    as many old and new lines as its range line announces, a blank line or
    a ``-- `` mail signature ends the diff; prefixed lines past the
    announced counts still belong to the hunk.

    Returns:
        DiffParseResult; diff is None if no ``+++`` line follows.

    Raises:
        MalformedPatchError: On an invalid ``@@`` range line.
    """
    line = cursor.next()
    if line is None or not line.startswith("+++ "):
        if line is not None:
            cursor.push_back(line)
        return DiffParseResult(None, line)

    diff = _new_diff(first_line, line, index_name, policy)

    ranges: tuple[tuple[int, int], tuple[int, int], str] | None = None
    pending: list[str] = []
    # Old and new lines still expected by the current hunk's range line
    old_left = new_left = 0
    next_line: str | None = None

    def flush() -> None:
        if ranges is not None and pending:
            old_range, new_range, section = ranges
            diff.add_hunk(Hunk.from_unified_lines(old_range, new_range, pending, section))
        pending.clear()

    try:
        while True:
            line = cursor.next()
            if line is None:
                break

            if line.startswith("@@ "):
                flush()
                ranges = parse_unified_range(line)
                old_left, new_left = ranges[0][1], ranges[1][1]
                continue

            if ranges is not None:
                if line.startswith("\\ "):
                    # "\ No newline at end of file" applies to the previous line
                    if pending:
                        pending[-1] = strip_terminator(pending[-1])
                    continue
                counted = old_left > 0 or new_left > 0
                if content_length(line) == 0:
                    if not counted:
                        # Trailing blank line after a complete hunk
                        cursor.push_back(line)
                        next_line = line
                        break
                    # Blank line inside a hunk: context whose prefix was lost
                    line = LineTag.CONTEXT.value + line
                elif not counted and strip_terminator(line) in SIGNATURE_SEPARATORS:
                    cursor.push_back(line)
                    next_line = line
                    break

                lead = line[0]
                if lead in " +-" and not _is_unified_header(cursor, line):
                    if not counted:
                        logger.debug("Hunk holds more lines than its range line announces")
                    if lead != "+":
                        old_left -= 1
                    if lead != "-":
                        new_left -= 1
                    pending.append(line)
                    continue
                if counted:
                    logger.debug(
                        "Hunk ended early (%d old, %d new lines missing)", old_left, new_left
                    )

            cursor.push_back(line)
            next_line = line
            break
    finally:
        flush()
        diff.finish()

    return DiffParseResult(diff, next_line)


def _build_context_hunk(
    old_range: ContextRange | None,
    new_range: ContextRange | None,
    old_lines: list[str],
    new_lines: list[str],
) -> Hunk:
    if old_range is None or new_range is None:
        raise MalformedPatchError("Context diff hunk without '***'/'---' range lines")
    hunk = Hunk(0, 0, 0, 0, lines=unify_lines(old_lines, new_lines))
    old_count, new_count = hunk.compute_counts()
    hunk.old_start, hunk.old_length = old_range.resolve(old_count)
    hunk.new_start, hunk.new_length = new_range.resolve(new_count)
    return hunk


def read_context_diff(
    cursor: LineCursor,
    first_line: str,
    index_name: str | None = None,
    policy: IndexPathPolicy = IndexPathPolicy.INDEX,
) -> DiffParseResult:
    """Read one file section of a context diff.

    Each hunk starts with a ``***************`` line, followed by the old
    range (``*** a,b ****``) with its block and the new range
    (``--- c,d ----``) with its block. Either block may be absent when that
    side holds no changes.

    Raises:
        MalformedPatchError: If the blocks cannot be merged (see unify_lines).
    """
    line = cursor.next()
    if line is None or not line.startswith("--- "):
        if line is not None:
            cursor.push_back(line)
        return DiffParseResult(None, line)

    diff = _new_diff(first_line, line, index_name, policy)

    in_hunk = False
    old_range: ContextRange | None = None
    new_range: ContextRange | None = None
    old_lines: list[str] = []
    new_lines: list[str] = []
    block = old_lines
    next_line: str | None = None

    def flush() -> None:
        if old_lines or new_lines:
            diff.add_hunk(_build_context_hunk(old_range, new_range, old_lines, new_lines))
        old_lines.clear()
        new_lines.clear()

    try:
        while True:
            line = cursor.next()
            if line is None:
                break
            if content_length(line) == 0:
                continue

            if line.startswith(HUNK_SEPARATOR):
                flush()
                in_hunk = True
                old_range = new_range = None
                block = old_lines
                continue

            if in_hunk:
                if line.startswith("*** "):
                    parsed = parse_context_old_range(line)
                    if parsed is not None:
                        old_range = parsed
                        block = old_lines
                        continue
                elif line.startswith("--- "):
                    parsed = parse_context_new_range(line)
                    if parsed is not None:
                        new_range = parsed
                        block = new_lines
                        continue
                elif len(line) > 1 and line[0] in " +!-" and line[1] == " ":
                    block.append(line)
                    continue
                elif line.startswith("\\ "):
                    if block:
                        block[-1] = strip_terminator(block[-1])
                    continue

            cursor.push_back(line)
            next_line = line
            break
    finally:
        flush()
        diff.finish()

    return DiffParseResult(diff, next_line)


def parse_patch(
    source: str | TextIO,
    index_policy: IndexPathPolicy = IndexPathPolicy.INDEX,
) -> list[Diff]:
    """Parse patch text into Diff objects.

    Handles:
    - Unified diffs (``---``/``+++`` headers, ``@@ -a,b +c,d @@`` hunks)
    - Context diffs (``***``/``---`` headers, ``***************`` hunks)
    - ``\\ No newline at end of file`` markers
    - ``/dev/null`` paths (file creation and deletion)
    - ``Index:`` lines naming the next file

    Args:
        source: Patch text, or a text stream opened with ``newline=""``
        index_policy: Which name wins when ``Index:`` and a header disagree

    Returns:
        Diffs in the order they appear in the patch.

    Raises:
        MalformedPatchError: If a file section violates its format.

    Example:
        >>> diffs = parse_patch('''\\
        ... --- a/f.txt
        ... +++ b/f.txt
        ... @@ -1,2 +1,2 @@
        ...  one
        ... -two
        ... +TWO
        ... ''')
        >>> diffs[0].path, len(diffs[0].hunks)
        ('a/f.txt', 1)
    """
    if isinstance(source, str):
        reader = LineReader.from_text(source)
    else:
        reader = LineReader(source)
    cursor = LineCursor(reader)

    diffs: list[Diff] = []
    index_name: str | None = None

    while True:
        line = cursor.next()
        if line is None:
            break
        if len(line) < 4:
            continue  # too short to be a header

        if line.startswith("Index: "):
            index_name = strip_terminator(line)[7:].strip() or None
            continue

        if line.startswith("--- "):
            result = read_unified_diff(cursor, line, index_name, index_policy)
        elif line.startswith("*** "):
            result = read_context_diff(cursor, line, index_name, index_policy)
        else:
            continue

        index_name = None
        if result.diff is not None:
            logger.debug(
                "Parsed diff for %s with %d hunk(s)", result.diff.path, len(result.diff.hunks)
            )
            diffs.append(result.diff)

    return diffs
