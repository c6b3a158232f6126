"""Parsing of diff file headers and hunk range lines."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from diffmend.core.constants import DEV_NULL
from diffmend.core.errors import MalformedPatchError
from diffmend.patch.dates import parse_timestamp
from diffmend.patch.lines import strip_terminator

logger = logging.getLogger(__name__)

# @@ -old_range +new_range @@ [section]
UNIFIED_RANGE_RE = re.compile(r"^@@ -(\S+) \+(\S+) @@ ?(.*)$")

# *** 1,5 ****   and   --- 1,6 ----
CONTEXT_OLD_RANGE_RE = re.compile(r"^\*\*\* (\d+)(?:,(\d+))? \*{3,4}\s*$")
CONTEXT_NEW_RANGE_RE = re.compile(r"^--- (\d+)(?:,(\d+))? (?:-{3,4}|\*{3,4})\s*$")


class IndexPathPolicy(Enum):
    """Which name wins when an `Index:` line and a header path disagree."""

    INDEX = "index"
    HEADER = "header"


@dataclass(frozen=True)
class FileHeader:
    """Path and timestamp read from one `---`/`+++`/`***` header line."""

    path: str | None
    timestamp: datetime | None


def split_header(text: str) -> list[str]:
    """Break a header remainder into tab-separated fields.

    Each field is stripped and empty fields are dropped.

    Example:
        >>> split_header("a/f.txt\\t2002-02-21 23:30:39 -0800\\n")
        ['a/f.txt', '2002-02-21 23:30:39 -0800']
    """
    fields = (part.strip() for part in text.split("\t"))
    return [part for part in fields if part]


def _strip_revision(path: str) -> str:
    """Drop a trailing ``:revision`` tag such as ``main.c:1.42``."""
    pos = path.rfind(":")
    if pos > 0 and "/" not in path[pos:] and "\\" not in path[pos:]:
        return path[:pos]
    return path


def extract_path(
    fields: list[str],
    index_name: str | None = None,
    policy: IndexPathPolicy = IndexPathPolicy.INDEX,
) -> str | None:
    """Return the path named by a header, or None for /dev/null.

    When an `Index:` line preceded the header and names a different file,
    the policy decides which one is used. The mismatch is logged either way.
    """
    if not fields:
        return None
    path = fields[0]
    if path == DEV_NULL:
        return None
    path = _strip_revision(path)
    if index_name is not None and index_name != path:
        logger.info(
            "Header path %r differs from Index: %r, using the %s name",
            path,
            index_name,
            policy.value,
        )
        if policy is IndexPathPolicy.INDEX:
            path = index_name
    return path


def parse_file_header(
    line: str,
    index_name: str | None = None,
    policy: IndexPathPolicy = IndexPathPolicy.INDEX,
) -> FileHeader:
    """Parse a header line such as ``--- a/f.txt\\t2002-02-21 23:30:39``."""
    fields = split_header(strip_terminator(line)[4:])
    timestamp = None
    if len(fields) > 1:
        timestamp = parse_timestamp(fields[1])
        if timestamp is None:
            logger.debug("Unparsable timestamp in header: %r", fields[1])
    return FileHeader(extract_path(fields, index_name, policy), timestamp)


def _parse_pair(text: str, line: str) -> tuple[int, int]:
    start, sep, length = text.partition(",")
    try:
        if not sep:
            # A lone number is the length of a range starting at line 1
            return 1, int(start)
        return int(start), int(length)
    except ValueError:
        raise MalformedPatchError("Invalid hunk range", line) from None


def parse_unified_range(line: str) -> tuple[tuple[int, int], tuple[int, int], str]:
    """Parse ``@@ -a,b +c,d @@ section``.

    Returns:
        ((old_start, old_length), (new_start, new_length), section)

    Raises:
        MalformedPatchError: If the line is not a valid range line.
    """
    match = UNIFIED_RANGE_RE.match(strip_terminator(line))
    if not match:
        raise MalformedPatchError("Invalid hunk header", line)
    old_range = _parse_pair(match.group(1), line)
    new_range = _parse_pair(match.group(2), line)
    return old_range, new_range, match.group(3).strip()


@dataclass(frozen=True)
class ContextRange:
    """Range from a context-diff `*** a,b ****` or `--- c,d ----` line.

    A range written as a single number has no explicit length; the parser
    takes it from the lines the hunk holds for that side.
    """

    start: int
    length: int | None

    def resolve(self, line_count: int) -> tuple[int, int]:
        """Return (start, length), filling an implicit length from line_count."""
        if self.length is None:
            return self.start, line_count
        return self.start, self.length


def _context_range(match: re.Match[str]) -> ContextRange:
    start = int(match.group(1))
    if match.group(2) is None:
        return ContextRange(start, None)
    end = int(match.group(2))
    return ContextRange(start, max(end - start + 1, 0))


def parse_context_old_range(line: str) -> ContextRange | None:
    """Parse ``*** a,b ****``; None if the line is not an old-range line."""
    match = CONTEXT_OLD_RANGE_RE.match(strip_terminator(line))
    return _context_range(match) if match else None


def parse_context_new_range(line: str) -> ContextRange | None:
    """Parse ``--- c,d ----``; None if the line is not a new-range line."""
    match = CONTEXT_NEW_RANGE_RE.match(strip_terminator(line))
    return _context_range(match) if match else None
