"""Applier for parsed diffs.

Hunks are applied in order against a list of lines. Each hunk is first
probed without touching the target; if the probe fails at the expected
position, nearby offsets within the fuzz window are tried. Hunks that match
nowhere are rejected and the remaining hunks are still applied.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from diffmend.patch.lines import join_lines
from diffmend.patch.types import Diff, Hunk, LineTag

logger = logging.getLogger(__name__)

LineMatcher = Callable[[str, str], bool]


@dataclass
class ApplyResult:
    """Result of applying a diff.

    Attributes:
        lines: The patched lines (the list passed in, mutated in place)
        applied_hunks: Indices of successfully applied hunks
        failed_hunks: List of (index, reason) for rejected hunks
        rejects: The rejected Hunk objects, in order
        warnings: Non-critical notes, such as hunks applied at an offset
    """

    lines: list[str]
    applied_hunks: list[int] = field(default_factory=list)
    failed_hunks: list[tuple[int, str]] = field(default_factory=list)
    rejects: list[Hunk] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True if no hunk was rejected."""
        return not self.rejects

    @property
    def new_content(self) -> str:
        """The patched lines joined back into text."""
        return join_lines(self.lines)


def _strip_whitespace(line: str) -> str:
    """Remove every whitespace character, line terminators included."""
    return "".join(line.split())


def _exact_match(line1: str, line2: str) -> bool:
    return line1 == line2


def _whitespace_insensitive_match(line1: str, line2: str) -> bool:
    return _strip_whitespace(line1) == _strip_whitespace(line2)


def line_matcher(ignore_whitespace: bool) -> LineMatcher:
    """Return the line comparison used for matching hunks.

    Example:
        >>> line_matcher(True)("a  b\\n", "ab\\r\\n")
        True
        >>> line_matcher(False)("a  b\\n", "ab\\n")
        False
    """
    return _whitespace_insensitive_match if ignore_whitespace else _exact_match


def try_hunk(hunk: Hunk, lines: list[str], shift: int, match: LineMatcher) -> bool:
    """Check whether hunk applies at its position plus shift, without mutation.

    Context and delete lines must be found in order. Target lines may be
    skipped to reach a match only after an earlier line of the same kind
    already matched in this hunk; the first one must match exactly in place.
    """
    pos = hunk.old_index + shift
    if pos < 0 or pos > len(lines):
        return False

    matches = {LineTag.CONTEXT: 0, LineTag.DELETE: 0}
    for tag, text in hunk.lines:
        if tag is LineTag.INSERT:
            continue
        while True:
            if pos >= len(lines):
                return False
            if match(text, lines[pos]):
                matches[tag] += 1
                pos += 1
                break
            if matches[tag] <= 0:
                return False
            pos += 1
    return True


def do_hunk(hunk: Hunk, lines: list[str], shift: int, match: LineMatcher) -> int:
    """Apply hunk at its position plus shift, mutating lines.

    Must only be called after try_hunk() succeeded for the same shift.

    Returns:
        The line count delta (new_length - old_length) for later hunks.
    """
    pos = hunk.old_index + shift
    for tag, text in hunk.lines:
        if tag is LineTag.CONTEXT:
            while not match(text, lines[pos]):
                pos += 1
            pos += 1
        elif tag is LineTag.DELETE:
            while not match(text, lines[pos]):
                pos += 1
            del lines[pos]
        else:
            lines.insert(pos, text)
            pos += 1
    hunk.matched = True
    return hunk.new_length - hunk.old_length


def candidate_shifts(shift: int, fuzz: int) -> list[int]:
    """Offsets tried for a hunk: shift itself, then nearest first, negative first.

    Example:
        >>> candidate_shifts(0, 2)
        [0, -1, -2, 1, 2]
    """
    below = [shift - i for i in range(1, fuzz + 1)]
    above = [shift + i for i in range(1, fuzz + 1)]
    return [shift, *below, *above]


def find_shift(
    hunk: Hunk, lines: list[str], shift: int, fuzz: int, match: LineMatcher
) -> int | None:
    """Return the first shift in the fuzz window at which hunk applies."""
    for candidate in candidate_shifts(shift, fuzz):
        if try_hunk(hunk, lines, candidate, match):
            return candidate
    return None


def apply_diff(
    diff: Diff,
    lines: list[str],
    fuzz: int = 0,
    ignore_whitespace: bool = False,
) -> ApplyResult:
    """Apply every hunk of a diff to lines, in place.

    Hunks that cannot be placed within the fuzz window are collected as
    rejects; they leave the target and the running shift untouched.

    Args:
        diff: Diff to apply
        lines: Target lines with terminators (mutated)
        fuzz: Maximum offset tried on each side of a hunk's expected position
        ignore_whitespace: Compare lines with all whitespace removed

    Returns:
        ApplyResult referring to the mutated lines.

    Example:
        >>> from diffmend.patch.types import Diff, Hunk
        >>> hunk = Hunk(1, 2, 1, 2, [(" ", "a\\n"), ("-", "b\\n"), ("+", "B\\n")])
        >>> result = apply_diff(Diff("f", "f", hunks=[hunk]), ["a\\n", "b\\n"])
        >>> result.new_content
        'a\\nB\\n'
    """
    if fuzz < 0:
        raise ValueError(f"fuzz must be non-negative, got {fuzz}")

    match = line_matcher(ignore_whitespace)
    result = ApplyResult(lines=lines)
    shift = 0

    for i, hunk in enumerate(diff.hunks):
        hunk.matched = False
        found = find_shift(hunk, lines, shift, fuzz, match)
        if found is None:
            reason = f"no match within fuzz {fuzz} at line {hunk.old_index + shift + 1}"
            logger.debug("Hunk %d of %s rejected: %s", i + 1, diff.path, reason)
            result.failed_hunks.append((i, reason))
            result.rejects.append(hunk)
            continue

        if found != shift:
            offset = found - shift
            result.warnings.append(f"Hunk {i + 1} applied at offset {offset:+d}")
            logger.debug("Hunk %d of %s applied at offset %+d", i + 1, diff.path, offset)
        shift = found + do_hunk(hunk, lines, found, match)
        result.applied_hunks.append(i)

    return result


def check_diff(
    diff: Diff,
    lines: list[str],
    fuzz: int = 0,
    ignore_whitespace: bool = False,
) -> ApplyResult:
    """Dry run of apply_diff() on a copy; lines and hunk states are untouched."""
    states = [hunk.matched for hunk in diff.hunks]
    try:
        return apply_diff(diff, list(lines), fuzz=fuzz, ignore_whitespace=ignore_whitespace)
    finally:
        for hunk, state in zip(diff.hunks, states):
            hunk.matched = state
