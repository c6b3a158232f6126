"""Conversion of context-diff hunks into unified tagged lines.

A context diff prints the old and new side of a hunk as two separate blocks.
Each block line carries a two-character marker (``"- "``, ``"+ "``, ``"! "``
or ``"  "``). The applier only understands the unified representation, so
the two blocks are merged into one list of tagged lines here.
"""

from __future__ import annotations

from diffmend.core.errors import MalformedPatchError
from diffmend.patch.types import HunkLine, LineTag


def _marker(lines: list[str], index: int) -> str:
    """Marker of the line at index, or '' past the end."""
    if index < len(lines):
        return lines[index][0]
    return ""


def _take_run(lines: list[str], index: int, marker: str) -> tuple[list[str], int]:
    """Collect the texts of consecutive lines with the given marker."""
    run: list[str] = []
    while index < len(lines) and lines[index][0] == marker:
        run.append(lines[index][2:])
        index += 1
    return run, index


def unify_lines(old_lines: list[str], new_lines: list[str]) -> list[HunkLine]:
    """Merge the old and new blocks of a context-diff hunk.

    Args:
        old_lines: Old-side block lines, markers included
        new_lines: New-side block lines, markers included

    Returns:
        Tagged lines describing the same change in unified form.

    Raises:
        MalformedPatchError: If parallel context lines differ or the markers
            form a combination no context diff can contain.
    """
    result: list[HunkLine] = []
    oi = ni = 0

    while oi < len(old_lines) or ni < len(new_lines):
        oc = _marker(old_lines, oi)
        nc = _marker(new_lines, ni)

        if oc == "-":
            run, oi = _take_run(old_lines, oi, "-")
            result.extend((LineTag.DELETE, text) for text in run)
            continue

        if nc == "+":
            run, ni = _take_run(new_lines, ni, "+")
            result.extend((LineTag.INSERT, text) for text in run)
            continue

        if oc == "!" and nc == "!":
            old_run, oi = _take_run(old_lines, oi, "!")
            new_run, ni = _take_run(new_lines, ni, "!")
            result.extend((LineTag.DELETE, text) for text in old_run)
            result.extend((LineTag.INSERT, text) for text in new_run)
            continue

        if oc == " " and nc == " ":
            while _marker(old_lines, oi) == " " and _marker(new_lines, ni) == " ":
                if old_lines[oi] != new_lines[ni]:
                    raise MalformedPatchError(
                        "Non-matching context lines in context diff hunk",
                        old_lines[oi],
                    )
                result.append((LineTag.CONTEXT, old_lines[oi][2:]))
                oi += 1
                ni += 1
            continue

        # One side may be omitted entirely when it holds no changes
        if oc == " " and nc == "":
            run, oi = _take_run(old_lines, oi, " ")
            result.extend((LineTag.CONTEXT, text) for text in run)
            continue

        if nc == " " and oc == "":
            run, ni = _take_run(new_lines, ni, " ")
            result.extend((LineTag.CONTEXT, text) for text in run)
            continue

        raise MalformedPatchError(
            f"Unexpected marker combination <{oc}> <{nc}> in context diff hunk"
        )

    return result
