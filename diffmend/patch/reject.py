"""Reject reports for hunks that could not be applied."""

from __future__ import annotations

from collections.abc import Sequence

from diffmend.patch.types import Hunk

REJECT_SUFFIX = ".rej"


def format_rejects(hunks: Sequence[Hunk]) -> str | None:
    """Render rejected hunks as a reject report.

    Each hunk becomes its range description followed by its lines in unified
    form; hunks are separated by a blank line.

    Returns:
        The report text, or None if there are no hunks.

    Example:
        >>> hunk = Hunk(3, 1, 3, 1, [("-", "old\\n"), ("+", "new\\n")])
        >>> print(format_rejects([hunk]), end="")
        @@ -3,1 +3,1 @@
        -old
        +new
    """
    if not hunks:
        return None
    blocks = [f"{hunk.rejected_description()}\n{hunk.content()}" for hunk in hunks]
    return "\n".join(blocks)


def reject_path(path: str, suffix: str = REJECT_SUFFIX) -> str:
    """Return the reject report path for a target path.

    Example:
        >>> reject_path("src/main.c")
        'src/main.c.rej'
    """
    return path + suffix
