"""diffmend - parse unified and context diffs and apply them with fuzz."""

__version__ = "0.1.0"

from diffmend.patch import (  # noqa: E402
    Diff,
    Hunk,
    LineTag,
    Patcher,
    PatchOptions,
    PatchReport,
    apply_diff,
    parse_patch,
)

__all__ = [
    "__version__",
    "Diff",
    "Hunk",
    "LineTag",
    "PatchOptions",
    "Patcher",
    "PatchReport",
    "apply_diff",
    "parse_patch",
]
