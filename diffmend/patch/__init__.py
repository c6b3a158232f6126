"""Patch parsing and application.

This module provides:
- Parsing of unified and context diffs into Diff/Hunk objects
- Application of hunks with a fuzz window and whitespace-insensitive matching
- Reject reports for hunks that could not be applied
- The Patcher orchestrator that applies a whole patch through host interfaces
"""

from diffmend.patch.applier import ApplyResult, apply_diff, check_diff
from diffmend.patch.headers import IndexPathPolicy
from diffmend.patch.lines import LineCursor, LineReader, content_length, join_lines
from diffmend.patch.parser import parse_patch
from diffmend.patch.patcher import (
    FileOutcome,
    OutcomeStatus,
    PatchOptions,
    Patcher,
    PatchReport,
)
from diffmend.patch.reject import format_rejects, reject_path
from diffmend.patch.types import Diff, DiffKind, Hunk, LineTag

__all__ = [
    # Types
    "Diff",
    "DiffKind",
    "Hunk",
    "LineTag",
    # Lines
    "LineCursor",
    "LineReader",
    "content_length",
    "join_lines",
    # Parser
    "IndexPathPolicy",
    "parse_patch",
    # Applier
    "ApplyResult",
    "apply_diff",
    "check_diff",
    # Rejects
    "format_rejects",
    "reject_path",
    # Orchestrator
    "FileOutcome",
    "OutcomeStatus",
    "PatchOptions",
    "Patcher",
    "PatchReport",
]
