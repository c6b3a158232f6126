"""Tests for diffmend.patch.normalize module."""

import pytest

from diffmend.core.errors import MalformedPatchError
from diffmend.patch.normalize import unify_lines


class TestUnifyLines:
    """Tests for merging context-diff blocks into unified lines."""

    def test_delete_and_insert_runs(self) -> None:
        old = ["  a\n", "- b\n", "- c\n", "  d\n"]
        new = ["  a\n", "+ X\n", "  d\n"]

        assert unify_lines(old, new) == [
            (" ", "a\n"),
            ("-", "b\n"),
            ("-", "c\n"),
            ("+", "X\n"),
            (" ", "d\n"),
        ]

    def test_changed_runs_of_different_length(self) -> None:
        """Parallel ! runs become all deletions followed by all insertions."""
        old = ["! a\n", "! b\n"]
        new = ["! A\n"]

        assert unify_lines(old, new) == [("-", "a\n"), ("-", "b\n"), ("+", "A\n")]

    def test_one_side_omitted(self) -> None:
        """A block the producer left out contributes nothing."""
        assert unify_lines([], ["  a\n", "+ b\n"]) == [(" ", "a\n"), ("+", "b\n")]
        assert unify_lines(["  a\n", "- b\n"], []) == [(" ", "a\n"), ("-", "b\n")]

    def test_empty(self) -> None:
        assert unify_lines([], []) == []

    def test_context_mismatch(self) -> None:
        with pytest.raises(MalformedPatchError, match="Non-matching context"):
            unify_lines(["  a\n"], ["  b\n"])

    def test_change_against_context(self) -> None:
        """A ! line facing a context line cannot be paired."""
        with pytest.raises(MalformedPatchError, match="Unexpected marker"):
            unify_lines(["! a\n"], ["  a\n"])

    def test_change_against_exhausted_side(self) -> None:
        with pytest.raises(MalformedPatchError):
            unify_lines(["! a\n"], [])
