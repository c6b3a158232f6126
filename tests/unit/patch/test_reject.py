"""Tests for diffmend.patch.reject module."""

from diffmend.patch.reject import format_rejects, reject_path
from diffmend.patch.types import Hunk


class TestFormatRejects:
    """Tests for reject report rendering."""

    def test_no_hunks(self) -> None:
        assert format_rejects([]) is None

    def test_single_hunk(self) -> None:
        hunk = Hunk(3, 2, 3, 2, lines=[(" ", "a\n"), ("-", "b\n"), ("+", "B\n")])

        assert format_rejects([hunk]) == "@@ -3,2 +3,2 @@\n a\n-b\n+B\n"

    def test_blocks_separated_by_blank_line(self) -> None:
        first = Hunk(1, 1, 1, 1, lines=[("-", "x\n"), ("+", "y\n")])
        second = Hunk(9, 1, 9, 1, lines=[("-", "p"), ("+", "q")])

        report = format_rejects([first, second])

        assert report == (
            "@@ -1,1 +1,1 @@\n-x\n+y\n"
            "\n"
            "@@ -9,1 +9,1 @@\n"
            "-p\n\\ No newline at end of file\n"
            "+q\n\\ No newline at end of file\n"
        )


class TestRejectPath:
    def test_default_suffix(self) -> None:
        assert reject_path("src/main.c") == "src/main.c.rej"

    def test_custom_suffix(self) -> None:
        assert reject_path("f.txt", ".rejected") == "f.txt.rejected"
