"""Line-oriented reading that keeps every line's original terminator.

Patch application works on lists of lines whose end-of-line bytes are part of
the line (``"foo\\r\\n"``, ``"bar\\n"``, or ``"baz"`` for a final unterminated
line), so joining the lines back reproduces the input exactly.
"""

from __future__ import annotations

import io
from collections.abc import Iterable, Iterator
from typing import TextIO

_CHUNK_SIZE = 8192


def content_length(line: str) -> int:
    """Return the length of a line excluding its terminator.

    Example:
        >>> content_length("abc\\r\\n")
        3
        >>> content_length("\\n")
        0
    """
    length = len(line)
    if length and line[length - 1] == "\n":
        length -= 1
    if length and line[length - 1] == "\r":
        length -= 1
    return length


def line_terminator(line: str) -> str:
    """Return the terminator of a line ('' for an unterminated line)."""
    return line[content_length(line):]


def strip_terminator(line: str) -> str:
    """Return the line without its terminator."""
    return line[: content_length(line)]


def join_lines(lines: Iterable[str]) -> str:
    """Concatenate lines produced by a LineReader back into text."""
    return "".join(lines)


class LineReader:
    """Reads a text stream into lines, preserving line terminators.

    Recognizes ``\\n``, ``\\r\\n`` and a lone ``\\r`` as terminators. The
    stream is read in chunks; a ``\\r`` at the end of a chunk is held back
    until the next chunk shows whether a ``\\n`` follows.

    The reader is single-pass: once lines have been consumed they are not
    produced again. End of stream is signalled by ``read_line()`` returning
    None; only errors of the underlying stream propagate.

    Example:
        >>> reader = LineReader.from_text("a\\r\\nb\\nc")
        >>> reader.read_lines()
        ['a\\r\\n', 'b\\n', 'c']
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._buffer = ""
        self._pos = 0
        self._eof = False

    @classmethod
    def from_text(cls, text: str) -> LineReader:
        """Create a reader over an in-memory string (no newline translation)."""
        return cls(io.StringIO(text, newline=""))

    def _fill(self) -> bool:
        """Read the next chunk into the buffer. Returns False at end of stream."""
        if self._eof:
            return False
        chunk = self._stream.read(_CHUNK_SIZE)
        if not chunk:
            self._eof = True
            return False
        self._buffer = self._buffer[self._pos:] + chunk
        self._pos = 0
        return True

    def read_line(self) -> str | None:
        """Return the next line including its terminator, or None at end of stream."""
        while True:
            buf = self._buffer
            start = self._pos
            nl = buf.find("\n", start)
            cr = buf.find("\r", start)

            if cr != -1 and (nl == -1 or cr < nl):
                # A lone '\r' ends the line unless a '\n' follows
                if cr + 1 < len(buf):
                    end = cr + 2 if buf[cr + 1] == "\n" else cr + 1
                    self._pos = end
                    return buf[start:end]
                if not self._fill():
                    self._pos = len(buf)
                    return buf[start:]
                continue

            if nl != -1:
                self._pos = nl + 1
                return buf[start:nl + 1]

            if not self._fill():
                if start >= len(buf):
                    return None
                self._pos = len(buf)
                return buf[start:]

    def read_lines(self) -> list[str]:
        """Read all remaining lines."""
        return list(self)

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.read_line()
            if line is None:
                return
            yield line

    def close(self) -> None:
        """Close the underlying stream."""
        self._stream.close()

    def __enter__(self) -> LineReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class LineCursor:
    """Peekable cursor over a LineReader with single-line push back.

    Format parsers read one line past their own block to find its end; that
    line is pushed back so the next reader sees it first.
    """

    def __init__(self, reader: LineReader) -> None:
        self._reader = reader
        self._pending: list[str] = []
        self.line_number = 0

    def next(self) -> str | None:
        """Consume and return the next line, or None at end of input."""
        if self._pending:
            line = self._pending.pop()
        else:
            line = self._reader.read_line()
        if line is not None:
            self.line_number += 1
        return line

    def peek(self) -> str | None:
        """Return the next line without consuming it."""
        if not self._pending:
            line = self._reader.read_line()
            if line is None:
                return None
            self._pending.append(line)
        return self._pending[-1]

    def push_back(self, line: str) -> None:
        """Return a consumed line to the cursor."""
        self._pending.append(line)
        self.line_number -= 1
