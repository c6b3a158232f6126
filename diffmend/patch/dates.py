"""Timestamp parsing for patch file headers.

Each parser is a pure function taking the header field and returning a
datetime or None. They are tried in order and the first match wins; an
unparsable timestamp is never an error.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime

TimestampParser = Callable[[str], datetime | None]

# GNU diff -u prints nanoseconds; strptime's %f accepts at most six digits
_FRACTION_RE = re.compile(r"^(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\.(\d+)(.*)$")


def _strptime(text: str, fmt: str) -> datetime | None:
    try:
        return datetime.strptime(text, fmt)
    except ValueError:
        return None


def parse_iso_timestamp(text: str) -> datetime | None:
    """Parse ``2002-02-21 23:30:39.942229878 -0800`` (GNU diff -u / git)."""
    match = _FRACTION_RE.match(text)
    if match:
        base, fraction, rest = match.groups()
        text = f"{base}.{fraction[:6]}{rest}"
        return _strptime(text, "%Y-%m-%d %H:%M:%S.%f %z") or _strptime(
            text, "%Y-%m-%d %H:%M:%S.%f"
        )
    return _strptime(text, "%Y-%m-%d %H:%M:%S %z") or _strptime(
        text, "%Y-%m-%d %H:%M:%S"
    )


def parse_ctime_timestamp(text: str) -> datetime | None:
    """Parse ``Mon Mar  4 12:34:56 2002`` (diff -c, ctime style)."""
    return _strptime(" ".join(text.split()), "%a %b %d %H:%M:%S %Y")


def parse_cvs_timestamp(text: str) -> datetime | None:
    """Parse ``2002/03/04 12:34:56`` (CVS/RCS style)."""
    return _strptime(text, "%Y/%m/%d %H:%M:%S")


TIMESTAMP_PARSERS: tuple[TimestampParser, ...] = (
    parse_iso_timestamp,
    parse_ctime_timestamp,
    parse_cvs_timestamp,
)


def parse_timestamp(
    text: str, parsers: tuple[TimestampParser, ...] = TIMESTAMP_PARSERS
) -> datetime | None:
    """Return the first successful parse of text, or None."""
    text = text.strip()
    if not text:
        return None
    for parser in parsers:
        result = parser(text)
        if result is not None:
            return result
    return None
