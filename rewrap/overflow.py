"""Detection of lines wider than the column limit."""

from __future__ import annotations

from typing import Iterable, Iterator

from .structures import Segment, SegmentKind, SourceText, strip_ending


def line_width(line: str) -> int:
    """Width of a line as written; every character is one column."""

    return len(strip_ending(line)[0])


def find_overflows(source: SourceText, segment: Segment, column_limit: int) -> Iterator[int]:
    """Lazily yield the indices of code lines wider than ``column_limit``."""

    if segment.kind is not SegmentKind.CODE:
        return
    for index in range(segment.start, segment.end):
        if line_width(source.lines[index]) > column_limit:
            yield index


def overflow_excess(lines: Iterable[str], column_limit: int) -> int:
    """Total number of columns by which ``lines`` exceed the limit."""

    return sum(max(0, line_width(line) - column_limit) for line in lines)
