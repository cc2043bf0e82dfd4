"""Core data structures for the rewrap engine."""

from __future__ import annotations

import bisect
import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:
    from .errors import Diagnostic

LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> List[str]:
    """Split text into lines, keeping each line's own terminator."""

    lines: List[str] = []
    index = 0
    for match in LINE_BREAK.finditer(text):
        lines.append(text[index:match.end()])
        index = match.end()
    if index < len(text):
        lines.append(text[index:])
    return lines


def strip_ending(line: str) -> Tuple[str, str]:
    """Return the body of a line and its terminator."""

    if line.endswith("\r\n"):
        return line[:-2], "\r\n"
    if line.endswith(("\n", "\r")):
        return line[:-1], line[-1]
    return line, ""


@dataclass(frozen=True)
class SourceText:
    """The immutable input of a single pass."""

    text: str
    lines: Tuple[str, ...]
    line_starts: Tuple[int, ...]

    @classmethod
    def parse(cls, text: str) -> "SourceText":
        lines = split_lines(text)
        starts: List[int] = []
        offset = 0
        for line in lines:
            starts.append(offset)
            offset += len(line)
        return cls(text=text, lines=tuple(lines), line_starts=tuple(starts))

    def __len__(self) -> int:
        return len(self.lines)

    def line_of(self, offset: int) -> int:
        return bisect.bisect_right(self.line_starts, offset) - 1

    def column_of(self, offset: int) -> int:
        return offset - self.line_starts[self.line_of(offset)]

    def body(self, index: int) -> str:
        return strip_ending(self.lines[index])[0]

    def ending(self, index: int) -> str:
        return strip_ending(self.lines[index])[1]


class SegmentKind(Enum):
    """Tags the two kinds of line spans."""

    CODE = auto()
    RAW_LITERAL = auto()


@dataclass(frozen=True)
class Segment:
    """A contiguous, half-open span of lines tagged by kind."""

    kind: SegmentKind
    start: int
    end: int
    literals: Tuple[Tuple[int, int], ...] = ()

    def __len__(self) -> int:
        return self.end - self.start


@dataclass
class RawLiteralRegion:
    """One text block within a raw-literal segment."""

    open_line: int
    close_line: int
    close_column: int
    base_indent: int
    common_indent: int = 0

    @property
    def content_lines(self) -> range:
        return range(self.open_line + 1, self.close_line)


@dataclass(frozen=True)
class LineShape:
    """Bracket nesting summary of one line."""

    start_depth: int
    min_depth: int
    end_depth: int
    last_char: Optional[str]
    balanced: bool = True

    @property
    def has_code(self) -> bool:
        return self.last_char is not None


@dataclass(frozen=True)
class Snippet:
    """The smallest self-contained unit around an overflowing line."""

    line: int
    start: int
    end: int
    text: str
    indent: str
    indent_width: int


@dataclass
class RewriteResult:
    """Replacement lines for a snippet, or the reason it was kept."""

    lines: Optional[List[str]] = None
    reason: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.lines is not None

    @classmethod
    def failed(cls, reason: str) -> "RewriteResult":
        return cls(lines=None, reason=reason)


@dataclass
class WrapSummary:
    """Report returned after a single pass."""

    total_lines: int = 0
    segments: int = 0
    raw_literal_regions: int = 0
    normalized_regions: int = 0
    candidates: int = 0
    rewritten_units: int = 0
    changed: bool = False
    diagnostics: List["Diagnostic"] = field(default_factory=list)
