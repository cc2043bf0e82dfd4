"""Extraction of self-contained units around overflowing lines."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, List, Optional, Sequence, Tuple

from .lexer import SIGNIFICANT_KINDS, Token, TokenKind
from .structures import LineShape, Segment, Snippet, SourceText, split_lines, strip_ending

OPENERS = "([{"
CLOSERS = ")]}"
UNIT_ENDINGS = (";", "}")
BOUNDARY_ENDINGS = (";", "{", "}")

STUB_CLASS = "class RewrapStub{index} {{"
STUB_METHOD = "void rewrapStub() {"


def measure_lines(source: SourceText, tokens: Iterable[Token]) -> List[LineShape]:
    """Summarise bracket nesting per line; depth is the size of an opener stack."""

    per_line: List[List[Token]] = [[] for _ in source.lines]
    for token in tokens:
        if token.kind in SIGNIFICANT_KINDS:
            per_line[source.line_of(token.end - 1)].append(token)

    shapes: List[LineShape] = []
    stack: List[str] = []
    for line_tokens in per_line:
        start = low = len(stack)
        last: Optional[str] = None
        balanced = True
        for token in line_tokens:
            value = token.text(source.text)
            if token.kind is TokenKind.CODE and value in OPENERS:
                stack.append(value)
            elif token.kind is TokenKind.CODE and value in CLOSERS:
                opener = OPENERS[CLOSERS.index(value)]
                if opener in stack:
                    # Unclosed openers inside the matching pair are dropped.
                    while stack.pop() != opener:
                        balanced = False
                    low = min(low, len(stack))
                else:
                    balanced = False
            last = value[-1]
        shapes.append(
            LineShape(
                start_depth=start,
                min_depth=low,
                end_depth=len(stack),
                last_char=last,
                balanced=balanced,
            )
        )
    return shapes


class SnippetExtractor:
    """Walks outward from a line to the smallest balanced enclosing unit."""

    def __init__(self, source: SourceText, shapes: Sequence[LineShape]) -> None:
        self.source = source
        self.shapes = shapes

    def _is_boundary(self, index: int) -> bool:
        shape = self.shapes[index]
        return not shape.has_code or shape.last_char in BOUNDARY_ENDINGS

    def _unit_start(self, segment: Segment, index: int) -> int:
        while index > segment.start and not self._is_boundary(index - 1):
            index -= 1
        return index

    def extract(self, segment: Segment, index: int) -> Optional[Snippet]:
        """Return the unit containing ``index``, or ``None`` when none is bounded.

        A unit that closes an enclosing bracket (a lambda body followed by more
        arguments, the last element of an array initializer) widens to the
        statement that opened it. Lines whose closers do not match their
        openers are never part of a unit.
        """

        if not self.shapes[index].has_code:
            return None

        start = self._unit_start(segment, index)
        while True:
            base = self.shapes[start].start_depth
            target = base - 1
            for end in range(start, segment.end):
                shape = self.shapes[end]
                if not shape.balanced:
                    return None
                if shape.min_depth < base:
                    target = shape.min_depth
                    break
                if end >= index and shape.end_depth == base and shape.last_char in UNIT_ENDINGS:
                    return self._snippet(index, start, end + 1)

            # Retry from the nearest earlier line that starts at the outer depth.
            line = start - 1
            while line >= segment.start and self.shapes[line].start_depth > target:
                line -= 1
            if line < segment.start:
                return None
            start = self._unit_start(segment, line)

    def _snippet(self, index: int, start: int, end: int) -> Snippet:
        first = self.source.body(start)
        indent = first[: len(first) - len(first.lstrip(" \t"))]
        return Snippet(
            line=index,
            start=start,
            end=end,
            text="".join(self.source.lines[start:end]),
            indent=indent,
            indent_width=len(indent),
        )


class StubKind(Enum):
    """The synthetic contexts a unit can be parsed in."""

    COMPILATION_UNIT = auto()
    MEMBER = auto()
    STATEMENT = auto()


@dataclass(frozen=True)
class Stub:
    """A synthetic wrapper that lets a unit be formatted standalone."""

    kind: StubKind
    headers: Tuple[str, ...]
    indent_width: int

    @classmethod
    def build(cls, kind: StubKind, depth: int, indent_width: int) -> "Stub":
        if kind is StubKind.COMPILATION_UNIT:
            headers: Tuple[str, ...] = ()
        elif kind is StubKind.MEMBER:
            headers = tuple(STUB_CLASS.format(index=i) for i in range(depth))
        else:
            headers = tuple(STUB_CLASS.format(index=i) for i in range(depth - 1))
            headers += (STUB_METHOD,)
        return cls(kind=kind, headers=headers, indent_width=indent_width)

    def wrap(self, snippet: Snippet) -> str:
        """Nest the unit so it sits at the same indentation it has in the source."""

        lines = [" " * (i * self.indent_width) + header for i, header in enumerate(self.headers)]
        pad = " " * (len(self.headers) * self.indent_width)
        for line in split_lines(snippet.text):
            body = strip_ending(line)[0]
            if body.startswith(snippet.indent):
                body = pad + body[len(snippet.indent):]
            lines.append(body)
        for i in reversed(range(len(self.headers))):
            lines.append(" " * (i * self.indent_width) + "}")
        return "\n".join(lines) + "\n"

    def unwrap(self, formatted: str, indent: str) -> Optional[List[str]]:
        """Strip the wrapper and re-indent the body to ``indent``."""

        lines = [strip_ending(line)[0] for line in split_lines(formatted)]
        while lines and not lines[-1].strip():
            lines.pop()
        count = len(self.headers)
        if len(lines) < 2 * count + 1:
            return None
        for header, line in zip(self.headers, lines[:count]):
            if line.strip() != header:
                return None
        if any(line.strip() != "}" for line in lines[len(lines) - count:]):
            return None

        body = lines[count:len(lines) - count]
        while body and not body[0].strip():
            body.pop(0)
        while body and not body[-1].strip():
            body.pop()
        if not body:
            return None

        first = body[0]
        prefix = first[: len(first) - len(first.lstrip(" "))]
        result: List[str] = []
        for line in body:
            if not line.strip():
                result.append("")
            elif line.startswith(prefix):
                result.append(indent + line[len(prefix):])
            else:
                return None
        return result


def candidate_stubs(snippet: Snippet, indent_width: int) -> List[Stub]:
    """Stubs to try for a unit, narrowest context first."""

    depth = snippet.indent_width // max(1, indent_width)
    if depth == 0:
        kinds = [StubKind.COMPILATION_UNIT]
    elif depth == 1:
        kinds = [StubKind.MEMBER]
    else:
        kinds = [StubKind.STATEMENT, StubKind.MEMBER]
    return [Stub.build(kind, depth, indent_width) for kind in kinds]
