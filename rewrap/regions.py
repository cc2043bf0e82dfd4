"""Partitioning of source lines into code and raw-literal segments."""

from __future__ import annotations

from typing import Iterable, List, Tuple

from .errors import DiagnosticKind
from .lexer import Token, TokenKind
from .policy import DiagnosticPolicy
from .structures import Segment, SegmentKind, SourceText


def _literal_spans(
    source: SourceText,
    tokens: Iterable[Token],
    policy: DiagnosticPolicy,
) -> List[Tuple[int, int]]:
    """Collect terminated text block spans, stopping at the first unterminated one."""

    spans: List[Tuple[int, int]] = []
    for token in tokens:
        if token.kind is not TokenKind.TEXT_BLOCK:
            continue
        if not token.terminated:
            policy.record(
                DiagnosticKind.UNTERMINATED_REGION,
                source.line_of(token.start),
                "Text block has no closing delimiter; treating the rest as code.",
            )
            break
        spans.append((token.start, token.end))
    return spans


def classify(
    source: SourceText,
    tokens: Iterable[Token],
    policy: DiagnosticPolicy,
) -> List[Segment]:
    """Return ordered segments that cover every line of the source exactly once."""

    segments: List[Segment] = []
    cursor = 0
    pending: List[Tuple[int, int]] = []
    raw_start = raw_end = 0

    def flush_raw() -> None:
        segments.append(
            Segment(
                kind=SegmentKind.RAW_LITERAL,
                start=raw_start,
                end=raw_end,
                literals=tuple(pending),
            )
        )

    for start, end in _literal_spans(source, tokens, policy):
        open_line = source.line_of(start)
        close_line = source.line_of(end - 1)
        if pending and open_line < raw_end:
            # Opens on the line where the previous block closed.
            pending.append((start, end))
            raw_end = close_line + 1
            continue
        if pending:
            flush_raw()
            cursor = raw_end
            pending = []
        if open_line > cursor:
            segments.append(Segment(kind=SegmentKind.CODE, start=cursor, end=open_line))
        pending = [(start, end)]
        raw_start, raw_end = open_line, close_line + 1

    if pending:
        flush_raw()
        cursor = raw_end
    if cursor < len(source):
        segments.append(Segment(kind=SegmentKind.CODE, start=cursor, end=len(source)))
    return segments
