"""Whitespace normalization restricted to raw-literal (text block) regions."""

from __future__ import annotations

from typing import Dict, List, Optional

from .lexer import TEXT_BLOCK_DELIMITER
from .structures import RawLiteralRegion, Segment, SourceText

INDENT_CHARS = " \t"


def _leading_whitespace(text: str) -> str:
    return text[: len(text) - len(text.lstrip(INDENT_CHARS))]


def indent_width(prefix: str, base: int) -> int:
    """Measure an indentation prefix; a tab advances to the next multiple of ``base``."""

    width = 0
    for char in prefix:
        if char == "\t" and base > 0:
            width += base - width % base
        else:
            width += 1
    return width


def _ends_with_escape(text: str) -> bool:
    backslashes = len(text) - len(text.rstrip("\\"))
    return backslashes % 2 == 1


def trim_trailing(text: str) -> str:
    """Drop trailing spaces and tabs, keeping control characters and escapes."""

    stripped = text.rstrip(INDENT_CHARS)
    if stripped != text and _ends_with_escape(stripped):
        # The first whitespace character belongs to an escape sequence.
        return text[: len(stripped) + 1]
    return stripped


def _reindent(text: str, common: int, base: int) -> str:
    """Rewrite the shared indentation prefix of ``text`` as plain spaces."""

    if common <= 0:
        return text
    width = 0
    index = 0
    while index < len(text) and width < common and text[index] in INDENT_CHARS:
        width = indent_width(text[: index + 1], base)
        index += 1
    if width != common:
        # The shared prefix ends inside a tab, or the line is shallower.
        return text
    return " " * common + text[index:]


def measure_region(source: SourceText, start: int, end: int) -> RawLiteralRegion:
    """Compute the line layout and common indentation of one text block."""

    open_line = source.line_of(start)
    close_line = source.line_of(end - 1)
    close_column = source.column_of(end - len(TEXT_BLOCK_DELIMITER))
    region = RawLiteralRegion(
        open_line=open_line,
        close_line=close_line,
        close_column=close_column,
        base_indent=indent_width(_leading_whitespace(source.body(open_line)), 0),
    )
    if close_line == open_line:
        return region

    widths: List[int] = []
    for index in region.content_lines:
        body = source.body(index)
        if body.strip(INDENT_CHARS):
            widths.append(indent_width(_leading_whitespace(body), region.base_indent))
    closing_prefix = source.body(close_line)[:close_column]
    widths.append(indent_width(_leading_whitespace(closing_prefix), region.base_indent))
    region.common_indent = min(widths)
    return region


def _normalize_region(source: SourceText, region: RawLiteralRegion) -> Dict[int, str]:
    replacements: Dict[int, str] = {}
    if region.close_line == region.open_line:
        return replacements
    common, base = region.common_indent, region.base_indent
    for index in region.content_lines:
        body = trim_trailing(source.body(index))
        if body:
            body = _reindent(body, common, base)
        replacements[index] = body + source.ending(index)

    closing = source.body(region.close_line)
    prefix = _reindent(closing[: region.close_column], common, base)
    if prefix.strip(INDENT_CHARS):
        # Content sharing a line with the delimiter is trimmed like any other line.
        prefix = trim_trailing(prefix)
    rest = closing[region.close_column:]
    replacements[region.close_line] = prefix + rest + source.ending(region.close_line)
    return replacements


def normalize_segment(
    source: SourceText,
    segment: Segment,
    regions: Optional[List[RawLiteralRegion]] = None,
) -> List[str]:
    """Return the normalized lines of a raw-literal segment."""

    measured = regions if regions is not None else [
        measure_region(source, start, end) for start, end in segment.literals
    ]
    replacements: Dict[int, str] = {}
    for region in measured:
        replacements.update(_normalize_region(source, region))
    return [
        replacements.get(index, source.lines[index])
        for index in range(segment.start, segment.end)
    ]
