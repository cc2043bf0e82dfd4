"""High-level orchestration of the rewrapping pass."""

from __future__ import annotations

from typing import List, Tuple

from .errors import DiagnosticKind, DocumentFormatError, FormatterSyntaxError
from .formatters import Formatter
from .lexer import content_signature, scan
from .normalizer import measure_region, normalize_segment
from .overflow import find_overflows, overflow_excess
from .policy import DiagnosticPolicy
from .regions import classify
from .snippets import SnippetExtractor, candidate_stubs, measure_lines
from .structures import (
    RewriteResult,
    Segment,
    SegmentKind,
    Snippet,
    SourceText,
    WrapSummary,
)

DEFAULT_COLUMN_LIMIT = 100
DEFAULT_INDENT_WIDTH = 2


class Rewrapper:
    """Coordinates classification, normalization, extraction and splicing."""

    def __init__(
        self,
        column_limit: int,
        formatter: Formatter,
        *,
        indent_width: int = DEFAULT_INDENT_WIDTH,
        verbose: bool = False,
    ) -> None:
        self.column_limit = column_limit
        self.formatter = formatter
        self.indent_width = max(1, indent_width)
        self.verbose = verbose

    def wrap(self, text: str) -> str:
        return self.run(text)[0]

    def run(self, text: str) -> Tuple[str, WrapSummary]:
        policy = DiagnosticPolicy(verbose=self.verbose)
        source = SourceText.parse(text)
        tokens = list(scan(text))
        segments = classify(source, tokens, policy)
        extractor = SnippetExtractor(source, measure_lines(source, tokens))
        summary = WrapSummary(total_lines=len(source), segments=len(segments))

        output: List[str] = []
        for segment in segments:
            if segment.kind is SegmentKind.RAW_LITERAL:
                output.extend(self._normalize(source, segment, summary))
            else:
                output.extend(self._rewrap(source, segment, extractor, policy, summary))

        result = "".join(output)
        summary.diagnostics = list(policy.records)
        if result == text:
            return text, summary
        summary.changed = True
        return result, summary

    def _normalize(
        self,
        source: SourceText,
        segment: Segment,
        summary: WrapSummary,
    ) -> List[str]:
        regions = [measure_region(source, start, end) for start, end in segment.literals]
        lines = normalize_segment(source, segment, regions)
        summary.raw_literal_regions += len(regions)
        if lines != list(source.lines[segment.start:segment.end]):
            summary.normalized_regions += len(regions)
        return lines

    def _rewrap(
        self,
        source: SourceText,
        segment: Segment,
        extractor: SnippetExtractor,
        policy: DiagnosticPolicy,
        summary: WrapSummary,
    ) -> List[str]:
        output: List[str] = []
        cursor = segment.start
        for index in find_overflows(source, segment, self.column_limit):
            if index < cursor:
                continue
            summary.candidates += 1
            snippet = extractor.extract(segment, index)
            if snippet is None or snippet.start < cursor:
                policy.record(
                    DiagnosticKind.UNEXTRACTABLE_UNIT,
                    index,
                    "No self-contained unit encloses this line; keeping it as is.",
                )
                continue

            result = self._rewrite(source, snippet, policy)
            output.extend(source.lines[cursor:snippet.start])
            if result.succeeded:
                output.extend(result.lines or [])
                summary.rewritten_units += 1
            else:
                output.extend(source.lines[snippet.start:snippet.end])
            cursor = snippet.end

        output.extend(source.lines[cursor:segment.end])
        return output

    def _rewrite(
        self,
        source: SourceText,
        snippet: Snippet,
        policy: DiagnosticPolicy,
    ) -> RewriteResult:
        """Format one unit and decide whether the result replaces it.

        The result must differ from the unit, keep its content signature and
        strictly lower the total columns over the limit. A line that can never
        fit (one long identifier, say) does not block the rewrite: the unit is
        accepted when its overflow shrinks, not only when every line fits.
        """

        bodies = None
        kind = DiagnosticKind.SNIPPET_SYNTAX
        errors: List[str] = []
        for stub in candidate_stubs(snippet, self.indent_width):
            try:
                formatted = self.formatter.format(stub.wrap(snippet))
            except FormatterSyntaxError as exc:
                errors.append(f"{stub.kind.name.lower()}: {exc}")
                continue
            bodies = stub.unwrap(formatted, snippet.indent)
            if bodies is not None:
                break
            kind = DiagnosticKind.UNWRAP_FAILED
            errors.append(f"{stub.kind.name.lower()}: wrapper not preserved")

        if bodies is None:
            policy.record(
                kind,
                snippet.line,
                "Formatter could not rewrap this unit.",
                "; ".join(errors),
            )
            return RewriteResult.failed(kind.name.lower())

        original = list(source.lines[snippet.start:snippet.end])
        lines = self._attach_endings(source, snippet, bodies)
        if lines == original:
            policy.record(DiagnosticKind.NO_IMPROVEMENT, snippet.line, "Formatter left the unit unchanged.")
            return RewriteResult.failed("unchanged")
        if content_signature("".join(lines)) != content_signature(snippet.text):
            policy.record(
                DiagnosticKind.CONTENT_CHANGED,
                snippet.line,
                "Formatter changed more than whitespace; keeping the original.",
            )
            return RewriteResult.failed("content")
        if overflow_excess(lines, self.column_limit) >= overflow_excess(original, self.column_limit):
            policy.record(
                DiagnosticKind.NO_IMPROVEMENT,
                snippet.line,
                "Rewrapped unit does not shrink the overflowing lines.",
            )
            return RewriteResult.failed("no improvement")
        return RewriteResult(lines=lines)

    @staticmethod
    def _attach_endings(source: SourceText, snippet: Snippet, bodies: List[str]) -> List[str]:
        """Give rewritten lines the unit's own line terminators."""

        inner = source.ending(snippet.start) or "\n"
        last = source.ending(snippet.end - 1)
        lines = [body + inner for body in bodies[:-1]]
        lines.append(bodies[-1] + last)
        return lines


def wrap(column_limit: int, source: str, formatter: Formatter) -> str:
    """Rewrap the overflowing lines of ``source`` using ``formatter``."""

    return Rewrapper(column_limit, formatter).wrap(source)


def reformat_source(
    text: str,
    formatter: Formatter,
    *,
    column_limit: int = DEFAULT_COLUMN_LIMIT,
    indent_width: int = DEFAULT_INDENT_WIDTH,
    primary: bool = True,
    verbose: bool = False,
) -> Tuple[str, WrapSummary]:
    """Run the formatter over the whole document, then the rewrapping pass."""

    if primary:
        try:
            text = formatter.format(text)
        except FormatterSyntaxError as exc:
            raise DocumentFormatError(f"Formatter rejected the document: {exc}") from exc
    runner = Rewrapper(column_limit, formatter, indent_width=indent_width, verbose=verbose)
    return runner.run(text)
