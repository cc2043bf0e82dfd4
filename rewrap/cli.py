"""Command line interface for rewrap."""

from __future__ import annotations

import argparse
import pathlib
import sys
from typing import Iterable, Optional

from .errors import (
    DocumentFormatError,
    FormatterConfigurationError,
    FormatterError,
    OverwriteRefusedError,
    RewrapError,
)
from .formatters import Formatter, build_formatter
from .rewrapper import reformat_source
from .structures import WrapSummary

STDIN_MARKER = "-"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rewrap",
        description=(
            "Rewrap over-long lines of formatted Java source without touching text blocks."
        ),
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="Source files to process, or '-' to read standard input.",
    )
    parser.add_argument(
        "-l",
        "--column-limit",
        type=int,
        help="Maximum columns per line (default: 100).",
    )
    parser.add_argument(
        "--indent-width",
        type=int,
        help="Block indentation used by the formatter (default: 2).",
    )
    parser.add_argument(
        "--formatter",
        help="Formatter identifier: 'command' (default) or 'identity'.",
    )
    parser.add_argument(
        "--formatter-command",
        help="Command that formats standard input to standard output.",
    )
    parser.add_argument(
        "--skip-primary",
        action="store_true",
        help="Only run the rewrapping pass; do not format the whole file first.",
    )
    parser.add_argument(
        "-i",
        "--in-place",
        action="store_true",
        help="Write results back to the input files.",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Output file path (single input only). Defaults to standard output.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Report files that would change and exit with status 1.",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Allow overwriting the output file if it already exists.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show skipped candidates and a summary per file.",
    )
    parser.add_argument(
        "--debug-formatter",
        action="store_true",
        help="Log complete formatter requests and responses for troubleshooting.",
    )
    return parser


def validate_output(
    input_path: pathlib.Path | None,
    output_path: pathlib.Path,
    force_overwrite: bool,
) -> None:
    """Validate input/output path combinations and overwrite policy."""

    if input_path is not None and input_path.resolve() == output_path.resolve():
        raise OverwriteRefusedError(
            "The output path matches the input file. Use --in-place to rewrite it."
        )
    if output_path.exists() and not force_overwrite:
        raise OverwriteRefusedError(
            "The output file already exists; rename it or use the overwrite flag."
        )


def execute_rewrap(
    *,
    input_file: str,
    output_file: str | None,
    formatter: Formatter,
    column_limit: int,
    indent_width: int,
    primary: bool,
    in_place: bool,
    check: bool,
    force_overwrite: bool,
    verbose: bool,
) -> tuple[int, WrapSummary | None, str | None]:
    """Process one input and return the exit code, summary, and message."""

    from_stdin = input_file == STDIN_MARKER
    input_path = None if from_stdin else pathlib.Path(input_file).expanduser()
    if input_path is not None and not input_path.is_file():
        return 1, None, f"Input file not found: {input_file}"

    try:
        text = sys.stdin.read() if input_path is None else input_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return 1, None, f"Could not read {input_file}: {exc}"

    try:
        result, summary = reformat_source(
            text,
            formatter,
            column_limit=column_limit,
            indent_width=indent_width,
            primary=primary,
            verbose=verbose,
        )
    except DocumentFormatError as exc:
        return 1, None, f"{input_file}: {exc}"
    except FormatterConfigurationError as exc:
        return 1, None, str(exc)
    except FormatterError as exc:
        return 1, None, f"{input_file}: {exc}"

    changed = result != text
    if check:
        message = f"{input_file} would be rewrapped." if changed else None
        return (1 if changed else 0), summary, message

    try:
        if in_place and input_path is not None:
            if changed:
                input_path.write_text(result, encoding="utf-8")
        elif output_file:
            output_path = pathlib.Path(output_file).expanduser()
            validate_output(input_path, output_path, force_overwrite)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(result, encoding="utf-8")
        else:
            sys.stdout.write(result)
    except OverwriteRefusedError as exc:
        return 1, None, str(exc)
    except OSError as exc:
        return 1, None, f"Could not write output for {input_file}: {exc}"

    return 0, summary, None


def print_summary(name: str, summary: WrapSummary) -> None:
    """Output a short report for one processed input."""

    print(f"\n{name}:", file=sys.stderr)
    print(f"  Lines:            {summary.total_lines}", file=sys.stderr)
    print(
        f"  Segments:         {summary.segments} "
        f"({summary.raw_literal_regions} text blocks, "
        f"{summary.normalized_regions} normalized)",
        file=sys.stderr,
    )
    print(
        f"  Long lines:       {summary.candidates} candidates, "
        f"{summary.rewritten_units} units rewrapped",
        file=sys.stderr,
    )
    if summary.diagnostics:
        print("  Notes:", file=sys.stderr)
        for diagnostic in summary.diagnostics:
            print(f"    - {diagnostic}", file=sys.stderr)


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    if args.column_limit is not None and args.column_limit <= 0:
        parser.error("--column-limit must be a positive integer")
    if args.indent_width is not None and args.indent_width <= 0:
        parser.error("--indent-width must be a positive integer")

    from .configuration import get_settings

    try:
        settings = get_settings()
    except FormatterConfigurationError as exc:
        print(exc, file=sys.stderr)
        return 1

    files = args.files or [STDIN_MARKER]
    if args.output and len(files) > 1:
        parser.error("--output can only be used with a single input")
    if args.in_place and STDIN_MARKER in files:
        parser.error("--in-place cannot be used with standard input")

    verbose = bool(args.verbose or settings.REWRAP_VERBOSE)
    try:
        formatter = build_formatter(
            args.formatter or settings.REWRAP_FORMATTER,
            command=args.formatter_command or settings.REWRAP_FORMATTER_COMMAND,
            timeout=settings.REWRAP_FORMATTER_TIMEOUT,
            debug=bool(args.debug_formatter or settings.REWRAP_DEBUG_FORMATTER),
        )
    except RewrapError as exc:
        print(exc, file=sys.stderr)
        return 1

    exit_code = 0
    for name in files:
        code, summary, message = execute_rewrap(
            input_file=name,
            output_file=args.output,
            formatter=formatter,
            column_limit=(
                args.column_limit
                if args.column_limit is not None
                else settings.REWRAP_COLUMN_LIMIT
            ),
            indent_width=(
                args.indent_width
                if args.indent_width is not None
                else settings.REWRAP_INDENT_WIDTH
            ),
            primary=not args.skip_primary,
            in_place=args.in_place,
            check=args.check,
            force_overwrite=args.force,
            verbose=verbose,
        )
        if message:
            print(message, file=sys.stderr)
        if summary and verbose:
            print_summary(name, summary)
        exit_code = max(exit_code, code)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
