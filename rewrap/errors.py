"""Error definitions and diagnostic records for the rewrap engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class DiagnosticKind(Enum):
    """Categorises the per-candidate outcomes that never abort a pass."""

    UNTERMINATED_REGION = auto()
    UNEXTRACTABLE_UNIT = auto()
    SNIPPET_SYNTAX = auto()
    UNWRAP_FAILED = auto()
    CONTENT_CHANGED = auto()
    NO_IMPROVEMENT = auto()


class RewrapError(Exception):
    """Base exception for all custom errors."""


class FormatterError(RewrapError):
    """Raised when the external formatter fails for reasons other than syntax."""


class FormatterSyntaxError(FormatterError):
    """Raised by a formatter when the given text cannot be parsed standalone."""


class DocumentFormatError(FormatterError):
    """Raised when the formatter rejects a whole document."""


class FormatterConfigurationError(RewrapError):
    """Raised when the formatter or configuration is unusable."""


class OverwriteRefusedError(RewrapError):
    """Raised when attempting to overwrite an output without consent."""


@dataclass
class Diagnostic:
    """Stores context for a skipped candidate or region."""

    kind: DiagnosticKind
    line: int
    message: str
    details: Optional[str] = None

    def __str__(self) -> str:
        text = f"line {self.line + 1}: {self.message}"
        if self.details:
            text += f" ({self.details})"
        return text
