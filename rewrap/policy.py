"""Diagnostic policy implementation."""

from __future__ import annotations

import sys
from typing import List, Optional

from .errors import Diagnostic, DiagnosticKind


class DiagnosticPolicy:
    """Collects the local, skip-and-preserve outcomes of a single pass."""

    def __init__(self, *, verbose: bool = False) -> None:
        self.verbose = verbose
        self.records: List[Diagnostic] = []

    def record(
        self,
        kind: DiagnosticKind,
        line: int,
        message: str,
        details: Optional[str] = None,
    ) -> Diagnostic:
        """Store a diagnostic and echo it when running verbosely."""

        diagnostic = Diagnostic(kind=kind, line=line, message=message, details=details)
        self.records.append(diagnostic)
        if self.verbose:
            print(f"[rewrap] {diagnostic}", file=sys.stderr)
        return diagnostic
