import re
from typing import List

import pytest

from rewrap.errors import FormatterSyntaxError
from rewrap.formatters import Formatter

TOP_LEVEL_STARTS = ("package ", "import ", "class ", "public ", "final ", "abstract ", "interface ")
STATEMENT_STARTS = ("return ", "return;", "if ", "if(", "for ", "while ", "throw ")


class BraceFormatter(Formatter):
    """A tiny stand-in for a real Java formatter.

    It re-indents by brace depth, joins continuation lines, and splits long
    assignments and concatenations the way google-java-format does. Braces and
    the `` = ``/`` + `` separators must not appear inside string literals.
    """

    def __init__(self, column_limit: int = 100, indent: int = 2) -> None:
        self.column_limit = column_limit
        self.indent = indent
        self.calls: List[str] = []

    def format(self, source: str) -> str:
        self.calls.append(source)
        out: List[str] = []
        stack: List[str] = []
        for statement in self._statements(source):
            if not statement:
                if out and out[-1]:
                    out.append("")
                continue
            if statement.startswith("}"):
                if not stack:
                    raise FormatterSyntaxError("unexpected '}'")
                stack.pop()
            self._check_context(statement, stack)
            self._emit(out, statement, len(stack) * self.indent)
            if statement.endswith("{"):
                stack.append("class" if re.search(r"\b(class|interface|enum)\b", statement) else "block")
        if stack:
            raise FormatterSyntaxError("reached end of file while parsing")
        while out and not out[-1]:
            out.pop()
        return "\n".join(out) + "\n"

    def _statements(self, source: str) -> List[str]:
        statements: List[str] = []
        pending: List[str] = []
        for raw in source.splitlines():
            line = raw.strip()
            if not line and not pending:
                statements.append("")
                continue
            pending.append(line)
            if line.endswith((";", "{", "}")):
                statements.append(" ".join(pending))
                pending = []
        if pending:
            raise FormatterSyntaxError(f"unterminated statement: {' '.join(pending)}")
        return statements

    def _check_context(self, statement: str, stack: List[str]) -> None:
        context = stack[-1] if stack else None
        if statement.startswith("}"):
            return
        if context is None and not statement.startswith(TOP_LEVEL_STARTS):
            raise FormatterSyntaxError(f"class, interface, or enum expected: {statement}")
        if context == "class" and statement.startswith(STATEMENT_STARTS):
            raise FormatterSyntaxError(f"illegal start of type: {statement}")

    def _emit(self, out: List[str], statement: str, indent: int) -> None:
        pad = " " * indent
        if indent + len(statement) <= self.column_limit:
            out.append(pad + statement)
            return
        if " = " in statement:
            head, rest = statement.split(" = ", 1)
            out.append(pad + head + " =")
            self._emit_concatenation(out, rest, indent + 4)
            return
        self._emit_concatenation(out, statement, indent)

    def _emit_concatenation(self, out: List[str], text: str, indent: int) -> None:
        parts = text.split(" + ")
        if indent + len(text) <= self.column_limit or len(parts) == 1:
            out.append(" " * indent + text)
            return
        out.append(" " * indent + parts[0])
        for part in parts[1:]:
            out.append(" " * (indent + 4) + "+ " + part)


@pytest.fixture
def formatter():
    return BraceFormatter()


def lines(*parts: str) -> str:
    return "\n".join(parts) + "\n"
