"""A small index-based scanner for Java-family source text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, List, Tuple

TEXT_BLOCK_DELIMITER = '"""'
WHITESPACE_CHARS = " \t\f\r\n"
OPERATOR_CHARS = "=<>!&|+-*/%^~?:"


class TokenKind(Enum):
    WHITESPACE = auto()
    LINE_COMMENT = auto()
    BLOCK_COMMENT = auto()
    STRING = auto()
    CHAR = auto()
    TEXT_BLOCK = auto()
    CODE = auto()


SIGNIFICANT_KINDS = frozenset(
    {TokenKind.STRING, TokenKind.CHAR, TokenKind.TEXT_BLOCK, TokenKind.CODE}
)
COMMENT_KINDS = frozenset({TokenKind.LINE_COMMENT, TokenKind.BLOCK_COMMENT})


@dataclass(frozen=True)
class Token:
    """A lexical token as a span of the scanned text."""

    kind: TokenKind
    start: int
    end: int
    terminated: bool = True

    def text(self, source: str) -> str:
        return source[self.start:self.end]


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char in "_$"


def _scan_quoted(text: str, index: int, closer: str, multiline: bool) -> Tuple[int, bool]:
    """Scan to just past the closing quote, honouring backslash escapes."""

    length = len(text)
    while index < length:
        char = text[index]
        if char == "\\":
            index = min(index + 2, length)
            continue
        if not multiline and char in "\r\n":
            return index, False
        if text.startswith(closer, index):
            return index + len(closer), True
        index += 1
    return length, False


def scan(text: str) -> Iterator[Token]:
    """Yield the tokens of ``text`` in order; the spans cover the text exactly."""

    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        kind = TokenKind.CODE
        terminated = True
        if char in WHITESPACE_CHARS:
            end = index + 1
            while end < length and text[end] in WHITESPACE_CHARS:
                end += 1
            kind = TokenKind.WHITESPACE
        elif text.startswith("//", index):
            end = index + 2
            while end < length and text[end] not in "\r\n":
                end += 1
            kind = TokenKind.LINE_COMMENT
        elif text.startswith("/*", index):
            close = text.find("*/", index + 2)
            end = length if close < 0 else close + 2
            terminated = close >= 0
            kind = TokenKind.BLOCK_COMMENT
        elif text.startswith(TEXT_BLOCK_DELIMITER, index):
            end, terminated = _scan_quoted(
                text, index + len(TEXT_BLOCK_DELIMITER), TEXT_BLOCK_DELIMITER, True
            )
            if not terminated:
                # Only the opening delimiter is claimed; the rest scans as code.
                end = index + len(TEXT_BLOCK_DELIMITER)
            kind = TokenKind.TEXT_BLOCK
        elif char in "\"'":
            end, terminated = _scan_quoted(text, index + 1, char, False)
            kind = TokenKind.STRING if char == '"' else TokenKind.CHAR
        elif _is_word_char(char):
            end = index + 1
            while end < length and _is_word_char(text[end]):
                end += 1
        elif char in OPERATOR_CHARS:
            # One token per operator run, so ">>" never matches "> >".
            end = index + 1
            while (
                end < length
                and text[end] in OPERATOR_CHARS
                and not text.startswith(("//", "/*"), end)
            ):
                end += 1
        else:
            end = index + 1
        yield Token(kind=kind, start=index, end=end, terminated=terminated)
        index = end


def content_signature(text: str) -> List[str]:
    """Return the token texts that a pure re-wrapping must preserve."""

    signature: List[str] = []
    for token in scan(text):
        if token.kind is TokenKind.WHITESPACE:
            continue
        value = token.text(text)
        if token.kind in COMMENT_KINDS:
            value = " ".join(value.split())
        signature.append(value)
    return signature
