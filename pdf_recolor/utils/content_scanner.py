"""
Content Stream Scanner

Splits a PDF page content stream into lexical tokens following the PDF
lexical conventions (whitespace, delimiters, comments, strings, arrays,
dictionaries and inline image data). Every token keeps its exact source
span so callers can copy untouched tokens back byte for byte.

The stream is handled as latin-1 text, which maps every byte to exactly one
character and back.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Union

from ..core.errors import MalformedStream


WHITESPACE = "\x00\t\n\x0c\r "
DELIMITERS = "()<>[]{}/%"
HEX_DIGITS = "0123456789abcdefABCDEF"

NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)\Z")
OPERATOR_PATTERN = re.compile(r"(?:[A-Za-z][A-Za-z0-9*]*|'|\")\Z")
OPERAND_KEYWORDS = {"true", "false", "null"}

# End of inline image data: whitespace, EI, then whitespace/delimiter/end.
INLINE_IMAGE_END = re.compile(r"[\x00\t\n\x0c\r ]EI(?=[\x00\t\n\x0c\r ()<>\[\]{}/%]|\Z)")


class TokenKind(str, Enum):
    NUMBER = "number"
    OPERATOR = "operator"
    KEYWORD = "keyword"
    NAME = "name"
    STRING = "string"
    HEX_STRING = "hex_string"
    ARRAY_START = "array_start"
    ARRAY_END = "array_end"
    DICT_START = "dict_start"
    DICT_END = "dict_end"
    COMMENT = "comment"
    INLINE_DATA = "inline_data"


@dataclass(frozen=True)
class Token:
    """A single lexical token and its [start, end) span in the source text."""

    kind: TokenKind
    text: str
    start: int
    end: int
    depth: int = 0

    @property
    def value(self) -> float:
        if self.kind is not TokenKind.NUMBER:
            raise TypeError(f"{self.kind.value} token has no numeric value")
        return float(self.text)

    @property
    def is_operand(self) -> bool:
        return self.kind not in (
            TokenKind.OPERATOR,
            TokenKind.COMMENT,
            TokenKind.INLINE_DATA,
            TokenKind.ARRAY_END,
            TokenKind.DICT_END,
        )


class ContentScanner:
    """Tokenizer for a single logical content stream."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0
        # Open '[' / '<<' containers, innermost last.
        self.containers: List[str] = []

    def tokens(self) -> Iterator[Token]:
        text = self.text
        length = len(text)
        while True:
            self._skip_whitespace()
            if self.pos >= length:
                break
            char = text[self.pos]

            if char == "%":
                yield self._read_comment()
            elif char == "/":
                yield self._read_name()
            elif char == "(":
                yield self._read_literal_string()
            elif char == "<":
                if text.startswith("<<", self.pos):
                    yield self._open_container("<<", TokenKind.DICT_START)
                else:
                    yield self._read_hex_string()
            elif char == ">":
                if not text.startswith(">>", self.pos):
                    raise MalformedStream("unexpected '>'", offset=self.pos)
                yield self._close_container("<<", ">>", TokenKind.DICT_END)
            elif char == "[":
                yield self._open_container("[", TokenKind.ARRAY_START)
            elif char == "]":
                yield self._close_container("[", "]", TokenKind.ARRAY_END)
            elif char in "){}":
                raise MalformedStream(f"unexpected {char!r}", offset=self.pos)
            else:
                token = self._read_regular()
                yield token
                if token.kind is TokenKind.OPERATOR and token.text == "ID":
                    yield self._read_inline_data()

        if self.containers:
            opener = self.containers[-1]
            raise MalformedStream(f"unterminated {'array' if opener == '[' else 'dictionary'}", offset=length)

    # ------------------------------------------------------------------
    # Token readers
    # ------------------------------------------------------------------
    def _skip_whitespace(self) -> None:
        text = self.text
        while self.pos < len(text) and text[self.pos] in WHITESPACE:
            self.pos += 1

    def _make(self, kind: TokenKind, start: int, end: int, depth: Optional[int] = None) -> Token:
        self.pos = end
        return Token(
            kind=kind,
            text=self.text[start:end],
            start=start,
            end=end,
            depth=len(self.containers) if depth is None else depth,
        )

    def _read_comment(self) -> Token:
        start = self.pos
        end = start
        while end < len(self.text) and self.text[end] not in "\r\n":
            end += 1
        return self._make(TokenKind.COMMENT, start, end)

    def _regular_run_end(self, start: int) -> int:
        end = start
        text = self.text
        while end < len(text) and text[end] not in WHITESPACE and text[end] not in DELIMITERS:
            end += 1
        return end

    def _read_name(self) -> Token:
        start = self.pos
        end = self._regular_run_end(start + 1)
        return self._make(TokenKind.NAME, start, end)

    def _read_literal_string(self) -> Token:
        start = self.pos
        text = self.text
        nesting = 0
        index = start
        while index < len(text):
            char = text[index]
            if char == "\\":
                index += 2
                continue
            if char == "(":
                nesting += 1
            elif char == ")":
                nesting -= 1
                if nesting == 0:
                    return self._make(TokenKind.STRING, start, index + 1)
            index += 1
        raise MalformedStream("unterminated string", offset=start)

    def _read_hex_string(self) -> Token:
        start = self.pos
        end = self.text.find(">", start + 1)
        if end < 0:
            raise MalformedStream("unterminated hex string", offset=start)
        for index in range(start + 1, end):
            if self.text[index] not in HEX_DIGITS and self.text[index] not in WHITESPACE:
                raise MalformedStream("invalid character in hex string", offset=index)
        return self._make(TokenKind.HEX_STRING, start, end + 1)

    def _open_container(self, opener: str, kind: TokenKind) -> Token:
        depth = len(self.containers)
        self.containers.append(opener)
        return self._make(kind, self.pos, self.pos + len(opener), depth=depth)

    def _close_container(self, opener: str, closer: str, kind: TokenKind) -> Token:
        if not self.containers or self.containers[-1] != opener:
            raise MalformedStream(f"unbalanced {closer!r}", offset=self.pos)
        self.containers.pop()
        return self._make(kind, self.pos, self.pos + len(closer))

    def _read_regular(self) -> Token:
        start = self.pos
        end = self._regular_run_end(start)
        word = self.text[start:end]

        if NUMBER_PATTERN.match(word):
            return self._make(TokenKind.NUMBER, start, end)
        if word in OPERAND_KEYWORDS:
            return self._make(TokenKind.KEYWORD, start, end)
        if OPERATOR_PATTERN.match(word):
            if self.containers:
                raise MalformedStream(f"operator {word!r} inside array or dictionary", offset=start)
            return self._make(TokenKind.OPERATOR, start, end)
        raise MalformedStream(f"unrecognized token {word!r}", offset=start)

    def _read_inline_data(self) -> Token:
        # A single whitespace byte separates ID from the binary payload.
        start = self.pos
        if start < len(self.text) and self.text[start] in WHITESPACE:
            start += 1
        match = INLINE_IMAGE_END.search(self.text, self.pos)
        if match is None:
            raise MalformedStream("inline image data without EI", offset=start)
        return self._make(TokenKind.INLINE_DATA, start, max(start, match.start()))


def scan_content(data: Union[bytes, str]) -> Iterator[Token]:
    """Lazily tokenize a content stream given as raw bytes or latin-1 text."""
    if isinstance(data, bytes):
        data = data.decode("latin-1")
    return ContentScanner(data).tokens()
