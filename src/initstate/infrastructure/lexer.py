"""Rust tokenizer — just enough lexing to read item declarations.

Punctuation is emitted one character per token, like ``proc_macro``'s
``Punct``. Whether two punctuation tokens form ``::`` or ``->`` is decided
by adjacency (``Token.end == next.start``), so ``>>`` closes two generic
lists without any special casing.

Comments (including doc comments) are dropped.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from enum import StrEnum

PUNCTUATION = frozenset("+-*/%^!&|=<>@.,;:#$?~()[]{}\\")


class TokenKind(StrEnum):
    IDENT = "ident"
    LIFETIME = "lifetime"
    LITERAL = "literal"
    PUNCT = "punct"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    start: int
    end: int
    line: int
    column: int

    def is_punct(self, char: str) -> bool:
        return self.kind is TokenKind.PUNCT and self.text == char

    def is_ident(self, name: str) -> bool:
        return self.kind is TokenKind.IDENT and self.text == name


class LexError(ValueError):
    """Source text could not be tokenized."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{line}:{column}: {message}")
        self.message = message
        self.line = line
        self.column = column


def _is_ident_start(char: str) -> bool:
    return char == "_" or char.isalpha()


def _is_ident_continue(char: str) -> bool:
    return char == "_" or char.isalnum()


class _Lexer:
    def __init__(self, source: str) -> None:
        self.source = source
        self.length = len(source)
        self.pos = 0
        self.tokens: list[Token] = []
        self._line_starts = [0] + [i + 1 for i, c in enumerate(source) if c == "\n"]

    def location(self, offset: int) -> tuple[int, int]:
        index = bisect.bisect_right(self._line_starts, offset) - 1
        return index + 1, offset - self._line_starts[index] + 1

    def error(self, message: str, offset: int) -> LexError:
        line, column = self.location(offset)
        return LexError(message, line, column)

    def peek(self, ahead: int = 0) -> str:
        index = self.pos + ahead
        return self.source[index] if index < self.length else ""

    def push(self, kind: TokenKind, start: int) -> None:
        line, column = self.location(start)
        self.tokens.append(
            Token(kind, self.source[start : self.pos], start, self.pos, line, column)
        )

    def run(self) -> list[Token]:
        while self.pos < self.length:
            char = self.peek()
            start = self.pos
            if char.isspace():
                self.pos += 1
            elif char == "/" and self.peek(1) == "/":
                self.skip_line_comment()
            elif char == "/" and self.peek(1) == "*":
                self.skip_block_comment()
            elif self.at_prefixed_literal():
                self.lex_prefixed_literal()
                self.push(TokenKind.LITERAL, start)
            elif char == "r" and self.peek(1) == "#" and _is_ident_start(self.peek(2)):
                self.pos += 2
                self.lex_ident_tail()
                self.push(TokenKind.IDENT, start)
            elif _is_ident_start(char):
                self.lex_ident_tail()
                self.push(TokenKind.IDENT, start)
            elif char.isdigit():
                self.lex_number()
                self.push(TokenKind.LITERAL, start)
            elif char == '"':
                self.lex_string()
                self.push(TokenKind.LITERAL, start)
            elif char == "'":
                kind = self.lex_quote()
                self.push(kind, start)
            elif char in PUNCTUATION:
                self.pos += 1
                self.push(TokenKind.PUNCT, start)
            else:
                raise self.error(f"unexpected character {char!r}", start)
        return self.tokens

    def skip_line_comment(self) -> None:
        end = self.source.find("\n", self.pos)
        self.pos = self.length if end == -1 else end

    def skip_block_comment(self) -> None:
        start = self.pos
        depth = 0
        while self.pos < self.length:
            if self.peek() == "/" and self.peek(1) == "*":
                depth += 1
                self.pos += 2
            elif self.peek() == "*" and self.peek(1) == "/":
                depth -= 1
                self.pos += 2
                if depth == 0:
                    return
            else:
                self.pos += 1
        raise self.error("unterminated block comment", start)

    def lex_ident_tail(self) -> None:
        self.pos += 1
        while _is_ident_continue(self.peek()):
            self.pos += 1

    def lex_number(self) -> None:
        while True:
            char = self.peek()
            if _is_ident_continue(char):
                self.pos += 1
            elif char == "." and self.peek(1).isdigit():
                self.pos += 1
            else:
                return

    def lex_string(self) -> None:
        start = self.pos
        self.pos += 1
        while self.pos < self.length:
            char = self.peek()
            if char == "\\":
                self.pos += 2
            elif char == '"':
                self.pos += 1
                return
            else:
                self.pos += 1
        raise self.error("unterminated string literal", start)

    def lex_raw_string(self) -> None:
        start = self.pos
        hashes = 0
        while self.peek() == "#":
            hashes += 1
            self.pos += 1
        if self.peek() != '"':
            raise self.error("malformed raw string literal", start)
        terminator = '"' + "#" * hashes
        end = self.source.find(terminator, self.pos + 1)
        if end == -1:
            raise self.error("unterminated raw string literal", start)
        self.pos = end + len(terminator)

    def at_prefixed_literal(self) -> bool:
        # b"..", b'..', br"..", r"..", r#"..", c"..", cr".."
        rest = self.source[self.pos : self.pos + 3]
        for prefix in ("br", "cr", "b", "c", "r"):
            if not rest.startswith(prefix):
                continue
            after = rest[len(prefix) : len(prefix) + 1]
            if prefix.endswith("r"):
                if after == '"':
                    return True
                if after == "#":
                    # r#ident is a raw identifier, r#" a raw string.
                    index = self.pos + len(prefix)
                    while index < self.length and self.source[index] == "#":
                        index += 1
                    return index < self.length and self.source[index] == '"'
                continue
            if after == '"' or (prefix == "b" and after == "'"):
                return True
        return False

    def lex_prefixed_literal(self) -> None:
        while self.peek() in ("b", "c"):
            self.pos += 1
        if self.peek() == "r":
            self.pos += 1
            self.lex_raw_string()
        elif self.peek() == "'":
            self.lex_quote()
        else:
            self.lex_string()

    def lex_quote(self) -> TokenKind:
        """Char literal (``'x'``, ``'\\n'``) or lifetime (``'a``)."""
        start = self.pos
        if self.peek(1) == "\\":
            end = self.source.find("'", self.pos + 3)
            if end == -1:
                raise self.error("unterminated character literal", start)
            self.pos = end + 1
            return TokenKind.LITERAL
        if self.peek(1) and self.peek(2) == "'":
            self.pos += 3
            return TokenKind.LITERAL
        if _is_ident_start(self.peek(1)):
            self.pos += 1
            self.lex_ident_tail()
            return TokenKind.LIFETIME
        raise self.error("malformed character literal", start)


def tokenize(source: str) -> list[Token]:
    """Split Rust ``source`` into tokens, dropping whitespace and comments."""
    return _Lexer(source).run()


def render(tokens: list[Token]) -> str:
    """Re-serialize tokens, keeping one space wherever the source had a gap."""
    parts: list[str] = []
    previous: Token | None = None
    for token in tokens:
        if previous is not None and token.start > previous.end:
            parts.append(" ")
        parts.append(token.text)
        previous = token
    return "".join(parts)
