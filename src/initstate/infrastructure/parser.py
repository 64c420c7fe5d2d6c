"""Rust item parser — builds :class:`DeclarationTree` values from source.

Only item headers are understood: outer attributes, visibility, the
``struct``/``enum``/``union`` keyword, generics, where clauses and field
lists. Types, bounds and enum bodies are consumed as balanced token runs
and kept as opaque text.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Container

from initstate.domain.declarations import (
    Attribute,
    DeclarationTree,
    FieldDeclaration,
    GenericParam,
    GenericParamKind,
    Shape,
    SourceSpan,
)
from initstate.infrastructure.lexer import Token, TokenKind, render, tokenize

logger = logging.getLogger(__name__)

_OPENERS = {"(": ")", "[": "]", "{": "}"}
_CLOSERS = frozenset(_OPENERS.values())
_ITEM_KEYWORDS = {"struct": Shape.NAMED, "enum": Shape.ENUM, "union": Shape.UNION}
_META_NAME = re.compile(r"\s*(?:::\s*)?([A-Za-z_][A-Za-z0-9_]*)")


class ParseError(ValueError):
    """A declaration header is malformed."""

    def __init__(self, message: str, line: int, column: int) -> None:
        super().__init__(f"{line}:{column}: {message}")
        self.message = message
        self.line = line
        self.column = column


class _Parser:
    def __init__(self, source: str, path: str | None) -> None:
        self.tokens = tokenize(source)
        self.path = path
        self.pos = 0
        self.source_length = len(source)

    # ── Token stream ────────────────────────────────────────────────

    def peek(self, ahead: int = 0) -> Token | None:
        index = self.pos + ahead
        return self.tokens[index] if index < len(self.tokens) else None

    def advance(self) -> Token:
        token = self.peek()
        if token is None:
            raise self.error("unexpected end of input")
        self.pos += 1
        return token

    def at_punct(self, char: str) -> bool:
        token = self.peek()
        return token is not None and token.is_punct(char)

    def at_ident(self, name: str) -> bool:
        token = self.peek()
        return token is not None and token.is_ident(name)

    def expect_punct(self, char: str) -> Token:
        if not self.at_punct(char):
            raise self.error(f"expected `{char}`")
        return self.advance()

    def expect_ident(self, what: str = "identifier") -> Token:
        token = self.peek()
        if token is None or token.kind is not TokenKind.IDENT:
            raise self.error(f"expected {what}")
        return self.advance()

    def error(self, message: str, token: Token | None = None) -> ParseError:
        token = token or self.peek()
        if token is None:
            last = self.tokens[-1] if self.tokens else None
            line, column = (last.line, last.column) if last else (1, 1)
            return ParseError(f"{message}, found end of input", line, column)
        return ParseError(f"{message}, found `{token.text}`", token.line, token.column)

    def span(self, token: Token) -> SourceSpan:
        return SourceSpan(line=token.line, column=token.column, path=self.path)

    # ── Balanced runs ───────────────────────────────────────────────

    def skip_group(self) -> Token:
        """Consume a bracketed group starting at the current opener; return the closer."""
        opener = self.advance()
        stack = [_OPENERS[opener.text]]
        while stack:
            token = self.advance()
            if token.kind is not TokenKind.PUNCT:
                continue
            if token.text in _OPENERS:
                stack.append(_OPENERS[token.text])
            elif token.text in _CLOSERS:
                if token.text != stack[-1]:
                    raise self.error("mismatched delimiter", token)
                stack.pop()
        return token

    def collect_until(self, stops: Container[str]) -> list[Token]:
        """Consume tokens up to a top-level punctuation in ``stops``.

        Angle brackets count as nesting, except the ``>`` of ``->``.
        """
        collected: list[Token] = []
        angle = 0
        while True:
            token = self.peek()
            if token is None:
                raise self.error("unexpected end of input")
            if token.kind is TokenKind.PUNCT:
                if token.text == ">" and _after_arrow(collected, token):
                    collected.append(self.advance())
                    continue
                if angle == 0 and token.text in stops:
                    return collected
                if token.text in _OPENERS:
                    start = self.pos
                    self.skip_group()
                    collected.extend(self.tokens[start : self.pos])
                    continue
                if token.text in _CLOSERS:
                    raise self.error("unbalanced delimiter", token)
                if token.text == "<":
                    angle += 1
                elif token.text == ">":
                    angle -= 1
            collected.append(self.advance())

    # ── Attributes ──────────────────────────────────────────────────

    def at_outer_attribute(self) -> bool:
        following = self.peek(1)
        return self.at_punct("#") and following is not None and following.is_punct("[")

    def parse_attribute(self) -> Attribute:
        hash_token = self.expect_punct("#")
        self.expect_punct("[")
        if self.at_punct(":"):
            self.advance()
            self.expect_punct(":")
        name = self.expect_ident("attribute path").text
        while self.at_punct(":"):
            self.advance()
            self.expect_punct(":")
            self.expect_ident("attribute path")
        arguments: tuple[str, ...] = ()
        if self.at_punct("("):
            start = self.pos
            self.skip_group()
            inner = self.tokens[start + 1 : self.pos - 1]
            arguments = tuple(_split_commas(inner))
        if not self.at_punct("]"):
            self.collect_until({"]"})
        close = self.expect_punct("]")
        return Attribute(
            name=name,
            arguments=arguments,
            start=hash_token.start,
            end=close.end,
            span=self.span(hash_token),
        )

    def parse_outer_attributes(self) -> list[Attribute]:
        attributes: list[Attribute] = []
        while self.at_outer_attribute():
            attributes.append(self.parse_attribute())
        return attributes

    def skip_visibility(self) -> Token | None:
        if not self.at_ident("pub"):
            return None
        token = self.advance()
        if self.at_punct("("):
            self.skip_group()
        return token

    # ── Generics ────────────────────────────────────────────────────

    def parse_generics(self) -> tuple[GenericParam, ...]:
        self.expect_punct("<")
        params: list[GenericParam] = []
        while not self.at_punct(">"):
            attributes: list[str] = []
            while self.at_outer_attribute():
                start = self.pos
                self.parse_attribute()
                attributes.append(render(self.tokens[start : self.pos]))
            params.append(self.parse_generic_param(tuple(attributes)))
            if self.at_punct(","):
                self.advance()
            elif not self.at_punct(">"):
                raise self.error("expected `,` or `>` in generic parameters")
        self.expect_punct(">")
        return tuple(params)

    def parse_generic_param(self, attributes: tuple[str, ...]) -> GenericParam:
        token = self.peek()
        if token is not None and token.kind is TokenKind.LIFETIME:
            self.advance()
            bounds = None
            if self.at_punct(":"):
                self.advance()
                bounds = render(self.collect_until({",", ">"})) or None
            return GenericParam(GenericParamKind.LIFETIME, token.text, bounds, None, attributes)
        if self.at_ident("const"):
            self.advance()
            name = self.expect_ident("const parameter name").text
            self.expect_punct(":")
            ty = render(self.collect_until({",", ">", "="}))
            default = self.parse_default()
            return GenericParam(GenericParamKind.CONST, name, ty, default, attributes)
        name = self.expect_ident("generic parameter").text
        bounds = None
        if self.at_punct(":"):
            self.advance()
            bounds = render(self.collect_until({",", ">", "="})) or None
        default = self.parse_default()
        return GenericParam(GenericParamKind.TYPE, name, bounds, default, attributes)

    def parse_default(self) -> str | None:
        if not self.at_punct("="):
            return None
        self.advance()
        return render(self.collect_until({",", ">"}))

    def parse_where(self, terminators: str) -> tuple[str, ...]:
        self.advance()  # `where`
        predicates: list[str] = []
        while True:
            token = self.peek()
            if token is None:
                raise self.error("unterminated where clause")
            if token.kind is TokenKind.PUNCT and token.text in terminators:
                return tuple(predicates)
            predicate = self.collect_until({",", *terminators})
            if predicate:
                predicates.append(render(predicate))
            if self.at_punct(","):
                self.advance()

    # ── Items ───────────────────────────────────────────────────────

    def parse_named_fields(self) -> tuple[FieldDeclaration, ...]:
        self.expect_punct("{")
        fields: list[FieldDeclaration] = []
        while not self.at_punct("}"):
            attributes = self.parse_outer_attributes()
            self.skip_visibility()
            ident = self.expect_ident("field name")
            self.expect_punct(":")
            type_tokens = self.collect_until({",", "}"})
            if not type_tokens:
                raise self.error(f"expected type for field `{ident.text}`")
            fields.append(
                FieldDeclaration(
                    identifier=ident.text,
                    type_expression=render(type_tokens),
                    annotations=_annotation_names(attributes),
                    span=self.span(ident),
                    attributes=tuple(attributes),
                )
            )
            if self.at_punct(","):
                self.advance()
            elif not self.at_punct("}"):
                raise self.error("expected `,` or `}` after field")
        self.advance()
        return tuple(fields)

    def parse_item(self, attributes: list[Attribute], first: Token) -> DeclarationTree:
        keyword = self.advance()
        shape = _ITEM_KEYWORDS[keyword.text]
        name = self.expect_ident(f"{keyword.text} name").text
        generics = self.parse_generics() if self.at_punct("<") else ()
        where_clause: tuple[str, ...] | None = None
        if self.at_ident("where"):
            where_clause = self.parse_where("{;")
        fields: tuple[FieldDeclaration, ...] = ()
        shape_span: SourceSpan | None = None

        if shape is not Shape.NAMED:
            if not self.at_punct("{"):
                raise self.error(f"expected `{{` after {keyword.text} header")
            shape_span = self.span(self.peek())  # type: ignore[arg-type]
            end = self.skip_group()
        elif self.at_punct("{"):
            shape_span = self.span(self.peek())  # type: ignore[arg-type]
            fields = self.parse_named_fields()
            end = self.tokens[self.pos - 1]
        elif self.at_punct("("):
            shape = Shape.TUPLE
            shape_span = self.span(self.peek())  # type: ignore[arg-type]
            self.skip_group()
            if self.at_ident("where"):
                where_clause = self.parse_where(";")
            end = self.expect_punct(";")
        elif self.at_punct(";"):
            shape = Shape.UNIT
            end = self.advance()
        else:
            raise self.error("expected `{`, `(` or `;` after struct header")

        start = attributes[0].start if attributes else first.start
        return DeclarationTree(
            name=name,
            shape=shape,
            generics=generics,
            where_clause=where_clause,
            fields=fields,
            span=self.span(first),
            shape_span=shape_span,
            attributes=tuple(attributes),
            start=start,
            end=end.end,
        )

    def at_item_keyword(self) -> bool:
        token = self.peek()
        following = self.peek(1)
        if token is None or token.kind is not TokenKind.IDENT:
            return False
        if token.text not in _ITEM_KEYWORDS:
            return False
        # `union` is a contextual keyword; the name must follow directly.
        return following is not None and following.kind is TokenKind.IDENT

    def parse_items(self) -> list[DeclarationTree]:
        items: list[DeclarationTree] = []
        attributes: list[Attribute] = []
        first: Token | None = None
        while self.peek() is not None:
            if self.at_outer_attribute():
                attributes.append(self.parse_attribute())
                continue
            if self.at_punct("#") and self.peek(1) is not None and self.peek(1).is_punct("!"):
                self.advance()
                self.advance()
                self.skip_group()
                attributes = []
                continue
            if self.at_ident("pub"):
                first = first or self.peek()
                self.skip_visibility()
                continue
            if self.at_item_keyword():
                item = self.parse_item(attributes, first or self.peek())  # type: ignore[arg-type]
                logger.debug("Parsed %s %s (%d fields)", item.shape, item.name, len(item.fields))
                items.append(item)
            else:
                self.advance()
            attributes = []
            first = None
        return items


def _after_arrow(current: list[Token], token: Token) -> bool:
    previous = current[-1] if current else None
    return previous is not None and previous.is_punct("-") and previous.end == token.start


def _split_commas(tokens: list[Token]) -> list[str]:
    parts: list[str] = []
    current: list[Token] = []
    depth = 0
    for token in tokens:
        if token.kind is TokenKind.PUNCT:
            if token.text in _OPENERS or token.text == "<":
                depth += 1
            elif token.text in _CLOSERS or token.text == ">":
                if token.text == ">" and _after_arrow(current, token):
                    current.append(token)
                    continue
                depth -= 1
            elif token.text == "," and depth == 0:
                if current:
                    parts.append(render(current))
                current = []
                continue
        current.append(token)
    if current:
        parts.append(render(current))
    return parts


def parse_items(source: str, path: str | None = None) -> list[DeclarationTree]:
    """Every ``struct``, ``enum`` and ``union`` declared in ``source``, in order."""
    return _Parser(source, path).parse_items()


def parse_declaration(source: str, path: str | None = None) -> DeclarationTree:
    """Parse ``source`` holding exactly one declaration."""
    items = parse_items(source, path)
    if len(items) != 1:
        raise ParseError(f"expected exactly one declaration, found {len(items)}", 1, 1)
    return items[0]


def _annotation_names(attributes: list[Attribute]) -> frozenset[str]:
    """First path segment of each attribute, and of those a ``cfg_attr`` applies."""
    names = {attribute.name for attribute in attributes}
    for attribute in attributes:
        for _, meta in attribute.applied():
            match = _META_NAME.match(meta)
            if match:
                names.add(match.group(1))
    return frozenset(names)
