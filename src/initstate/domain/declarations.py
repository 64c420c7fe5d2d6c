"""Declaration model — the parsed shape of a Rust item.

A :class:`DeclarationTree` is the only input of the expansion pipeline.
Type expressions and bounds are kept as opaque token text; nothing in the
domain layer interprets them.

INVARIANT: ``fields`` keeps declaration order. Emitted checks follow it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

# Fields carrying this attribute are left out of the generated check.
EXCLUSION_MARKER = "ignore_field"

# Name of the derive that requests generation.
DERIVE_NAME = "CheckInitialState"


class Shape(StrEnum):
    """Syntactic shape of a declaration."""

    NAMED = "named"
    TUPLE = "tuple"
    UNIT = "unit"
    ENUM = "enum"
    UNION = "union"


class GenericParamKind(StrEnum):
    LIFETIME = "lifetime"
    TYPE = "type"
    CONST = "const"


@dataclass(frozen=True)
class SourceSpan:
    """1-based position of a token in its source file."""

    line: int
    column: int
    path: str | None = None

    def __str__(self) -> str:
        location = f"{self.line}:{self.column}"
        return f"{self.path}:{location}" if self.path else location


@dataclass(frozen=True)
class Attribute:
    """An outer attribute such as ``#[ignore_field]`` or ``#[derive(Debug)]``.

    ``name`` is the first path segment. ``arguments`` holds the comma
    separated entries inside a parenthesized argument list, as written.
    ``start``/``end`` are source offsets covering ``#[...]``; ``span`` is
    the position of its ``#``.
    """

    name: str
    arguments: tuple[str, ...] = ()
    start: int = 0
    end: int = 0
    span: SourceSpan | None = None

    @property
    def meta(self) -> str:
        """The attribute body rebuilt from its parts: ``derive(Debug, Clone)``."""
        return f"{self.name}({', '.join(self.arguments)})" if self.arguments else self.name

    def applied(self) -> tuple[tuple[str | None, str], ...]:
        """``(cfg predicate, meta)`` for every attribute this one stands for.

        A plain attribute stands for itself, unconditionally.
        ``cfg_attr(pred, a, b)`` stands for ``a`` and ``b`` under ``pred``;
        nested ``cfg_attr`` predicates are joined with ``all(..)``.
        """
        return tuple(_applied(self.meta, None))


@dataclass(frozen=True)
class GenericParam:
    """A single generic parameter, e.g. ``'a: 'b``, ``T: Display`` or ``const N: usize``.

    ``name`` includes the leading quote for lifetimes. ``bounds`` is the text
    after the colon (``None`` when unbounded); for const parameters it holds
    the parameter type.
    """

    kind: GenericParamKind
    name: str
    bounds: str | None = None
    default: str | None = None
    attributes: tuple[str, ...] = ()


@dataclass(frozen=True)
class FieldDeclaration:
    """A named field of a record.

    ``annotations`` holds the first path segment of every outer attribute
    attached to the field (``#[ignore_field]`` gives ``"ignore_field"``).
    """

    identifier: str | None
    type_expression: str
    annotations: frozenset[str] = field(default_factory=frozenset)
    span: SourceSpan | None = None
    attributes: tuple[Attribute, ...] = ()


@dataclass(frozen=True)
class DeclarationTree:
    """A parsed ``struct``, ``enum`` or ``union`` item.

    Attributes:
        name: The item identifier.
        shape: Syntactic shape; only :attr:`Shape.NAMED` is eligible.
        generics: Declared parameters in source order.
        where_clause: Where predicates, or ``None`` when the item has none.
        fields: Named fields (empty for every other shape).
        span: Location of the item itself (visibility or keyword).
        shape_span: Location of the shape itself (e.g. tuple parentheses).
        attributes: Outer attributes of the item, in source order.
        start: Source offset of the first outer attribute (or the item).
        end: Source offset just past the item.
    """

    name: str
    shape: Shape
    generics: tuple[GenericParam, ...] = ()
    where_clause: tuple[str, ...] | None = None
    fields: tuple[FieldDeclaration, ...] = ()
    span: SourceSpan | None = None
    shape_span: SourceSpan | None = None
    attributes: tuple[Attribute, ...] = ()
    start: int = 0
    end: int = 0

    @property
    def start_span(self) -> SourceSpan | None:
        """Location of the first outer attribute, or of the item without any."""
        if self.attributes and self.attributes[0].span is not None:
            return self.attributes[0].span
        return self.span

    @property
    def derives(self) -> tuple[str, ...]:
        """Entries of every ``#[derive(...)]`` attribute, in order. Includes ``cfg_attr`` ones."""
        return tuple(entry for _, entry in self.conditional_derives())

    def conditional_derives(self) -> tuple[tuple[str | None, str], ...]:
        """``(cfg predicate, entry)`` for every derive entry, ``cfg_attr`` included."""
        entries: list[tuple[str | None, str]] = []
        for attribute in self.attributes:
            for condition, meta in attribute.applied():
                parsed = parse_meta_list(meta)
                if parsed is not None and parsed[0] == "derive":
                    entries.extend((condition, entry) for entry in parsed[1])
        return tuple(entries)

    def derives_name(self, derive_name: str = DERIVE_NAME) -> bool:
        """Whether ``derive_name`` appears (by last path segment) among the derives."""
        return any(derive_segment(entry) == derive_name for entry in self.derives)

    def derive_condition(self, derive_name: str = DERIVE_NAME) -> str | None:
        """The ``cfg`` predicate under which ``derive_name`` applies.

        None when it is derived unconditionally, or not derived at all.
        """
        conditions = [
            condition
            for condition, entry in self.conditional_derives()
            if derive_segment(entry) == derive_name
        ]
        if not conditions or None in conditions:
            return None
        unique = list(dict.fromkeys(c for c in conditions if c is not None))
        return unique[0] if len(unique) == 1 else f"any({', '.join(unique)})"


def derive_segment(entry: str) -> str:
    """Last path segment of a derive entry.

    Examples:
        >>> derive_segment("initstate::CheckInitialState")
        'CheckInitialState'
        >>> derive_segment("Debug")
        'Debug'
    """
    return entry.rsplit("::", 1)[-1].strip()


_OPEN = "([{<"
_CLOSE = ")]}>"


def split_top_level(text: str) -> list[str]:
    """Split ``text`` at commas outside brackets and string literals.

    Examples:
        >>> split_top_level("test, derive(Debug, Clone)")
        ['test', 'derive(Debug, Clone)']
    """
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    quoted = False
    previous = ""
    for char in text:
        if quoted:
            if char == '"' and previous != "\\":
                quoted = False
        elif char == '"':
            quoted = True
        elif char in _OPEN:
            depth += 1
        elif char in _CLOSE and not (char == ">" and previous == "-"):
            depth -= 1
        elif char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            previous = char
            continue
        current.append(char)
        previous = char
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return parts


def parse_meta_list(meta: str) -> tuple[str, tuple[str, ...]] | None:
    """``("derive", ("Debug", "Clone"))`` for ``derive(Debug, Clone)``; None otherwise."""
    meta = meta.strip()
    opening = meta.find("(")
    if opening <= 0 or not meta.endswith(")"):
        return None
    name = meta[:opening].strip()
    if not name.isidentifier():
        return None
    return name, tuple(split_top_level(meta[opening + 1 : -1]))


def _applied(meta: str, condition: str | None) -> list[tuple[str | None, str]]:
    parsed = parse_meta_list(meta)
    if parsed is None or parsed[0] != "cfg_attr" or len(parsed[1]) < 2:
        return [(condition, meta.strip())]
    predicate, *inner = parsed[1]
    combined = predicate if condition is None else f"all({condition}, {predicate})"
    applied: list[tuple[str | None, str]] = []
    for item in inner:
        applied.extend(_applied(item, combined))
    return applied
