"""Validation method emission.

Renders one inherent ``impl`` block holding ``check_initial_state(&self)``.
Output is a pure function of its inputs: the same checked fields and
signature always give byte-identical text.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from initstate.domain.generics import GenericSignature

PANIC_TEMPLATE = "Field `{ident}` has Some value instead of None"

DOC_COMMENT = (
    "Checks all `Option` fields to have `None` at the time of this",
    "method call. Is expected to be used for testing purposes.",
    "# Panics",
    "Any of `self` fields, which are not annotated with",
    "`ignore_field`, are `Some`. Panic message will contain the name",
    "of an `Option` field which has some value.",
)


@dataclass(frozen=True)
class GeneratorOptions:
    """Layout knobs for the generated code."""

    method_name: str = "check_initial_state"
    indent: int = 4
    emit_docs: bool = True


@dataclass(frozen=True)
class CodeBlock:
    """A generated ``impl`` block.

    Attributes:
        type_name: The struct the block implements.
        header: ``impl<..> Name<..>`` plus the where clause, if any.
        method: The method definition, unindented.
        checked_fields: Fields checked by the method, in order.
        cfg: Predicate of a ``#[cfg(..)]`` gate on the block, when the derive
            is itself conditional.
    """

    type_name: str
    header: str
    method: str
    checked_fields: tuple[str, ...]
    indent: int = 4
    cfg: str | None = None

    @property
    def text(self) -> str:
        pad = " " * self.indent
        body = "\n".join(f"{pad}{line}" if line else "" for line in self.method.splitlines())
        # A where clause puts the opening brace on its own line.
        opener = "\n{" if "\n" in self.header else " {"
        gate = f"#[cfg({self.cfg})]\n" if self.cfg else ""
        return f"{gate}{self.header}{opener}\n{body}\n}}\n"


def panic_message(ident: str) -> str:
    return PANIC_TEMPLATE.format(ident=ident)


def render_header(type_name: str, signature: GenericSignature, indent: int = 4) -> str:
    """``impl`` line, with a multi-line where clause when there are predicates."""
    header = f"impl{signature.impl_generics} {type_name}{signature.type_generics}"
    if not signature.where_clause:
        return header
    pad = " " * indent
    predicates = "\n".join(f"{pad}{predicate}," for predicate in signature.where_clause)
    return f"{header}\nwhere\n{predicates}"


def render_check(ident: str, indent: int = 4) -> str:
    """One short-circuiting field check."""
    pad = " " * indent
    message = panic_message(ident)
    return (
        f"if ::std::option::Option::is_some(&self.{ident}) {{\n"
        f'{pad}panic!("{message}");\n'
        "};"
    )


def render_method(checked: Sequence[str], options: GeneratorOptions) -> str:
    lines: list[str] = []
    if options.emit_docs:
        lines.extend(f"/// {line}" for line in DOC_COMMENT)
    signature = f"fn {options.method_name}(&self)"
    if not checked:
        lines.append(f"{signature} {{}}")
        return "\n".join(lines)
    pad = " " * options.indent
    lines.append(f"{signature} {{")
    for ident in checked:
        lines.extend(f"{pad}{line}" for line in render_check(ident, options.indent).splitlines())
    lines.append("}")
    return "\n".join(lines)


def emit(
    type_name: str,
    checked: Sequence[str],
    signature: GenericSignature,
    options: GeneratorOptions | None = None,
) -> CodeBlock:
    """Combine checked fields and the generic signature into one ``impl`` block."""
    options = options or GeneratorOptions()
    return CodeBlock(
        type_name=type_name,
        header=render_header(type_name, signature, options.indent),
        method=render_method(checked, options),
        checked_fields=tuple(checked),
        indent=options.indent,
    )
