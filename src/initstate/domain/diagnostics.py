"""Compile-time diagnostics and their fixed message catalog.

INVARIANT: the catalog strings are stable. Downstream test suites match
them verbatim, including the "no allowed" wording for unit structs.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from initstate.domain.declarations import Shape, SourceSpan


class DiagnosticCode(StrEnum):
    NOT_NAMED_STRUCT = "not_named_struct"
    UNIT_STRUCT = "unit_struct"


MESSAGES: dict[DiagnosticCode, str] = {
    DiagnosticCode.NOT_NAMED_STRUCT: (
        "`CheckInitialState` procedural macro is allowed for structs with named fields only"
    ),
    DiagnosticCode.UNIT_STRUCT: (
        "`CheckInitialState` procedural macro is no allowed for unit structs"
    ),
}

# Rejected shapes and the catalog entry each one reports.
REJECTIONS: dict[Shape, DiagnosticCode] = {
    Shape.ENUM: DiagnosticCode.NOT_NAMED_STRUCT,
    Shape.UNION: DiagnosticCode.NOT_NAMED_STRUCT,
    Shape.TUPLE: DiagnosticCode.NOT_NAMED_STRUCT,
    Shape.UNIT: DiagnosticCode.UNIT_STRUCT,
}


@dataclass(frozen=True)
class Diagnostic:
    """A generation-time error attached to a source location."""

    code: DiagnosticCode
    message: str
    span: SourceSpan | None = None
    type_name: str | None = None

    def render(self, path: str | None = None) -> str:
        """Human-readable form, modeled on rustc output."""
        lines = [f"error: {self.message}"]
        if self.span is not None:
            location = str(self.span)
            if path and self.span.path is None:
                location = f"{path}:{location}"
            lines.append(f"  --> {location}")
        return "\n".join(lines)

    def to_compile_error(self) -> str:
        """Token form that makes the host compiler fail with this message."""
        return f'::core::compile_error! {{ "{escape_rust_string(self.message)}" }}'

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"code": str(self.code), "message": self.message}
        if self.type_name is not None:
            data["type_name"] = self.type_name
        if self.span is not None:
            data["line"] = self.span.line
            data["column"] = self.span.column
            if self.span.path is not None:
                data["path"] = self.span.path
        return data


def report(shape: Shape, span: SourceSpan | None, type_name: str | None = None) -> Diagnostic:
    """Build the catalog diagnostic for a rejected ``shape``."""
    code = REJECTIONS[shape]
    return Diagnostic(code=code, message=MESSAGES[code], span=span, type_name=type_name)


def escape_rust_string(text: str) -> str:
    """Escape ``text`` for use inside a Rust string literal."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
