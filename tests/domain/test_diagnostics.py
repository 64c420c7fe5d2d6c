"""Tests for the diagnostic catalog and its renderings."""

from __future__ import annotations

from initstate.domain.declarations import Shape, SourceSpan
from initstate.domain.diagnostics import (
    MESSAGES,
    Diagnostic,
    DiagnosticCode,
    escape_rust_string,
    report,
)


class TestCatalog:
    def test_named_fields_message_is_stable(self) -> None:
        assert MESSAGES[DiagnosticCode.NOT_NAMED_STRUCT] == (
            "`CheckInitialState` procedural macro is allowed for structs with named fields only"
        )

    def test_unit_message_keeps_original_wording(self) -> None:
        assert MESSAGES[DiagnosticCode.UNIT_STRUCT] == (
            "`CheckInitialState` procedural macro is no allowed for unit structs"
        )

    def test_report_maps_shapes(self) -> None:
        assert report(Shape.ENUM, None).code is DiagnosticCode.NOT_NAMED_STRUCT
        assert report(Shape.UNION, None).code is DiagnosticCode.NOT_NAMED_STRUCT
        assert report(Shape.TUPLE, None).code is DiagnosticCode.NOT_NAMED_STRUCT
        assert report(Shape.UNIT, None).code is DiagnosticCode.UNIT_STRUCT


class TestRender:
    def test_with_location(self) -> None:
        diagnostic = report(Shape.UNIT, SourceSpan(2, 1), "Marker")
        assert diagnostic.render("src/lib.rs") == (
            "error: `CheckInitialState` procedural macro is no allowed for unit structs\n"
            "  --> src/lib.rs:2:1"
        )

    def test_span_path_wins(self) -> None:
        diagnostic = report(Shape.ENUM, SourceSpan(4, 5, "a.rs"))
        assert diagnostic.render("b.rs").endswith("  --> a.rs:4:5")

    def test_without_location(self) -> None:
        diagnostic = Diagnostic(DiagnosticCode.UNIT_STRUCT, "boom")
        assert diagnostic.render() == "error: boom"

    def test_compile_error_tokens(self) -> None:
        diagnostic = report(Shape.TUPLE, None)
        assert diagnostic.to_compile_error() == (
            '::core::compile_error! { "`CheckInitialState` procedural macro is allowed for '
            'structs with named fields only" }'
        )

    def test_to_dict(self) -> None:
        diagnostic = report(Shape.ENUM, SourceSpan(3, 7, "lib.rs"), "Choice")
        assert diagnostic.to_dict() == {
            "code": "not_named_struct",
            "message": MESSAGES[DiagnosticCode.NOT_NAMED_STRUCT],
            "type_name": "Choice",
            "line": 3,
            "column": 7,
            "path": "lib.rs",
        }


class TestEscape:
    def test_quotes_and_backslashes(self) -> None:
        assert escape_rust_string('a "b" \\ c\n') == 'a \\"b\\" \\\\ c\\n'
