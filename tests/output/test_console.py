"""Tests for Rich Console factory and theme."""

from io import StringIO

from rich.text import Text

from initstate.output.console import (
    INITSTATE_THEME,
    create_console,
    diagnostic_text,
    get_output,
)


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        console = create_console()
        assert isinstance(console.file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print(Text("checked", style="is.checked"))
        output = get_output(console)
        assert "\x1b" not in output
        assert "checked" in output

    def test_custom_width(self) -> None:
        assert create_console(width=80).width == 80

    def test_default_width(self) -> None:
        assert create_console().width == 120


class TestGetOutput:
    def test_extracts_printed_text(self) -> None:
        console = create_console(no_color=True)
        console.print("impl S {}")
        assert "impl S {}" in get_output(console)

    def test_empty_console(self) -> None:
        assert get_output(create_console()) == ""


class TestTheme:
    def test_styles_defined(self) -> None:
        for name in ("is.ok", "is.error", "is.warning", "is.checked", "is.excluded"):
            assert name in INITSTATE_THEME.styles


class TestDiagnosticText:
    RENDERED = (
        "error: `CheckInitialState` procedural macro is no allowed for unit structs\n"
        "  --> lib.rs:2:1"
    )

    def test_plain_text_unchanged(self) -> None:
        assert diagnostic_text(self.RENDERED).plain == self.RENDERED

    def test_label_and_location_styled(self) -> None:
        text = diagnostic_text(self.RENDERED)
        styled = {text.plain[span.start : span.end]: span.style for span in text.spans}
        assert styled["error:"] == "is.error"
        assert styled["-->"] == "is.arrow"
        assert styled[" lib.rs:2:1"] == "is.path"

    def test_other_lines_unstyled(self) -> None:
        assert diagnostic_text("note: see above").spans == []
