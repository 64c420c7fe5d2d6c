"""End-to-end: generated code compiled and run by rustc.

Pipeline: Rust source -> ``initstate expand --inline`` -> ``fn main`` appended
-> rustc -> run the binary. A passing check exits 0; a failing one panics
(exit 101) with the field name in the message.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest
from click.testing import CliRunner

from initstate.cli import cli
from tests import samples

pytestmark = [
    pytest.mark.rustc,
    pytest.mark.skipif(shutil.which("rustc") is None, reason="rustc not installed"),
]

BUILDER_PASSES = """
fn main() {
    Builder { option: None, integer: 10, option2: Some(10) }.check_initial_state();
}
"""

BUILDER_PANICS = """
fn main() {
    Builder { option: Some(1), integer: 10, option2: None }.check_initial_state();
}
"""

GENERICS_PASSES = """
fn main() {
    let none: Option<u8> = None;
    let value = Struct::<'_, '_, str, u8> {
        option: None,
        option2: &none,
        _string: "a",
        _string2: "b",
        _vector: Vec::new(),
    };
    value.check_initial_state();
}
"""

GENERICS_PANICS = """
fn main() {
    let some: Option<u8> = Some(3);
    let value = Struct::<'_, '_, str, u8> {
        option: None,
        option2: &some,
        _string: "a",
        _string2: "b",
        _vector: Vec::new(),
    };
    value.check_initial_state();
}
"""

EMPTY_PASSES = """
fn main() {
    Struct {}.check_initial_state();
}
"""

MIXED_PANICS_ON_FIRST = """
fn main() {
    let value = Struct {
        option: Some(String::new()),
        _other: String::new(),
        option2: Some(1),
        _other2: 0,
    };
    value.check_initial_state();
}
"""

ALL_EXCLUDED_PASSES = """
fn main() {
    Struct { _string: String::from("set"), _integer: 7 }.check_initial_state();
}
"""

EXCLUDED_OPTION = """\
#[derive(CheckInitialState)]
struct Builder {
    option: Option<i32>,
    #[ignore_field]
    option2: Option<i32>,
}
"""

EXCLUDED_OPTION_PASSES = """
fn main() {
    Builder { option: None, option2: Some(10) }.check_initial_state();
}
"""

CALLBACKS_PASSES = """
fn main() {
    let value: Callbacks<fn(u8) -> u8> = Callbacks { on_value: None, on_reset: None, _count: 1 };
    value.check_initial_state();
}
"""

CALLBACKS_PANICS = """
fn reset() -> u8 {
    0
}

fn main() {
    let value: Callbacks<fn(u8) -> u8> = Callbacks {
        on_value: None,
        on_reset: Some(reset),
        _count: 1,
    };
    value.check_initial_state();
}
"""

CONDITIONAL_PASSES = """
fn main() {
    let value = Settings { name: Some(String::from("ignored")), port: None };
    value.check_initial_state();
}
"""


def _expand_inline(runner: CliRunner, project_root: Path, source: str) -> str:
    path = project_root / "input.rs"
    path.write_text(source, encoding="utf-8")
    result = runner.invoke(cli, ["-q", "expand", str(path), "--inline"])
    assert result.exit_code == 0, result.output
    return result.stdout


def _compile(
    project_root: Path, program: str, *cfgs: str
) -> subprocess.CompletedProcess[str]:
    main_rs = project_root / "main.rs"
    main_rs.write_text(program, encoding="utf-8")
    flags = [arg for cfg in cfgs for arg in ("--cfg", cfg)]
    return subprocess.run(
        ["rustc", "--edition", "2021", *flags, "-o", str(project_root / "main"), str(main_rs)],
        capture_output=True,
        text=True,
        check=False,
    )


def _run(project_root: Path) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [str(project_root / "main")], capture_output=True, text=True, check=False
    )


class TestCompiledChecks:
    @pytest.mark.parametrize(
        ("source", "main"),
        [
            (samples.BUILDER, BUILDER_PASSES),
            (samples.GENERICS, GENERICS_PASSES),
            (samples.NO_FIELDS, EMPTY_PASSES),
            (samples.ALL_EXCLUDED, ALL_EXCLUDED_PASSES),
            (EXCLUDED_OPTION, EXCLUDED_OPTION_PASSES),
            (samples.CALLBACKS, CALLBACKS_PASSES),
        ],
        ids=["builder", "generics", "no-fields", "all-excluded", "excluded-option", "fn-bounds"],
    )
    def test_all_none_passes(
        self, cli_runner: CliRunner, project_root: Path, source: str, main: str
    ) -> None:
        program = _expand_inline(cli_runner, project_root, source) + main
        compiled = _compile(project_root, program)
        assert compiled.returncode == 0, compiled.stderr
        assert _run(project_root).returncode == 0

    @pytest.mark.parametrize(
        ("source", "main", "field"),
        [
            (samples.BUILDER, BUILDER_PANICS, "option"),
            (samples.GENERICS, GENERICS_PANICS, "option2"),
            (samples.MIXED, MIXED_PANICS_ON_FIRST, "option"),
            (samples.CALLBACKS, CALLBACKS_PANICS, "on_reset"),
        ],
        ids=["builder", "generics", "first-field-wins", "fn-bounds"],
    )
    def test_some_value_panics(
        self, cli_runner: CliRunner, project_root: Path, source: str, main: str, field: str
    ) -> None:
        program = _expand_inline(cli_runner, project_root, source) + main
        compiled = _compile(project_root, program)
        assert compiled.returncode == 0, compiled.stderr
        run = _run(project_root)
        assert run.returncode == 101
        assert f"Field `{field}` has Some value instead of None" in run.stderr

    def test_unannotated_non_option_fails_to_compile(
        self, cli_runner: CliRunner, project_root: Path
    ) -> None:
        main = "fn main() {}\n"
        program = _expand_inline(cli_runner, project_root, samples.NOT_ANNOTATED) + main
        compiled = _compile(project_root, program)
        assert compiled.returncode != 0
        assert "self.integer" in compiled.stderr


class TestConditionalDerive:
    def test_impl_exists_under_its_cfg(self, cli_runner: CliRunner, project_root: Path) -> None:
        expanded = _expand_inline(cli_runner, project_root, samples.CONDITIONAL)
        program = expanded + CONDITIONAL_PASSES
        compiled = _compile(project_root, program, "test")
        assert compiled.returncode == 0, compiled.stderr
        assert _run(project_root).returncode == 0

    def test_impl_is_absent_without_its_cfg(
        self, cli_runner: CliRunner, project_root: Path
    ) -> None:
        expanded = _expand_inline(cli_runner, project_root, samples.CONDITIONAL)
        program = expanded + CONDITIONAL_PASSES
        compiled = _compile(project_root, program)
        assert compiled.returncode != 0
        assert "check_initial_state" in compiled.stderr
