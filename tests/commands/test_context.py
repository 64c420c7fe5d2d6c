"""Tests for AppContext result routing."""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest

from initstate.commands._context import AppContext
from initstate.config.settings import InitStateSettings
from initstate.services.expand import ExpandService
from initstate.services.result import ServiceResult, failure


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    root = logging.getLogger()
    handlers = root.handlers[:]
    package_level = logging.getLogger("initstate").level
    yield
    root.handlers = handlers
    logging.getLogger("initstate").setLevel(package_level)


def _app(project_root: Path, **flags: bool) -> AppContext:
    return AppContext(InitStateSettings.from_cli(project_root=project_root, **flags))


class TestExpander:
    def test_created_once(self, project_root: Path) -> None:
        app = _app(project_root)
        assert isinstance(app.expander, ExpandService)
        assert app.expander is app.expander


class TestEmit:
    def test_success_to_stdout(
        self, project_root: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        app = _app(project_root, quiet=True)
        app.emit(ServiceResult(ok=True, op="expand", data={"code": "impl S {}\n"}))
        captured = capsys.readouterr()
        assert "impl S {}" in captured.out
        assert captured.err == ""

    def test_warnings_to_stderr(
        self, project_root: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        app = _app(project_root)
        app.emit(ServiceResult(ok=True, op="check", data={"items": []}, warnings=["S.x: odd"]))
        captured = capsys.readouterr()
        assert "WARNING: S.x: odd" in captured.err
        assert "WARNING" not in captured.out

    def test_quiet_drops_warnings(
        self, project_root: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        app = _app(project_root, quiet=True)
        app.emit(ServiceResult(ok=True, op="check", data={"items": []}, warnings=["S.x: odd"]))
        assert capsys.readouterr().err == ""

    def test_failure_exits_1(
        self, project_root: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        app = _app(project_root)
        with pytest.raises(SystemExit) as excinfo:
            app.emit(failure("expand", "NOT_FOUND", "No declaration named 'X'"))
        assert excinfo.value.code == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "No declaration named 'X'" in captured.err
