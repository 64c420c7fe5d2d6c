"""Shared pytest fixtures and test helpers for initstate tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from initstate.config.settings import InitStateSettings
from initstate.services.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _telemetry_off() -> Generator[None]:
    """``-v`` invocations enable telemetry for the whole context; switch it back off."""
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary working directory with no config file and no config env vars."""
    monkeypatch.delenv("INITSTATE_CONFIG", raising=False)
    for name in ("INITSTATE_GENERATOR__LINT_OPTION_TYPES", "INITSTATE_GENERATOR__INDENT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings(project_root: Path) -> InitStateSettings:
    """Default settings rooted at the temporary project."""
    return InitStateSettings.from_cli(project_root=project_root)


@pytest.fixture
def write_rust(project_root: Path) -> Callable[[str, str], str]:
    """Write a Rust source into the project and return its path as a string."""

    def _write(source: str, name: str = "lib.rs") -> str:
        path = project_root / name
        path.write_text(source, encoding="utf-8")
        return str(path)

    return _write
