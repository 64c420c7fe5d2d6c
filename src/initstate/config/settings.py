"""Resolved settings for one initstate invocation.

Sources, highest priority first:

1. root CLI flags (``--json``, ``--derive``, ``--lint-types`` ...)
2. ``INITSTATE_*`` environment variables, ``__`` separating nested keys
3. the discovered config file: ``initstate.toml`` or the
   ``initstate`` metadata table of ``Cargo.toml``
4. defaults baked into the section models

Generator overrides given on the command line are merged key by key into
their section, so ``--lint-types`` keeps a configured ``indent``.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from initstate.config.discovery import config_table, find_config
from initstate.config.models import GeneratorConfig, ScanConfig


class ConfigFileSource(PydanticBaseSettingsSource):
    """Settings table from ``initstate.toml`` or a Cargo manifest."""

    def __init__(self, settings_cls: type[BaseSettings], path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if path is None or not path.is_file():
            return
        try:
            self._data = config_table(path)
        except tomllib.TOMLDecodeError as exc:
            raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Config file picked by from_cli(), read while the settings class is built.
_tls = threading.local()


class InitStateSettings(BaseSettings):
    """Frozen settings shared by every command of one invocation.

    Attributes:
        project_root: Directory of the config file in effect, or the CWD.
        config_path: ``initstate.toml`` or ``Cargo.toml`` in effect, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "INITSTATE_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    generator: GeneratorConfig = Field(default_factory=GeneratorConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            ConfigFileSource(settings_cls, getattr(_tls, "config_path", None)),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        derive: str | None = None,
        lint_types: bool | None = None,
        **flags: Any,
    ) -> InitStateSettings:
        """Build settings for a CLI invocation.

        An explicit *config_path* that does not exist means "no config file";
        otherwise the file is discovered by walking up from *project_root*.
        *derive* and *lint_types* override ``scan.derive_name`` and
        ``generator.lint_option_types`` when given.
        """
        path: Path | None
        if config_path:
            path = Path(config_path)
            if not path.is_file():
                path = None
        else:
            path = find_config(project_root)

        if project_root is None:
            project_root = path.parent if path else Path.cwd()

        overrides: dict[str, Any] = dict(flags)
        if derive:
            overrides["scan"] = {"derive_name": derive}
        if lint_types is not None:
            overrides["generator"] = {"lint_option_types": lint_types}

        _tls.config_path = path
        try:
            return cls(project_root=project_root, config_path=path, **overrides)
        finally:
            _tls.config_path = None
