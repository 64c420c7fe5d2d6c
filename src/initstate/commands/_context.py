"""AppContext, the object every subcommand receives through ``@click.pass_obj``."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from initstate.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from initstate.config.settings import InitStateSettings
    from initstate.services.expand import ExpandService
    from initstate.services.result import ServiceResult


class AppContext:
    """Settings plus the services and output routing built from them.

    Logging and telemetry are configured once, here. The expand service is
    created on first use so ``--help`` and ``--examples`` never import the
    Rust front end.
    """

    def __init__(self, settings: InitStateSettings) -> None:
        self.settings = settings
        self._expander: ExpandService | None = None

        from initstate.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose, quiet=settings.quiet, log_json=settings.log_json
        )
        if settings.verbose:
            from initstate.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def expander(self) -> ExpandService:
        if self._expander is None:
            from initstate.services.expand import ExpandService

            self._expander = ExpandService(self.settings)
        return self._expander

    @property
    def output_settings(self) -> OutputSettings:
        return OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )

    def emit(self, result: ServiceResult) -> None:
        """Print *result* and exit 1 if it failed.

        Generated code or reports go to stdout so they can be piped into a
        file. Lint warnings go to stderr as ``WARNING:`` lines, except with
        ``--json`` (they are in the payload) or ``--quiet``. Failures go to
        stderr.
        """
        output_settings = self.output_settings
        output = format_result(result, settings=output_settings)
        if not result.ok:
            click.echo(output, err=True)
            raise SystemExit(1)

        click.echo(output)
        if output_settings.json_output or output_settings.quiet:
            return
        for warning in result.warnings:
            click.echo(f"WARNING: {warning}", err=True)
