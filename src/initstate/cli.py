"""Root ``initstate`` command group.

Global flags shape output and settings for every subcommand; they go before
the subcommand name (``initstate --json check src/lib.rs``).
"""

from __future__ import annotations

import click
from pydantic import ValidationError

from initstate import __version__
from initstate.commands import register_commands
from initstate.commands._context import AppContext
from initstate.config.settings import InitStateSettings


class InitStateGroup(click.Group):
    """Group that lists subcommands in registration order."""

    def list_commands(self, ctx: click.Context) -> list[str]:
        return list(self.commands)


@click.group(cls=InitStateGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="initstate")
@click.option("--json", "json_output", is_flag=True, help="Print the result as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only code, names or errors.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and stage timings.")
@click.option("--log-json", is_flag=True, help="Write log lines to stderr as JSON.")
@click.option(
    "-c", "--config", "config_path", default=None, help="initstate.toml or Cargo.toml to use."
)
@click.option(
    "--derive",
    default=None,
    metavar="NAME",
    help="Derive name that selects structs (default: CheckInitialState).",
)
@click.option(
    "--lint-types/--no-lint-types",
    default=None,
    help="Warn about checked fields whose type is not an Option.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    derive: str | None,
    lint_types: bool | None,
) -> None:
    """Generate check_initial_state() for Rust structs deriving CheckInitialState."""
    try:
        settings = InitStateSettings.from_cli(
            config_path=config_path,
            derive=derive,
            lint_types=lint_types,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
        )
    except ValidationError as exc:
        raise click.ClickException(f"Invalid settings: {exc}") from exc
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
