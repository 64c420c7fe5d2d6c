"""Command: generate check_initial_state() implementations."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from initstate.commands._base import InitStateCommand

if TYPE_CHECKING:
    from initstate.commands._context import AppContext


@click.command(
    cls=InitStateCommand,
    examples=[
        ("initstate expand src/builder.rs", "Print an impl for every deriving struct."),
        (
            "initstate expand src/builder.rs --struct RequestBuilder",
            "Expand one declaration by name.",
        ),
        (
            "initstate expand src/builder.rs --inline -o target/expanded/builder.rs",
            "Write the whole file with the impls spliced in after each struct.",
        ),
        ("cat src/builder.rs | initstate expand -", "Read the source from stdin."),
    ],
)
@click.argument("sources", nargs=-1, required=True)
@click.option("--struct", "struct_name", default=None, help="Expand only this declaration.")
@click.option("--inline", is_flag=True, help="Print the whole source with impls spliced in.")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write generated code to a file instead of stdout.",
)
@click.pass_obj
def expand(
    app: AppContext,
    sources: tuple[str, ...],
    struct_name: str | None,
    inline: bool,
    output: Path | None,
) -> None:
    """Generate check_initial_state() for every struct deriving CheckInitialState."""
    app.emit(app.expander.expand(list(sources), struct=struct_name, inline=inline, output=output))
