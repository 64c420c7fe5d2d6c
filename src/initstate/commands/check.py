"""Command: classify declarations without generating code."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from initstate.commands._base import InitStateCommand

if TYPE_CHECKING:
    from initstate.commands._context import AppContext


@click.command(
    cls=InitStateCommand,
    examples=[
        ("initstate check src/builder.rs", "List checked and excluded fields per struct."),
        (
            "initstate -v check src/builder.rs --struct RequestBuilder",
            "Check one declaration and include stage timings.",
        ),
        ("initstate --json check src/*.rs", "Report every file as JSON."),
    ],
)
@click.argument("sources", nargs=-1, required=True)
@click.option("--struct", "struct_name", default=None, help="Check only this declaration.")
@click.pass_obj
def check(app: AppContext, sources: tuple[str, ...], struct_name: str | None) -> None:
    """Report checked and excluded fields, or why a declaration is rejected."""
    app.emit(app.expander.check(list(sources), struct=struct_name))
