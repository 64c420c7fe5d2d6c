"""Click command class with an eager ``--examples`` flag.

Examples are ``(command line, what it does)`` pairs, printed as a shell
transcript so ``--help`` can stay short.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click

Example = tuple[str, str]


def format_examples(examples: Sequence[Example]) -> str:
    """Render example pairs as ``$ command`` lines, each followed by its purpose."""
    blocks = [f"  $ {line}\n      {purpose}" for line, purpose in examples]
    return "\n\n".join(blocks)


class InitStateCommand(click.Command):
    """Command whose ``--examples`` prints :attr:`examples` and exits 0."""

    def __init__(self, *args: Any, examples: Sequence[Example] = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples)
        if self.examples:
            self.params.append(
                click.Option(
                    ["--examples"],
                    is_flag=True,
                    expose_value=False,
                    is_eager=True,
                    callback=self._show_examples,
                    help="Show usage examples and exit.",
                )
            )

    def _show_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(format_examples(self.examples))
        ctx.exit(0)
