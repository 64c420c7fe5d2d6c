"""initstate subcommands.

Each module defines one command named after it. Modules are imported only
when the root group registers them.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click

# Listed in the order ``initstate --help`` shows them.
COMMAND_MODULES = ("expand", "check")


def register_commands(cli: click.Group) -> None:
    for name in COMMAND_MODULES:
        module = importlib.import_module(f"initstate.commands.{name}")
        cli.add_command(getattr(module, name))
