"""Rich console factory, theme and diagnostic styling.

Consoles render into a StringIO buffer so renderers can return plain
strings; Rich drops color codes on its own when the buffer is not a TTY.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.text import Text
from rich.theme import Theme

INITSTATE_THEME = Theme(
    {
        "is.ok": "bold green",
        "is.error": "bold red",
        "is.warning": "bold yellow",
        "is.op": "bold cyan",
        "is.key": "dim",
        "is.name": "bold blue",
        "is.path": "dim",
        "is.arrow": "bold blue",
        "is.checked": "green",
        "is.excluded": "yellow",
    }
)

_ERROR_PREFIX = "error:"
_ARROW = "-->"


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Console writing to a fresh StringIO; 120 columns unless *width* is given."""
    return Console(
        file=StringIO(),
        theme=INITSTATE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def diagnostic_text(rendered: str) -> Text:
    """Style a rustc-like diagnostic: the ``error:`` label and the ``-->`` location.

    The plain text is unchanged, only styles are added.
    """
    text = Text()
    for number, line in enumerate(rendered.split("\n")):
        if number:
            text.append("\n")
        stripped = line.lstrip()
        indent = line[: len(line) - len(stripped)]
        if stripped.startswith(_ERROR_PREFIX):
            text.append(indent)
            text.append(_ERROR_PREFIX, style="is.error")
            text.append(stripped[len(_ERROR_PREFIX) :])
        elif stripped.startswith(_ARROW):
            text.append(indent)
            text.append(_ARROW, style="is.arrow")
            text.append(stripped[len(_ARROW) :], style="is.path")
        else:
            text.append(line)
    return text
