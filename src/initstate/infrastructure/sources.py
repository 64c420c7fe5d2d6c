"""Reading Rust sources from disk or stdin."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

STDIN_PATH = "-"


@dataclass(frozen=True)
class SourceFile:
    """Text of one Rust source and the path it was read from."""

    path: str
    text: str

    @property
    def display_path(self) -> str:
        return "<stdin>" if self.path == STDIN_PATH else self.path


def read_source(path: str) -> SourceFile:
    """Read ``path`` as UTF-8, or stdin when ``path`` is ``-``.

    Raises:
        OSError: The file cannot be read.
        UnicodeDecodeError: The file is not valid UTF-8.
    """
    if path == STDIN_PATH:
        return SourceFile(path=path, text=sys.stdin.read())
    return SourceFile(path=path, text=Path(path).read_text(encoding="utf-8"))


def write_output(path: Path, text: str) -> Path:
    """Write generated code to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path
