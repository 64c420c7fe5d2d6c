"""Output mode dispatch.

The CLI renders ServiceResult for humans (Rich output) or machines
(--json), or as bare code / names (--quiet). The formatter layer adapts
ServiceResult to the requested output mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from initstate.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from initstate.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """Output flags resolved from the CLI."""

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(
    result: ServiceResult,
    *,
    settings: OutputSettings | None = None,
    json_output: bool = False,
) -> str:
    """Format a ServiceResult for display.

    Args:
        result: The service result to format.
        settings: Output flags. When given, *json_output* is ignored.
        json_output: Shorthand for ``OutputSettings(json_output=True)``.
    """
    settings = settings or OutputSettings(json_output=json_output)
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
