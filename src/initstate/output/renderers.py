"""Rich renderers for expand and check results.

``expand`` output is the generated Rust itself, unwrapped, so stdout can be
redirected into a `.rs` file. ``check`` lists each declaration with its
checked and excluded fields. Failures print the rustc-like diagnostics.
With ``-v`` the span tree follows, one stage per line.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.text import Text

from initstate.output.console import create_console, diagnostic_text, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from initstate.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"
    if result.op == "expand" and "output" not in result.data:
        return str(result.data.get("code", "")).rstrip("\n")
    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item.get("name", "")) for item in items if isinstance(item, dict))
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="is.ok")
    op = Text(f"  {result.op}", style="is.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any, style: str = "") -> None:
    k = Text(f"  {key}:", style="is.key")
    v = Text(str(value), style=style)
    console.print(k, v, end="")
    console.print()


def _names(values: list[str]) -> str:
    return ", ".join(values) if values else "(none)"


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print()
    console.print(Text("  stages:", style="is.key"))
    _render_span(console, result.meta.get("telemetry", {}), depth=2)
    for key, value in result.meta.items():
        if key != "telemetry":
            _field(console, key, value)


def _render_span(console: Console, span: dict[str, Any], depth: int) -> None:
    if not span:
        return
    indent = "  " * depth
    line = f"{indent}{span.get('name', '?')} {span.get('duration_ms', 0.0)}ms"
    annotations = span.get("annotations") or {}
    if annotations:
        line += " (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(Text(line), soft_wrap=True)
    for child in span.get("children", []):
        _render_span(console, child, depth + 1)


# ── Op renderers ──────────────────────────────────────────────────────


def _render_expand(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    data = result.data
    if "output" in data:
        _status_line(console, result)
        _field(console, "count", data.get("count", 0))
        _field(console, "output", data["output"], style="is.path")
    else:
        # Plain code, no wrapping: stdout is meant to be piped into a .rs file.
        console.print(Text(str(data.get("code", "")).rstrip("\n")), soft_wrap=True)
    if verbose:
        _render_meta(console, result)


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for item in result.data.get("items", []):
        header = Text(f"  {item['name']}", style="is.name")
        location = Text(f"  {item.get('path')}:{item.get('line')}", style="is.path")
        console.print(header, location, end="")
        console.print()
        _field(console, "checked", _names(item.get("checked", [])), style="is.checked")
        _field(console, "excluded", _names(item.get("excluded", [])), style="is.excluded")
        if verbose:
            _field(console, "impl", f"impl{item.get('impl_generics', '')}")
            _field(console, "type", f"{item['name']}{item.get('type_generics', '')}")
            for predicate in item.get("where_clause", []):
                _field(console, "where", predicate)
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    label = Text("ERROR", style="is.error")
    message = result.error.message if result.error else "Unknown error"
    console.print(label, Text(f"  {result.op} — {message}"), end="", soft_wrap=True)
    console.print()
    if result.error is None:
        return
    for diagnostic in result.error.detail.get("diagnostics", []):
        rendered = diagnostic.get("rendered", diagnostic.get("message"))
        console.print(diagnostic_text(str(rendered)), soft_wrap=True)
    if verbose:
        for key, value in result.error.detail.items():
            if key not in ("diagnostics", "compile_errors"):
                _field(console, key, value)


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "expand": _render_expand,
    "check": _render_check,
}
