"""Source rewriting — turn annotated Rust into code the compiler accepts as is.

For every expanded declaration the ``CheckInitialState`` derive entry and
the field-level ``#[ignore_field]`` markers are removed, also from inside
``cfg_attr``, and the generated ``impl`` block is inserted right after the
item. Everything else is kept byte for byte.
"""

from __future__ import annotations

from collections.abc import Sequence

from initstate.domain.declarations import (
    DERIVE_NAME,
    EXCLUSION_MARKER,
    Attribute,
    DeclarationTree,
    derive_segment,
    parse_meta_list,
)
from initstate.domain.emitter import CodeBlock

# (start, end, replacement), applied back to front.
Edit = tuple[int, int, str]


def _removal(source: str, start: int, end: int) -> Edit:
    """Remove ``source[start:end]``, and its whole line if nothing else is on it."""
    line_start = source.rfind("\n", 0, start) + 1
    line_end = source.find("\n", end)
    if line_end == -1:
        line_end = len(source)
    if not source[line_start:start].strip() and not source[end:line_end].strip():
        return (line_start, min(line_end + 1, len(source)), "")
    # Attribute shares its line with code: drop it and the space after it.
    while end < len(source) and source[end] in " \t":
        end += 1
    return (start, end, "")


# Attributes that can carry generator markers.
_MARKER_CARRIERS = frozenset({"derive", "cfg_attr", EXCLUSION_MARKER})


def strip_markers(meta: str, derive_name: str = DERIVE_NAME) -> str | None:
    """``meta`` without the derive entry and ``ignore_field`` markers.

    Returns ``meta`` itself when nothing is removed, and None when nothing is
    left of it.

    Examples:
        >>> strip_markers("derive(Debug, CheckInitialState)")
        'derive(Debug)'
        >>> strip_markers("cfg_attr(test, derive(CheckInitialState))") is None
        True
    """
    if meta.strip() == EXCLUSION_MARKER:
        return None
    parsed = parse_meta_list(meta)
    if parsed is None:
        return meta
    name, arguments = parsed
    if name == "derive":
        remaining = [a for a in arguments if derive_segment(a) != derive_name]
        if len(remaining) == len(arguments):
            return meta
        return f"derive({', '.join(remaining)})" if remaining else None
    if name == "cfg_attr" and len(arguments) >= 2:
        predicate, *inner = arguments
        stripped_inner = (strip_markers(item, derive_name) for item in inner)
        kept = [item for item in stripped_inner if item]
        if kept == inner:
            return meta
        return f"cfg_attr({predicate}, {', '.join(kept)})" if kept else None
    return meta


def _attribute_edit(source: str, attribute: Attribute, derive_name: str) -> Edit | None:
    if attribute.name not in _MARKER_CARRIERS:
        return None
    meta = attribute.meta
    stripped = strip_markers(meta, derive_name)
    if stripped == meta:
        return None
    if stripped is None:
        return _removal(source, attribute.start, attribute.end)
    return (attribute.start, attribute.end, f"#[{stripped}]")


def declaration_edits(
    source: str,
    tree: DeclarationTree,
    block: CodeBlock,
    derive_name: str = DERIVE_NAME,
) -> list[Edit]:
    """Edits that strip generator attributes from ``tree`` and append ``block``."""
    edits: list[Edit] = []
    attributes = list(tree.attributes)
    for field in tree.fields:
        attributes.extend(field.attributes)
    for attribute in attributes:
        edit = _attribute_edit(source, attribute, derive_name)
        if edit is not None:
            edits.append(edit)
    edits.append((tree.end, tree.end, "\n\n" + block.text.rstrip("\n")))
    return edits


def rewrite_source(
    source: str,
    expansions: Sequence[tuple[DeclarationTree, CodeBlock]],
    derive_name: str = DERIVE_NAME,
) -> str:
    """Apply :func:`declaration_edits` for every expansion to ``source``."""
    edits: list[Edit] = []
    for tree, block in expansions:
        edits.extend(declaration_edits(source, tree, block, derive_name))
    result = source
    for start, end, replacement in sorted(edits, key=lambda e: (e[0], e[1]), reverse=True):
        result = result[:start] + replacement + result[end:]
    return result
