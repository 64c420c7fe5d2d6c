"""Opt-in syntactic lint for checked fields that do not look like ``Option``.

The generator cannot know a field's real type (aliases such as
``type AnOption<T> = Option<T>`` are invisible to it), so these findings
are warnings only. Generated code never depends on them.
"""

from __future__ import annotations

import re

from initstate.domain.classifier import ClassifiedStruct
from initstate.domain.fields import field_identifier, is_excluded

_IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
# Leading `&`, `&'a`, `&mut`, `&'a mut` references.
_REFERENCE_PREFIX = re.compile(rf"^(?:&\s*(?:'{_IDENT}\s*)?(?:mut\s+)?)+")
# Path before the first generic argument list: `std::option::Option`.
_TYPE_PATH = re.compile(rf"^\s*((?:::)?\s*{_IDENT}(?:\s*::\s*{_IDENT})*)")


def looks_optional(type_expression: str) -> bool:
    """Whether the outermost type path (behind references) ends in ``Option``.

    Examples:
        >>> looks_optional("Option<String>")
        True
        >>> looks_optional("&'b ::std::option::Option<E>")
        True
        >>> looks_optional("i32")
        False
    """
    stripped = _REFERENCE_PREFIX.sub("", type_expression.strip())
    match = _TYPE_PATH.match(stripped)
    if match is None:
        return False
    last = match.group(1).replace(" ", "").rsplit("::", 1)[-1]
    return last == "Option"


def option_type_warnings(classified: ClassifiedStruct) -> list[str]:
    """One warning per checked field whose type does not look like ``Option``."""
    warnings: list[str] = []
    for field in classified.fields:
        if is_excluded(field) or looks_optional(field.type_expression):
            continue
        ident = field_identifier(field)
        warnings.append(
            f"{classified.name}.{ident}: type `{field.type_expression}` does not look like "
            "an Option; annotate it with #[ignore_field] if it is not optional"
        )
    return warnings
