"""Field selection — partition named fields into checked and excluded.

Selection is driven purely by the presence of the exclusion marker. The
field's type is never looked at.
"""

from __future__ import annotations

from dataclasses import dataclass

from initstate.domain.classifier import ClassifiedStruct
from initstate.domain.declarations import EXCLUSION_MARKER, FieldDeclaration


class InternalError(RuntimeError):
    """An invariant of the generator itself was violated."""


@dataclass(frozen=True)
class FieldSelection:
    """Checked and excluded field identifiers, both in declaration order."""

    checked: tuple[str, ...]
    excluded: tuple[str, ...]


def is_excluded(field: FieldDeclaration) -> bool:
    """Whether ``field`` carries the exclusion marker."""
    return EXCLUSION_MARKER in field.annotations


def field_identifier(field: FieldDeclaration) -> str:
    """Return the field name, failing loudly if a named field has none."""
    if not field.identifier:
        raise InternalError(
            "Unexpected implementation error occurred. Reason: Field "
            f"`{field!r}` is expected to have name while it does not"
        )
    return field.identifier


def select_fields(classified: ClassifiedStruct) -> FieldSelection:
    """Stable partition of ``classified.fields`` by the exclusion marker."""
    checked: list[str] = []
    excluded: list[str] = []
    for field in classified.fields:
        ident = field_identifier(field)
        if is_excluded(field):
            excluded.append(ident)
        else:
            checked.append(ident)
    return FieldSelection(checked=tuple(checked), excluded=tuple(excluded))


def checked_fields(classified: ClassifiedStruct) -> tuple[str, ...]:
    """Identifiers of the fields the generated method checks."""
    return select_fields(classified).checked
