"""Generic signature reconstruction for ``impl`` headers.

The declared parameters are parsed once into :class:`GenericParam` values
and serialized twice: with bounds for the ``impl<...>`` side, bare for the
``Type<...>`` reference. Bounds are copied as opaque text.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from initstate.domain.classifier import ClassifiedStruct
from initstate.domain.declarations import GenericParam, GenericParamKind


@dataclass(frozen=True)
class GenericSignature:
    """The three pieces needed to write ``impl<..> Name<..> where .. { }``.

    ``impl_generics`` and ``type_generics`` are either ``"<...>"`` or empty.
    ``where_clause`` is empty when the declaration has no predicates.
    """

    impl_generics: str = ""
    type_generics: str = ""
    where_clause: tuple[str, ...] = ()


def _ordered(params: Sequence[GenericParam]) -> list[GenericParam]:
    # Lifetimes must precede type and const parameters.
    lifetimes = [p for p in params if p.kind is GenericParamKind.LIFETIME]
    others = [p for p in params if p.kind is not GenericParamKind.LIFETIME]
    return lifetimes + others


def impl_param(param: GenericParam) -> str:
    """Render a parameter with its bounds, without any default."""
    prefix = "".join(f"{attr} " for attr in param.attributes)
    if param.kind is GenericParamKind.CONST:
        return f"{prefix}const {param.name}: {param.bounds}"
    if param.bounds:
        return f"{prefix}{param.name}: {param.bounds}"
    return f"{prefix}{param.name}"


def _wrap(items: Sequence[str]) -> str:
    return f"<{', '.join(items)}>" if items else ""


def split_for_impl(
    generics: Sequence[GenericParam],
    where_clause: Sequence[str] | None = None,
) -> GenericSignature:
    """Split declared generics into impl, type and where parts."""
    ordered = _ordered(generics)
    return GenericSignature(
        impl_generics=_wrap([impl_param(p) for p in ordered]),
        type_generics=_wrap([p.name for p in ordered]),
        where_clause=tuple(p for p in (where_clause or ()) if p.strip()),
    )


def reconstruct(classified: ClassifiedStruct) -> GenericSignature:
    """Generic signature of a classified struct."""
    return split_for_impl(classified.tree.generics, classified.tree.where_clause)
