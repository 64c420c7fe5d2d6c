"""Declaration classification — is this item a struct with named fields?

Pure functions, no infrastructure dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass

from initstate.domain.declarations import DeclarationTree, FieldDeclaration, Shape
from initstate.domain.diagnostics import Diagnostic, report


@dataclass(frozen=True)
class ClassifiedStruct:
    """A declaration known to be a struct with named fields (possibly zero)."""

    tree: DeclarationTree

    @property
    def name(self) -> str:
        return self.tree.name

    @property
    def fields(self) -> tuple[FieldDeclaration, ...]:
        return self.tree.fields


def classify(tree: DeclarationTree) -> ClassifiedStruct | Diagnostic:
    """Accept named-field structs, reject every other shape with a diagnostic.

    Tuple structs are reported at their field list. Enums, unions and unit
    structs are reported at the start of the whole declaration, which is its
    first outer attribute when it has one.
    """
    if tree.shape is Shape.NAMED:
        return ClassifiedStruct(tree)
    span = tree.shape_span if tree.shape is Shape.TUPLE and tree.shape_span else tree.start_span
    return report(tree.shape, span, type_name=tree.name)
