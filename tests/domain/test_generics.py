"""Tests for generic signature reconstruction."""

from __future__ import annotations

from initstate.domain.classifier import ClassifiedStruct
from initstate.domain.declarations import (
    DeclarationTree,
    GenericParam,
    GenericParamKind,
    Shape,
)
from initstate.domain.generics import GenericSignature, impl_param, reconstruct, split_for_impl

LIFETIME = GenericParamKind.LIFETIME
TYPE = GenericParamKind.TYPE
CONST = GenericParamKind.CONST


class TestSplitForImpl:
    def test_no_generics(self) -> None:
        assert split_for_impl(()) == GenericSignature("", "", ())

    def test_lifetimes_and_bounded_type(self) -> None:
        params = (
            GenericParam(LIFETIME, "'a"),
            GenericParam(LIFETIME, "'b"),
            GenericParam(TYPE, "T", bounds="Display + ?Sized"),
            GenericParam(TYPE, "E"),
        )
        signature = split_for_impl(params, ("E: Debug",))
        assert signature.impl_generics == "<'a, 'b, T: Display + ?Sized, E>"
        assert signature.type_generics == "<'a, 'b, T, E>"
        assert signature.where_clause == ("E: Debug",)

    def test_lifetimes_are_moved_first(self) -> None:
        params = (GenericParam(TYPE, "T"), GenericParam(LIFETIME, "'a"))
        signature = split_for_impl(params)
        assert signature.impl_generics == "<'a, T>"
        assert signature.type_generics == "<'a, T>"

    def test_lifetime_bounds_kept_on_impl_side_only(self) -> None:
        params = (GenericParam(LIFETIME, "'a"), GenericParam(LIFETIME, "'b", bounds="'a"))
        signature = split_for_impl(params)
        assert signature.impl_generics == "<'a, 'b: 'a>"
        assert signature.type_generics == "<'a, 'b>"

    def test_defaults_are_dropped(self) -> None:
        params = (
            GenericParam(TYPE, "T", bounds="Clone", default="String"),
            GenericParam(CONST, "N", bounds="usize", default="4"),
        )
        signature = split_for_impl(params)
        assert signature.impl_generics == "<T: Clone, const N: usize>"
        assert signature.type_generics == "<T, N>"

    def test_absent_where_clause_is_empty(self) -> None:
        assert split_for_impl((GenericParam(TYPE, "T"),), None).where_clause == ()

    def test_empty_where_clause_is_omitted(self) -> None:
        assert split_for_impl((GenericParam(TYPE, "T"),), ()).where_clause == ()

    def test_where_predicates_copied_verbatim(self) -> None:
        predicates = ("T: Iterator<Item = u8>", "for<'x> F: Fn(&'x T) -> bool")
        assert split_for_impl((), predicates).where_clause == predicates


class TestImplParam:
    def test_attributes_are_kept(self) -> None:
        param = GenericParam(TYPE, "T", attributes=("#[may_dangle]",))
        assert impl_param(param) == "#[may_dangle] T"


class TestReconstruct:
    def test_reads_classified_struct(self) -> None:
        tree = DeclarationTree(
            name="S",
            shape=Shape.NAMED,
            generics=(GenericParam(TYPE, "T", bounds="Debug"),),
            where_clause=("T: Clone",),
        )
        signature = reconstruct(ClassifiedStruct(tree))
        assert signature == GenericSignature("<T: Debug>", "<T>", ("T: Clone",))
