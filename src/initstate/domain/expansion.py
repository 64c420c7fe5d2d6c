"""Expansion pipeline — classify, select, reconstruct, emit.

All-or-nothing: the result is either a complete :class:`CodeBlock` or a
single :class:`Diagnostic`, never both.
"""

from __future__ import annotations

from dataclasses import replace

from initstate.domain.classifier import classify
from initstate.domain.declarations import DERIVE_NAME, DeclarationTree
from initstate.domain.diagnostics import Diagnostic
from initstate.domain.emitter import CodeBlock, GeneratorOptions, emit
from initstate.domain.fields import checked_fields
from initstate.domain.generics import reconstruct

GeneratedArtifact = CodeBlock | Diagnostic


def expand_declaration(
    tree: DeclarationTree,
    options: GeneratorOptions | None = None,
    derive_name: str = DERIVE_NAME,
) -> GeneratedArtifact:
    """Generate the validation ``impl`` block for ``tree``, or its diagnostic.

    A derive that only applies under ``cfg_attr`` gates the block with the
    same predicate.
    """
    classified = classify(tree)
    if isinstance(classified, Diagnostic):
        return classified
    checked = checked_fields(classified)
    signature = reconstruct(classified)
    block = emit(classified.name, checked, signature, options)
    condition = tree.derive_condition(derive_name)
    return replace(block, cfg=condition) if condition else block
