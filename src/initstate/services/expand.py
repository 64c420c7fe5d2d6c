"""ExpandService — run the generator over Rust sources.

Pipeline per source: READ → PARSE → SELECT declarations → EXPAND each →
(optionally) REWRITE. A single rejected declaration fails the whole
operation and no code is returned (all-or-nothing, like a failed build).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from initstate.domain.classifier import ClassifiedStruct, classify
from initstate.domain.declarations import DeclarationTree
from initstate.domain.diagnostics import Diagnostic
from initstate.domain.emitter import CodeBlock
from initstate.domain.expansion import expand_declaration
from initstate.domain.fields import select_fields
from initstate.domain.generics import reconstruct
from initstate.domain.lints import option_type_warnings
from initstate.infrastructure.lexer import LexError
from initstate.infrastructure.parser import ParseError, parse_items
from initstate.infrastructure.rewriter import rewrite_source
from initstate.infrastructure.sources import SourceFile, read_source, write_output
from initstate.services.base import BaseService
from initstate.services.result import ErrorCode, ServiceResult, failure
from initstate.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class _Target:
    source: SourceFile
    tree: DeclarationTree


class ExpandService(BaseService):
    """Generate ``check_initial_state`` implementations for derived structs."""

    @traced
    def expand(
        self,
        paths: Sequence[str],
        *,
        struct: str | None = None,
        inline: bool = False,
        output: Path | None = None,
    ) -> ServiceResult:
        """Expand every derived declaration in ``paths`` (or only ``struct``).

        With ``inline`` the result ``code`` is the rewritten source instead of
        the bare ``impl`` blocks; this needs exactly one source.
        """
        op = "expand"
        if inline and len(paths) != 1:
            return failure(op, ErrorCode.INVALID_ARGUMENTS, "--inline takes exactly one source")

        collected = self._collect(op, paths, struct)
        if isinstance(collected, ServiceResult):
            return collected
        sources, targets = collected

        options = self.generator_options
        blocks: list[tuple[_Target, CodeBlock]] = []
        diagnostics: list[tuple[_Target, Diagnostic]] = []
        with trace_span("generate", declarations=len(targets)):
            for target in targets:
                artifact = expand_declaration(target.tree, options, self.derive_name)
                if isinstance(artifact, Diagnostic):
                    diagnostics.append((target, artifact))
                else:
                    blocks.append((target, artifact))

        if diagnostics:
            return self._rejected(op, diagnostics)

        if inline:
            with trace_span("rewrite", edits=len(blocks)):
                code = rewrite_source(
                    sources[0].text,
                    [(target.tree, block) for target, block in blocks],
                    self.derive_name,
                )
        else:
            code = "\n".join(block.text for _, block in blocks)

        data: dict[str, Any] = {
            "count": len(blocks),
            "items": [self._item(target, block) for target, block in blocks],
            "code": code,
        }
        if output is not None:
            with trace_span("write", path=str(output)):
                data["output"] = str(write_output(output, code))
        log.debug("expand.complete", count=len(blocks), inline=inline)
        return ServiceResult(
            ok=True,
            op=op,
            data=data,
            warnings=self._lint([t.tree for t, _ in blocks]),
        )

    @traced
    def check(self, paths: Sequence[str], *, struct: str | None = None) -> ServiceResult:
        """Classify derived declarations and report their field partition."""
        op = "check"
        collected = self._collect(op, paths, struct)
        if isinstance(collected, ServiceResult):
            return collected
        _, targets = collected

        items: list[dict[str, Any]] = []
        diagnostics: list[tuple[_Target, Diagnostic]] = []
        for target in targets:
            classified = classify(target.tree)
            if isinstance(classified, Diagnostic):
                diagnostics.append((target, classified))
                continue
            items.append(self._report(target, classified))

        if diagnostics:
            return self._rejected(op, diagnostics)
        return ServiceResult(
            ok=True,
            op=op,
            data={"count": len(items), "items": items},
            warnings=self._lint([target.tree for target in targets]),
        )

    # ── Internals ─────────────────────────────────────────────────────

    def _collect(
        self,
        op: str,
        paths: Sequence[str],
        struct: str | None,
    ) -> tuple[list[SourceFile], list[_Target]] | ServiceResult:
        sources: list[SourceFile] = []
        targets: list[_Target] = []
        with trace_span("parse", paths=len(paths)) as span:
            for path in paths:
                try:
                    source = read_source(path)
                except (OSError, UnicodeDecodeError) as exc:
                    return failure(
                        op, ErrorCode.SOURCE_UNREADABLE, f"Cannot read {path}: {exc}", path=path
                    )
                display = source.display_path
                try:
                    trees = parse_items(source.text, display)
                except (LexError, ParseError) as exc:
                    return failure(
                        op,
                        ErrorCode.PARSE_ERROR,
                        f"{display}:{exc}",
                        path=display,
                        line=exc.line,
                        column=exc.column,
                    )
                sources.append(source)
                for tree in trees:
                    if struct:
                        selected = tree.name == struct
                    else:
                        selected = tree.derives_name(self.derive_name)
                    if selected:
                        targets.append(_Target(source=source, tree=tree))
            if span:
                span.annotate("sources", len(sources))

        if struct and not targets:
            return failure(
                op, ErrorCode.NOT_FOUND, f"No declaration named {struct!r}", struct=struct
            )
        if not targets:
            return failure(
                op,
                ErrorCode.NO_DECLARATIONS,
                f"No declaration derives {self.derive_name}",
                paths=list(paths),
            )
        return sources, targets

    def _rejected(self, op: str, diagnostics: list[tuple[_Target, Diagnostic]]) -> ServiceResult:
        for target, diagnostic in diagnostics:
            log.warning(
                "expand.rejected",
                type_name=target.tree.name,
                code=str(diagnostic.code),
                path=target.source.display_path,
            )
        return failure(
            op,
            ErrorCode.GENERATION_FAILED,
            f"{len(diagnostics)} declaration(s) rejected",
            diagnostics=[
                {**diagnostic.to_dict(), "rendered": diagnostic.render(target.source.display_path)}
                for target, diagnostic in diagnostics
            ],
            compile_errors=[diagnostic.to_compile_error() for _, diagnostic in diagnostics],
        )

    def _lint(self, trees: list[DeclarationTree]) -> list[str]:
        if not self._settings.generator.lint_option_types:
            return []
        warnings: list[str] = []
        for tree in trees:
            classified = classify(tree)
            if isinstance(classified, ClassifiedStruct):
                warnings.extend(option_type_warnings(classified))
        return warnings

    @staticmethod
    def _item(target: _Target, block: CodeBlock) -> dict[str, Any]:
        tree = target.tree
        return {
            "name": tree.name,
            "path": target.source.display_path,
            "line": tree.span.line if tree.span else None,
            "checked": list(block.checked_fields),
            "code": block.text,
        }

    @staticmethod
    def _report(target: _Target, classified: ClassifiedStruct) -> dict[str, Any]:
        selection = select_fields(classified)
        signature = reconstruct(classified)
        tree = target.tree
        return {
            "name": tree.name,
            "path": target.source.display_path,
            "line": tree.span.line if tree.span else None,
            "checked": list(selection.checked),
            "excluded": list(selection.excluded),
            "impl_generics": signature.impl_generics,
            "type_generics": signature.type_generics,
            "where_clause": list(signature.where_clause),
        }
