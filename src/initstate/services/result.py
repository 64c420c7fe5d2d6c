"""ServiceResult and ServiceError, the contract between services and the CLI.

INVARIANT: service methods return a ServiceResult. A rejected declaration,
an unreadable file or a syntax error is a failed result, never an exception;
only ``InternalError`` escapes.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """Machine-readable failure codes carried by :class:`ServiceError`."""

    INVALID_ARGUMENTS = "INVALID_ARGUMENTS"
    SOURCE_UNREADABLE = "SOURCE_UNREADABLE"
    PARSE_ERROR = "PARSE_ERROR"
    NOT_FOUND = "NOT_FOUND"
    NO_DECLARATIONS = "NO_DECLARATIONS"
    GENERATION_FAILED = "GENERATION_FAILED"


class ServiceError(BaseModel):
    """Failure payload. ``detail`` holds per-code context such as diagnostics."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: ``"expand"`` or ``"check"``.
        data: Generated code and per-declaration reports on success.
        warnings: Lint findings; never fatal.
        error: Set when ``ok`` is False.
        meta: Span tree when telemetry is on.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None


def failure(op: str, code: ErrorCode | str, message: str, **detail: Any) -> ServiceResult:
    """Failed result for *op* with *detail* as the error context."""
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=str(code), message=message, detail=detail),
    )
