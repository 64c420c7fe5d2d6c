"""Span timing for service operations.

Off by default; ``-v`` turns it on for the invocation. While off, ``@traced``
and ``trace_span`` cost one ContextVar lookup. While on, each traced service
call builds a span tree (parse, generate, rewrite, write) that ends up in
``ServiceResult.meta["telemetry"]`` and in a ``span.complete`` debug event.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from initstate.services.result import ServiceResult

log = structlog.get_logger("initstate.telemetry")

_enabled: ContextVar[bool] = ContextVar("_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


@dataclass
class Span:
    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@contextmanager
def trace_span(name: str, **annotations: Any) -> Generator[Span | None]:
    """Time a pipeline stage as a child of the running traced call.

    *annotations* are recorded up front; the stage may add more through the
    yielded span. Yields None when telemetry is off or nothing is traced.
    """
    parent = _current_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    child = Span(name=name, parent=parent, annotations=dict(annotations))
    parent.children.append(child)
    token = _current_span.set(child)
    try:
        yield child
    finally:
        child.end()
        _current_span.reset(token)


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Record a root span around a service method.

    A returned ServiceResult gets the span tree in ``meta["telemetry"]``,
    with its ``op`` and ``ok`` copied onto the root span.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        span = Span(name=func.__qualname__)
        token = _current_span.set(span)
        ok = False
        try:
            result = func(*args, **kwargs)
            if isinstance(result, ServiceResult):
                ok = result.ok
                span.annotate("op", result.op)
                span.annotate("ok", result.ok)
            else:
                ok = True
        finally:
            span.end()
            _current_span.reset(token)
            log.debug(
                "span.complete",
                span_name=span.name,
                duration_ms=round(span.duration_ms, 2),
                ok=ok,
                stages=[child.name for child in span.children],
            )

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": span.to_dict()}
            return result.model_copy(update={"meta": meta})  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)
