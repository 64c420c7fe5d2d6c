"""structlog setup for initstate.

Generated Rust goes to stdout, so every log line goes to stderr. The
``initstate`` loggers follow the CLI verbosity:

=========  ========
flags      level
=========  ========
``-v``     DEBUG
(none)     WARNING
``-q``     ERROR
=========  ========

Everything else stays at WARNING.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def package_level(*, verbose: bool = False, quiet: bool = False) -> int:
    """Level for the ``initstate`` loggers; ``verbose`` wins over ``quiet``."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def _renderer(log_json: bool, stream: TextIO) -> structlog.types.Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one stderr handler.

    Safe to call repeatedly: the root handler is replaced, not stacked.
    """
    stream = stream or sys.stderr

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json, stream),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)
    logging.getLogger("initstate").setLevel(package_level(verbose=verbose, quiet=quiet))
