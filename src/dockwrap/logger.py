"""Structured logging.

Library code logs through ``logger``, a structlog wrapper around the stdlib
``dockwrap`` logger. Importing dockwrap never configures logging; the host
program's structlog and stdlib setup apply. Only the CLI entry point calls
:func:`configure_logging`.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

_stdlib_logger = logging.getLogger("dockwrap")
_stdlib_logger.addHandler(logging.NullHandler())

logger: structlog.stdlib.BoundLogger = structlog.wrap_logger(
    _stdlib_logger, wrapper_class=structlog.stdlib.BoundLogger
)


def configure_logging(level_name: str | None = None) -> None:
    """Console logging for the CLI. *level_name* falls back to LOG_LEVEL, then INFO."""
    level_name = (level_name or os.environ.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    # stderr only: stdout is reserved for the show_output echo
    logging.basicConfig(level=level, format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
