"""
Structured logging for vnicbox using structlog.

Every module logs through ``structlog.get_logger(__name__)``; the CLI calls
``configure_logging`` once before doing any work. Events go through the
stdlib ``logging`` tree so libvirt's own messages end up in the same place.
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, List, Optional

import structlog

SHARED_PROCESSORS: List[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _handler(handler: logging.Handler, renderer: Any) -> logging.Handler:
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=SHARED_PROCESSORS)
    )
    return handler


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[Path] = None,
) -> None:
    """
    Route structlog through stdlib logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        json_output: Render stderr output as JSON instead of key=value
        log_file: Optional file that receives every event as JSON
    """
    structlog.configure(
        processors=SHARED_PROCESSORS + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handlers = [_handler(logging.StreamHandler(sys.stderr), renderer)]
    if log_file:
        handlers.append(_handler(logging.FileHandler(log_file), structlog.processors.JSONRenderer()))

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level.upper())
    logging.getLogger("libvirt").setLevel(logging.WARNING)


@contextmanager
def run_context(domain_id: str):
    """Bind ``domain_id`` to every log event emitted inside the block."""
    with structlog.contextvars.bound_contextvars(domain_id=domain_id):
        yield


@contextmanager
def log_operation(logger, operation: str, **kwargs):
    """
    Log ``<operation>.started`` and then ``.completed`` or ``.failed``.

    Usage:
        with log_operation(log, "provision_interfaces"):
            ...
    """
    bound = logger.bind(operation=operation, **kwargs)
    started = time.monotonic()
    bound.info(f"{operation}.started")
    try:
        yield bound
    except Exception as e:
        bound.error(
            f"{operation}.failed",
            error=str(e),
            error_type=type(e).__name__,
            duration_ms=_elapsed_ms(started),
        )
        raise
    bound.info(f"{operation}.completed", duration_ms=_elapsed_ms(started))


def _elapsed_ms(started: float) -> float:
    return round((time.monotonic() - started) * 1000, 2)
