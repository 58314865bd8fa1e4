"""
Structured Logging
==================

structlog routed through the standard library, so records from httpx,
SQLAlchemy and LangChain share one stream with the workflow's own events.

Production renders JSON lines; every other environment renders colored
key=value console output.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, TextIO
from uuid import uuid4

import structlog

from bragging_rights.config.settings import Settings, get_settings

# Libraries that log every request at INFO
_NOISY_LOGGERS = ("httpx", "httpcore", "asyncio")


def configure_logging(
    settings: Settings | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Configure structlog and the root logger.

    Args:
        settings: Application settings (uses default if not provided)
        stream: Output stream, stdout by default
    """
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level)

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=level,
        force=True,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.is_production:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream is None))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger for a module, typically ``get_logger(__name__)``."""
    return structlog.get_logger(name)


@contextmanager
def run_context(model: str, run_id: str | None = None) -> Iterator[str]:
    """
    Tag every log event emitted inside the block with a run id and model.

    Args:
        model: Generation model of the run
        run_id: Existing run id; a new one is generated when omitted

    Yields:
        The bound run id
    """
    run_id = run_id or uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(run_id=run_id, model=model):
        yield run_id
