"""Structured logging helpers for gitdrive.

Importing gitdrive never configures logging: module loggers are lazy
structlog proxies, so they render through whatever the host application
passed to ``structlog.configure``. Scripts without their own setup can call
``configure_logging()`` once.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import FilteringBoundLogger

from .config import config


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> FilteringBoundLogger:
    """Install a stderr structlog pipeline.

    Args:
        level: Minimum level name, defaults to ``GITDRIVE_LOG_LEVEL``
        log_format: ``json`` or ``console``, defaults to ``GITDRIVE_LOG_FORMAT``
    """
    level_name = (level or config.logging.log_level).upper()
    threshold = getattr(logging, level_name, logging.INFO)
    renderer_name = (log_format or config.logging.log_format).lower()

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    if renderer_name == "json":
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger("gitdrive")


def get_logger(name: str) -> FilteringBoundLogger:
    """Get a logger bound to ``name`` under the current structlog setup."""
    return structlog.get_logger(name)
