"""Structured logging configuration.

Sets up structlog so every publish step is logged as an event with
key/value context, e.g.:
  {"event": "release_created", "tag": "latest", "release_id": 456}

Local runs get a colorized console renderer; CI jobs that set
ENVIRONMENT=production get one JSON object per line.

Usage:
    from ghrelease.logging_config import setup_logging, get_logger

    setup_logging(environment="production")
    logger = get_logger(__name__)
    logger.info("asset_uploaded", name="ghrelease_lin", release_id=456)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def setup_logging(
    environment: str | None = None,
    log_level: str | None = None,
) -> None:
    """Configure structured logging for the CLI.

    Args:
        environment: "development" or "production". Reads from
                     ENVIRONMENT env var if not provided.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
                   Reads from LOG_LEVEL env var if not provided.
    """
    env = environment or os.environ.get("ENVIRONMENT", "development")
    level_name = (log_level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # httpx logs every request through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        A structlog bound logger
    """
    return structlog.get_logger(name)
