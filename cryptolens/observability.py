"""
Cryptolens Logging Setup

Configures structlog once per process. Library code only ever calls
``structlog.get_logger(__name__)``; applications (the CLI, a notebook, a
service embedding the engine) call :func:`configure_logging` at startup.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import structlog

from cryptolens.config import get_settings


def configure_logging(level: Optional[str] = None, json: Optional[bool] = None) -> None:
    """Configure structured logging.

    Args:
        level: Minimum level name (``DEBUG``, ``INFO`` ...). Defaults to
            ``Settings.log_level``.
        json: Render JSON lines instead of the console renderer. Defaults to
            ``Settings.log_json``.
    """
    settings = get_settings()
    level_name = (level or settings.log_level).upper()
    use_json = settings.log_json if json is None else json

    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    structlog.get_logger(__name__).debug(
        "logging_configured", level=level_name, json=use_json,
    )
