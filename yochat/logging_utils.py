"""Diagnostic logging setup."""

from __future__ import annotations

import os

from loguru import logger
from rich.logging import RichHandler

from yochat.console import make_console

LOG_LEVEL_ENV = "YOCHAT_LOG_LEVEL"
_CONFIGURED_LEVEL: str | None = None


def configure_logging(level: str | None = None) -> None:
    """Send loguru records to stderr through rich, once per process."""
    global _CONFIGURED_LEVEL
    level = (level or os.getenv(LOG_LEVEL_ENV, "WARNING")).upper()
    if level == _CONFIGURED_LEVEL:
        return

    logger.remove()
    logger.add(
        RichHandler(
            console=make_console(stderr=True),
            show_level=True,
            show_time=False,
            show_path=False,
            markup=False,
            rich_tracebacks=False,
        ),
        level=level,
        format="{name}:{function}:{line} | {message}",
        backtrace=False,
        diagnose=False,
    )
    _CONFIGURED_LEVEL = level
