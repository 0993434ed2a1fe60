"""Loguru sink configuration for the worker process."""
from __future__ import annotations

import sys

from loguru import logger

from batch_worker.app.config.settings import Settings


def configure_logging(settings: Settings) -> None:
    """Replace loguru's default sink with one honouring LOG_LEVEL / LOG_JSON."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level.strip().upper(),
        serialize=settings.log_json,
        backtrace=False,
        diagnose=False,
    )
