"""
Logging setup for the dispatch service, built on **loguru**.

Modules log through ``from loguru import logger`` directly. Entry points
(the FastAPI lifespan, the CLI demo) call :func:`setup_logging` once.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

from loguru import logger

_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[agent]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


class _InterceptHandler(logging.Handler):
    """Route stdlib ``logging`` records (uvicorn, httpx, openai) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    level: str = "INFO",
    *,
    intercept_stdlib: bool = True,
    log_file: Optional[str] = None,
) -> None:
    """Configure loguru sinks for the current process.

    Args:
        level: Minimum log level (``DEBUG``, ``INFO``, ``WARNING``, ...).
        intercept_stdlib: Route stdlib ``logging`` through loguru.
        log_file: Optional path to a rotating log file.
    """
    logger.remove()
    logger.configure(extra={"agent": "-"})

    logger.add(
        sys.stderr,
        format=_FORMAT,
        level=level.upper(),
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if log_file:
        logger.add(
            log_file,
            format=_FORMAT,
            level=level.upper(),
            rotation="10 MB",
            retention="7 days",
            compression="gz",
        )

    if intercept_stdlib:
        logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    logger.debug("Logging configured - level={}", level)
