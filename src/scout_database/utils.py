"""Utility functions for scout-database."""

import sys

from loguru import logger


def setup_logging(log_level: str = "INFO", log_to_stdout: bool = False) -> None:
    """Configure the loguru sink.

    Args:
        log_level: Minimum level to emit
        log_to_stdout: Log to stdout instead of stderr
    """
    logger.remove()
    logger.add(
        sys.stdout if log_to_stdout else sys.stderr,
        level=log_level.upper(),
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        backtrace=False,
        diagnose=False,
    )
