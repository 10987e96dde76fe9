"""Logging setup for CLI runs."""

import sys

from loguru import logger

LOG_FORMAT = "<level>{level: <8}</level> | {message}"


def configure_logging(debug: bool = False) -> None:
    """Route loguru output to stderr at INFO, or DEBUG when requested."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug else "INFO", format=LOG_FORMAT)
