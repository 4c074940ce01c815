"""Logging configuration for top-group."""

import logging
import sys
from pathlib import Path


def setup_logger(
    name: str = "topgroup",
    level: int = logging.WARNING,
    log_file: Path | None = None,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Console output goes to stderr so stdout carries only the report.

    Args:
        name: Logger name; the package logger by default.
        level: Console logging level.
        log_file: Optional file that receives DEBUG and above.
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG if log_file else level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt="[%(levelname)s] %(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger
