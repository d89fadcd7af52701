# meshview/logging_config.py
"""
Logging Configuration
Sets up the package logger for applications embedding meshview.
"""
import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV = "MESHVIEW_LOG_LEVEL"


def setup_logging(
    level: int | str | None = None, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configures the logger for the 'meshview' namespace.

    Level precedence: argument > MESHVIEW_LOG_LEVEL > INFO.

    Args:
        level: Logging level (e.g. logging.DEBUG or "DEBUG").
        log_file: Optional path to also write logs to.
    """
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("meshview")
    logger.setLevel(level)

    # Avoid duplicate handlers when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
