"""
Logging Configuration
Sets up the package logger for the application.
"""
from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Optional, Union


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the logger for the 'sketchbox' namespace.

    Args:
        level: Logging level, as a number or a name such as "DEBUG".
        log_file: Optional path to save logs to a file.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger("sketchbox")
    logger.setLevel(level)

    # Avoid duplicate handlers when the app is started twice in one process
    if logger.hasHandlers():
        logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)

    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger


def setup_logging_from_config(config: Dict[str, Any]) -> logging.Logger:
    section = config.get("logging", {}) or {}
    return setup_logging(section.get("level", "INFO"), section.get("file"))
