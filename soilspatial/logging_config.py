# -*- coding: utf-8 -*-
"""Logging setup for soilspatial.

Every module logs through ``logging.getLogger(__name__)``; this module configures the
shared ``soilspatial`` parent logger once.
"""

import logging
import os
from typing import Optional

from soilspatial.config import LOGGING_CONFIG

PACKAGE_LOGGER = "soilspatial"


def setup_logging(log_level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """Configure and return the package logger.

    Parameters:
    -----------
    log_level : str, optional
        Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        If None, uses the level from config.py.
    log_file : str, optional
        Path to a log file. If None, a file is only used when config.py enables it.

    Returns:
    --------
    logger : logging.Logger
        Configured package logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)

    level = log_level or LOGGING_CONFIG.get("level", "INFO")
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    logger.setLevel(numeric_level)

    # Already configured
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        LOGGING_CONFIG.get("log_format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is None and LOGGING_CONFIG.get("log_to_file", False):
        log_file = LOGGING_CONFIG.get("log_file")

    if log_file:
        log_dir = os.path.dirname(str(log_file))
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug(f"Logging initialized at level: {level}")
    return logger
