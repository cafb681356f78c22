"""
Logging configuration for the watfNURBS namespace.

Modules log through ``logging.getLogger(__name__)``; nothing is printed
unless an application calls setup_logging (or configures logging itself).
"""

import logging
import sys
from typing import Optional


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the logger for the 'watfNURBS' namespace.

    Parameters:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to also write log records to

    Returns:
        The configured package logger
    """
    logger = logging.getLogger("watfNURBS")
    logger.setLevel(level)

    # Avoid duplicate records when called more than once
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized.")
    return logger
