"""
Logging Configuration
Sets up the package logger for the calculator.
"""
import logging
import os
import sys
from typing import Optional

from .settings import LOG_LEVEL_ENV, LOG_FILE_ENV


def level_from_env(default: int = logging.INFO) -> int:
    """Resolve POND_CALC_LOG_LEVEL (name like 'DEBUG') to a logging level."""
    name = (os.environ.get(LOG_LEVEL_ENV) or "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def setup_logging(level: Optional[int] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the logger for the 'pondcalc' namespace.

    Streamlit re-executes the page script on every interaction, so this is
    safe to call repeatedly: existing handlers are replaced, not stacked.

    Args:
        level: Logging level. Falls back to POND_CALC_LOG_LEVEL, then INFO.
        log_file: Optional path to also write logs to. Falls back to POND_CALC_LOG_FILE.
    """
    if level is None:
        level = level_from_env()
    if log_file is None:
        log_file = os.environ.get(LOG_FILE_ENV) or None

    logger = logging.getLogger("pondcalc")
    logger.setLevel(level)
    logger.propagate = False

    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized (level=%s).", logging.getLevelName(level))
    return logger
