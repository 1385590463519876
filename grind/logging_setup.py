"""Logging handlers for the app, configured from AppConfig."""

import logging
import sys
from logging.handlers import RotatingFileHandler

from .config import AppConfig

_HANDLER_TAG = "_grind_handler"


def setup_logging(config: AppConfig, max_bytes: int = 10_000_000, backup_count: int = 5) -> logging.Logger:
    """
    Attach console (and optionally rotating file) handlers to the 'grind' logger.

    Streamlit re-executes the page script on every interaction, so handlers
    installed by an earlier run are detected and not added twice.
    """
    logger = logging.getLogger("grind")
    logger.setLevel(config.log_level)
    if any(getattr(h, _HANDLER_TAG, False) for h in logger.handlers):
        return logger

    formatter = logging.Formatter(config.log_format, datefmt="%Y-%m-%d %H:%M:%S")

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    setattr(console, _HANDLER_TAG, True)
    logger.addHandler(console)

    if config.log_to_file:
        config.log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            config.log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_TAG, True)
        logger.addHandler(handler)

    logger.propagate = False
    return logger
