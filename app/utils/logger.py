"""Logging configuration."""

import logging
from pathlib import Path
from typing import Optional

from app.models.config import AppConfig

LOGGER_NAME = "wellness"
DEVELOPMENT_CONSOLE_FORMAT = "%(levelname)s: %(message)s"


def _log_file_path(config: AppConfig) -> Optional[Path]:
    """Resolve the log file; bare file names are placed in ``paths.logs``."""
    if not config.logging.file:
        return None

    log_file = Path(config.logging.file)
    if log_file.parent == Path("."):
        log_file = Path(config.paths.logs) / log_file
    return log_file


def setup_logger(config: Optional[AppConfig] = None) -> logging.Logger:
    """
    Configure the application logger.

    Development consoles get short ``LEVEL: message`` lines; production
    consoles use the configured format so lines carry timestamps.

    Args:
        config: Application configuration

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    config = config or AppConfig(logging={"file": None})
    level = getattr(logging, config.logging.level.upper(), logging.INFO)
    logger.setLevel(level)
    logger.propagate = False

    console_format = config.logging.format if config.app.is_production else DEVELOPMENT_CONSOLE_FORMAT
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(console_format))
    logger.addHandler(console_handler)

    log_file = _log_file_path(config)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(config.logging.format))
        logger.addHandler(file_handler)

    logger.debug(f"Logging initialized at {logging.getLevelName(level)}")
    return logger
