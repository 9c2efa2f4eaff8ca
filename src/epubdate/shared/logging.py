"""Centralized logging utilities."""

import logging
import sys
from typing import Optional
from pathlib import Path

ROOT_LOGGER = "epubdate"
DEFAULT_FORMAT = '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s'


def setup_logger(
    name: str = ROOT_LOGGER,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Set up a logger with console and optional file output.

    Module loggers created through get_logger() are children of the
    package logger and propagate to the handlers installed here.

    Args:
        name: Logger name
        level: Logging level
        log_file: Optional file to write logs to
        format_string: Custom format string

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt='%H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the package namespace.

    The package logger gets a default console handler the first time
    any module asks for a logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        setup_logger(ROOT_LOGGER)

    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class LoggerAdapter:
    """Adapter to make standard logger compatible with ILogger protocol."""

    def __init__(self, logger: logging.Logger):
        self._logger = logger

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(message, extra=kwargs)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(message, extra=kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._logger.error(message, extra=kwargs)

    def exception(self, message: str, **kwargs) -> None:
        self._logger.exception(message, extra=kwargs)
