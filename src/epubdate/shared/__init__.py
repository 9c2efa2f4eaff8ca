"""Shared utilities package."""

from epubdate.shared.logging import setup_logger, get_logger, LoggerAdapter
from epubdate.shared.metrics import MetricsCollector
from epubdate.shared.polling import StatusPoller

__all__ = [
    "setup_logger",
    "get_logger",
    "LoggerAdapter",
    "MetricsCollector",
    "StatusPoller",
]
