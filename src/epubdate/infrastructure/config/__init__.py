"""Configuration package."""

from epubdate.infrastructure.config.loader import ConfigLoader

__all__ = ["ConfigLoader"]
