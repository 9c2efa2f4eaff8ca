"""Presentation layer package."""

from epubdate.presentation.cli import main

__all__ = ["main"]
