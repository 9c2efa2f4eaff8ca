"""Upgrade and/or fix an EPUB file using the Bookalope cloud service."""

__version__ = "1.0.0"
