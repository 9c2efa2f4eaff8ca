"""Storage package."""

from epubdate.infrastructure.storage.workspace import Workspace

__all__ = ["Workspace"]
