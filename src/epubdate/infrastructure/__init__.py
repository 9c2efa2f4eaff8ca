"""Infrastructure layer package."""

from epubdate.infrastructure.config import ConfigLoader
from epubdate.infrastructure.storage import Workspace
from epubdate.infrastructure.transport import BaseTransport, CurlTransport

__all__ = [
    "ConfigLoader",
    "Workspace",
    "BaseTransport",
    "CurlTransport",
]
