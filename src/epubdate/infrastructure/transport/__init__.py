"""HTTP transport backends."""

from epubdate.infrastructure.transport.base import BaseTransport
from epubdate.infrastructure.transport.curl_backend import CurlTransport

__all__ = [
    "BaseTransport",
    "CurlTransport",
]
