"""Factory for selecting the HTTP transport backend."""

import os
from typing import Optional

from epubdate.domain.models import Configuration
from epubdate.domain.protocols import ITransport
from epubdate.domain.exceptions import TransportNotAvailableError
from epubdate.infrastructure.transport.curl_backend import CurlTransport
from epubdate.shared.logging import get_logger


class TransportFactory:
    """
    Picks one transport backend per run.

    With prefer='auto' the requests backend is used when the library can be
    imported, otherwise the curl command line client if it is on PATH.

    Override with:
        factory = TransportFactory(prefer='curl')
        # or
        export EPUBDATE_TRANSPORT=curl
    """

    def __init__(self, prefer: Optional[str] = None):
        """
        Initialize factory.

        Args:
            prefer: Backend preference ('auto', 'requests', 'curl').
                    If None, reads from EPUBDATE_TRANSPORT env var.
        """
        self._logger = get_logger(__name__)

        if prefer is None:
            prefer = os.getenv('EPUBDATE_TRANSPORT', 'auto').lower()
            self._logger.debug(f"EPUBDATE_TRANSPORT env={prefer}")

        self.prefer = prefer

    def create(self, base_url: str, token: str, timeout: float = 300.0) -> ITransport:
        """
        Create transport.

        Returns:
            Transport instance

        Raises:
            TransportNotAvailableError: If no requested backend is usable
        """
        if self.prefer not in ('auto', 'requests', 'curl'):
            raise TransportNotAvailableError(f"Unknown transport: {self.prefer}")

        if self.prefer in ('auto', 'requests'):
            try:
                from epubdate.infrastructure.transport.requests_backend import RequestsTransport
                if RequestsTransport.is_available():
                    self._logger.debug("Using requests transport")
                    return RequestsTransport(base_url, token, timeout=timeout)
                self._logger.warning("requests transport is not available")
            except ImportError as e:
                self._logger.warning(f"requests transport import failed: {e}")
            if self.prefer == 'requests':
                raise TransportNotAvailableError("requests transport not available")

        if CurlTransport.is_available():
            self._logger.debug("Using curl transport")
            return CurlTransport(base_url, token, timeout=timeout)

        if self.prefer == 'curl':
            raise TransportNotAvailableError("curl transport not available")
        raise TransportNotAvailableError("Unable to find requests or curl, no transport available")

    @classmethod
    def from_config(cls, config: Configuration) -> ITransport:
        """Create the transport a Configuration asks for."""
        return cls(prefer=config.transport).create(
            config.api_host, config.api_token, timeout=config.request_timeout
        )
