"""Base transport implementation using Template Method pattern."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Dict, Any

from epubdate.domain.models import HttpResponse
from epubdate.domain.exceptions import TransportError
from epubdate.shared.logging import get_logger

JSON_ACCEPT = "application/json"
# The converted ebook is application/epub+zip, not JSON
DOWNLOAD_ACCEPT = "*/*"


class BaseTransport(ABC):
    """
    Abstract base class for the HTTP backends.

    Handles what every backend shares:
    - resolving API paths against the base URL
    - basic auth credentials (token as username, empty password)
    - request logging and argument checks

    Subclasses only move bytes.
    """

    name = "base"

    def __init__(self, base_url: str, token: str, timeout: float = 300.0):
        """
        Initialize transport.

        Args:
            base_url: API host, e.g. https://bookflow.bookalope.net
            token: Bookalope API token
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.token = token
        self.timeout = timeout
        self._logger = get_logger(self.__class__.__module__)

    @property
    def auth(self):
        return (self.token, '')

    def resolve(self, path_or_url: str) -> str:
        """Absolute URLs pass through, API paths are joined to the base URL."""
        if path_or_url.startswith(('http://', 'https://')):
            return path_or_url
        return f"{self.base_url}/{path_or_url.lstrip('/')}"

    def request(
        self,
        method: str,
        path_or_url: str,
        json_body: Optional[Dict[str, Any]] = None,
        body_file: Optional[Path] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> HttpResponse:
        """
        Send an authenticated request.

        Args:
            method: HTTP method
            path_or_url: API path or absolute URL
            json_body: Body to send as JSON
            body_file: File whose bytes are sent as a JSON body
            headers: Extra request headers

        Returns:
            HttpResponse; non-2xx statuses are returned, not raised

        Raises:
            TransportError: On network or command failure
        """
        if json_body is not None and body_file is not None:
            raise ValueError("Pass either json_body or body_file, not both")

        url = self.resolve(path_or_url)
        self._logger.debug(f"{method.upper()} {url} via {self.name}")

        response = self._send(method.upper(), url, json_body, body_file, dict(headers or {}))

        self._logger.debug(f"{method.upper()} {url} -> {response.status_code} ({len(response.content)} bytes)")
        return response

    def download(self, url: str, destination: Path) -> HttpResponse:
        """
        GET url and write the body to destination without re-encoding.

        Raises:
            TransportError: On network or command failure
        """
        url = self.resolve(url)
        destination.parent.mkdir(parents=True, exist_ok=True)
        self._logger.debug(f"Downloading {url} to {destination} via {self.name}")
        return self._download(url, destination)

    def close(self) -> None:
        """Release connections held by the backend."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @classmethod
    def is_available(cls) -> bool:
        """Check if this backend can be used in current environment."""
        return False

    @abstractmethod
    def _send(
        self,
        method: str,
        url: str,
        json_body: Optional[Dict[str, Any]],
        body_file: Optional[Path],
        headers: Dict[str, str]
    ) -> HttpResponse:
        """Perform one request (implemented by subclasses)."""
        pass

    @abstractmethod
    def _download(self, url: str, destination: Path) -> HttpResponse:
        """Stream one GET response into a file (implemented by subclasses)."""
        pass

    def _fail(self, method: str, url: str, reason: str) -> TransportError:
        message = f"{method} {url} failed: {reason}"
        self._logger.error(message)
        return TransportError(message)
