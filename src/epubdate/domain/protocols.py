"""Protocol definitions for dependency inversion."""

from typing import Protocol, Optional, Dict, Any, Callable, Iterable
from pathlib import Path
from .models import HttpResponse


class ITransport(Protocol):
    """Interface for authenticated HTTP calls against the Bookalope API."""

    name: str

    def request(
        self,
        method: str,
        path_or_url: str,
        json_body: Optional[Dict[str, Any]] = None,
        body_file: Optional[Path] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> HttpResponse:
        """Send a request and return its status code and body."""
        ...

    def download(self, url: str, destination: Path) -> HttpResponse:
        """Write the response body byte-for-byte to destination."""
        ...

    def close(self) -> None:
        """Release connections held by the backend."""
        ...

    @classmethod
    def is_available(cls) -> bool:
        """Check if this backend can be used in current environment."""
        ...


class IPoller(Protocol):
    """Interface for waiting on a remote status."""

    def poll(
        self,
        check: Callable[[], str],
        terminal: Iterable[str],
        label: str = ...
    ) -> str:
        """Repeat check until it returns a terminal status."""
        ...


class ILogger(Protocol):
    """Interface for logging."""

    def debug(self, message: str, **kwargs) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, **kwargs) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, **kwargs) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, **kwargs) -> None:
        """Log error message."""
        ...

    def exception(self, message: str, **kwargs) -> None:
        """Log exception with traceback."""
        ...


class IMetricsCollector(Protocol):
    """Interface for collecting metrics."""

    def start_timer(self, name: str) -> None:
        """Start a named timer."""
        ...

    def stop_timer(self, name: str) -> float:
        """Stop a named timer and return elapsed time."""
        ...

    def increment_counter(self, name: str, amount: int = 1) -> None:
        """Increment a counter."""
        ...

    def get_summary(self) -> dict:
        """Get summary of all metrics."""
        ...
