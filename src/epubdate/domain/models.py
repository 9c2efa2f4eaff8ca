"""Domain models for the Bookflow conversion workflow."""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Dict, Any, FrozenSet

from .exceptions import ConfigurationError, MalformedResponseError

PRODUCTION_HOST = "https://bookflow.bookalope.net"
BETA_HOST = "https://beta.bookalope.net"

TOKEN_PATTERN = re.compile(r"^[0-9a-fA-F]{32}$")

TRANSPORT_CHOICES = ("auto", "requests", "curl")


class BookflowState:
    """Status strings reported by the Bookflow and download endpoints."""

    PROCESSING = "processing"

    # Ingest phase (bookflow.step)
    CONVERT = "convert"
    PROCESSING_FAILED = "processing_failed"

    # Conversion phase (download status)
    OK = "ok"
    FAILED = "failed"

    INGEST_TERMINAL: FrozenSet[str] = frozenset({CONVERT, PROCESSING_FAILED})
    CONVERSION_TERMINAL: FrozenSet[str] = frozenset({OK, FAILED})


@dataclass(frozen=True)
class BookMetadata:
    """Client-supplied ebook metadata; the EPUB's own metadata wins on conflict."""

    title: Optional[str] = None
    author: Optional[str] = None
    isbn: Optional[str] = None
    publisher: Optional[str] = None

    def as_payload(self) -> Dict[str, str]:
        """Render metadata for the API, absent fields as empty strings."""
        return {
            'title': self.title or "",
            'author': self.author or "",
            'isbn': self.isbn or "",
            'publisher': self.publisher or "",
        }


@dataclass(frozen=True)
class Configuration:
    """Immutable run configuration, built once and passed explicitly."""

    api_token: str
    input_file: Path
    api_host: str = PRODUCTION_HOST
    keep_remote: bool = False
    metadata: BookMetadata = field(default_factory=BookMetadata)

    # Polling
    poll_ticks: int = 5
    tick_seconds: float = 0.25
    max_polls: Optional[int] = 720

    # Transport
    transport: str = "auto"
    request_timeout: float = 300.0

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if not isinstance(self.api_token, str) or not TOKEN_PATTERN.fullmatch(self.api_token):
            raise ConfigurationError("Malformed Bookalope API token")

        if not self.input_file.is_file():
            raise ConfigurationError(f"Ebook file {self.input_file} does not exist")

        if not self.api_host.startswith(("http://", "https://")):
            raise ConfigurationError(f"Invalid API host: {self.api_host}")

        if self.poll_ticks <= 0:
            raise ConfigurationError(f"Poll ticks must be positive, got: {self.poll_ticks}")

        if self.tick_seconds < 0:
            raise ConfigurationError(f"Tick seconds cannot be negative, got: {self.tick_seconds}")

        if self.max_polls is not None and self.max_polls <= 0:
            raise ConfigurationError(f"Max polls must be positive, got: {self.max_polls}")

        if self.transport not in TRANSPORT_CHOICES:
            raise ConfigurationError(f"Invalid transport: {self.transport}")

        if self.request_timeout <= 0:
            raise ConfigurationError(f"Request timeout must be positive, got: {self.request_timeout}")

    @property
    def book_name(self) -> str:
        """Book name sent to the server: the input filename without extension."""
        return self.input_file.stem


@dataclass(frozen=True)
class Job:
    """A remote Book and its initial Bookflow; identifiers are opaque."""

    book_id: str
    bookflow_id: str

    def __str__(self) -> str:
        return f"Book id={self.book_id}, Bookflow id={self.bookflow_id}"


@dataclass(frozen=True)
class DownloadDescriptor:
    """Where the converted ebook can be fetched once conversion is done."""

    download_url: str

    @property
    def status_url(self) -> str:
        return f"{self.download_url.rstrip('/')}/status"


@dataclass(frozen=True)
class HttpResponse:
    """Status code and raw body bytes of one HTTP call."""

    status_code: int
    content: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        """Decode the body as JSON."""
        try:
            return json.loads(self.content.decode('utf-8'))
        except (UnicodeDecodeError, ValueError) as e:
            raise MalformedResponseError(f"Response is not valid JSON: {e}") from e


@dataclass
class ConversionResult:
    """Result of a completed Bookflow run."""

    output_path: Path
    job: Job
    download_url: str
    remote_deleted: bool = False
    continuation_url: Optional[str] = None
    metrics: Dict[str, Any] = field(default_factory=dict)
