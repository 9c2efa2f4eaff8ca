"""Domain layer package."""

from .models import (
    BookMetadata,
    BookflowState,
    Configuration,
    ConversionResult,
    DownloadDescriptor,
    HttpResponse,
    Job,
    PRODUCTION_HOST,
    BETA_HOST,
)
from .exceptions import (
    EpubdateError,
    ConfigurationError,
    AuthenticationError,
    TransportError,
    MalformedResponseError,
    RemoteFailure,
    PollTimeoutError,
    TransportNotAvailableError,
)
from .protocols import ITransport, IPoller, ILogger, IMetricsCollector

__all__ = [
    # Models
    "BookMetadata",
    "BookflowState",
    "Configuration",
    "ConversionResult",
    "DownloadDescriptor",
    "HttpResponse",
    "Job",
    "PRODUCTION_HOST",
    "BETA_HOST",
    # Exceptions
    "EpubdateError",
    "ConfigurationError",
    "AuthenticationError",
    "TransportError",
    "MalformedResponseError",
    "RemoteFailure",
    "PollTimeoutError",
    "TransportNotAvailableError",
    # Protocols
    "ITransport",
    "IPoller",
    "ILogger",
    "IMetricsCollector",
]
