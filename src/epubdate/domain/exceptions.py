"""Domain exceptions for the Bookflow conversion workflow."""

from typing import Optional


class EpubdateError(Exception):
    """Base exception for all domain errors."""
    pass


class ConfigurationError(EpubdateError):
    """Raised when configuration is invalid."""
    pass


class AuthenticationError(EpubdateError):
    """Raised when the API token is rejected by the profile endpoint."""
    pass


class TransportError(EpubdateError):
    """Raised when an HTTP call fails at the network or command level."""

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.step = step

    def __str__(self) -> str:
        if self.step:
            return f"{self.step}: {self.message}"
        return self.message


class MalformedResponseError(TransportError):
    """Raised when a response body is not the JSON document we expect."""
    pass


class RemoteFailure(EpubdateError):
    """Raised when Bookalope reports a failed ingestion or conversion."""

    def __init__(self, message: str, step: str, status: str):
        super().__init__(message)
        self.step = step
        self.status = status


class PollTimeoutError(EpubdateError):
    """Raised when a status endpoint never reaches a terminal status."""
    pass


class TransportNotAvailableError(EpubdateError):
    """Raised when requested transport backend is not available."""
    pass
