"""Application layer package."""

from epubdate.application.orchestrator import BookflowOrchestrator
from epubdate.application.factories import TransportFactory
from epubdate.application.credentials import validate, require_valid_credentials

__all__ = ["BookflowOrchestrator", "TransportFactory", "validate", "require_valid_credentials"]
