"""Bookalope API token check."""

from epubdate.domain.protocols import ITransport
from epubdate.domain.exceptions import AuthenticationError, TransportError
from epubdate.shared.logging import get_logger

logger = get_logger(__name__)

PROFILE_ENDPOINT = "/api/profile"


def validate(transport: ITransport) -> bool:
    """Return True iff the profile endpoint answers exactly 200 for the transport's token."""
    try:
        response = transport.request('GET', PROFILE_ENDPOINT)
    except TransportError as e:
        logger.warning(f"Profile check failed: {e}")
        return False

    if response.status_code != 200:
        logger.debug(f"Profile check returned HTTP {response.status_code}")
        return False
    return True


def require_valid_credentials(transport: ITransport) -> None:
    """Raise AuthenticationError unless the token validates."""
    if not validate(transport):
        raise AuthenticationError("Wrong Bookalope API token")
