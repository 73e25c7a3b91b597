"""Typed errors raised along the forecast fetch path.

Retryability is decided where the error is constructed (response
classification or transport failure) and exposed via ``retryable``.
"""

RETRYABLE_STATUS_CODES = frozenset({503})
MAX_ERROR_BODY_LENGTH = 500


class FourcastError(Exception):
    """Base class for all fourcast errors."""

    retryable: bool = False


class NetworkError(FourcastError):
    """Transport-level failure: timeout, DNS failure, connection refused."""

    def __init__(self, message: str, *, url: str = "", transient: bool = False):
        super().__init__(message)
        self.url = url
        self.retryable = transient


class DeadlineExceeded(NetworkError):
    """The caller's overall deadline ran out before the fetch completed."""

    def __init__(self, message: str, *, url: str = ""):
        super().__init__(message, url=url, transient=False)


class UpstreamError(FourcastError):
    """The provider answered with a non-2xx, non-redirect status."""

    def __init__(self, status: int, *, url: str = "", body: str | None = None):
        self.status = status
        self.url = url
        self.body = body if body and len(body) < MAX_ERROR_BODY_LENGTH else None
        self.retryable = status in RETRYABLE_STATUS_CODES
        message = f"Upstream returned HTTP {status} for {url}"
        if self.body:
            message += f": {self.body}"
        super().__init__(message)


class RedirectLimitExceeded(FourcastError):
    def __init__(self, url: str, max_redirects: int):
        super().__init__(f"Redirect limit of {max_redirects} exceeded at {url}")
        self.url = url
        self.max_redirects = max_redirects


class MalformedResponseError(FourcastError):
    """The provider payload is missing a required structural path."""


class MissingCoordinatesError(FourcastError):
    pass


class ConfigurationError(FourcastError):
    """A required setting (usually a credential) is missing."""


class LocationNotFoundError(FourcastError):
    """The geocoding or place-details collaborator found no match."""


class CorruptRecordError(FourcastError):
    """A stored row could not be decoded back into a Location."""
