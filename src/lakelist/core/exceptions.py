"""Exception hierarchy for lakelist."""

from typing import Optional


class LakelistError(Exception):
    """Base exception for all lakelist errors."""

    pass


class ValidationError(LakelistError):
    """Raised when validation fails."""

    pass


class ConfigError(LakelistError):
    """Raised when a required credential or region is missing."""

    pass


class ListError(LakelistError):
    """Base exception for failures while talking to an object store."""

    pass


class TransportError(ListError):
    """Raised when a request to the object store fails."""

    pass


class RedirectLoopError(ListError):
    """Raised when a redirect is received after the endpoint was already corrected."""

    pass


class ParseError(ListError):
    """Raised when a response body cannot be parsed."""

    pass


class ObjectNotFoundError(ListError):
    """Raised when an object does not exist.

    ``headers`` holds the HTTP headers of the not-found response, if any.
    """

    def __init__(self, message: str, headers: Optional[dict[str, str]] = None):
        super().__init__(message)
        self.headers = dict(headers or {})
