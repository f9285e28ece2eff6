"""Exceptions raised by the favicon pipeline.

Fetch-stage failures derive from :class:`FetchError`, extraction-stage failures
from :class:`ExtractError`.  The single-fetch endpoint maps the two families to
different status codes; the batch endpoint collapses both to ``success: 0``.
"""


class FaviconError(Exception):
    """Base class for every pipeline failure."""


class FetchError(FaviconError):
    """The page HTML could not be retrieved."""


class InvalidURLError(FetchError):
    """The URL has no ``http://`` or ``https://`` scheme after normalisation."""


class RequestCreationError(FetchError):
    """The outbound request could not be built (malformed URL characters)."""


class NetworkError(FetchError):
    """Transport-level failure: DNS, connection, TLS, timeout or deadline."""


class HTTPStatusError(FetchError):
    """The target answered with a status other than 200."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"failed to fetch page, status code: {status_code}")
        self.url = url
        self.status_code = status_code


class BodyReadError(FetchError):
    """The response body could not be fully read."""


class ExtractError(FaviconError):
    """The favicon could not be extracted from the fetched HTML."""


class ParseError(ExtractError):
    """The HTML could not be parsed into a document tree."""
