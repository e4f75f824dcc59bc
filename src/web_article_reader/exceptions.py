"""Exceptions raised by the acquisition pipeline."""


class ReaderError(Exception):
    """Base class for every failure raised while acquiring an article."""

    def __init__(self, message: str, *, url: str | None = None):
        super().__init__(message)
        self.url = url


class InvalidURL(ReaderError, ValueError):
    """The input is not an absolute URL with a scheme and a host."""


class RequestBuildError(ReaderError):
    """The outbound request could not be constructed."""


class FetchError(ReaderError):
    """Transport failure: DNS, TLS, connection reset or timeout."""

    def __init__(self, message: str, *, url: str | None = None, timed_out: bool = False):
        super().__init__(message, url=url)
        self.timed_out = timed_out


class DecodeError(ReaderError):
    """The response declared gzip encoding but the body is not valid gzip data."""


class UnsupportedContentType(ReaderError):
    """The response content type is not HTML."""

    def __init__(self, message: str, *, url: str | None = None, content_type: str | None = None):
        super().__init__(message, url=url)
        self.content_type = content_type


class ParseError(ReaderError):
    """The extraction engine could not produce an article."""


class Cancelled(ReaderError):
    """The caller cancelled the acquisition."""


__all__ = [
    "ReaderError",
    "InvalidURL",
    "RequestBuildError",
    "FetchError",
    "DecodeError",
    "UnsupportedContentType",
    "ParseError",
    "Cancelled",
]
