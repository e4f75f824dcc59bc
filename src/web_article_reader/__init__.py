"""Web Article Reader - Fetch web pages and hand normalized HTML to a readable-content extractor."""

__version__ = "0.1.0"
__author__ = "Biagio Frusteri"
__license__ = "MIT"

from .cancellation import CancelToken
from .config import Config
from .engine import ExtractionEngine
from .exceptions import (
    Cancelled,
    DecodeError,
    FetchError,
    InvalidURL,
    ParseError,
    ReaderError,
    RequestBuildError,
    UnsupportedContentType,
)
from .extractor import TrafilaturaEngine
from .models import Article
from .reader import (
    Reader,
    acquire_from_document,
    acquire_from_stream,
    acquire_from_url,
    check_document,
    check_stream,
)

__all__ = [
    "Article",
    "CancelToken",
    "Cancelled",
    "Config",
    "DecodeError",
    "ExtractionEngine",
    "FetchError",
    "InvalidURL",
    "ParseError",
    "Reader",
    "ReaderError",
    "RequestBuildError",
    "TrafilaturaEngine",
    "UnsupportedContentType",
    "acquire_from_document",
    "acquire_from_stream",
    "acquire_from_url",
    "check_document",
    "check_stream",
]
