"""Acquisition pipeline: validate, fetch, decode, gate, then dispatch to an engine."""

from contextlib import ExitStack
from typing import BinaryIO

from lxml.html import HtmlElement

from .cancellation import CancelToken
from .config import Config
from .encoding import normalize_encoding
from .engine import ExtractionEngine
from .extractor import TrafilaturaEngine
from .logger import get_logger
from .media import ensure_html
from .models import Article
from .transport import HTTPTransport
from .validation import validate_url

logger = get_logger("reader")


class Reader:
    """
    Turn a URL, stream or document into an Article.

    A Reader holds no per-request state, so one instance may serve many calls
    and threads as long as its engine allows it.
    """

    def __init__(
        self,
        engine: ExtractionEngine | None = None,
        config: Config | None = None,
        transport_factory=HTTPTransport,
    ):
        """
        Initialize reader.

        Args:
            engine: Extraction engine. If None, a TrafilaturaEngine is created.
            config: Pipeline settings. If None, defaults are used.
            transport_factory: Callable ``(timeout, cancel_token=...)`` returning a transport
        """
        self.config = config or Config()
        if engine is None:
            engine = TrafilaturaEngine(min_text_length=self.config.min_text_length)
        self.engine = engine
        self.transport_factory = transport_factory

    def acquire_from_url(
        self,
        url: str,
        timeout: float | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Article:
        """
        Fetch a page and extract its readable content.

        Args:
            url: Absolute URL of the page
            timeout: Seconds allowed for the request, defaults to the configured timeout;
                0 means no timeout
            cancel_token: Optional token to abort the acquisition from another thread

        Returns:
            Article produced by the engine

        Raises:
            InvalidURL: If the URL is not absolute
            RequestBuildError: If the request cannot be built
            FetchError: On transport failures and timeouts
            DecodeError: If a gzip body is not valid gzip
            UnsupportedContentType: If the response is not HTML
            ParseError: If the engine finds nothing readable
            Cancelled: If ``cancel_token`` fires
        """
        validate_url(url)
        timeout = self.config.timeout if timeout is None else timeout
        transport = self.transport_factory(timeout, cancel_token=cancel_token)

        logger.info("Starting acquisition", extra={"url": url, "timeout": timeout})
        with ExitStack() as stack:
            response = transport.execute(url)
            stack.callback(response.close)

            stream = normalize_encoding(response.body, response.content_encoding, url=url)
            if stream is not response.body:
                # Registered last so it closes before the body.
                stack.callback(stream.close)

            ensure_html(response.content_type, url=url, accepted=self.config.accepted_media_type)
            return self.engine.parse(stream, url)

    def acquire_from_stream(self, stream: BinaryIO, resolved_url: str | None) -> Article:
        """
        Extract readable content from an open HTML byte stream.

        The stream stays owned by the caller and is not closed.
        """
        return self.engine.parse(stream, resolved_url)

    def acquire_from_document(self, tree: HtmlElement, resolved_url: str | None) -> Article:
        """Extract readable content from a parsed document."""
        return self.engine.parse_document(tree, resolved_url)

    def check_stream(self, stream: BinaryIO) -> bool:
        """Report whether an HTML byte stream is probably readable."""
        return self.engine.check(stream)

    def check_document(self, tree: HtmlElement) -> bool:
        """Report whether a parsed document is probably readable."""
        return self.engine.check_document(tree)


def acquire_from_url(url: str, timeout: float | None = None, cancel_token: CancelToken | None = None) -> Article:
    """Fetch a page with a fresh default Reader and extract its readable content."""
    return Reader().acquire_from_url(url, timeout, cancel_token=cancel_token)


def acquire_from_stream(stream: BinaryIO, resolved_url: str | None) -> Article:
    """Extract readable content from a stream with a fresh default Reader."""
    return Reader().acquire_from_stream(stream, resolved_url)


def acquire_from_document(tree: HtmlElement, resolved_url: str | None) -> Article:
    """Extract readable content from a document with a fresh default Reader."""
    return Reader().acquire_from_document(tree, resolved_url)


def check_stream(stream: BinaryIO) -> bool:
    """Check a stream with a fresh default Reader."""
    return Reader().check_stream(stream)


def check_document(tree: HtmlElement) -> bool:
    """Check a document with a fresh default Reader."""
    return Reader().check_document(tree)
