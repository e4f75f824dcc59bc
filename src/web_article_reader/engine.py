"""Interface of the content-extraction engine the pipeline dispatches to."""

from typing import BinaryIO, Protocol, runtime_checkable

from lxml.html import HtmlElement

from .models import Article


@runtime_checkable
class ExtractionEngine(Protocol):
    """Pluggable readable-content extractor."""

    def parse(self, stream: BinaryIO, url: str | None) -> Article:
        """Extract an article from an HTML byte stream; raises ParseError on failure."""
        ...

    def parse_document(self, tree: HtmlElement, url: str | None) -> Article:
        """Extract an article from a parsed document; raises ParseError on failure."""
        ...

    def check(self, stream: BinaryIO) -> bool:
        """Report whether the stream is probably readable, without building an article."""
        ...

    def check_document(self, tree: HtmlElement) -> bool:
        """Report whether the document is probably readable, without building an article."""
        ...
