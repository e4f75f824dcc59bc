"""Article extraction with trafilatura over lxml documents."""

import json
from copy import deepcopy
from typing import BinaryIO

import trafilatura
from dateutil import parser as date_parser
from lxml import etree
from lxml.html import HtmlElement, document_fromstring

from .exceptions import ParseError
from .logger import get_logger
from .models import Article
from .readerable import is_probably_readerable

logger = get_logger("extractor")


def normalize_date(date_str: str | None) -> str | None:
    """
    Normalize date to ISO 8601 format.

    Args:
        date_str: Date string in any format

    Returns:
        ISO 8601 formatted date string or None
    """
    if not date_str:
        return None

    try:
        parsed_date = date_parser.parse(date_str)
        return parsed_date.date().isoformat()
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug("Date normalization failed", extra={"date_str": date_str, "error": str(e)})
        return None


def load_document(data: bytes, url: str | None = None) -> HtmlElement:
    """
    Parse raw HTML bytes into an lxml document.

    Raises:
        ParseError: If the input is empty or not parseable as HTML
    """
    if not data or not data.strip():
        raise ParseError("Empty document", url=url)
    try:
        return document_fromstring(data)
    except (etree.ParserError, ValueError) as e:
        raise ParseError(f"Failed to parse HTML: {e}", url=url) from e


class TrafilaturaEngine:
    """Extract readable content using trafilatura."""

    def __init__(self, min_text_length: int = 0, include_tables: bool = True):
        """
        Initialize extraction engine.

        Args:
            min_text_length: Shortest extracted text accepted as an article
            include_tables: Keep table content in the extracted text
        """
        self.min_text_length = min_text_length
        self.include_tables = include_tables

    def parse(self, stream: BinaryIO, url: str | None) -> Article:
        """
        Extract an article from an HTML byte stream.

        Args:
            stream: Readable binary stream with the page HTML
            url: URL the page was resolved from

        Returns:
            Extracted Article

        Raises:
            ParseError: If nothing readable is found
        """
        tree = load_document(stream.read(), url)
        return self.parse_document(tree, url)

    def parse_document(self, tree: HtmlElement, url: str | None) -> Article:
        """
        Extract an article from a parsed document.

        The caller's tree is left untouched; trafilatura works on a copy.

        Args:
            tree: Parsed HTML document
            url: URL the page was resolved from

        Returns:
            Extracted Article

        Raises:
            ParseError: If nothing readable is found
        """
        result = trafilatura.extract(
            deepcopy(tree),
            url=url,
            output_format="json",
            with_metadata=True,
            include_comments=False,
            include_tables=self.include_tables,
        )
        if not result:
            logger.debug("Trafilatura found no content", extra={"url": url})
            raise ParseError("No readable content found", url=url)

        try:
            data = json.loads(result)
        except json.JSONDecodeError as e:
            raise ParseError(f"Malformed extraction result: {e}", url=url) from e

        text = (data.get("text") or "").strip()
        if not text or len(text) < self.min_text_length:
            logger.debug("Insufficient text from trafilatura", extra={"url": url, "text_length": len(text)})
            raise ParseError("Insufficient readable content", url=url)

        article = Article(
            url=url,
            title=data.get("title"),
            text=text,
            byline=data.get("author"),
            excerpt=data.get("excerpt"),
            site_name=data.get("source-hostname") or data.get("hostname"),
            image=data.get("image"),
            language=data.get("language"),
            published_time=normalize_date(data.get("date")),
        )
        logger.info("Extraction successful", extra={"url": url, "text_length": article.length})
        return article

    def check(self, stream: BinaryIO) -> bool:
        """Report whether an HTML byte stream is probably readable."""
        try:
            tree = load_document(stream.read())
        except ParseError:
            return False
        return self.check_document(tree)

    def check_document(self, tree: HtmlElement) -> bool:
        """Report whether a parsed document is probably readable."""
        return is_probably_readerable(tree)
