"""HTML media-type gate."""

from .config import HTML_MEDIA_TYPE
from .exceptions import UnsupportedContentType
from .logger import get_logger

logger = get_logger("media")


def is_html(content_type: str | None, accepted: str = HTML_MEDIA_TYPE) -> bool:
    # Plain containment: parameters such as charset do not matter, case does.
    return accepted in (content_type or "")


def ensure_html(content_type: str | None, *, url: str | None = None, accepted: str = HTML_MEDIA_TYPE) -> None:
    """
    Reject responses whose declared content type is not HTML.

    Args:
        content_type: Declared ``Content-Type`` header value
        url: URL of the response, for error reporting
        accepted: Media-type token that must appear in the header

    Raises:
        UnsupportedContentType: If ``accepted`` is not contained in the header
    """
    if not is_html(content_type, accepted):
        logger.warning("Not an HTML document", extra={"url": url, "content_type": content_type})
        raise UnsupportedContentType(
            f"URL is not a HTML document: {content_type or 'no content type'}",
            url=url,
            content_type=content_type,
        )
