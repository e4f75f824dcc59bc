"""URL validation performed before any network activity."""

from urllib.parse import SplitResult, urlsplit

from .exceptions import InvalidURL
from .logger import get_logger

logger = get_logger("validation")


def validate_url(url: str) -> SplitResult:
    """
    Check that a string is an absolute request URL.

    Args:
        url: Candidate URL

    Returns:
        The parsed URL

    Raises:
        InvalidURL: If the scheme or host is missing or the URL is malformed
    """
    if not url or not isinstance(url, str):
        raise InvalidURL("Empty or invalid URL", url=url if isinstance(url, str) else None)

    if any(ch.isspace() for ch in url):
        logger.warning("URL contains whitespace", extra={"url": url})
        raise InvalidURL(f"URL contains whitespace: {url!r}", url=url)

    try:
        parsed = urlsplit(url)
        # Accessing .port validates it.
        parsed.port
    except ValueError as e:
        logger.warning("URL parsing failed", extra={"url": url, "error": str(e)})
        raise InvalidURL(f"Failed to parse URL: {e}", url=url) from e

    if not parsed.scheme:
        logger.warning("URL has no scheme", extra={"url": url})
        raise InvalidURL(f"URL has no scheme: {url!r}", url=url)

    if not parsed.netloc or not parsed.hostname:
        logger.warning("URL has no host", extra={"url": url})
        raise InvalidURL(f"URL has no host: {url!r}", url=url)

    return parsed
