"""Content-encoding normalization of a response body."""

import gzip
import io
import zlib
from contextlib import contextmanager

from .exceptions import DecodeError
from .logger import get_logger

logger = get_logger("encoding")

GZIP = "gzip"
GZIP_MAGIC = b"\x1f\x8b"


class GzipStream(io.RawIOBase):
    """
    Streaming gzip decoder over a body stream.

    A body without the gzip magic number is rejected on construction; corrupt
    data further in fails on the read that reaches it. Closing the stream
    leaves the wrapped body open.
    """

    def __init__(self, body, *, url: str | None = None):
        super().__init__()
        self._url = url
        self._gzip = None
        self._buffer = io.BufferedReader(body)
        try:
            magic = self._buffer.peek(len(GZIP_MAGIC))[: len(GZIP_MAGIC)]
        except Exception:
            self._buffer.detach()
            raise

        if magic != GZIP_MAGIC:
            self._buffer.detach()
            logger.warning("Invalid gzip header", extra={"url": url, "header": magic.hex()})
            raise DecodeError("Failed to create gzip reader: invalid gzip header", url=url)

        self._gzip = gzip.GzipFile(fileobj=self._buffer, mode="rb")

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        with self._decoding():
            return self._gzip.readinto(buffer)

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self._gzip is not None:
                self._gzip.close()
                self._buffer.detach()
        finally:
            super().close()

    @contextmanager
    def _decoding(self):
        try:
            yield
        except (OSError, EOFError, zlib.error) as e:
            logger.warning("Invalid gzip data", extra={"url": self._url, "error": str(e)})
            raise DecodeError(f"Failed to decode gzip data: {e}", url=self._url) from e


def normalize_encoding(body, content_encoding: str | None, *, url: str | None = None):
    """
    Wrap a body so that reads yield the decoded content.

    Only ``gzip`` is decoded; any other value, including none, is treated as
    identity and the body is returned unchanged.

    Args:
        body: Readable binary stream of the encoded body
        content_encoding: Declared ``Content-Encoding`` header value
        url: URL the body came from, for error reporting

    Returns:
        Readable binary stream of the decoded body

    Raises:
        DecodeError: If gzip is declared but the header is not gzip
    """
    if content_encoding == GZIP:
        logger.debug("Decoding gzip body", extra={"url": url})
        return GzipStream(body, url=url)

    if content_encoding:
        logger.debug("Passing body through", extra={"url": url, "content_encoding": content_encoding})
    return body
