"""Single-request HTTP transport built on requests."""

import io
import socket
import threading

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3 import HTTPConnectionPool, HTTPSConnectionPool

from .cancellation import CancelToken
from .config import DEFAULT_TIMEOUT
from .exceptions import Cancelled, FetchError, RequestBuildError
from .logger import get_logger

logger = get_logger("transport")

ACCEPT_ENCODING = "gzip"


def build_request(url: str) -> requests.PreparedRequest:
    """
    Build the GET request for a page.

    The request carries exactly one header, advertising gzip support.

    Args:
        url: Validated absolute URL

    Returns:
        Prepared request, ready to send

    Raises:
        RequestBuildError: If requests refuses the URL or header
    """
    try:
        request = requests.Request("GET", url, headers={"Accept-Encoding": ACCEPT_ENCODING})
        return request.prepare()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Request construction failed", extra={"url": url, "error": str(e)})
        raise RequestBuildError(f"Failed to create request: {e}", url=url) from e


class ResponseBody(io.RawIOBase):
    """
    Still-encoded response body.

    Every read checks the cancel token first. Transport errors raised while
    draining the body surface as FetchError.
    """

    def __init__(self, raw, *, url: str | None = None, cancel_token: CancelToken | None = None, on_close=None):
        super().__init__()
        self._raw = raw
        self._url = url
        self._cancel_token = cancel_token
        self._on_close = on_close

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self._cancel_token is not None:
            self._cancel_token.raise_if_cancelled(self._url)
        try:
            data = self._raw.read(len(buffer))
        except (urllib3.exceptions.HTTPError, OSError, ValueError) as e:
            if self._cancel_token is not None and self._cancel_token.cancelled:
                raise Cancelled("Acquisition cancelled", url=self._url) from e
            timed_out = isinstance(e, (urllib3.exceptions.TimeoutError, socket.timeout))
            logger.warning(
                "Reading response body failed",
                extra={"url": self._url, "error": str(e), "timed_out": timed_out},
            )
            raise FetchError(f"Failed to read the page: {e}", url=self._url, timed_out=timed_out) from e

        # A cancelled read may come back short instead of failing.
        if self._cancel_token is not None:
            self._cancel_token.raise_if_cancelled(self._url)

        data = data or b""
        size = len(data)
        buffer[:size] = data
        return size

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self._on_close is not None:
                self._on_close()
        finally:
            super().close()


class ResponseHandle:
    """
    A fetched response: its body stream and the two headers the pipeline reads.

    The handle owns the response and its session; :meth:`close` releases both
    exactly once.
    """

    def __init__(self, response: requests.Response, session, *, cancel_token: CancelToken | None = None):
        self.response = response
        self.url = response.url
        self.status_code = response.status_code
        # Surrounding whitespace is not part of a header value.
        self.content_encoding = response.headers.get("Content-Encoding", "").strip()
        self.content_type = response.headers.get("Content-Type", "").strip()

        self._session = session
        self._cancel_token = cancel_token
        self._lock = threading.Lock()
        self._released = False
        self.body = ResponseBody(response.raw, url=self.url, cancel_token=cancel_token, on_close=self._release)

        if cancel_token is not None:
            cancel_token.register(self._abort)

    @property
    def closed(self) -> bool:
        return self._released

    def close(self) -> None:
        self.body.close()

    def _abort(self) -> None:
        # Runs on the cancelling thread; closing the raw stream unblocks a pending read.
        raw = self.response.raw
        if raw is not None:
            raw.close()

    def _release(self) -> None:
        with self._lock:
            if self._released:
                return
            self._released = True
        if self._cancel_token is not None:
            self._cancel_token.unregister(self._abort)
        try:
            self.response.close()
        finally:
            self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def _tracking_pool(pool_cls, track):
    class TrackingPool(pool_cls):
        def _new_conn(self):
            conn = super()._new_conn()
            track(conn)
            return conn

    return TrackingPool


class CancellableAdapter(HTTPAdapter):
    """
    HTTPAdapter that remembers the connections it opens.

    :meth:`abort` shuts their sockets down, which wakes a thread blocked
    waiting for response headers.
    """

    def __init__(self, *args, **kwargs):
        # init_poolmanager runs inside HTTPAdapter.__init__.
        self._connections = []
        self._connections_lock = threading.Lock()
        super().__init__(*args, **kwargs)

    def init_poolmanager(self, *args, **kwargs):
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = {
            "http": _tracking_pool(HTTPConnectionPool, self._track),
            "https": _tracking_pool(HTTPSConnectionPool, self._track),
        }

    def _track(self, conn) -> None:
        with self._connections_lock:
            self._connections.append(conn)

    def abort(self) -> None:
        with self._connections_lock:
            connections = list(self._connections)
        for conn in connections:
            sock = getattr(conn, "sock", None)
            if sock is None:
                continue
            try:
                sock.shutdown(socket.SHUT_RDWR)
            except OSError as e:
                logger.debug("Socket shutdown failed", extra={"error": str(e)})


class CancellableSession(requests.Session):
    """Session whose in-flight request can be aborted from another thread."""

    def __init__(self):
        super().__init__()
        self.mount("https://", CancellableAdapter())
        self.mount("http://", CancellableAdapter())

    def abort(self) -> None:
        for adapter in self.adapters.values():
            if isinstance(adapter, CancellableAdapter):
                adapter.abort()
        self.close()


class HTTPTransport:
    """Send one GET request with a fresh session bounded by a timeout."""

    def __init__(
        self,
        timeout: float | None = DEFAULT_TIMEOUT,
        *,
        session_factory=CancellableSession,
        cancel_token: CancelToken | None = None,
    ):
        """
        Initialize transport.

        Args:
            timeout: Seconds allowed for connecting and for each wait on the server;
                None or 0 means no timeout
            session_factory: Callable returning a new requests-compatible session
            cancel_token: Optional token checked before and after the request
        """
        self.timeout = timeout or None
        self.session_factory = session_factory
        self.cancel_token = cancel_token

    def execute(self, url: str) -> ResponseHandle:
        """
        Fetch a URL.

        Any HTTP response is returned, whatever its status code.

        Args:
            url: Validated absolute URL

        Returns:
            ResponseHandle owning the streamed body

        Raises:
            RequestBuildError: If the request cannot be built
            FetchError: On DNS, TLS, connection or timeout failures
            Cancelled: If the cancel token fires
        """
        request = build_request(url)
        if self.timeout is not None and self.timeout < 0:
            logger.warning("Negative timeout", extra={"url": url, "timeout": self.timeout})
            raise RequestBuildError(f"Timeout must not be negative, got {self.timeout}", url=url)

        token = self.cancel_token
        if token is not None:
            token.raise_if_cancelled(url)

        session = self.session_factory()
        abort = getattr(session, "abort", session.close)
        if token is not None:
            token.register(abort)

        logger.debug("Sending request", extra={"url": url, "timeout": self.timeout})
        try:
            response = session.send(request, timeout=self.timeout, stream=True)
        except requests.Timeout as e:
            session.close()
            self._raise_if_cancelled(url, e)
            logger.warning("Request timed out", extra={"url": url, "timeout": self.timeout})
            raise FetchError(f"Timed out fetching the page after {self.timeout}s", url=url, timed_out=True) from e
        except requests.RequestException as e:
            session.close()
            self._raise_if_cancelled(url, e)
            logger.warning("Request failed", extra={"url": url, "error": str(e)})
            raise FetchError(f"Failed to fetch the page: {e}", url=url) from e
        finally:
            if token is not None:
                token.unregister(abort)

        handle = ResponseHandle(response, session, cancel_token=token)
        logger.debug(
            "Response received",
            extra={
                "url": url,
                "status_code": handle.status_code,
                "content_type": handle.content_type,
                "content_encoding": handle.content_encoding,
            },
        )

        if token is not None and token.cancelled:
            handle.close()
            raise Cancelled("Acquisition cancelled", url=url)
        return handle

    def _raise_if_cancelled(self, url: str, error: Exception) -> None:
        if self.cancel_token is not None and self.cancel_token.cancelled:
            raise Cancelled("Acquisition cancelled", url=url) from error
