"""Shared fixtures: fake transport, recording engine and a local HTTP server."""

import gzip
import io
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

import pytest
from requests.structures import CaseInsensitiveDict

from web_article_reader.models import Article
from web_article_reader.transport import HTTPTransport

FIXTURES = Path(__file__).parent / "fixtures"


def load_fixture(filename: str) -> bytes:
    return (FIXTURES / filename).read_bytes()


class FakeResponse:
    """Stand-in for requests.Response that counts closes."""

    def __init__(self, body=b"", headers=None, status_code=200, url="https://example.com/article"):
        self.raw = io.BytesIO(body)
        self.headers = CaseInsensitiveDict(headers or {})
        self.status_code = status_code
        self.url = url
        self.close_calls = 0

    def close(self):
        self.close_calls += 1
        self.raw.close()


class FakeSession:
    """Stand-in for requests.Session that records what was sent."""

    def __init__(self, response=None, error=None, on_send=None):
        self.response = response
        self.error = error
        self.on_send = on_send
        self.sent = []
        self.close_calls = 0

    def send(self, request, **kwargs):
        self.sent.append((request, kwargs))
        if self.on_send is not None:
            self.on_send()
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.close_calls += 1


class FakeTransport:
    """Transport factory handing out FakeSessions and remembering them."""

    def __init__(self, response=None, error=None, on_send=None):
        self.response = response
        self.error = error
        self.on_send = on_send
        self.sessions = []
        self.timeouts = []

    def _new_session(self):
        session = FakeSession(self.response, self.error, self.on_send)
        self.sessions.append(session)
        return session

    def __call__(self, timeout, cancel_token=None):
        self.timeouts.append(timeout)
        return HTTPTransport(timeout, session_factory=self._new_session, cancel_token=cancel_token)


class RecordingEngine:
    """Extraction engine that records its input instead of extracting."""

    def __init__(self, error=None, readable=True):
        self.error = error
        self.readable = readable
        self.calls = []
        self.data = None
        self.stream = None

    def parse(self, stream, url):
        self.calls.append(("parse", url))
        self.stream = stream
        self.data = stream.read()
        if self.error is not None:
            raise self.error
        return Article(url=url, title="Recorded", text=self.data.decode("utf-8", errors="replace"))

    def parse_document(self, tree, url):
        self.calls.append(("parse_document", url))
        if self.error is not None:
            raise self.error
        return Article(url=url, title="Recorded", text=tree.text_content())

    def check(self, stream):
        self.calls.append(("check", None))
        self.data = stream.read()
        return self.readable

    def check_document(self, tree):
        self.calls.append(("check_document", None))
        return self.readable


@pytest.fixture
def article_html() -> bytes:
    return load_fixture("article.html")


@pytest.fixture
def navigation_html() -> bytes:
    return load_fixture("navigation.html")


@pytest.fixture
def html_response(article_html):
    def make(body=None, headers=None, status_code=200):
        headers = {"Content-Type": "text/html; charset=utf-8"} if headers is None else headers
        return FakeResponse(article_html if body is None else body, headers, status_code)

    return make


@pytest.fixture
def engine():
    return RecordingEngine()


class _PageHandler(BaseHTTPRequestHandler):
    def log_message(self, format, *args):
        pass

    def do_GET(self):
        self.server.request_headers.append(dict(self.headers))
        page = self.server.pages.get(self.path)
        if page is None:
            self.send_response(404)
            self.send_header("Content-Type", "text/html")
            body = b"<html><body><p>Not found</p></body></html>"
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
            return

        status, headers, body, delay = page
        if delay:
            time.sleep(delay)
        try:
            self.send_response(status)
            for name, value in headers.items():
                self.send_header(name, value)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)
        except (BrokenPipeError, ConnectionResetError):
            pass


@pytest.fixture
def http_server(article_html):
    """Serve a few canned pages on localhost."""
    server = ThreadingHTTPServer(("127.0.0.1", 0), _PageHandler)
    server.request_headers = []
    server.pages = {
        "/article": (200, {"Content-Type": "text/html; charset=utf-8"}, article_html, 0),
        "/gzip": (
            200,
            {"Content-Type": "text/html; charset=utf-8", "Content-Encoding": "gzip"},
            gzip.compress(article_html),
            0,
        ),
        "/gzip-padded": (
            200,
            {"Content-Type": "text/html; charset=utf-8 ", "Content-Encoding": "gzip "},
            gzip.compress(article_html),
            0,
        ),
        "/plain": (200, {"Content-Type": "text/plain"}, b"just text", 0),
        "/slow": (200, {"Content-Type": "text/html"}, article_html, 1.5),
    }
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address
    server.base_url = f"http://{host}:{port}"
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()
