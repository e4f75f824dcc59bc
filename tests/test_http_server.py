"""End-to-end acquisition against a local HTTP server."""

import threading
import time

import pytest

from web_article_reader import (
    CancelToken,
    Cancelled,
    FetchError,
    Reader,
    UnsupportedContentType,
    acquire_from_url,
)

from .conftest import RecordingEngine


def test_plain_page(http_server, article_html):
    engine = RecordingEngine()
    Reader(engine=engine).acquire_from_url(f"{http_server.base_url}/article", timeout=5)

    assert engine.data == article_html
    assert http_server.request_headers[0]["Accept-Encoding"] == "gzip"


def test_gzip_page_is_decoded(http_server, article_html):
    engine = RecordingEngine()
    Reader(engine=engine).acquire_from_url(f"{http_server.base_url}/gzip", timeout=5)

    assert engine.data == article_html


def test_padded_content_encoding_is_decoded(http_server, article_html):
    engine = RecordingEngine()
    Reader(engine=engine).acquire_from_url(f"{http_server.base_url}/gzip-padded", timeout=5)

    assert engine.data == article_html


def test_plain_text_page_is_rejected(http_server):
    engine = RecordingEngine()
    with pytest.raises(UnsupportedContentType):
        Reader(engine=engine).acquire_from_url(f"{http_server.base_url}/plain", timeout=5)
    assert engine.calls == []


def test_missing_page_still_reaches_engine(http_server):
    engine = RecordingEngine()
    Reader(engine=engine).acquire_from_url(f"{http_server.base_url}/missing", timeout=5)

    assert b"Not found" in engine.data


def test_slow_server_times_out(http_server):
    engine = RecordingEngine()
    with pytest.raises(FetchError) as excinfo:
        Reader(engine=engine).acquire_from_url(f"{http_server.base_url}/slow", timeout=0.2)

    assert excinfo.value.timed_out
    assert engine.calls == []


def test_cancel_while_waiting_for_headers(http_server):
    token = CancelToken()
    errors = []

    def run():
        try:
            Reader(engine=RecordingEngine()).acquire_from_url(
                f"{http_server.base_url}/slow", timeout=10, cancel_token=token
            )
        except Exception as e:
            errors.append(e)

    thread = threading.Thread(target=run)
    started = time.monotonic()
    thread.start()
    time.sleep(0.1)
    token.cancel()
    thread.join(timeout=5)
    elapsed = time.monotonic() - started

    assert not thread.is_alive()
    assert len(errors) == 1
    assert isinstance(errors[0], Cancelled)
    # Returns well before the server answers.
    assert elapsed < 0.8


def test_connection_refused_is_fetch_error():
    # Port 9 on localhost (discard) is closed on test machines.
    with pytest.raises(FetchError):
        acquire_from_url("http://127.0.0.1:9/", timeout=2)


def test_default_pipeline_extracts_article(http_server):
    article = acquire_from_url(f"{http_server.base_url}/gzip", timeout=5)

    assert article.title == "Rebuilding the Old Harbour Bridge"
    assert "salvaged beams" in article.text
    assert "Buy one boat" not in article.text
