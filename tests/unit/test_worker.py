"""
Unit tests for the per-connection pipeline.
"""

import io
import logging

import pytest

from webworker.core import Connection, ConnectionState, WebWorker
from webworker.http.status_codes import HTTPStatus


class BrokenWriter(io.BytesIO):
    """Output stream whose client has gone away."""

    def write(self, data):
        raise BrokenPipeError("client went away")


class TestPipeline:
    """End-to-end properties of WebWorker.handle on in-memory streams."""

    def test_html_file(self, serve, split_response, pages):
        status, headers, body = split_response(serve(b"GET /page.html HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "text/html"
        assert body == pages["page"]

    def test_missing_file(self, serve, split_response, pages):
        status, headers, body = split_response(serve(b"GET /missing.html HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 404 NOT FOUND"
        assert headers["Content-Type"] == "text/html"
        assert body == pages["not_found"]

    def test_overlong_name_gets_not_found_page(self, serve, split_response, pages):
        raw = b"GET /" + b"a" * 300 + b".html HTTP/1.1\r\n\r\n"
        status, _, body = split_response(serve(raw))

        assert status == "HTTP/1.1 404 NOT FOUND"
        assert body == pages["not_found"]

    def test_image_file(self, serve, split_response, pages):
        status, headers, body = split_response(serve(b"GET /photo.jpg HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "image/jpg"
        assert len(body) == 1024
        assert body == pages["photo"]

    def test_unrecognized_extension(self, serve, split_response, pages):
        status, headers, body = split_response(serve(b"GET /notes.txt HTTP/1.1\r\n\r\n"))

        assert status == "HTTP/1.1 200 OK"
        assert body == pages["forbidden"]

    def test_all_headers_present(self, serve, split_response):
        _, headers, _ = split_response(serve(b"GET /page.html HTTP/1.1\r\n\r\n"))

        assert headers == {
            "Date": "Thu, 15 Jan 2026 12:30:45 GMT",
            "Server": "WebWorker/1.0",
            "Connection": "close",
            "Content-Type": "text/html",
        }

    @pytest.mark.parametrize("raw", [
        b"GET / HTTP/1.1\r\n\r\n",
        b"GET  HTTP/1.1\r\n\r\n",
        b"POST /page.html HTTP/1.1\r\n\r\n",
        b"nonsense\r\n\r\n",
        b"",
    ])
    def test_default_to_index(self, serve, raw):
        """Root, empty, other methods and garbage all serve the index page."""
        assert serve(raw) == serve(b"GET /index.html HTTP/1.1\r\n\r\n")

    def test_idempotent(self, serve):
        raw = b"GET /photo.jpg HTTP/1.1\r\nHost: localhost\r\n\r\n"
        assert serve(raw) == serve(raw)

    def test_nested_path(self, serve, split_response):
        _, _, body = split_response(serve(b"GET /docs/guide.html HTTP/1.1\r\n\r\n"))
        assert body == b"<p>guide</p>"


class TestWebWorker:

    def _connection(self, raw: bytes, wfile=None) -> Connection:
        return Connection(rfile=io.BytesIO(raw), wfile=wfile or io.BytesIO())

    def test_returns_header(self, worker):
        header = worker.handle(self._connection(b"GET /missing HTTP/1.1\r\n\r\n"))
        assert header.status == HTTPStatus.NOT_FOUND

    def test_connection_closed_after_handling(self, worker):
        conn = self._connection(b"GET / HTTP/1.1\r\n\r\n")
        worker.handle(conn)

        assert conn.state == ConnectionState.CLOSED
        assert conn.rfile.closed
        assert conn.wfile.closed

    def test_write_failure_is_contained(self, worker, caplog):
        """A dead client is logged and the connection abandoned."""
        conn = self._connection(b"GET / HTTP/1.1\r\n\r\n", wfile=BrokenWriter())

        with caplog.at_level(logging.ERROR, logger="webworker"):
            header = worker.handle(conn)

        assert header is None
        assert conn.closed
        assert "Output error" in caplog.text

    def test_missing_error_page_abandons_connection(self, worker, site):
        (site / "www" / "404.html").unlink()
        wfile = io.BytesIO()
        conn = self._connection(b"GET /missing.html HTTP/1.1\r\n\r\n", wfile=wfile)

        assert worker.handle(conn) is None
        assert conn.closed

    def test_process_rejects_second_read(self, worker):
        conn = self._connection(b"GET / HTTP/1.1\r\n\r\n")
        worker.process(conn)

        with pytest.raises(RuntimeError):
            worker.process(conn)

    def test_logs_request_lines_at_debug(self, worker, caplog):
        with caplog.at_level(logging.DEBUG, logger="webworker"):
            worker.handle(self._connection(b"GET /page.html HTTP/1.1\r\nHost: x\r\n\r\n"))

        assert "Request line: (GET /page.html HTTP/1.1)" in caplog.text
        assert "Request line: (Host: x)" in caplog.text
