"""
pytest configuration and fixtures.
"""

import io
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webworker import ServerConfig, WebServer
from webworker.core import Connection, WebWorker


FIXED_TIME = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)

INDEX_HTML = b"<html>\r\n<body>\n<h1>Home</h1>\n</body>\n</html>\n"
NOT_FOUND_HTML = b"<html><body><h1>404 Not Found</h1></body></html>\n"
FORBIDDEN_HTML = b"<html><body><h1>403 Forbidden</h1></body></html>\n"
PAGE_HTML = b"<html>\n  <p>Line one</p>\r\n  <p>Line two</p>\n</html>"

# Every byte value, so any text-mode mangling shows up
PHOTO_JPG = bytes(range(256)) * 4


def fixed_clock() -> datetime:
    return FIXED_TIME


class CapturingStream(io.BytesIO):
    """BytesIO that remembers its contents when closed."""

    def __init__(self, initial: bytes = b""):
        super().__init__(initial)
        self.captured = b""

    def close(self):
        if not self.closed:
            self.captured = self.getvalue()
        super().close()


@pytest.fixture
def fixed_time() -> datetime:
    return FIXED_TIME


@pytest.fixture
def clock():
    """Clock that always returns FIXED_TIME."""
    return fixed_clock


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """A base directory with the standard pages and a few served files."""
    www = tmp_path / "www"
    www.mkdir()
    (www / "index.html").write_bytes(INDEX_HTML)
    (www / "404.html").write_bytes(NOT_FOUND_HTML)
    (www / "403.html").write_bytes(FORBIDDEN_HTML)

    (tmp_path / "page.html").write_bytes(PAGE_HTML)
    (tmp_path / "photo.jpg").write_bytes(PHOTO_JPG)
    (tmp_path / "notes.txt").write_bytes(b"plain text\n")

    docs = tmp_path / "docs"
    docs.mkdir()
    (docs / "guide.html").write_bytes(b"<p>guide</p>")

    return tmp_path


@pytest.fixture
def config(site: Path) -> ServerConfig:
    """Test configuration rooted at the site fixture."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        base_dir=str(site),
        max_workers=4,
        log_level="WARNING",
    )


@pytest.fixture
def worker(config: ServerConfig) -> WebWorker:
    return WebWorker.from_config(config, clock=fixed_clock)


@pytest.fixture
def serve(worker: WebWorker):
    """Run raw request bytes through the worker and return the response bytes."""
    def _serve(raw_request: bytes) -> bytes:
        conn = Connection(
            rfile=CapturingStream(raw_request),
            wfile=CapturingStream(),
            address=("127.0.0.1", 12345),
        )
        worker.handle(conn)
        return conn.wfile.captured
    return _serve


def _split_response(raw: bytes):
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("iso-8859-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


@pytest.fixture
def split_response():
    """Split a response into (status_line, headers dict, body)."""
    return _split_response


@pytest.fixture
def pages() -> dict:
    """Contents of the files created by the site fixture."""
    return {
        "index": INDEX_HTML,
        "not_found": NOT_FOUND_HTML,
        "forbidden": FORBIDDEN_HTML,
        "page": PAGE_HTML,
        "photo": PHOTO_JPG,
    }


@pytest.fixture
def running_server(config: ServerConfig) -> Generator[WebServer, None, None]:
    """A WebServer listening on a free port in a background thread."""
    server = WebServer(config, clock=fixed_clock)
    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    if not server.wait_until_ready(timeout=5.0):
        raise RuntimeError("Server failed to start")

    yield server

    server.shutdown()
    thread.join(timeout=5.0)


@pytest.fixture
def in_site(site: Path) -> Generator[Path, None, None]:
    """Run the test with the site directory as working directory."""
    previous = os.getcwd()
    os.chdir(site)
    try:
        yield site
    finally:
        os.chdir(previous)
