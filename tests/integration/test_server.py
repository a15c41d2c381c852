"""
Integration tests: a real WebServer on a real socket.
"""

import socket
import threading
import time

import pytest

from webworker import ServerConfig, WebServer
from webworker import server as server_module
from webworker.__main__ import main


def fetch(address, raw_request: bytes) -> bytes:
    """Send raw bytes and read until the server closes the connection."""
    with socket.create_connection(address, timeout=5.0) as sock:
        sock.sendall(raw_request)
        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


class TestWebServer:

    def test_serves_index(self, running_server, split_response, pages):
        raw = fetch(running_server.address, b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n")
        status, headers, body = split_response(raw)

        assert status == "HTTP/1.1 200 OK"
        assert headers["Connection"] == "close"
        assert body == pages["index"]

    def test_serves_image_bytes(self, running_server, split_response, pages):
        status, headers, body = split_response(
            fetch(running_server.address, b"GET /photo.jpg HTTP/1.1\r\n\r\n")
        )

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "image/jpg"
        assert body == pages["photo"]

    def test_not_found(self, running_server, split_response, pages):
        status, _, body = split_response(
            fetch(running_server.address, b"GET /missing.html HTTP/1.1\r\n\r\n")
        )

        assert status == "HTTP/1.1 404 NOT FOUND"
        assert body == pages["not_found"]

    def test_headers_sent_in_pieces(self, running_server, split_response, pages):
        """The worker waits for the rest of the header block."""
        with socket.create_connection(running_server.address, timeout=5.0) as sock:
            sock.sendall(b"GET /page.h")
            sock.sendall(b"tml HTTP/1.1\r\nHost: loc")
            sock.sendall(b"alhost\r\n\r\n")

            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)

        _, _, body = split_response(b"".join(chunks))
        assert body == pages["page"]

    def test_slow_client_does_not_block_others(self, running_server, split_response, pages):
        """A client that never finishes its headers only stalls itself."""
        with socket.create_connection(running_server.address, timeout=5.0) as slow:
            slow.sendall(b"GET /page.html HTTP/1.1\r\n")

            _, _, body = split_response(
                fetch(running_server.address, b"GET /photo.jpg HTTP/1.1\r\n\r\n")
            )
            assert body == pages["photo"]

    def test_concurrent_requests(self, running_server, pages):
        results = []
        lock = threading.Lock()

        def client():
            raw = fetch(running_server.address, b"GET /photo.jpg HTTP/1.1\r\n\r\n")
            with lock:
                results.append(raw)

        threads = [threading.Thread(target=client) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10.0)

        assert len(results) == 10
        assert len(set(results)) == 1
        assert results[0].endswith(pages["photo"])

    def test_client_disconnect_is_harmless(self, running_server, split_response, pages):
        with socket.create_connection(running_server.address, timeout=5.0):
            pass  # Close without sending anything

        status, _, _ = split_response(
            fetch(running_server.address, b"GET / HTTP/1.1\r\n\r\n")
        )
        assert status == "HTTP/1.1 200 OK"

    def test_address_reports_real_port(self, running_server):
        host, port = running_server.address
        assert host == "127.0.0.1"
        assert port > 0

    def test_invalid_config_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            WebServer(ServerConfig(base_dir=str(tmp_path / "missing")))


class TestCLI:

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "webworker" in capsys.readouterr().out

    def test_bad_root_exits_with_error(self, tmp_path, capsys):
        assert main(["--root", str(tmp_path / "missing"), "--port", "0"]) == 1
        assert "Base directory" in capsys.readouterr().err


class TestSaturatedServer:

    def test_shutdown_while_all_slots_busy(self, config, monkeypatch):
        """A waiting connection is dropped once the server stops."""
        monkeypatch.setattr(server_module, "SLOT_WAIT_INTERVAL", 0.05)
        config.max_workers = 1

        server = WebServer(config)
        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        assert server.wait_until_ready(timeout=5.0)

        slow = socket.create_connection(server.address, timeout=5.0)
        try:
            # Holds the only slot: the header block never ends
            slow.sendall(b"GET /page.html HTTP/1.1\r\n")

            with socket.create_connection(server.address, timeout=5.0) as waiting:
                time.sleep(0.2)
                server.shutdown()

                assert waiting.recv(4096) == b""
        finally:
            slow.close()

        thread.join(timeout=5.0)
        assert not thread.is_alive()
