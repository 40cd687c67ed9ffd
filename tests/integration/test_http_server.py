"""
End-to-end tests: a live server on a localhost port, real client sockets.
"""

import logging
import socket
import threading
from pathlib import Path

import pytest

from basichttp import HTTPServer, ServerConfig
from basichttp.core.socket_server import SocketServer
from basichttp.handlers import NOT_FOUND_PAGE

from conftest import (
    INDEX_HTML,
    README,
    STYLE_CSS,
    SUB_INDEX_HTML,
    RunningServer,
    http_request,
    split_response,
)


class TestScenarios:

    def test_index_html(self, running_server: RunningServer):
        status_line, headers, body = split_response(
            running_server.request(b"GET /index.html HTTP/1.1\r\n\r\n")
        )

        assert status_line == "HTTP/1.1 200 OK"
        assert headers == ["Content-Type: text/html", "Connection: close"]
        assert len(body) == 50
        assert body == INDEX_HTML

    def test_missing_file(self, running_server: RunningServer):
        status_line, headers, body = split_response(
            running_server.request(b"GET /missing.css HTTP/1.1\r\n\r\n")
        )

        assert status_line == "HTTP/1.1 404 Not Found"
        assert headers == ["Content-Type: text/html", "Connection: close"]
        assert body == NOT_FOUND_PAGE

    def test_empty_path_serves_index(self, running_server: RunningServer):
        _, _, body = split_response(running_server.request(b"GET  HTTP/1.1\r\n\r\n"))

        assert body == INDEX_HTML

    def test_stylesheet(self, running_server: RunningServer):
        status_line, headers, body = split_response(
            running_server.request(b"GET /style.css HTTP/1.1\r\n\r\n")
        )

        assert status_line == "HTTP/1.1 200 OK"
        assert "Content-Type: text/css" in headers
        assert body == STYLE_CSS

    def test_repeated_requests_identical(self, running_server: RunningServer):
        raw = b"GET /style.css HTTP/1.1\r\n\r\n"

        responses = {running_server.request(raw) for _ in range(5)}

        assert len(responses) == 1


class TestEdgeCases:

    def test_browser_style_request(self, running_server: RunningServer, sample_get_request):
        _, _, body = split_response(running_server.request(sample_get_request))

        assert body == INDEX_HTML

    def test_nothing_sent(self, running_server: RunningServer):
        status_line, _, body = split_response(running_server.request(b""))

        assert status_line == "HTTP/1.1 200 OK"
        assert body == INDEX_HTML

    def test_garbage(self, running_server: RunningServer):
        """No closing space after the path, so the path is empty: index file."""
        status_line, _, body = split_response(running_server.request(b"\x00\xff garbage"))

        assert status_line == "HTTP/1.1 200 OK"
        assert body == INDEX_HTML

    def test_no_extension(self, running_server: RunningServer):
        _, headers, body = split_response(running_server.request(b"GET /README HTTP/1.1\r\n\r\n"))

        assert "Content-Type: application/octet-stream" in headers
        assert body == README

    def test_directory_index(self, running_server: RunningServer):
        _, _, body = split_response(running_server.request(b"GET /docs/ HTTP/1.1\r\n\r\n"))

        assert body == SUB_INDEX_HTML

    def test_empty_file_is_404(self, running_server: RunningServer):
        status_line, _, _ = split_response(running_server.request(b"GET /empty.html HTTP/1.1\r\n\r\n"))

        assert status_line == "HTTP/1.1 404 Not Found"

    @pytest.mark.parametrize("target", [b"/../secret.txt", b"/docs/../../secret.txt"])
    def test_traversal_refused(self, running_server: RunningServer, target):
        status_line, _, body = split_response(
            running_server.request(b"GET " + target + b" HTTP/1.1\r\n\r\n")
        )

        assert status_line == "HTTP/1.1 404 Not Found"
        assert body == NOT_FOUND_PAGE

    def test_oversized_request_still_answered(self, running_server: RunningServer):
        raw = b"GET /style.css HTTP/1.1\r\nX-Pad: " + b"x" * 8192 + b"\r\n\r\n"

        _, _, body = split_response(running_server.request(raw))

        assert body == STYLE_CSS

    def test_server_survives_abrupt_client(self, running_server: RunningServer):
        sock = socket.create_connection(running_server.address, timeout=5.0)
        sock.close()

        _, _, body = split_response(running_server.request(b"GET /style.css HTTP/1.1\r\n\r\n"))
        assert body == STYLE_CSS

    def test_sequential_clients(self, running_server: RunningServer):
        results = []

        def client():
            results.append(running_server.request(b"GET /index.html HTTP/1.1\r\n\r\n"))

        threads = [threading.Thread(target=client) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert len(results) == 4
        assert all(split_response(r)[2] == INDEX_HTML for r in results)


class TestLifecycle:

    def test_announces_bound_address(self, docroot: Path, capsys):
        server = HTTPServer(ServerConfig(
            host="127.0.0.1", port=0, root_dir=str(docroot), log_level="WARNING",
        ))
        running = RunningServer(server)
        running.start()
        try:
            host, port = server.address
            assert port != 0
            assert http_request(server.address, b"GET / HTTP/1.1\r\n\r\n")
        finally:
            running.stop()

        assert f"Server started on {host}:{port}" in capsys.readouterr().out
        assert not server.is_running

    def test_port_released_after_shutdown(self, docroot: Path, free_port: int):
        config = ServerConfig(host="127.0.0.1", port=free_port, root_dir=str(docroot),
                              log_level="WARNING")

        first = RunningServer(HTTPServer(config))
        first.start()
        first.stop()

        second = RunningServer(HTTPServer(config))
        second.start()
        try:
            _, _, body = split_response(http_request(second.address, b"GET /style.css HTTP/1.1\r\n\r\n"))
            assert body == STYLE_CSS
        finally:
            second.stop()

    def test_bind_conflict_raises(self, running_server: RunningServer, docroot: Path):
        host, port = running_server.address
        server = HTTPServer(ServerConfig(host=host, port=port, root_dir=str(docroot),
                                         log_level="CRITICAL"))

        with pytest.raises(OSError):
            server.run()


class FlakyAcceptSocket(socket.socket):
    """Listening socket whose first accept() fails."""

    failures = 1

    def accept(self):
        if self.failures:
            self.failures -= 1
            raise OSError("simulated accept failure")
        return super().accept()


def test_accept_failure_is_logged_and_loop_continues(docroot: Path, monkeypatch, caplog):
    def create_socket(self):
        sock = FlakyAcceptSocket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.settimeout(self.ACCEPT_POLL_INTERVAL)
        return sock

    monkeypatch.setattr(SocketServer, "_create_socket", create_socket)

    running = RunningServer(HTTPServer(ServerConfig(
        host="127.0.0.1", port=0, root_dir=str(docroot), log_level="WARNING",
    )))
    with caplog.at_level(logging.ERROR, logger="basichttp.core.socket_server"):
        running.start()
        try:
            _, _, body = split_response(
                http_request(running.address, b"GET /style.css HTTP/1.1\r\n\r\n")
            )
        finally:
            running.stop()

    assert body == STYLE_CSS
    assert any(
        "Error accepting connection" in record.getMessage()
        for record in caplog.records
    )
