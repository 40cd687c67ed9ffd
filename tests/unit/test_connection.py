"""
Unit tests for the Connection wrapper, over a local socket pair.
"""

import socket
import threading
import time

import pytest

from basichttp.core.connection import DRAIN_TIMEOUT, Connection, ConnectionState


@pytest.fixture
def pair():
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    for sock in (server_side, client_side):
        try:
            sock.close()
        except OSError:
            pass


def make_connection(sock: socket.socket, **kwargs) -> Connection:
    return Connection(socket=sock, address=("127.0.0.1", 54321), **kwargs)


class TestLifecycle:

    def test_starts_accepted(self, pair):
        conn = make_connection(pair[0])

        assert conn.state == ConnectionState.ACCEPTED
        assert conn.client_ip == "127.0.0.1"
        assert conn.client_port == 54321
        assert len(conn.id) == 8

    def test_linear_states(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side, timeout=2.0)
        client_side.sendall(b"GET / HTTP/1.1\r\n\r\n")

        conn.read_request()
        assert conn.state == ConnectionState.READ

        conn.advance(ConnectionState.PARSED)
        conn.advance(ConnectionState.RESOLVED)

        conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n")
        assert conn.state == ConnectionState.RESPONDED

        client_side.close()
        conn.close()
        assert conn.state == ConnectionState.CLOSED
        assert conn.is_closed


class TestReading:

    def test_single_read_bounded_by_buffer(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side, buffer_size=64, timeout=2.0)
        client_side.sendall(b"x" * 200)

        data = conn.read_request()

        assert 0 < len(data) <= 64

    def test_peer_closed_reads_empty(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side, timeout=2.0)
        client_side.close()

        assert conn.read_request() == b""
        assert conn.state == ConnectionState.READ

    def test_timeout_reads_empty(self, pair):
        conn = make_connection(pair[0], timeout=0.05)

        assert conn.read_request() == b""


class TestWriting:

    def test_send_counts_bytes(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side, timeout=2.0)

        assert conn.send_response(b"hello") is True
        assert conn.bytes_sent == 5
        assert client_side.recv(16) == b"hello"

    def test_send_to_closed_socket_reports_failure(self, pair):
        server_side, _ = pair
        conn = make_connection(server_side)
        server_side.close()

        assert conn.send_response(b"hello") is False
        assert conn.state == ConnectionState.RESPONDED
        assert conn.bytes_sent == 0


class TestClosing:

    def test_close_sends_eof(self, pair):
        server_side, client_side = pair
        conn = make_connection(server_side, timeout=2.0)
        conn.send_response(b"body")
        client_side.settimeout(2.0)

        client_side.shutdown(socket.SHUT_WR)
        conn.close()

        assert client_side.recv(16) == b"body"
        assert client_side.recv(16) == b""

    def test_close_is_idempotent(self, pair):
        conn = make_connection(pair[0])
        pair[1].close()

        conn.close()
        conn.close()

        assert conn.state == ConnectionState.CLOSED

    def test_context_manager_closes_on_error(self, pair):
        conn = make_connection(pair[0])
        pair[1].close()

        with pytest.raises(RuntimeError):
            with conn:
                raise RuntimeError("boom")

        assert conn.state == ConnectionState.CLOSED

    def test_drain_is_bounded_for_trickling_client(self, pair):
        """A client that keeps sending after its answer cannot hold close()."""
        server_side, client_side = pair
        conn = make_connection(server_side)
        stop = threading.Event()

        def trickle():
            while not stop.is_set():
                try:
                    client_side.send(b"x")
                except OSError:
                    break
                stop.wait(0.1)

        thread = threading.Thread(target=trickle, daemon=True)
        thread.start()
        started = time.monotonic()
        try:
            conn.close()
        finally:
            stop.set()
            thread.join(2.0)

        assert time.monotonic() - started < DRAIN_TIMEOUT + 0.5
        assert conn.is_closed

    def test_blocking_by_default(self, pair):
        conn = make_connection(pair[0])

        assert conn.timeout is None
        assert pair[0].gettimeout() is None
