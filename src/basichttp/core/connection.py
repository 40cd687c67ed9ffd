"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: a single read, a single write, and a
close that always happens.

=============================================================================
ONE READ, ONE WRITE
=============================================================================

TCP is a byte stream, so a request can in principle arrive split across
several recv() calls. This server does not reassemble: it reads ONCE,
up to buffer_size bytes, and works with whatever came in.

    Client sends:   GET /index.html HTTP/1.1\r\nHost: ...\r\n\r\n
    Server reads:   recv(1024)  ─► everything it got, at most 1 KB

The request line is the first thing a client sends and it is short, so
in practice it is always inside that first read. A longer request is
truncated, and the parser copes with truncation.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

Strictly linear, no way back:

    ACCEPTED ──► READ ──► PARSED ──► RESOLVED ──► RESPONDED ──► CLOSED
        │          │         │          │              │            ▲
        └──────────┴─────────┴──────────┴──────────────┴────────────┘
                            close() from anywhere

A failure in reading, parsing or resolving does not skip ahead to
CLOSED: the handler falls back to the 404 page and carries on, so the
client always gets a response. CLOSED is reached whether the write
worked or not.

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


logger = logging.getLogger(__name__)

# Upper bound on the whole drain in close(), however the client trickles
DRAIN_TIMEOUT = 0.5


class ConnectionState(Enum):
    """Connection lifecycle states, in order."""

    ACCEPTED = "accepted"      # Just returned by accept()
    READ = "read"              # Raw request bytes in hand
    PARSED = "parsed"          # Method and path extracted
    RESOLVED = "resolved"      # Content (or 404 page) chosen
    RESPONDED = "responded"    # Response written (or the write failed)
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique identifier for log lines.
        state: Current ConnectionState.
        created_at: Timestamp when the connection was accepted.
        bytes_sent: Bytes written by send_response().
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)
    bytes_sent: int = 0

    # Configuration (passed from ServerConfig)
    buffer_size: int = 1024
    timeout: Optional[float] = None

    def __post_init__(self):
        # None keeps the socket fully blocking
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def client_port(self) -> int:
        return self.address[1] if self.address else 0

    @property
    def age(self) -> float:
        """Seconds since accept()."""
        return time.time() - self.created_at

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    def advance(self, state: ConnectionState):
        """Move to the next lifecycle state (logged at DEBUG)."""
        logger.debug(f"[{self.id}] {self.state.value} -> {state.value}")
        self.state = state

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Read the request with a single recv().

        Returns:
            Up to buffer_size bytes. Empty bytes if the client sent
            nothing, closed early, reset, or timed out.
        """
        try:
            data = self.socket.recv(self.buffer_size)
        except socket.timeout:
            logger.warning(f"[{self.id}] Read timed out")
            data = b""
        except OSError as e:
            # Includes ConnectionResetError: client disconnected abruptly
            logger.warning(f"[{self.id}] Read failed: {e}")
            data = b""

        self.advance(ConnectionState.READ)
        return data

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the full response.

        sendall() loops until every byte is written; a plain send() may
        write only part of it.

        Returns:
            True if the send succeeded, False if the client went away.
        """
        try:
            self.socket.sendall(data)
            self.bytes_sent += len(data)
            return True
        except OSError as e:
            # BrokenPipeError, ConnectionResetError, timeouts
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False
        finally:
            self.advance(ConnectionState.RESPONDED)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-body
        2. Drain: discard whatever the client sent past buffer_size, for
           at most DRAIN_TIMEOUT seconds in total; closing with unread
           data makes the kernel send RST, which can destroy a response
           the client has not read yet
        3. close(): release the file descriptor

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        deadline = time.monotonic() + DRAIN_TIMEOUT
        try:
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                if not self.socket.recv(self.buffer_size):
                    break
        except OSError:
            pass  # Timeout or reset, we're closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.advance(ConnectionState.CLOSED)

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        """
        Allows using Connection with 'with' for guaranteed cleanup:

            with conn:
                data = conn.read_request()
                conn.send_response(response)
            # Connection closed here, even if something raised
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False  # Don't suppress exceptions
