"""
=============================================================================
LISTENER: LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket: create, configure, bind, listen, then accept
connections one at a time and hand each to a callback.

=============================================================================
SOCKET LIFECYCLE (Server Side)
=============================================================================

    1. socket()    Create a TCP socket
    2. setsockopt  SO_REUSEADDR, so a restart doesn't hit
                   "Address already in use" while old sockets sit in
                   TIME_WAIT
    3. bind()      Claim host:port (0.0.0.0:8000 by default)
    4. listen()    Let the OS queue up to `backlog` pending connections
    5. accept()    Blocks until a client connects, returns a NEW socket
                   for that client; the listening socket keeps listening
    6. close()     Release the listening socket

                    ┌───────────────────────┐
                    │   Listening Socket    │ ◄── Created once at startup
                    │   0.0.0.0:8000        │     Closed on every exit path
                    └───────────┬───────────┘
                                │ accept()
                                ▼
                          ┌───────────┐
                          │ Client    │  ──► handler(conn) runs to completion
                          │ Socket    │      before the next accept()
                          └───────────┘

=============================================================================
ONE CONNECTION AT A TIME
=============================================================================

The accept loop calls the handler directly, on the same thread. The next
client is not accepted until the current one has been answered and
closed. A slow client therefore stalls everyone queued behind it; that is
the price of having no threads, no locks and no shared state.

=============================================================================
ERROR POLICY
=============================================================================

    create / bind / listen fails  ──► log, close socket, RAISE (fatal)
    accept() fails                ──► log, keep looping
    handler raises                ──► log, close that connection, keep looping

Only setup failures can stop the server. Nothing a single client does
can take down the accept loop.

=============================================================================
SIGNAL HANDLING
=============================================================================

SIGINT (Ctrl+C) and SIGTERM (kill, docker stop, systemd) call shutdown().
The loop notices within one accept poll interval, and the listening
socket is closed on the way out.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server (the Listener).

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │    start(handler)                                                   │
    │        ├──► _create_socket()   socket() + SO_REUSEADDR              │
    │        ├──► bind()             host:port                            │
    │        ├──► listen()           backlog                              │
    │        ├──► _setup_signals()   SIGTERM/SIGINT → shutdown()          │
    │        └──► _accept_loop()     blocks here                          │
    │                 └──► accept() → Connection → handler(conn)          │
    │                                                                     │
    │    shutdown()                  _running = False                     │
    │    _cleanup()                  restore signals, close socket        │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    # How often accept() wakes up to check for shutdown
    ACCEPT_POLL_INTERVAL = 1.0

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, buffer_size,
                    timeout).

        Note: the socket is created in start(), not here.
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._bound_address: Optional[Tuple[str, int]] = None

        self._running = False

        # Set once the socket is listening; tests wait on it
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        With port=0 this is the port the OS actually picked, once bound.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        # AF_INET = IPv4, SOCK_STREAM = TCP
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

            # Wake up periodically so shutdown() is noticed; ordering of
            # accepted connections is unaffected
            sock.settimeout(self.ACCEPT_POLL_INTERVAL)
        except OSError:
            sock.close()
            raise

        return sock

    def _setup_signals(self):
        """
        Install SIGTERM/SIGINT handlers that call shutdown().

        signal.signal() only works on the main thread, so a server started
        from a worker thread (as in tests) skips this and is stopped by
        calling shutdown() directly.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(
        self,
        connection_handler: Callable[[Connection], None],
        on_listening: Optional[Callable[[Tuple[str, int]], None]] = None,
    ):
        """
        Bind, listen and accept connections until shutdown().

        Args:
            connection_handler: Called with each accepted Connection. It
                                runs to completion before the next accept.
            on_listening: Called once with the bound (host, port) after
                          listen() succeeds, before the first accept.

        Raises:
            OSError: If the socket cannot be created, bound or put into
                     listening mode.
        """
        try:
            self._socket = self._create_socket()
        except OSError as e:
            logger.error(f"Failed to create socket: {e}")
            raise

        try:
            try:
                self._socket.bind((self.config.host, self.config.port))
            except OSError as e:
                # Address already in use, or a privileged port without root
                logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
                raise

            try:
                self._socket.listen(self.config.backlog)
            except OSError as e:
                logger.error(f"Failed to listen: {e}")
                raise

            self._bound_address = self._socket.getsockname()[:2]
            self._running = True
            self._setup_signals()
            self._ready_event.set()

            host, port = self.address
            logger.info(f"Server listening on {host}:{port}")
            if on_listening is not None:
                on_listening(self.address)

            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections and handle them one at a time.

        Args:
            connection_handler: Callback for each new connection.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                # Normal: poll interval elapsed, re-check _running
                continue
            except OSError as e:
                if not self._running or self._socket.fileno() == -1:
                    break
                logger.error(f"Error accepting connection: {e}")
                continue

            logger.debug(f"Accepted connection from {client_address[0]}:{client_address[1]}")

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                timeout=self.config.timeout,
            )

            try:
                connection_handler(conn)
            except Exception:
                logger.exception(f"[{conn.id}] Unhandled error in connection handler")
                conn.close()

    def shutdown(self):
        """
        Stop the accept loop.

        Safe to call from a signal handler, another thread, or more than
        once. The loop exits within ACCEPT_POLL_INTERVAL.
        """
        logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        """Restore signal handlers and close the listening socket."""
        self._running = False
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the socket is listening.

        Returns:
            True if the server is ready, False on timeout.
        """
        return self._ready_event.wait(timeout)
