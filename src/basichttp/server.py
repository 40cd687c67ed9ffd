"""
=============================================================================
SERVER: WIRING AND PER-CONNECTION PIPELINE
=============================================================================

    ┌──────────────┐   Connection    ┌────────────────────┐
    │ SocketServer │ ──────────────► │ ConnectionHandler  │
    │ (listener)   │                 │                    │
    └──────────────┘                 │  read_request()    │ ── raw bytes
            ▲                        │  RequestParser     │ ── method, path
            │ next accept()          │  StaticFileHandler │ ── bytes / 404
            │ only after close       │  ResponseBuilder   │ ── wire bytes
            └─────────────────────── │  send + close      │
                                     └────────────────────┘

HTTPServer builds these pieces from a ServerConfig, sets up logging,
prints the start-up line and runs the listener.

=============================================================================
"""

import logging
import sys
from typing import Optional, Tuple

from .access_log import AccessLogger, RequestLog
from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState
from .handlers import StaticFileHandler, ResolutionFailure
from .http import RequestParser, ResponseBuilder, ParsedRequest


logger = logging.getLogger(__name__)


class ConnectionHandler:
    """
    Serves exactly one request on one connection, then closes it.

    =========================================================================
    NO FAULT ESCAPES
    =========================================================================

        read fails        → empty request → index file
        parse finds junk  → empty path    → index file
        resolve fails     → 404 page
        anything else     → 404 page, traceback logged
        write fails       → logged
        ─────────────────────────────────────────────
        close             → always

    The client always gets a well-formed response unless the socket itself
    is gone.

    =========================================================================
    """

    def __init__(
        self,
        resolver: StaticFileHandler,
        parser: Optional[RequestParser] = None,
        builder: Optional[ResponseBuilder] = None,
        access_logger: Optional[AccessLogger] = None,
    ):
        self.resolver = resolver
        self.parser = parser or RequestParser()
        self.builder = builder or ResponseBuilder()
        self.access_logger = access_logger or AccessLogger()

    def __call__(self, conn: Connection):
        self.handle(conn)

    def handle(self, conn: Connection):
        """
        Run the full pipeline for one connection.

        Args:
            conn: A freshly accepted connection (state ACCEPTED).
        """
        request = ParsedRequest(method="", path="")

        with conn:  # Context manager guarantees close
            try:
                raw = conn.read_request()

                request = self.parser.parse(raw)
                conn.advance(ConnectionState.PARSED)

                content = self.resolver.resolve(request.path)
            except Exception:
                logger.exception(f"[{conn.id}] Error handling request")
                content = self.resolver.not_found(ResolutionFailure.IO_ERROR)
            conn.advance(ConnectionState.RESOLVED)

            conn.send_response(
                self.builder.build(content.status, content.extension, content.body)
            )
            duration_ms = conn.age * 1000  # Excludes the drain in close()

        self.access_logger.log(RequestLog(
            connection_id=conn.id,
            client_ip=conn.client_ip,
            method=request.method,
            path=request.path or self.resolver.index_file,
            status_code=int(content.status),
            bytes_sent=conn.bytes_sent,
            duration_ms=duration_ms,
            failure=content.failure.value if content.failure else None,
        ))


class HTTPServer:
    """
    Single-process, single-threaded static file server.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=8000, root_dir="./public"))
        server.run()   # Blocks until Ctrl+C / SIGTERM

    From another thread (tests):

        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready(5.0)
        ...
        server.shutdown()
        thread.join()

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults reproduce the classic
                    0.0.0.0:8000, backlog 10, 1 KB buffer, cwd behaviour.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)
        self._handler = ConnectionHandler(
            resolver=StaticFileHandler(
                root_dir=self.config.root_dir,
                index_file=self.config.index_file,
            ),
            access_logger=AccessLogger(log_format=self.config.log_format),
        )

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listening socket cannot be set up.
        """
        self._setup_logging()

        try:
            self._socket_server.start(self._handler, on_listening=self._announce)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")

        logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting; run() returns within the accept poll interval."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _announce(self, address: Tuple[str, int]):
        """The single start-up line on stdout."""
        host, port = address
        print(f"Server started on {host}:{port}", file=sys.stdout, flush=True)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("basichttp").setLevel(level)
