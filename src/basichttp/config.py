"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration management for the server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌───────────────────┐    ┌───────────────────┐    ┌───────────────────┐
    │  Defaults         │ ─► │  Environment      │ ─► │  CLI flags        │
    │  (this dataclass) │    │  HTTP_PORT=...    │    │  --port 9000      │
    └───────────────────┘    └───────────────────┘    └───────────────────┘
         lowest                                             highest

The defaults reproduce the classic behaviour exactly: all interfaces,
port 8000, backlog 10, a 1 KB read buffer, files from the working
directory.

=============================================================================
FAIL FAST
=============================================================================

validate() runs before the socket is created. A typo in HTTP_PORT should
stop the process at startup with a clear message, not half-way through
binding.

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    CONTENT
    - root_dir, index_file

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "0.0.0.0"
    """
    The IP address to bind to.
    - "0.0.0.0" - All network interfaces (default)
    - "127.0.0.1" - Localhost only
    """

    port: int = 8000
    """
    The port number to listen on. 0 asks the OS for a free port.
    """

    backlog: int = 10
    """
    Maximum number of connections the OS queues before accept().
    """

    buffer_size: int = 1024
    """
    Bytes read from each connection. The request is read ONCE; anything
    past this is never seen. 1 KB easily holds a request line.
    """

    timeout: Optional[float] = None
    """
    Socket timeout for client connections in seconds.
    None = blocking. A client that never sends stalls the server.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """
    Directory request paths are resolved against.
    """

    index_file: str = "index.html"
    """
    File served for an empty path or a directory.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """
    Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """

    log_format: str = "text"
    """
    Access log format: 'text' or 'json'.
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTP_HOST         Bind address      (default: 0.0.0.0)
        HTTP_PORT         Port              (default: 8000)
        HTTP_BACKLOG      Listen backlog    (default: 10)
        HTTP_BUFFER_SIZE  Read buffer bytes (default: 1024)
        HTTP_TIMEOUT      Client timeout s  (default: none, blocking)
        HTTP_ROOT         Document root     (default: .)
        HTTP_INDEX        Index file        (default: index.html)
        HTTP_LOG_LEVEL    Logging level     (default: INFO)
        HTTP_LOG_FORMAT   text or json      (default: text)

        =====================================================================
        """
        timeout = os.getenv("HTTP_TIMEOUT")
        return cls(
            host=os.getenv("HTTP_HOST", "0.0.0.0"),
            port=int(os.getenv("HTTP_PORT", "8000")),
            backlog=int(os.getenv("HTTP_BACKLOG", "10")),
            buffer_size=int(os.getenv("HTTP_BUFFER_SIZE", "1024")),
            timeout=float(timeout) if timeout else None,
            root_dir=os.getenv("HTTP_ROOT", "."),
            index_file=os.getenv("HTTP_INDEX", "index.html"),
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
            log_format=os.getenv("HTTP_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid value.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 64:
            raise ValueError("buffer_size must be >= 64")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not self.index_file:
            raise ValueError("index_file must not be empty")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log_format: {self.log_format}. Must be 'text' or 'json'.")

        if not Path(self.root_dir).is_dir():
            raise ValueError(f"root_dir is not a directory: {self.root_dir}")
