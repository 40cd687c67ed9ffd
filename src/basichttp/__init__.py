"""
=============================================================================
BASICHTTP - A Minimal Static File HTTP/1.1 Server
=============================================================================

Serves files from a directory over raw sockets, one connection at a time.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │   GET /style.css HTTP/1.1          HTTP/1.1 200 OK                  │
    │   Host: localhost:8000      ───►   Content-Type: text/css           │
    │                                    Connection: close                │
    │                                                                     │
    │                                    body { margin: 0 }               │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

    - Request line only: method and path, nothing else is parsed
    - Files are read from the document root on every request
    - Missing or empty files get a fixed 404 page
    - One connection at a time, closed after every response

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    basichttp/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m basichttp)
    ├── server.py            # HTTPServer + ConnectionHandler
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # Per-connection access log lines
    ├── core/
    │   ├── socket_server.py # Listening socket and accept loop
    │   └── connection.py    # One client connection
    ├── http/
    │   ├── request.py       # Request line parsing
    │   ├── response.py      # Response framing
    │   ├── status_codes.py  # HTTPStatus enum
    │   └── mime_types.py    # Extension → Content-Type
    └── handlers/
        └── static.py        # Path → file bytes or 404

=============================================================================
QUICK START
=============================================================================

    from basichttp import HTTPServer, ServerConfig

    HTTPServer(ServerConfig(root_dir="./public")).run()

or from a shell, in the directory to serve:

    python -m basichttp

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer, ConnectionHandler
from .config import ServerConfig

__all__ = ["HTTPServer", "ConnectionHandler", "ServerConfig", "__version__"]
