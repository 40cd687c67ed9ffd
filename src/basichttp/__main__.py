"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    # Serve the current directory on 0.0.0.0:8000
    python -m basichttp

    # Another directory and port
    python -m basichttp --root ./public --port 3000

    # Localhost only, JSON access log
    python -m basichttp --host 127.0.0.1 --log-format json

Settings are read from the environment first (HTTP_PORT, HTTP_ROOT, ...;
see ServerConfig.from_env) and command-line flags override them.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import ServerConfig, LOG_LEVELS, LOG_FORMATS
from .server import HTTPServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="basic-http-server",
        description="Minimal static file HTTP/1.1 server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m basichttp                       # Serve . on 0.0.0.0:8000
  python -m basichttp --port 3000           # Custom port
  python -m basichttp --root ./public       # Serve another directory
  python -m basichttp --host 127.0.0.1      # Localhost only
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        help="Host to bind to (default: 0.0.0.0, all interfaces)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        help="Port to listen on (default: 8000)"
    )

    parser.add_argument(
        "--backlog", "-b",
        type=int,
        help="Listen backlog (default: 10)"
    )

    parser.add_argument(
        "--buffer-size",
        type=int,
        help="Request read buffer in bytes (default: 1024)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        help="Client socket timeout in seconds (default: none, blocking)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        dest="root_dir",
        help="Directory to serve files from (default: current directory)"
    )

    parser.add_argument(
        "--index",
        dest="index_file",
        help="File served for an empty path (default: index.html)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        help="Access log format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"basic-http-server {__version__}"
    )

    return parser


def load_config(argv: Optional[Sequence[str]] = None) -> ServerConfig:
    """
    Build a ServerConfig: environment first, then any flags given.

    Raises:
        ValueError: If an environment variable holds a non-numeric value
                    for a numeric setting.
    """
    args = build_parser().parse_args(argv)
    config = ServerConfig.from_env()

    for name, value in vars(args).items():
        if value is not None:
            setattr(config, name, value)

    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status: 0 after a clean shutdown, 1 if configuration
        or socket setup failed.
    """
    try:
        config = load_config(argv)
        server = HTTPServer(config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
