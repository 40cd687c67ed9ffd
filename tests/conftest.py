"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Tuple

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from basichttp import HTTPServer, ServerConfig


# 50 bytes exactly
INDEX_HTML = b"<html><body>" + b"A" * 24 + b"</body></html>"
STYLE_CSS = b"body { margin: 0; color: #333; }\n"
SUB_INDEX_HTML = b"<p>docs home</p>"
README = b"plain text, no extension\n"
SECRET = b"outside the document root\n"


def populate_docroot(base: Path) -> Path:
    """
    Build a document root under `base`:

        base/
        ├── secret.txt          (outside the root)
        └── www/
            ├── index.html      (50 bytes)
            ├── style.css
            ├── empty.html      (0 bytes)
            ├── README
            ├── docs/index.html
            └── bare/           (no index file)
    """
    (base / "secret.txt").write_bytes(SECRET)

    root = base / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "style.css").write_bytes(STYLE_CSS)
    (root / "empty.html").write_bytes(b"")
    (root / "README").write_bytes(README)
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_bytes(SUB_INDEX_HTML)
    (root / "bare").mkdir()
    return root


def http_request(address: Tuple[str, int], raw: bytes, timeout: float = 5.0) -> bytes:
    """Send raw bytes on a fresh connection and read until the server closes."""
    with socket.create_connection(address, timeout=timeout) as sock:
        if raw:
            sock.sendall(raw)
        else:
            sock.shutdown(socket.SHUT_WR)

        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)

    return b"".join(chunks)


def split_response(data: bytes) -> Tuple[str, list, bytes]:
    """Split a raw response into (status line, header lines, body)."""
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    return lines[0], lines[1:], body


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:8000\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html, */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def docroot(tmp_path: Path) -> Path:
    """A populated document root in a temp directory."""
    return populate_docroot(tmp_path)


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class RunningServer:
    """Runs an HTTPServer in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self) -> Tuple[str, int]:
        return self.server.address

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes) -> bytes:
        return http_request(self.address, raw)


@pytest.fixture(scope="module")
def running_server(tmp_path_factory) -> Generator[RunningServer, None, None]:
    """A live server on an ephemeral localhost port, shared per module."""
    root = populate_docroot(tmp_path_factory.mktemp("site"))

    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        root_dir=str(root),
        timeout=5.0,
        log_level="WARNING",
    ))

    running = RunningServer(server)
    running.start()

    yield running

    running.stop()
