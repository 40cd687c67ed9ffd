"""
=============================================================================
STATIC FILE RESOLUTION
=============================================================================

Maps a request path to file bytes on local disk, or to the 404 page.

=============================================================================
RESOLUTION FLOW
=============================================================================

    "css/site.css"
         │
         ├── empty?            ──► use the index file ("index.html")
         │
         ├── absolute, or escapes the document root?
         │                     ──► 404 (FORBIDDEN)
         │
         ├── a directory?      ──► serve <dir>/index.html
         │
         ├── read the file
         │      ├── missing    ──► 404 (NOT_FOUND)
         │      ├── 0 bytes    ──► 404 (EMPTY)
         │      ├── OSError    ──► 404 (IO_ERROR)
         │      └── bytes      ──► 200, extension from the path
         │
         ▼
    ResolvedContent(body, status, path, extension, failure)

Every 404 carries the same small HTML fragment, and its path is forced to
the index file so the response is labelled text/html.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

The request path comes straight off the wire. Without a check,

    GET /../../etc/passwd HTTP/1.1

would read files outside the document root. We resolve the full path
(normalizing ".." and following symlinks) and require it to still be
inside root_dir:

    full_path = (root_dir / user_input).resolve()
    full_path.relative_to(root_dir)  # Raises if outside root!

A rejected path gets the ordinary 404 page, so a probe learns nothing
about which files exist outside the root.

=============================================================================
EMPTY FILES
=============================================================================

A zero-byte file is served as 404, the same as a missing one. The
response cannot tell them apart; ResolvedContent.failure can, and the
server logs it.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..http.mime_types import get_extension
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


NOT_FOUND_PAGE = b"<h1 style='color:red;'>404 Page Not Found</h1>"

DEFAULT_INDEX_FILE = "index.html"


class ResolutionFailure(Enum):
    """Why a path resolved to the 404 page."""

    NOT_FOUND = "not_found"    # No such file
    EMPTY = "empty"            # File exists but has no bytes
    IO_ERROR = "io_error"      # Exists but could not be read
    FORBIDDEN = "forbidden"    # Absolute path or outside the document root


@dataclass(frozen=True)
class ResolvedContent:
    """
    Outcome of resolving one request path.

    Attributes:
        body:      File bytes, or NOT_FOUND_PAGE.
        status:    HTTPStatus.OK or HTTPStatus.NOT_FOUND.
        path:      Effective path (index file substituted where needed).
        extension: Content-type token, None if the path has none.
        failure:   Reason for a 404, None on success.
    """

    body: bytes
    status: HTTPStatus
    path: str
    extension: Optional[str]
    failure: Optional[ResolutionFailure] = None

    @property
    def found(self) -> bool:
        return self.failure is None


class StaticFileHandler:
    """
    Resolves request paths against a document root.

    =========================================================================
    USAGE
    =========================================================================

        handler = StaticFileHandler(root_dir="./public")

        content = handler.resolve("css/site.css")
        content.status      # HTTPStatus.OK
        content.extension   # "css"

        content = handler.resolve("nope.css")
        content.status      # HTTPStatus.NOT_FOUND
        content.failure     # ResolutionFailure.NOT_FOUND

    No caching: every call reads the file again, so edits on disk show up
    on the next request.

    =========================================================================
    """

    def __init__(self, root_dir: str = ".", index_file: str = DEFAULT_INDEX_FILE):
        """
        Args:
            root_dir:   Directory files are served from. Resolved to an
                        absolute path once, here.
            index_file: File served for an empty path or a directory.

        Raises:
            ValueError: If root_dir is not an existing directory.
        """
        self.root_dir = Path(root_dir).resolve()
        self.index_file = index_file

        if not self.root_dir.is_dir():
            raise ValueError(f"Document root does not exist: {root_dir}")

    def resolve(self, path: str) -> ResolvedContent:
        """
        Resolve a request path to content.

        Never raises: every failure becomes a 404 ResolvedContent.

        Args:
            path: Path as extracted by RequestParser (leading "/" already
                  stripped). Empty means the index file.
        """
        path = path or self.index_file

        # ─────────────────────────────────────────────────────────────────
        # SECURITY: ABSOLUTE PATHS AND TRAVERSAL
        # ─────────────────────────────────────────────────────────────────
        if path.startswith("/") or os.path.isabs(path):
            logger.warning(f"Rejected absolute path: {path!r}")
            return self.not_found(ResolutionFailure.FORBIDDEN)

        try:
            full_path = (self.root_dir / path).resolve()
            full_path.relative_to(self.root_dir)
        except ValueError:
            # Outside root_dir, or an embedded NUL byte in the path
            logger.warning(f"Rejected path outside document root: {path!r}")
            return self.not_found(ResolutionFailure.FORBIDDEN)
        except OSError as e:
            logger.warning(f"Could not resolve {path!r}: {e}")
            return self.not_found(ResolutionFailure.IO_ERROR)

        # ─────────────────────────────────────────────────────────────────
        # DIRECTORY INDEX
        # ─────────────────────────────────────────────────────────────────
        if full_path.is_dir():
            full_path = full_path / self.index_file
            path = f"{path.rstrip('/')}/{self.index_file}"

        # ─────────────────────────────────────────────────────────────────
        # READ
        # ─────────────────────────────────────────────────────────────────
        try:
            body = full_path.read_bytes()
        except FileNotFoundError:
            logger.debug(f"Not found: {path!r}")
            return self.not_found(ResolutionFailure.NOT_FOUND)
        except OSError as e:
            logger.warning(f"Error reading {path!r}: {e}")
            return self.not_found(ResolutionFailure.IO_ERROR)

        if not body:
            logger.debug(f"Empty file served as 404: {path!r}")
            return self.not_found(ResolutionFailure.EMPTY)

        return ResolvedContent(
            body=body,
            status=HTTPStatus.OK,
            path=path,
            extension=get_extension(path),
        )

    def not_found(self, failure: ResolutionFailure) -> ResolvedContent:
        """
        The 404 outcome.

        The path is forced to the index file and the extension to "html",
        since the body is always the HTML fragment.
        """
        return ResolvedContent(
            body=NOT_FOUND_PAGE,
            status=HTTPStatus.NOT_FOUND,
            path=self.index_file,
            extension="html",
            failure=failure,
        )
