"""
=============================================================================
REQUEST LINE PARSING
=============================================================================

Extracts the method and the target path from the raw bytes of a request.

=============================================================================
WHAT WE PARSE (AND WHAT WE DON'T)
=============================================================================

An HTTP request starts with a request line:

    GET /css/site.css HTTP/1.1\r\n
    ─┬─ ──────┬────── ────┬───
     │        │           └── Version   (ignored)
     │        └────────────── Target    → "css/site.css"
     └─────────────────────── Method    → "GET"

    Host: localhost:8000\r\n               ← headers (ignored)
    \r\n

This server only ever needs the first two tokens, so that is all the
parser looks at. It is deliberately NOT a conformant HTTP parser: no
header parsing, no version negotiation, no percent-decoding, no query
string handling.

=============================================================================
OFFSET RULES
=============================================================================

    parse_method:  everything before the first space

    parse_path:    first space ──► skip 2 chars (" /") ──► next space

        G E T   / i n d e x . h t m l   H T T P / 1 . 1
              ▲   ▲                   ▲
              │   └── start           └── end
              └────── first space

Only the request line (up to the first line break) is searched, so a
space inside a header can never be mistaken for the end of the path.

=============================================================================
NEVER RAISES
=============================================================================

Short, truncated or garbage input degrades to empty strings:

    b""                   → method "",    path ""
    b"GET"                → method "",    path ""
    b"GET  HTTP/1.1\r\n"  → method "GET", path ""
    b"GET /index.html"    → method "GET", path ""   (no closing space)

An empty path is later replaced by the index file, so a broken request
still gets a page back.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Union


RawRequest = Union[bytes, str]


@dataclass(frozen=True)
class ParsedRequest:
    """
    The two tokens this server cares about, extracted once per connection.

    Attributes:
        method: The method token ("GET", "HEAD", ...). Empty if the request
                line had no space.
        path:   The target with its leading "/" stripped. Empty when the
                target could not be delimited or was just "/".
    """

    method: str
    path: str


class RequestParser:
    """
    Extracts the method and target path from a raw request buffer.

    Usage:
        parser = RequestParser()
        request = parser.parse(b"GET /index.html HTTP/1.1\\r\\n\\r\\n")
        request.method  # "GET"
        request.path    # "index.html"
    """

    # " /" between the method and the target path
    PATH_OFFSET = 2

    def parse(self, raw: RawRequest) -> ParsedRequest:
        """
        Parse a raw request buffer.

        Args:
            raw: Bytes as read from the socket (or an already decoded str).

        Returns:
            ParsedRequest with best-effort method and path.
        """
        line = self._request_line(raw)
        return ParsedRequest(
            method=self._method(line),
            path=self._path(line),
        )

    def parse_method(self, raw: RawRequest) -> str:
        """Return the substring before the first space, or "" if there is none."""
        return self._method(self._request_line(raw))

    def parse_path(self, raw: RawRequest) -> str:
        """
        Return the target path between the first and second spaces.

        Two characters are skipped after the first space (the space itself
        and the leading "/"). Returns "" when either space is missing.
        """
        return self._path(self._request_line(raw))

    # =========================================================================
    # INTERNALS
    # =========================================================================

    @staticmethod
    def _request_line(raw: RawRequest) -> str:
        """
        Decode the buffer and cut it at the first line break.

        Decoded the way the OS decodes file names (surrogateescape), so
        the path encodes back to the exact bytes the client sent and a
        non-ASCII target finds its file. Undecodable bytes never raise.
        """
        text = os.fsdecode(raw) if isinstance(raw, bytes) else raw
        for terminator in ("\r", "\n"):
            end = text.find(terminator)
            if end != -1:
                text = text[:end]
        return text

    @staticmethod
    def _method(line: str) -> str:
        space = line.find(" ")
        if space == -1:
            return ""
        return line[:space]

    def _path(self, line: str) -> str:
        first_space = line.find(" ")
        if first_space == -1:
            return ""

        start = first_space + self.PATH_OFFSET
        end = line.find(" ", start)
        if end == -1:
            return ""

        return line[start:end]


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

_parser = RequestParser()


def parse_request(raw: RawRequest) -> ParsedRequest:
    """Parse a raw request buffer with a shared RequestParser."""
    return _parser.parse(raw)


def parse_method(raw: RawRequest) -> str:
    return _parser.parse_method(raw)


def parse_path(raw: RawRequest) -> str:
    return _parser.parse_path(raw)
