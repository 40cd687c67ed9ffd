"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can put on the wire, with their reason
phrases.

=============================================================================
WHICH CODES DO WE ACTUALLY SEND?
=============================================================================

A static file server with no methods, no bodies and no ranges needs
exactly two codes:

    ┌───────┬────────────────────────┬─────────────────────────────────────┐
    │ Code  │ Phrase                 │ When                                │
    ├───────┼────────────────────────┼─────────────────────────────────────┤
    │ 200   │ OK                     │ File found and non-empty            │
    │ 404   │ Not Found              │ Missing, empty, unreadable, outside │
    │       │                        │ the document root, or anything else │
    │       │                        │ went wrong while answering          │
    └───────┴────────────────────────┴─────────────────────────────────────┘

=============================================================================
STATUS LINE
=============================================================================

    HTTP/1.1 404 Not Found
             ─┬─ ────┬────
              │      └── Reason phrase (HTTPStatus.phrase)
              └───────── Status code   (int(HTTPStatus))

Older versions of this server always wrote "OK" as the reason phrase,
even for 404. Clients mostly ignore the phrase, but humans reading
captures do not, so every code now carries its standard phrase.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare and format as plain integers:

        >>> HTTPStatus.NOT_FOUND == 404
        True
        >>> f"{HTTPStatus.NOT_FOUND:d}"
        '404'
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                        # File served
    NOT_FOUND = 404                 # Nothing to serve

    @property
    def phrase(self) -> str:
        """Reason phrase for the status line."""
        return _STATUS_PHRASES[self]


# =============================================================================
# REASON PHRASES (RFC 9110 §15)
# =============================================================================

_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
}
