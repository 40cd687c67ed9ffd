"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

Everything that knows what HTTP looks like on the wire:

    request.py       Request line → ParsedRequest(method, path)
    response.py      (status, extension, body) → response bytes
    status_codes.py  HTTPStatus enum with reason phrases
    mime_types.py    Path → extension token → Content-Type value

Nothing in here touches sockets or the filesystem.

=============================================================================
"""

from .request import ParsedRequest, RequestParser, parse_request
from .response import HTTPResponse, ResponseBuilder
from .status_codes import HTTPStatus
from .mime_types import get_extension, get_content_type

__all__ = [
    # Request parsing
    "ParsedRequest",
    "RequestParser",
    "parse_request",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",

    # Status codes
    "HTTPStatus",

    # Content types
    "get_extension",
    "get_content_type",
]
