"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Frames a status, a content-type token and a body into the bytes that go
back over the socket.

=============================================================================
RESPONSE ANATOMY
=============================================================================

Every response this server sends has exactly this shape:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                     │
    │  HTTP/1.1 200 OK\r\n                 ← status line                 │
    │  Content-Type: text/html\r\n         ← from the file extension     │
    │  Connection: close\r\n               ← always, one request per     │
    │                                         connection                  │
    │  \r\n                                ← exactly one blank line      │
    │  <!DOCTYPE html>...                  ← raw file bytes              │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

No Content-Length: the body ends when the server closes the connection,
which it always does right after writing. No Date, no Server header.

=============================================================================
WHY TWO LAYERS?
=============================================================================

    ResponseBuilder.response(...)  →  HTTPResponse   (inspectable, for tests
                                                      and access logging)
    HTTPResponse.to_bytes()        →  bytes          (wire format)

    ResponseBuilder.build(...)     →  bytes          (both steps at once)

HTTPResponse is frozen: it is built once, serialized once, written once.

=============================================================================
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Union

from .mime_types import get_content_type
from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"


@dataclass(frozen=True)
class HTTPResponse:
    """
    An HTTP response ready to be serialized.

    Attributes:
        status:  HTTPStatus (IntEnum, formats as the numeric code).
        headers: Header name → value, in emission order. Read-only.
        body:    Response body bytes.
        version: Protocol version for the status line.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = HTTP_VERSION

    def __post_init__(self):
        # Freeze the header mapping too; frozen=True only guards attributes
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))

    @property
    def status_line(self) -> str:
        """
        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 Not Found"
        """
        return f"{self.version} {self.status:d} {self.status.phrase}"

    def to_bytes(self) -> bytes:
        """
        Serialize to wire format.

            HTTP/1.1 200 OK\\r\\n
            Content-Type: text/css\\r\\n
            Connection: close\\r\\n
            \\r\\n
            body-bytes

        Header text is latin-1 per RFC 9110; the body is passed through
        untouched.
        """
        lines = [self.status_line]
        lines.extend(f"{name}: {value}" for name, value in self.headers.items())

        # Trailing "" yields the blank line that ends the header block
        lines.append("")
        lines.append("")

        return "\r\n".join(lines).encode("latin-1") + self.body


class ResponseBuilder:
    """
    Builds the fixed three-line response used for every reply.

    ==========================================================================
    USAGE
    ==========================================================================

        builder = ResponseBuilder()

        # Structured form
        response = builder.response(HTTPStatus.OK, "css", b"body { }")
        response.headers["Content-Type"]   # "text/css"

        # Straight to wire bytes
        data = builder.build(HTTPStatus.NOT_FOUND, "html", page)

    ==========================================================================
    """

    def __init__(self, version: str = HTTP_VERSION):
        """
        Args:
            version: Protocol version written on the status line.
        """
        self._version = version

    def response(
        self,
        status: Union[HTTPStatus, int],
        extension: Optional[str],
        body: Union[str, bytes],
    ) -> HTTPResponse:
        """
        Assemble an HTTPResponse.

        Args:
            status:    Status code (HTTPStatus or plain int).
            extension: Content-type token, e.g. "html". None or "" falls
                       back to application/octet-stream.
            body:      Body bytes; str is encoded as UTF-8.

        Returns:
            Frozen HTTPResponse with exactly one Content-Type and one
            Connection header.
        """
        if isinstance(body, str):
            body = body.encode("utf-8")

        return HTTPResponse(
            status=HTTPStatus(status),
            headers={
                "Content-Type": get_content_type(extension),
                "Connection": "close",
            },
            body=body,
            version=self._version,
        )

    def build(
        self,
        status: Union[HTTPStatus, int],
        extension: Optional[str],
        body: Union[str, bytes],
    ) -> bytes:
        """Assemble and serialize in one step."""
        return self.response(status, extension, body).to_bytes()
