"""
=============================================================================
CONTENT-TYPE DETECTION
=============================================================================

Turns a request path into the value of the Content-Type header.

=============================================================================
THE "text/<extension>" CONVENTION
=============================================================================

This server does not keep a MIME database. It takes the file extension
and puts it straight after "text/":

    index.html  ──►  html  ──►  Content-Type: text/html
    style.css   ──►  css   ──►  Content-Type: text/css
    app.js      ──►  js    ──►  Content-Type: text/js
    README      ──►  None  ──►  Content-Type: application/octet-stream

That is a best-effort guess, and it is right for the pages and
stylesheets the server exists to serve. It is wrong for images and
fonts, which browsers mostly sniff anyway.

=============================================================================
EXTENSION RULES
=============================================================================

    1. Anything from the first space on is dropped first:
           "index.html HTTP/1.1" → "html"
    2. Only the final path component is looked at:
           "assets.v2/logo"  → no extension (the dot is in a directory)
    3. The extension is everything after the LAST dot:
           "bundle.min.js"   → "js"
    4. No dot, or nothing after the dot → None

=============================================================================
"""

from typing import Optional


# application/octet-stream = "I don't know what this is, treat as binary"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Every Content-Type this server emits for a known extension lives
# under this top-level type.
CONTENT_TYPE_PREFIX = "text/"


def get_extension(path: str) -> Optional[str]:
    """
    Extract the extension token from a request path.

    Args:
        path: Request path, relative or absolute, "/" separated.

    Returns:
        The text after the last "." of the final path component, cut at
        the first space. None if there is no usable extension.

    Examples:
        >>> get_extension("index.html")
        'html'

        >>> get_extension("css/site.min.css")
        'css'

        >>> get_extension("LICENSE") is None
        True
    """
    name = path.split(" ", 1)[0].rsplit("/", 1)[-1]
    dot = name.rfind(".")
    if dot == -1:
        return None

    return name[dot + 1:] or None


def get_content_type(extension: Optional[str]) -> str:
    """
    Map an extension token to a Content-Type header value.

    Examples:
        >>> get_content_type("html")
        'text/html'

        >>> get_content_type(None)
        'application/octet-stream'
    """
    if not extension:
        return DEFAULT_CONTENT_TYPE
    return f"{CONTENT_TYPE_PREFIX}{extension}"
