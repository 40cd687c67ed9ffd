"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    from basichttp.handlers import StaticFileHandler

    static = StaticFileHandler(root_dir="./public")
    content = static.resolve("index.html")

=============================================================================
"""

from .static import (
    StaticFileHandler,
    ResolvedContent,
    ResolutionFailure,
    NOT_FOUND_PAGE,
)

__all__ = [
    "StaticFileHandler",
    "ResolvedContent",
    "ResolutionFailure",
    "NOT_FOUND_PAGE",
]
