"""
=============================================================================
HTTP PROTOCOL PACKAGE
=============================================================================

The three steps a worker runs, in order, for its one request:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   request.py   RequestParser  ──►  ResolvedResource                 │
    │                                     (Found(path) | NOT_FOUND)       │
    │                                          │                           │
    │                      ┌───────────────────┴──────────┐                │
    │                      ▼                              ▼                │
    │   response.py   write_header()            content.py ContentWriter  │
    │                 200 OK / 404 NOT FOUND    document or 404 page      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import (
    ResolvedResource,
    Found,
    NotFound,
    NOT_FOUND,
    RequestParser,
    extract_path,
    parse_request,
)
from .response import (
    build_header,
    format_server_date,
    status_for,
    status_line,
    write_header,
)
from .content import (
    ContentWriter,
    NOT_FOUND_BODY,
    substitute,
    write_content,
)
from .lines import LineReader
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "ResolvedResource",
    "Found",
    "NotFound",
    "NOT_FOUND",
    "RequestParser",
    "extract_path",
    "parse_request",

    # Header writing
    "build_header",
    "format_server_date",
    "status_for",
    "status_line",
    "write_header",

    # Body writing
    "ContentWriter",
    "NOT_FOUND_BODY",
    "substitute",
    "write_content",

    # Line splitting
    "LineReader",

    # Status codes
    "HTTPStatus",
]
