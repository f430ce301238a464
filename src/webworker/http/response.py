"""
=============================================================================
HTTP RESPONSE HEADER WRITER
=============================================================================

Writes the status line and header block of the one response a worker
sends.

=============================================================================
RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     WHAT GOES ON THE WIRE                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\n                   ← or 404 NOT FOUND           │
    │    Date: Oct 18, 2026 9:05:03 PM\n     ← GMT                        │
    │    Server: WebWorker/1.0\n                                           │
    │    Connection: close\n                 ← never keep-alive           │
    │    Content-Type: text/html\n                                         │
    │    \n                                  ← end of headers             │
    │    <body bytes...>                                                   │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

There is no Content-Length. The body is streamed with substitutions
applied on the fly, so its size isn't known up front; closing the
connection is what tells the client the body is over.

=============================================================================
"""

from datetime import datetime, timezone
from typing import BinaryIO, Optional

from ..exceptions import ResponseWriteError
from .request import ResolvedResource
from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"


def format_server_date(dt: Optional[datetime] = None) -> str:
    """
    Format a datetime the way the Date header and <cs371date> show it.

    Medium date and time, converted to GMT:

        Oct 18, 2026 9:05:03 PM

    Month and AM/PM are spelled out here instead of going through
    strftime, so the output does not depend on the process locale.

    Args:
        dt: Moment to format. Defaults to now. Naive datetimes are
            taken to be UTC already.
    """
    if dt is None:
        dt = datetime.now(timezone.utc)
    elif dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"

    return (
        f"{months[dt.month - 1]} {dt.day}, {dt.year} "
        f"{hour}:{dt.minute:02d}:{dt.second:02d} {meridiem}"
    )


def status_for(resolved: ResolvedResource) -> HTTPStatus:
    """200 for a Found resource, 404 for everything else."""
    return HTTPStatus.OK if resolved.found else HTTPStatus.NOT_FOUND


def status_line(status: HTTPStatus) -> str:
    """
    Build the status line (without terminator).

        >>> status_line(HTTPStatus.NOT_FOUND)
        'HTTP/1.1 404 NOT FOUND'
    """
    return f"{HTTP_VERSION} {int(status)} {status.phrase}"


def build_header(
    content_type: str,
    resolved: ResolvedResource,
    server_name: str,
    now: Optional[datetime] = None,
) -> bytes:
    """
    Serialize the status line and header block, blank line included.

    Lines end in a bare "\\n" and the block ends in "\\n\\n".
    """
    lines = [
        status_line(status_for(resolved)),
        f"Date: {format_server_date(now)}",
        f"Server: {server_name}",
        "Connection: close",
        f"Content-Type: {content_type}",
    ]
    return ("\n".join(lines) + "\n\n").encode("utf-8")


def write_header(
    output: BinaryIO,
    content_type: str,
    resolved: ResolvedResource,
    server_name: str,
    now: Optional[datetime] = None,
) -> None:
    """
    Write the response header block to the client.

    Args:
        output: Binary writer for the connection.
        content_type: MIME label for the Content-Type header.
        resolved: Resolution outcome; picks 200 or 404.
        server_name: Value of the Server header.
        now: Timestamp for the Date header (defaults to now).

    Raises:
        ResponseWriteError: If the client connection can't be written to.
    """
    data = build_header(content_type, resolved, server_name, now)
    try:
        output.write(data)
    except OSError as e:
        raise ResponseWriteError(f"Failed to write response header: {e}") from e
