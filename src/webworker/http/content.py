"""
=============================================================================
CONTENT WRITER
=============================================================================

Streams the response body: either the requested document, with two
server-side tokens filled in, or a fixed 404 page.

=============================================================================
SERVER-SIDE SUBSTITUTION
=============================================================================

Documents can carry two tokens that are replaced on the way out:

    ┌──────────────────┬──────────────────────────────────────────────────┐
    │  Token           │  Replaced with                                   │
    ├──────────────────┼──────────────────────────────────────────────────┤
    │  <cs371date>     │  current time, same format as the Date header   │
    │  <cs371server>   │  the configured server identity                 │
    └──────────────────┴──────────────────────────────────────────────────┘

Every occurrence on every line is replaced. The timestamp is taken once
per response, so all <cs371date> tokens in one document agree.

=============================================================================
STREAMING RULES
=============================================================================

    for each line of the file (terminator included):
        substitute tokens
        write it
        if the line contains </html>: stop

1. Lines are read in binary and split on "\\n", "\\r\\n" or a bare "\\r", so
   every terminator, and a final line with none, goes out exactly as
   it is in the file.
2. Anything after the line holding </html> is never sent, even if the
   file goes on. A document without </html> is sent to the end.
3. If the file disappears between resolution and streaming, the part
   already written stays written and the connection is given up.

=============================================================================
"""

import logging
from datetime import datetime
from typing import BinaryIO, Optional

from ..exceptions import ResourceReadError, ResponseWriteError
from .lines import LineReader
from .request import ResolvedResource
from .response import format_server_date


logger = logging.getLogger(__name__)


DATE_TOKEN = b"<cs371date>"
SERVER_TOKEN = b"<cs371server>"
END_TAG = b"</html>"

NOT_FOUND_BODY = (
    b"<html><h1>404 NOT FOUND!</h1><body><p>The resource you requested is "
    b"not present on the server. <br/><br/>Sorry.:( </p></body></html>"
)


def substitute(line: bytes, date_text: bytes, identity: bytes) -> bytes:
    """
    Replace every substitution token in one line.

        >>> substitute(b"<cs371server>/<cs371server>\\n", b"now", b"me")
        b'me/me\\n'
    """
    return line.replace(DATE_TOKEN, date_text).replace(SERVER_TOKEN, identity)


class ContentWriter:
    """
    Writes the response body for one resolution outcome.

    Usage:
        writer = ContentWriter(config.identity)
        writer.write(conn.writer, resolved)

    Args:
        server_identity: Text substituted for <cs371server>.
        connection_id: Prefix for log lines.
    """

    def __init__(self, server_identity: str, connection_id: str = "-"):
        self.server_identity = server_identity
        self.connection_id = connection_id

    def write(
        self,
        output: BinaryIO,
        resolved: ResolvedResource,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Write the body and return the number of bytes written.

        Raises:
            ResourceReadError: The resolved file could not be opened or read.
            ResponseWriteError: The client connection can't be written to.
        """
        if not resolved.found:
            logger.debug(f"[{self.connection_id}] Sending 404 body")
            self._send(output, NOT_FOUND_BODY)
            return len(NOT_FOUND_BODY)

        return self._stream(output, resolved.path, now)

    def _stream(self, output: BinaryIO, path, now: Optional[datetime]) -> int:
        date_text = format_server_date(now).encode("utf-8")
        identity = self.server_identity.encode("utf-8")
        written = 0

        try:
            source = open(path, "rb")
        except OSError as e:
            raise ResourceReadError(f"Cannot open {path}: {e}", path) from e

        with source:
            lines = LineReader(source)
            while True:
                try:
                    line = lines.readline()
                except OSError as e:
                    raise ResourceReadError(f"Read failed on {path}: {e}", path) from e

                if not line:
                    break  # End of file without a closing tag

                line = substitute(line, date_text, identity)
                self._send(output, line)
                written += len(line)

                if END_TAG in line:
                    break

        logger.debug(f"[{self.connection_id}] Streamed {written} bytes from {path}")
        return written

    def _send(self, output: BinaryIO, data: bytes) -> None:
        try:
            output.write(data)
        except OSError as e:
            raise ResponseWriteError(f"Failed to write response body: {e}") from e


def write_content(
    output: BinaryIO,
    resolved: ResolvedResource,
    server_identity: str,
    now: Optional[datetime] = None,
) -> int:
    """
    Convenience function to write a response body.

    Shorthand for ContentWriter(server_identity).write(output, resolved, now).
    """
    return ContentWriter(server_identity).write(output, resolved, now)
