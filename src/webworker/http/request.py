"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Reads ONE HTTP request off a connection and decides which file, if any,
it asks for.

=============================================================================
TCP IS A BYTE STREAM
=============================================================================

The request arrives in whatever chunks the network hands us, and there
is no length prefix telling us how big the header block is. The only
framing is the line structure itself:

    GET /index.html HTTP/1.1\r\n      ← request line (the one we use)
    Host: localhost:8080\r\n          ← header lines (read and dropped)
    User-Agent: curl/8.0\r\n
    \r\n                              ← empty line: end of request

So we read line by line. readline() blocks until a full line (or end of
stream) is there, which means a slow client just makes us wait; we never
spin on "no data yet". Lines may end in "\r\n", "\n" or a bare "\r"
(see lines.py).

=============================================================================
RESOLUTION
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Request line → ResolvedResource                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   "GET /docs/a.html HTTP/1.1"                                       │
    │         │                                                            │
    │         ▼  first "/" up to the next space                           │
    │   "/docs/a.html"                                                     │
    │         │                                                            │
    │         ▼  prefix onto the server root                              │
    │   <root>/docs/a.html                                                 │
    │         │                                                            │
    │         ├── regular, readable file inside root ──► Found(path)      │
    │         └── anything else                       ──► NOT_FOUND       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Method and version are never checked. "BREW /pot HTCPCP/1.0" resolves
/pot just like a GET would.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from .lines import LineReader


logger = logging.getLogger(__name__)


# =============================================================================
# RESOLUTION OUTCOME
# =============================================================================

class ResolvedResource:
    """
    Outcome of matching a requested path to the filesystem.

    Either Found(path) or NOT_FOUND. Both the header writer and the
    content writer branch on it, so the status line and the body always
    agree.
    """

    found: bool = False


@dataclass(frozen=True)
class Found(ResolvedResource):
    """
    A regular file that existed and was readable when the request was parsed.

    Nothing stops it from disappearing afterwards; the content writer
    reports that as a ResourceReadError.
    """

    path: Path
    found = True


@dataclass(frozen=True)
class NotFound(ResolvedResource):
    """No servable resource: missing, directory, unreadable, or no path."""


NOT_FOUND = NotFound()


# =============================================================================
# PARSER
# =============================================================================

def extract_path(request_line: str) -> Optional[str]:
    """
    Pull the requested path out of a request line.

    The path starts at the first "/" and runs to the next space, or to
    the end of the line when there is no space after it:

        >>> extract_path("GET /index.html HTTP/1.1")
        '/index.html'
        >>> extract_path("GET /index.html")
        '/index.html'
        >>> extract_path("garbage") is None
        True
    """
    start = request_line.find("/")
    if start < 0:
        return None

    end = request_line.find(" ", start)
    if end < 0:
        return request_line[start:]
    return request_line[start:end]


class RequestParser:
    """
    Parses a single HTTP request from a binary reader.

    Usage:
        parser = RequestParser(config.server_root)
        resolved = parser.parse(conn.reader)
        if resolved.found:
            ...

    Args:
        server_root: Directory requested paths are resolved against.
        connection_id: Prefix for log lines, to tell connections apart.
    """

    def __init__(self, server_root: Path, connection_id: str = "-"):
        self.server_root = Path(server_root)
        self.connection_id = connection_id

    def parse(self, reader: BinaryIO) -> ResolvedResource:
        """
        Consume the request and return the resolution outcome.

        Reads lines until the empty line that ends the header block, or
        until the stream ends. Only the request line is looked at; every
        other line is discarded.

        An OSError from the reader (reset, timeout, closed socket) stops
        parsing on the spot and the outcome is NOT_FOUND.
        """
        resolved: ResolvedResource = NOT_FOUND
        lines = LineReader(reader)
        first = True

        while True:
            try:
                # No lookahead: a client ending lines in "\r" waits for us
                raw = lines.readline(lookahead=False)
            except OSError as e:
                logger.warning(f"[{self.connection_id}] Request read failed: {e}")
                return NOT_FOUND

            if not raw:
                break  # Client closed its side before the empty line

            line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            logger.debug(f"[{self.connection_id}] Request line: ({line})")

            if first:
                first = False
                candidate = extract_path(line)
                if candidate is None:
                    logger.info(f"[{self.connection_id}] No path in request line: {line!r}")
                else:
                    resolved = self.resolve(candidate)

            if not line:
                break  # End of header block

        return resolved

    def resolve(self, candidate: str) -> ResolvedResource:
        """
        Map a request path onto the server root.

        The path is always taken relative to the root, even though it
        starts with "/". Anything that normalizes to a location outside
        the root is treated as missing.
        """
        root = self.server_root.resolve()

        try:
            full_path = (root / candidate.lstrip("/")).resolve()
            full_path.relative_to(root)
        except (OSError, RuntimeError, ValueError):
            # Escapes the root, symlink loop, or a NUL byte the OS can't look up
            logger.warning(f"[{self.connection_id}] Rejected path: {candidate!r}")
            return NOT_FOUND

        try:
            servable = full_path.is_file() and os.access(full_path, os.R_OK)
        except (OSError, ValueError):
            servable = False

        if servable:
            logger.info(f"[{self.connection_id}] File found: {full_path}")
            return Found(full_path)

        logger.info(f"[{self.connection_id}] Not found: {candidate}")
        return NOT_FOUND


def parse_request(reader: BinaryIO, server_root: Path) -> ResolvedResource:
    """
    Convenience function to parse a request.

    Shorthand for RequestParser(server_root).parse(reader).
    """
    return RequestParser(server_root).parse(reader)
