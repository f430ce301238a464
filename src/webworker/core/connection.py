"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket and lends a worker the two things it
needs: a buffered reader and a writer.

=============================================================================
WHY makefile()?
=============================================================================

TCP does not preserve message boundaries. A request line may arrive as

    recv() → "GET /ind"
    recv() → "ex.html HTTP/1.1\r\nHost: x\r\n\r\n"

socket.makefile("rb") gives a BufferedReader over the socket. Its
read1() hands back whatever has arrived, blocking only while nothing
has, and the request parser's LineReader (http/lines.py) puts lines
together from those pieces. That is exactly the "wait for the next
line" the parser wants, with no polling loop of our own.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Connection Responsibilities                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  1. STREAMS      reader = makefile("rb"), writer = makefile("wb")   │
    │  2. TIMEOUT      socket timeout so a silent client can't hang us    │
    │  3. STATE        NEW → ACTIVE → CLOSING → CLOSED (for logging)      │
    │  4. CLOSE        flush, shutdown(SHUT_WR), drain, close             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)


# Bounds on draining unread client data before close()
DRAIN_TIMEOUT = 0.5        # seconds, in total
DRAIN_LIMIT = 64 * 1024    # bytes


class ConnectionState(Enum):
    """Connection lifecycle states."""
    NEW = "new"            # Just accepted, streams not opened yet
    ACTIVE = "active"      # A worker is reading/writing
    CLOSING = "closing"    # Shutdown sequence in progress
    CLOSED = "closed"      # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Usage:
        with Connection(socket=client_socket, address=addr) as conn:
            WebWorker(conn.reader, conn.writer, config, conn.id).run()
        # flushed and closed here

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique id used as a log prefix.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        timeout: Socket timeout in seconds (None = block forever).
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    timeout: Optional[float] = 30.0

    _reader: Optional[BinaryIO] = field(default=None, repr=False)
    _writer: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    @property
    def reader(self) -> BinaryIO:
        """Buffered binary reader over the socket (created on first use)."""
        if self._reader is None:
            self._reader = self.socket.makefile("rb")
            self.state = ConnectionState.ACTIVE
        return self._reader

    @property
    def writer(self) -> BinaryIO:
        """Buffered binary writer over the socket (created on first use)."""
        if self._writer is None:
            self._writer = self.socket.makefile("wb")
            self.state = ConnectionState.ACTIVE
        return self._writer

    def close(self):
        """
        Close the connection gracefully.

        1. Flush and close the file objects (they hold socket references).
        2. shutdown(SHUT_WR): send FIN so the client sees end of body.
        3. Drain whatever the client still sends, for at most DRAIN_TIMEOUT
           seconds and DRAIN_LIMIT bytes.
        4. close(): release the file descriptor.

        Errors here are expected (client already gone) and only logged.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        for stream in (self._writer, self._reader):
            if stream is None:
                continue
            try:
                stream.close()
            except OSError as e:
                logger.debug(f"[{self.id}] Stream close failed: {e}")

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        self._drain()

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def _drain(self):
        """Discard unread input so close() doesn't answer it with a reset."""
        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0

        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                data = self.socket.recv(4096)
                if not data:
                    break
                drained += len(data)
        except OSError:
            pass  # Timeout or reset, closing anyway

        if drained:
            logger.debug(f"[{self.id}] Discarded {drained} unread bytes")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
