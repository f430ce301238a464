"""
=============================================================================
WEB WORKER
=============================================================================

A WebWorker answers exactly one request on one connection, then returns.

=============================================================================
ONE CONNECTION, THREE STEPS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        WebWorker.run()                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. RequestParser.parse(reader)    → Found(path) | NOT_FOUND       │
    │   2. write_header(writer, ...)      → status line + headers + \n    │
    │   3. ContentWriter.write(writer)    → document or 404 page          │
    │   4. writer.flush()                                                  │
    │                                                                      │
    │   returns True  → response fully sent                               │
    │   returns False → connection failed part-way (already logged)       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The worker borrows the reader and writer. It never closes them: the
caller does that once run() returns, whatever the outcome.

=============================================================================
"""

import logging
from datetime import datetime, timezone
from typing import BinaryIO, Callable, Optional

from .config import ServerConfig
from .exceptions import ResourceReadError, ResponseWriteError, WorkerError
from .http.content import ContentWriter
from .http.request import RequestParser, ResolvedResource
from .http.response import status_for, write_header


logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WebWorker:
    """
    Handles a single HTTP request/response cycle.

    Usage:
        worker = WebWorker(conn.reader, conn.writer, config, connection_id=conn.id)
        if not worker.run():
            ...  # connection failed, close it anyway

    Args:
        reader: Binary reader over the client connection.
        writer: Binary writer over the client connection.
        config: Read-only server configuration.
        connection_id: Prefix for log lines.
        clock: Returns the timestamp used for Date and <cs371date>.
    """

    def __init__(
        self,
        reader: BinaryIO,
        writer: BinaryIO,
        config: ServerConfig,
        connection_id: str = "-",
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.reader = reader
        self.writer = writer
        self.config = config
        self.connection_id = connection_id
        self.clock = clock
        self.resolved: Optional[ResolvedResource] = None
        self.body_bytes = 0

    def run(self) -> bool:
        """
        Parse the request, write the header, write the body, flush.

        Returns:
            True once the whole response has been written, False if the
            connection failed part-way.
        """
        logger.debug(f"[{self.connection_id}] Handling connection...")
        try:
            self._respond()
        except ResourceReadError as e:
            logger.error(f"[{self.connection_id}] Resource read error: {e}")
            return False
        except ResponseWriteError as e:
            logger.error(f"[{self.connection_id}] Output error: {e}")
            return False
        except WorkerError as e:
            logger.error(f"[{self.connection_id}] Worker error: {e}")
            return False

        logger.debug(f"[{self.connection_id}] Done handling connection.")
        return True

    def _respond(self) -> None:
        parser = RequestParser(self.config.server_root, self.connection_id)
        self.resolved = parser.parse(self.reader)

        now = self.clock()
        write_header(
            self.writer,
            self.config.content_type,
            self.resolved,
            self.config.server_name,
            now,
        )

        content = ContentWriter(self.config.identity, self.connection_id)
        self.body_bytes = content.write(self.writer, self.resolved, now)

        try:
            self.writer.flush()
        except OSError as e:
            raise ResponseWriteError(f"Failed to flush response: {e}") from e

        logger.info(
            f"[{self.connection_id}] {int(status_for(self.resolved))} "
            f"({self.body_bytes} body bytes)"
        )


def handle_request(reader: BinaryIO, writer: BinaryIO, config: ServerConfig) -> bool:
    """
    Convenience function to answer one request.

    Shorthand for WebWorker(reader, writer, config).run().
    """
    return WebWorker(reader, writer, config).run()
