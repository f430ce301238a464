"""
=============================================================================
WEB SERVER
=============================================================================

Ties the pieces together: the socket server accepts, each connection
gets its own thread, each thread runs one WebWorker and then closes the
connection.

=============================================================================
REQUEST FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   SocketServer.accept()                                              │
    │        │                                                             │
    │        ▼                                                             │
    │   WebServer._handle_connection(conn)                                 │
    │        │  threading.Thread(target=_process_connection)              │
    │        ▼                                                             │
    │   with conn:                                                         │
    │        WebWorker(conn.reader, conn.writer, config).run()            │
    │        │                                                             │
    │        ▼                                                             │
    │   conn.close()   ← always, success or failure                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Threads share nothing but the frozen ServerConfig, so there is no
locking anywhere on the request path.

=============================================================================
"""

import logging
import threading
from typing import Optional

from .config import ServerConfig
from .core import Connection, SocketServer
from .worker import WebWorker


logger = logging.getLogger(__name__)


class WebServer:
    """
    Serves files from a directory, one request per connection.

    Usage:
        server = WebServer(ServerConfig(port=8080, server_root="./www"))
        server.run()  # Blocks until Ctrl+C
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._active = set()
        self._active_lock = threading.Lock()

    @property
    def address(self):
        """The (host, port) the server is bound to."""
        return self._socket_server.address

    def run(self, setup_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            setup_logging: Configure the root logger from config.log_level.
        """
        if setup_logging:
            self._setup_logging()

        logger.info(
            f"Starting {self.config.server_name} on {self.config.host}:{self.config.port}, "
            f"serving {self.config.server_root.resolve()}"
        )

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is accepting connections."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Ask the accept loop to stop. run() returns shortly after."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        logging.basicConfig(
            level=self.config.level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("webworker").setLevel(self.config.level)

    def _shutdown(self, timeout: float = 5.0):
        logger.info("Shutting down server...")

        with self._active_lock:
            threads = list(self._active)
        for thread in threads:
            thread.join(timeout)

        logger.info("Server stopped")

    def _handle_connection(self, conn: Connection):
        """Start a worker thread for a freshly accepted connection."""
        thread = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"webworker-{conn.id}",
            daemon=True,
        )
        with self._active_lock:
            self._active.add(thread)
        thread.start()

    def _process_connection(self, conn: Connection):
        """Runs in the connection's own thread."""
        logger.debug(f"[{conn.id}] Connection from {conn.client_ip}")
        try:
            with conn:
                worker = WebWorker(conn.reader, conn.writer, self.config, connection_id=conn.id)
                if not worker.run():
                    logger.warning(f"[{conn.id}] Connection ended with an error")
        except Exception:
            logger.exception(f"[{conn.id}] Unhandled error while answering connection")
        finally:
            with self._active_lock:
                self._active.discard(threading.current_thread())
