"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized, read-only configuration for the web worker and the server
that hosts it.

=============================================================================
WHY AN EXPLICIT CONFIG OBJECT?
=============================================================================

Every worker needs the same few facts: where the server root is, what
the server calls itself, and which content type to announce. Instead of
module-level globals, one ServerConfig is built at startup and handed to
each worker:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION FLOW                               │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   CLI args ──┐                                                       │
    │              ├──► ServerConfig ──► WebServer ──► WebWorker (each)   │
    │   env vars ──┘        (frozen)                                       │
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │   1. Command-line arguments   python -m webworker --port 3000       │
    │   2. Environment variables    WEBWORKER_PORT=3000                   │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The dataclass is frozen: workers running on different threads share it,
so nobody gets to change it after startup.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the web worker and server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    CONTENT SETTINGS
    - server_root, content_type

    SERVER IDENTITY
    - server_name, server_identity

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """The port number to listen on."""

    backlog: int = 128
    """Maximum number of queued connections before the OS refuses new ones."""

    timeout: Optional[float] = 30.0
    """
    Socket timeout in seconds for a client connection.
    None = block forever on a silent client.
    A timeout while reading the request ends parsing (404 path).
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    server_root: Path = Path(".")
    """
    Directory every requested path is resolved against.
    "/index.html" is looked up as <server_root>/index.html.
    """

    content_type: str = "text/html"
    """The one Content-Type every response announces."""

    # ─────────────────────────────────────────────────────────────────────
    # SERVER IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "WebWorker/1.0"
    """Value of the Server header."""

    server_identity: Optional[str] = None
    """
    Replacement text for the <cs371server> token in served documents.
    Falls back to server_name when unset.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    def __post_init__(self):
        # Accept plain strings for the root (CLI, env, tests)
        if not isinstance(self.server_root, Path):
            object.__setattr__(self, "server_root", Path(self.server_root))

    @property
    def identity(self) -> str:
        """Text substituted for <cs371server>."""
        return self.server_identity if self.server_identity is not None else self.server_name

    @property
    def level(self) -> int:
        """log_level as a logging module constant."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def with_overrides(self, **changes) -> "ServerConfig":
        """
        Return a copy with the given fields replaced.

        None values are ignored, so CLI arguments that were not given
        leave the existing value alone:

            config = ServerConfig.from_env().with_overrides(port=args.port)
        """
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBWORKER_HOST             Server host (default: 127.0.0.1)
        WEBWORKER_PORT             Server port (default: 8080)
        WEBWORKER_ROOT             Server root directory (default: .)
        WEBWORKER_TIMEOUT          Client socket timeout in seconds (default: 30)
        WEBWORKER_SERVER_NAME      Server header value (default: WebWorker/1.0)
        WEBWORKER_SERVER_IDENTITY  <cs371server> text (default: server name)
        WEBWORKER_LOG_LEVEL        Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("WEBWORKER_HOST", "127.0.0.1"),
            port=int(os.getenv("WEBWORKER_PORT", "8080")),
            server_root=Path(os.getenv("WEBWORKER_ROOT", ".")),
            timeout=float(os.getenv("WEBWORKER_TIMEOUT", "30")),
            server_name=os.getenv("WEBWORKER_SERVER_NAME", "WebWorker/1.0"),
            server_identity=os.getenv("WEBWORKER_SERVER_IDENTITY"),
            log_level=os.getenv("WEBWORKER_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad root or port fails immediately,
        not on the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not self.server_root.is_dir():
            raise ValueError(f"Server root is not a directory: {self.server_root}")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")
