"""
Exceptions raised while a worker answers a connection.

Resolution misses are NOT exceptions: a missing file, a directory, or a
malformed request line simply becomes a 404. What ends up here are the
failures that make the connection unusable:

    WorkerError
    ├── ResponseWriteError   the client stopped accepting bytes
    └── ResourceReadError    a resolved file vanished or became unreadable
"""

from pathlib import Path
from typing import Optional


class WorkerError(Exception):
    """Base class for fatal per-connection failures."""


class ResponseWriteError(WorkerError):
    """Writing the status line, headers, or body to the client failed."""


class ResourceReadError(WorkerError):
    """
    A resource that resolved as Found could not be opened or read.

    Whatever part of the body was already sent stays sent; the path is
    kept so the log line says which file went missing.
    """

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path
