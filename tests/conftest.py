"""
pytest configuration and fixtures.
"""

import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webworker import ServerConfig, WebServer


FIXED_NOW = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)
FIXED_NOW_TEXT = "Jan 15, 2026 12:30:45 PM"


INDEX_HTML = (
    b"<html>\n"
    b"<head><title>Index</title></head>\n"
    b"<body>Served by <cs371server> on <cs371date></body>\n"
    b"</html>\n"
    b"this line is never sent\n"
)

PLAIN_HTML = (
    b"<html>\r\n"
    b"<body><p>No tokens here.</p></body>\r\n"
    b"</html>\r\n"
    b"trailing junk\r\n"
)


@pytest.fixture
def server_root(tmp_path: Path) -> Path:
    """
    A server root with a few documents:

        www/index.html     tokens + content after </html>
        www/plain.html     CRLF lines, no tokens
        www/notes.txt      no </html> at all, last line unterminated
        www/docs/          a directory
        secret.txt         outside the root
    """
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(INDEX_HTML)
    (root / "plain.html").write_bytes(PLAIN_HTML)
    (root / "notes.txt").write_bytes(b"first\nsecond\nlast without newline")
    (root / "docs").mkdir()
    (root / "docs" / "page.html").write_bytes(b"<html>docs</html>\n")
    (tmp_path / "secret.txt").write_bytes(b"top secret\n")
    return root


@pytest.fixture
def config(server_root: Path) -> ServerConfig:
    """Test configuration rooted at server_root."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        server_root=server_root,
        server_name="TestServer/1.0",
        server_identity="Test Identity",
        timeout=5.0,
        log_level="WARNING",
    )


def make_request(path: str, headers: bool = True) -> bytes:
    """Build a GET request for path, optionally with a few header lines."""
    raw = f"GET {path} HTTP/1.1\r\n".encode()
    if headers:
        raw += b"Host: localhost:8080\r\nUser-Agent: pytest\r\nAccept: text/html\r\n"
    return raw + b"\r\n"


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def address(self):
        return self.server.address

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logging": False},
            daemon=True,
        )
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)


@pytest.fixture
def test_server(config: ServerConfig) -> Generator[TestServer, None, None]:
    """A running WebServer on an OS-assigned port."""
    test_srv = TestServer(WebServer(config))
    test_srv.start()

    yield test_srv

    test_srv.stop()
