"""
=============================================================================
WEBWORKER - One Connection, One Request, One Response
=============================================================================

A small HTTP/1.1 file server built on raw sockets. Every connection is
handed to its own WebWorker, which:

    1. reads the request line by line and resolves the path under a
       server root,
    2. writes "200 OK" or "404 NOT FOUND" with a fixed header set,
    3. streams the file (filling in <cs371date> and <cs371server>) or a
       404 page,

and then the connection is closed. No keep-alive, no chunking.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    webworker/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m webworker)
    ├── config.py            # ServerConfig dataclass
    ├── exceptions.py        # Fatal per-connection errors
    ├── worker.py            # WebWorker: parse → header → content
    ├── server.py            # WebServer: thread per connection
    ├── core/
    │   ├── socket_server.py # TCP accept loop
    │   └── connection.py    # Socket wrapper (reader/writer, close)
    └── http/
        ├── request.py       # RequestParser, Found / NOT_FOUND
        ├── response.py      # Header writer, date format
        ├── content.py       # Body streaming with substitution
        └── status_codes.py  # 200 / 404

=============================================================================
QUICK START
=============================================================================

    from webworker import WebServer, ServerConfig

    server = WebServer(ServerConfig(port=8080, server_root="./www"))
    server.run()

Or, without sockets, answer one request from any pair of byte streams:

    import io
    from webworker import WebWorker, ServerConfig

    out = io.BytesIO()
    WebWorker(io.BytesIO(b"GET /index.html HTTP/1.1\\r\\n\\r\\n"), out,
              ServerConfig(server_root="./www")).run()

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .server import WebServer
from .worker import WebWorker

__all__ = ["WebServer", "WebWorker", "ServerConfig", "__version__"]
