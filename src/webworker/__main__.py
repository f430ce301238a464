"""
=============================================================================
WEBWORKER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m webworker

    # Serve ./www on port 3000
    python -m webworker --root ./www --port 3000

    # Listen on all interfaces (for containers)
    python -m webworker --host 0.0.0.0

Configuration is read from the environment first (WEBWORKER_HOST,
WEBWORKER_PORT, WEBWORKER_ROOT, WEBWORKER_TIMEOUT, WEBWORKER_SERVER_NAME,
WEBWORKER_SERVER_IDENTITY, WEBWORKER_LOG_LEVEL), then any command-line
argument given overrides it.

=============================================================================
"""

import argparse
import sys

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .server import WebServer


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="webworker",
        description="Single-request HTTP file server with server-side substitution",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webworker                        # Serve . on 127.0.0.1:8080
  python -m webworker --root ./www           # Serve ./www
  python -m webworker --port 3000            # Custom port
  python -m webworker --host 0.0.0.0         # Listen on all interfaces
  python -m webworker --timeout 5            # Drop silent clients sooner
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Client socket timeout in seconds (default: 30)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Directory requested paths are resolved against (default: .)"
    )

    parser.add_argument(
        "--server-name",
        default=None,
        help="Value of the Server header (default: WebWorker/1.0)"
    )

    parser.add_argument(
        "--server-identity",
        default=None,
        help="Text substituted for <cs371server> (default: the server name)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webworker {__version__}"
    )

    return parser


def config_from_args(argv=None) -> ServerConfig:
    """Environment defaults, overridden by whatever was given on the command line."""
    args = build_parser().parse_args(argv)
    return ServerConfig.from_env().with_overrides(
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        server_root=args.root,
        server_name=args.server_name,
        server_identity=args.server_identity,
        log_level=args.log_level,
    )


def main(argv=None):
    """Main CLI entry point."""
    try:
        config = config_from_args(argv)
        server = WebServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
