"""
=============================================================================
COMMAND-LINE INTERFACE
=============================================================================

Entry point for running the server from the shell:

    python -m webworker [options]
    webworker [options]                 (installed console script)

HOW IT WORKS:
─────────────
1. ServerConfig.from_env() supplies defaults (WEBWORKER_* variables)
2. argparse overrides them with command-line arguments
3. WebServer(config).run() blocks until Ctrl+C

=============================================================================
"""

import argparse
import sys
from typing import List, Optional

from . import __version__
from .config import LOG_LEVELS, ServerConfig
from .server import WebServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Create the argument parser, with defaults taken from `defaults`."""
    parser = argparse.ArgumentParser(
        prog="webworker",
        description="Minimal static web server: HTML pages and images, one request per connection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webworker                       # Serve ./www on 127.0.0.1:8080
  python -m webworker --port 3000           # Custom port
  python -m webworker --host 0.0.0.0        # Listen on all interfaces
  python -m webworker --root /srv/site      # Serve another directory
  python -m webworker -l DEBUG              # Log every request line
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=defaults.max_workers,
        help=f"Maximum concurrent connections (default: {defaults.max_workers})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.base_dir,
        help="Base directory request targets resolve against; must contain "
             "www/index.html, www/404.html and www/403.html (default: current directory)"
    )

    parser.add_argument(
        "--server-name",
        default=defaults.server_name,
        help=f"Value of the Server header (default: {defaults.server_name})"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        type=str.upper,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level.upper()})"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"webworker {__version__}"
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid environment setting: {e}", file=sys.stderr)
        return 1

    args = build_parser(defaults).parse_args(argv)

    config = ServerConfig(
        host=args.host,
        port=args.port,
        max_workers=args.workers,
        base_dir=args.root,
        server_name=args.server_name,
        log_level=args.log_level,
    )

    try:
        server = WebServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    sys.exit(main())
