"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web worker server.

=============================================================================
WHAT NEEDS CONFIGURING?
=============================================================================

The per-connection pipeline itself has almost no knobs. What it needs is a
description of the filesystem it serves from:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        BASE DIRECTORY LAYOUT                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   base_dir/                 ← request targets resolve from here     │
    │   ├── www/                                                          │
    │   │   ├── index.html        ← served for "/" and empty targets      │
    │   │   ├── 404.html          ← body of every 404 response            │
    │   │   └── 403.html          ← body for unsupported file types       │
    │   ├── photo.jpg             ← GET /photo.jpg                        │
    │   └── docs/page.html        ← GET /docs/page.html                   │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

Everything else (host, port, worker limit, log level) belongs to the
acceptor and process startup.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    Priority (highest to lowest):

    1. Command-line arguments
       └── python -m webworker --port 3000

    2. Environment variables
       └── WEBWORKER_PORT=3000 python -m webworker

    3. Defaults in this dataclass

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the web worker server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    CONCURRENCY
    - max_workers

    CONTENT
    - base_dir, index_page, not_found_page, forbidden_page

    IDENTITY AND LOGGING
    - server_name, log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """The IP address to bind to. Use "0.0.0.0" inside containers."""

    port: int = 8080
    """The port number to listen on. 0 lets the OS pick a free port."""

    backlog: int = 128
    """Maximum number of queued connections waiting for accept()."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block until the client sends its header block. A slow client
    only stalls its own worker thread.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    max_workers: int = 32
    """
    Maximum number of connections handled at the same time.
    Each connection gets its own thread; the acceptor waits for a free
    slot once this many are in flight.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    base_dir: str = "."
    """Directory that request targets are resolved against."""

    index_page: str = "www/index.html"
    """Page served for "/" and for requests with no usable target."""

    not_found_page: str = "www/404.html"
    """Page sent as the body of every 404 response."""

    forbidden_page: str = "www/403.html"
    """Page sent for files that exist but have an unsupported type."""

    # ─────────────────────────────────────────────────────────────────────
    # IDENTITY AND LOGGING
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "WebWorker/1.0"
    """Value of the Server header."""

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBWORKER_HOST         Server host (default: 127.0.0.1)
        WEBWORKER_PORT         Server port (default: 8080)
        WEBWORKER_WORKERS      Max concurrent connections (default: 32)
        WEBWORKER_BASE_DIR     Base directory (default: current directory)
        WEBWORKER_SERVER_NAME  Server header value (default: WebWorker/1.0)
        WEBWORKER_LOG_LEVEL    Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("WEBWORKER_HOST", "127.0.0.1"),
            port=int(os.getenv("WEBWORKER_PORT", "8080")),
            max_workers=int(os.getenv("WEBWORKER_WORKERS", "32")),
            base_dir=os.getenv("WEBWORKER_BASE_DIR", "."),
            server_name=os.getenv("WEBWORKER_SERVER_NAME", "WebWorker/1.0"),
            log_level=os.getenv("WEBWORKER_LOG_LEVEL", "INFO"),
        )

    @property
    def root(self) -> Path:
        """Absolute path of the base directory."""
        return Path(self.base_dir).resolve()

    @property
    def level(self) -> int:
        """Numeric logging level for log_level."""
        return getattr(logging, self.log_level.upper(), logging.INFO)

    def page_path(self, page: str) -> Path:
        """Resolve one of the page settings against the base directory."""
        return self.root / page

    def validate(self) -> None:
        """
        Validate configuration values.

        Called once at startup so a bad port or a missing base directory
        fails immediately instead of on the first request.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if not self.root.is_dir():
            raise ValueError(f"Base directory does not exist: {self.base_dir}")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. One dataclass holds every setting, with defaults matching the
#    classic www/ layout
# 2. Environment variables override defaults (from_env)
# 3. validate() fails fast at startup
#
# The three page settings are relative to base_dir so a whole site can be
# moved by changing one value.
# =============================================================================
