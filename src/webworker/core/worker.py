"""
=============================================================================
WEB WORKER
=============================================================================

Handles exactly one connection: read the request, resolve it, write the
response, close.

=============================================================================
THE PIPELINE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      WebWorker.handle(conn)                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │   1. RequestParser.read_request(conn.rfile)                         │
    │         └── "GET /photo.jpg HTTP/1.1"  →  "/photo.jpg"             │
    │                                                                     │
    │   2. PathResolver.resolve("/photo.jpg")                             │
    │         └── ResolvedResource(IMAGE, base/photo.jpg)                 │
    │                                                                     │
    │   3. get_content_type(resource)                                     │
    │         └── "image/jpg"                                             │
    │                                                                     │
    │   4. ResponseWriter.write(conn.wfile, resource, "image/jpg")        │
    │         └── status line, headers, file bytes                        │
    │                                                                     │
    │   5. conn.close()        ← always, even after an error              │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ERROR ISOLATION
=============================================================================

Each connection runs in its own thread. An exception inside handle() is
logged and the connection is abandoned (closed without a complete
response). It never propagates to the acceptor, so one broken client or
missing error page cannot take down the server or other connections.

=============================================================================
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from ..config import ServerConfig
from ..http.mime_types import get_content_type
from ..http.request import RequestParser
from ..http.resolver import PathResolver
from ..http.response import ResponseHeader, ResponseWriter, utc_now
from .connection import Connection


logger = logging.getLogger(__name__)


class WebWorker:
    """
    Runs the request/response pipeline for one connection at a time.

    The worker holds only read-only collaborators (resolver and writer), so
    a single instance can serve many connections from many threads.

    Usage:
        worker = WebWorker.from_config(config)
        worker.handle(conn)   # closes conn when done
    """

    def __init__(self, resolver: PathResolver, writer: ResponseWriter):
        """
        Initialize the worker.

        Args:
            resolver: Maps request targets to resources.
            writer: Writes responses for resolved resources.
        """
        self.resolver = resolver
        self.writer = writer

    @classmethod
    def from_config(
        cls,
        config: ServerConfig,
        clock: Callable[[], datetime] = utc_now,
    ) -> "WebWorker":
        """Create a worker from server configuration."""
        return cls(
            resolver=PathResolver.from_config(config),
            writer=ResponseWriter.from_config(config, clock=clock),
        )

    def handle(self, conn: Connection) -> Optional[ResponseHeader]:
        """
        Handle one connection from request to close.

        Never raises.

        Args:
            conn: The client connection. Closed on return.

        Returns:
            The header that was sent, or None if the connection was
            abandoned.
        """
        logger.info(f"{conn.log_prefix}Handling connection from {conn.client_ip}")
        header = None

        with conn:  # Context manager ensures connection is closed
            try:
                header = self.process(conn)
            except Exception as e:
                logger.exception(f"{conn.log_prefix}Output error: {e}")

        logger.info(f"{conn.log_prefix}Done handling connection.")
        return header

    def process(self, conn: Connection) -> ResponseHeader:
        """
        Run the four pipeline stages on a connection.

        Unlike handle(), errors propagate and the connection is left open.
        """
        # ─────────────────────────────────────────────────────────────────
        # READ REQUEST
        # ─────────────────────────────────────────────────────────────────
        parser = RequestParser(log_prefix=conn.log_prefix)
        request = parser.read_request(conn.begin_read())
        target = parser.requested_target(request)

        # ─────────────────────────────────────────────────────────────────
        # RESOLVE TARGET AND CONTENT TYPE
        # ─────────────────────────────────────────────────────────────────
        resource = self.resolver.resolve(target)
        content_type = get_content_type(resource)

        logger.debug(
            f"{conn.log_prefix}Resolved {target} -> "
            f"{resource.category.value} {resource.path}"
        )

        # ─────────────────────────────────────────────────────────────────
        # WRITE RESPONSE
        # ─────────────────────────────────────────────────────────────────
        header = self.writer.write(
            conn.begin_write(), resource, content_type, log_prefix=conn.log_prefix
        )

        logger.info(f"{conn.log_prefix}{target} {header.status.value} {header.content_type}")
        return header
