"""
=============================================================================
CORE MODULE
=============================================================================

Low-level building blocks:

    SocketServer   Listens and accepts TCP connections
    Connection     One client's input and output streams
    WebWorker      Runs the request/response pipeline on a Connection

=============================================================================
CONCURRENCY MODEL
=============================================================================

One thread per connection. Each thread reads one request, writes one
response and exits; threads are never reused. The only thing the threads
share is the logging stream.

    Main thread                 Worker threads
    ───────────                 ──────────────
    accept() ──► conn 1 ──────► handle(conn 1) → close
    accept() ──► conn 2 ──────► handle(conn 2) → close
    accept() ──► ...

The server caps how many of these threads exist at once
(ServerConfig.max_workers).

=============================================================================
"""

from .connection import Connection, ConnectionState
from .socket_server import SocketServer
from .worker import WebWorker

__all__ = [
    "SocketServer",     # TCP acceptor
    "Connection",       # Client streams, one request per connection
    "ConnectionState",  # Enum for connection lifecycle states
    "WebWorker",        # Per-connection pipeline
]
